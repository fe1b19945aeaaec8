"""
My rounds and ballots for one tournament.

Both walk an ordered list of page-discovery strategies and keep the rounds of
the first page that yields any. When no identifier leads to the user's entry,
the public results pages are searched by name (at most MAX_RESULT_LINKS of
them) for a row naming the user.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlparse

import requests
from bs4 import BeautifulSoup

from fetch_page import fetch_page
from name_match import name_matches, normalize_name
from page_markers import is_login_page
from resolve_entry import STUDENT_TOURN_PATH, fetch_authenticated, resolve_entry
from round_table import cell_texts, extract_round_records, find_placement, records_score, win_loss
from strategy_chain import first_success
from tabroom_errors import ExtractionEmpty, SessionInvalid, ValidationError
from tabroom_records import ById, Embedded, RoundRecord, records_to_dicts

logger = logging.getLogger(__name__)

RESULTS_INDEX_PATH = "/index/tourn/results/index.mhtml"
ENTRY_RECORD_PATH = "/index/tourn/postings/entry_record.mhtml"

# Results-index links probed by name search
MAX_RESULT_LINKS = 4
HTML_PREVIEW_CHARS = 2000


@dataclass
class RoundsLookup:
    session: requests.Session
    token: str
    tournament_id: str
    person_name: Optional[str] = None
    entry_name: Optional[str] = None
    entry_id: Optional[str] = None
    last_html: str = ""

    def seen(self, page_html: str) -> str:
        self.last_html = page_html
        return page_html


@dataclass(frozen=True)
class RoundsPage:
    records: List[RoundRecord]
    page_html: str


def _rounds_or_empty(page_html: str, where: str) -> RoundsPage:
    records = extract_round_records(page_html)
    if not records:
        raise ExtractionEmpty(f"no round rows on {where}")
    return RoundsPage(records, page_html)


def entry_record_rounds(lookup: RoundsLookup, entry_id: str) -> RoundsPage:
    page = fetch_authenticated(
        lookup.session,
        lookup.token,
        ENTRY_RECORD_PATH,
        {"tourn_id": lookup.tournament_id, "entry_id": entry_id},
    )
    return _rounds_or_empty(lookup.seen(page.text), f"entry record {entry_id}")


def result_links(index_html: str, limit: int = MAX_RESULT_LINKS) -> List[str]:
    """First `limit` distinct result-page links on a results index."""
    links = []
    soup = BeautifulSoup(index_html, "html.parser")
    for link in soup.find_all("a", href=True):
        href = link["href"]
        if "/results/" not in href and "result_id=" not in href:
            continue
        if "results/index.mhtml" in href or href in links:
            continue
        links.append(href)
        if len(links) >= limit:
            break
    return links


def matching_entry_ids(page_html: str, names: List[str]) -> List[str]:
    """Entry ids linked from rows that name the user."""
    found = []
    soup = BeautifulSoup(page_html, "html.parser")
    for row in soup.find_all("tr"):
        cells = [c for c in cell_texts(row) if len(normalize_name(c)) >= 3]
        if not any(name_matches(cell, name) for cell in cells for name in names):
            continue
        for link in row.find_all("a", href=True):
            entry_id = parse_qs(urlparse(link["href"]).query).get("entry_id", [""])[0]
            if entry_id.isdigit() and entry_id not in found:
                found.append(entry_id)
    return found


def search_results_by_name(lookup: RoundsLookup) -> Optional[RoundsPage]:
    names = [n for n in (lookup.entry_name, lookup.person_name) if n]
    if not names:
        return None
    index = fetch_page(
        lookup.session,
        RESULTS_INDEX_PATH,
        lookup.token,
        params={"tourn_id": lookup.tournament_id},
    )
    if is_login_page(index.text):
        raise SessionInvalid()

    entry_ids: List[str] = []
    for href in result_links(lookup.seen(index.text)):
        page = fetch_page(lookup.session, href, lookup.token)
        if is_login_page(page.text):
            logger.info("Result page %s needs login, skipping", href)
            continue
        entry_ids = matching_entry_ids(lookup.seen(page.text), names)
        if entry_ids:
            break
    if not entry_ids:
        return None

    # Most complete entry page wins; pages are never merged
    best: Optional[RoundsPage] = None
    for entry_id in entry_ids[:MAX_RESULT_LINKS]:
        try:
            found = entry_record_rounds(lookup, entry_id)
        except ExtractionEmpty:
            logger.info("Entry %s matched by name has no rounds", entry_id)
            continue
        if best is None or records_score(found.records) > records_score(best.records):
            best = found
    if best is not None:
        lookup.seen(best.page_html)
    return best


def from_given_entry(lookup: RoundsLookup) -> Optional[RoundsPage]:
    if not lookup.entry_id:
        return None
    return entry_record_rounds(lookup, lookup.entry_id)


def from_resolved_entry(lookup: RoundsLookup) -> Optional[RoundsPage]:
    ref = resolve_entry(lookup.session, lookup.token, lookup.tournament_id, lookup.person_name)
    if isinstance(ref, Embedded):
        # Rounds are on the page the resolver already fetched
        return _rounds_or_empty(lookup.seen(ref.page_html), "student page")
    if isinstance(ref, ById):
        return entry_record_rounds(lookup, ref.entry_id)
    return None


def from_student_tournament_page(lookup: RoundsLookup) -> Optional[RoundsPage]:
    page = fetch_authenticated(
        lookup.session, lookup.token, STUDENT_TOURN_PATH, {"tourn_id": lookup.tournament_id}
    )
    return _rounds_or_empty(lookup.seen(page.text), "student tournament page")


MY_ROUNDS_STRATEGIES = (from_resolved_entry, search_results_by_name)
BALLOTS_STRATEGIES = (from_given_entry, search_results_by_name, from_student_tournament_page)


def _require(token: Optional[str], tournament_id: Optional[str]):
    if not token or not tournament_id:
        raise ValidationError("Session token and tournament id are required")


def _with_preview(body: Dict[str, Any], lookup: RoundsLookup, debug: bool) -> Dict[str, Any]:
    if debug and lookup.last_html:
        body["htmlPreview"] = lookup.last_html[:HTML_PREVIEW_CHARS]
    return body


def get_my_rounds(
    session: requests.Session,
    token: str,
    tournament_id: str,
    person_name: Optional[str] = None,
    debug: bool = False,
) -> Dict[str, Any]:
    """
    The user's rounds at one tournament with their win/loss record.

    An empty result means nothing was found (maybe not posted yet).
    """
    _require(token, tournament_id)
    lookup = RoundsLookup(session, token, str(tournament_id), person_name=person_name)
    found, _ = first_success(MY_ROUNDS_STRATEGIES, lookup, label=f"my rounds {tournament_id}")
    records = found.records if found else []
    body = {
        "rounds": records_to_dicts(records),
        "record": win_loss(records),
        "total": len(records),
    }
    return _with_preview(body, lookup, debug)


def get_ballots(
    session: requests.Session,
    token: str,
    tournament_id: str,
    entry_id: Optional[str] = None,
    entry_name: Optional[str] = None,
    person_name: Optional[str] = None,
    debug: bool = False,
) -> Dict[str, Any]:
    """Ballot decisions for the user's (or a given) entry at one tournament."""
    _require(token, tournament_id)
    lookup = RoundsLookup(
        session,
        token,
        str(tournament_id),
        person_name=person_name,
        entry_name=entry_name,
        entry_id=str(entry_id) if entry_id else None,
    )
    found, _ = first_success(BALLOTS_STRATEGIES, lookup, label=f"ballots {tournament_id}")
    if not found:
        return _with_preview({"rounds": [], "total": 0}, lookup, debug)

    body = {"rounds": records_to_dicts(found.records), "total": len(found.records)}
    placement = find_placement(found.page_html)
    if placement:
        body["placement"] = placement
    return _with_preview(body, lookup, debug)
