"""
Entry resolution.

Tabroom exposes a user's own entry id on different pages depending on how the
tournament is configured. The strategies below run cheapest first and the chain
stops at the first one that finds something:

1. the "my registrations" page links the tournament to an entry id
2. that page only gives a student id; the student's tournament page then has
   the entry id, or already lists the rounds (Embedded)
3. the tournament page without a student id has the entry id
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlparse

import requests
from bs4 import BeautifulSoup

from fetch_page import FetchedPage, fetch_page
from name_match import name_matches
from page_markers import is_login_page
from round_table import extract_round_records
from strategy_chain import first_success
from tabroom_errors import SessionInvalid
from tabroom_records import NOT_FOUND, ById, Embedded, EntryRef

logger = logging.getLogger(__name__)

STUDENT_INDEX_PATH = "/user/student/index.mhtml"
STUDENT_TOURN_PATH = "/user/student/tourn.mhtml"

ENTRY_ID_RE = re.compile(r"entry_id=(\d+)")


@dataclass
class ResolveContext:
    """Inputs of one resolution, plus the student id found along the way."""

    session: requests.Session
    token: str
    tournament_id: str
    display_name: Optional[str] = None
    student_id: Optional[str] = None


def fetch_authenticated(
    session: requests.Session, token: str, path: str, params: Optional[Dict[str, str]] = None
) -> FetchedPage:
    """fetch_page() that turns a login wall into SessionInvalid."""
    page = fetch_page(session, path, token, params=params)
    if is_login_page(page.text):
        raise SessionInvalid()
    return page


def _query(href: str) -> Dict[str, str]:
    return {k: v[0] for k, v in parse_qs(urlparse(href).query).items() if v}


def scan_tournament_links(
    page_html: str, tournament_id: str, key: str
) -> List[Tuple[str, str]]:
    """
    (id, row text) for every link tying `tournament_id` to a `key` id.

    Parameter order in the link does not matter.
    """
    found = []
    soup = BeautifulSoup(page_html, "html.parser")
    for link in soup.find_all("a", href=True):
        params = _query(link["href"])
        if params.get("tourn_id") == tournament_id and params.get(key, "").isdigit():
            row = link.find_parent("tr") or link
            found.append((params[key], row.get_text(" ", strip=True)))
    if found:
        return found

    # Ids sometimes only appear in onclick handlers or form actions
    tid = re.escape(tournament_id)
    for pattern in (
        rf"tourn_id={tid}\b[^\"'<>]*?{key}=(\d+)",
        rf"{key}=(\d+)[^\"'<>]*?tourn_id={tid}\b",
    ):
        match = re.search(pattern, page_html)
        if match:
            return [(match.group(1), "")]
    return []


def _pick(candidates: List[Tuple[str, str]], display_name: Optional[str]) -> str:
    """Prefer the row naming the user when several ids are linked."""
    if display_name and len({c[0] for c in candidates}) > 1:
        for value, row_text in candidates:
            if name_matches(row_text, display_name):
                return value
    return candidates[0][0]


def from_registrations(ctx: ResolveContext) -> Optional[EntryRef]:
    page = fetch_authenticated(ctx.session, ctx.token, STUDENT_INDEX_PATH)
    entries = scan_tournament_links(page.text, ctx.tournament_id, "entry_id")
    if entries:
        return ById(_pick(entries, ctx.display_name))
    students = scan_tournament_links(page.text, ctx.tournament_id, "student_id")
    if students:
        ctx.student_id = _pick(students, ctx.display_name)
        logger.info(
            "Registrations page gave student %s for tournament %s",
            ctx.student_id,
            ctx.tournament_id,
        )
    return None


def from_student_page(ctx: ResolveContext) -> Optional[EntryRef]:
    if not ctx.student_id:
        return None
    page = fetch_authenticated(
        ctx.session,
        ctx.token,
        STUDENT_TOURN_PATH,
        {"tourn_id": ctx.tournament_id, "student_id": ctx.student_id},
    )
    match = ENTRY_ID_RE.search(page.text)
    if match:
        return ById(match.group(1))
    if extract_round_records(page.text):
        return Embedded(ctx.tournament_id, ctx.student_id, page.text)
    return None


def from_tournament_page(ctx: ResolveContext) -> Optional[EntryRef]:
    page = fetch_authenticated(
        ctx.session, ctx.token, STUDENT_TOURN_PATH, {"tourn_id": ctx.tournament_id}
    )
    match = ENTRY_ID_RE.search(page.text)
    return ById(match.group(1)) if match else None


RESOLVE_STRATEGIES = (from_registrations, from_student_page, from_tournament_page)


def resolve_entry(
    session: requests.Session,
    token: str,
    tournament_id: str,
    display_name: Optional[str] = None,
) -> EntryRef:
    """
    Find how to reach the user's rounds for a tournament.

    Returns:
        ById, Embedded, or NOT_FOUND. NOT_FOUND is a normal outcome: callers
        fall back to name search or report no data.

    Raises:
        SessionInvalid: a page came back as the login wall.
        UpstreamUnavailable: Tabroom could not be reached.
    """
    ctx = ResolveContext(session, token, str(tournament_id), display_name)
    ref, _ = first_success(RESOLVE_STRATEGIES, ctx, label=f"entry for tourn {tournament_id}")
    return ref if ref is not None else NOT_FOUND
