"""
Tournament listings: the user's registrations, their individual entries, and
the public list of upcoming tournaments.
"""

import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlparse

import requests
from bs4 import BeautifulSoup

from fetch_page import fetch_page
from resolve_entry import STUDENT_INDEX_PATH, fetch_authenticated
from round_table import cell_texts, find_header_row
from tabroom_errors import ValidationError
from tabroom_records import TournamentRef, records_to_dicts

logger = logging.getLogger(__name__)

UPCOMING_PATH = "/index/index.mhtml"

DATE_RE = re.compile(
    r"\b(?:\d{1,2}/\d{1,2}(?:/\d{2,4})?"
    r"|(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?\s+\d{1,2})",
    re.IGNORECASE,
)


def _tournament_column_roles(soup) -> Dict[int, str]:
    header_row = find_header_row(soup)
    if header_row is None:
        return {}
    roles = {}
    cells = header_row.find_all(["th", "td"], recursive=False)
    for idx, cell in enumerate(cells):
        header = cell.get_text(" ", strip=True).lower()
        if "event" in header or "division" in header:
            roles[idx] = "event"
        elif "date" in header:
            roles[idx] = "dates"
    return roles


def parse_tournament_rows(page_html: str) -> List[TournamentRef]:
    """One TournamentRef per table row that links to a tournament."""
    soup = BeautifulSoup(page_html or "", "html.parser")
    roles = _tournament_column_roles(soup)
    tournaments = []
    for row in soup.find_all("tr"):
        link = None
        for a in row.find_all("a", href=True):
            if parse_qs(urlparse(a["href"]).query).get("tourn_id"):
                link = a
                break
        if link is None:
            continue
        tourn_id = parse_qs(urlparse(link["href"]).query)["tourn_id"][0]
        cells = cell_texts(row)
        name = link.get_text(" ", strip=True) or (cells[0] if cells else "")
        if not name:
            continue

        event: Optional[str] = None
        dates: Optional[str] = None
        for idx, role in roles.items():
            if idx < len(cells) and cells[idx]:
                if role == "event":
                    event = cells[idx]
                else:
                    dates = cells[idx]
        if dates is None:
            dates = next((c for c in cells if c != name and DATE_RE.search(c)), None)
        tournaments.append(TournamentRef(id=tourn_id, name=name, event=event, dates=dates))
    return tournaments


def _require_token(token: Optional[str]):
    if not token:
        raise ValidationError("Session token is required")


def get_entries(session: requests.Session, token: str) -> Dict[str, Any]:
    """Every entry on the user's registrations page, one per row."""
    _require_token(token)
    page = fetch_authenticated(session, token, STUDENT_INDEX_PATH)
    entries = parse_tournament_rows(page.text)
    return {"entries": records_to_dicts(entries), "total": len(entries)}


def get_my_tournaments(session: requests.Session, token: str) -> Dict[str, Any]:
    """The user's tournaments, one per tournament id."""
    _require_token(token)
    page = fetch_authenticated(session, token, STUDENT_INDEX_PATH)
    tournaments = []
    seen = set()
    for ref in parse_tournament_rows(page.text):
        if ref.id in seen:
            continue
        seen.add(ref.id)
        tournaments.append(ref)
    return {"tournaments": records_to_dicts(tournaments), "total": len(tournaments)}


def get_upcoming(session: requests.Session) -> Dict[str, Any]:
    """Public list of upcoming tournaments; no login needed."""
    page = fetch_page(session, UPCOMING_PATH)
    tournaments = parse_tournament_rows(page.text)
    logger.info("Found %d upcoming tournaments", len(tournaments))
    return {"tournaments": records_to_dicts(tournaments), "total": len(tournaments)}
