"""Past tournament placements for a competitor."""

import logging
from typing import Any, Dict, List, Optional

import requests
from bs4 import BeautifulSoup

from fetch_page import fetch_page
from page_markers import is_login_page
from resolve_entry import fetch_authenticated
from round_table import cell_texts, find_header_row, is_header_row
from tabroom_errors import ValidationError
from tabroom_records import PlaceResult, records_to_dicts

logger = logging.getLogger(__name__)

HISTORY_PATH = "/user/student/history.mhtml"
PERSON_RESULTS_PATH = "/index/results/person_results.mhtml"


def result_role(header: str) -> Optional[str]:
    if "tourn" in header:
        return "tournament"
    if "event" in header or "division" in header:
        return "event"
    if "place" in header or "finish" in header:
        return "place"
    if "record" in header or "w-l" in header or "w/l" in header:
        return "record"
    if "date" in header:
        return "dates"
    if "location" in header or "city" in header or "site" in header:
        return "location"
    return None


def parse_place_results(page_html: str) -> List[PlaceResult]:
    """One PlaceResult per row of the results table. Needs a header row."""
    soup = BeautifulSoup(page_html or "", "html.parser")
    header_row = find_header_row(soup)
    if header_row is None:
        return []
    roles = {}
    for idx, cell in enumerate(header_row.find_all(["th", "td"], recursive=False)):
        role = result_role(cell.get_text(" ", strip=True).lower())
        if role and role not in roles.values():
            roles[idx] = role
    if "tournament" not in roles.values():
        return []

    results = []
    for row in soup.find_all("tr"):
        if row is header_row or is_header_row(row):
            continue
        cells = cell_texts(row)
        values = {role: cells[idx] for idx, role in roles.items() if idx < len(cells)}
        if not values.get("tournament"):
            continue
        results.append(
            PlaceResult(
                tournament=values["tournament"],
                event=values.get("event", ""),
                place=values.get("place", ""),
                record=values.get("record", ""),
                dates=values.get("dates") or None,
                location=values.get("location") or None,
            )
        )
    return results


def get_past_results(
    session: requests.Session,
    person_id: Optional[str] = None,
    token: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Placements from the user's history page (with a token) or the public
    per-person results page (with a person id).
    """
    if not person_id and not token:
        raise ValidationError("personId or token is required")

    if token:
        page = fetch_authenticated(session, token, HISTORY_PATH)
    else:
        page = fetch_page(session, PERSON_RESULTS_PATH, params={"person_id": person_id})
        if is_login_page(page.text):
            logger.info("Results for person %s are not public", person_id)
            return {"results": [], "total": 0}

    results = parse_place_results(page.text)
    return {"results": records_to_dicts(results), "total": len(results)}
