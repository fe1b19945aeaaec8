"""
Generic round-table extractor.

Turns whatever tables a Tabroom page renders (entry records, student pages,
ballot listings) into RoundRecords. Works with a header row when one exists,
otherwise falls back to positional columns and only keeps rows whose first
cell looks like a round label.
"""

import re
from typing import Dict, List, Optional, Sequence

from bs4 import BeautifulSoup

from fetch_page import strip_tags
from tabroom_records import ROUND_FIELDS, RoundRecord

# Rows shorter than this are layout tables, not rounds
MIN_ROW_CELLS = 3

ROUND_LABEL_RE = re.compile(
    r"^(?:r\s*\d+\b|rd\.?\s*\d+|round\b|"
    r"(?:double|triple|quad|partial|octa|octo|quarter|semi|final|elim|prelim|runoff)\w*"
    r"|(?:dbl|trp|oct|qtr|sem|fin)s?\b)",
    re.IGNORECASE,
)


def header_role(header: str) -> Optional[str]:
    """Map a lower-cased, trimmed header cell to a round-record field."""
    if not header:
        return None
    if "judge" in header or "panel" in header:
        return "judge"
    if "opp" in header:
        return "opponent"
    if any(k in header for k in ("decision", "result", "ballot", "w/l")):
        return "decision"
    if any(k in header for k in ("point", "speak", "pts")):
        return "points"
    if "round" in header or "rd" in header or header == "r":
        return "round"
    if "room" in header:
        return "room"
    if "side" in header:
        return "side"
    return None


def looks_like_round_label(text: str) -> bool:
    return bool(text) and bool(ROUND_LABEL_RE.match(text.strip()))


def cell_texts(row) -> List[str]:
    return [strip_tags(str(td)) for td in row.find_all("td", recursive=False)]


def _header_cells(row) -> List[str]:
    cells = row.find_all("th", recursive=False) or row.find_all("td", recursive=False)
    return [strip_tags(str(c)).lower().strip() for c in cells]


def find_header_row(soup):
    """The <thead> row or the first <tr> made of <th> cells, if any."""
    thead = soup.find("thead")
    if thead is not None:
        row = thead.find("tr")
        if row is not None:
            return row
    for row in soup.find_all("tr"):
        if row.find("th", recursive=False) is not None:
            return row
    return None


def is_header_row(row) -> bool:
    return row.find("th", recursive=False) is not None or row.find_parent("thead") is not None


def build_column_map(headers: Sequence[str]) -> Dict[int, str]:
    """Column index -> field; the first column claiming a role wins."""
    column_map: Dict[int, str] = {}
    taken = set()
    for idx, header in enumerate(headers):
        role = header_role(header)
        if role and role not in taken:
            column_map[idx] = role
            taken.add(role)
    return column_map


def _rows_after(soup, header_row) -> list:
    rows = soup.find_all("tr")
    if header_row is None:
        return rows
    seen_header = False
    following = []
    for row in rows:
        if row is header_row:
            seen_header = True
            continue
        if seen_header:
            following.append(row)
    return following


def extract_round_records(page_html: str) -> List[RoundRecord]:
    """
    Parse every round row on a page, in document order.

    Returns:
        RoundRecords; never one without a round label. Not deduplicated.
    """
    if not page_html:
        return []
    soup = BeautifulSoup(page_html, "html.parser")
    header_row = find_header_row(soup)
    column_map = build_column_map(_header_cells(header_row)) if header_row else {}
    if "round" not in column_map.values():
        # A header that names no round column is as good as no header
        column_map = {}

    records = []
    for row in _rows_after(soup, header_row):
        if is_header_row(row):
            continue
        cells = cell_texts(row)
        if len(cells) < MIN_ROW_CELLS:
            continue

        if column_map:
            values = {
                role: cells[idx]
                for idx, role in column_map.items()
                if idx < len(cells) and cells[idx]
            }
        else:
            if not looks_like_round_label(cells[0]):
                continue
            values = {
                role: cells[idx]
                for idx, role in enumerate(ROUND_FIELDS)
                if idx < len(cells) and cells[idx]
            }

        if values.get("round"):
            records.append(RoundRecord(**values))
    return records


def records_score(records: Sequence[RoundRecord]) -> tuple:
    """Ranking key for a candidate page: populated fields, then row count."""
    return (sum(r.completeness() for r in records), len(records))


_WIN_RE = re.compile(r"\b(?:w|win|won)\b", re.IGNORECASE)
_LOSS_RE = re.compile(r"\b(?:l|loss|lost)\b", re.IGNORECASE)


def win_loss(records: Sequence[RoundRecord]) -> Dict[str, int]:
    """Count wins and losses from the decision column."""
    wins = losses = 0
    for record in records:
        decision = record.decision or ""
        if _WIN_RE.search(decision):
            wins += 1
        elif _LOSS_RE.search(decision):
            losses += 1
    return {"wins": wins, "losses": losses}


_PLACEMENT_RE = re.compile(
    r"\b(?:final\s+)?(?:place(?:ment)?|finish(?:ed)?)\s*[:\-]?\s*(\d+(?:st|nd|rd|th)?)\b",
    re.IGNORECASE,
)


def find_placement(page_html: str) -> Optional[str]:
    """Placement stated anywhere on the page ("Place: 3rd"), if any."""
    match = _PLACEMENT_RE.search(strip_tags(page_html))
    return match.group(1) if match else None


PAIRING_ROLES = ("room", "aff", "neg", "judge")


def pairing_role(header: str) -> Optional[str]:
    if "room" in header:
        return "room"
    if header.startswith("aff") or header in ("pro", "gov", "government"):
        return "aff"
    if header.startswith("neg") or header in ("con", "opp", "opposition"):
        return "neg"
    if "judge" in header or "panel" in header:
        return "judge"
    return None


def extract_pairings(page_html: str) -> List[Dict[str, str]]:
    """
    Rows of a pairings table keyed by role where the header says so,
    otherwise by the header text itself.
    """
    if not page_html:
        return []
    soup = BeautifulSoup(page_html, "html.parser")
    header_row = find_header_row(soup)
    if header_row is None:
        return []
    keys = []
    for header in _header_cells(header_row):
        keys.append(pairing_role(header) or header)

    pairings = []
    for row in _rows_after(soup, header_row):
        if is_header_row(row):
            continue
        cells = cell_texts(row)
        if len(cells) < 2:
            continue
        pairing = {
            key: cells[idx]
            for idx, key in enumerate(keys)
            if key and idx < len(cells) and cells[idx]
        }
        if pairing:
            pairings.append(pairing)
    return pairings
