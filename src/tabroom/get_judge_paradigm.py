#!/usr/bin/env python3
"""
Judge paradigm lookup.

By id: fetch the paradigm page and pull out the judge's name and paradigm text.
By name: ask the external judge catalog first; if it has nothing (or is slow),
search Tabroom's paradigm search and either follow the single match, salvage an
inline paradigm, or hand back the candidate list for the user to pick from.
"""

import argparse
import json
import logging
import re
from typing import Any, Dict, List, Optional, Union

import requests
from bs4 import BeautifulSoup

from fetch_page import BROWSER_HEADERS, fetch_page, strip_tags
from page_markers import is_login_page, is_no_results_page
from strategy_chain import first_success
from tabroom_errors import AmbiguousMatch, ValidationError
from tabroom_records import JudgeRecord

logger = logging.getLogger(__name__)

PARADIGM_PATH = "/index/paradigm.mhtml"
JUDGE_CATALOG_URL = "https://tournaments.tech/query"

# Catalog is best-effort; give up quickly and fall through to Tabroom
CATALOG_TIMEOUT = 4

# Shorter paradigm candidates are navigation crumbs, not paradigms
MIN_PARADIGM_CHARS = 20

GENERIC_HEADINGS = (
    "paradigm",
    "tabroom",
    "judge record",
    "judging",
    "search",
    "log in",
    "login",
    "results",
    "menu",
    "account",
    "tournaments",
    "speech and debate",
)

# Matched against the whole link text
BOILERPLATE_LINK_RE = re.compile(
    r"^\s*(?:view past\b.*|ratings?|(?:paradigm )?search|log ?in|sign in|(?:judge )?record|paradigm)\s*$",
    re.IGNORECASE,
)

# Containers tried in order for the paradigm body
PARADIGM_CONTAINERS = (
    {"class_": re.compile(r"paradigm", re.IGNORECASE)},
    {"id": re.compile(r"paradigm", re.IGNORECASE)},
    {"class_": re.compile(r"philosophy", re.IGNORECASE)},
)

END_OF_CONTENT_MARKERS = (
    "<table",
    '<div class="menu',
    'class="sidenote',
    "<footer",
    'id="footer"',
    'class="footer',
)

JUDGE_ID_RE = re.compile(r"judge_person_id=(\d+)")
SUBHEADING_RE = re.compile(r"<h[5-6][^>]*>.*?</h[5-6]>", re.IGNORECASE | re.DOTALL)
NO_PARADIGM_RE = re.compile(
    r"\bno paradigm\b|\bnot (?:yet )?(?:posted|entered|written) a paradigm\b", re.IGNORECASE
)


def _is_generic_heading(text: str) -> bool:
    lowered = text.lower()
    return not lowered or any(term in lowered for term in GENERIC_HEADINGS)


def extract_judge_name(page_html: str) -> Optional[str]:
    """First non-boilerplate <h4>, else the first non-boilerplate <h2>/<h3>."""
    soup = BeautifulSoup(page_html, "html.parser")
    for tags in (["h4"], ["h2", "h3"]):
        for heading in soup.find_all(tags):
            text = heading.get_text(" ", strip=True)
            if not _is_generic_heading(text):
                return text
    return None


def _text_after_heading(page_html: str, name: str) -> Optional[str]:
    """Everything between the name heading and the next menu/footer marker."""
    match = re.search(
        rf"<h[2-4][^>]*>\s*{re.escape(name)}\s*</h[2-4]>", page_html, re.IGNORECASE
    )
    if not match:
        return None
    rest = page_html[match.end():]
    lowered = rest.lower()
    ends = [lowered.find(marker) for marker in END_OF_CONTENT_MARKERS]
    ends = [i for i in ends if i >= 0]
    return strip_tags(SUBHEADING_RE.sub(" ", rest[: min(ends)] if ends else rest))


def _usable_paradigm(text: Optional[str]) -> bool:
    return bool(text) and len(text) > MIN_PARADIGM_CHARS and not NO_PARADIGM_RE.search(text)


def extract_paradigm_text(page_html: str, judge_name: Optional[str] = None) -> Optional[str]:
    """Paradigm body from a known container, else the text under the name heading."""
    soup = BeautifulSoup(page_html, "html.parser")
    for attrs in PARADIGM_CONTAINERS:
        for container in soup.find_all(**attrs):
            text = " ".join(container.get_text(" ", strip=True).split())
            if _usable_paradigm(text):
                return text
    if judge_name:
        text = _text_after_heading(page_html, judge_name)
        if _usable_paradigm(text):
            return text
    return None


def get_judge_by_id(
    session: requests.Session,
    judge_id: str,
    token: Optional[str] = None,
    known_name: Optional[str] = None,
) -> JudgeRecord:
    """Paradigm page for one judge. A login wall keeps the name and warns."""
    page = fetch_page(session, PARADIGM_PATH, token, params={"judge_person_id": judge_id})
    if is_login_page(page.text):
        return JudgeRecord(
            name=known_name or "Unknown",
            source="tabroom",
            judge_id=str(judge_id),
            warning="Log in to Tabroom to view this paradigm.",
        )
    name = extract_judge_name(page.text) or known_name or "Unknown"
    paradigm = extract_paradigm_text(page.text, name)
    if paradigm:
        return JudgeRecord(name=name, source="tabroom", judge_id=str(judge_id), paradigm=paradigm)
    return JudgeRecord(
        name=name,
        source="tabroom",
        judge_id=str(judge_id),
        warning="This judge has not posted a paradigm.",
    )


def judge_candidates(page_html: str) -> List[Dict[str, str]]:
    """Distinct judge links on a search page, boilerplate links excluded."""
    candidates = []
    seen = set()
    soup = BeautifulSoup(page_html, "html.parser")
    for link in soup.find_all("a", href=True):
        match = JUDGE_ID_RE.search(link["href"])
        if not match or match.group(1) in seen:
            continue
        text = link.get_text(" ", strip=True)
        if not text or BOILERPLATE_LINK_RE.search(text):
            continue
        seen.add(match.group(1))
        candidates.append({"judgeId": match.group(1), "name": text})
    return candidates


def single_candidate(candidates: List[Dict[str, str]]) -> Optional[Dict[str, str]]:
    """
    The only candidate, None for no candidates.

    Raises:
        AmbiguousMatch: more than one judge matched.
    """
    if len(candidates) > 1:
        raise AmbiguousMatch(candidates)
    return candidates[0] if candidates else None


def split_name(name: str) -> Dict[str, str]:
    parts = name.split()
    if len(parts) == 1:
        return {"search_first": "", "search_last": parts[0]}
    return {"search_first": parts[0], "search_last": parts[-1]}


def lookup_catalog(
    session: requests.Session, judge_name: str, token: Optional[str] = None
) -> Optional[Any]:
    try:
        response = session.get(
            JUDGE_CATALOG_URL,
            params={"format": "LD", "term": judge_name},
            headers=BROWSER_HEADERS,
            timeout=CATALOG_TIMEOUT,
        )
        if response.status_code != 200:
            logger.info("Judge catalog answered HTTP %s", response.status_code)
            return None
        payload = response.json()
    except requests.exceptions.RequestException as e:
        logger.info("Judge catalog unavailable: %s", e)
        return None
    except ValueError:
        logger.info("Judge catalog returned non-JSON")
        return None
    return payload or None


def search_tabroom(
    session: requests.Session, judge_name: str, token: Optional[str] = None
) -> JudgeRecord:
    page = fetch_page(session, PARADIGM_PATH, token, params=split_name(judge_name))
    if is_login_page(page.text):
        return JudgeRecord(
            name=judge_name,
            source="tabroom",
            warning="Log in to Tabroom to search paradigms.",
        )
    if is_no_results_page(page.text):
        return JudgeRecord(
            name=judge_name,
            source="no_results",
            warning="No judges found with that name.",
        )

    candidates = judge_candidates(page.text)
    try:
        candidate = single_candidate(candidates)
    except AmbiguousMatch as e:
        logger.info("Judge search for %r: %s", judge_name, e.message)
        return JudgeRecord(name=judge_name, source="tabroom", candidates=tuple(e.candidates))
    if candidate:
        return get_judge_by_id(session, candidate["judgeId"], token, candidate["name"])

    # Single-result pages sometimes render the paradigm inline
    name = extract_judge_name(page.text) or judge_name
    paradigm = extract_paradigm_text(page.text, name)
    if paradigm:
        return JudgeRecord(name=name, source="tabroom", paradigm=paradigm)
    return JudgeRecord(
        name=judge_name,
        source="tabroom",
        warning="No paradigm found for this judge.",
    )


JUDGE_NAME_STRATEGIES = (lookup_catalog, search_tabroom)


def get_judge(
    session: requests.Session,
    judge_id: Optional[str] = None,
    judge_name: Optional[str] = None,
    token: Optional[str] = None,
) -> Union[Dict[str, Any], List[Any]]:
    """
    Judge paradigm by id or by name.

    Returns:
        A JudgeRecord as a dict (with `results` instead of `paradigm` when the
        name is ambiguous), or the catalog payload verbatim.
    """
    if not judge_id and not (judge_name and judge_name.strip()):
        raise ValidationError("judgeId or judgeName is required")
    if judge_id:
        return get_judge_by_id(session, str(judge_id), token, judge_name).to_dict()

    judge_name = " ".join(judge_name.split())
    found, _ = first_success(
        JUDGE_NAME_STRATEGIES, session, judge_name, token, label=f"judge {judge_name!r}"
    )
    if isinstance(found, JudgeRecord):
        return found.to_dict()
    return found


def main():
    parser = argparse.ArgumentParser(description="Look up a judge paradigm on Tabroom")
    parser.add_argument("--judge-id", "-i", type=str, help="Tabroom judge person id")
    parser.add_argument("--judge-name", "-n", type=str, help="Judge name to search for")
    parser.add_argument("--token", "-t", type=str, help="Tabroom session token")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if not args.judge_id and not args.judge_name:
        parser.error("one of --judge-id or --judge-name is required")

    with requests.Session() as session:
        result = get_judge(session, args.judge_id, args.judge_name, args.token)
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    exit(main())
