"""Pairings (and coin-flip state) for a tournament round."""

import logging
import re
from typing import Any, Dict, Optional

import requests

from coin_flip import detect_coin_flip
from resolve_entry import fetch_authenticated
from round_table import extract_pairings
from tabroom_errors import ValidationError

logger = logging.getLogger(__name__)

POSTINGS_INDEX_PATH = "/index/tourn/postings/index.mhtml"
ROUND_POSTING_PATH = "/index/tourn/postings/round.mhtml"

ROUND_LINK_RE = re.compile(r"round_id=(\d+)")


def latest_round_id(index_html: str) -> Optional[str]:
    """Postings list the newest round first."""
    match = ROUND_LINK_RE.search(index_html)
    return match.group(1) if match else None


def get_pairings(
    session: requests.Session,
    token: str,
    tournament_id: str,
    event_id: Optional[str] = None,
    round_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Pairings for a round; the latest posted round when round_id is not given.

    Raises:
        ValidationError: token or tournament id missing.
        SessionInvalid: Tabroom sent the login wall.
    """
    if not token or not tournament_id:
        raise ValidationError("Session token and tournament id are required")

    if not round_id:
        index = fetch_authenticated(
            session,
            token,
            POSTINGS_INDEX_PATH,
            {"tourn_id": tournament_id, "event_id": event_id},
        )
        round_id = latest_round_id(index.text)
        if not round_id:
            logger.info("No posted rounds for tournament %s", tournament_id)
            page_html = index.text
        else:
            logger.info("Using latest posted round %s", round_id)
    if round_id:
        page = fetch_authenticated(
            session,
            token,
            ROUND_POSTING_PATH,
            {"tourn_id": tournament_id, "round_id": round_id},
        )
        page_html = page.text

    pairings = extract_pairings(page_html)
    body: Dict[str, Any] = {"pairings": pairings, "total": len(pairings)}
    coin_flip = detect_coin_flip(page_html)
    if coin_flip.available:
        body["coinFlip"] = coin_flip.to_dict()
    return body
