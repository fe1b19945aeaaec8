"""
Coin flip (side assignment) state on a pairings page.

Tabroom renders the flip as ordinary page content, so everything here is
keyword matching over the page text.
"""

import re
from typing import Optional

from fetch_page import page_lines
from tabroom_records import EventState

FLIP_MARKERS = (
    "coin flip",
    "coinflip",
    "coin_flip",
    "flip for sides",
    "side flip",
    "flip sides",
    "sides locked",
    "flip_",
)

COMPLETED_MARKERS = (
    "flip complete",
    "flip is complete",
    "flip has been completed",
    "sides locked",
    "sides are locked",
)

ACTIVE_MARKERS = (
    "flip in progress",
    "flip is open",
    "flip now",
    "call the flip",
    "flip open",
)

DEADLINE_RE = re.compile(
    r"(?:flip\s+deadline|deadline|flip\s+by|flip\s+closes?)\s*:?\s*([^\n]{3,40})",
    re.IGNORECASE,
)
COUNTDOWN_RE = re.compile(
    r"(?:countdown|timer|seconds[_ -]?remaining|time[_ -]?remaining)"
    r"[\"']?\s*[:=]?\s*[\"']?\s*(\d+)",
    re.IGNORECASE,
)
ASSIGNED_SIDE_RE = re.compile(
    r"(?:assigned(?:\s+side)?|your\s+side)\W{0,10}?(?:is\s+)?(aff|neg)",
    re.IGNORECASE,
)


def _first_group(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    return match.group(1).strip() if match else None


def detect_coin_flip(page_html: str) -> EventState:
    """
    Read the coin-flip state from a pairings page.

    Returns:
        EventState(available=False) unless the page mentions a flip.
    """
    lowered = (page_html or "").lower()
    if not any(marker in lowered for marker in FLIP_MARKERS):
        return EventState(available=False)

    text = page_lines(page_html)
    countdown = _first_group(COUNTDOWN_RE, page_html) or _first_group(COUNTDOWN_RE, text)
    countdown_seconds = int(countdown) if countdown else None

    if any(marker in lowered for marker in COMPLETED_MARKERS):
        status = "completed"
    elif countdown_seconds is not None or any(m in lowered for m in ACTIVE_MARKERS):
        status = "active"
    else:
        status = "pending"

    side = _first_group(ASSIGNED_SIDE_RE, text)
    return EventState(
        available=True,
        status=status,
        deadline=_first_group(DEADLINE_RE, text),
        countdown_seconds=countdown_seconds,
        assigned_side=side.upper() if side else None,
    )
