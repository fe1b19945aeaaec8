"""
Records returned by the proxy.

All records are frozen dataclasses rebuilt on every request. `to_dict()` gives
the JSON shape sent to the client: camelCase keys, unset optional fields
omitted.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional, Tuple, Union


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class _Record:
    def to_dict(self) -> Dict[str, Any]:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, tuple):
                value = [v.to_dict() if isinstance(v, _Record) else v for v in value]
            elif isinstance(value, _Record):
                value = value.to_dict()
            out[_camel(f.name)] = value
        return out


@dataclass(frozen=True)
class SessionToken(_Record):
    """Cookie value plus whatever identity the login probe could find."""

    token: str
    person_id: Optional[str] = None
    display_name: Optional[str] = None


@dataclass(frozen=True)
class TournamentRef(_Record):
    id: str
    name: str
    event: Optional[str] = None
    dates: Optional[str] = None


# Round record fields in positional-table order
ROUND_FIELDS = ("round", "side", "opponent", "judge", "decision", "points", "room")


@dataclass(frozen=True)
class RoundRecord(_Record):
    round: str
    side: Optional[str] = None
    opponent: Optional[str] = None
    judge: Optional[str] = None
    decision: Optional[str] = None
    points: Optional[str] = None
    room: Optional[str] = None

    def __post_init__(self):
        if not self.round or not self.round.strip():
            raise ValueError("RoundRecord requires a round label")

    def completeness(self) -> int:
        """Number of populated fields."""
        return sum(1 for name in ROUND_FIELDS if getattr(self, name))


@dataclass(frozen=True)
class JudgeRecord(_Record):
    """
    Paradigm lookup result.

    Exactly one of paradigm / candidates / warning describes the outcome.
    """

    name: str
    source: str
    judge_id: Optional[str] = None
    paradigm: Optional[str] = None
    candidates: Optional[Tuple[Dict[str, str], ...]] = None
    warning: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        # Multiple matches are reported the way the client expects them
        if self.candidates is not None:
            out["results"] = out.pop("candidates")
        return out


@dataclass(frozen=True)
class EventState(_Record):
    """Coin-flip (side assignment) state read from a pairings page."""

    available: bool
    status: Optional[str] = None  # pending | active | completed
    deadline: Optional[str] = None
    countdown_seconds: Optional[int] = None
    assigned_side: Optional[str] = None


@dataclass(frozen=True)
class PlaceResult(_Record):
    tournament: str
    event: str
    place: str
    record: str
    dates: Optional[str] = None
    location: Optional[str] = None


# EntryRef: how to reach the user's round history for one tournament


@dataclass(frozen=True)
class ById:
    """A real Tabroom entry id."""

    entry_id: str


@dataclass(frozen=True)
class Embedded:
    """The student page fetched while resolving already lists the rounds."""

    tournament_id: str
    student_id: str
    page_html: str


@dataclass(frozen=True)
class NotFoundRef:
    """Every resolution strategy came back empty."""


NOT_FOUND = NotFoundRef()

EntryRef = Union[ById, Embedded, NotFoundRef]


def records_to_dicts(records: List[_Record]) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in records]
