"""
Error taxonomy for the Tabroom proxy.

Every error carries the HTTP status the proxy answers with. NotFound and
ExtractionEmpty are strategy-level misses: fallback chains catch them and move
on, so they only reach a caller as an empty result.
"""

from typing import Dict, List


class TabroomError(Exception):
    """Base class for all proxy errors."""

    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TabroomError):
    """Missing or malformed input (no credentials, no token, ...)."""

    status = 400


class AuthenticationFailed(TabroomError):
    """Tabroom rejected the credentials at login."""

    status = 401


class SessionInvalid(TabroomError):
    """A fetch mid-session landed on the login wall."""

    status = 401

    def __init__(self, message: str = "Tabroom session expired. Please sign in again."):
        super().__init__(message)


class UpstreamUnavailable(TabroomError):
    """Transport failure talking to Tabroom."""

    status = 502


class NotFound(TabroomError):
    """A strategy ran and found nothing."""

    status = 404


class ExtractionEmpty(TabroomError):
    """A page was fetched but no heuristic matched any rows."""

    status = 404


class AmbiguousMatch(TabroomError):
    """
    A judge search matched more than one person.

    Never rendered as an error: the search turns it into a candidate list.
    """

    def __init__(self, candidates: List[Dict[str, str]]):
        super().__init__(f"{len(candidates)} judges match this name")
        self.candidates = candidates
