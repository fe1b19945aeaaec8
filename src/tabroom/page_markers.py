"""Classify an otherwise-200 Tabroom page before trying to extract anything."""

LOGIN_MARKERS = (
    "please log in",
    "please login",
    "log in to view",
    "login to view",
    "you must be logged in",
    "session has expired",
    "your session has expired",
    "login_box",
    "loginbox",
)

NO_RESULTS_MARKERS = (
    "returned no judges",
    "no results found",
    "no judges found",
    "returned no results",
)


def is_login_page(text: str) -> bool:
    """True if the page is Tabroom's login wall instead of the requested content."""
    if not text:
        return False
    lowered = text.lower()
    if any(marker in lowered for marker in LOGIN_MARKERS):
        return True
    return (
        "password" in lowered
        and "email" in lowered
        and "create a new account" in lowered
    )


def is_no_results_page(text: str) -> bool:
    """True if a search page explicitly says it found nothing."""
    if not text:
        return False
    lowered = text.lower()
    return any(marker in lowered for marker in NO_RESULTS_MARKERS)
