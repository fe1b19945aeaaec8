"""
Authenticated fetcher for Tabroom pages.

Tabroom has no structured API for a user's own data, only server-rendered HTML
behind a cookie session. Every upstream request in the proxy goes through
fetch_page(), which attaches the session cookie and browser-like headers.
"""

import html
import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import unquote, urlencode, urljoin

import requests

from tabroom_errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

TABROOM_WEB = "https://www.tabroom.com"
SESSION_COOKIE_NAME = "TabroomToken"

# Seconds; Tabroom pages can be slow during big tournaments
REQUEST_TIMEOUT = 30

BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


@dataclass(frozen=True)
class FetchedPage:
    """
    Raw upstream response. Tabroom answers 200 for login walls too.
    Header names are lower-cased.
    """

    url: str
    status_code: int
    text: str
    headers: Dict[str, str]


def build_url(path: str, params: Optional[Dict[str, str]] = None) -> str:
    """Resolve a Tabroom path (or pass an absolute URL through) and add query params."""
    url = urljoin(TABROOM_WEB + "/", path)
    if params:
        query = urlencode({k: v for k, v in params.items() if v not in (None, "")})
        if query:
            url += ("&" if "?" in url else "?") + query
    return url


def session_headers(token: Optional[str]) -> Dict[str, str]:
    headers = dict(BROWSER_HEADERS)
    if token:
        headers["Cookie"] = f"{SESSION_COOKIE_NAME}={unquote(token)}"
    return headers


def fetch_page(
    session: requests.Session,
    path: str,
    token: Optional[str] = None,
    *,
    params: Optional[Dict[str, str]] = None,
    method: str = "GET",
    data: Optional[Dict[str, str]] = None,
    allow_redirects: bool = True,
    timeout: float = REQUEST_TIMEOUT,
) -> FetchedPage:
    """
    Fetch a Tabroom page with the session cookie attached.

    Non-2xx statuses are returned, not raised: callers classify the body.

    Raises:
        UpstreamUnavailable: on any transport-level failure.
    """
    url = build_url(path, params)
    try:
        if method == "POST":
            response = session.post(
                url,
                data=data,
                headers=session_headers(token),
                allow_redirects=allow_redirects,
                timeout=timeout,
            )
        else:
            response = session.get(
                url,
                headers=session_headers(token),
                allow_redirects=allow_redirects,
                timeout=timeout,
            )
    except requests.exceptions.Timeout as e:
        logger.warning("Timeout fetching %s: %s", url, e)
        raise UpstreamUnavailable("Tabroom did not respond in time") from e
    except requests.exceptions.RequestException as e:
        logger.warning("Network error fetching %s: %s", url, e)
        raise UpstreamUnavailable("Failed to connect to Tabroom") from e

    logger.debug("%s %s -> %s", method, url, response.status_code)
    return FetchedPage(
        url=url,
        status_code=response.status_code,
        text=response.text or "",
        headers={k.lower(): v for k, v in (response.headers or {}).items()},
    )


_TAG_RE = re.compile(r"<[^>]+>")
_SCRIPT_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_BLOCK_RE = re.compile(r"<(?:br|/p|/div|/tr|/li|/h\d)\b[^>]*>", re.IGNORECASE)


def strip_tags(fragment: str) -> str:
    """Remove markup from an HTML fragment and collapse whitespace."""
    if not fragment:
        return ""
    text = _TAG_RE.sub(" ", _SCRIPT_RE.sub(" ", fragment))
    return " ".join(html.unescape(text).split())


def page_lines(page_html: str) -> str:
    """Tag-stripped page text that keeps one line per block element."""
    text = _BLOCK_RE.sub("\n", _SCRIPT_RE.sub(" ", page_html or ""))
    text = html.unescape(_TAG_RE.sub(" ", text))
    lines = (" ".join(line.split()) for line in text.splitlines())
    return "\n".join(line for line in lines if line)
