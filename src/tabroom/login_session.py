"""
Tabroom login.

Posts credentials to the login form, harvests the session cookie, then probes
a few dashboard pages for the person id and display name, neither of which the
login response itself reliably carries.
"""

import logging
import re
from typing import Optional, Tuple
from urllib.parse import parse_qs, urlparse

import requests
from bs4 import BeautifulSoup

from fetch_page import SESSION_COOKIE_NAME, fetch_page, page_lines, strip_tags
from page_markers import is_login_page
from tabroom_errors import AuthenticationFailed, UpstreamUnavailable, ValidationError
from tabroom_records import SessionToken

logger = logging.getLogger(__name__)

LOGIN_PATH = "/user/login/login_save.mhtml"

# Probed in order after login; stop once both id and name are known
PROFILE_PROBE_PATHS = (
    "/user/home.mhtml",
    "/user/login/profile.mhtml",
    "/user/student/index.mhtml",
)

PERSON_ID_PATTERNS = (
    re.compile(r"person_id=(\d+)"),
    re.compile(r'name=["\']person_id["\'][^>]*value=["\'](\d+)'),
    re.compile(r'data-person[_-]id=["\'](\d+)'),
    re.compile(r'["\']person_id["\']\s*:\s*["\']?(\d+)'),
)

# Matched against page_lines(); the name is two or more capitalised words
WELCOME_RE = re.compile(
    r"\b(?i:welcome(?:\s+back)?),?\s+([A-Z][\w'.-]*(?:[ \t]+[A-Z][\w'.-]*)+)"
)
FIRST_FIELD_RE = re.compile(r'name=["\']first["\'][^>]*value=["\']([^"\']*)', re.IGNORECASE)
LAST_FIELD_RE = re.compile(r'name=["\']last["\'][^>]*value=["\']([^"\']*)', re.IGNORECASE)
NAME_SHAPE_RE = re.compile(r"^[A-Za-z][^<>@]{2,48}$")


def _cookie_value(set_cookie: str) -> Optional[str]:
    match = re.search(rf"{SESSION_COOKIE_NAME}=([^;,\s]*)", set_cookie or "")
    if not match:
        return None
    value = match.group(1)
    if not value or value.lower() in ("deleted", "null"):
        return None
    return value


def _login_error(location: str) -> Optional[str]:
    """Decoded `err=` message from a login redirect, if present."""
    if "err=" not in (location or ""):
        return None
    errors = parse_qs(urlparse(location).query).get("err")
    if errors and errors[0].strip():
        return errors[0].strip()
    return "Invalid Tabroom credentials"


def valid_display_name(candidate: Optional[str]) -> Optional[str]:
    if not candidate:
        return None
    name = " ".join(candidate.split())
    if not NAME_SHAPE_RE.match(name) or "tabroom" in name.lower():
        return None
    return name


def extract_person_id(page_html: str) -> Optional[str]:
    for pattern in PERSON_ID_PATTERNS:
        match = pattern.search(page_html)
        if match:
            return match.group(1)
    return None


def _welcome_name(page_html: str) -> Optional[str]:
    match = WELCOME_RE.search(page_lines(page_html))
    return match.group(1) if match else None


def _class_name(page_html: str) -> Optional[str]:
    soup = BeautifulSoup(page_html, "html.parser")
    for element in soup.find_all(class_="name"):
        text = element.get_text(" ", strip=True)
        if valid_display_name(text):
            return text
    return None


def _title_name(page_html: str) -> Optional[str]:
    soup = BeautifulSoup(page_html, "html.parser")
    if soup.title is None:
        return None
    for part in re.split(r"\s[-|:]\s", soup.title.get_text(strip=True)):
        if valid_display_name(part):
            return part
    return None


def _form_field_name(page_html: str) -> Optional[str]:
    first = FIRST_FIELD_RE.search(page_html)
    last = LAST_FIELD_RE.search(page_html)
    if first and last:
        return f"{first.group(1).strip()} {last.group(1).strip()}"
    return None


NAME_EXTRACTORS = (_welcome_name, _class_name, _title_name, _form_field_name)


def extract_display_name(page_html: str) -> Optional[str]:
    """First name-shaped value found by the ordered name extractors."""
    for extractor in NAME_EXTRACTORS:
        name = valid_display_name(strip_tags(extractor(page_html) or ""))
        if name:
            return name
    return None


def name_from_email(email: str) -> str:
    """'jane.smith@school.org' -> 'Jane Smith'."""
    local = email.split("@", 1)[0]
    return " ".join(re.split(r"[._\-+]+", local)).strip().title() or email


def probe_profile(
    session: requests.Session, token: str
) -> Tuple[Optional[str], Optional[str]]:
    """Fill in (person_id, display_name) from the dashboard pages."""
    person_id = display_name = None
    for path in PROFILE_PROBE_PATHS:
        try:
            page = fetch_page(session, path, token)
        except UpstreamUnavailable as e:
            logger.info("Profile probe %s failed: %s", path, e.message)
            continue
        if is_login_page(page.text):
            logger.info("Profile probe %s landed on the login wall", path)
            continue
        person_id = person_id or extract_person_id(page.text)
        display_name = display_name or extract_display_name(page.text)
        if person_id and display_name:
            break
    return person_id, display_name


def authenticate(session: requests.Session, email: str, password: str) -> SessionToken:
    """
    Log in to Tabroom.

    Raises:
        ValidationError: email or password missing.
        AuthenticationFailed: Tabroom rejected the credentials.
        UpstreamUnavailable: Tabroom could not be reached.
    """
    if not email or not password:
        raise ValidationError("Email and password are required")

    page = fetch_page(
        session,
        LOGIN_PATH,
        method="POST",
        data={"username": email, "password": password},
        allow_redirects=False,
    )
    error = _login_error(page.headers.get("location", ""))
    if error:
        logger.info("Tabroom rejected login: %s", error)
        raise AuthenticationFailed(error)
    token = _cookie_value(page.headers.get("set-cookie", ""))
    if not token:
        logger.info("Login response carried no %s cookie", SESSION_COOKIE_NAME)
        raise AuthenticationFailed("Invalid Tabroom credentials")

    person_id, display_name = probe_profile(session, token)
    if not display_name:
        display_name = name_from_email(email)
    return SessionToken(token=token, person_id=person_id, display_name=display_name)
