"""Pytest configuration and path setup for Tabroom proxy tests."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src/tabroom to path so tests can import proxy modules
_tabroom_path = Path(__file__).parent.parent / "src" / "tabroom"
if str(_tabroom_path) not in sys.path:
    sys.path.insert(0, str(_tabroom_path))

FIXTURES = Path(__file__).parent / "fixtures"


def fixture_html(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


def make_response(text: str = "", status_code: int = 200, headers=None):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.headers = headers or {}
    return response


def routed_session(routes, post=None):
    """
    MagicMock session whose get() answers by URL substring.

    `routes` is a list of (substring, response) pairs checked in order; an
    unmatched URL fails the test so unexpected fetches are caught.
    """
    session = MagicMock()

    def _get(url, **kwargs):
        for fragment, response in routes:
            if fragment in url:
                return response
        raise AssertionError(f"unexpected fetch: {url}")

    session.get.side_effect = _get
    if post is not None:
        session.post.return_value = post
    return session


@pytest.fixture
def fixture():
    return fixture_html
