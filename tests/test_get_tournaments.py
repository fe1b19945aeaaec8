"""Tests for tournament listings."""

import pytest

from conftest import make_response, routed_session
from get_tournaments import get_entries, get_my_tournaments, get_upcoming, parse_tournament_rows
from tabroom_errors import SessionInvalid, ValidationError

REGISTRATIONS = """
<table>
  <tr><th>Tournament</th><th>Dates</th><th>Event</th><th>Entry</th></tr>
  <tr><td><a href="/user/student/tourn.mhtml?tourn_id=100">Harvard Invitational</a></td><td>2/14 - 2/16</td><td>Varsity LD</td><td>Lincoln JS</td></tr>
  <tr><td><a href="/user/student/tourn.mhtml?tourn_id=100">Harvard Invitational</a></td><td>2/14 - 2/16</td><td>Congress</td><td>Jane Smith</td></tr>
  <tr><td><a href="/user/student/tourn.mhtml?tourn_id=200">Yale Invitational</a></td><td>Sep 20</td><td>Varsity LD</td><td>Lincoln JS</td></tr>
</table>
"""

UPCOMING = """
<table>
  <tr><td>Oct 24</td><td><a href="/index/tourn/index.mhtml?tourn_id=300">Glenbrooks</a></td><td>Northbrook, IL</td></tr>
  <tr><td colspan="3">Sponsored</td></tr>
</table>
"""


class TestParseTournamentRows:
    def test_header_roles(self):
        rows = parse_tournament_rows(REGISTRATIONS)
        assert len(rows) == 3
        assert rows[0].id == "100"
        assert rows[0].name == "Harvard Invitational"
        assert rows[0].dates == "2/14 - 2/16"
        assert rows[1].event == "Congress"

    def test_dates_found_without_header(self):
        rows = parse_tournament_rows(UPCOMING)
        assert [r.to_dict() for r in rows] == [{"id": "300", "name": "Glenbrooks", "dates": "Oct 24"}]


class TestListings:
    def test_entries_keep_every_row(self):
        session = routed_session([("student/index.mhtml", make_response(REGISTRATIONS))])
        result = get_entries(session, "tok")
        assert result["total"] == 3
        assert result["entries"][1]["event"] == "Congress"

    def test_my_tournaments_one_per_tournament(self):
        session = routed_session([("student/index.mhtml", make_response(REGISTRATIONS))])
        result = get_my_tournaments(session, "tok")
        assert result["total"] == 2
        assert [t["id"] for t in result["tournaments"]] == ["100", "200"]

    def test_upcoming_is_public(self):
        session = routed_session([("index/index.mhtml", make_response(UPCOMING))])
        result = get_upcoming(session)
        assert result["total"] == 1
        _, kwargs = session.get.call_args
        assert "Cookie" not in kwargs["headers"]

    def test_token_required(self):
        with pytest.raises(ValidationError):
            get_entries(routed_session([]), "")

    def test_expired_session(self):
        session = routed_session([("student/index.mhtml", make_response("Your session has expired"))])
        with pytest.raises(SessionInvalid):
            get_my_tournaments(session, "tok")
