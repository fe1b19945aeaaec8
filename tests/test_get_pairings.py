"""Tests for pairings and the attached coin-flip state."""

import pytest

from conftest import fixture_html, make_response, routed_session
from get_pairings import get_pairings, latest_round_id
from tabroom_errors import SessionInvalid, ValidationError


class TestGetPairings:
    def test_explicit_round(self):
        session = routed_session([("round_id=77", make_response(fixture_html("pairings_flip.html")))])
        result = get_pairings(session, "tok", "100", round_id="77")
        assert result["total"] == 2
        assert result["pairings"][0]["aff"] == "Lincoln HS JS"
        assert result["coinFlip"]["status"] == "active"
        assert session.get.call_count == 1

    def test_latest_round_from_postings_index(self):
        index = (
            '<a href="/index/tourn/postings/round.mhtml?tourn_id=100&round_id=78">Round 4</a>'
            '<a href="/index/tourn/postings/round.mhtml?tourn_id=100&round_id=77">Round 3</a>'
        )
        round_page = "<table><tr><th>Room</th><th>Aff</th><th>Neg</th></tr><tr><td>A1</td><td>X</td><td>Y</td></tr></table>"
        session = routed_session(
            [
                ("round_id=78", make_response(round_page)),
                ("postings/index.mhtml", make_response(index)),
            ]
        )
        result = get_pairings(session, "tok", "100", event_id="9")
        assert result == {"pairings": [{"room": "A1", "aff": "X", "neg": "Y"}], "total": 1}
        index_url = session.get.call_args_list[0].args[0]
        assert "event_id=9" in index_url

    def test_no_rounds_posted(self):
        session = routed_session([("postings/index.mhtml", make_response("<p>Nothing posted</p>"))])
        assert get_pairings(session, "tok", "100") == {"pairings": [], "total": 0}

    def test_login_wall(self):
        session = routed_session([("round_id=77", make_response("Please log in"))])
        with pytest.raises(SessionInvalid):
            get_pairings(session, "tok", "100", round_id="77")

    def test_validation(self):
        with pytest.raises(ValidationError):
            get_pairings(routed_session([]), None, "100")

    def test_latest_round_id(self):
        assert latest_round_id('<a href="?round_id=5">R5</a><a href="?round_id=4">R4</a>') == "5"
        assert latest_round_id("<p>none</p>") is None
