"""Tests for coin-flip state detection."""

from coin_flip import detect_coin_flip
from conftest import fixture_html


class TestDetectCoinFlip:
    def test_no_flip_markers(self):
        state = detect_coin_flip("<table><tr><td>Sever 107</td><td>Lincoln JS</td></tr></table>")
        assert state.available is False
        assert state.to_dict() == {"available": False}

    def test_sides_locked_is_completed(self):
        state = detect_coin_flip("<div><b>Sides Locked</b> for Round 4</div>")
        assert state.available is True
        assert state.status == "completed"

    def test_active_flip_fixture(self):
        state = detect_coin_flip(fixture_html("pairings_flip.html"))
        assert state.available is True
        assert state.status == "active"
        assert state.deadline == "3:45 PM"
        assert state.countdown_seconds == 240
        assert state.assigned_side == "AFF"

    def test_pending_without_countdown(self):
        state = detect_coin_flip("<p>Coin flip opens 20 minutes before the round.</p>")
        assert state.available is True
        assert state.status == "pending"
        assert state.countdown_seconds is None
        assert state.assigned_side is None

    def test_countdown_text_makes_it_active(self):
        state = detect_coin_flip("<p>Coin flip</p><p>Timer: 90 seconds</p>")
        assert state.status == "active"
        assert state.countdown_seconds == 90

    def test_assigned_side_uppercased(self):
        state = detect_coin_flip("<p>Flip complete.</p><p>Assigned side: neg</p>")
        assert state.status == "completed"
        assert state.assigned_side == "NEG"

    def test_to_dict_uses_camel_case(self):
        payload = detect_coin_flip(fixture_html("pairings_flip.html")).to_dict()
        assert payload["countdownSeconds"] == 240
        assert payload["assignedSide"] == "AFF"
