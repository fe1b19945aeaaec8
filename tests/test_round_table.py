"""Tests for the generic round-table extractor."""

from conftest import fixture_html
from round_table import (
    build_column_map,
    extract_pairings,
    extract_round_records,
    find_placement,
    header_role,
    looks_like_round_label,
    records_score,
    win_loss,
)
from tabroom_records import RoundRecord


class TestHeaderRole:
    def test_keyword_roles(self):
        assert header_role("judge") == "judge"
        assert header_role("panel") == "judge"
        assert header_role("opponent") == "opponent"
        assert header_role("opp") == "opponent"
        assert header_role("decision") == "decision"
        assert header_role("w/l") == "decision"
        assert header_role("ballots") == "decision"
        assert header_role("speaks") == "points"
        assert header_role("pts") == "points"
        assert header_role("round") == "round"
        assert header_role("rd") == "round"
        assert header_role("r") == "round"
        assert header_role("room") == "room"
        assert header_role("side") == "side"

    def test_unknown_header(self):
        assert header_role("school") is None
        assert header_role("") is None

    def test_first_column_wins_a_role(self):
        assert build_column_map(["round", "judge", "judge 2"]) == {0: "round", 1: "judge"}


class TestLooksLikeRoundLabel:
    def test_round_labels(self):
        for label in ("Round 1", "R3", "Rd 2", "Quarters", "Semis", "Finals", "Doubles", "Octafinals"):
            assert looks_like_round_label(label), label

    def test_other_cells(self):
        for text in ("Jane Smith", "Notes", "", "28.5", "Aff"):
            assert not looks_like_round_label(text), text


class TestExtractRoundRecords:
    """Tests for extract_round_records()."""

    def test_header_table_fixture(self):
        records = extract_round_records(fixture_html("entry_record.html"))
        assert len(records) == 3
        first = records[0]
        assert first.round == "Round 1"
        assert first.side == "Aff"
        assert first.opponent == "Westview AB"
        assert first.judge == "Pat Lee"
        assert first.decision == "W"
        assert first.points == "28.5"
        assert first.room == "Sever 107"
        assert [r.round for r in records] == ["Round 1", "Round 2", "Round 3"]

    def test_positional_fallback_fixture(self):
        records = extract_round_records(fixture_html("student_tourn_rounds.html"))
        assert [r.round for r in records] == ["Round 1", "Round 2", "Quarters"]
        assert records[1].side == "NEG"
        assert records[1].opponent == "Eastlake CD"
        assert records[1].judge == "Sam Ortiz"
        assert records[1].decision == "L"
        assert records[1].points is None

    def test_header_rows_without_round_are_dropped(self):
        html = """
        <table>
          <tr><th>Round</th><th>Opponent</th><th>Decision</th></tr>
          <tr><td></td><td>Westview AB</td><td>W</td></tr>
          <tr><td>R2</td><td>Eastlake CD</td><td>L</td></tr>
        </table>"""
        records = extract_round_records(html)
        assert len(records) == 1
        assert records[0].round == "R2"

    def test_short_rows_skipped(self):
        html = "<table><tr><td>Round 1</td><td>W</td></tr></table>"
        assert extract_round_records(html) == []

    def test_tags_stripped_and_whitespace_collapsed(self):
        html = """
        <table><tr><td><b>Round
            1</b></td><td>Aff</td><td><a href="#">West&amp;view   AB</a></td></tr></table>"""
        records = extract_round_records(html)
        assert records[0].round == "Round 1"
        assert records[0].opponent == "West&view AB"

    def test_empty_page(self):
        assert extract_round_records("") == []
        assert extract_round_records("<p>No rounds posted</p>") == []

    def test_deterministic(self):
        html = fixture_html("entry_record.html")
        assert extract_round_records(html) == extract_round_records(html)

    def test_never_emits_blank_round(self):
        for name in ("entry_record.html", "student_tourn_rounds.html", "pairings_flip.html"):
            for record in extract_round_records(fixture_html(name)):
                assert record.round.strip()


class TestRecordsScore:
    def test_populated_fields_outrank_row_count(self):
        sparse = [RoundRecord(round="R1"), RoundRecord(round="R2")]
        full = [RoundRecord(round="R1", opponent="Westview AB", decision="W")]
        assert records_score(full) > records_score(sparse)

    def test_row_count_breaks_ties(self):
        one = [RoundRecord(round="R1", decision="W")]
        two = [RoundRecord(round="R1"), RoundRecord(round="R2")]
        assert records_score(two) > records_score(one)

    def test_empty(self):
        assert records_score([]) == (0, 0)


class TestWinLoss:
    def test_counts_decisions(self):
        records = [
            RoundRecord(round="R1", decision="W"),
            RoundRecord(round="R2", decision="Loss"),
            RoundRecord(round="R3", decision="2-1 Won"),
            RoundRecord(round="R4"),
        ]
        assert win_loss(records) == {"wins": 2, "losses": 1}


class TestFindPlacement:
    def test_final_place(self):
        assert find_placement(fixture_html("entry_record.html")) == "3rd"

    def test_placement_dash(self):
        assert find_placement("<p>Placement - 5th</p>") == "5th"

    def test_none(self):
        assert find_placement("<p>Round 1</p>") is None


class TestExtractPairings:
    def test_role_keys(self):
        pairings = extract_pairings(fixture_html("pairings_flip.html"))
        assert pairings == [
            {"room": "Sever 107", "aff": "Lincoln HS JS", "neg": "Westview AB", "judge": "Pat Lee"},
            {"room": "Sever 110", "aff": "Eastlake CD", "neg": "Northside EF", "judge": "Kim Chen"},
        ]

    def test_unknown_headers_kept_by_text(self):
        html = "<table><tr><th>Flight</th><th>Gov</th></tr><tr><td>A</td><td>Lincoln JS</td></tr></table>"
        assert extract_pairings(html) == [{"flight": "A", "aff": "Lincoln JS"}]

    def test_no_table(self):
        assert extract_pairings("<p>Pairings not yet released</p>") == []
