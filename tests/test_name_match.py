"""Tests for the fuzzy name matcher."""

from name_match import name_matches, normalize_name


class TestNormalizeName:
    def test_lowercases_and_keeps_letters(self):
        assert normalize_name("Smith, Jane") == "smithjane"
        assert normalize_name("O'Neil-Ruiz 2") == "oneilruiz"

    def test_empty(self):
        assert normalize_name("") == ""
        assert normalize_name(None) == ""


class TestNameMatches:
    """Tests for name_matches()."""

    def test_surname_first_with_comma(self):
        assert name_matches("Smith, Jane", "Jane Smith") is True

    def test_unrelated_team_code(self):
        assert name_matches("Jones & Lee", "Jane Smith") is False

    def test_last_name_plus_first_initial(self):
        """Team codes pair the surname with an initial."""
        assert name_matches("Smith Jo", "Jane Smith") is True

    def test_empty_cell_never_matches(self):
        assert name_matches("", "Jane Smith") is False
        assert name_matches("   ", "Jane Smith") is False

    def test_empty_user_name_never_matches(self):
        assert name_matches("Jane Smith", "") is False

    def test_full_name_inside_longer_cell(self):
        assert name_matches("Lincoln HS: Jane Smith & Ravi Patel", "Jane Smith") is True

    def test_case_and_punctuation_ignored(self):
        assert name_matches("JANE-SMITH", "jane smith") is True

    def test_middle_name_in_user_name(self):
        assert name_matches("Smith, Jane", "Jane Q. Smith") is True

    def test_single_token_user_name(self):
        assert name_matches("Smith & Lee", "Smith") is True
        assert name_matches("Jones & Lee", "Smith") is False

    def test_surname_without_initial(self):
        assert name_matches("Smith Rk", "Jane Smith") is False
