"""Tests for login-wall and no-results detection."""

from page_markers import is_login_page, is_no_results_page


class TestIsLoginPage:
    def test_login_prompt(self):
        assert is_login_page("<p>Please log in to view this page</p>") is True

    def test_expired_session(self):
        assert is_login_page("Your session has expired.") is True

    def test_login_box_trigger(self):
        assert is_login_page('<a class="login_box" href="#">Log in</a>') is True

    def test_signup_form_combination(self):
        html = "<form>Email <input> Password <input> Create a new account</form>"
        assert is_login_page(html) is True

    def test_password_alone_is_not_enough(self):
        assert is_login_page("<p>Change your password</p>") is False

    def test_tournament_data(self):
        html = "<table><tr><td>Round 1</td><td>Aff</td><td>Westview AB</td></tr></table>"
        assert is_login_page(html) is False

    def test_empty(self):
        assert is_login_page("") is False
        assert is_login_page(None) is False


class TestIsNoResultsPage:
    def test_no_judges(self):
        assert is_no_results_page("Your search returned no judges") is True

    def test_no_results_found(self):
        assert is_no_results_page("<h4>No Results Found</h4>") is True

    def test_results_page(self):
        assert is_no_results_page("<a href='?judge_person_id=1'>Pat Lee</a>") is False
