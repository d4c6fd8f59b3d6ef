import pytest

from carshare_web.exceptions import SubmissionInProgressError
from carshare_web.services import common
from carshare_web.services.auth_service import AuthService
from carshare_web.services.forms import LoginForm
from carshare_web.services.session import SessionContext
from carshare_web.services.submissions import InFlightRegistry


def test_second_submission_of_same_form_is_rejected():
    reg = InFlightRegistry()
    with reg.guard("u1", "start:t1"):
        assert reg.is_busy("u1", "start:t1")
        with pytest.raises(SubmissionInProgressError) as exc:
            with reg.guard("u1", "start:t1"):
                pass
        assert "already being submitted" in exc.value.message
    assert not reg.is_busy("u1", "start:t1")


def test_other_forms_and_users_are_independent():
    reg = InFlightRegistry()
    with reg.guard("u1", "start:t1"):
        with reg.guard("u1", "cancel:t2"):
            pass
        with reg.guard("u2", "start:t1"):
            pass


def test_slot_released_when_request_fails():
    reg = InFlightRegistry()
    with pytest.raises(RuntimeError):
        with reg.guard("u1", "rent:SGX1"):
            raise RuntimeError("backend down")
    with reg.guard("u1", "rent:SGX1"):
        pass


def test_signed_out_visitors_do_not_block_each_other(fake_api):
    fake_api.auth_response = {"success": False, "message": "Invalid email or password"}
    visitor_a, visitor_b = SessionContext({}), SessionContext({})
    assert visitor_a.submitter_key != visitor_b.submitter_key

    with common.submission_guard(visitor_a, "login"):
        ok, msg = AuthService.login(visitor_b, LoginForm("b@example.com", "secret1"))
    assert (ok, msg) == (False, "Invalid email or password")


def test_same_visitor_is_blocked_while_login_runs(fake_api):
    visitor = SessionContext({})
    with common.submission_guard(visitor, "login"):
        with pytest.raises(SubmissionInProgressError):
            AuthService.login(visitor, LoginForm("a@example.com", "secret1"))
    assert not fake_api.called("login")


def test_visitor_key_is_stable_per_browser_session():
    store = {}
    assert SessionContext(store).submitter_key == SessionContext(store).submitter_key
