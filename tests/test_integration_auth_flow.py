"""
Auth flow through the real routes: login -> dashboard -> logout, register,
and the app-wide handling of a 401 from the backend.
"""

from conftest import HOST, RENTER

from carshare_web.exceptions import ServiceUnavailableError, SessionExpiredError


def _session_token(client):
    with client.session_transaction() as sess:
        return sess.get("auth_token")


def _login(client, email="rita@example.com", password="secret1", follow=False):
    return client.post(
        "/auth/login",
        data={"email": email, "password": password},
        follow_redirects=follow,
    )


def test_login_starts_session_and_redirects_to_dashboard(client, fake_api):
    fake_api.auth_response = {"success": True, "token": "tok-abc", "user": RENTER, "expiresIn": 3600}
    fake_api.me = RENTER

    r = _login(client)
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/dashboard")
    assert _session_token(client) == "tok-abc"

    r = client.get("/dashboard")
    assert r.status_code == 200
    assert "Welcome, Rita" in r.get_data(as_text=True)
    assert "tok-abc" in fake_api.tokens


def test_login_rejected_shows_backend_message(client, fake_api):
    fake_api.auth_response = {"success": False, "message": "Invalid email or password"}
    r = _login(client, password="wrongpw")
    assert r.status_code == 400
    assert "Invalid email or password" in r.get_data(as_text=True)
    assert not _session_token(client)


def test_login_requires_both_fields(client, fake_api):
    r = _login(client, password="")
    assert r.status_code == 400
    assert "Email and password are required." in r.get_data(as_text=True)
    assert not fake_api.called("login")


def test_login_when_backend_down(client, fake_api):
    fake_api.failures["login"] = ServiceUnavailableError()
    r = _login(client)
    assert r.status_code == 400
    assert "The rental service is unavailable" in r.get_data(as_text=True)


def test_register_with_token_signs_in(client, fake_api):
    fake_api.auth_response = {"success": True, "token": "tok-new", "user": HOST}
    r = client.post("/auth/register", data={
        "name": "Hank", "email": "hank@example.com", "password": "secret1",
        "phoneNumber": "+6590000002", "role": "HOST",
    })
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/dashboard")
    assert _session_token(client) == "tok-new"
    payload = fake_api.called("register")[0][1]
    assert payload["role"] == "HOST"
    assert payload["phoneNumber"] == "+6590000002"


def test_register_without_token_goes_to_login(client, fake_api):
    fake_api.auth_response = {"success": True, "message": "Registration successful. Please login."}
    r = client.post("/auth/register", data={
        "name": "Rita", "email": "rita@example.com", "password": "secret1",
    })
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/auth/login")
    assert not _session_token(client)


def test_register_form_errors_keep_values(client, fake_api):
    r = client.post("/auth/register", data={"name": "Rita", "email": "not-an-email", "password": "123"})
    assert r.status_code == 400
    body = r.get_data(as_text=True)
    assert "A valid email address is required." in body
    assert "Password must have at least 6 characters." in body
    assert 'value="not-an-email"' in body
    assert not fake_api.called("register")


def test_logout_clears_session(client, login_as):
    login_as(RENTER)
    r = client.get("/auth/logout")
    assert r.status_code == 302
    assert not _session_token(client)

    r = client.get("/dashboard")
    assert r.status_code == 302
    assert "/auth/login" in r.headers["Location"]


def test_dashboard_requires_login(client):
    r = client.get("/dashboard", follow_redirects=True)
    assert r.status_code == 200
    assert "Please login first" in r.get_data(as_text=True)


def test_401_clears_session_and_redirects_to_login(client, fake_api, login_as):
    login_as(RENTER)
    fake_api.failures["my_trips"] = SessionExpiredError()

    r = client.get("/dashboard")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/auth/login")
    assert not _session_token(client)

    r = client.get("/auth/login")
    assert "Your session has expired. Please log in again." in r.get_data(as_text=True)
