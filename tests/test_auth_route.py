from datetime import datetime, timedelta, timezone

from app.models.session_model import UserSession
from app.models.user_model import User
from app.utils.session_store import session_store
from app.utils.user_app_service import user_app_service
from tests.conftest import PASSWORD, auth_headers, register


def _login(client, email, password=PASSWORD):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


def test_register_returns_tokens_and_profile(client, db):
    body = register(client, "Dana@DetailingSalonLux.com")

    assert body["message"] == "User registered successfully"
    assert body["accessToken"] and body["refreshToken"]
    assert body["user"]["email"] == "dana@detailingsalonlux.com"
    assert body["user"]["role"] == "customer"
    assert "passwordHash" not in body["user"]

    user = db.query(User).one()
    assert user.password_hash != PASSWORD
    assert db.query(UserSession).filter(UserSession.user_id == user.id).count() == 1


def test_register_duplicate_email(client, customer):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "dana@detailingsalonlux.com", "password": PASSWORD, "firstName": "D", "lastName": "R"},
    )
    assert response.status_code == 409
    assert response.json()["code"] == "USER_EXISTS"


def test_register_validates_payload(client):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "not-an-email", "password": "short", "firstName": "", "lastName": "R"},
    )
    assert response.status_code == 400
    fields = {detail["field"] for detail in response.json()["details"]}
    assert {"email", "password", "firstName"} <= fields


def test_login(client, customer):
    response = _login(client, "dana@detailingsalonlux.com")
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["user"]["lastLogin"] is not None


def test_login_with_wrong_password(client, customer):
    response = _login(client, "dana@detailingsalonlux.com", "WrongPassword1")
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials", "code": "INVALID_CREDENTIALS"}

    response = _login(client, "nobody@detailingsalonlux.com")
    assert response.status_code == 401


def test_login_deactivated_account(client, db, customer):
    user = db.query(User).one()
    user.is_active = False
    db.commit()

    response = _login(client, "dana@detailingsalonlux.com")
    assert response.status_code == 403
    assert response.json()["code"] == "ACCOUNT_DEACTIVATED"


def test_me(client, customer):
    response = client.get("/api/v1/auth/me", headers=auth_headers(customer))
    assert response.status_code == 200
    assert response.json()["email"] == "dana@detailingsalonlux.com"


def test_refresh_token_issues_access_token(client, customer):
    response = client.post("/api/v1/auth/refresh", json={"refreshToken": customer["refreshToken"]})
    assert response.status_code == 200
    access_token = response.json()["accessToken"]

    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {access_token}"})
    assert response.status_code == 200


def test_access_token_is_not_a_refresh_token(client, customer):
    response = client.post("/api/v1/auth/refresh", json={"refreshToken": customer["accessToken"]})
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_REFRESH_TOKEN"


def test_logout_revokes_refresh_token(client, customer):
    response = client.post("/api/v1/auth/logout", json={"refreshToken": customer["refreshToken"]})
    assert response.status_code == 200
    assert response.json() == {"message": "Logged out successfully"}

    response = client.post("/api/v1/auth/refresh", json={"refreshToken": customer["refreshToken"]})
    assert response.status_code == 401


def test_logout_without_token_still_succeeds(client):
    response = client.post("/api/v1/auth/logout", json={})
    assert response.status_code == 200


def test_password_reset_request_does_not_leak_accounts(client, customer):
    known = client.post("/api/v1/auth/password-reset/request", json={"email": "dana@detailingsalonlux.com"})
    unknown = client.post("/api/v1/auth/password-reset/request", json={"email": "ghost@detailingsalonlux.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()


def test_password_reset_flow(client, db, customer):
    token = user_app_service.request_password_reset(db, "dana@detailingsalonlux.com")
    assert token is not None

    response = client.post(
        "/api/v1/auth/password-reset/reset", json={"token": token, "newPassword": "BrandNewPass9"}
    )
    assert response.status_code == 200
    assert response.json() == {"message": "Password reset successfully"}

    # Existing refresh tokens die with the old password
    response = client.post("/api/v1/auth/refresh", json={"refreshToken": customer["refreshToken"]})
    assert response.status_code == 401

    assert _login(client, "dana@detailingsalonlux.com").status_code == 401
    assert _login(client, "dana@detailingsalonlux.com", "BrandNewPass9").status_code == 200


def test_password_reset_rejects_other_tokens(client, customer):
    response = client.post(
        "/api/v1/auth/password-reset/reset",
        json={"token": customer["accessToken"], "newPassword": "BrandNewPass9"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_RESET_TOKEN"


def test_reset_request_for_unknown_email_returns_none(db):
    assert user_app_service.request_password_reset(db, "ghost@detailingsalonlux.com") is None


def test_cleanup_expired_sessions(client, db, customer):
    user = db.query(User).one()
    session_store.store_refresh_token(
        db, user.id, "expired-token", datetime.now(timezone.utc) - timedelta(minutes=1)
    )

    assert db.query(UserSession).count() == 2
    assert session_store.cleanup_expired_sessions(db) == 1
    assert db.query(UserSession).count() == 1
    assert session_store.get_valid_session(db, customer["refreshToken"]) is not None


def test_auth_endpoints_are_rate_limited(client):
    statuses = [_login(client, "nobody@detailingsalonlux.com").status_code for _ in range(6)]

    assert statuses[:5] == [401] * 5
    assert statuses[5] == 429
