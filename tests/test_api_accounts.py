"""
Tests for the auth, user and broker API endpoints.

Routes run against the application's in-memory database; broker-facing
use cases are replaced through dependency overrides.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

from app.application.accounts.dtos import (
    BrokerIdentityResult,
    BrokerLoginResult,
    SessionResult,
    UserResult,
)
from app.domain.trading.entities import AccountBalance
from app.domain.trading.errors import BrokerAuthorizationError, BrokerTimeoutError
from app.interfaces.accounts.dependencies import (
    get_account_balance_use_case,
    get_authorize_broker_token_use_case,
    get_broker_login_use_case,
)
from app.interfaces.accounts.router import parse_callback_accounts

API = "/api/v1"


def _override(client, getter, use_case) -> None:
    client.app.dependency_overrides[getter] = lambda: use_case


# ══════════════════════════════════════════════════════════════
# Health and middleware
# ══════════════════════════════════════════════════════════════


class TestHealth:
    def test_health_check(self, client) -> None:
        response = client.get(f"{API}/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["database"] == "ok"

    def test_security_headers(self, client) -> None:
        headers = client.get(f"{API}/health").headers
        assert headers["X-Content-Type-Options"] == "nosniff"
        assert headers["X-Frame-Options"] == "DENY"
        assert headers["Cache-Control"] == "no-store"


# ══════════════════════════════════════════════════════════════
# Credentials auth
# ══════════════════════════════════════════════════════════════


class TestRegisterAndLogin:
    """Tests for POST /auth/register, /auth/login and /auth/logout."""

    def test_register_returns_camel_case_user(self, client) -> None:
        response = client.post(
            f"{API}/auth/register",
            json={"email": "New@Example.com", "password": "secret123", "name": "New"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "new@example.com"
        assert "displayName" in body
        assert "hashedPassword" not in body

    def test_duplicate_registration(self, client) -> None:
        payload = {"email": "dup@example.com", "password": "secret123"}
        client.post(f"{API}/auth/register", json=payload)
        response = client.post(f"{API}/auth/register", json=payload)
        assert response.status_code == 409
        assert response.json()["error"] == "Email already registered"

    def test_short_password(self, client) -> None:
        response = client.post(
            f"{API}/auth/register", json={"email": "a@example.com", "password": "123"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Password too weak"

    def test_login_and_logout(self, client) -> None:
        client.post(f"{API}/auth/register", json={"email": "l@example.com", "password": "secret123"})
        login = client.post(f"{API}/auth/login", json={"email": "l@example.com", "password": "secret123"})
        assert login.status_code == 200
        body = login.json()
        assert body["tokenType"] == "bearer"
        headers = {"Authorization": f"Bearer {body['token']}"}

        assert client.get(f"{API}/user/profile", headers=headers).status_code == 200
        assert client.post(f"{API}/auth/logout", headers=headers).json()["message"] == "Logged out"
        assert client.get(f"{API}/user/profile", headers=headers).status_code == 401

    def test_wrong_password(self, client) -> None:
        client.post(f"{API}/auth/register", json={"email": "w@example.com", "password": "secret123"})
        response = client.post(f"{API}/auth/login", json={"email": "w@example.com", "password": "nope"})
        assert response.status_code == 401

    def test_protected_route_without_token(self, client) -> None:
        response = client.get(f"{API}/user/profile")
        assert response.status_code == 401
        assert response.json()["error"] == "Not authenticated"

    def test_protected_route_with_unknown_token(self, client) -> None:
        response = client.get(f"{API}/user/profile", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401


class TestPasswordReset:
    def test_request_answer_is_generic(self, client) -> None:
        response = client.post(f"{API}/auth/password-reset/request", json={"email": "ghost@example.com"})
        assert response.status_code == 200
        assert "If your email is in our system" in response.json()["message"]

    def test_confirm_with_unknown_token(self, client) -> None:
        response = client.post(
            f"{API}/auth/password-reset/confirm",
            json={"token": "missing", "password": "newpass123"},
        )
        assert response.status_code == 400


# ══════════════════════════════════════════════════════════════
# Broker auth
# ══════════════════════════════════════════════════════════════


class TestParseCallbackAccounts:
    def test_orders_by_index_and_skips_tokenless(self) -> None:
        accounts = parse_callback_accounts(
            {
                "acct2": "VRTC2",
                "token2": "t2",
                "acct1": "CR1",
                "token1": "t1",
                "cur1": "USD",
                "acct3": "CR3",
                "state": "x",
            }
        )
        assert [(a.loginid, a.token, a.currency) for a in accounts] == [
            ("CR1", "t1", "USD"),
            ("VRTC2", "t2", None),
        ]


class TestBrokerEndpoints:
    """Tests for the broker auth bridge, OAuth callback and balance."""

    def test_authorize_token(self, client) -> None:
        use_case = MagicMock()
        use_case.execute.return_value = BrokerIdentityResult("42", "t@example.com", None)
        _override(client, get_authorize_broker_token_use_case, use_case)

        response = client.post(f"{API}/auth/deriv/authorize-token", json={"token": "a1-x"})

        assert response.status_code == 200
        assert response.json()["derivUserId"] == "42"

    def test_rejected_token_is_401(self, client) -> None:
        use_case = MagicMock()
        use_case.execute.side_effect = BrokerAuthorizationError("The token is invalid.", code="InvalidToken")
        _override(client, get_authorize_broker_token_use_case, use_case)

        response = client.post(f"{API}/auth/deriv/authorize-token", json={"token": "bad"})
        assert response.status_code == 401

    def test_broker_timeout_is_504(self, client) -> None:
        use_case = MagicMock()
        use_case.execute.side_effect = BrokerTimeoutError("authorize", 10)
        _override(client, get_authorize_broker_token_use_case, use_case)

        response = client.post(f"{API}/auth/deriv/authorize-token", json={"token": "t"})
        assert response.status_code == 504

    def test_callback_opens_session(self, client) -> None:
        now = datetime(2024, 5, 15, tzinfo=timezone.utc)
        use_case = MagicMock()
        use_case.execute.return_value = BrokerLoginResult(
            session=SessionResult(
                token="tok",
                expires_at=now,
                user=UserResult("u1", "t@example.com", "Tina", None, None, now),
            ),
            deriv_user_id="42",
            demo_account_id="VRTC2",
            real_account_id="CR1",
            demo_balance=10000.0,
            real_balance=None,
        )
        _override(client, get_broker_login_use_case, use_case)

        response = client.get(f"{API}/auth/deriv/callback?acct1=CR1&token1=t1&cur1=usd&acct2=VRTC2&token2=t2")

        assert response.status_code == 200
        body = response.json()
        assert body["session"]["token"] == "tok"
        assert body["demoAccountId"] == "VRTC2"
        command = use_case.execute.call_args.args[0]
        assert [a.token for a in command.accounts] == ["t1", "t2"]

    def test_callback_without_tokens(self, client) -> None:
        response = client.get(f"{API}/auth/deriv/callback?acct1=CR1")
        assert response.status_code == 400

    def test_account_balance(self, client, login_as) -> None:
        use_case = MagicMock()
        use_case.execute.return_value = AccountBalance("CR1", 12.5, "USD")
        _override(client, get_account_balance_use_case, use_case)

        response = client.get(
            f"{API}/deriv/account-balance", params={"accountId": "CR1"}, headers=login_as()
        )

        assert response.status_code == 200
        assert response.json() == {"accountId": "CR1", "balance": 12.5, "currency": "USD"}


# ══════════════════════════════════════════════════════════════
# User settings, profile and saved items
# ══════════════════════════════════════════════════════════════


class TestUserEndpoints:
    def test_settings_missing_for_credentials_user(self, client, login_as) -> None:
        response = client.get(f"{API}/user/settings", headers=login_as())
        assert response.status_code == 404

    def test_select_account_type_without_settings(self, client, login_as) -> None:
        response = client.post(
            f"{API}/user/settings",
            json={"selectedDerivAccountType": "real"},
            headers=login_as(),
        )
        assert response.status_code == 404

    def test_update_profile(self, client, login_as) -> None:
        headers = login_as()
        response = client.put(f"{API}/user/profile", json={"displayName": "Tee"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["displayName"] == "Tee"

    def test_empty_profile_update(self, client, login_as) -> None:
        response = client.put(f"{API}/user/profile", json={}, headers=login_as())
        assert response.status_code == 400

    def test_delete_profile(self, client, login_as) -> None:
        headers = login_as()
        assert client.delete(f"{API}/user/profile", headers=headers).json()["message"] == "Account deleted"
        assert client.get(f"{API}/user/profile", headers=headers).status_code == 401

    def test_saved_items(self, client, login_as) -> None:
        headers = login_as()
        created = client.post(
            f"{API}/user/items",
            json={"title": "EUR note", "content": "watch 1.09", "tags": ["fx"]},
            headers=headers,
        )
        assert created.status_code == 201
        client.post(f"{API}/user/items", json={"title": "Other", "content": "c"}, headers=headers)

        assert len(client.get(f"{API}/user/items", headers=headers).json()) == 2
        tagged = client.get(f"{API}/user/items", params={"tag": "fx"}, headers=headers).json()
        assert [item["title"] for item in tagged] == ["EUR note"]
