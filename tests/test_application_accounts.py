"""
Tests for the accounts application layer (use cases).

Tests use cases with mocked ports. No real infrastructure needed.
Each test verifies orchestration logic, not persistence.
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from app.application.accounts.broker_auth import (
    AuthorizeBrokerTokenUseCase,
    BrokerLoginUseCase,
    split_accounts,
)
from app.application.accounts.dtos import (
    AccountBalanceQuery,
    BrokerCallbackAccount,
    BrokerLoginCommand,
    LoginCommand,
    PasswordResetConfirmCommand,
    PasswordResetRequestCommand,
    RegisterUserCommand,
    SaveItemCommand,
    SelectAccountTypeCommand,
    UpdateProfileCommand,
)
from app.application.accounts.password_reset import (
    GENERIC_RESET_MESSAGE,
    RequestPasswordResetUseCase,
    ResetPasswordUseCase,
)
from app.application.accounts.profile import (
    DeleteProfileUseCase,
    GetProfileUseCase,
    UpdateProfileUseCase,
)
from app.application.accounts.register_user import RegisterUserUseCase
from app.application.accounts.saved_items import SaveItemUseCase
from app.application.accounts.sessions import (
    AuthenticateSessionUseCase,
    LoginUseCase,
    LogoutUseCase,
    SessionIssuer,
)
from app.application.accounts.settings import (
    GetAccountBalanceUseCase,
    GetSettingsUseCase,
    SelectAccountTypeUseCase,
)
from app.domain.accounts.entities import (
    AuthProvider,
    PasswordResetToken,
    Session,
    User,
    UserSettings,
    utcnow,
)
from app.domain.accounts.errors import (
    BrokerTokenMissingError,
    DuplicateEmailError,
    EmptyProfileUpdateError,
    InvalidAccountTypeError,
    InvalidCredentialsError,
    InvalidResetTokenError,
    InvalidSessionError,
    SettingsNotFoundError,
    UserNotFoundError,
    WeakPasswordError,
)
from app.domain.trading.entities import AccountBalance, BrokerAccount, BrokerAuthorization
from app.domain.trading.errors import (
    BrokerAuthorizationError,
    BrokerError,
    BrokerProfileIncompleteError,
)

ALICE = User(id="u1", email="alice@example.com", name="Alice", hashed_password="hashed:secret123")


@pytest.fixture
def users() -> MagicMock:
    repo = MagicMock()
    repo.add.side_effect = lambda user: user
    repo.update.side_effect = lambda user: user
    return repo


@pytest.fixture
def hasher() -> MagicMock:
    mock = MagicMock()
    mock.hash.side_effect = lambda password: f"hashed:{password}"
    mock.verify.side_effect = lambda password, hashed: hashed == f"hashed:{password}"
    return mock


@pytest.fixture
def sessions() -> MagicMock:
    return MagicMock()


@pytest.fixture
def issuer(sessions) -> SessionIssuer:
    return SessionIssuer(sessions, ttl=timedelta(hours=24))


def _auth(**overrides) -> BrokerAuthorization:
    fields = dict(
        loginid="CR100",
        user_id="42",
        email="Trader@Example.com",
        fullname="Tina Trader",
        balance=250.0,
        currency="USD",
        accounts=(
            BrokerAccount("CR100", is_virtual=False, currency="USD"),
            BrokerAccount("VRTC200", is_virtual=True, currency="USD"),
        ),
    )
    fields.update(overrides)
    return BrokerAuthorization(**fields)


# ══════════════════════════════════════════════════════════════
# Registration, login and sessions
# ══════════════════════════════════════════════════════════════


class TestRegisterUserUseCase:
    """Tests for credentials sign-up."""

    def test_registers_with_hashed_password(self, users, hasher) -> None:
        users.get_by_email.return_value = None
        result = RegisterUserUseCase(users, hasher).execute(
            RegisterUserCommand(email=" Bob@Example.com ", password="secret123", name="Bob")
        )
        stored = users.add.call_args.args[0]
        assert result.email == "bob@example.com"
        assert stored.hashed_password == "hashed:secret123"
        assert stored.provider is AuthProvider.CREDENTIALS

    def test_short_password(self, users, hasher) -> None:
        with pytest.raises(WeakPasswordError):
            RegisterUserUseCase(users, hasher).execute(RegisterUserCommand("a@b.co", "12345"))
        users.add.assert_not_called()

    def test_duplicate_email(self, users, hasher) -> None:
        users.get_by_email.return_value = ALICE
        with pytest.raises(DuplicateEmailError):
            RegisterUserUseCase(users, hasher).execute(
                RegisterUserCommand("alice@example.com", "secret123")
            )


class TestLoginUseCase:
    """Tests for credentials login and session issuing."""

    def test_valid_credentials_open_a_session(self, users, hasher, issuer, sessions) -> None:
        users.get_by_email.return_value = ALICE
        result = LoginUseCase(users, hasher, issuer).execute(
            LoginCommand("ALICE@example.com", "secret123")
        )
        stored = sessions.add.call_args.args[0]
        assert result.token == stored.token
        assert result.user.id == "u1"
        assert stored.expires_at - utcnow() > timedelta(hours=23)

    def test_wrong_password(self, users, hasher, issuer, sessions) -> None:
        users.get_by_email.return_value = ALICE
        with pytest.raises(InvalidCredentialsError):
            LoginUseCase(users, hasher, issuer).execute(LoginCommand("alice@example.com", "nope"))
        sessions.add.assert_not_called()

    def test_broker_only_user_cannot_log_in(self, users, hasher, issuer) -> None:
        users.get_by_email.return_value = User(id="u2", email="d@example.com")
        with pytest.raises(InvalidCredentialsError):
            LoginUseCase(users, hasher, issuer).execute(LoginCommand("d@example.com", "x"))

    def test_unknown_email(self, users, hasher, issuer) -> None:
        users.get_by_email.return_value = None
        with pytest.raises(InvalidCredentialsError):
            LoginUseCase(users, hasher, issuer).execute(LoginCommand("x@example.com", "x"))


class TestAuthenticateSessionUseCase:
    def test_resolves_user(self, sessions, users) -> None:
        sessions.get.return_value = Session("tok", "u1", utcnow() + timedelta(hours=1))
        users.get_by_id.return_value = ALICE
        assert AuthenticateSessionUseCase(sessions, users).execute("tok") is ALICE

    def test_expired_session_is_purged(self, sessions, users) -> None:
        sessions.get.return_value = Session("tok", "u1", utcnow() - timedelta(seconds=1))
        with pytest.raises(InvalidSessionError, match="expired"):
            AuthenticateSessionUseCase(sessions, users).execute("tok")
        sessions.delete.assert_called_once_with("tok")

    def test_unknown_token(self, sessions, users) -> None:
        sessions.get.return_value = None
        with pytest.raises(InvalidSessionError):
            AuthenticateSessionUseCase(sessions, users).execute("tok")

    def test_logout_deletes_session(self, sessions) -> None:
        LogoutUseCase(sessions).execute("tok")
        sessions.delete.assert_called_once_with("tok")


# ══════════════════════════════════════════════════════════════
# Broker login
# ══════════════════════════════════════════════════════════════


class TestSplitAccounts:
    """Tests for picking demo and real accounts from an authorize reply."""

    def test_primary_balance_fills_its_side(self) -> None:
        assert split_accounts(_auth()) == ("VRTC200", None, "CR100", 250.0)

    def test_demo_primary(self) -> None:
        auth = _auth(loginid="VRTC200", balance=10000.0, accounts=())
        assert split_accounts(auth) == ("VRTC200", 10000.0, None, None)

    def test_listed_balance_wins(self) -> None:
        auth = _auth(accounts=(BrokerAccount("CR100", False, "USD", balance=5.0),))
        assert split_accounts(auth) == (None, None, "CR100", 5.0)


class TestAuthorizeBrokerTokenUseCase:
    def test_relays_identity(self) -> None:
        broker = MagicMock()
        broker.authorize.return_value = _auth()
        result = AuthorizeBrokerTokenUseCase(broker).execute("tok")
        assert (result.deriv_user_id, result.email, result.name) == ("42", "Trader@Example.com", "Tina Trader")

    def test_missing_email(self) -> None:
        broker = MagicMock()
        broker.authorize.return_value = _auth(email=None)
        with pytest.raises(BrokerProfileIncompleteError):
            AuthorizeBrokerTokenUseCase(broker).execute("tok")


class TestBrokerLoginUseCase:
    """Tests for the OAuth callback sign-in."""

    def _use_case(self, users, issuer, settings=None):
        broker = MagicMock()
        broker.authorize.return_value = _auth()
        linked = MagicMock()
        if settings is None:
            settings = MagicMock()
            settings.get.return_value = None
        return BrokerLoginUseCase(broker, users, linked, settings, issuer), broker, linked, settings

    def _command(self) -> BrokerLoginCommand:
        return BrokerLoginCommand(
            accounts=(
                BrokerCallbackAccount("CR100", "a1-real", "USD"),
                BrokerCallbackAccount("VRTC200", "a1-demo", "USD"),
            )
        )

    def test_creates_user_and_links_accounts(self, users, issuer) -> None:
        users.get_by_deriv_account_id.return_value = None
        users.get_by_email.return_value = None
        use_case, broker, linked, settings = self._use_case(users, issuer)

        result = use_case.execute(self._command())

        broker.authorize.assert_called_once_with("a1-real")
        created = users.add.call_args.args[0]
        assert created.email == "trader@example.com"
        assert created.provider is AuthProvider.DERIV
        assert created.deriv_account_id == "42"
        assert linked.upsert.call_args.args[0].access_token == "a1-real"
        saved = settings.save.call_args.args[0]
        assert (saved.deriv_demo_account_id, saved.deriv_real_account_id) == ("VRTC200", "CR100")
        assert saved.deriv_real_balance == 250.0
        assert saved.deriv_api_token == "a1-real"
        assert result.session.user.id == created.id

    def test_existing_user_keeps_previous_balances(self, users, issuer) -> None:
        existing = User(id="u9", email="trader@example.com", deriv_account_id="42")
        users.get_by_deriv_account_id.return_value = existing
        settings = MagicMock()
        settings.get.return_value = UserSettings(user_id="u9", deriv_demo_balance=99.0)
        use_case, _, _, settings = self._use_case(users, issuer, settings)

        use_case.execute(self._command())

        users.add.assert_not_called()
        assert users.update.call_args.args[0].name == "Tina Trader"
        assert settings.save.call_args.args[0].deriv_demo_balance == 99.0

    def test_no_tokens(self, users, issuer) -> None:
        use_case, broker, _, _ = self._use_case(users, issuer)
        with pytest.raises(BrokerAuthorizationError, match="No account tokens"):
            use_case.execute(BrokerLoginCommand(accounts=()))
        broker.authorize.assert_not_called()


# ══════════════════════════════════════════════════════════════
# Password reset
# ══════════════════════════════════════════════════════════════


class TestPasswordReset:
    """Tests for the two-step password reset."""

    def test_request_stores_token_and_sends_link(self, users) -> None:
        users.get_by_email.return_value = ALICE
        tokens, notifier = MagicMock(), MagicMock()
        use_case = RequestPasswordResetUseCase(
            users, tokens, notifier, "https://app.test/", timedelta(hours=1)
        )

        assert use_case.execute(PasswordResetRequestCommand("Alice@example.com")) == GENERIC_RESET_MESSAGE
        stored = tokens.replace_for_email.call_args.args[0]
        email, link = notifier.send_reset_link.call_args.args
        assert email == "alice@example.com"
        assert link == f"https://app.test/auth/reset-password?token={stored.token}"

    def test_unknown_email_gets_same_answer(self, users) -> None:
        users.get_by_email.return_value = None
        tokens, notifier = MagicMock(), MagicMock()
        use_case = RequestPasswordResetUseCase(users, tokens, notifier, "https://app.test", timedelta(hours=1))

        assert use_case.execute(PasswordResetRequestCommand("x@example.com")) == GENERIC_RESET_MESSAGE
        tokens.replace_for_email.assert_not_called()
        notifier.send_reset_link.assert_not_called()

    def test_delivery_failure_is_not_reported(self, users) -> None:
        users.get_by_email.return_value = ALICE
        notifier = MagicMock()
        notifier.send_reset_link.side_effect = RuntimeError("smtp down")
        use_case = RequestPasswordResetUseCase(users, MagicMock(), notifier, "https://app.test", timedelta(hours=1))
        assert use_case.execute(PasswordResetRequestCommand("alice@example.com")) == GENERIC_RESET_MESSAGE

    def test_confirm_rehashes_and_consumes_token(self, users, hasher) -> None:
        tokens = MagicMock()
        tokens.get.return_value = PasswordResetToken("alice@example.com", "t", utcnow() + timedelta(minutes=5))
        users.get_by_email.return_value = ALICE

        ResetPasswordUseCase(users, tokens, hasher).execute(PasswordResetConfirmCommand("t", "newpass1"))

        assert users.update.call_args.args[0].hashed_password == "hashed:newpass1"
        tokens.delete.assert_called_once_with("t")

    def test_expired_token_is_deleted(self, users, hasher) -> None:
        tokens = MagicMock()
        tokens.get.return_value = PasswordResetToken("alice@example.com", "t", utcnow() - timedelta(seconds=1))
        with pytest.raises(InvalidResetTokenError):
            ResetPasswordUseCase(users, tokens, hasher).execute(PasswordResetConfirmCommand("t", "newpass1"))
        tokens.delete.assert_called_once_with("t")
        users.update.assert_not_called()

    def test_unknown_token(self, users, hasher) -> None:
        tokens = MagicMock()
        tokens.get.return_value = None
        with pytest.raises(InvalidResetTokenError):
            ResetPasswordUseCase(users, tokens, hasher).execute(PasswordResetConfirmCommand("t", "newpass1"))


# ══════════════════════════════════════════════════════════════
# Settings and balances
# ══════════════════════════════════════════════════════════════


class TestSettingsUseCases:
    """Tests for account type selection and balance queries."""

    def _settings(self, **overrides) -> MagicMock:
        repo = MagicMock()
        repo.get.return_value = UserSettings(
            user_id="u1",
            deriv_demo_account_id="VRTC200",
            deriv_real_account_id="CR100",
            deriv_api_token="tok",
            **overrides,
        )
        repo.save.side_effect = lambda settings: settings
        return repo

    def test_get_settings_hides_token(self) -> None:
        result = GetSettingsUseCase(self._settings()).execute("u1")
        assert result.has_deriv_api_token
        assert not hasattr(result, "deriv_api_token")

    def test_get_missing_settings(self) -> None:
        repo = MagicMock()
        repo.get.return_value = None
        with pytest.raises(SettingsNotFoundError):
            GetSettingsUseCase(repo).execute("u1")

    def test_select_real_refreshes_balance(self) -> None:
        broker = MagicMock()
        broker.get_balance.return_value = AccountBalance("CR100", 321.0, "USD")
        result = SelectAccountTypeUseCase(self._settings(), broker).execute(
            SelectAccountTypeCommand("u1", "real")
        )
        broker.get_balance.assert_called_once_with("tok", "CR100")
        assert result.selected_deriv_account_type == "real"
        assert result.deriv_real_balance == 321.0
        assert result.last_balance_sync is not None

    def test_select_survives_broker_failure(self) -> None:
        broker = MagicMock()
        broker.get_balance.side_effect = BrokerError("down")
        result = SelectAccountTypeUseCase(self._settings(deriv_demo_balance=5.0), broker).execute(
            SelectAccountTypeCommand("u1", "demo")
        )
        assert result.selected_deriv_account_type == "demo"
        assert result.deriv_demo_balance == 5.0

    def test_select_invalid_type(self) -> None:
        with pytest.raises(InvalidAccountTypeError):
            SelectAccountTypeUseCase(self._settings(), MagicMock()).execute(
                SelectAccountTypeCommand("u1", "paper")
            )

    def test_select_without_token(self) -> None:
        repo = MagicMock()
        repo.get.return_value = UserSettings(user_id="u1")
        with pytest.raises(BrokerTokenMissingError):
            SelectAccountTypeUseCase(repo, MagicMock()).execute(SelectAccountTypeCommand("u1", "demo"))

    def test_balance_query_uses_stored_token(self) -> None:
        broker = MagicMock()
        broker.get_balance.return_value = AccountBalance("VRTC200", 10000.0, "USD")
        balance = GetAccountBalanceUseCase(self._settings(), broker).execute(
            AccountBalanceQuery("u1", "VRTC200")
        )
        assert balance.balance == 10000.0
        broker.get_balance.assert_called_once_with("tok", "VRTC200")


# ══════════════════════════════════════════════════════════════
# Profile and saved items
# ══════════════════════════════════════════════════════════════


class TestProfileUseCases:
    def test_update_display_name(self, users) -> None:
        users.get_by_id.return_value = ALICE
        result = UpdateProfileUseCase(users).execute(UpdateProfileCommand("u1", display_name="Ali"))
        assert result.display_name == "Ali"

    def test_empty_update(self, users) -> None:
        with pytest.raises(EmptyProfileUpdateError):
            UpdateProfileUseCase(users).execute(UpdateProfileCommand("u1"))

    def test_get_unknown_user(self, users) -> None:
        users.get_by_id.return_value = None
        with pytest.raises(UserNotFoundError):
            GetProfileUseCase(users).execute("u1")

    def test_delete_unknown_user(self, users) -> None:
        users.delete.return_value = False
        with pytest.raises(UserNotFoundError):
            DeleteProfileUseCase(users).execute("u1")


class TestSaveItemUseCase:
    def test_saves_with_tags(self) -> None:
        items = MagicMock()
        items.add.side_effect = lambda item: item
        result = SaveItemUseCase(items).execute(
            SaveItemCommand("u1", "Note", "body", tags=("fx", "news"))
        )
        assert result.tags == ["fx", "news"]
        assert items.add.call_args.args[0].user_id == "u1"
