"""
Tests for the SQL repository adapters.

Every test runs against a fresh in-memory SQLite database.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from app.domain.accounts.entities import (
    AccountType,
    LinkedAccount,
    PasswordResetToken,
    SavedItem,
    Session,
    User,
    UserSettings,
    new_id,
)
from app.domain.accounts.errors import DuplicateEmailError
from app.domain.trading.entities import ProfitSummary, Trade, TradeStatus
from app.infrastructure.accounts.reset_token_repository import SqlPasswordResetTokenRepository
from app.infrastructure.accounts.saved_item_repository import SqlSavedItemRepository
from app.infrastructure.accounts.session_repository import (
    SqlLinkedAccountRepository,
    SqlSessionRepository,
)
from app.infrastructure.accounts.settings_repository import SqlUserSettingsRepository
from app.infrastructure.accounts.user_repository import SqlUserRepository
from app.infrastructure.persistence.tables import accounts, user_settings
from app.infrastructure.trading.profit_summary_repository import SqlProfitSummaryRepository
from app.infrastructure.trading.trade_repository import SqlTradeRepository
from app.shared.security.passwords import SecretBox

T0 = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def users(engine) -> SqlUserRepository:
    return SqlUserRepository(engine)


@pytest.fixture
def user(users) -> User:
    return users.add(User(id=new_id(), email="alice@example.com", name="Alice"))


@pytest.fixture
def secret_box() -> SecretBox:
    return SecretBox()


# ══════════════════════════════════════════════════════════════
# Users
# ══════════════════════════════════════════════════════════════


class TestSqlUserRepository:
    """Tests for the users table adapter."""

    def test_add_and_fetch(self, users, user) -> None:
        assert users.get_by_id(user.id).email == "alice@example.com"
        assert users.get_by_email("ALICE@example.com").id == user.id
        assert users.exists(user.id)
        assert not users.exists("missing")

    def test_duplicate_email_rejected(self, users, user) -> None:
        with pytest.raises(DuplicateEmailError):
            users.add(User(id=new_id(), email="alice@example.com"))

    def test_lookup_by_broker_id(self, users) -> None:
        added = users.add(User(id=new_id(), email="b@example.com", deriv_account_id="CR900"))
        assert users.get_by_deriv_account_id("CR900").id == added.id

    def test_update(self, users, user) -> None:
        users.update(User(**{**user.__dict__, "display_name": "Al"}))
        assert users.get_by_id(user.id).display_name == "Al"

    def test_delete_cascades_to_children(self, engine, users, user, secret_box) -> None:
        SqlUserSettingsRepository(engine, secret_box).save(UserSettings(user_id=user.id))
        SqlTradeRepository(engine).add(
            Trade.open_new(user.id, "EUR/USD", "buy", 1.0, 1.1, 1.1)
        )
        assert users.delete(user.id)
        assert not users.delete(user.id)
        with engine.connect() as conn:
            assert conn.execute(select(user_settings)).first() is None
        assert SqlTradeRepository(engine).list_for_user(user.id) == []


# ══════════════════════════════════════════════════════════════
# Settings, sessions, linked accounts
# ══════════════════════════════════════════════════════════════


class TestSqlUserSettingsRepository:
    """Tests for settings persistence and token encryption."""

    def test_token_is_encrypted_at_rest(self, engine, user, secret_box) -> None:
        repo = SqlUserSettingsRepository(engine, secret_box)
        repo.save(
            UserSettings(
                user_id=user.id,
                deriv_demo_account_id="VRTC1",
                deriv_api_token="a1-secret-token",
                selected_deriv_account_type=AccountType.REAL,
            )
        )
        with engine.connect() as conn:
            stored = conn.execute(select(user_settings.c.deriv_api_token)).scalar_one()
        assert stored != "a1-secret-token"

        loaded = repo.get(user.id)
        assert loaded.deriv_api_token == "a1-secret-token"
        assert loaded.selected_deriv_account_type is AccountType.REAL
        assert loaded.deriv_demo_account_id == "VRTC1"

    def test_save_updates_existing_row(self, engine, user, secret_box) -> None:
        repo = SqlUserSettingsRepository(engine, secret_box)
        repo.save(UserSettings(user_id=user.id, theme="light"))
        repo.save(UserSettings(user_id=user.id, theme="dark"))
        assert repo.get(user.id).theme == "dark"

    def test_unreadable_token_treated_as_missing(self, engine, user) -> None:
        SqlUserSettingsRepository(engine, SecretBox()).save(
            UserSettings(user_id=user.id, deriv_api_token="tok")
        )
        assert SqlUserSettingsRepository(engine, SecretBox()).get(user.id).deriv_api_token is None

    def test_missing_settings(self, engine, secret_box) -> None:
        assert SqlUserSettingsRepository(engine, secret_box).get("nobody") is None


class TestSqlSessionRepository:
    def test_roundtrip_and_delete(self, engine, user) -> None:
        repo = SqlSessionRepository(engine)
        repo.add(Session(token="tok", user_id=user.id, expires_at=T0))
        session = repo.get("tok")
        assert session.user_id == user.id
        assert session.expires_at == T0
        repo.delete("tok")
        assert repo.get("tok") is None


class TestSqlLinkedAccountRepository:
    def test_upsert_keeps_one_row_per_provider_account(self, engine, user, secret_box) -> None:
        repo = SqlLinkedAccountRepository(engine, secret_box)
        repo.upsert(LinkedAccount(user.id, "deriv", "CR1", access_token="first"))
        repo.upsert(LinkedAccount(user.id, "deriv", "CR1", access_token="second"))
        with engine.connect() as conn:
            rows = conn.execute(select(accounts)).all()
        assert len(rows) == 1
        assert secret_box.decrypt(rows[0].access_token) == "second"


# ══════════════════════════════════════════════════════════════
# Reset tokens and saved items
# ══════════════════════════════════════════════════════════════


class TestSqlPasswordResetTokenRepository:
    def test_replace_removes_previous_tokens(self, engine) -> None:
        repo = SqlPasswordResetTokenRepository(engine)
        repo.replace_for_email(PasswordResetToken("a@example.com", "old", T0))
        repo.replace_for_email(PasswordResetToken("a@example.com", "new", T0))
        assert repo.get("old") is None
        assert repo.get("new").email == "a@example.com"
        repo.delete("new")
        assert repo.get("new") is None


class TestSqlSavedItemRepository:
    def test_list_newest_first_with_tag_filter(self, engine, user) -> None:
        repo = SqlSavedItemRepository(engine)
        repo.add(SavedItem(new_id(), user.id, "Old", "c", tags=("fx",), created_at=T0))
        repo.add(
            SavedItem(
                new_id(), user.id, "New", "c", tags=("crypto",), created_at=T0 + timedelta(hours=1)
            )
        )
        assert [i.title for i in repo.list_for_user(user.id)] == ["New", "Old"]
        assert [i.title for i in repo.list_for_user(user.id, tag="fx")] == ["Old"]


# ══════════════════════════════════════════════════════════════
# Trades and profit summaries
# ══════════════════════════════════════════════════════════════


class TestSqlTradeRepository:
    """Tests for the trade ledger table adapter."""

    def test_add_get_and_update(self, engine, user) -> None:
        repo = SqlTradeRepository(engine)
        trade = repo.add(
            Trade.open_new(
                user.id,
                "EUR/USD",
                "CALL",
                5.0,
                1.1,
                5.0,
                open_time=T0,
                deriv_contract_id=123,
                account_type=AccountType.DEMO,
                metadata={"reasoning": "x"},
            )
        )
        assert repo.get(trade.id).metadata == {"reasoning": "x"}
        assert repo.get_by_contract_id(123).id == trade.id

        repo.update(
            Trade(**{**trade.__dict__, "status": TradeStatus.WON, "pnl": 4.2, "close_time": T0})
        )
        updated = repo.get(trade.id)
        assert updated.status is TradeStatus.WON
        assert updated.pnl == 4.2
        assert updated.account_type is AccountType.DEMO
        assert updated.close_time == T0

    def test_history_newest_first(self, engine, user) -> None:
        repo = SqlTradeRepository(engine)
        for hours in (0, 2, 1):
            repo.add(
                Trade.open_new(
                    user.id, f"S{hours}", "buy", 1.0, 1.0, 1.0, open_time=T0 + timedelta(hours=hours)
                )
            )
        assert [t.symbol for t in repo.list_for_user(user.id)] == ["S2", "S1", "S0"]

    def test_list_closed_filters_status_and_window(self, engine, user) -> None:
        repo = SqlTradeRepository(engine)
        repo.add(Trade.open_new(user.id, "open", "buy", 1.0, 1.0, 1.0))
        repo.add(
            Trade.open_new(
                user.id, "old", "buy", 1.0, 1.0, 1.0,
                status=TradeStatus.CLOSED, close_time=T0 - timedelta(hours=6), profit=1.0,
            )
        )
        repo.add(
            Trade.open_new(
                user.id, "recent", "buy", 1.0, 1.0, 1.0,
                status=TradeStatus.CLOSED, close_time=T0 - timedelta(minutes=5), profit=1.0,
            )
        )
        assert [t.symbol for t in repo.list_closed(user.id)] == ["recent", "old"]
        assert [t.symbol for t in repo.list_closed(user.id, since=T0 - timedelta(hours=5))] == [
            "recent"
        ]


class TestSqlProfitSummaryRepository:
    def test_upsert_inserts_then_updates(self, engine, user) -> None:
        repo = SqlProfitSummaryRepository(engine)
        assert repo.get(user.id) is None
        repo.upsert(ProfitSummary(user.id, 1, 1, 0, 2.0, 100.0, T0))
        repo.upsert(ProfitSummary(user.id, 2, 1, 1, 1.0, 50.0, T0))
        summary = repo.get(user.id)
        assert summary.total_trades == 2
        assert summary.win_rate == 50.0
        assert summary.last_updated == T0
