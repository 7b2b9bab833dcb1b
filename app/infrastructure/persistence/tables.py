"""
Relational schema of the application.

SQLAlchemy Core table definitions shared by every repository adapter.
All child tables hang off ``users`` with cascading deletes.
"""

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()


def _owner(nullable: bool = False) -> Column:
    return Column(
        "user_id",
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=nullable,
        index=True,
    )


users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("email", String(320), nullable=False, unique=True),
    Column("name", String(200)),
    Column("hashed_password", String(200)),
    Column("provider", String(32), nullable=False, default="credentials"),
    Column("deriv_account_id", String(64), unique=True),
    Column("google_id", String(64), unique=True),
    Column("picture", Text),
    Column("display_name", String(200)),
    Column("avatar_data_url", Text),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

accounts = Table(
    "accounts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    _owner(),
    Column("type", String(32), nullable=False, default="oauth"),
    Column("provider", String(64), nullable=False),
    Column("provider_account_id", String(128), nullable=False),
    Column("access_token", Text),
    Column("token_type", String(32)),
    UniqueConstraint("provider", "provider_account_id", name="uq_accounts_provider"),
)

sessions = Table(
    "sessions",
    metadata,
    Column("token", String(128), primary_key=True),
    _owner(),
    Column("expires_at", DateTime(timezone=True), nullable=False),
)

user_settings = Table(
    "user_settings",
    metadata,
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("theme", String(16), nullable=False, default="light"),
    Column("language", String(8), nullable=False, default="en"),
    Column("notifications_enabled", Boolean, nullable=False, default=True),
    Column("deriv_demo_account_id", String(64)),
    Column("deriv_real_account_id", String(64)),
    Column("deriv_demo_balance", Float),
    Column("deriv_real_balance", Float),
    Column("deriv_api_token", Text),
    Column("last_balance_sync", DateTime(timezone=True)),
    Column("selected_deriv_account_type", String(8), nullable=False, default="demo"),
)

trades = Table(
    "trades",
    metadata,
    Column("id", String(36), primary_key=True),
    _owner(),
    Column("symbol", String(64), nullable=False),
    Column("type", String(16), nullable=False),
    Column("amount", Float, nullable=False),
    Column("price", Float, nullable=False),
    Column("total_value", Float, nullable=False),
    Column("status", String(32), nullable=False, default="open", index=True),
    Column("open_time", DateTime(timezone=True), nullable=False),
    Column("close_time", DateTime(timezone=True)),
    Column("profit", Float),
    Column("metadata", JSON),
    Column("account_type", String(8)),
    Column("deriv_account_id", String(64)),
    Column("deriv_contract_id", BigInteger, unique=True),
    Column("ai_strategy_id", String(64)),
    Column("duration_seconds", Integer),
    Column("stop_loss", Float),
    Column("pnl", Float),
    Column("exit_price", Float),
)

profit_summaries = Table(
    "profit_summaries",
    metadata,
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("total_profit", Float, nullable=False, default=0.0),
    Column("total_trades", Integer, nullable=False, default=0),
    Column("winning_trades", Integer, nullable=False, default=0),
    Column("losing_trades", Integer, nullable=False, default=0),
    Column("win_rate", Float, nullable=False, default=0.0),
    Column("last_updated", DateTime(timezone=True), nullable=False),
)

password_reset_tokens = Table(
    "password_reset_tokens",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(320), nullable=False, index=True),
    Column("token", String(128), nullable=False, unique=True),
    Column("expires_at", DateTime(timezone=True), nullable=False),
)

saved_items = Table(
    "saved_items",
    metadata,
    Column("id", String(36), primary_key=True),
    _owner(),
    Column("title", String(300), nullable=False),
    Column("content", Text, nullable=False),
    Column("url", Text),
    Column("tags", JSON),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

notifications = Table(
    "notifications",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    _owner(),
    Column("type", String(32), nullable=False),
    Column("message", Text, nullable=False),
    Column("read", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

watchlists = Table(
    "watchlists",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    _owner(),
    Column("name", String(120), nullable=False),
    Column("symbols", JSON),
)

price_alerts = Table(
    "price_alerts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    _owner(),
    Column("symbol", String(64), nullable=False),
    Column("price", Float, nullable=False),
    Column("condition", String(8), nullable=False),
    Column("triggered", Boolean, nullable=False, default=False),
)

api_keys = Table(
    "api_keys",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    _owner(),
    Column("exchange", String(64), nullable=False),
    Column("api_key", Text, nullable=False),
    Column("secret_key", Text, nullable=False),
    Column("passphrase", Text),
)
