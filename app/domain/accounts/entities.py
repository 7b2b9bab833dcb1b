"""
Domain entities for the accounts bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


class AccountType(Enum):
    """Broker account flavour a user trades on."""

    DEMO = "demo"
    REAL = "real"


class AuthProvider(Enum):
    """How a user signed up."""

    CREDENTIALS = "credentials"
    DERIV = "deriv"
    GOOGLE = "google"


@dataclass(frozen=True)
class User:
    """A dashboard user.

    Users created through the broker login have no password hash
    and carry the broker's user id in ``deriv_account_id``.
    """

    id: str
    email: str
    name: Optional[str] = None
    hashed_password: Optional[str] = None
    provider: AuthProvider = AuthProvider.CREDENTIALS
    deriv_account_id: Optional[str] = None
    google_id: Optional[str] = None
    picture: Optional[str] = None
    display_name: Optional[str] = None
    avatar_data_url: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def has_password(self) -> bool:
        return self.hashed_password is not None


@dataclass(frozen=True)
class UserSettings:
    """Broker account linkage and cached balances for one user."""

    user_id: str
    deriv_demo_account_id: Optional[str] = None
    deriv_real_account_id: Optional[str] = None
    deriv_demo_balance: Optional[float] = None
    deriv_real_balance: Optional[float] = None
    deriv_api_token: Optional[str] = None
    last_balance_sync: Optional[datetime] = None
    selected_deriv_account_type: AccountType = AccountType.DEMO
    theme: str = "light"
    language: str = "en"
    notifications_enabled: bool = True

    def account_id_for(self, account_type: AccountType) -> Optional[str]:
        """Return the broker login id linked for the given account type."""
        if account_type is AccountType.DEMO:
            return self.deriv_demo_account_id
        return self.deriv_real_account_id


@dataclass(frozen=True)
class LinkedAccount:
    """OAuth linkage between a user and an external provider account."""

    user_id: str
    provider: str
    provider_account_id: str
    access_token: Optional[str] = None
    token_type: str = "bearer"


@dataclass(frozen=True)
class Session:
    """An opaque bearer session issued after a successful login."""

    token: str
    user_id: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class PasswordResetToken:
    """A one-shot password reset token bound to an email address."""

    email: str
    token: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass(frozen=True)
class SavedItem:
    """A bookmarked snippet saved by a user from the dashboard."""

    id: str
    user_id: str
    title: str
    content: str
    url: Optional[str] = None
    tags: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=utcnow)
