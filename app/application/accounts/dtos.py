"""
Data Transfer Objects for the accounts application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from app.domain.accounts.entities import SavedItem, User, UserSettings


@dataclass(frozen=True)
class RegisterUserCommand:
    """Input DTO for credentials sign-up.

    Attributes:
        email: Login email; stored lower-cased.
        password: Plain password, at least 6 characters.
        name: Optional display name.
    """

    email: str
    password: str
    name: Optional[str] = None


@dataclass(frozen=True)
class UserResult:
    id: str
    email: str
    name: Optional[str]
    display_name: Optional[str]
    avatar_data_url: Optional[str]
    created_at: datetime

    @staticmethod
    def from_user(user: User) -> "UserResult":
        return UserResult(
            id=user.id,
            email=user.email,
            name=user.name,
            display_name=user.display_name,
            avatar_data_url=user.avatar_data_url,
            created_at=user.created_at,
        )


@dataclass(frozen=True)
class LoginCommand:
    email: str
    password: str


@dataclass(frozen=True)
class SessionResult:
    """Output DTO for a newly opened session.

    Attributes:
        token: Opaque bearer token to send as ``Authorization: Bearer``.
        expires_at: Instant after which the token is rejected.
        user: The signed-in user.
    """

    token: str
    expires_at: datetime
    user: UserResult


@dataclass(frozen=True)
class BrokerIdentityResult:
    """What the broker auth bridge relays about a token's owner."""

    deriv_user_id: str
    email: str
    name: Optional[str]


@dataclass(frozen=True)
class BrokerCallbackAccount:
    """One ``acctN``/``tokenN``/``curN`` triple of the OAuth redirect."""

    loginid: str
    token: str
    currency: Optional[str] = None


@dataclass(frozen=True)
class BrokerLoginCommand:
    accounts: tuple[BrokerCallbackAccount, ...]


@dataclass(frozen=True)
class BrokerLoginResult:
    """Output DTO of the broker OAuth callback.

    Attributes:
        session: Session opened for the upserted user.
        deriv_user_id: Broker-side user id.
        demo_account_id: Linked demo login id, if any.
        real_account_id: Linked real login id, if any.
        demo_balance: Demo balance reported at login.
        real_balance: Real balance reported at login.
    """

    session: SessionResult
    deriv_user_id: str
    demo_account_id: Optional[str]
    real_account_id: Optional[str]
    demo_balance: Optional[float]
    real_balance: Optional[float]


@dataclass(frozen=True)
class PasswordResetRequestCommand:
    email: str


@dataclass(frozen=True)
class PasswordResetConfirmCommand:
    token: str
    password: str


@dataclass(frozen=True)
class UpdateProfileCommand:
    user_id: str
    display_name: Optional[str] = None
    avatar_data_url: Optional[str] = None


@dataclass(frozen=True)
class SettingsResult:
    """User settings as exposed to clients; the stored token never leaves."""

    user_id: str
    deriv_demo_account_id: Optional[str]
    deriv_real_account_id: Optional[str]
    deriv_demo_balance: Optional[float]
    deriv_real_balance: Optional[float]
    last_balance_sync: Optional[datetime]
    selected_deriv_account_type: str
    has_deriv_api_token: bool
    theme: str
    language: str
    notifications_enabled: bool

    @staticmethod
    def from_settings(settings: UserSettings) -> "SettingsResult":
        return SettingsResult(
            user_id=settings.user_id,
            deriv_demo_account_id=settings.deriv_demo_account_id,
            deriv_real_account_id=settings.deriv_real_account_id,
            deriv_demo_balance=settings.deriv_demo_balance,
            deriv_real_balance=settings.deriv_real_balance,
            last_balance_sync=settings.last_balance_sync,
            selected_deriv_account_type=settings.selected_deriv_account_type.value,
            has_deriv_api_token=settings.deriv_api_token is not None,
            theme=settings.theme,
            language=settings.language,
            notifications_enabled=settings.notifications_enabled,
        )


@dataclass(frozen=True)
class SelectAccountTypeCommand:
    user_id: str
    account_type: str


@dataclass(frozen=True)
class AccountBalanceQuery:
    user_id: str
    account_id: str


@dataclass(frozen=True)
class SaveItemCommand:
    user_id: str
    title: str
    content: str
    url: Optional[str] = None
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class SavedItemResult:
    id: str
    title: str
    content: str
    url: Optional[str]
    tags: list[str]
    created_at: datetime

    @staticmethod
    def from_item(item: SavedItem) -> "SavedItemResult":
        return SavedItemResult(
            id=item.id,
            title=item.title,
            content=item.content,
            url=item.url,
            tags=list(item.tags),
            created_at=item.created_at,
        )
