"""
Pydantic schemas for the accounts API.

These schemas enforce input validation and define the API contract.
No business logic belongs here. Password length is checked by the
use case so the error message stays the same for every entry point.
"""

from datetime import datetime

from pydantic import Field

from app.interfaces.schemas import ApiModel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(ApiModel):
    """Request schema for credentials sign-up.

    Attributes:
        email: Login email.
        password: Plain password; at least 6 characters.
        name: Optional display name.
    """

    email: str = Field(..., max_length=320, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1, max_length=128)
    name: str | None = Field(default=None, max_length=120)


class LoginRequest(ApiModel):
    email: str = Field(..., max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(ApiModel):
    """A user profile as returned to clients."""

    id: str
    email: str
    name: str | None
    display_name: str | None
    avatar_data_url: str | None
    created_at: datetime


class SessionResponse(ApiModel):
    """A freshly opened session. Send ``token`` as a bearer token."""

    token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse


class PasswordResetRequest(ApiModel):
    email: str = Field(..., max_length=320)


class PasswordResetConfirmRequest(ApiModel):
    token: str = Field(..., min_length=1, max_length=256)
    password: str = Field(..., min_length=1, max_length=128)


class AuthorizeTokenRequest(ApiModel):
    """Request schema for the broker auth bridge."""

    token: str = Field(..., min_length=1, max_length=256)


class BrokerIdentityResponse(ApiModel):
    deriv_user_id: str
    email: str
    name: str | None


class BrokerLoginResponse(ApiModel):
    """Outcome of the broker OAuth callback."""

    session: SessionResponse
    deriv_user_id: str
    demo_account_id: str | None
    real_account_id: str | None
    demo_balance: float | None
    real_balance: float | None


class SettingsResponse(ApiModel):
    """User settings; the stored broker token is never returned."""

    user_id: str
    deriv_demo_account_id: str | None
    deriv_real_account_id: str | None
    deriv_demo_balance: float | None
    deriv_real_balance: float | None
    last_balance_sync: datetime | None
    selected_deriv_account_type: str
    has_deriv_api_token: bool
    theme: str
    language: str
    notifications_enabled: bool


class SelectAccountTypeRequest(ApiModel):
    selected_deriv_account_type: str = Field(..., min_length=1, max_length=16)


class UpdateProfileRequest(ApiModel):
    display_name: str | None = Field(default=None, max_length=120)
    avatar_data_url: str | None = Field(default=None, max_length=2_000_000)


class SaveItemRequest(ApiModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    url: str | None = Field(default=None, max_length=2048)
    tags: list[str] = Field(default_factory=list, max_length=20)


class SavedItemResponse(ApiModel):
    id: str
    title: str
    content: str
    url: str | None
    tags: list[str]
    created_at: datetime


class AccountBalanceResponse(ApiModel):
    account_id: str
    balance: float
    currency: str
