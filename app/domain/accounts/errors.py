"""
Domain-specific errors for the accounts bounded context.

All errors raised from the accounts domain must be defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""


class AccountsDomainError(Exception):
    """Base error for all accounts domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class UserNotFoundError(AccountsDomainError):
    """Raised when a user cannot be found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class DuplicateEmailError(AccountsDomainError):
    """Raised when registering an email that already has an account."""

    def __init__(self, email: str) -> None:
        super().__init__(f"Email already registered: {email}")
        self.email = email


class WeakPasswordError(AccountsDomainError):
    """Raised when a password is shorter than the allowed minimum."""

    def __init__(self, min_length: int) -> None:
        super().__init__(f"Password must be at least {min_length} characters long")
        self.min_length = min_length


class InvalidCredentialsError(AccountsDomainError):
    """Raised when an email/password pair does not match."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class InvalidSessionError(AccountsDomainError):
    """Raised when a bearer session token is unknown or expired."""

    def __init__(self, reason: str = "Session is invalid or expired") -> None:
        super().__init__(reason)


class InvalidResetTokenError(AccountsDomainError):
    """Raised when a password reset token is unknown or expired."""

    def __init__(self, expired: bool = False) -> None:
        reason = "Password reset token has expired" if expired else "Invalid password reset token"
        super().__init__(reason)
        self.expired = expired


class SettingsNotFoundError(AccountsDomainError):
    """Raised when a user has no settings row yet."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"Settings not found for user: {user_id}")
        self.user_id = user_id


class InvalidAccountTypeError(AccountsDomainError):
    """Raised when an account type other than demo/real is requested."""

    def __init__(self, account_type: str) -> None:
        super().__init__(f"Invalid account type: {account_type}. Must be 'demo' or 'real'.")
        self.account_type = account_type


class BrokerTokenMissingError(AccountsDomainError):
    """Raised when a broker operation needs a stored token the user lacks."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"No broker API token linked for user: {user_id}")
        self.user_id = user_id


class EmptyProfileUpdateError(AccountsDomainError):
    """Raised when a profile update carries no fields."""

    def __init__(self) -> None:
        super().__init__("No profile fields to update")
