"""
Port interfaces (ABCs) for the accounts bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Optional

from app.domain.accounts.entities import (
    LinkedAccount,
    PasswordResetToken,
    SavedItem,
    Session,
    User,
    UserSettings,
)


class UserRepository(ABC):
    """Port for persisting and retrieving users."""

    @abstractmethod
    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Return the user with this (lower-cased) email, or None."""
        raise NotImplementedError

    @abstractmethod
    def get_by_deriv_account_id(self, deriv_account_id: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    def add(self, user: User) -> User:
        """Insert a new user.

        Raises:
            DuplicateEmailError: If the email is already taken.
        """
        raise NotImplementedError

    @abstractmethod
    def update(self, user: User) -> User:
        raise NotImplementedError

    @abstractmethod
    def delete(self, user_id: str) -> bool:
        """Delete a user and everything owned by them.

        Returns:
            True if a row was deleted.
        """
        raise NotImplementedError


class UserSettingsRepository(ABC):
    """Port for the per-user broker settings row."""

    @abstractmethod
    def get(self, user_id: str) -> Optional[UserSettings]:
        raise NotImplementedError

    @abstractmethod
    def save(self, settings: UserSettings) -> UserSettings:
        """Insert or update the settings row of ``settings.user_id``."""
        raise NotImplementedError


class LinkedAccountRepository(ABC):
    """Port for OAuth provider linkage rows."""

    @abstractmethod
    def upsert(self, account: LinkedAccount) -> None:
        """Insert or refresh the (provider, provider_account_id) link."""
        raise NotImplementedError


class SessionRepository(ABC):
    """Port for bearer session storage."""

    @abstractmethod
    def add(self, session: Session) -> None:
        raise NotImplementedError

    @abstractmethod
    def get(self, token: str) -> Optional[Session]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, token: str) -> None:
        raise NotImplementedError


class PasswordResetTokenRepository(ABC):
    """Port for password reset tokens."""

    @abstractmethod
    def replace_for_email(self, token: PasswordResetToken) -> None:
        """Drop every token of ``token.email`` and store the new one."""
        raise NotImplementedError

    @abstractmethod
    def get(self, token: str) -> Optional[PasswordResetToken]:
        raise NotImplementedError

    @abstractmethod
    def delete(self, token: str) -> None:
        raise NotImplementedError


class SavedItemRepository(ABC):
    """Port for items bookmarked by users."""

    @abstractmethod
    def add(self, item: SavedItem) -> SavedItem:
        raise NotImplementedError

    @abstractmethod
    def list_for_user(self, user_id: str, tag: Optional[str] = None) -> list[SavedItem]:
        """Return a user's items, newest first, optionally filtered by tag."""
        raise NotImplementedError


class PasswordHasher(ABC):
    """Port for one-way password hashing."""

    @abstractmethod
    def hash(self, password: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def verify(self, password: str, hashed: str) -> bool:
        raise NotImplementedError


class ResetLinkNotifier(ABC):
    """Port for delivering password reset links to users."""

    @abstractmethod
    def send_reset_link(self, email: str, reset_link: str) -> None:
        raise NotImplementedError
