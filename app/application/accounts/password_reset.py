"""
Use cases: Request and confirm a password reset.

The request step always answers with the same generic message so the
endpoint cannot be used to probe which emails are registered.

Input: PasswordResetRequestCommand / PasswordResetConfirmCommand
Output: generic message / None
Side effects: Replaces password_reset_tokens rows, hands a link to the
    ResetLinkNotifier, rewrites the user's password hash.
Failure cases: WeakPasswordError, InvalidResetTokenError, UserNotFoundError.
"""

import logging
import secrets
from dataclasses import replace
from datetime import timedelta

from app.application.accounts.dtos import (
    PasswordResetConfirmCommand,
    PasswordResetRequestCommand,
)
from app.application.accounts.register_user import check_password_strength
from app.domain.accounts.entities import PasswordResetToken, utcnow
from app.domain.accounts.errors import InvalidResetTokenError, UserNotFoundError
from app.domain.accounts.ports import (
    PasswordHasher,
    PasswordResetTokenRepository,
    ResetLinkNotifier,
    UserRepository,
)

logger = logging.getLogger(__name__)

RESET_TOKEN_BYTES = 32
GENERIC_RESET_MESSAGE = (
    "If your email is in our system, you will receive a password reset link shortly."
)


class RequestPasswordResetUseCase:
    def __init__(
        self,
        users: UserRepository,
        tokens: PasswordResetTokenRepository,
        notifier: ResetLinkNotifier,
        base_url: str,
        ttl: timedelta,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._notifier = notifier
        self._base_url = base_url.rstrip("/")
        self._ttl = ttl

    def execute(self, command: PasswordResetRequestCommand) -> str:
        email = command.email.strip().lower()
        user = self._users.get_by_email(email)
        if user is None or not user.has_password:
            logger.info("Password reset requested for an unknown or password-less account")
            return GENERIC_RESET_MESSAGE

        token = secrets.token_hex(RESET_TOKEN_BYTES)
        self._tokens.replace_for_email(
            PasswordResetToken(email=email, token=token, expires_at=utcnow() + self._ttl)
        )
        link = f"{self._base_url}/auth/reset-password?token={token}"
        try:
            self._notifier.send_reset_link(email, link)
        except Exception:
            logger.exception("Failed to deliver password reset link for user %s", user.id)
        return GENERIC_RESET_MESSAGE


class ResetPasswordUseCase:
    def __init__(
        self,
        users: UserRepository,
        tokens: PasswordResetTokenRepository,
        hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._hasher = hasher

    def execute(self, command: PasswordResetConfirmCommand) -> None:
        """Set a new password for the token's owner.

        Raises:
            WeakPasswordError: If the new password is too short.
            InvalidResetTokenError: If the token is unknown or expired;
                expired tokens are deleted.
            UserNotFoundError: If the token's email has no account.
        """
        check_password_strength(command.password)

        stored = self._tokens.get(command.token)
        if stored is None:
            raise InvalidResetTokenError()
        if stored.is_expired(utcnow()):
            self._tokens.delete(stored.token)
            raise InvalidResetTokenError(expired=True)

        user = self._users.get_by_email(stored.email)
        if user is None:
            raise UserNotFoundError(stored.email)

        self._users.update(
            replace(
                user,
                hashed_password=self._hasher.hash(command.password),
                updated_at=utcnow(),
            )
        )
        self._tokens.delete(stored.token)
        logger.info("Password reset completed for user %s", user.id)
