"""
Use cases: Open, resolve and close bearer sessions.

Input: LoginCommand / bearer token
Output: SessionResult / User
Side effects: Inserts or deletes sessions rows.
Failure cases: InvalidCredentialsError, InvalidSessionError.
"""

import logging
import secrets
from datetime import timedelta

from app.application.accounts.dtos import LoginCommand, SessionResult, UserResult
from app.domain.accounts.entities import Session, User, utcnow
from app.domain.accounts.errors import InvalidCredentialsError, InvalidSessionError
from app.domain.accounts.ports import PasswordHasher, SessionRepository, UserRepository

logger = logging.getLogger(__name__)

SESSION_TOKEN_BYTES = 32


class SessionIssuer:
    """Creates session rows; shared by every login flow."""

    def __init__(self, sessions: SessionRepository, ttl: timedelta) -> None:
        self._sessions = sessions
        self._ttl = ttl

    def issue(self, user: User) -> SessionResult:
        session = Session(
            token=secrets.token_urlsafe(SESSION_TOKEN_BYTES),
            user_id=user.id,
            expires_at=utcnow() + self._ttl,
        )
        self._sessions.add(session)
        logger.info("Opened session for user %s", user.id)
        return SessionResult(
            token=session.token,
            expires_at=session.expires_at,
            user=UserResult.from_user(user),
        )


class LoginUseCase:
    """Credentials login.

    Broker-only users have no password and can never log in here.
    """

    def __init__(
        self, users: UserRepository, hasher: PasswordHasher, issuer: SessionIssuer
    ) -> None:
        self._users = users
        self._hasher = hasher
        self._issuer = issuer

    def execute(self, command: LoginCommand) -> SessionResult:
        user = self._users.get_by_email(command.email.strip().lower())
        if user is None or not user.has_password:
            raise InvalidCredentialsError()
        if not self._hasher.verify(command.password, user.hashed_password):
            logger.info("Rejected login for user %s", user.id)
            raise InvalidCredentialsError()
        return self._issuer.issue(user)


class LogoutUseCase:
    def __init__(self, sessions: SessionRepository) -> None:
        self._sessions = sessions

    def execute(self, token: str) -> None:
        self._sessions.delete(token)


class AuthenticateSessionUseCase:
    """Resolve a bearer token to its user; expired sessions are purged."""

    def __init__(self, sessions: SessionRepository, users: UserRepository) -> None:
        self._sessions = sessions
        self._users = users

    def execute(self, token: str) -> User:
        session = self._sessions.get(token)
        if session is None:
            raise InvalidSessionError()
        if session.is_expired(utcnow()):
            self._sessions.delete(token)
            raise InvalidSessionError("Session has expired")
        user = self._users.get_by_id(session.user_id)
        if user is None:
            raise InvalidSessionError()
        return user
