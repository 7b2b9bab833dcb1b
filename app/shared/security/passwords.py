"""
Password hashing and secret encryption.

Passwords are hashed with bcrypt through passlib. Broker API tokens are
stored encrypted with Fernet so that a database dump does not leak
tradable credentials.
"""

import logging
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from passlib.context import CryptContext

from app.domain.accounts.ports import PasswordHasher

logger = logging.getLogger(__name__)

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class BcryptPasswordHasher(PasswordHasher):
    """PasswordHasher adapter backed by passlib's bcrypt scheme."""

    def hash(self, password: str) -> str:
        if not password:
            raise ValueError("Password must not be empty")
        return _pwd_context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        if not password or not hashed:
            return False
        try:
            return _pwd_context.verify(password, hashed)
        except ValueError:
            # Malformed hash in storage.
            logger.warning("Stored password hash could not be parsed.")
            return False


class SecretBox:
    """Symmetric encryption for secrets persisted in the database.

    Args:
        key: urlsafe base64 Fernet key. When missing an ephemeral key is
            generated, which makes stored secrets unreadable after a restart.
    """

    def __init__(self, key: Optional[str] = None) -> None:
        if not key:
            logger.warning(
                "No ENCRYPTION_KEY configured; using an ephemeral key. "
                "Stored broker tokens will not survive a restart."
            )
            key = Fernet.generate_key().decode()
        try:
            self._fernet = Fernet(key.encode())
        except ValueError as exc:
            raise ValueError(f"Invalid ENCRYPTION_KEY: {exc}") from exc

    def encrypt(self, plain: str) -> str:
        if not plain:
            raise ValueError("Secret must not be empty")
        return self._fernet.encrypt(plain.encode()).decode()

    def decrypt(self, token: str) -> str:
        try:
            return self._fernet.decrypt(token.encode()).decode()
        except InvalidToken as exc:
            raise ValueError(
                "Secret could not be decrypted; it is corrupted or the "
                "ENCRYPTION_KEY changed."
            ) from exc
