"""
Adapter: Password reset token repository.

Implements PasswordResetTokenRepository on ``password_reset_tokens``.
"""

from typing import Optional

from sqlalchemy import delete, insert, select
from sqlalchemy.engine import Engine

from app.domain.accounts.entities import PasswordResetToken
from app.domain.accounts.ports import PasswordResetTokenRepository
from app.infrastructure.persistence.database import as_utc
from app.infrastructure.persistence.tables import password_reset_tokens


class SqlPasswordResetTokenRepository(PasswordResetTokenRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def replace_for_email(self, token: PasswordResetToken) -> None:
        """Delete older tokens of the email and insert ``token`` atomically."""
        with self._engine.begin() as conn:
            conn.execute(
                delete(password_reset_tokens).where(password_reset_tokens.c.email == token.email)
            )
            conn.execute(
                insert(password_reset_tokens).values(
                    email=token.email, token=token.token, expires_at=token.expires_at
                )
            )

    def get(self, token: str) -> Optional[PasswordResetToken]:
        with self._engine.connect() as conn:
            row = conn.execute(
                select(password_reset_tokens).where(password_reset_tokens.c.token == token)
            ).first()
        if row is None:
            return None
        return PasswordResetToken(
            email=row.email, token=row.token, expires_at=as_utc(row.expires_at)
        )

    def delete(self, token: str) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                delete(password_reset_tokens).where(password_reset_tokens.c.token == token)
            )
