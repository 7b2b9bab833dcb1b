"""
Adapter: Session and OAuth linkage repositories.

Bearer sessions live in ``sessions``; provider links in ``accounts``.
"""

from typing import Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Engine

from app.domain.accounts.entities import LinkedAccount, Session
from app.domain.accounts.ports import LinkedAccountRepository, SessionRepository
from app.infrastructure.persistence.database import as_utc
from app.infrastructure.persistence.tables import accounts, sessions
from app.shared.security.passwords import SecretBox


class SqlSessionRepository(SessionRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def add(self, session: Session) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                insert(sessions).values(
                    token=session.token,
                    user_id=session.user_id,
                    expires_at=session.expires_at,
                )
            )

    def get(self, token: str) -> Optional[Session]:
        with self._engine.connect() as conn:
            row = conn.execute(select(sessions).where(sessions.c.token == token)).first()
        if row is None:
            return None
        return Session(token=row.token, user_id=row.user_id, expires_at=as_utc(row.expires_at))

    def delete(self, token: str) -> None:
        with self._engine.begin() as conn:
            conn.execute(delete(sessions).where(sessions.c.token == token))


class SqlLinkedAccountRepository(LinkedAccountRepository):
    """Stores provider links; access tokens are encrypted at rest."""

    def __init__(self, engine: Engine, secret_box: SecretBox) -> None:
        self._engine = engine
        self._secret_box = secret_box

    def upsert(self, account: LinkedAccount) -> None:
        token = (
            self._secret_box.encrypt(account.access_token) if account.access_token else None
        )
        match = (accounts.c.provider == account.provider) & (
            accounts.c.provider_account_id == account.provider_account_id
        )
        with self._engine.begin() as conn:
            result = conn.execute(
                update(accounts)
                .where(match)
                .values(user_id=account.user_id, access_token=token, token_type=account.token_type)
            )
            if result.rowcount == 0:
                conn.execute(
                    insert(accounts).values(
                        user_id=account.user_id,
                        type="oauth",
                        provider=account.provider,
                        provider_account_id=account.provider_account_id,
                        access_token=token,
                        token_type=account.token_type,
                    )
                )
