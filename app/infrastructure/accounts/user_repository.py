"""
Adapter: User repository.

Implements the UserRepository port and the trading context's
UserDirectory port on top of the ``users`` table.
"""

import logging
from typing import Any, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from app.domain.accounts.entities import AuthProvider, User
from app.domain.accounts.errors import DuplicateEmailError
from app.domain.accounts.ports import UserRepository
from app.domain.trading.ports import UserDirectory
from app.infrastructure.persistence.database import as_utc
from app.infrastructure.persistence.tables import users

logger = logging.getLogger(__name__)


def _to_row(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "hashed_password": user.hashed_password,
        "provider": user.provider.value,
        "deriv_account_id": user.deriv_account_id,
        "google_id": user.google_id,
        "picture": user.picture,
        "display_name": user.display_name,
        "avatar_data_url": user.avatar_data_url,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


def _to_entity(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        name=row.name,
        hashed_password=row.hashed_password,
        provider=AuthProvider(row.provider),
        deriv_account_id=row.deriv_account_id,
        google_id=row.google_id,
        picture=row.picture,
        display_name=row.display_name,
        avatar_data_url=row.avatar_data_url,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


class SqlUserRepository(UserRepository, UserDirectory):
    """SQL adapter for users."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def _fetch_one(self, where) -> Optional[User]:
        with self._engine.connect() as conn:
            row = conn.execute(select(users).where(where)).first()
        return _to_entity(row) if row is not None else None

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._fetch_one(users.c.id == user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self._fetch_one(users.c.email == email.lower())

    def get_by_deriv_account_id(self, deriv_account_id: str) -> Optional[User]:
        return self._fetch_one(users.c.deriv_account_id == deriv_account_id)

    def exists(self, user_id: str) -> bool:
        with self._engine.connect() as conn:
            row = conn.execute(select(users.c.id).where(users.c.id == user_id)).first()
        return row is not None

    def add(self, user: User) -> User:
        try:
            with self._engine.begin() as conn:
                conn.execute(insert(users).values(**_to_row(user)))
        except IntegrityError as exc:
            logger.info("Rejected duplicate user insert for id=%s", user.id)
            raise DuplicateEmailError(user.email) from exc
        return user

    def update(self, user: User) -> User:
        row = _to_row(user)
        row.pop("id")
        row.pop("created_at")
        with self._engine.begin() as conn:
            conn.execute(update(users).where(users.c.id == user.id).values(**row))
        return user

    def delete(self, user_id: str) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(delete(users).where(users.c.id == user_id))
        return result.rowcount > 0
