"""
Adapter: User settings repository.

Implements UserSettingsRepository on the ``user_settings`` table.
The broker API token is encrypted at rest.
"""

import logging
from typing import Optional

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Engine

from app.domain.accounts.entities import AccountType, UserSettings
from app.domain.accounts.ports import UserSettingsRepository
from app.infrastructure.persistence.database import as_utc
from app.infrastructure.persistence.tables import user_settings
from app.shared.security.passwords import SecretBox

logger = logging.getLogger(__name__)


class SqlUserSettingsRepository(UserSettingsRepository):
    """SQL adapter for per-user broker settings."""

    def __init__(self, engine: Engine, secret_box: SecretBox) -> None:
        self._engine = engine
        self._secret_box = secret_box

    def _decrypt(self, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        try:
            return self._secret_box.decrypt(value)
        except ValueError:
            logger.warning("Stored broker token could not be decrypted; treating it as missing.")
            return None

    def get(self, user_id: str) -> Optional[UserSettings]:
        with self._engine.connect() as conn:
            row = conn.execute(
                select(user_settings).where(user_settings.c.user_id == user_id)
            ).first()
        if row is None:
            return None
        return UserSettings(
            user_id=row.user_id,
            deriv_demo_account_id=row.deriv_demo_account_id,
            deriv_real_account_id=row.deriv_real_account_id,
            deriv_demo_balance=row.deriv_demo_balance,
            deriv_real_balance=row.deriv_real_balance,
            deriv_api_token=self._decrypt(row.deriv_api_token),
            last_balance_sync=as_utc(row.last_balance_sync),
            selected_deriv_account_type=AccountType(row.selected_deriv_account_type),
            theme=row.theme,
            language=row.language,
            notifications_enabled=row.notifications_enabled,
        )

    def save(self, settings: UserSettings) -> UserSettings:
        values = {
            "deriv_demo_account_id": settings.deriv_demo_account_id,
            "deriv_real_account_id": settings.deriv_real_account_id,
            "deriv_demo_balance": settings.deriv_demo_balance,
            "deriv_real_balance": settings.deriv_real_balance,
            "deriv_api_token": (
                self._secret_box.encrypt(settings.deriv_api_token)
                if settings.deriv_api_token
                else None
            ),
            "last_balance_sync": settings.last_balance_sync,
            "selected_deriv_account_type": settings.selected_deriv_account_type.value,
            "theme": settings.theme,
            "language": settings.language,
            "notifications_enabled": settings.notifications_enabled,
        }
        with self._engine.begin() as conn:
            result = conn.execute(
                update(user_settings)
                .where(user_settings.c.user_id == settings.user_id)
                .values(**values)
            )
            if result.rowcount == 0:
                conn.execute(insert(user_settings).values(user_id=settings.user_id, **values))
        return settings
