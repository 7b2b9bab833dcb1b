"""
Adapter: Saved item repository.

Tags are stored as a JSON array; tag filtering happens in Python so the
query stays portable between SQLite and PostgreSQL.
"""

from typing import Optional

from sqlalchemy import insert, select
from sqlalchemy.engine import Engine

from app.domain.accounts.entities import SavedItem
from app.domain.accounts.ports import SavedItemRepository
from app.infrastructure.persistence.database import as_utc
from app.infrastructure.persistence.tables import saved_items


class SqlSavedItemRepository(SavedItemRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def add(self, item: SavedItem) -> SavedItem:
        with self._engine.begin() as conn:
            conn.execute(
                insert(saved_items).values(
                    id=item.id,
                    user_id=item.user_id,
                    title=item.title,
                    content=item.content,
                    url=item.url,
                    tags=list(item.tags),
                    created_at=item.created_at,
                )
            )
        return item

    def list_for_user(self, user_id: str, tag: Optional[str] = None) -> list[SavedItem]:
        query = (
            select(saved_items)
            .where(saved_items.c.user_id == user_id)
            .order_by(saved_items.c.created_at.desc())
        )
        with self._engine.connect() as conn:
            rows = conn.execute(query).all()
        items = [
            SavedItem(
                id=row.id,
                user_id=row.user_id,
                title=row.title,
                content=row.content,
                url=row.url,
                tags=tuple(row.tags or ()),
                created_at=as_utc(row.created_at),
            )
            for row in rows
        ]
        if tag is not None:
            items = [item for item in items if tag in item.tags]
        return items
