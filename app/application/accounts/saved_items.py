"""
Use cases: Save and list bookmarked items.

Input: SaveItemCommand / (user id, tag)
Output: SavedItemResult / list[SavedItemResult]
Side effects: Inserts saved_items rows.
"""

from typing import Optional

from app.application.accounts.dtos import SavedItemResult, SaveItemCommand
from app.domain.accounts.entities import SavedItem, new_id
from app.domain.accounts.ports import SavedItemRepository


class SaveItemUseCase:
    def __init__(self, items: SavedItemRepository) -> None:
        self._items = items

    def execute(self, command: SaveItemCommand) -> SavedItemResult:
        item = self._items.add(
            SavedItem(
                id=new_id(),
                user_id=command.user_id,
                title=command.title,
                content=command.content,
                url=command.url,
                tags=tuple(command.tags),
            )
        )
        return SavedItemResult.from_item(item)


class ListSavedItemsUseCase:
    def __init__(self, items: SavedItemRepository) -> None:
        self._items = items

    def execute(self, user_id: str, tag: Optional[str] = None) -> list[SavedItemResult]:
        return [SavedItemResult.from_item(item) for item in self._items.list_for_user(user_id, tag)]
