"""
Use cases: Read, update and delete the signed-in user's profile.

Input: user id / UpdateProfileCommand
Output: UserResult
Side effects: Updates or deletes the users row (deletion cascades).
Failure cases: UserNotFoundError, EmptyProfileUpdateError.
"""

import logging
from dataclasses import replace

from app.application.accounts.dtos import UpdateProfileCommand, UserResult
from app.domain.accounts.entities import utcnow
from app.domain.accounts.errors import EmptyProfileUpdateError, UserNotFoundError
from app.domain.accounts.ports import UserRepository

logger = logging.getLogger(__name__)


class GetProfileUseCase:
    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def execute(self, user_id: str) -> UserResult:
        user = self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return UserResult.from_user(user)


class UpdateProfileUseCase:
    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def execute(self, command: UpdateProfileCommand) -> UserResult:
        if command.display_name is None and command.avatar_data_url is None:
            raise EmptyProfileUpdateError()

        user = self._users.get_by_id(command.user_id)
        if user is None:
            raise UserNotFoundError(command.user_id)

        changes = {"updated_at": utcnow()}
        if command.display_name is not None:
            changes["display_name"] = command.display_name
        if command.avatar_data_url is not None:
            changes["avatar_data_url"] = command.avatar_data_url
        return UserResult.from_user(self._users.update(replace(user, **changes)))


class DeleteProfileUseCase:
    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def execute(self, user_id: str) -> None:
        if not self._users.delete(user_id):
            raise UserNotFoundError(user_id)
        logger.info("Deleted user %s", user_id)
