"""
Use case: Register a credentials user.

Input: RegisterUserCommand (email, password, name)
Output: UserResult
Side effects: Inserts a users row with a bcrypt password hash.
Failure cases: WeakPasswordError, DuplicateEmailError.
"""

import logging

from app.application.accounts.dtos import RegisterUserCommand, UserResult
from app.domain.accounts.entities import AuthProvider, User, new_id
from app.domain.accounts.errors import DuplicateEmailError, WeakPasswordError
from app.domain.accounts.ports import PasswordHasher, UserRepository

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def check_password_strength(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise WeakPasswordError(MIN_PASSWORD_LENGTH)


class RegisterUserUseCase:
    def __init__(self, users: UserRepository, hasher: PasswordHasher) -> None:
        self._users = users
        self._hasher = hasher

    def execute(self, command: RegisterUserCommand) -> UserResult:
        check_password_strength(command.password)
        email = command.email.strip().lower()

        if self._users.get_by_email(email) is not None:
            raise DuplicateEmailError(email)

        user = self._users.add(
            User(
                id=new_id(),
                email=email,
                name=command.name,
                hashed_password=self._hasher.hash(command.password),
                provider=AuthProvider.CREDENTIALS,
            )
        )
        logger.info("Registered user %s", user.id)
        return UserResult.from_user(user)
