"""
Dependency injection for the accounts bounded context.

Wires use cases to their infrastructure adapters and resolves the
bearer session of the caller. This is the composition root for
accounts; routers never construct adapters themselves.
"""

from datetime import timedelta

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.application.accounts.broker_auth import AuthorizeBrokerTokenUseCase, BrokerLoginUseCase
from app.application.accounts.password_reset import (
    RequestPasswordResetUseCase,
    ResetPasswordUseCase,
)
from app.application.accounts.profile import (
    DeleteProfileUseCase,
    GetProfileUseCase,
    UpdateProfileUseCase,
)
from app.application.accounts.register_user import RegisterUserUseCase
from app.application.accounts.saved_items import ListSavedItemsUseCase, SaveItemUseCase
from app.application.accounts.sessions import (
    AuthenticateSessionUseCase,
    LoginUseCase,
    LogoutUseCase,
    SessionIssuer,
)
from app.application.accounts.settings import (
    GetAccountBalanceUseCase,
    GetSettingsUseCase,
    SelectAccountTypeUseCase,
)
from app.core.config import settings
from app.domain.accounts.entities import User
from app.domain.accounts.errors import InvalidSessionError
from app.infrastructure.accounts.reset_notifier import LoggingResetLinkNotifier
from app.infrastructure.accounts.reset_token_repository import SqlPasswordResetTokenRepository
from app.infrastructure.accounts.saved_item_repository import SqlSavedItemRepository
from app.infrastructure.accounts.session_repository import (
    SqlLinkedAccountRepository,
    SqlSessionRepository,
)
from app.infrastructure.accounts.settings_repository import SqlUserSettingsRepository
from app.infrastructure.accounts.user_repository import SqlUserRepository
from app.interfaces.dependencies import (
    engine,
    get_broker_gateway,
    get_password_hasher,
    get_secret_box,
)

_bearer = HTTPBearer(auto_error=False)


def _session_issuer() -> SessionIssuer:
    return SessionIssuer(
        SqlSessionRepository(engine()),
        ttl=timedelta(hours=settings.session_ttl_hours),
    )


def _settings_repository() -> SqlUserSettingsRepository:
    return SqlUserSettingsRepository(engine(), get_secret_box())


def get_register_user_use_case() -> RegisterUserUseCase:
    """Build RegisterUserUseCase with its infrastructure dependencies."""
    return RegisterUserUseCase(SqlUserRepository(engine()), get_password_hasher())


def get_login_use_case() -> LoginUseCase:
    """Build LoginUseCase with its infrastructure dependencies."""
    return LoginUseCase(SqlUserRepository(engine()), get_password_hasher(), _session_issuer())


def get_logout_use_case() -> LogoutUseCase:
    """Build LogoutUseCase with its infrastructure dependencies."""
    return LogoutUseCase(SqlSessionRepository(engine()))


def get_authenticate_session_use_case() -> AuthenticateSessionUseCase:
    """Build AuthenticateSessionUseCase with its infrastructure dependencies."""
    return AuthenticateSessionUseCase(SqlSessionRepository(engine()), SqlUserRepository(engine()))


def get_request_password_reset_use_case() -> RequestPasswordResetUseCase:
    """Build RequestPasswordResetUseCase with its infrastructure dependencies."""
    return RequestPasswordResetUseCase(
        SqlUserRepository(engine()),
        SqlPasswordResetTokenRepository(engine()),
        LoggingResetLinkNotifier(),
        base_url=settings.app_base_url,
        ttl=timedelta(minutes=settings.password_reset_ttl_minutes),
    )


def get_reset_password_use_case() -> ResetPasswordUseCase:
    """Build ResetPasswordUseCase with its infrastructure dependencies."""
    return ResetPasswordUseCase(
        SqlUserRepository(engine()),
        SqlPasswordResetTokenRepository(engine()),
        get_password_hasher(),
    )


def get_authorize_broker_token_use_case() -> AuthorizeBrokerTokenUseCase:
    """Build AuthorizeBrokerTokenUseCase with its infrastructure dependencies."""
    return AuthorizeBrokerTokenUseCase(get_broker_gateway())


def get_broker_login_use_case() -> BrokerLoginUseCase:
    """Build BrokerLoginUseCase with its infrastructure dependencies."""
    return BrokerLoginUseCase(
        get_broker_gateway(),
        SqlUserRepository(engine()),
        SqlLinkedAccountRepository(engine(), get_secret_box()),
        _settings_repository(),
        _session_issuer(),
    )


def get_settings_use_case() -> GetSettingsUseCase:
    """Build GetSettingsUseCase with its infrastructure dependencies."""
    return GetSettingsUseCase(_settings_repository())


def get_select_account_type_use_case() -> SelectAccountTypeUseCase:
    """Build SelectAccountTypeUseCase with its infrastructure dependencies."""
    return SelectAccountTypeUseCase(_settings_repository(), get_broker_gateway())


def get_account_balance_use_case() -> GetAccountBalanceUseCase:
    """Build GetAccountBalanceUseCase with its infrastructure dependencies."""
    return GetAccountBalanceUseCase(_settings_repository(), get_broker_gateway())


def get_profile_use_case() -> GetProfileUseCase:
    return GetProfileUseCase(SqlUserRepository(engine()))


def get_update_profile_use_case() -> UpdateProfileUseCase:
    return UpdateProfileUseCase(SqlUserRepository(engine()))


def get_delete_profile_use_case() -> DeleteProfileUseCase:
    return DeleteProfileUseCase(SqlUserRepository(engine()))


def get_save_item_use_case() -> SaveItemUseCase:
    return SaveItemUseCase(SqlSavedItemRepository(engine()))


def get_list_saved_items_use_case() -> ListSavedItemsUseCase:
    return ListSavedItemsUseCase(SqlSavedItemRepository(engine()))


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    """Return the raw bearer token of the request."""
    if credentials is None or not credentials.credentials:
        raise InvalidSessionError("Missing bearer token")
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_bearer_token),
    use_case: AuthenticateSessionUseCase = Depends(get_authenticate_session_use_case),
) -> User:
    """Resolve the signed-in user from the bearer session token."""
    return use_case.execute(token)
