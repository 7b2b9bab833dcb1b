"""
User router.

Settings, profile, saved items and broker balance lookups for the
signed-in user. Every route requires a bearer session.
"""

from fastapi import APIRouter, Depends, Query, status

from app.application.accounts.dtos import (
    AccountBalanceQuery,
    SavedItemResult,
    SaveItemCommand,
    SelectAccountTypeCommand,
    SettingsResult,
    UpdateProfileCommand,
)
from app.application.accounts.profile import (
    DeleteProfileUseCase,
    GetProfileUseCase,
    UpdateProfileUseCase,
)
from app.application.accounts.saved_items import ListSavedItemsUseCase, SaveItemUseCase
from app.application.accounts.settings import (
    GetAccountBalanceUseCase,
    GetSettingsUseCase,
    SelectAccountTypeUseCase,
)
from app.domain.accounts.entities import User
from app.interfaces.accounts.dependencies import (
    get_account_balance_use_case,
    get_current_user,
    get_delete_profile_use_case,
    get_list_saved_items_use_case,
    get_profile_use_case,
    get_save_item_use_case,
    get_select_account_type_use_case,
    get_settings_use_case,
    get_update_profile_use_case,
)
from app.interfaces.accounts.router import user_response
from app.interfaces.accounts.schemas import (
    AccountBalanceResponse,
    SavedItemResponse,
    SaveItemRequest,
    SelectAccountTypeRequest,
    SettingsResponse,
    UpdateProfileRequest,
    UserResponse,
)
from app.interfaces.schemas import ErrorResponse, MessageResponse

router = APIRouter(prefix="/user", tags=["user"])
broker_router = APIRouter(prefix="/deriv", tags=["deriv"])


def _settings_response(result: SettingsResult) -> SettingsResponse:
    return SettingsResponse.model_validate(result, from_attributes=True)


def _item_response(result: SavedItemResult) -> SavedItemResponse:
    return SavedItemResponse.model_validate(result, from_attributes=True)


@router.get(
    "/settings",
    response_model=SettingsResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Get user settings",
)
def get_settings(
    user: User = Depends(get_current_user),
    use_case: GetSettingsUseCase = Depends(get_settings_use_case),
) -> SettingsResponse:
    """Return the caller's settings."""
    return _settings_response(use_case.execute(user.id))


@router.post(
    "/settings",
    response_model=SettingsResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Select the active broker account",
    description="Switch between the demo and real account and refresh its balance.",
)
def select_account_type(
    body: SelectAccountTypeRequest,
    user: User = Depends(get_current_user),
    use_case: SelectAccountTypeUseCase = Depends(get_select_account_type_use_case),
) -> SettingsResponse:
    """Select demo or real as the active broker account."""
    result = use_case.execute(
        SelectAccountTypeCommand(
            user_id=user.id, account_type=body.selected_deriv_account_type
        )
    )
    return _settings_response(result)


@router.get(
    "/profile",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Get profile",
)
def get_profile(
    user: User = Depends(get_current_user),
    use_case: GetProfileUseCase = Depends(get_profile_use_case),
) -> UserResponse:
    return user_response(use_case.execute(user.id))


@router.put(
    "/profile",
    response_model=UserResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
    summary="Update profile",
    description="Update the display name and/or avatar; at least one is required.",
)
def update_profile(
    body: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    use_case: UpdateProfileUseCase = Depends(get_update_profile_use_case),
) -> UserResponse:
    result = use_case.execute(
        UpdateProfileCommand(
            user_id=user.id,
            display_name=body.display_name,
            avatar_data_url=body.avatar_data_url,
        )
    )
    return user_response(result)


@router.delete(
    "/profile",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Delete account",
    description="Delete the user and everything they own.",
)
def delete_profile(
    user: User = Depends(get_current_user),
    use_case: DeleteProfileUseCase = Depends(get_delete_profile_use_case),
) -> MessageResponse:
    use_case.execute(user.id)
    return MessageResponse(message="Account deleted")


@router.get(
    "/items",
    response_model=list[SavedItemResponse],
    responses={401: {"model": ErrorResponse}},
    summary="List saved items",
)
def list_saved_items(
    tag: str | None = Query(default=None, max_length=50),
    user: User = Depends(get_current_user),
    use_case: ListSavedItemsUseCase = Depends(get_list_saved_items_use_case),
) -> list[SavedItemResponse]:
    """List the caller's saved items, optionally filtered by tag."""
    return [_item_response(item) for item in use_case.execute(user.id, tag)]


@router.post(
    "/items",
    response_model=SavedItemResponse,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}},
    summary="Save an item",
)
def save_item(
    body: SaveItemRequest,
    user: User = Depends(get_current_user),
    use_case: SaveItemUseCase = Depends(get_save_item_use_case),
) -> SavedItemResponse:
    result = use_case.execute(
        SaveItemCommand(
            user_id=user.id,
            title=body.title,
            content=body.content,
            url=body.url,
            tags=tuple(body.tags),
        )
    )
    return _item_response(result)


@broker_router.get(
    "/account-balance",
    response_model=AccountBalanceResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
    summary="Broker account balance",
    description="Fetch the live balance of one of the caller's linked broker accounts.",
)
def get_account_balance(
    account_id: str = Query(..., alias="accountId", min_length=1, max_length=32),
    user: User = Depends(get_current_user),
    use_case: GetAccountBalanceUseCase = Depends(get_account_balance_use_case),
) -> AccountBalanceResponse:
    """Return the balance of a linked broker account."""
    balance = use_case.execute(AccountBalanceQuery(user_id=user.id, account_id=account_id))
    return AccountBalanceResponse(
        account_id=balance.loginid, balance=balance.balance, currency=balance.currency
    )
