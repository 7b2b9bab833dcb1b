"""
Authentication router.

Exposes sign-up, credentials login/logout, password reset and the
Deriv broker auth bridge. Routes validate input, call a use case and
map the result. No business logic belongs here.
"""

import logging
import re

from fastapi import APIRouter, Depends, Request, status

from app.application.accounts.broker_auth import AuthorizeBrokerTokenUseCase, BrokerLoginUseCase
from app.application.accounts.dtos import (
    BrokerCallbackAccount,
    BrokerLoginCommand,
    LoginCommand,
    PasswordResetConfirmCommand,
    PasswordResetRequestCommand,
    RegisterUserCommand,
    SessionResult,
    UserResult,
)
from app.application.accounts.password_reset import (
    RequestPasswordResetUseCase,
    ResetPasswordUseCase,
)
from app.application.accounts.register_user import RegisterUserUseCase
from app.application.accounts.sessions import LoginUseCase, LogoutUseCase
from app.core.config import settings
from app.interfaces.accounts.dependencies import (
    get_authorize_broker_token_use_case,
    get_bearer_token,
    get_broker_login_use_case,
    get_login_use_case,
    get_logout_use_case,
    get_register_user_use_case,
    get_request_password_reset_use_case,
    get_reset_password_use_case,
)
from app.interfaces.accounts.schemas import (
    AuthorizeTokenRequest,
    BrokerIdentityResponse,
    BrokerLoginResponse,
    LoginRequest,
    PasswordResetConfirmRequest,
    PasswordResetRequest,
    RegisterRequest,
    SessionResponse,
    UserResponse,
)
from app.interfaces.schemas import ErrorResponse, MessageResponse
from app.shared.security.rate_limiting import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

_ACCOUNT_PARAM = re.compile(r"^acct(\d+)$")


def user_response(result: UserResult) -> UserResponse:
    return UserResponse(
        id=result.id,
        email=result.email,
        name=result.name,
        display_name=result.display_name,
        avatar_data_url=result.avatar_data_url,
        created_at=result.created_at,
    )


def session_response(result: SessionResult) -> SessionResponse:
    return SessionResponse(
        token=result.token,
        expires_at=result.expires_at,
        user=user_response(result.user),
    )


def parse_callback_accounts(params) -> tuple[BrokerCallbackAccount, ...]:
    """Collect ``acctN``/``tokenN``/``curN`` triples ordered by N.

    Entries without a token are ignored.
    """
    indexed = []
    for key, loginid in params.items():
        match = _ACCOUNT_PARAM.match(key)
        if match is None or not loginid:
            continue
        index = match.group(1)
        token = params.get(f"token{index}")
        if not token:
            continue
        indexed.append(
            (
                int(index),
                BrokerCallbackAccount(
                    loginid=loginid, token=token, currency=params.get(f"cur{index}")
                ),
            )
        )
    return tuple(account for _, account in sorted(indexed, key=lambda item: item[0]))


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 400: {"model": ErrorResponse}},
    summary="Register a user",
    description="Create a credentials account. Emails are stored lower-cased.",
)
@limiter.limit(settings.rate_limit_auth)
def register(
    request: Request,
    body: RegisterRequest,
    use_case: RegisterUserUseCase = Depends(get_register_user_use_case),
) -> UserResponse:
    """Register a new user with email and password."""
    result = use_case.execute(
        RegisterUserCommand(email=body.email, password=body.password, name=body.name)
    )
    return user_response(result)


@router.post(
    "/login",
    response_model=SessionResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Credentials login",
    description="Exchange email and password for a bearer session token.",
)
@limiter.limit(settings.rate_limit_auth)
def login(
    request: Request,
    body: LoginRequest,
    use_case: LoginUseCase = Depends(get_login_use_case),
) -> SessionResponse:
    """Open a session for valid credentials."""
    return session_response(use_case.execute(LoginCommand(email=body.email, password=body.password)))


@router.post(
    "/logout",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Logout",
)
def logout(
    token: str = Depends(get_bearer_token),
    use_case: LogoutUseCase = Depends(get_logout_use_case),
) -> MessageResponse:
    """Delete the caller's session."""
    use_case.execute(token)
    return MessageResponse(message="Logged out")


@router.post(
    "/password-reset/request",
    response_model=MessageResponse,
    summary="Request a password reset link",
    description="Always answers with the same message whether or not the email exists.",
)
@limiter.limit(settings.rate_limit_auth)
def request_password_reset(
    request: Request,
    body: PasswordResetRequest,
    use_case: RequestPasswordResetUseCase = Depends(get_request_password_reset_use_case),
) -> MessageResponse:
    """Issue a reset token if the email belongs to a credentials user."""
    return MessageResponse(message=use_case.execute(PasswordResetRequestCommand(email=body.email)))


@router.post(
    "/password-reset/confirm",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Reset a password",
)
@limiter.limit(settings.rate_limit_auth)
def confirm_password_reset(
    request: Request,
    body: PasswordResetConfirmRequest,
    use_case: ResetPasswordUseCase = Depends(get_reset_password_use_case),
) -> MessageResponse:
    """Set a new password using a reset token."""
    use_case.execute(PasswordResetConfirmCommand(token=body.token, password=body.password))
    return MessageResponse(message="Password has been reset successfully.")


@router.post(
    "/deriv/authorize-token",
    response_model=BrokerIdentityResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
    summary="Authorize a Deriv API token",
    description="Send the token to the broker and relay the account owner's identity.",
)
@limiter.limit(settings.rate_limit_auth)
def authorize_broker_token(
    request: Request,
    body: AuthorizeTokenRequest,
    use_case: AuthorizeBrokerTokenUseCase = Depends(get_authorize_broker_token_use_case),
) -> BrokerIdentityResponse:
    """Authorize a broker token and return who owns it."""
    result = use_case.execute(body.token)
    return BrokerIdentityResponse(
        deriv_user_id=result.deriv_user_id, email=result.email, name=result.name
    )


@router.get(
    "/deriv/callback",
    response_model=BrokerLoginResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
    summary="Deriv OAuth callback",
    description=(
        "Receives acct1/token1/cur1..acctN/tokenN/curN from the broker "
        "redirect, links the accounts and opens a session."
    ),
)
def broker_callback(
    request: Request,
    use_case: BrokerLoginUseCase = Depends(get_broker_login_use_case),
) -> BrokerLoginResponse:
    """Sign in (or sign up) with the accounts of a broker OAuth redirect."""
    accounts = parse_callback_accounts(request.query_params)
    logger.info("Broker callback received with %d account(s)", len(accounts))
    result = use_case.execute(BrokerLoginCommand(accounts=accounts))
    return BrokerLoginResponse(
        session=session_response(result.session),
        deriv_user_id=result.deriv_user_id,
        demo_account_id=result.demo_account_id,
        real_account_id=result.real_account_id,
        demo_balance=result.demo_balance,
        real_balance=result.real_balance,
    )
