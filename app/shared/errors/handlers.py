"""
Centralized error handlers for FastAPI.

Maps domain-specific errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.domain.accounts.errors import (
    AccountsDomainError,
    BrokerTokenMissingError,
    DuplicateEmailError,
    EmptyProfileUpdateError,
    InvalidAccountTypeError,
    InvalidCredentialsError,
    InvalidResetTokenError,
    InvalidSessionError,
    SettingsNotFoundError,
    UserNotFoundError,
    WeakPasswordError,
)
from app.domain.strategy.errors import (
    InvalidStrategyRequestError,
    StrategyDomainError,
    StrategyGenerationError,
)
from app.domain.trading.errors import (
    AutomationSessionError,
    AutomationSessionNotFoundError,
    BrokerAuthorizationError,
    BrokerError,
    BrokerProfileIncompleteError,
    BrokerTimeoutError,
    InstrumentNotSupportedError,
    InvalidTradeError,
    TradeAlreadyClosedError,
    TradeNotFoundError,
    TradingDomainError,
    UnknownTraderError,
)

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_401 = 401
HTTP_404 = 404
HTTP_409 = 409
HTTP_500 = 500
HTTP_502 = 502
HTTP_504 = 504

# Starlette resolves handlers along the exception MRO, so subclasses listed
# here win over the catch-alls registered below.
_STATUS_BY_ERROR: tuple[tuple[type[Exception], int, str], ...] = (
    (TradeNotFoundError, HTTP_404, "Trade not found"),
    (UserNotFoundError, HTTP_404, "User not found"),
    (SettingsNotFoundError, HTTP_404, "Settings not found"),
    (AutomationSessionNotFoundError, HTTP_404, "Automation session not found"),
    (TradeAlreadyClosedError, HTTP_400, "Trade is not open"),
    (InvalidTradeError, HTTP_400, "Invalid trade"),
    (UnknownTraderError, HTTP_400, "Unknown user"),
    (InstrumentNotSupportedError, HTTP_400, "Instrument not supported"),
    (WeakPasswordError, HTTP_400, "Password too weak"),
    (InvalidResetTokenError, HTTP_400, "Invalid reset token"),
    (InvalidAccountTypeError, HTTP_400, "Invalid account type"),
    (BrokerTokenMissingError, HTTP_400, "Broker token missing"),
    (EmptyProfileUpdateError, HTTP_400, "Nothing to update"),
    (InvalidStrategyRequestError, HTTP_400, "Invalid strategy request"),
    (DuplicateEmailError, HTTP_409, "Email already registered"),
    (AutomationSessionError, HTTP_409, "Automation session conflict"),
    (InvalidCredentialsError, HTTP_401, "Invalid credentials"),
    (InvalidSessionError, HTTP_401, "Not authenticated"),
    (BrokerTimeoutError, HTTP_504, "Broker timeout"),
    (BrokerProfileIncompleteError, HTTP_500, "Incomplete broker profile"),
    (StrategyGenerationError, HTTP_502, "Strategy generation failed"),
)


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def _mapped_handler(status_code: int, error: str):
    async def handle(_request: Request, exc: Exception) -> JSONResponse:
        message = getattr(exc, "message", str(exc))
        if status_code >= HTTP_500:
            logger.error("%s: %s", error, message)
        else:
            logger.warning("%s: %s", error, message)
        # 500s never echo internals.
        detail = None if status_code == HTTP_500 else message
        return _error_response(status_code, error, detail)

    return handle


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """
    for error_cls, status_code, error in _STATUS_BY_ERROR:
        app.add_exception_handler(error_cls, _mapped_handler(status_code, error))

    @app.exception_handler(BrokerAuthorizationError)
    async def handle_broker_authorization(
        _request: Request, exc: BrokerAuthorizationError
    ) -> JSONResponse:
        """Rejected broker tokens are 401; other authorize errors 400."""
        logger.warning("Broker authorization failed (code=%s): %s", exc.code, exc.message)
        status_code = HTTP_401 if exc.is_invalid_token else HTTP_400
        return _error_response(status_code, "Broker authorization failed", exc.message)

    @app.exception_handler(BrokerError)
    async def handle_broker(_request: Request, exc: BrokerError) -> JSONResponse:
        """Broker answered with an error payload."""
        logger.error("Broker error (code=%s): %s", exc.code, exc.message)
        return _error_response(HTTP_502, "Broker error", exc.message)

    @app.exception_handler(TradingDomainError)
    async def handle_trading_domain(
        _request: Request, exc: TradingDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled trading domain errors."""
        logger.error("Unhandled trading domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error")

    @app.exception_handler(AccountsDomainError)
    async def handle_accounts_domain(
        _request: Request, exc: AccountsDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled accounts domain errors."""
        logger.error("Unhandled accounts domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error")

    @app.exception_handler(StrategyDomainError)
    async def handle_strategy_domain(
        _request: Request, exc: StrategyDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled strategy domain errors."""
        logger.error("Unhandled strategy domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error")
