"""
Domain-specific errors for the trading bounded context.

All errors raised from the domain layer must be defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""


class TradingDomainError(Exception):
    """Base error for all trading domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class TradeNotFoundError(TradingDomainError):
    """Raised when a trade id or broker contract id is unknown."""

    def __init__(self, trade_ref: str) -> None:
        super().__init__(f"Trade not found: {trade_ref}")
        self.trade_ref = trade_ref


class TradeAlreadyClosedError(TradingDomainError):
    """Raised when closing a trade that is no longer open."""

    def __init__(self, trade_id: str, status: str) -> None:
        super().__init__(f"Trade {trade_id} is already closed (status={status})")
        self.trade_id = trade_id
        self.status = status


class InvalidTradeError(TradingDomainError):
    """Raised when trade input cannot be recorded as given."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class UnknownTraderError(TradingDomainError):
    """Raised when a trade references a user that does not exist."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User not found for trade: {user_id}")
        self.user_id = user_id


class InstrumentNotSupportedError(TradingDomainError):
    def __init__(self, instrument: str) -> None:
        super().__init__(f"Instrument not supported: {instrument}")
        self.instrument = instrument


class BrokerError(TradingDomainError):
    """Raised when the broker answers a request with an error payload."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class BrokerAuthorizationError(BrokerError):
    """Raised when the broker rejects a token."""

    INVALID_TOKEN_CODE = "InvalidToken"

    @property
    def is_invalid_token(self) -> bool:
        return self.code == self.INVALID_TOKEN_CODE


class BrokerTimeoutError(BrokerError):
    """Raised when the broker does not answer within the timeout."""

    def __init__(self, operation: str, timeout_seconds: float) -> None:
        super().__init__(
            f"Broker did not answer '{operation}' within {timeout_seconds:g}s",
            code="Timeout",
        )
        self.operation = operation
        self.timeout_seconds = timeout_seconds


class BrokerProfileIncompleteError(BrokerError):
    """Raised when an authorize reply lacks the user id or email."""

    def __init__(self, missing: str) -> None:
        super().__init__(f"Broker authorization did not return {missing}")
        self.missing = missing


class AutomationSessionError(TradingDomainError):
    """Raised for invalid automated-trading session transitions."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class AutomationSessionNotFoundError(AutomationSessionError):
    """Raised when a user has no (running) automated session."""
