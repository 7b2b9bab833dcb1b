"""
Domain-specific errors for the strategy bounded context.

No framework imports allowed.
"""


class StrategyDomainError(Exception):
    """Base error for all strategy domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class StrategyGenerationError(StrategyDomainError):
    """Raised when the LLM produces no usable strategy."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Strategy generation failed: {reason}")
        self.reason = reason


class InvalidStrategyRequestError(StrategyDomainError):
    """Raised when a strategy request violates its bounds."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
