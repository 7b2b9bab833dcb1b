"""
Shared infrastructure for the per-context dependency modules.

Adapters that hold process-wide state (engine, encryption key, broker
endpoint, LLM client, automation engine) are built once here and reused
by every request. Tests replace them through ``app.dependency_overrides``
on the use-case getters.
"""

from functools import lru_cache

from sqlalchemy.engine import Engine

from app.core.config import settings
from app.infrastructure.persistence.database import get_engine
from app.infrastructure.strategy.llm_client import OpenRouterClient
from app.infrastructure.trading.deriv_gateway import DerivGateway
from app.infrastructure.trading.indicator_adapter import PandasTaIndicatorCalculator
from app.shared.security.passwords import BcryptPasswordHasher, SecretBox


def engine() -> Engine:
    return get_engine()


@lru_cache(maxsize=1)
def get_secret_box() -> SecretBox:
    """Return the process-wide encryptor for stored broker tokens."""
    return SecretBox(settings.encryption_key)


@lru_cache(maxsize=1)
def get_password_hasher() -> BcryptPasswordHasher:
    return BcryptPasswordHasher()


@lru_cache(maxsize=1)
def get_broker_gateway() -> DerivGateway:
    """Return the Deriv WebSocket gateway configured from settings."""
    return DerivGateway(
        settings.get_deriv_endpoint(),
        request_timeout=settings.deriv_request_timeout_seconds,
        trade_timeout=settings.deriv_trade_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_indicator_calculator() -> PandasTaIndicatorCalculator:
    return PandasTaIndicatorCalculator()


@lru_cache(maxsize=1)
def get_llm_client() -> OpenRouterClient:
    """Return the chat-completions client configured from settings."""
    return OpenRouterClient(
        api_url=settings.llm_api_url,
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        timeout=settings.llm_timeout_seconds,
    )
