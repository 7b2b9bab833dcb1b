"""
Dependency injection for the strategy bounded context.

Wires the LLM-backed use cases, strategy execution and the process-wide
automation engine.
"""

from functools import lru_cache

from app.application.strategy.analyze_sentiment import AnalyzeMarketSentimentUseCase
from app.application.strategy.generate_strategy import GenerateStrategyUseCase
from app.application.trading.automation import AutomationEngine
from app.application.trading.execute_strategy import ExecuteStrategyUseCase
from app.core.config import settings
from app.infrastructure.accounts.settings_repository import SqlUserSettingsRepository
from app.infrastructure.strategy.llm_strategy_adapter import (
    LLMSentimentAnalyzer,
    LLMStrategyGenerator,
)
from app.infrastructure.strategy.prompt_loader import get_prompt_loader
from app.infrastructure.trading.trade_repository import SqlTradeRepository
from app.interfaces.dependencies import (
    engine,
    get_broker_gateway,
    get_llm_client,
    get_secret_box,
)
from app.interfaces.trading.dependencies import (
    get_close_trade_use_case,
    get_create_trade_use_case,
    market_data_loader,
)


def get_generate_strategy_use_case() -> GenerateStrategyUseCase:
    """Build GenerateStrategyUseCase with its infrastructure dependencies."""
    return GenerateStrategyUseCase(
        LLMStrategyGenerator(get_llm_client(), get_prompt_loader()),
        market_data_loader(),
    )


def get_market_sentiment_use_case() -> AnalyzeMarketSentimentUseCase:
    """Build AnalyzeMarketSentimentUseCase with its infrastructure dependencies."""
    return AnalyzeMarketSentimentUseCase(
        LLMSentimentAnalyzer(get_llm_client(), get_prompt_loader()),
        get_broker_gateway(),
        market_data_loader(),
    )


def get_execute_strategy_use_case() -> ExecuteStrategyUseCase:
    """Build ExecuteStrategyUseCase with its infrastructure dependencies."""
    return ExecuteStrategyUseCase(
        get_broker_gateway(),
        SqlTradeRepository(engine()),
        SqlUserSettingsRepository(engine(), get_secret_box()),
    )


@lru_cache(maxsize=1)
def get_automation_engine() -> AutomationEngine:
    """Return the process-wide simulated trading engine."""
    return AutomationEngine(
        generate=get_generate_strategy_use_case(),
        create_trade=get_create_trade_use_case(),
        close_trade=get_close_trade_use_case(),
        tick_seconds=settings.automation_tick_seconds,
        win_probability=settings.simulated_win_probability,
        payout_ratio=settings.simulated_payout_ratio,
    )
