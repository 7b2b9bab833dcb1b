"""Catalog of selectable AI trading strategies."""

from app.domain.strategy.entities import StrategyDefinition

DEFAULT_STRATEGY_ID = "default_dynamic"

AI_TRADING_STRATEGIES: tuple[StrategyDefinition, ...] = (
    StrategyDefinition(
        id="default_dynamic",
        name="Dynamic Adaptive",
        description=(
            "A balanced approach that dynamically adapts to changing market "
            "conditions. Uses the selected trading mode for risk tuning."
        ),
    ),
    StrategyDefinition(
        id="trend_rider",
        name="Trend Rider",
        description=(
            "Attempts to identify and follow strong market trends. "
            "Risk level set by trading mode."
        ),
    ),
    StrategyDefinition(
        id="range_bound",
        name="Range Negotiator",
        description=(
            "Optimized for markets that are moving sideways within a defined "
            "range. Risk level set by trading mode."
        ),
    ),
)


def strategy_names() -> dict[str, str]:
    return {strategy.id: strategy.name for strategy in AI_TRADING_STRATEGIES}


def get_strategy(strategy_id: str | None) -> StrategyDefinition:
    """Return the strategy with this id, or the default one."""
    for strategy in AI_TRADING_STRATEGIES:
        if strategy.id == strategy_id:
            return strategy
    return AI_TRADING_STRATEGIES[0]
