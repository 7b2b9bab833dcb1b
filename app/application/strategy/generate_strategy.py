"""
Use case: Generate an AI trading strategy.

Loads recent candles for every requested instrument, derives ticks and
indicator snapshots, asks the generator port for proposals and drops
the proposals that break the stake/duration rules.

Input: GenerateStrategyCommand
Output: StrategyResult
Side effects: Broker ``ticks_history`` calls; one LLM completion.
Failure cases: InvalidStrategyRequestError, StrategyGenerationError.
"""

import logging
from dataclasses import dataclass

from app.application.strategy.dtos import (
    GenerateStrategyCommand,
    ProposalResult,
    StrategyResult,
)
from app.application.trading.market_data import MarketData, MarketDataLoader
from app.domain.strategy.catalog import get_strategy
from app.domain.strategy.entities import (
    StrategyFlavor,
    StrategyRequest,
    TradingMode,
    TradingStrategy,
)
from app.domain.strategy.errors import InvalidStrategyRequestError, StrategyGenerationError
from app.domain.strategy.ports import StrategyGeneratorPort
from app.domain.strategy.proposals import (
    MAX_STOP_LOSS_PERCENT,
    MIN_STOP_LOSS_PERCENT,
    MIN_TOTAL_STAKE,
    sanitize_strategy,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyPlan:
    """A sanitized strategy plus the market data it was generated from."""

    strategy: TradingStrategy
    market_data: MarketData
    strategy_id: str
    flavor: StrategyFlavor
    trading_mode: TradingMode


def _parse_enum(enum_cls, value: str, label: str):
    try:
        return enum_cls(value.lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidStrategyRequestError(f"Invalid {label}: {value}. Must be one of {allowed}.") from None


class GenerateStrategyUseCase:
    def __init__(self, generator: StrategyGeneratorPort, loader: MarketDataLoader) -> None:
        self._generator = generator
        self._loader = loader

    def plan(self, command: GenerateStrategyCommand) -> StrategyPlan:
        """Validate, load market data and run the generator.

        Raises:
            InvalidStrategyRequestError: On out-of-range input.
            StrategyGenerationError: If no instrument returned data or
                the model reply is unusable.
        """
        if command.total_stake < MIN_TOTAL_STAKE:
            raise InvalidStrategyRequestError(
                f"Total stake must be at least {MIN_TOTAL_STAKE:g}"
            )
        if not command.instruments:
            raise InvalidStrategyRequestError("At least one instrument is required")
        if command.stop_loss_percent is not None and not (
            MIN_STOP_LOSS_PERCENT <= command.stop_loss_percent <= MAX_STOP_LOSS_PERCENT
        ):
            raise InvalidStrategyRequestError(
                f"Stop-loss must be between {MIN_STOP_LOSS_PERCENT:g}% and {MAX_STOP_LOSS_PERCENT:g}%"
            )
        mode = _parse_enum(TradingMode, command.trading_mode, "trading mode")
        flavor = _parse_enum(StrategyFlavor, command.flavor, "strategy flavor")
        strategy = get_strategy(command.strategy_id)

        market_data = self._loader.load(command.instruments)
        if not market_data.instruments:
            raise StrategyGenerationError("No valid market data available to generate a strategy.")

        generated = self._generator.generate(
            StrategyRequest(
                total_stake=command.total_stake,
                instruments=market_data.instruments,
                trading_mode=mode,
                ticks=market_data.ticks,
                indicators=market_data.indicators,
                stop_loss_percent=command.stop_loss_percent,
                strategy_id=strategy.id,
                flavor=flavor,
            )
        )
        cleaned = sanitize_strategy(generated, command.total_stake)
        logger.info(
            "Strategy %s proposed %d trades (%d after validation) totalling %.2f",
            strategy.id,
            len(generated.trades),
            len(cleaned.trades),
            cleaned.total_stake,
        )
        return StrategyPlan(
            strategy=cleaned,
            market_data=market_data,
            strategy_id=strategy.id,
            flavor=flavor,
            trading_mode=mode,
        )

    def execute(self, command: GenerateStrategyCommand) -> StrategyResult:
        plan = self.plan(command)
        return StrategyResult(
            trades=[
                ProposalResult(
                    instrument=p.instrument,
                    action=p.action.value,
                    stake=p.stake,
                    duration_seconds=p.duration_seconds,
                    reasoning=p.reasoning,
                )
                for p in plan.strategy.trades
            ],
            overall_reasoning=plan.strategy.overall_reasoning,
            total_stake=plan.strategy.total_stake,
            strategy_id=plan.strategy_id,
            latest_prices={
                instrument: plan.market_data.latest_price(instrument)
                for instrument in plan.market_data.instruments
            },
        )
