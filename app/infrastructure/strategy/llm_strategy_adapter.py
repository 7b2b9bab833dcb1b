"""
Adapter: LLM-backed strategy generator and sentiment analyzer.

Prompts are rendered from prompts.yaml, sent through the OpenRouter
client and the reply is validated against pydantic models before being
turned into domain entities. Anything the model gets wrong surfaces as
StrategyGenerationError.
"""

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.domain.strategy.entities import (
    MarketSentiment,
    SentimentAction,
    SentimentRequest,
    StrategyFlavor,
    StrategyRequest,
    TradeProposal,
    TradingStrategy,
)
from app.domain.strategy.catalog import get_strategy
from app.domain.strategy.errors import StrategyGenerationError
from app.domain.strategy.ports import SentimentAnalyzerPort, StrategyGeneratorPort
from app.domain.strategy.proposals import DEFAULT_STOP_LOSS_PERCENT
from app.domain.trading.entities import ContractType
from app.infrastructure.strategy.llm_client import LLMClientError, OpenRouterClient
from app.infrastructure.strategy.prompt_loader import (
    PromptLoader,
    format_indicator_lines,
    format_indicators_block,
    format_ticks_block,
)

logger = logging.getLogger(__name__)


class _ProposalModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    instrument: str
    action: Literal["CALL", "PUT"]
    stake: float
    duration_seconds: int = Field(alias="durationSeconds")
    reasoning: str = ""


class _StrategyModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    trades_to_execute: list[_ProposalModel] = Field(alias="tradesToExecute")
    overall_reasoning: str = Field(default="", alias="overallReasoning")


class _SentimentModel(BaseModel):
    action: Literal["CALL", "PUT", "HOLD"]
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str


def _prompt_name(flavor: StrategyFlavor) -> str:
    return "strategy_volatility" if flavor is StrategyFlavor.VOLATILITY else "strategy_markets"


class LLMStrategyGenerator(StrategyGeneratorPort):
    def __init__(self, client: OpenRouterClient, prompts: PromptLoader) -> None:
        self._client = client
        self._prompts = prompts

    def _render(self, request: StrategyRequest) -> tuple[str, str]:
        name = _prompt_name(request.flavor)
        strategy = get_strategy(request.strategy_id)
        if request.flavor is StrategyFlavor.VOLATILITY or request.stop_loss_percent is None:
            stop_loss = DEFAULT_STOP_LOSS_PERCENT
            stop_loss_line = f"system default of {stop_loss:g}%"
        else:
            stop_loss = request.stop_loss_percent
            stop_loss_line = f"user-defined {stop_loss:g}% of the entry price"
        user_prompt = self._prompts.render(
            name,
            total_stake=request.total_stake,
            instruments=", ".join(request.instruments),
            trading_mode=request.trading_mode.value,
            strategy_name=strategy.name,
            strategy_description=strategy.description,
            stop_loss_percent=f"{stop_loss:g}",
            stop_loss_line=stop_loss_line,
            ticks_block=format_ticks_block(request.ticks),
            indicators_block=format_indicators_block(request.indicators),
        )
        return self._prompts.get_system_prompt(name), user_prompt

    def generate(self, request: StrategyRequest) -> TradingStrategy:
        system_prompt, user_prompt = self._render(request)
        logger.info(
            "Requesting %s strategy for %d instruments (mode=%s, stake=%.2f)",
            request.flavor.value,
            len(request.instruments),
            request.trading_mode.value,
            request.total_stake,
        )
        try:
            raw = self._client.complete_json(system_prompt, user_prompt)
        except LLMClientError as e:
            raise StrategyGenerationError(str(e)) from e

        try:
            parsed = _StrategyModel.model_validate(raw)
        except ValidationError as e:
            logger.error("Strategy reply failed validation: %s", e.error_count())
            raise StrategyGenerationError("model reply did not match the strategy schema") from e

        return TradingStrategy(
            trades=tuple(
                TradeProposal(
                    instrument=item.instrument,
                    action=ContractType(item.action),
                    stake=item.stake,
                    duration_seconds=item.duration_seconds,
                    reasoning=item.reasoning,
                )
                for item in parsed.trades_to_execute
            ),
            overall_reasoning=parsed.overall_reasoning,
        )


class LLMSentimentAnalyzer(SentimentAnalyzerPort):
    def __init__(self, client: OpenRouterClient, prompts: PromptLoader) -> None:
        self._client = client
        self._prompts = prompts

    def analyze(self, request: SentimentRequest) -> MarketSentiment:
        user_prompt = self._prompts.render(
            "market_sentiment",
            instrument=request.instrument,
            trading_mode=request.trading_mode.value,
            price_trend=request.price_trend,
            indicators_inline=". ".join(format_indicator_lines(request.indicators)),
        )
        try:
            raw = self._client.complete_json(
                self._prompts.get_system_prompt("market_sentiment"), user_prompt
            )
            parsed = _SentimentModel.model_validate(raw)
        except LLMClientError as e:
            raise StrategyGenerationError(str(e)) from e
        except ValidationError as e:
            raise StrategyGenerationError("model reply did not match the sentiment schema") from e

        return MarketSentiment(
            action=SentimentAction(parsed.action),
            confidence=parsed.confidence,
            reasoning=parsed.reasoning,
            price_trend=request.price_trend,
            indicators=request.indicators,
        )
