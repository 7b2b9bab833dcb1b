"""
AI strategy router.

Strategy catalog and performance, LLM strategy generation, market
sentiment and execution of a generated strategy on the broker.
"""

from fastapi import APIRouter, Depends

from app.application.strategy.analyze_sentiment import AnalyzeMarketSentimentUseCase
from app.application.strategy.dtos import GenerateStrategyCommand, SentimentCommand
from app.application.strategy.generate_strategy import GenerateStrategyUseCase
from app.application.trading.execute_strategy import ExecuteStrategyCommand, ExecuteStrategyUseCase
from app.application.trading.trade_reports import GetStrategyPerformanceUseCase
from app.domain.accounts.entities import User
from app.domain.strategy.catalog import AI_TRADING_STRATEGIES
from app.domain.strategy.entities import TradeProposal
from app.domain.trading.entities import ContractType
from app.interfaces.accounts.dependencies import get_current_user
from app.interfaces.schemas import ErrorResponse
from app.interfaces.strategy.dependencies import (
    get_execute_strategy_use_case,
    get_generate_strategy_use_case,
    get_market_sentiment_use_case,
)
from app.interfaces.strategy.schemas import (
    ExecuteStrategyRequest,
    ExecutionResponse,
    GenerateStrategyRequest,
    ProposalSchema,
    SentimentRequest,
    SentimentResponse,
    StrategyDefinitionResponse,
    StrategyPerformanceResponse,
    StrategyResponse,
)
from app.interfaces.trading.dependencies import get_strategy_performance_use_case
from app.interfaces.trading.market_router import indicators_response

router = APIRouter(prefix="/ai", tags=["ai"])


@router.get(
    "/strategies",
    response_model=list[StrategyDefinitionResponse],
    summary="Strategy catalog",
)
def list_strategies() -> list[StrategyDefinitionResponse]:
    return [
        StrategyDefinitionResponse(id=s.id, name=s.name, description=s.description)
        for s in AI_TRADING_STRATEGIES
    ]


@router.get(
    "/strategy-performance",
    response_model=list[StrategyPerformanceResponse],
    responses={401: {"model": ErrorResponse}},
    summary="Per-strategy results",
    description="Win rate and P/L of the caller's closed trades grouped by strategy.",
)
def get_strategy_performance(
    user: User = Depends(get_current_user),
    use_case: GetStrategyPerformanceUseCase = Depends(get_strategy_performance_use_case),
) -> list[StrategyPerformanceResponse]:
    return [
        StrategyPerformanceResponse.model_validate(item, from_attributes=True)
        for item in use_case.execute(user.id)
    ]


@router.post(
    "/strategy",
    response_model=StrategyResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="Generate a trading strategy",
    description=(
        "Fetch recent candles for each instrument, compute indicators and ask "
        "the LLM for trade proposals. Invalid proposals are dropped."
    ),
)
def generate_strategy(
    request: GenerateStrategyRequest,
    _user: User = Depends(get_current_user),
    use_case: GenerateStrategyUseCase = Depends(get_generate_strategy_use_case),
) -> StrategyResponse:
    """Generate a strategy for the requested instruments."""
    result = use_case.execute(
        GenerateStrategyCommand(
            total_stake=request.total_stake,
            instruments=tuple(request.instruments),
            trading_mode=request.trading_mode,
            stop_loss_percent=request.stop_loss_percentage,
            strategy_id=request.strategy_id,
            flavor=request.flavor,
        )
    )
    return StrategyResponse(
        trades_to_execute=[
            ProposalSchema.model_validate(p, from_attributes=True) for p in result.trades
        ],
        overall_reasoning=result.overall_reasoning,
        total_stake=result.total_stake,
        strategy_id=result.strategy_id,
        latest_prices=result.latest_prices,
    )


@router.post(
    "/market-sentiment",
    response_model=SentimentResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Market sentiment",
    description="CALL/PUT/HOLD recommendation for one instrument; failures degrade to HOLD.",
)
def get_market_sentiment(
    request: SentimentRequest,
    _user: User = Depends(get_current_user),
    use_case: AnalyzeMarketSentimentUseCase = Depends(get_market_sentiment_use_case),
) -> SentimentResponse:
    result = use_case.execute(
        SentimentCommand(instrument=request.instrument, trading_mode=request.trading_mode)
    )
    return SentimentResponse(
        action=result.action,
        confidence=result.confidence,
        reasoning=result.reasoning,
        price_trend=result.price_trend,
        indicators=indicators_response(result.indicators) if result.indicators else None,
    )


@router.post(
    "/strategy/execute",
    response_model=list[ExecutionResponse],
    responses={401: {"model": ErrorResponse}},
    summary="Execute a strategy on the broker",
    description=(
        "Buy every proposal on the caller's selected broker account. "
        "Failures are reported per proposal."
    ),
)
def execute_strategy(
    request: ExecuteStrategyRequest,
    user: User = Depends(get_current_user),
    use_case: ExecuteStrategyUseCase = Depends(get_execute_strategy_use_case),
) -> list[ExecutionResponse]:
    """Place each proposal and record it as an open trade."""
    results = use_case.execute(
        ExecuteStrategyCommand(
            user_id=user.id,
            proposals=tuple(
                TradeProposal(
                    instrument=p.instrument,
                    action=ContractType(p.action),
                    stake=p.stake,
                    duration_seconds=p.duration_seconds,
                    reasoning=p.reasoning,
                )
                for p in request.trades_to_execute
            ),
            strategy_id=request.strategy_id,
        )
    )
    return [ExecutionResponse.model_validate(r, from_attributes=True) for r in results]
