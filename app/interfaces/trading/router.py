"""
Trade ledger router.

Exposes trade creation, broker trade recording, closing, settlement and
the ledger reports. Routes validate input, call a use case and map the
result. No business logic belongs here.
"""

from fastapi import APIRouter, Depends, Path, status

from app.application.trading.close_trade import CloseTradeUseCase
from app.application.trading.create_trade import CreateTradeUseCase, RecordBrokerTradeUseCase
from app.application.trading.dtos import (
    CloseTradeCommand,
    CreateTradeCommand,
    RecordBrokerTradeCommand,
    SettleBrokerTradeCommand,
    TradeResult,
)
from app.application.trading.settle_broker_trade import SettleBrokerTradeUseCase
from app.application.trading.trade_reports import GetProfitSummaryUseCase, GetTradeHistoryUseCase
from app.domain.accounts.entities import User
from app.interfaces.accounts.dependencies import get_current_user
from app.interfaces.schemas import ErrorResponse
from app.interfaces.trading.dependencies import (
    get_close_trade_use_case,
    get_create_trade_use_case,
    get_profit_summary_use_case,
    get_record_broker_trade_use_case,
    get_settle_broker_trade_use_case,
    get_trade_history_use_case,
)
from app.interfaces.trading.schemas import (
    CloseTradeRequest,
    CreateTradeRequest,
    ProfitSummaryResponse,
    RecordBrokerTradeRequest,
    SettleBrokerTradeRequest,
    TradeResponse,
)

router = APIRouter(prefix="/trades", tags=["trades"])

_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


def trade_response(result: TradeResult) -> TradeResponse:
    return TradeResponse.model_validate(result, from_attributes=True)


@router.post(
    "",
    response_model=TradeResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
    summary="Create a trade",
    description="Add a trade to a user's ledger. total_value is amount * price.",
)
def create_trade(
    request: CreateTradeRequest,
    _user: User = Depends(get_current_user),
    use_case: CreateTradeUseCase = Depends(get_create_trade_use_case),
) -> TradeResponse:
    """Create a ledger trade, open unless another status is given."""
    result = use_case.execute(
        CreateTradeCommand(
            user_id=request.user_id,
            symbol=request.symbol,
            type=request.type,
            amount=request.amount,
            price=request.price,
            status=request.status,
            metadata=request.metadata,
            ai_strategy_id=request.ai_strategy_id,
            deriv_contract_id=request.deriv_contract_id,
            duration_seconds=request.duration_seconds,
            deriv_account_id=request.deriv_account_id,
            open_time=request.purchase_time,
        )
    )
    return trade_response(result)


@router.post(
    "/record",
    response_model=TradeResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
    summary="Record a broker trade",
    description="Record a contract bought on the broker for the signed-in user.",
)
def record_broker_trade(
    request: RecordBrokerTradeRequest,
    user: User = Depends(get_current_user),
    use_case: RecordBrokerTradeUseCase = Depends(get_record_broker_trade_use_case),
) -> TradeResponse:
    """Record an open broker contract in the caller's ledger."""
    result = use_case.execute(
        RecordBrokerTradeCommand(
            user_id=user.id,
            symbol=request.symbol,
            contract_type=request.contract_type,
            stake_amount=request.stake_amount,
            entry_price=request.entry_price,
            deriv_contract_id=request.deriv_contract_id,
            deriv_account_id=request.deriv_account_id,
            account_type=request.account_type,
            ai_strategy_id=request.ai_strategy_id,
            open_time=request.purchase_time,
        )
    )
    return trade_response(result)


@router.post(
    "/settle-deriv-trade",
    response_model=TradeResponse,
    responses=_ERRORS,
    summary="Settle a broker trade",
    description="Record the final status and P/L of a broker contract.",
)
def settle_broker_trade(
    request: SettleBrokerTradeRequest,
    _user: User = Depends(get_current_user),
    use_case: SettleBrokerTradeUseCase = Depends(get_settle_broker_trade_use_case),
) -> TradeResponse:
    result = use_case.execute(
        SettleBrokerTradeCommand(
            deriv_contract_id=request.deriv_contract_id,
            final_status=request.final_status,
            pnl=request.pnl,
            exit_price=request.exit_price,
            sell_time=request.sell_time,
        )
    )
    return trade_response(result)


@router.get(
    "/history",
    response_model=list[TradeResponse],
    responses={401: {"model": ErrorResponse}},
    summary="Trade history",
    description="The caller's trades, newest first.",
)
def get_trade_history(
    user: User = Depends(get_current_user),
    use_case: GetTradeHistoryUseCase = Depends(get_trade_history_use_case),
) -> list[TradeResponse]:
    return [trade_response(trade) for trade in use_case.execute(user.id)]


@router.get(
    "/profit-summary",
    response_model=ProfitSummaryResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Profit summary",
)
def get_profit_summary(
    user: User = Depends(get_current_user),
    use_case: GetProfitSummaryUseCase = Depends(get_profit_summary_use_case),
) -> ProfitSummaryResponse:
    """Return the caller's aggregated closed-trade results."""
    return ProfitSummaryResponse.model_validate(use_case.execute(user.id), from_attributes=True)


@router.post(
    "/{trade_id}/close",
    response_model=TradeResponse,
    responses=_ERRORS,
    summary="Close a trade",
    description=(
        "Close an open trade. P/L comes from metadata.pnl when given, "
        "otherwise from the exit price."
    ),
)
def close_trade(
    request: CloseTradeRequest,
    trade_id: str = Path(..., min_length=1, max_length=64),
    _user: User = Depends(get_current_user),
    use_case: CloseTradeUseCase = Depends(get_close_trade_use_case),
) -> TradeResponse:
    """Close an open trade exactly once."""
    result = use_case.execute(
        CloseTradeCommand(
            trade_id=trade_id, exit_price=request.exit_price, metadata=request.metadata
        )
    )
    return trade_response(result)
