"""
Automated trading router.

Starts, inspects and stops the caller's simulated trading session.
Sessions run in the background; these routes only touch the engine.
"""

from fastapi import APIRouter, Depends, status

from app.application.trading.automation import (
    AutomationEngine,
    AutomationSnapshot,
    StartAutomationCommand,
)
from app.domain.accounts.entities import User
from app.interfaces.accounts.dependencies import get_current_user
from app.interfaces.schemas import ErrorResponse
from app.interfaces.strategy.dependencies import get_automation_engine
from app.interfaces.strategy.schemas import (
    AutomationSessionResponse,
    SimulatedTradeResponse,
    StartAutomationRequest,
)

router = APIRouter(prefix="/automation", tags=["automation"])


def session_response(snapshot: AutomationSnapshot) -> AutomationSessionResponse:
    return AutomationSessionResponse(
        strategy_id=snapshot.strategy_id,
        overall_reasoning=snapshot.overall_reasoning,
        started_at=snapshot.started_at,
        is_running=snapshot.is_running,
        trades=[
            SimulatedTradeResponse(
                id=t.id,
                instrument=t.instrument,
                action=t.action.value,
                stake=t.stake,
                duration_seconds=t.duration_seconds,
                entry_price=t.entry_price,
                stop_loss_price=t.stop_loss_price,
                current_price=t.current_price,
                status=t.status.value,
                pnl=t.pnl,
                started_at=t.started_at,
                finished_at=t.finished_at,
                reasoning=t.reasoning,
            )
            for t in snapshot.trades
        ],
        total_net_profit=snapshot.total_net_profit,
        trade_count=snapshot.trade_count,
        winning_trades=snapshot.winning_trades,
        losing_trades=snapshot.losing_trades,
    )


@router.post(
    "/sessions",
    response_model=AutomationSessionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="Start a simulated session",
    description="Generate a strategy and simulate its trades until they settle.",
)
async def start_session(
    request: StartAutomationRequest,
    user: User = Depends(get_current_user),
    engine: AutomationEngine = Depends(get_automation_engine),
) -> AutomationSessionResponse:
    """Start the caller's simulated trading session."""
    snapshot = await engine.start(
        StartAutomationCommand(
            user_id=user.id,
            total_stake=request.total_stake,
            instruments=tuple(request.instruments),
            trading_mode=request.trading_mode,
            stop_loss_percent=request.stop_loss_percentage,
            strategy_id=request.strategy_id,
            flavor=request.flavor,
            account_type=request.account_type,
        )
    )
    return session_response(snapshot)


@router.get(
    "/sessions/current",
    response_model=AutomationSessionResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Current session status",
)
def get_current_session(
    user: User = Depends(get_current_user),
    engine: AutomationEngine = Depends(get_automation_engine),
) -> AutomationSessionResponse:
    return session_response(engine.status(user.id))


@router.delete(
    "/sessions/current",
    response_model=AutomationSessionResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Stop the running session",
    description="Every active simulated trade is closed as lost.",
)
async def stop_current_session(
    user: User = Depends(get_current_user),
    engine: AutomationEngine = Depends(get_automation_engine),
) -> AutomationSessionResponse:
    return session_response(await engine.stop(user.id))
