"""
Use case: Simulated automated-trading sessions.

A session turns one generated strategy into simulated trades. Every
trade is driven by its own asyncio task that advances the price once per
tick until the stop-loss is hit or the duration elapses. Finished trades
are written to the ledger by creating and then closing a trade, so they
count towards the profit summary like any other closed trade.

One session per user. Sessions live in process memory and end with it.

Input: StartAutomationCommand
Output: AutomationSnapshot
Side effects: One LLM completion and broker candle reads at start;
    trades rows created and closed as simulated trades finish.
Failure cases: AutomationSessionError, InvalidStrategyRequestError,
    StrategyGenerationError.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from app.application.strategy.dtos import GenerateStrategyCommand
from app.application.strategy.generate_strategy import GenerateStrategyUseCase, StrategyPlan
from app.application.trading.close_trade import CloseTradeUseCase
from app.application.trading.create_trade import CreateTradeUseCase
from app.application.trading.dtos import CloseTradeCommand, CreateTradeCommand
from app.domain.accounts.entities import AccountType, utcnow
from app.domain.strategy.entities import StrategyFlavor
from app.domain.strategy.proposals import DEFAULT_STOP_LOSS_PERCENT, allocate_within_budget
from app.domain.trading.entities import ContractType
from app.domain.trading.errors import AutomationSessionError, AutomationSessionNotFoundError
from app.domain.trading.simulation import SessionTally, SimulatedTrade, stop_loss_price

logger = logging.getLogger(__name__)

COMPLETED_REASON = "Automated trade completed"
MANUAL_STOP_REASON = "Manually stopped automated trade"
MANUAL_STOP_OUTCOME = "closed_manual"


@dataclass(frozen=True)
class StartAutomationCommand:
    """Input DTO for starting a simulated session.

    Attributes:
        user_id: Session owner.
        total_stake: Budget shared by all simulated trades.
        instruments: Candidate instruments.
        trading_mode: conservative, balanced or aggressive.
        stop_loss_percent: User stop-loss; ignored for volatility sessions.
        strategy_id: Catalog strategy.
        flavor: ``markets`` or ``volatility``.
        account_type: Paper account label stored with each trade.
    """

    user_id: str
    total_stake: float
    instruments: tuple[str, ...]
    trading_mode: str
    stop_loss_percent: Optional[float] = None
    strategy_id: Optional[str] = None
    flavor: str = "markets"
    account_type: str = "demo"


@dataclass
class AutomationSession:
    user_id: str
    plan: StrategyPlan
    account_type: AccountType
    started_at: datetime
    trades: list[SimulatedTrade] = field(default_factory=list)
    tally: SessionTally = field(default_factory=SessionTally)
    tasks: dict[str, asyncio.Task] = field(default_factory=dict)
    stopped: bool = False

    @property
    def is_running(self) -> bool:
        return not self.stopped and any(trade.is_active for trade in self.trades)

    @property
    def trade_category(self) -> str:
        return "volatility" if self.plan.flavor is StrategyFlavor.VOLATILITY else "forexCrypto"


@dataclass(frozen=True)
class AutomationSnapshot:
    """Point-in-time view of a session."""

    user_id: str
    strategy_id: str
    overall_reasoning: str
    started_at: datetime
    is_running: bool
    trades: tuple[SimulatedTrade, ...]
    total_net_profit: float
    trade_count: int
    winning_trades: int
    losing_trades: int

    @staticmethod
    def of(session: AutomationSession) -> "AutomationSnapshot":
        return AutomationSnapshot(
            user_id=session.user_id,
            strategy_id=session.plan.strategy_id,
            overall_reasoning=session.plan.strategy.overall_reasoning,
            started_at=session.started_at,
            is_running=session.is_running,
            trades=tuple(session.trades),
            total_net_profit=round(session.tally.total_net_profit, 2),
            trade_count=session.tally.trade_count,
            winning_trades=session.tally.winning_trades,
            losing_trades=session.tally.losing_trades,
        )


class AutomationEngine:
    """Runs and tracks simulated sessions.

    Args:
        generate: Strategy use case used to plan a session.
        create_trade: Ledger create use case.
        close_trade: Ledger close use case.
        tick_seconds: Delay between two price updates.
        win_probability: Chance an expiring trade wins.
        payout_ratio: Share of the stake paid on a win.
        rng: Random source; tests pass a seeded ``random.Random``.
        clock: Current-time source.
    """

    def __init__(
        self,
        generate: GenerateStrategyUseCase,
        create_trade: CreateTradeUseCase,
        close_trade: CloseTradeUseCase,
        tick_seconds: float = 1.0,
        win_probability: float = 0.70,
        payout_ratio: float = 0.85,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._generate = generate
        self._create_trade = create_trade
        self._close_trade = close_trade
        self._tick_seconds = tick_seconds
        self._win_probability = win_probability
        self._payout_ratio = payout_ratio
        self._rng = rng or random.Random()
        self._clock = clock
        self._sessions: dict[str, AutomationSession] = {}
        self._starting: set[str] = set()

    async def start(self, command: StartAutomationCommand) -> AutomationSnapshot:
        current = self._sessions.get(command.user_id)
        if command.user_id in self._starting or (current is not None and current.is_running):
            raise AutomationSessionError("An automated trading session is already running")
        try:
            account_type = AccountType(command.account_type)
        except ValueError:
            raise AutomationSessionError(
                f"Invalid account type: {command.account_type}. Must be 'demo' or 'real'."
            ) from None

        # Held across the planning await so a concurrent start is rejected.
        self._starting.add(command.user_id)
        try:
            plan = await self._plan(command)
        finally:
            self._starting.discard(command.user_id)
        return self._launch(command, plan, account_type)

    async def _plan(self, command: StartAutomationCommand) -> StrategyPlan:
        return await asyncio.to_thread(
            self._generate.plan,
            GenerateStrategyCommand(
                total_stake=command.total_stake,
                instruments=command.instruments,
                trading_mode=command.trading_mode,
                stop_loss_percent=command.stop_loss_percent,
                strategy_id=command.strategy_id,
                flavor=command.flavor,
            ),
        )

    def _launch(
        self, command: StartAutomationCommand, plan: StrategyPlan, account_type: AccountType
    ) -> AutomationSnapshot:
        session = AutomationSession(
            user_id=command.user_id,
            plan=plan,
            account_type=account_type,
            started_at=self._clock(),
        )
        if plan.flavor is StrategyFlavor.VOLATILITY or command.stop_loss_percent is None:
            stop_loss_percent = DEFAULT_STOP_LOSS_PERCENT
        else:
            stop_loss_percent = command.stop_loss_percent

        for proposal in allocate_within_budget(plan.strategy.trades, command.total_stake):
            entry = plan.market_data.latest_price(proposal.instrument)
            if entry is None:
                logger.warning("No price data for %s; skipping proposal", proposal.instrument)
                continue
            trade = SimulatedTrade(
                instrument=proposal.instrument,
                action=proposal.action,
                stake=proposal.stake,
                duration_seconds=proposal.duration_seconds,
                entry_price=entry,
                stop_loss_price=stop_loss_price(
                    proposal.instrument, entry, proposal.action, stop_loss_percent
                ),
                started_at=session.started_at,
                reasoning=proposal.reasoning,
            )
            session.trades.append(trade)

        # Replaces the user's previous, finished session.
        self._sessions[command.user_id] = session
        for trade in session.trades:
            session.tasks[trade.id] = asyncio.create_task(self._drive(session, trade))
        logger.info(
            "Started automated session for user %s with %d simulated trades",
            command.user_id,
            len(session.trades),
        )
        return AutomationSnapshot.of(session)

    def status(self, user_id: str) -> AutomationSnapshot:
        session = self._sessions.get(user_id)
        if session is None:
            raise AutomationSessionNotFoundError("No automated trading session found")
        return AutomationSnapshot.of(session)

    async def stop(self, user_id: str) -> AutomationSnapshot:
        """Manually stop every active trade of the user's session."""
        session = self._sessions.get(user_id)
        if session is None or not session.is_running:
            raise AutomationSessionNotFoundError("No running automated trading session")
        session.stopped = True
        await self._cancel_tasks(session)

        now = self._clock()
        for trade in session.trades:
            if not trade.is_active:
                continue
            trade.stop(now)
            session.tally.record(trade)
            await asyncio.to_thread(self._persist, session, trade, True)
        logger.info("Stopped automated session for user %s", user_id)
        return AutomationSnapshot.of(session)

    async def shutdown(self) -> None:
        """Cancel every task without persisting; used at application exit."""
        for session in self._sessions.values():
            session.stopped = True
            await self._cancel_tasks(session)

    async def _cancel_tasks(self, session: AutomationSession) -> None:
        pending = [task for task in session.tasks.values() if not task.done()]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        session.tasks.clear()

    async def _drive(self, session: AutomationSession, trade: SimulatedTrade) -> None:
        try:
            await self._run_trade(session, trade)
        finally:
            session.tasks.pop(trade.id, None)

    async def _run_trade(self, session: AutomationSession, trade: SimulatedTrade) -> None:
        while trade.is_active:
            await asyncio.sleep(self._tick_seconds)
            finished = trade.advance(
                now=self._clock(),
                price_draw=self._rng.random(),
                outcome_draw=self._rng.random(),
                win_probability=self._win_probability,
                payout_ratio=self._payout_ratio,
            )
            if finished:
                session.tally.record(trade)
                logger.info(
                    "Simulated trade %s on %s finished as %s (pnl %.2f)",
                    trade.id,
                    trade.instrument,
                    trade.status.value,
                    trade.pnl,
                )
                await asyncio.to_thread(self._persist, session, trade, False)

    def _persist(self, session: AutomationSession, trade: SimulatedTrade, manual: bool) -> None:
        metadata = {
            "mode": session.plan.trading_mode.value,
            "duration": f"{trade.duration_seconds}s",
            "accountType": session.account_type.value,
            "automated": True,
            "tradeCategory": session.trade_category,
            "reasoning": trade.reasoning,
        }
        if manual:
            metadata["manualStop"] = True
        try:
            created = self._create_trade.execute(
                CreateTradeCommand(
                    user_id=session.user_id,
                    symbol=trade.instrument,
                    type="buy" if trade.action is ContractType.CALL else "sell",
                    amount=trade.stake,
                    price=trade.entry_price,
                    metadata=metadata,
                    ai_strategy_id=session.plan.strategy_id,
                    duration_seconds=trade.duration_seconds,
                    open_time=trade.started_at,
                )
            )
            self._close_trade.execute(
                CloseTradeCommand(
                    trade_id=created.id,
                    exit_price=trade.current_price,
                    metadata={
                        "outcome": MANUAL_STOP_OUTCOME if manual else trade.status.value,
                        "pnl": trade.pnl,
                        "reason": MANUAL_STOP_REASON if manual else COMPLETED_REASON,
                    },
                )
            )
        except Exception:
            logger.exception(
                "Failed to record simulated trade %s for user %s", trade.id, session.user_id
            )
