"""
Tests for the simulated automated-trading engine.

Sessions run on a real event loop with a zero tick delay, a seeded
random source and a clock that jumps past every expiry after the
session starts.
"""

import asyncio
import random
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from app.application.strategy.generate_strategy import StrategyPlan
from app.application.trading.automation import (
    MANUAL_STOP_OUTCOME,
    AutomationEngine,
    StartAutomationCommand,
)
from app.application.trading.dtos import TradeResult
from app.application.trading.market_data import MarketData
from app.domain.strategy.entities import StrategyFlavor, TradeProposal, TradingMode, TradingStrategy
from app.domain.strategy.errors import StrategyGenerationError
from app.domain.trading.entities import ContractType, PriceTick, Trade, TradeStatus
from app.domain.trading.errors import AutomationSessionError, AutomationSessionNotFoundError

T0 = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


def _plan(flavor: StrategyFlavor = StrategyFlavor.MARKETS) -> StrategyPlan:
    return StrategyPlan(
        strategy=TradingStrategy(
            trades=(
                TradeProposal("EUR/USD", ContractType.CALL, 4.0, 60, "up"),
                TradeProposal("BTC/USD", ContractType.PUT, 4.0, 60, "down"),
                TradeProposal("XAU/USD", ContractType.CALL, 2.0, 60, "no data"),
            ),
            overall_reasoning="two setups",
        ),
        market_data=MarketData(
            ticks={
                "EUR/USD": [PriceTick(1, 1.1, "t")],
                "BTC/USD": [PriceTick(1, 60000.0, "t")],
            }
        ),
        strategy_id="trend_rider",
        flavor=flavor,
        trading_mode=TradingMode.BALANCED,
    )


def _clock_jumping_after_start():
    calls = iter([T0])
    return lambda: next(calls, T0 + timedelta(hours=1))


def _engine(tick_seconds: float = 0.0, **kwargs):
    generate = MagicMock()
    generate.plan.return_value = kwargs.pop("plan", _plan())
    create_trade = MagicMock()
    create_trade.execute.side_effect = lambda command: TradeResult.from_trade(
        Trade.open_new(command.user_id, command.symbol, command.type, command.amount, command.price, command.amount)
    )
    close_trade = MagicMock()
    engine = AutomationEngine(
        generate,
        create_trade,
        close_trade,
        tick_seconds=tick_seconds,
        rng=random.Random(7),
        **kwargs,
    )
    return engine, create_trade, close_trade


def _command(**overrides) -> StartAutomationCommand:
    fields = dict(user_id="u1", total_stake=10.0, instruments=("EUR/USD", "BTC/USD", "XAU/USD"), trading_mode="balanced")
    fields.update(overrides)
    return StartAutomationCommand(**fields)


async def _wait_for(condition, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not condition():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


class TestStart:
    """Tests for starting a simulated session."""

    def test_builds_trades_from_priced_proposals(self) -> None:
        engine, _, _ = _engine(tick_seconds=10, clock=lambda: T0)

        async def scenario():
            snapshot = await engine.start(_command(stop_loss_percent=10.0))
            await engine.shutdown()
            return snapshot

        snapshot = asyncio.run(scenario())

        assert snapshot.is_running
        assert snapshot.strategy_id == "trend_rider"
        assert [t.instrument for t in snapshot.trades] == ["EUR/USD", "BTC/USD"]
        eur, btc = snapshot.trades
        assert eur.stop_loss_price == 0.99
        assert btc.stop_loss_price == 66000.0

    def test_volatility_sessions_use_default_stop_loss(self) -> None:
        engine, _, _ = _engine(tick_seconds=10, clock=lambda: T0, plan=_plan(StrategyFlavor.VOLATILITY))

        async def scenario():
            snapshot = await engine.start(_command(stop_loss_percent=10.0, flavor="volatility"))
            await engine.shutdown()
            return snapshot

        eur = asyncio.run(scenario()).trades[0]
        assert eur.stop_loss_price == 1.045

    def test_one_session_per_user(self) -> None:
        engine, _, _ = _engine(tick_seconds=10, clock=lambda: T0)

        async def scenario():
            await engine.start(_command())
            try:
                with pytest.raises(AutomationSessionError, match="already running"):
                    await engine.start(_command())
            finally:
                await engine.shutdown()

        asyncio.run(scenario())

    def test_concurrent_starts_keep_a_single_session(self) -> None:
        engine, _, _ = _engine(tick_seconds=10, clock=lambda: T0)

        async def scenario():
            outcomes = await asyncio.gather(
                engine.start(_command()), engine.start(_command()), return_exceptions=True
            )
            await engine.shutdown()
            current = asyncio.current_task()
            live = [t for t in asyncio.all_tasks() if t is not current and not t.done()]
            return outcomes, live

        outcomes, live = asyncio.run(scenario())

        errors = [o for o in outcomes if isinstance(o, AutomationSessionError)]
        assert len(errors) == 1
        assert "already running" in errors[0].message
        assert live == []

    def test_failed_planning_releases_the_user(self) -> None:
        engine, _, _ = _engine(tick_seconds=10, clock=lambda: T0)
        engine._generate.plan.side_effect = [StrategyGenerationError("LLM request failed"), _plan()]

        async def scenario():
            with pytest.raises(StrategyGenerationError):
                await engine.start(_command())
            snapshot = await engine.start(_command())
            await engine.shutdown()
            return snapshot

        assert asyncio.run(scenario()).is_running

    def test_invalid_account_type(self) -> None:
        engine, _, _ = _engine()
        with pytest.raises(AutomationSessionError, match="Invalid account type"):
            asyncio.run(engine.start(_command(account_type="paper")))


class TestCompletion:
    """Tests for trades running to expiry."""

    def test_expired_trades_are_recorded_in_the_ledger(self) -> None:
        engine, create_trade, close_trade = _engine(
            clock=_clock_jumping_after_start(), win_probability=1.0
        )

        async def scenario():
            await engine.start(_command())
            await _wait_for(lambda: close_trade.execute.call_count == 2)
            await _wait_for(lambda: not engine._sessions["u1"].tasks)
            return engine.status("u1")

        snapshot = asyncio.run(scenario())

        assert not snapshot.is_running
        assert all(t.status is TradeStatus.WON for t in snapshot.trades)
        assert snapshot.winning_trades == 2
        assert snapshot.total_net_profit == 6.8

        sides = sorted(call.args[0].type for call in create_trade.execute.call_args_list)
        assert sides == ["buy", "sell"]
        created = create_trade.execute.call_args_list[0].args[0]
        assert created.metadata["automated"] is True
        assert created.metadata["tradeCategory"] == "forexCrypto"
        assert created.ai_strategy_id == "trend_rider"
        closed = close_trade.execute.call_args_list[0].args[0]
        assert closed.metadata["outcome"] == "won"
        assert closed.metadata["pnl"] == 3.4
        assert engine._sessions["u1"].tasks == {}

    def test_ledger_failure_is_logged(self, caplog) -> None:
        engine, create_trade, _ = _engine(clock=_clock_jumping_after_start(), win_probability=0.0)
        create_trade.execute.side_effect = RuntimeError("db down")

        async def scenario():
            await engine.start(_command())
            await _wait_for(lambda: create_trade.execute.call_count == 2)
            await asyncio.sleep(0.05)
            return engine.status("u1")

        snapshot = asyncio.run(scenario())
        assert snapshot.losing_trades == 2
        assert "Failed to record simulated trade" in caplog.text


class TestStop:
    """Tests for manually stopping a session."""

    def test_stop_forfeits_open_trades(self) -> None:
        engine, _, close_trade = _engine(tick_seconds=10, clock=lambda: T0)

        async def scenario():
            await engine.start(_command())
            return await engine.stop("u1")

        snapshot = asyncio.run(scenario())

        assert not snapshot.is_running
        assert snapshot.losing_trades == 2
        assert snapshot.total_net_profit == -8.0
        assert all(t.reasoning.endswith("Manually stopped.") for t in snapshot.trades)
        outcomes = {call.args[0].metadata["outcome"] for call in close_trade.execute.call_args_list}
        assert outcomes == {MANUAL_STOP_OUTCOME}

    def test_stop_without_session(self) -> None:
        engine, _, _ = _engine()
        with pytest.raises(AutomationSessionNotFoundError):
            asyncio.run(engine.stop("u1"))

    def test_status_without_session(self) -> None:
        engine, _, _ = _engine()
        with pytest.raises(AutomationSessionNotFoundError):
            engine.status("u1")
