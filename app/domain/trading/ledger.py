"""
Trade ledger rules.

Pure functions for P&L calculation, the consecutive-trade win-rate
adjustment applied when a trade is closed, and the aggregates derived
from closed trades (profit summary, per-strategy performance).
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Mapping, Optional

from app.domain.trading.entities import ProfitSummary, StrategyPerformance, Trade

MIN_SEQUENCE_LENGTH = 5
MAX_SEQUENCE_LENGTH = 20
MIN_GAP = timedelta(minutes=5)
MAX_GAP = timedelta(minutes=10)
TARGET_WIN_RATE_PERCENT = 75.0
ADJUSTED_PROFIT = 0.01
LOOKBACK_FACTOR = 1.5

UNKNOWN_STRATEGY_NAME = "Unknown Strategy"

_LONG_SIDES = frozenset({"buy", "call"})


def calculate_pnl(trade: Trade, exit_price: float) -> float:
    """Return the P&L of closing ``trade`` at ``exit_price``.

    Buy/CALL trades profit when the price rises, everything else when
    it falls.
    """
    if trade.type.lower() in _LONG_SIDES:
        return (exit_price - trade.price) * trade.amount
    return (trade.price - exit_price) * trade.amount


def sequence_lookback_start(closed_at: datetime) -> datetime:
    """Oldest close time that can still belong to a qualifying sequence."""
    return closed_at - MAX_SEQUENCE_LENGTH * MAX_GAP * LOOKBACK_FACTOR


@dataclass(frozen=True)
class WinRateAdjustment:
    """Outcome of the sequence check for one closing trade.

    Attributes:
        pnl: The P&L to store.
        original_pnl: The P&L before any adjustment.
        adjusted: True if ``pnl`` was replaced.
        sequence_length: Trades in the chain, including the closing one.
        win_rate: Natural win rate of the chain in percent.
    """

    pnl: float
    original_pnl: float
    adjusted: bool
    sequence_length: int
    win_rate: Optional[float]


def build_sequence(
    closed_at: datetime,
    current_pnl: float,
    recent_closed: Iterable[Trade],
) -> list[float]:
    """Chain recent closed trades spaced 5-10 minutes apart.

    ``recent_closed`` must be ordered by close time, newest first. Each
    link is measured from the last trade kept in the chain: a gap under
    five minutes skips the trade, a gap over ten minutes ends the chain.

    Returns:
        Profits of the chain, starting with ``current_pnl``.
    """
    profits = [current_pnl]
    last_time = closed_at
    for trade in recent_closed:
        if trade.close_time is None:
            continue
        gap = last_time - trade.close_time
        if MIN_GAP <= gap <= MAX_GAP:
            profits.append(trade.profit or 0.0)
            last_time = trade.close_time
            if len(profits) >= MAX_SEQUENCE_LENGTH:
                break
        elif gap > MAX_GAP:
            break
    return profits


def apply_win_rate_adjustment(
    closed_at: datetime,
    current_pnl: float,
    recent_closed: Iterable[Trade],
) -> WinRateAdjustment:
    """Nudge a losing close to a nominal win when its sequence underperforms.

    A losing or break-even trade that ends a chain of 5 to 20 trades
    whose win rate is below 75% is recorded with a profit of 0.01.
    """
    profits = build_sequence(closed_at, current_pnl, recent_closed)
    length = len(profits)
    if not MIN_SEQUENCE_LENGTH <= length <= MAX_SEQUENCE_LENGTH:
        return WinRateAdjustment(current_pnl, current_pnl, False, length, None)

    wins = sum(1 for profit in profits if profit > 0)
    win_rate = wins / length * 100
    if win_rate < TARGET_WIN_RATE_PERCENT and current_pnl <= 0:
        return WinRateAdjustment(ADJUSTED_PROFIT, current_pnl, True, length, win_rate)
    return WinRateAdjustment(current_pnl, current_pnl, False, length, win_rate)


def summarize(user_id: str, closed_trades: Iterable[Trade], now: datetime) -> ProfitSummary:
    """Aggregate a user's closed trades into a profit summary."""
    profits = [trade.profit or 0.0 for trade in closed_trades]
    total = len(profits)
    winning = sum(1 for profit in profits if profit > 0)
    return ProfitSummary(
        user_id=user_id,
        total_trades=total,
        winning_trades=winning,
        losing_trades=total - winning,
        total_profit=sum(profits),
        win_rate=(winning / total * 100) if total else 0.0,
        last_updated=now,
    )


def strategy_performance(
    closed_trades: Iterable[Trade],
    strategy_names: Mapping[str, str],
) -> list[StrategyPerformance]:
    """Group closed AI trades by strategy.

    Trades without a strategy id or without a recorded profit are ignored.
    """
    buckets: dict[str, list[float]] = {}
    for trade in closed_trades:
        if trade.ai_strategy_id is None or trade.profit is None:
            continue
        buckets.setdefault(trade.ai_strategy_id, []).append(trade.profit)

    results = []
    for strategy_id, profits in buckets.items():
        total = len(profits)
        winning = sum(1 for profit in profits if profit > 0)
        results.append(
            StrategyPerformance(
                strategy_id=strategy_id,
                strategy_name=strategy_names.get(strategy_id, UNKNOWN_STRATEGY_NAME),
                total_trades=total,
                winning_trades=winning,
                losing_trades=total - winning,
                win_rate=round(winning / total * 100, 2),
                total_pnl=round(sum(profits), 2),
            )
        )
    return results
