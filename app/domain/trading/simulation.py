"""
Simulated automated-trade outcomes.

A simulated trade starts at the last observed price, drifts by a small
random factor on every tick and ends either when its stop-loss is hit
or when its duration elapses. At expiry the outcome is a weighted coin
flip: it is a placeholder, not a pricing model.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from app.domain.accounts.entities import new_id
from app.domain.trading.entities import ContractType, TradeStatus
from app.domain.trading.instruments import round_price

HIGH_VOLATILITY_STEP = 0.005
LOW_VOLATILITY_STEP = 0.0005
MANUAL_STOP_NOTE = " Manually stopped."


def stop_loss_price(
    instrument: str, entry_price: float, action: ContractType, percent: float
) -> float:
    """Return the stop-loss level ``percent`` % against the trade direction."""
    fraction = percent / 100
    if action is ContractType.CALL:
        level = entry_price * (1 - fraction)
    else:
        level = entry_price * (1 + fraction)
    return round_price(instrument, level)


def price_step_factor(instrument: str, draw: float) -> float:
    """Relative price move for one tick given a uniform draw in [0, 1)."""
    scale = HIGH_VOLATILITY_STEP if "100" in instrument else LOW_VOLATILITY_STEP
    return (draw - 0.5) * scale


@dataclass
class SimulatedTrade:
    """An in-flight simulated trade.

    Mutable on purpose: the automation engine advances it tick by tick
    until ``status`` leaves ``OPEN``.
    """

    instrument: str
    action: ContractType
    stake: float
    duration_seconds: int
    entry_price: float
    stop_loss_price: float
    started_at: datetime
    reasoning: str = ""
    id: str = field(default_factory=new_id)
    current_price: Optional[float] = None
    status: TradeStatus = TradeStatus.OPEN
    pnl: Optional[float] = None
    finished_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.current_price is None:
            self.current_price = self.entry_price

    @property
    def is_active(self) -> bool:
        return self.status is TradeStatus.OPEN

    @property
    def expires_at(self) -> datetime:
        return self.started_at + timedelta(seconds=self.duration_seconds)

    def _finish(self, status: TradeStatus, pnl: float, now: datetime) -> None:
        self.status = status
        self.pnl = pnl
        self.finished_at = now

    def advance(
        self,
        now: datetime,
        price_draw: float,
        outcome_draw: float,
        win_probability: float,
        payout_ratio: float,
    ) -> bool:
        """Apply one tick.

        Args:
            now: Current time.
            price_draw: Uniform draw driving the price move.
            outcome_draw: Uniform draw deciding the outcome at expiry.
            win_probability: Chance that an expired trade is a win.
            payout_ratio: Fraction of the stake paid out on a win.

        Returns:
            True if the trade finished on this tick.
        """
        if not self.is_active:
            return False

        moved = self.current_price * (1 + price_step_factor(self.instrument, price_draw))
        self.current_price = round_price(self.instrument, moved)

        if self.action is ContractType.CALL and self.current_price <= self.stop_loss_price:
            self._finish(TradeStatus.LOST_STOPLOSS, -self.stake, now)
            return True
        if self.action is ContractType.PUT and self.current_price >= self.stop_loss_price:
            self._finish(TradeStatus.LOST_STOPLOSS, -self.stake, now)
            return True

        if now >= self.expires_at:
            if outcome_draw < win_probability:
                self._finish(TradeStatus.WON, self.stake * payout_ratio, now)
            else:
                self._finish(TradeStatus.LOST_DURATION, -self.stake, now)
            return True
        return False

    def stop(self, now: datetime) -> None:
        """Abort the trade; a manual stop forfeits the stake."""
        if not self.is_active:
            return
        self.reasoning = (self.reasoning or "") + MANUAL_STOP_NOTE
        self._finish(TradeStatus.LOST_DURATION, -self.stake, now)


@dataclass
class SessionTally:
    """Running totals of a simulated trading session."""

    total_net_profit: float = 0.0
    trade_count: int = 0
    winning_trades: int = 0
    losing_trades: int = 0

    def record(self, trade: SimulatedTrade) -> None:
        self.total_net_profit += trade.pnl or 0.0
        self.trade_count += 1
        if trade.status is TradeStatus.WON:
            self.winning_trades += 1
        elif trade.status in (TradeStatus.LOST_DURATION, TradeStatus.LOST_STOPLOSS):
            self.losing_trades += 1
