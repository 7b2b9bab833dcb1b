"""
Market hours for supported instruments.

Forex and commodity pairs follow the standard forex week
(Sunday 21:00 UTC to Friday 21:00 UTC). Crypto and synthetic indices
trade around the clock. Public holidays are not modelled.
"""

from datetime import datetime, timezone
from typing import Optional

from app.domain.trading.entities import InstrumentType, MarketStatus
from app.domain.trading.instruments import get_instrument, is_volatility_instrument

FOREX_CLOSE_HOUR_UTC = 21
SATURDAY = 5
SUNDAY = 6
FRIDAY = 4


def is_forex_market_open(moment: datetime) -> bool:
    """Return True if ``moment`` falls inside standard forex hours."""
    moment = moment.astimezone(timezone.utc)
    weekday = moment.weekday()
    if weekday == SATURDAY:
        return False
    if weekday == SUNDAY and moment.hour < FOREX_CLOSE_HOUR_UTC:
        return False
    if weekday == FRIDAY and moment.hour >= FOREX_CLOSE_HOUR_UTC:
        return False
    return True


def _trades_around_the_clock(instrument: str) -> bool:
    known = get_instrument(instrument)
    if known is not None and known.type is InstrumentType.CRYPTO:
        return True
    return is_volatility_instrument(instrument)


def get_market_status(instrument: str, now: Optional[datetime] = None) -> MarketStatus:
    """Return whether an instrument's market is open and a user-facing message.

    Unknown instruments are treated as forex-like.
    """
    if _trades_around_the_clock(instrument):
        return MarketStatus(instrument, True, f"{instrument} market is Open 24/7.")

    is_open = is_forex_market_open(now or datetime.now(timezone.utc))
    if is_open:
        message = f"{instrument} market is likely Open."
    else:
        message = (
            f"{instrument} market is likely Closed. "
            "(Standard Forex Hours: Sun 21:00 - Fri 21:00 UTC)"
        )
    return MarketStatus(instrument, is_open, message)
