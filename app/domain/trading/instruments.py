"""
Instrument catalog.

Names, price precision and broker symbols of every supported instrument.
"""

import logging

from app.domain.trading.entities import Instrument, InstrumentType

logger = logging.getLogger(__name__)

DEFAULT_INSTRUMENT = "EUR/USD"
FALLBACK_BROKER_SYMBOL = "R_100"
FALLBACK_DECIMAL_PLACES = 2

SUPPORTED_INSTRUMENTS: tuple[Instrument, ...] = (
    Instrument("EUR/USD", "EUR/USD", InstrumentType.FOREX, 5),
    Instrument("GBP/USD", "GBP/USD", InstrumentType.FOREX, 5),
    Instrument("BTC/USD", "BTC/USD", InstrumentType.CRYPTO, 2),
    Instrument("ETH/USD", "ETH/USD", InstrumentType.CRYPTO, 2),
    Instrument("XAU/USD", "Gold (XAU/USD)", InstrumentType.COMMODITY, 2),
    Instrument("Palladium/USD", "Palladium/USD", InstrumentType.COMMODITY, 2),
    Instrument("Platinum/USD", "Platinum/USD", InstrumentType.COMMODITY, 2),
    Instrument("Silver/USD", "Silver/USD", InstrumentType.COMMODITY, 4),
    Instrument("Volatility 10 Index", "Volatility 10 Index", InstrumentType.VOLATILITY, 3),
    Instrument("Volatility 25 Index", "Volatility 25 Index", InstrumentType.VOLATILITY, 3),
    Instrument("Volatility 50 Index", "Volatility 50 Index", InstrumentType.VOLATILITY, 2),
    Instrument("Volatility 75 Index", "Volatility 75 Index", InstrumentType.VOLATILITY, 4),
    Instrument("Volatility 100 Index", "Volatility 100 Index", InstrumentType.VOLATILITY, 2),
)

_BY_NAME = {instrument.name: instrument for instrument in SUPPORTED_INSTRUMENTS}

BROKER_SYMBOLS = {
    "EUR/USD": "frxEURUSD",
    "GBP/USD": "frxGBPUSD",
    "BTC/USD": "cryBTCUSD",
    "ETH/USD": "cryETHUSD",
    "XAU/USD": "frxXAUUSD",
    "Palladium/USD": "frxXPDUSD",
    "Platinum/USD": "frxXPTUSD",
    "Silver/USD": "frxXAGUSD",
    "Volatility 10 Index": "R_10",
    "Volatility 25 Index": "R_25",
    "Volatility 50 Index": "R_50",
    "Volatility 75 Index": "R_75",
    "Volatility 100 Index": "R_100",
}


def get_instrument(name: str) -> Instrument | None:
    return _BY_NAME.get(name)


def is_volatility_instrument(name: str) -> bool:
    instrument = _BY_NAME.get(name)
    if instrument is not None:
        return instrument.type is InstrumentType.VOLATILITY
    return name.startswith(("Volatility", "Boom", "Crash", "Jump"))


def get_decimal_places(name: str) -> int:
    """Return the number of decimals prices of ``name`` are quoted with."""
    instrument = _BY_NAME.get(name)
    if instrument is not None:
        return instrument.decimal_places
    if name.startswith(("Boom", "Crash")):
        return 3
    if name.startswith("Jump"):
        return 2
    return FALLBACK_DECIMAL_PLACES


def to_broker_symbol(name: str) -> str:
    """Map a display instrument name to the broker's symbol.

    Unknown names fall back to the Volatility 100 index.
    """
    symbol = BROKER_SYMBOLS.get(name)
    if symbol is None:
        logger.warning(
            "No broker symbol for instrument %r, falling back to %s",
            name,
            FALLBACK_BROKER_SYMBOL,
        )
        return FALLBACK_BROKER_SYMBOL
    return symbol


def round_price(name: str, value: float) -> float:
    return round(value, get_decimal_places(name))
