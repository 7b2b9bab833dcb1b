"""
Prompt loader for the strategy generator and sentiment analyzer.

Loads prompt templates from YAML configuration and renders the
market-data blocks (ticks, indicators) they embed.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import yaml

from app.domain.trading.entities import IndicatorSnapshot, PriceTick

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"


def _fmt(value: Optional[float]) -> str:
    return f"{value:.4f}" if value is not None else NOT_AVAILABLE


def format_indicator_lines(snapshot: IndicatorSnapshot) -> list[str]:
    """Render one snapshot as ``Name: value`` lines."""
    macd = snapshot.macd
    bands = snapshot.bollinger_bands
    return [
        f"RSI: {_fmt(snapshot.rsi)}",
        "MACD: "
        + (
            f"Line({macd.macd:.4f}), Signal({macd.signal:.4f}), Hist({macd.histogram:.4f})"
            if macd
            else NOT_AVAILABLE
        ),
        "Bollinger Bands: "
        + (
            f"Upper({bands.upper:.4f}), Middle({bands.middle:.4f}), Lower({bands.lower:.4f})"
            if bands
            else NOT_AVAILABLE
        ),
        f"EMA: {_fmt(snapshot.ema)}",
        f"ATR: {_fmt(snapshot.atr)}",
    ]


def format_indicators_block(indicators: Mapping[str, IndicatorSnapshot]) -> str:
    """Render the per-instrument indicator section of a strategy prompt."""
    if not indicators:
        return ""
    lines = ["", "Calculated Technical Indicators:"]
    for instrument, snapshot in indicators.items():
        lines.append(f"Instrument: {instrument}")
        lines.extend(f"  {line}" for line in format_indicator_lines(snapshot))
    return "\n".join(lines) + "\n"


def format_ticks_block(ticks: Mapping[str, Sequence[PriceTick]]) -> str:
    if not ticks:
        return "No recent ticks available."
    lines = []
    for instrument, series in ticks.items():
        lines.append(f"Instrument: {instrument}")
        lines.extend(f"  - Time: {tick.time}, Price: {tick.price}" for tick in series)
    return "\n".join(lines)


class PromptLoader:
    """Load and render prompts from YAML."""

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize prompt loader.

        Args:
            config_path: Path to prompts.yaml file
        """
        if config_path is None:
            config_path = Path(__file__).parent / "prompts.yaml"
        self.config_path = config_path
        self.prompts = self._load_prompts()

    def _load_prompts(self) -> Dict[str, Any]:
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                prompts = yaml.safe_load(f)
            logger.info("Loaded prompts from %s", self.config_path)
            return prompts
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load prompts from %s: %s", self.config_path, e)
            return self._get_fallback_prompts()

    def _get_fallback_prompts(self) -> Dict[str, Any]:
        """Minimal prompts used when the YAML file cannot be read."""
        json_rule = "Reply with a single JSON object and nothing else."
        return {
            "strategy_markets": {
                "system": f"You are a trading strategist. {json_rule}",
                "user_template": (
                    "Stake {total_stake}, instruments {instruments}, mode {trading_mode}, "
                    "stop-loss {stop_loss_percent}%.\n{ticks_block}\n{indicators_block}"
                ),
            },
            "strategy_volatility": {
                "system": f"You are a volatility index strategist. {json_rule}",
                "user_template": (
                    "Stake {total_stake}, indices {instruments}, mode {trading_mode}, "
                    "stop-loss {stop_loss_percent}%.\n{ticks_block}\n{indicators_block}"
                ),
            },
            "market_sentiment": {
                "system": f"You are a market analyst. {json_rule}",
                "user_template": "{instrument} ({trading_mode}) trend {price_trend}. {indicators_inline}",
            },
        }

    def get_system_prompt(self, prompt_name: str) -> str:
        return self.prompts.get(prompt_name, {}).get("system", "")

    def render(self, prompt_name: str, **fields: Any) -> str:
        """Render the user template of ``prompt_name`` with ``fields``.

        Raises:
            KeyError: If the template references a field not supplied.
        """
        template = self.prompts.get(prompt_name, {}).get("user_template", "")
        return template.format(**fields)


_prompt_loader: Optional[PromptLoader] = None


def get_prompt_loader() -> PromptLoader:
    """Get global prompt loader instance."""
    global _prompt_loader
    if _prompt_loader is None:
        _prompt_loader = PromptLoader()
    return _prompt_loader
