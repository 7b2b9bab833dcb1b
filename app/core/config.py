"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here: no scattered magic strings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_default: Default rate limit for all endpoints.
        rate_limit_auth: Rate limit for login, registration and reset endpoints.
        rate_limit_enabled: Turn rate limiting off, e.g. in tests.
        database_url: SQLAlchemy URL of the trade ledger database.
        session_ttl_hours: Lifetime of a bearer session token.
        encryption_key: Fernet key used to encrypt stored broker tokens.

    Broker (Deriv) and LLM settings are grouped below. The broker app id
    defaults to the public demo application.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "SynthTrade"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_default: str = "60/minute"
    rate_limit_auth: str = "10/minute"
    rate_limit_enabled: bool = True
    max_request_size_bytes: int = 1_048_576  # 1 MB

    database_url: str = "sqlite:///./synthtrade.db"
    session_ttl_hours: int = 24
    encryption_key: Optional[str] = None
    app_base_url: str = "http://localhost:3000"
    password_reset_ttl_minutes: int = 60

    # Deriv WebSocket API
    deriv_ws_url: str = "wss://ws.derivws.com/websockets/v3"
    deriv_app_id: str = "80447"
    deriv_request_timeout_seconds: float = 10.0
    deriv_trade_timeout_seconds: float = 15.0

    # Hosted LLM (OpenAI-compatible chat completions)
    llm_api_url: str = "https://openrouter.ai/api/v1/chat/completions"
    llm_api_key: Optional[str] = None
    llm_model: str = "google/gemini-2.0-flash-001"
    llm_temperature: float = 0.3
    llm_max_tokens: int = 1500
    llm_timeout_seconds: float = 30.0

    # Simulated automated trading
    automation_tick_seconds: float = 1.0
    simulated_win_probability: float = 0.70
    simulated_payout_ratio: float = 0.85
    default_stop_loss_percent: float = 5.0

    def get_deriv_endpoint(self) -> str:
        """Return the broker WebSocket URL including the app id."""
        return f"{self.deriv_ws_url}?app_id={self.deriv_app_id}"


settings = Settings()
