"""
Dependency injection for the trading bounded context.

Wires use cases to their infrastructure adapters.
This is the composition root for trading; routers never construct
repositories or gateways themselves.
"""

from app.application.trading.close_trade import CloseTradeUseCase
from app.application.trading.create_trade import CreateTradeUseCase, RecordBrokerTradeUseCase
from app.application.trading.market_data import (
    GetCandlesUseCase,
    GetIndicatorsUseCase,
    GetMarketStatusUseCase,
    ListInstrumentsUseCase,
    MarketDataLoader,
)
from app.application.trading.settle_broker_trade import SettleBrokerTradeUseCase
from app.application.trading.trade_reports import (
    GetProfitSummaryUseCase,
    GetStrategyPerformanceUseCase,
    GetTradeHistoryUseCase,
)
from app.infrastructure.accounts.user_repository import SqlUserRepository
from app.infrastructure.trading.profit_summary_repository import SqlProfitSummaryRepository
from app.infrastructure.trading.trade_repository import SqlTradeRepository
from app.interfaces.dependencies import engine, get_broker_gateway, get_indicator_calculator


def market_data_loader() -> MarketDataLoader:
    return MarketDataLoader(get_broker_gateway(), get_indicator_calculator())


def get_create_trade_use_case() -> CreateTradeUseCase:
    """Build CreateTradeUseCase with its infrastructure dependencies."""
    return CreateTradeUseCase(SqlTradeRepository(engine()), SqlUserRepository(engine()))


def get_record_broker_trade_use_case() -> RecordBrokerTradeUseCase:
    """Build RecordBrokerTradeUseCase with its infrastructure dependencies."""
    return RecordBrokerTradeUseCase(SqlTradeRepository(engine()))


def get_close_trade_use_case() -> CloseTradeUseCase:
    """Build CloseTradeUseCase with its infrastructure dependencies."""
    return CloseTradeUseCase(SqlTradeRepository(engine()), SqlProfitSummaryRepository(engine()))


def get_settle_broker_trade_use_case() -> SettleBrokerTradeUseCase:
    """Build SettleBrokerTradeUseCase with its infrastructure dependencies."""
    return SettleBrokerTradeUseCase(SqlTradeRepository(engine()))


def get_trade_history_use_case() -> GetTradeHistoryUseCase:
    return GetTradeHistoryUseCase(SqlTradeRepository(engine()))


def get_profit_summary_use_case() -> GetProfitSummaryUseCase:
    return GetProfitSummaryUseCase(SqlProfitSummaryRepository(engine()))


def get_strategy_performance_use_case() -> GetStrategyPerformanceUseCase:
    return GetStrategyPerformanceUseCase(SqlTradeRepository(engine()))


def get_list_instruments_use_case() -> ListInstrumentsUseCase:
    return ListInstrumentsUseCase()


def get_market_status_use_case() -> GetMarketStatusUseCase:
    return GetMarketStatusUseCase()


def get_candles_use_case() -> GetCandlesUseCase:
    """Build GetCandlesUseCase with its infrastructure dependencies."""
    return GetCandlesUseCase(get_broker_gateway())


def get_indicators_use_case() -> GetIndicatorsUseCase:
    """Build GetIndicatorsUseCase with its infrastructure dependencies."""
    return GetIndicatorsUseCase(get_broker_gateway(), market_data_loader())
