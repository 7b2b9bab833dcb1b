"""
Application layer for the trading bounded context.

Use cases coordinate domain entities and ports to fulfill the trade
ledger, market data, strategy execution and simulated automation
operations. No framework or infrastructure imports allowed.
"""
