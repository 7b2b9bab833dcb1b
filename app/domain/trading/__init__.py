"""
Trading bounded context: domain layer.

This module contains all domain logic for the trading context:
- Instrument catalog and market hours
- Trade ledger rules (P&L, win-rate sequence adjustment, summaries)
- Simulated automated-trade outcomes
- Broker gateway contract
"""
