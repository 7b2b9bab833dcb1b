"""
Infrastructure adapters for the trading bounded context.

Each adapter implements a domain port (ABC) and connects
to an external system: the trade ledger tables, the broker
WebSocket API or pandas-ta.
"""
