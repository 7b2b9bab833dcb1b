"""
Infrastructure layer package.

Contains concrete implementations (adapters) of the ports
defined in the domain layer: SQL repositories, the Deriv WebSocket
gateway, pandas-ta indicators and the LLM client.
"""
