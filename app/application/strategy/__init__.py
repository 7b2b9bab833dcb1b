"""
Application layer for the strategy bounded context.

Use cases feed broker market data to the LLM ports and filter what
comes back.
"""
