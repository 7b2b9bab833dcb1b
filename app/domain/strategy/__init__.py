"""
Strategy bounded context: domain layer.

AI strategy catalog, trade proposals and the contracts for
LLM-backed strategy generation and market sentiment.
"""
