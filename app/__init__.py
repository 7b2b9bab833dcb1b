"""
SynthTrade: retail trading dashboard backend for Deriv instruments.

Application package root. This is a modular monolith using
hexagonal architecture (ports & adapters) with domain-driven design.

Bounded contexts:
    - accounts: Users, broker login, sessions, settings, profile.
    - trading: Trade ledger, broker gateway, indicators, automation.
    - strategy: LLM strategy generation and market sentiment.

Layers:
    - domain: Pure business logic, entities, ports (ABCs), errors.
    - application: Use cases, DTOs, orchestration.
    - infrastructure: Adapters (DB, broker WebSocket, LLM) implementing domain ports.
    - interfaces: FastAPI routers, Pydantic schemas.
    - shared: Cross-cutting concerns (errors, security, logging).
"""
