"""
Application layer for the accounts bounded context.

Registration, sessions, broker login, password reset, profile,
settings and saved items.
"""
