"""
Accounts bounded context: domain layer.

Users, broker account linkage, sessions, password reset tokens
and saved items.
"""
