"""Accounts context adapters: SQL repositories, password hashing, notifiers."""
