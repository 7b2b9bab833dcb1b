"""Relational persistence: schema, engine factory and shared helpers."""
