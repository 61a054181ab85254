"""Persistence layer: declarative models, enums and session helpers."""
