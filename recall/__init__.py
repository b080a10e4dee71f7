"""Spaced-repetition scheduling engine with a SQLAlchemy review store."""

__version__ = "0.1.0"
