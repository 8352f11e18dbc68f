"""Remo - a conversational meeting scheduling assistant."""

__version__ = "1.0.0"
