"""Chaldean numerology name correction: calculations, service rules and the async client session."""

__version__ = "1.0.0"
