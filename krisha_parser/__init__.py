"""Krisha.kz listings extraction engine."""

__version__ = "1.2.0"
