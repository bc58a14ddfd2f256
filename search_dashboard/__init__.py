"""Authenticated analytics dashboard over recorded search queries."""

__version__ = "1.0.0"
