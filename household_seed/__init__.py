"""Deterministic large-fixture generator for the household-management store."""

__version__ = "0.1.0"
