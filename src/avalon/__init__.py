"""Avalon - rules engine for The Resistance: Avalon."""

__version__ = "0.1.0"
