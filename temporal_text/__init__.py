"""Temporal Text: stable-text detection and periodic ranked notification."""

__version__ = "0.1.0"
