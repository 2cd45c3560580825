"""Atmos terraform executor."""

__version__ = "0.1.0"
