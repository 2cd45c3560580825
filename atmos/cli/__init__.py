"""Command line interface for atmos."""
