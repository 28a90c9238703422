"""Typhoon work/school suspension status engine for Taiwan."""

__version__ = "0.1.0"
