"""Simulated Basketball Association: league bookkeeping and game simulation."""

__version__ = "0.1.0"
