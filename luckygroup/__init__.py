"""Participant roster, lucky draw, and random grouping toolkit."""

__version__ = "0.1.0"
