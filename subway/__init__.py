"""Subway line section chain service."""

__version__ = "0.1.0"
