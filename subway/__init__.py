"""Subway line section management service."""

__version__ = "0.1.0"
