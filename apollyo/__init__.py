"""Apollyo - discover rare, brandable English-like words."""

__version__ = "0.1.0"
