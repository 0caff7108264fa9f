"""Inventory the public type hierarchy of a widget library."""

__version__ = "0.1.0"
