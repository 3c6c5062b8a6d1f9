"""Wage and leave entitlement engine for transport and logistics agreements."""

__version__ = "1.0.0"
