"""Polymarket CLOB trading gateway: simplified trade requests in, signed orders out."""

__version__ = "0.1.0"
