"""Milk sales, purchases and own-farm production ledger."""

__version__ = "0.1.0"
