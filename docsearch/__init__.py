"""Hybrid semantic + keyword search over document chunks."""

__version__ = "0.1.0"
