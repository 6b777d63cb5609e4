"""Cadence - recurring appointment processing."""
__version__ = "0.1.0"
