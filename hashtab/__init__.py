"""Compute, verify and export file checksums in common sumfile formats."""

__version__ = "0.1.0"