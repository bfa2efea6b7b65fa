"""Reporting utilities for flatnets."""

from .layout import describe_layout, write_layout

__all__ = ["describe_layout", "write_layout"]
