"""Error kinds raised by the flat network engine."""

from __future__ import annotations


class FlatNetError(Exception):
    """Base class for every precondition failure in :mod:`flatnets`."""


class StructuralError(FlatNetError, RuntimeError):
    """The network or buffer is in the wrong lifecycle state for the call."""


class ShapeMismatch(FlatNetError, ValueError):
    """An input or output sequence has the wrong length."""


class IndexOutOfRange(FlatNetError, IndexError):
    """A layer, neuron or buffer index lies outside its valid range."""


__all__ = ["FlatNetError", "StructuralError", "ShapeMismatch", "IndexOutOfRange"]
