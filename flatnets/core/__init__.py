"""Core flat-buffer network engine."""

from . import activations, errors, flat, layers, network, randomize, types

__all__ = ["activations", "errors", "flat", "layers", "network", "randomize", "types"]
