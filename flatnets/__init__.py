"""flatnets public API."""

from .config import build_network, load_preset, presets
from .core import activations  # noqa: F401
from .core.errors import FlatNetError, IndexOutOfRange, ShapeMismatch, StructuralError
from .core.flat import FlatBuffer, FlatMatrix, FlatVector
from .core.layers import BasicLayer, DropoutLayer, Layer
from .core.network import BasicNetwork
from .core.randomize import ConstantRandomizer, RangeRandomizer, XavierRandomizer

__all__ = [
    "BasicLayer",
    "BasicNetwork",
    "ConstantRandomizer",
    "DropoutLayer",
    "FlatBuffer",
    "FlatMatrix",
    "FlatNetError",
    "FlatVector",
    "IndexOutOfRange",
    "Layer",
    "RangeRandomizer",
    "ShapeMismatch",
    "StructuralError",
    "XavierRandomizer",
    "activations",
    "build_network",
    "load_preset",
    "presets",
]
