"""Activation functions that can write into preallocated buffer views."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

import numpy as np

from .types import ActivationFn, Array


def linear(x: Array, out: Optional[Array] = None) -> Array:
    """Identity activation."""

    if out is None:
        return np.array(x, copy=True)
    out[...] = x
    return out


def relu(x: Array, out: Optional[Array] = None) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0, out=out)


def sigmoid(x: Array, out: Optional[Array] = None) -> Array:
    """Logistic sigmoid, computed without temporaries when ``out`` is given."""

    out = np.negative(x, out=out)
    np.exp(out, out=out)
    out += 1.0
    return np.reciprocal(out, out=out)


def tanh(x: Array, out: Optional[Array] = None) -> Array:
    return np.tanh(x, out=out)


def softmax(x: Array, out: Optional[Array] = None) -> Array:
    """Numerically stable softmax over a single vector."""

    if x.size == 0:
        return linear(x, out)
    out = np.subtract(x, np.max(x), out=out)
    np.exp(out, out=out)
    out /= np.sum(out)
    return out


_REGISTRY: Dict[str, ActivationFn] = {
    "linear": linear,
    "relu": relu,
    "sigmoid": sigmoid,
    "tanh": tanh,
    "softmax": softmax,
}


def register_activation(name: str, fn: ActivationFn) -> None:
    _REGISTRY[name] = fn


def activation_names() -> Iterable[str]:
    return sorted(_REGISTRY)


def get_activation(name: str) -> ActivationFn:
    if name not in _REGISTRY:
        available = ", ".join(activation_names())
        raise KeyError(f"Unknown activation {name!r}. Available activations: {available}")
    return _REGISTRY[name]


def activation_name(fn: ActivationFn) -> str:
    """Return the registered name of ``fn``, or its ``__name__``."""

    for name, candidate in _REGISTRY.items():
        if candidate is fn:
            return name
    return getattr(fn, "__name__", repr(fn))


__all__ = [
    "linear",
    "relu",
    "sigmoid",
    "tanh",
    "softmax",
    "activation_name",
    "activation_names",
    "get_activation",
    "register_activation",
]
