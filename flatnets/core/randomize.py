"""Weight initializers that rewrite a finalized network's weight vector."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Protocol

import numpy as np

from .errors import StructuralError

if TYPE_CHECKING:  # pragma: no cover
    from .network import BasicNetwork


class NetworkRandomizer(Protocol):
    """Anything that can overwrite ``network.weights`` in place."""

    def randomize(self, network: "BasicNetwork") -> None:
        """Rewrite the weights without changing the vector's length."""


def _require_finalized(network: "BasicNetwork") -> None:
    if not network.finalized:
        raise StructuralError("Cannot randomize a network before finalize_structure()")


@dataclass
class XavierRandomizer:
    """Glorot normal initialisation, one weight matrix at a time."""

    seed: Optional[int] = None
    rng: np.random.Generator = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.rng = np.random.default_rng(self.seed)

    def randomize(self, network: "BasicNetwork") -> None:
        _require_finalized(network)
        for layer in network.layers:
            matrix = layer.weight_matrix
            if matrix is None:
                continue
            fan_out, fan_in = matrix.shape
            std = np.sqrt(2.0 / (fan_in + fan_out))
            matrix.view()[:] = self.rng.normal(0.0, std, size=matrix.shape)


@dataclass
class RangeRandomizer:
    """Uniform weights in ``[low, high)``."""

    low: float = -1.0
    high: float = 1.0
    seed: Optional[int] = None
    rng: np.random.Generator = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.high < self.low:
            raise ValueError(f"high ({self.high}) must not be below low ({self.low})")
        self.rng = np.random.default_rng(self.seed)

    def randomize(self, network: "BasicNetwork") -> None:
        _require_finalized(network)
        weights = network.weights
        weights[:] = self.rng.uniform(self.low, self.high, size=weights.shape)


@dataclass
class ConstantRandomizer:
    """Set every weight to ``value``."""

    value: float = 0.0

    def randomize(self, network: "BasicNetwork") -> None:
        _require_finalized(network)
        network.weights.fill(self.value)


__all__ = [
    "NetworkRandomizer",
    "XavierRandomizer",
    "RangeRandomizer",
    "ConstantRandomizer",
]
