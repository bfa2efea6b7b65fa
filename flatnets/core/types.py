"""Core typing contracts for flatnets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

Array = np.ndarray

DTYPE = np.float64

ActivationFn = Callable[..., Array]


@dataclass
class StructureCounts:
    """Running totals accumulated while layers finalize their structure."""

    neuron_count: int = 0
    weight_count: int = 0

    def add_neurons(self, count: int) -> None:
        self.neuron_count += count

    def add_weights(self, count: int) -> None:
        self.weight_count += count


@dataclass(frozen=True)
class LayerLayout:
    """Offsets assigned to one layer once the network is finalized."""

    index: int
    count: int
    total_count: int
    has_bias: bool
    sums_offset: int
    output_offset: int
    weight_index: Optional[int]
    weight_shape: Optional[tuple[int, int]]
