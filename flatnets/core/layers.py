"""Layer capability contract and the reference dense layer kinds."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Union

import numpy as np

from .activations import activation_name, get_activation
from .errors import StructuralError
from .flat import FlatMatrix, FlatVector
from .types import ActivationFn, StructureCounts

if TYPE_CHECKING:  # pragma: no cover
    from .network import BasicNetwork


class Layer(Protocol):
    """Capabilities the network relies on; it never inspects a layer's kind."""

    @property
    def count(self) -> int:
        """Number of units, excluding the bias unit."""

    @property
    def total_count(self) -> int:
        """Number of units including the bias unit."""

    @property
    def has_bias(self) -> bool:
        ...

    @property
    def network(self) -> Optional["BasicNetwork"]:
        """The network this layer was finalized into, if any."""

    @property
    def layer_sums(self) -> FlatVector:
        ...

    @property
    def layer_output(self) -> FlatVector:
        ...

    @property
    def weight_matrix(self) -> Optional[FlatMatrix]:
        ...

    @property
    def weight_index(self) -> Optional[int]:
        ...

    def finalize_structure(
        self, network: "BasicNetwork", layer_index: int, counts: StructureCounts
    ) -> None:
        """Register this layer's ranges with the network's shared buffers."""

    def compute_layer(self) -> None:
        """Compute sums and outputs from the previous layer's output range."""


class BasicLayer:
    """Fully connected layer with an optional always-one bias unit.

    The incoming weight matrix has shape ``(count, previous.total_count)``:
    one row per receiving unit, one column per sending unit of the previous
    layer, its bias unit included.  The bias unit of this layer receives no
    weights.
    """

    def __init__(
        self,
        count: int,
        activation: Union[str, ActivationFn] = "linear",
        has_bias: bool = True,
    ) -> None:
        if int(count) < 1:
            raise ValueError(f"A layer needs at least one unit, got {count}")
        self._count = int(count)
        self._has_bias = bool(has_bias)
        self._activation = (
            get_activation(activation) if isinstance(activation, str) else activation
        )
        self._network: Optional["BasicNetwork"] = None
        self._layer_index: Optional[int] = None
        self._previous: Optional[Layer] = None
        self._layer_sums: Optional[FlatVector] = None
        self._layer_output: Optional[FlatVector] = None
        self._weight_matrix: Optional[FlatMatrix] = None

    @property
    def count(self) -> int:
        return self._count

    @property
    def total_count(self) -> int:
        return self._count + (1 if self._has_bias else 0)

    @property
    def has_bias(self) -> bool:
        return self._has_bias

    @property
    def activation(self) -> ActivationFn:
        return self._activation

    @property
    def network(self) -> Optional["BasicNetwork"]:
        return self._network

    @property
    def layer_sums(self) -> FlatVector:
        if self._layer_sums is None:
            raise StructuralError("Layer structure has not been finalized")
        return self._layer_sums

    @property
    def layer_output(self) -> FlatVector:
        if self._layer_output is None:
            raise StructuralError("Layer structure has not been finalized")
        return self._layer_output

    @property
    def weight_matrix(self) -> Optional[FlatMatrix]:
        return self._weight_matrix

    @property
    def weight_index(self) -> Optional[int]:
        if self._weight_matrix is None:
            return None
        return self._weight_matrix.offset

    def finalize_structure(
        self, network: "BasicNetwork", layer_index: int, counts: StructureCounts
    ) -> None:
        if self._network is not None:
            raise StructuralError("Layer has already been finalized into a network")
        self._network = network
        self._layer_index = layer_index

        total = self.total_count
        self._layer_sums = network.layer_output.register(total)
        self._layer_output = network.layer_output.register(total)
        counts.add_neurons(total)

        if layer_index > 0:
            self._previous = network.layers[layer_index - 1]
            self._weight_matrix = network.weight_buffer.register_matrix(
                self._count, self._previous.total_count
            )
            counts.add_weights(self._weight_matrix.length)

    def compute_layer(self) -> None:
        if self._previous is None or self._weight_matrix is None:
            raise StructuralError("The input layer has no predecessor to compute from")
        sums = self.layer_sums.view()[: self._count]
        np.dot(self._weight_matrix.view(), self._previous.layer_output.view(), out=sums)
        self._activation(sums, out=self.layer_output.view()[: self._count])

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(count={self._count}, "
            f"activation={activation_name(self._activation)!r}, has_bias={self._has_bias})"
        )


class DropoutLayer(BasicLayer):
    """Dense layer applying inverted dropout while the network is training."""

    def __init__(
        self,
        count: int,
        rate: float,
        activation: Union[str, ActivationFn] = "linear",
        has_bias: bool = True,
        seed: Optional[int] = None,
    ) -> None:
        super().__init__(count, activation=activation, has_bias=has_bias)
        if not 0.0 <= float(rate) < 1.0:
            raise ValueError(f"Dropout rate must lie in [0, 1), got {rate}")
        self._rate = float(rate)
        self._rng = np.random.default_rng(seed)

    @property
    def rate(self) -> float:
        return self._rate

    def compute_layer(self) -> None:
        super().compute_layer()
        if self._rate == 0.0 or not self._network.network_training:
            return
        outputs = self.layer_output.view()[: self.count]
        outputs *= self._rng.random(self.count) >= self._rate
        outputs /= 1.0 - self._rate

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(count={self.count}, rate={self._rate}, "
            f"activation={activation_name(self.activation)!r}, has_bias={self.has_bias})"
        )


__all__ = ["Layer", "BasicLayer", "DropoutLayer"]
