"""Feed-forward network stored in two shared flat buffers.

Layers are added input-first and then :meth:`BasicNetwork.finalize_structure`
walks them output-first, so every range in the activation buffer and the
weight buffer is registered output-layer-first.  After finalization the
structure is frozen; compute and the weight accessors address storage purely
by offset.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from .errors import IndexOutOfRange, ShapeMismatch, StructuralError
from .flat import FlatBuffer
from .layers import Layer
from .randomize import NetworkRandomizer, XavierRandomizer
from .types import DTYPE, Array, LayerLayout, StructureCounts

logger = logging.getLogger(__name__)


class BasicNetwork:
    """Ordered stack of layers sharing an activation and a weight buffer."""

    def __init__(self) -> None:
        self._layers: List[Layer] = []
        self._layer_output = FlatBuffer()
        self._weights = FlatBuffer()
        self._input_count = 0
        self._output_count = 0
        self._network_training = False
        self._finalized = False

    # ------------------------------------------------------------------
    # Structure

    def add_layer(self, layer: Layer) -> None:
        """Append ``layer`` after the current output layer."""

        if self._finalized:
            raise StructuralError("Cannot add layers after the structure is finalized")
        missing = [
            name
            for name in ("finalize_structure", "compute_layer")
            if not callable(getattr(layer, name, None))
        ]
        if missing:
            raise TypeError(f"Expected a layer, got {type(layer).__name__}")
        if any(existing is layer for existing in self._layers):
            raise StructuralError("The same layer instance cannot be added twice")
        if getattr(layer, "network", None) is not None:
            raise StructuralError("Layer already belongs to another network")
        self._layers.append(layer)

    def finalize_structure(self) -> None:
        """Fix every buffer offset and allocate storage.

        Must be called exactly once, before any computation or weight access.
        """

        if self._finalized:
            raise StructuralError("Network structure has already been finalized")
        if not self._layers:
            raise StructuralError("Cannot finalize a network with no layers")
        for index, layer in enumerate(self._layers):
            if getattr(layer, "network", None) is not None:
                raise StructuralError(f"Layer {index} already belongs to another network")

        self._input_count = self._layers[0].count
        self._output_count = self._layers[-1].count

        counts = StructureCounts()
        for index in reversed(range(len(self._layers))):
            self._layers[index].finalize_structure(self, index, counts)

        self._layer_output.finalize_structure()
        self._weights.finalize_structure()
        self._finalized = True
        self.clear_output()

        logger.debug(
            "Finalized network: %d layers, %d neurons, %d activation slots, %d weights",
            len(self._layers),
            counts.neuron_count,
            self._layer_output.length,
            self._weights.length,
        )

    def clear_output(self) -> None:
        """Zero every sum and output, then pin bias outputs to one."""

        self._layer_output.data[:] = 0.0
        for layer in self._layers:
            if layer.has_bias:
                layer.layer_output.set(layer.count, 1.0)

    @property
    def finalized(self) -> bool:
        return self._finalized

    def _require_ready(self) -> None:
        if not self._finalized:
            raise StructuralError(
                "Network structure has not been finalized; call finalize_structure() first"
            )

    # ------------------------------------------------------------------
    # Computation

    def compute(self, input: Sequence[float], output) -> None:
        """Compute the network output for ``input`` into ``output``.

        ``output`` may be any mutable sequence with room for
        :attr:`output_count` values.
        """

        self._require_ready()
        if np.ndim(input) != 1 or len(input) != self._input_count:
            raise ShapeMismatch(
                f"Invalid input count ({len(input)}), this network is designed for: "
                f"{self._input_count}"
            )
        if len(output) < self._output_count:
            raise ShapeMismatch(
                f"Output buffer holds {len(output)} values, the network produces "
                f"{self._output_count}"
            )

        self.clear_output()
        self.input_layer.layer_output.view()[: self._input_count] = input

        for layer in self._layers[1:]:
            layer.compute_layer()

        output[: self._output_count] = self.output_layer.layer_output.view()[
            : self._output_count
        ]

    def compute_regression(self, input: Sequence[float]) -> Array:
        """Return a freshly allocated output vector for ``input``."""

        self._require_ready()
        if np.ndim(input) != 1 or len(input) != self._input_count:
            raise ShapeMismatch(
                f"Invalid input count ({len(input)}), this network is designed for: "
                f"{self._input_count}"
            )
        output = np.zeros(self._output_count, dtype=DTYPE)
        self.compute(input, output)
        return output

    def compute_classification(self, input: Sequence[float]) -> int:
        """Return the index of the largest output."""

        return int(np.argmax(self.compute_regression(input)))

    # ------------------------------------------------------------------
    # Weight addressing

    def registration_rank(self, layer_index: int) -> int:
        """Position of ``layer_index`` in the output-first finalize walk."""

        return len(self._layers) - layer_index - 1

    def weight_offset(self, from_layer: int, from_neuron: int, to_neuron: int) -> int:
        """Translate a logical connection into its weight buffer offset.

        ``from_layer`` counts from the input layer.  The connection lives in
        the matrix owned by layer ``from_layer + 1``, stored row-major with
        one row per receiving unit: ``to_neuron * sending_total + from_neuron``.
        ``from_neuron`` may address the sending layer's bias unit;
        ``to_neuron`` may not address the receiving layer's bias unit.
        """

        self._require_ready()
        if from_layer < 0 or from_layer >= len(self._layers):
            raise IndexOutOfRange(f"Invalid layer index: {from_layer}")
        if self.registration_rank(from_layer) == 0:
            raise StructuralError(
                f"The specified layer is not connected to another layer: {from_layer}"
            )

        source = self._layers[from_layer]
        target = self._layers[from_layer + 1]
        if from_neuron < 0 or from_neuron >= source.total_count:
            raise IndexOutOfRange(
                f"Invalid neuron number {from_neuron} for layer {from_layer}"
            )
        if to_neuron < 0 or to_neuron >= target.count:
            raise IndexOutOfRange(
                f"Invalid neuron number {to_neuron} for layer {from_layer + 1}"
            )
        return target.weight_index + to_neuron * source.total_count + from_neuron

    def get_weight(self, from_layer: int, from_neuron: int, to_neuron: int) -> float:
        return float(self._weights.data[self.weight_offset(from_layer, from_neuron, to_neuron)])

    def set_weight(
        self, from_layer: int, from_neuron: int, to_neuron: int, value: float
    ) -> None:
        """Set one weight.  The bias neuron is always the last on a layer."""

        self._weights.data[self.weight_offset(from_layer, from_neuron, to_neuron)] = value

    def validate_neuron(self, layer_index: int, neuron: int) -> None:
        if layer_index < 0 or layer_index >= len(self._layers):
            raise IndexOutOfRange(f"Invalid layer index: {layer_index}")
        if neuron < 0 or neuron >= self.get_layer_total_neuron_count(layer_index):
            raise IndexOutOfRange(f"Invalid neuron number: {neuron}")

    def get_layer_total_neuron_count(self, layer_index: int) -> int:
        return self._layers[layer_index].total_count

    def reset(self, randomizer: Optional[NetworkRandomizer] = None) -> None:
        """Overwrite the weight vector in place using ``randomizer``."""

        self._require_ready()
        (randomizer or XavierRandomizer()).randomize(self)

    # ------------------------------------------------------------------
    # Accessors

    @property
    def weights(self) -> Array:
        """The whole trainable state as one writable flat vector."""

        self._require_ready()
        return self._weights.data

    long_term_memory = weights

    @property
    def encode_length(self) -> int:
        return self._weights.length

    @property
    def neuron_count(self) -> int:
        return sum(layer.total_count for layer in self._layers)

    @property
    def input_count(self) -> int:
        return self._input_count

    @property
    def output_count(self) -> int:
        return self._output_count

    @property
    def layers(self) -> tuple[Layer, ...]:
        return tuple(self._layers)

    @property
    def input_layer(self) -> Layer:
        return self._layers[0]

    @property
    def output_layer(self) -> Layer:
        return self._layers[-1]

    @property
    def layer_output(self) -> FlatBuffer:
        return self._layer_output

    @property
    def weight_buffer(self) -> FlatBuffer:
        return self._weights

    @property
    def network_training(self) -> bool:
        """True while training; some layers (dropout) behave differently."""

        return self._network_training

    @network_training.setter
    def network_training(self, value: bool) -> None:
        self._network_training = bool(value)

    def _index_of(self, layer: Layer) -> int:
        for index, candidate in enumerate(self._layers):
            if candidate is layer:
                return index
        raise StructuralError("Layer is not part of this network")

    def get_next_layer(self, layer: Layer) -> Layer:
        index = self._index_of(layer)
        if index == len(self._layers) - 1:
            raise StructuralError("The output layer has no next layer")
        return self._layers[index + 1]

    def get_previous_layer(self, layer: Layer) -> Layer:
        index = self._index_of(layer)
        if index == 0:
            raise StructuralError("The input layer has no previous layer")
        return self._layers[index - 1]

    def layer_layouts(self) -> List[LayerLayout]:
        """Return the finalized offsets of every layer, input layer first."""

        self._require_ready()
        layouts = []
        for index, layer in enumerate(self._layers):
            matrix = layer.weight_matrix
            layouts.append(
                LayerLayout(
                    index=index,
                    count=layer.count,
                    total_count=layer.total_count,
                    has_bias=layer.has_bias,
                    sums_offset=layer.layer_sums.offset,
                    output_offset=layer.layer_output.offset,
                    weight_index=layer.weight_index,
                    weight_shape=None if matrix is None else matrix.shape,
                )
            )
        return layouts

    def dump_outputs(self) -> List[str]:
        """Log every layer's sums and outputs; return the logged lines."""

        lines = []
        for number, layer in enumerate(self._layers, start=1):
            line = f"Layer #{number}:Sums={layer.layer_sums},Output={layer.layer_output}"
            logger.info(line)
            lines.append(line)
        return lines

    def __repr__(self) -> str:
        shape = "->".join(str(layer.count) for layer in self._layers)
        state = "ready" if self._finalized else "building"
        return f"{type(self).__name__}([{shape}], {state})"


__all__ = ["BasicNetwork"]
