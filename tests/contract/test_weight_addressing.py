import itertools

import numpy as np
import pytest

from flatnets.core.errors import IndexOutOfRange, StructuralError
from flatnets.core.layers import BasicLayer
from flatnets.core.network import BasicNetwork

SHAPES = [
    [(2, True), (3, True), (1, False)],
    [(1, False), (1, False)],
    [(4, True), (2, False), (3, True), (2, True)],
    [(3, False), (5, True), (1, True)],
]


def _build(shape):
    network = BasicNetwork()
    for count, bias in shape:
        network.add_layer(BasicLayer(count, has_bias=bias))
    network.finalize_structure()
    return network


def _connections(network):
    layers = network.layers
    for from_layer in range(len(layers) - 1):
        for from_neuron in range(layers[from_layer].total_count):
            for to_neuron in range(layers[from_layer + 1].count):
                yield from_layer, from_neuron, to_neuron


@pytest.mark.parametrize("shape", SHAPES)
def test_every_connection_maps_to_a_distinct_offset(shape):
    network = _build(shape)
    offsets = [network.weight_offset(*conn) for conn in _connections(network)]
    assert sorted(offsets) == list(range(network.encode_length))


@pytest.mark.parametrize("shape", SHAPES)
def test_set_then_get_round_trips_without_crosstalk(shape):
    network = _build(shape)
    connections = list(_connections(network))
    for value, conn in enumerate(connections, start=1):
        network.set_weight(*conn, float(value))
    for value, conn in enumerate(connections, start=1):
        assert network.get_weight(*conn) == float(value)

    for conn in connections:
        before = network.weights.copy()
        network.set_weight(*conn, -99.0)
        changed = np.flatnonzero(network.weights != before)
        assert changed.tolist() == [network.weight_offset(*conn)]
        network.weights[:] = before


@pytest.mark.parametrize("shape", SHAPES)
def test_addressing_agrees_with_forward_pass(shape):
    network = _build(shape)
    layers = network.layers
    for from_layer, from_neuron, to_neuron in _connections(network):
        network.weights[:] = 0.0
        network.set_weight(from_layer, from_neuron, to_neuron, 1.0)
        network.compute(np.arange(1.0, network.input_count + 1.0), np.zeros(network.output_count))

        source = layers[from_layer].layer_output.view()
        sums = layers[from_layer + 1].layer_sums.view()[: layers[from_layer + 1].count]
        expected = np.zeros_like(sums)
        expected[to_neuron] = source[from_neuron]
        assert np.array_equal(sums, expected)


def test_matrix_lives_in_layer_after_from_layer():
    network = _build(SHAPES[2])
    for from_layer, from_neuron, to_neuron in _connections(network):
        owner = network.layers[from_layer + 1]
        offset = network.weight_offset(from_layer, from_neuron, to_neuron)
        matrix = owner.weight_matrix
        assert matrix.offset <= offset < matrix.end
        assert offset - matrix.offset == matrix.index_of(to_neuron, from_neuron)


def test_output_layer_has_no_outgoing_weights():
    network = _build(SHAPES[0])
    last = len(network.layers) - 1
    with pytest.raises(StructuralError):
        network.set_weight(last, 0, 0, 1.0)
    with pytest.raises(StructuralError):
        network.get_weight(last, 0, 0)


@pytest.mark.parametrize(
    "conn",
    [
        (-1, 0, 0),
        (3, 0, 0),
        (0, 3, 0),
        (0, -1, 0),
        (0, 0, 3),
        (1, 0, 1),
        (1, 4, 0),
    ],
)
def test_out_of_range_addresses(conn):
    network = _build(SHAPES[0])
    with pytest.raises(IndexOutOfRange):
        network.get_weight(*conn)
    with pytest.raises(IndexOutOfRange):
        network.set_weight(*conn, 1.0)


def test_registration_rank_is_reverse_of_layer_index():
    network = _build(SHAPES[2])
    ranks = [network.registration_rank(i) for i in range(len(network.layers))]
    assert ranks == [3, 2, 1, 0]


def test_exhaustive_small_shapes():
    for counts in itertools.product([1, 2], repeat=3):
        for biases in itertools.product([False, True], repeat=3):
            network = _build(list(zip(counts, biases)))
            offsets = {network.weight_offset(*c) for c in _connections(network)}
            assert offsets == set(range(network.encode_length))
