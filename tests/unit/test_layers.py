import numpy as np
import pytest

from flatnets.core.errors import StructuralError
from flatnets.core.layers import BasicLayer, DropoutLayer
from flatnets.core.network import BasicNetwork
from flatnets.core.randomize import ConstantRandomizer


def test_total_count_includes_bias():
    assert BasicLayer(3).total_count == 4
    assert BasicLayer(3, has_bias=False).total_count == 3
    with pytest.raises(ValueError):
        BasicLayer(0)


def test_ranges_unavailable_before_finalize():
    layer = BasicLayer(2)
    with pytest.raises(StructuralError):
        _ = layer.layer_output
    assert layer.weight_matrix is None
    assert layer.weight_index is None


def test_weight_matrix_shape_uses_previous_total_count():
    network = BasicNetwork()
    first, second = BasicLayer(2), BasicLayer(3, has_bias=False)
    network.add_layer(first)
    network.add_layer(second)
    network.finalize_structure()

    assert first.weight_matrix is None
    assert second.weight_matrix.shape == (3, 3)
    assert len(first.layer_sums) == len(first.layer_output) == 3
    assert len(second.layer_sums) == len(second.layer_output) == 3


def test_input_layer_cannot_compute():
    network = BasicNetwork()
    layer = BasicLayer(2)
    network.add_layer(layer)
    network.finalize_structure()
    with pytest.raises(StructuralError):
        layer.compute_layer()


def test_add_layer_rejects_layer_owned_by_another_network():
    shared = BasicLayer(2)
    first = BasicNetwork()
    first.add_layer(shared)
    first.finalize_structure()

    second = BasicNetwork()
    with pytest.raises(StructuralError):
        second.add_layer(shared)
    assert second.layers == ()


def test_failed_finalize_leaves_other_layers_unbound():
    shared = BasicLayer(2)
    innocent = BasicLayer(1, has_bias=False)
    first = BasicNetwork()
    second = BasicNetwork()
    first.add_layer(shared)
    first.add_layer(BasicLayer(3))
    second.add_layer(shared)
    second.add_layer(innocent)
    first.finalize_structure()

    with pytest.raises(StructuralError):
        second.finalize_structure()
    assert innocent.network is None
    assert not second.finalized
    assert second.weight_buffer.length == 0
    assert second.layer_output.length == 0

    third = BasicNetwork()
    third.add_layer(BasicLayer(2))
    third.add_layer(innocent)
    third.finalize_structure()
    assert innocent.network is third
    assert innocent.weight_matrix.shape == (1, 3)


def test_activation_applies_to_sums():
    network = BasicNetwork()
    network.add_layer(BasicLayer(2, has_bias=False))
    hidden = BasicLayer(2, activation="relu", has_bias=False)
    network.add_layer(hidden)
    network.finalize_structure()
    network.set_weight(0, 0, 0, 1.0)
    network.set_weight(0, 1, 1, -1.0)

    output = np.zeros(2)
    network.compute([3.0, 4.0], output)
    assert hidden.layer_sums.view().tolist() == [3.0, -4.0]
    assert output.tolist() == [3.0, 0.0]


def _dropout_network(rate, count=64):
    network = BasicNetwork()
    network.add_layer(BasicLayer(1, has_bias=False))
    dropout = DropoutLayer(count, rate, has_bias=False, seed=0)
    network.add_layer(dropout)
    network.finalize_structure()
    network.reset(ConstantRandomizer(1.0))
    return network, dropout


def test_dropout_is_inactive_outside_training():
    network, _ = _dropout_network(0.5)
    output = np.zeros(64)
    network.compute([2.0], output)
    assert np.all(output == 2.0)


def test_dropout_zeroes_and_rescales_while_training():
    network, _ = _dropout_network(0.5)
    network.network_training = True
    output = np.zeros(64)
    network.compute([2.0], output)
    assert set(np.unique(output)) <= {0.0, 4.0}
    assert np.any(output == 0.0)
    assert np.any(output == 4.0)


def test_dropout_rate_validation():
    with pytest.raises(ValueError):
        DropoutLayer(2, 1.0)
    with pytest.raises(ValueError):
        DropoutLayer(2, -0.1)
