import time

import numpy as np
import pytest

from flatnets.core.layers import BasicLayer
from flatnets.core.network import BasicNetwork
from flatnets.core.randomize import XavierRandomizer


@pytest.mark.perf
def test_forward_pass_runtime():
    network = BasicNetwork()
    for count in (64, 128, 128, 10):
        network.add_layer(BasicLayer(count, activation="relu"))
    network.finalize_structure()
    network.reset(XavierRandomizer(seed=0))

    inputs = np.random.default_rng(0).standard_normal((500, 64))
    output = np.zeros(network.output_count)
    start = time.perf_counter()
    for row in inputs:
        network.compute(row, output)
    duration = time.perf_counter() - start

    assert duration <= 2.0
    assert np.all(np.isfinite(output))
