"""Layout reports describing where each layer lives in the flat buffers."""

from __future__ import annotations

import json
import time
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Mapping

from ..core.network import BasicNetwork


def describe_layout(network: BasicNetwork) -> Dict[str, Any]:
    """Return a JSON-serialisable description of the finalized layout."""

    layers = []
    for layout in network.layer_layouts():
        record = asdict(layout)
        record["registration_rank"] = network.registration_rank(layout.index)
        if layout.weight_shape is not None:
            record["weight_shape"] = list(layout.weight_shape)
        layers.append(record)
    return {
        "input_count": network.input_count,
        "output_count": network.output_count,
        "neuron_count": network.neuron_count,
        "activation_length": network.layer_output.length,
        "encode_length": network.encode_length,
        "layers": layers,
    }


def write_layout(
    path: str | Path,
    network: BasicNetwork,
    *,
    config: Mapping[str, object] | None = None,
) -> str:
    """Write the layout report for ``network`` as JSON."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    report = {
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": dict(config or {}),
        "layout": describe_layout(network),
    }
    path.write_text(json.dumps(report, indent=2))
    return str(path)
