"""Network configuration presets and builders."""

from __future__ import annotations

import hashlib
import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Mapping

from .core.layers import BasicLayer, DropoutLayer
from .core.network import BasicNetwork
from .core.randomize import ConstantRandomizer, RangeRandomizer, XavierRandomizer

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-2-3-1": {
        "layers": [
            {"count": 2, "bias": True, "activation": "linear"},
            {"count": 3, "bias": True, "activation": "sigmoid"},
            {"count": 1, "bias": False, "activation": "sigmoid"},
        ],
        "randomizer": {"name": "xavier", "seed": 7},
        "training": False,
    },
    "regression-linear": {
        "layers": [
            {"count": 2, "bias": True, "activation": "linear"},
            {"count": 3, "bias": True, "activation": "linear"},
            {"count": 1, "bias": False, "activation": "linear"},
        ],
        "randomizer": {"name": "constant", "value": 1.0},
        "training": False,
    },
    "classifier-relu": {
        "layers": [
            {"count": 4, "bias": True, "activation": "linear"},
            {"count": 8, "bias": True, "activation": "relu"},
            {"count": 3, "bias": False, "activation": "softmax"},
        ],
        "randomizer": {"name": "xavier", "seed": 42},
        "training": False,
    },
    "dropout-mlp": {
        "layers": [
            {"count": 4, "bias": True, "activation": "linear"},
            {"count": 16, "bias": True, "activation": "relu", "dropout": 0.5, "seed": 3},
            {"count": 2, "bias": False, "activation": "linear"},
        ],
        "randomizer": {"name": "range", "low": -0.5, "high": 0.5, "seed": 11},
        "training": False,
    },
}

_RANDOMIZERS = {
    "xavier": XavierRandomizer,
    "range": RangeRandomizer,
    "constant": ConstantRandomizer,
}


def presets() -> Mapping[str, Mapping[str, object]]:
    return _PRESETS


def load_preset(name: str) -> Dict[str, object]:
    if name not in _PRESETS:
        available = ", ".join(sorted(_PRESETS))
        raise KeyError(f"Unknown preset {name!r}. Available presets: {available}")
    return deepcopy(dict(_PRESETS[name]))


def load_config(path: str | Path) -> Dict[str, Any]:
    """Read a JSON or YAML network config from ``path``."""

    path = Path(path)
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        return yaml.safe_load(text)
    return json.loads(text)


def merge_config(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into ``base`` and return ``base``."""

    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            base[key] = merge_config(dict(base[key]), value)
        else:
            base[key] = value
    return base


def _normalise(value):
    if isinstance(value, Mapping):
        return {str(k): _normalise(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalise(v) for v in value]
    if isinstance(value, Path):
        return str(value)
    return value


def config_hash(config: Mapping[str, object]) -> str:
    """Return a stable 12-character hash for ``config``."""

    canonical = json.dumps(_normalise(config), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:12]


def _build_layer(index: int, settings: Mapping[str, Any]) -> BasicLayer:
    if not isinstance(settings, Mapping):
        raise TypeError(f"Layer {index} must be a mapping")
    if "count" not in settings:
        raise ValueError(f"Layer {index} missing field 'count'")
    count = int(settings["count"])
    activation = str(settings.get("activation", "linear"))
    has_bias = bool(settings.get("bias", True))
    rate = settings.get("dropout")
    if rate is not None:
        return DropoutLayer(
            count,
            float(rate),
            activation=activation,
            has_bias=has_bias,
            seed=settings.get("seed"),
        )
    return BasicLayer(count, activation=activation, has_bias=has_bias)


def build_randomizer(settings: Mapping[str, Any] | None):
    """Instantiate the randomizer named by ``settings`` (Xavier when omitted)."""

    options = dict(settings or {})
    name = str(options.pop("name", "xavier"))
    if name not in _RANDOMIZERS:
        available = ", ".join(sorted(_RANDOMIZERS))
        raise KeyError(f"Unknown randomizer {name!r}. Available randomizers: {available}")
    return _RANDOMIZERS[name](**options)


def build_network(config: Mapping[str, Any], *, seed: int | None = None) -> BasicNetwork:
    """Build, finalize and initialise the network described by ``config``.

    ``seed`` overrides the randomizer seed when the randomizer accepts one.
    """

    layers = config.get("layers")
    if not isinstance(layers, (list, tuple)):
        raise ValueError("Network config requires a 'layers' list")

    network = BasicNetwork()
    for index, settings in enumerate(layers):
        network.add_layer(_build_layer(index, settings))
    network.finalize_structure()

    randomizer_settings = dict(config.get("randomizer") or {})
    if seed is not None and randomizer_settings.get("name", "xavier") != "constant":
        randomizer_settings["seed"] = int(seed)
    network.reset(build_randomizer(randomizer_settings))
    network.network_training = bool(config.get("training", False))
    return network


__all__ = [
    "build_network",
    "build_randomizer",
    "config_hash",
    "load_config",
    "load_preset",
    "merge_config",
    "presets",
]
