"""Command line entry point for flatnets networks."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable

from flatnets import config as net_config
from flatnets.core.errors import FlatNetError
from flatnets.reporting.layout import write_layout

logger = logging.getLogger("flatnets.cli")


def _format_result(network, output, config_id: str) -> str:
    payload = {
        "output": [float(value) for value in output],
        "classification": int(max(range(len(output)), key=lambda i: output[i])),
        "encode_length": network.encode_length,
        "neuron_count": network.neuron_count,
        "config_hash": config_id,
    }
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(net_config.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor-2-3-1",
        help="Preset network configuration to build",
    )
    parser.add_argument(
        "--config", type=Path, help="Optional JSON/YAML config override"
    )
    parser.add_argument(
        "--input",
        type=float,
        nargs="+",
        help="Input vector; defaults to zeros of the network's input count",
    )
    parser.add_argument(
        "--seed", type=int, help="Seed used by the weight randomizer"
    )
    parser.add_argument(
        "--training",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Run the forward pass in training mode (enables dropout)",
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-layout", type=Path, help="Write the buffer layout report to a JSON file"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Log debug output to stderr"
    )
    return parser.parse_args(argv)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list_presets:
        for name in sorted(net_config.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = net_config.load_preset(args.preset)
    if args.config:
        override = net_config.load_config(args.config)
        if "layers" in override:
            config = json.loads(json.dumps(override))
        else:
            config = net_config.merge_config(config, override)
    if args.training is not None:
        config["training"] = bool(args.training)

    try:
        network = net_config.build_network(config, seed=args.seed)
        values = args.input if args.input is not None else [0.0] * network.input_count
        output = [0.0] * network.output_count
        network.compute(values, output)
    except FlatNetError as exc:
        raise SystemExit(f"error: {exc}") from exc

    if args.verbose:
        network.dump_outputs()

    if args.dump_layout:
        write_layout(args.dump_layout, network, config=config)
        logger.debug("Wrote layout report to %s", args.dump_layout)

    print(_format_result(network, output, net_config.config_hash(config)))


if __name__ == "__main__":
    main()
