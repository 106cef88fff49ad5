"""Command line entry point for running flatnet networks."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable, List

import numpy as np

from flatnet.presets import build_network, load_config, load_preset, presets

logger = logging.getLogger("flatnet.cli")


def _parse_vector(text: str) -> List[float]:
    return [float(part) for part in text.split(",") if part.strip()]


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor-feedforward",
        help="Preset network configuration to run",
    )
    parser.add_argument(
        "--config", type=Path, help="Optional JSON/YAML config override"
    )
    parser.add_argument(
        "--input",
        action="append",
        type=_parse_vector,
        help="Comma separated input vector; repeat to feed a sequence",
    )
    parser.add_argument("--seed", type=int, help="Seed used for weight randomisation")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear context neurons before every input",
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_presets:
        for name in sorted(presets().keys()):
            print(name)
        raise SystemExit(0)

    config = json.loads(json.dumps(load_preset(args.preset)))

    if args.config:
        override = json.loads(json.dumps(load_config(args.config)))
        if "network" in override and "layers" in override["network"]:
            config["network"] = override.pop("network")
        config = _merge(config, override)

    if args.seed is not None:
        weights = config.setdefault("weights", {})
        weights.pop("values", None)
        weights["seed"] = int(args.seed)

    if args.input:
        config["inputs"] = args.input

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    network = build_network(config)
    logger.info(
        "Running %d input(s) through a %d-layer network",
        len(config.get("inputs", [])),
        network.topology.layer_count,
    )
    for vector in config.get("inputs", []):
        if args.reset:
            network.clear_context()
        output = network.compute(np.asarray(vector, dtype=np.float64))
        print(json.dumps({"input": list(map(float, vector)), "output": output.tolist()}))


if __name__ == "__main__":
    main()
