"""Network configuration: built-in presets, preset files and the config builder."""

from __future__ import annotations

import json
import logging
import warnings
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping

import numpy as np
import yaml

from .core.activations import resolve
from .core.types import LayerDescriptor
from .network import BasicNetwork
from .patterns import PATTERNS

logger = logging.getLogger(__name__)

_SECTIONS = {"network", "weights", "inputs"}

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-feedforward": {
        "network": {
            "pattern": "feedforward",
            "input": 2,
            "hidden": [3],
            "output": 1,
            "activation": "sigmoid",
        },
        "weights": {"seed": 42, "low": -1.0, "high": 1.0},
        "inputs": [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]],
    },
    "elman-small": {
        "network": {
            "pattern": "elman",
            "input": 1,
            "hidden": [4],
            "output": 1,
            "activation": "tanh",
        },
        "weights": {"seed": 7, "low": -1.0, "high": 1.0},
        "inputs": [[1.0], [0.0], [0.0], [1.0]],
    },
    "jordan-small": {
        "network": {
            "pattern": "jordan",
            "input": 1,
            "hidden": [3],
            "output": 2,
            "activation": "sigmoid",
        },
        "weights": {"seed": 11, "low": -1.0, "high": 1.0},
        "inputs": [[0.5], [0.5], [0.5]],
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[1] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def load_config(path: str | Path) -> Mapping[str, object]:
    """Read a JSON or YAML network configuration."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = load_config(file)
                if "network" not in data:
                    raise KeyError(f"Preset {file.name} is missing the 'network' section")
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def _layers_from_list(entries: List[Mapping[str, object]]) -> List[LayerDescriptor]:
    layers = [
        LayerDescriptor(
            resolve(str(entry.get("activation", "linear"))),
            int(entry["count"]),
            float(entry.get("bias", 0.0)),
            dropout_rate=float(entry.get("dropout_rate", 0.0)),
        )
        for entry in entries
    ]
    for layer, entry in zip(layers, entries):
        source = entry.get("context_fed_by")
        if source is None:
            continue
        layer.context_fed_by = layers[int(source)]
        layer.context_count = int(entry.get("context_count") or layer.context_fed_by.count)
    return layers


def build_layers(network: Mapping[str, object]) -> List[LayerDescriptor]:
    """Turn the ``network`` section of a config into layer descriptors."""

    if "layers" in network:
        return _layers_from_list(list(network["layers"]))

    pattern = str(network.get("pattern", "feedforward"))
    if pattern not in PATTERNS:
        available = ", ".join(sorted(PATTERNS))
        raise KeyError(f"Unknown pattern {pattern!r}. Available patterns: {available}")

    hidden = network.get("hidden", [])
    activation = str(network.get("activation", "sigmoid"))
    if pattern == "feedforward":
        return PATTERNS[pattern](
            int(network["input"]),
            hidden,
            int(network["output"]),
            activation=activation,
            output_activation=network.get("output_activation"),
        )
    counts = [hidden] if isinstance(hidden, int) else list(hidden)
    if len(counts) != 1:
        raise ValueError(f"Pattern {pattern!r} needs exactly one hidden layer")
    return PATTERNS[pattern](
        int(network["input"]), int(counts[0]), int(network["output"]), activation=activation
    )


def build_network(config: Mapping[str, object]) -> BasicNetwork:
    """Build a network and initialise its weights from ``config``."""

    unknown = set(config) - _SECTIONS
    if unknown:
        warnings.warn(
            f"Ignoring unknown config sections: {', '.join(sorted(unknown))}",
            UserWarning,
            stacklevel=2,
        )
    if "network" not in config:
        raise KeyError("Config is missing the 'network' section")

    network_cfg = config["network"]
    network = BasicNetwork(build_layers(network_cfg), dropout=bool(network_cfg.get("dropout", False)))

    weights = config.get("weights", {}) or {}
    if "values" in weights:
        network.set_weights(weights["values"])
    else:
        rng = np.random.default_rng(weights.get("seed"))
        network.randomize(
            hi=float(weights.get("high", 1.0)), lo=float(weights.get("low", -1.0)), rng=rng
        )
    logger.debug("Built network with %d weights", network.encode_length)
    return network


__all__ = ["build_layers", "build_network", "load_config", "load_preset", "presets"]
