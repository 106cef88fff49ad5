import json

import numpy as np
import pytest

from flatnet.presets import build_network, load_config, load_preset, presets


def test_builtin_and_file_presets_are_listed():
    names = set(presets())
    assert {"xor-feedforward", "elman-small", "jordan-small"} <= names
    assert "elman-sequence" in names


@pytest.mark.parametrize("name", ["xor-feedforward", "elman-small", "jordan-small", "elman-sequence"])
def test_presets_build_working_networks(name):
    config = load_preset(name)
    network = build_network(config)
    for vector in config["inputs"]:
        output = network.compute(vector)
        assert output.shape == (network.output_count,)
        assert np.all(np.isfinite(output))
    assert network.has_context == (config["network"]["pattern"] != "feedforward")


def test_seeded_presets_are_reproducible():
    first = build_network(load_preset("elman-small"))
    second = build_network(load_preset("elman-small"))
    assert np.array_equal(first.weights, second.weights)


def test_load_preset_returns_independent_copies():
    config = load_preset("xor-feedforward")
    config["network"]["input"] = 99
    assert load_preset("xor-feedforward")["network"]["input"] == 2


def test_layer_list_config_with_explicit_weights(tmp_path):
    path = tmp_path / "net.json"
    path.write_text(
        json.dumps(
            {
                "network": {"layers": [{"count": 2, "bias": 1.0}, {"count": 1}]},
                "weights": {"values": [0.5, -0.5, 1.0]},
            }
        )
    )
    network = build_network(load_config(path))
    assert network.compute([1.0, 2.0]).tolist() == [0.5]


def test_layer_list_config_wires_context_and_dropout(tmp_path):
    path = tmp_path / "net.yaml"
    path.write_text(
        "network:\n"
        "  dropout: true\n"
        "  layers:\n"
        "    - {count: 1, context_fed_by: 2}\n"
        "    - {count: 2, activation: tanh, bias: 1.0}\n"
        "    - {count: 1, activation: sigmoid, dropout_rate: 0.1}\n"
        "weights: {seed: 3}\n"
    )
    network = build_network(load_config(path))
    assert network.has_context
    assert network.context_target_size.tolist() == [1, 0, 0]
    assert network.layer_dropout_rates.tolist() == pytest.approx([0.1, 0.0, 0.0])


def test_config_errors(tmp_path):
    bad = tmp_path / "net.txt"
    bad.write_text("{}")
    with pytest.raises(ValueError):
        load_config(bad)

    listing = tmp_path / "net.json"
    listing.write_text("[1, 2]")
    with pytest.raises(TypeError):
        load_config(listing)

    with pytest.raises(KeyError):
        load_preset("missing")
    with pytest.raises(KeyError):
        build_network({"weights": {}})
    with pytest.raises(KeyError, match="Available patterns"):
        build_network({"network": {"pattern": "lstm", "input": 1, "output": 1}})
    with pytest.raises(ValueError):
        build_network({"network": {"pattern": "elman", "input": 1, "hidden": [2, 2], "output": 1}})


def test_unknown_sections_warn():
    config = load_preset("xor-feedforward")
    config["training"] = {"epochs": 3}
    with pytest.warns(UserWarning, match="training"):
        build_network(config)
