"""Topology builders for common network shapes."""

from __future__ import annotations

from typing import List, Sequence

from .core.activations import ActivationFunction, resolve
from .core.types import LayerDescriptor
from .network import DEFAULT_BIAS_ACTIVATION, NO_BIAS_ACTIVATION

Activation = str | ActivationFunction


def _hidden_counts(hidden: int | Sequence[int]) -> List[int]:
    if isinstance(hidden, int):
        return [hidden] if hidden else []
    return [int(count) for count in hidden if count]


def feedforward(
    input: int,
    hidden: int | Sequence[int],
    output: int,
    activation: Activation = "sigmoid",
    bias: float = DEFAULT_BIAS_ACTIVATION,
    input_activation: Activation = "linear",
    output_activation: Activation | None = None,
) -> List[LayerDescriptor]:
    """Plain feed-forward layers, bias on every layer except the output."""

    layers = [LayerDescriptor(resolve(input_activation), input, bias)]
    for count in _hidden_counts(hidden):
        layers.append(LayerDescriptor(resolve(activation), count, bias))
    out_act = activation if output_activation is None else output_activation
    layers.append(LayerDescriptor(resolve(out_act), output, NO_BIAS_ACTIVATION))
    return layers


def elman(
    input: int, hidden: int, output: int, activation: Activation = "sigmoid"
) -> List[LayerDescriptor]:
    """Simple recurrent network whose hidden output is fed back into the input layer."""

    layers = feedforward(input, hidden, output, activation=activation)
    layers[0].context_fed_by = layers[1]
    layers[0].context_count = layers[1].count
    return layers


def jordan(
    input: int, hidden: int, output: int, activation: Activation = "sigmoid"
) -> List[LayerDescriptor]:
    """Simple recurrent network whose output is fed back into the input layer."""

    layers = feedforward(input, hidden, output, activation=activation)
    layers[0].context_fed_by = layers[-1]
    layers[0].context_count = layers[-1].count
    return layers


PATTERNS = {"feedforward": feedforward, "elman": elman, "jordan": jordan}

__all__ = ["PATTERNS", "elman", "feedforward", "jordan"]
