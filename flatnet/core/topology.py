"""Topology encoding: flatten a layer description into index tables and buffers."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from .types import Array, EncodedTopology, LayerDescriptor, NetworkBuffers

logger = logging.getLogger(__name__)


def encode(
    layers: Sequence[LayerDescriptor], dropout: bool = False
) -> tuple[EncodedTopology, NetworkBuffers]:
    """Encode ``layers`` (input layer first) into a flat topology.

    The returned tables store layers in reverse, output layer at index ``0``,
    so the forward pass is a single descending loop. A context source that no
    layer consumes simply leaves its context target at ``0``/``0``.
    """

    if not layers:
        raise ValueError("A network needs at least one layer")

    layer_count = len(layers)
    layer_counts = [0] * layer_count
    layer_feed_counts = [0] * layer_count
    layer_context_count = [0] * layer_count
    layer_index = [0] * layer_count
    weight_index = [0] * layer_count
    context_target_offset = [0] * layer_count
    context_target_size = [0] * layer_count
    bias_activation = [0.0] * layer_count
    activation_functions = [None] * layer_count
    layer_dropout_rates = [0.0] * layer_count if dropout else []
    has_context = False

    neuron_count = 0
    weight_count = 0

    for index, position in enumerate(range(layer_count - 1, -1, -1)):
        layer = layers[position]
        previous = layers[position - 1] if position > 0 else None

        bias_activation[index] = float(layer.bias_activation)
        layer_counts[index] = layer.total_count
        layer_feed_counts[index] = layer.count
        layer_context_count[index] = layer.context_count
        activation_functions[index] = layer.activation
        if dropout:
            layer_dropout_rates[index] = float(layer.dropout_rate)

        neuron_count += layer.total_count
        if previous is not None:
            weight_count += layer.count * previous.total_count

        if index > 0:
            weight_index[index] = weight_index[index - 1] + (
                layer_counts[index] * layer_feed_counts[index - 1]
            )
            layer_index[index] = layer_index[index - 1] + layer_counts[index - 1]

        # the running offset follows the buffer layout, output layer first
        neuron_offset = 0
        for consumer in reversed(layers):
            if consumer.context_fed_by is layer:
                has_context = True
                context_target_size[index] = consumer.context_count
                context_target_offset[index] = neuron_offset + (
                    consumer.total_count - consumer.context_count
                )
            neuron_offset += consumer.total_count

    topology = EncodedTopology.from_tables(
        input_count=layers[0].count,
        output_count=layers[-1].count,
        layer_counts=layer_counts,
        layer_feed_counts=layer_feed_counts,
        layer_context_count=layer_context_count,
        layer_index=layer_index,
        weight_index=weight_index,
        context_target_offset=context_target_offset,
        context_target_size=context_target_size,
        bias_activation=bias_activation,
        activation_functions=activation_functions,
        layer_dropout_rates=layer_dropout_rates,
        has_context=has_context,
        weight_count=weight_count,
        neuron_count=neuron_count,
    )
    buffers = NetworkBuffers(
        weights=np.zeros(weight_count, dtype=np.float64),
        layer_output=np.zeros(neuron_count, dtype=np.float64),
        layer_sums=np.zeros(neuron_count, dtype=np.float64),
    )
    clear_context(topology, buffers.layer_output)
    logger.debug(
        "Encoded %d layers: %d neurons, %d weights, context=%s",
        layer_count,
        neuron_count,
        weight_count,
        has_context,
    )
    return topology, buffers


def clear_context(topology: EncodedTopology, layer_output: Array) -> None:
    """Zero feed and context neurons and re-seed every bias neuron."""

    index = 0
    for layer in range(topology.layer_count):
        feed = int(topology.layer_feed_counts[layer])
        context = int(topology.layer_context_count[layer])
        has_bias = feed + context != int(topology.layer_counts[layer])

        layer_output[index : index + feed] = 0.0
        index += feed

        if has_bias:
            layer_output[index] = topology.bias_activation[layer]
            index += 1

        layer_output[index : index + context] = 0.0
        index += context
