"""Forward propagation over the flat neuron and weight buffers."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .types import Array, EncodedTopology, NetworkBuffers


def _feed_context(
    topology: EncodedTopology, layer_output: Array, layer: int, source_offset: int
) -> None:
    size = int(topology.context_target_size[layer])
    if size == 0:
        return
    target = int(topology.context_target_offset[layer])
    layer_output[target : target + size] = layer_output[source_offset : source_offset + size]


def compute_layer(topology: EncodedTopology, buffers: NetworkBuffers, layer: int) -> None:
    """Compute the feed neurons of ``layer - 1`` from every neuron of ``layer``.

    The consumer's activated output is then copied into its context target, to
    be read on the next forward pass.
    """

    consumer = layer - 1
    input_index = int(topology.layer_index[layer])
    input_size = int(topology.layer_counts[layer])
    output_index = int(topology.layer_index[consumer])
    output_size = int(topology.layer_feed_counts[consumer])
    dropout_rate = topology.dropout_rate(consumer)

    start = int(topology.weight_index[consumer])
    block = buffers.weights[start : start + output_size * input_size]
    block = block.reshape(output_size, input_size)

    layer_output = buffers.layer_output
    contributions = layer_output[input_index : input_index + input_size] * (1.0 - dropout_rate)
    sums = block @ contributions

    buffers.layer_sums[output_index : output_index + output_size] = sums
    layer_output[output_index : output_index + output_size] = sums

    topology.activation_functions[consumer].apply(layer_output, output_index, output_size)

    _feed_context(topology, layer_output, consumer, output_index)


def forward(
    topology: EncodedTopology, buffers: NetworkBuffers, inputs: Sequence[float] | Array
) -> Array:
    """Run one forward pass and return a fresh copy of the output layer."""

    values = np.asarray(inputs, dtype=np.float64).reshape(-1)
    if values.shape[0] != topology.input_count:
        raise ValueError(
            f"Expected {topology.input_count} inputs but received {values.shape[0]}"
        )

    input_layer = topology.layer_count - 1
    input_index = int(topology.layer_index[input_layer])
    layer_output = buffers.layer_output
    layer_output[input_index : input_index + topology.input_count] = values

    for layer in range(input_layer, 0, -1):
        compute_layer(topology, buffers, layer)

    # the loop body never visits the input layer as a consumer
    _feed_context(topology, layer_output, input_layer, input_index)

    return layer_output[: topology.output_count].copy()
