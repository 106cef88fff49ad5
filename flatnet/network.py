"""Flat feed-forward / simple recurrent network."""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

import numpy as np

from .core import propagation
from .core.activations import ActivationLinear, ActivationSigmoid, ActivationTANH
from .core.errors import InvalidIndexError
from .core.topology import clear_context, encode
from .core.types import Array, ContextState, EncodedTopology, LayerDescriptor

logger = logging.getLogger(__name__)

DEFAULT_BIAS_ACTIVATION = 1.0
NO_BIAS_ACTIVATION = 0.0


class BasicNetwork:
    """Neural network stored as a handful of contiguous buffers.

    Layers are given input layer first. Internally they are stored output
    layer first; every public method taking a layer number uses the natural
    order (``0`` is the input layer).

    A network instance is not safe to share between threads: ``compute``
    mutates the neuron buffer in place.
    """

    def __init__(self, layers: Sequence[LayerDescriptor], dropout: bool = False) -> None:
        self._layers = list(layers)
        self._topology, self._buffers = encode(self._layers, dropout=dropout)

    @classmethod
    def from_sizes(
        cls, input: int, hidden1: int, hidden2: int, output: int, tanh: bool = False
    ) -> "BasicNetwork":
        """Build a network with up to two hidden layers.

        The input layer is linear; hidden layers and the output layer use tanh
        or sigmoid. A hidden count of ``0`` omits that layer.
        """

        def act():
            return ActivationTANH() if tanh else ActivationSigmoid()

        layers = [LayerDescriptor(ActivationLinear(), input, DEFAULT_BIAS_ACTIVATION)]
        for count in (hidden1, hidden2):
            if count:
                layers.append(LayerDescriptor(act(), count, DEFAULT_BIAS_ACTIVATION))
        layers.append(LayerDescriptor(act(), output, NO_BIAS_ACTIVATION))
        return cls(layers)

    # ------------------------------------------------------------------ compute
    def compute(self, inputs: Sequence[float] | Array) -> Array:
        """Return the output for ``inputs``; context neurons carry over to the next call."""

        return propagation.forward(self._topology, self._buffers, inputs)

    def compute_layer(self, layer: int) -> None:
        """Compute internal layer ``layer - 1`` from internal layer ``layer``."""

        if layer < 1 or layer >= self._topology.layer_count:
            raise InvalidIndexError(f"Invalid layer count: {layer}")
        propagation.compute_layer(self._topology, self._buffers, layer)

    def clear_context(self) -> None:
        clear_context(self._topology, self._buffers.layer_output)
        logger.debug("Context cleared")

    def randomize(
        self, hi: float = 1.0, lo: float = -1.0, rng: Optional[np.random.Generator] = None
    ) -> None:
        """Fill every weight with a uniform random value in ``[lo, hi)``."""

        rng = rng if rng is not None else np.random.default_rng()
        weights = self._buffers.weights
        weights[:] = rng.uniform(lo, hi, size=weights.shape[0])
        logger.debug("Randomized %d weights in [%s, %s)", weights.shape[0], lo, hi)

    # ------------------------------------------------------------- recurrence
    def context_state(self) -> ContextState:
        """Snapshot of the context neurons the next ``compute`` will read."""

        return ContextState.capture(self._topology, self._buffers.layer_output)

    def load_context(self, state: ContextState) -> None:
        expected = int(self._topology.layer_context_count.sum())
        if len(state) != expected:
            raise ValueError(f"Context state holds {len(state)} values, expected {expected}")
        position = 0
        layer_output = self._buffers.layer_output
        for layer in range(self._topology.layer_count):
            region = self._topology.context_slice(layer)
            size = region.stop - region.start
            layer_output[region] = state.values[position : position + size]
            position += size

    def step(
        self, inputs: Sequence[float] | Array, state: Optional[ContextState] = None
    ) -> tuple[Array, ContextState]:
        """Run one recurrent step from an explicit context.

        Starts from ``state`` (or from a cleared context when ``None``) and
        returns the output together with the context the following step must
        be given.
        """

        if state is None:
            self.clear_context()
        else:
            self.load_context(state)
        output = self.compute(inputs)
        return output, self.context_state()

    # -------------------------------------------------------- weight addressing
    def _internal_layer(self, layer: int) -> int:
        return self._topology.layer_count - layer - 1

    def validate_neuron(self, target_layer: int, neuron: int) -> None:
        """Raise :class:`InvalidIndexError` unless ``neuron`` exists in ``target_layer``."""

        if target_layer < 0 or target_layer >= self._topology.layer_count:
            raise InvalidIndexError(f"Invalid layer count: {target_layer}")
        if neuron < 0 or neuron >= self.get_layer_total_neuron_count(target_layer):
            raise InvalidIndexError(f"Invalid neuron number: {neuron}")

    def _weight_position(self, from_layer: int, from_neuron: int, to_neuron: int) -> int:
        self.validate_neuron(from_layer, from_neuron)
        if from_layer == self._topology.layer_count - 1:
            raise InvalidIndexError(
                f"The specified layer is not connected to another layer: {from_layer}"
            )
        self.validate_neuron(from_layer + 1, to_neuron)
        if to_neuron >= self.get_layer_neuron_count(from_layer + 1):
            raise InvalidIndexError(
                f"Neuron {to_neuron} of layer {from_layer + 1} is not fed by layer {from_layer}"
            )

        from_number = self._internal_layer(from_layer)
        to_number = from_number - 1
        base = int(self._topology.weight_index[to_number])
        count = int(self._topology.layer_counts[from_number])
        return base + from_neuron + to_neuron * count

    def get_weight(self, from_layer: int, from_neuron: int, to_neuron: int) -> float:
        """Return the weight from ``from_neuron`` of ``from_layer`` to ``to_neuron`` of the next layer."""

        return float(self._buffers.weights[self._weight_position(from_layer, from_neuron, to_neuron)])

    def set_weight(self, from_layer: int, from_neuron: int, to_neuron: int, value: float) -> None:
        self._buffers.weights[self._weight_position(from_layer, from_neuron, to_neuron)] = value

    def get_layer_total_neuron_count(self, layer: int) -> int:
        """Neurons in ``layer`` including bias and context neurons."""

        return int(self._topology.layer_counts[self._internal_layer(layer)])

    def get_layer_neuron_count(self, layer: int) -> int:
        """Neurons in ``layer`` fed by the previous layer."""

        return int(self._topology.layer_feed_counts[self._internal_layer(layer)])

    def has_same_activation_function(self) -> Optional[type]:
        """Return the activation class when every layer uses the same one, else ``None``."""

        kinds = {type(fn) for fn in self._topology.activation_functions}
        if len(kinds) != 1:
            return None
        return kinds.pop()

    # ------------------------------------------------------------- state dict
    def set_weights(self, values: Sequence[float] | Array) -> None:
        values = np.asarray(values, dtype=np.float64).reshape(-1)
        if values.shape[0] != self.encode_length:
            raise ValueError(f"Expected {self.encode_length} weights but received {values.shape[0]}")
        self._buffers.weights[:] = values

    def state_dict(self) -> Mapping[str, Array]:
        return {"weights": self._buffers.weights.copy()}

    def load_state_dict(self, state: Mapping[str, Array]) -> None:
        if "weights" not in state:
            raise KeyError("Missing weights in state dict")
        self.set_weights(state["weights"])

    # -------------------------------------------------------------- accessors
    @property
    def layers(self) -> list[LayerDescriptor]:
        return list(self._layers)

    @property
    def topology(self) -> EncodedTopology:
        return self._topology

    @property
    def input_count(self) -> int:
        return self._topology.input_count

    @property
    def output_count(self) -> int:
        return self._topology.output_count

    @property
    def layer_counts(self) -> Array:
        return self._topology.layer_counts

    @property
    def layer_feed_counts(self) -> Array:
        return self._topology.layer_feed_counts

    @property
    def layer_context_count(self) -> Array:
        return self._topology.layer_context_count

    @property
    def layer_index(self) -> Array:
        return self._topology.layer_index

    @property
    def weight_index(self) -> Array:
        return self._topology.weight_index

    @property
    def context_target_offset(self) -> Array:
        return self._topology.context_target_offset

    @property
    def context_target_size(self) -> Array:
        return self._topology.context_target_size

    @property
    def bias_activation(self) -> Array:
        return self._topology.bias_activation

    @property
    def activation_functions(self) -> tuple:
        return self._topology.activation_functions

    @property
    def layer_dropout_rates(self) -> Array:
        return self._topology.layer_dropout_rates

    @property
    def has_context(self) -> bool:
        return self._topology.has_context

    @property
    def weights(self) -> Array:
        return self._buffers.weights

    @property
    def layer_output(self) -> Array:
        return self._buffers.layer_output

    @property
    def layer_sums(self) -> Array:
        return self._buffers.layer_sums

    @property
    def neuron_count(self) -> int:
        return self._topology.neuron_count

    @property
    def encode_length(self) -> int:
        return self._topology.weight_count
