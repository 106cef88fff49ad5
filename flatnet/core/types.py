"""Core typing contracts for flatnet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np

from .errors import InvalidIndexError

if TYPE_CHECKING:  # pragma: no cover
    from .activations import ActivationFunction

Array = np.ndarray


@dataclass(eq=False)
class LayerDescriptor:
    """Description of one layer as supplied by a topology builder.

    Descriptors compare by identity: ``context_fed_by`` names one specific
    layer object, not any layer with equal settings.

    Attributes
    ----------
    activation:
        Activation applied to the sums of the layer's feed neurons.
    count:
        Number of feed neurons (excluding bias and context neurons).
    bias_activation:
        Constant written into the bias neuron. ``0`` means the layer has no
        bias neuron.
    context_fed_by:
        Layer whose activated output is copied into this layer's context
        neurons after every forward pass.
    context_count:
        Number of context neurons. Defaults to ``context_fed_by.count`` when a
        context source is named.
    dropout_rate:
        Inference-time scaling applied to every weighted contribution into
        this layer when the network is built with dropout enabled.
    """

    activation: "ActivationFunction"
    count: int
    bias_activation: float = 0.0
    context_fed_by: Optional["LayerDescriptor"] = None
    context_count: int = 0
    dropout_rate: float = 0.0

    def __post_init__(self) -> None:
        if self.context_fed_by is not None and self.context_count == 0:
            self.context_count = self.context_fed_by.count

    @property
    def has_bias(self) -> bool:
        return self.bias_activation != 0.0

    @property
    def total_count(self) -> int:
        return self.count + self.context_count + (1 if self.has_bias else 0)


def _frozen(values: Sequence, dtype) -> Array:
    arr = np.asarray(values, dtype=dtype)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class EncodedTopology:
    """Flat index tables describing where every layer lives in the buffers.

    All per-layer tables use internal ordering: index ``0`` is the output
    layer and ``layer_count - 1`` the input layer.
    """

    input_count: int
    output_count: int
    layer_counts: Array
    layer_feed_counts: Array
    layer_context_count: Array
    layer_index: Array
    weight_index: Array
    context_target_offset: Array
    context_target_size: Array
    bias_activation: Array
    activation_functions: tuple
    layer_dropout_rates: Array
    has_context: bool
    weight_count: int
    neuron_count: int

    @classmethod
    def from_tables(cls, **tables) -> "EncodedTopology":
        """Build a topology, freezing the numeric tables."""

        for name in (
            "layer_counts",
            "layer_feed_counts",
            "layer_context_count",
            "layer_index",
            "weight_index",
            "context_target_offset",
            "context_target_size",
        ):
            tables[name] = _frozen(tables[name], np.int64)
        for name in ("bias_activation", "layer_dropout_rates"):
            tables[name] = _frozen(tables[name], np.float64)
        tables["activation_functions"] = tuple(tables["activation_functions"])
        return cls(**tables)

    @property
    def layer_count(self) -> int:
        return int(self.layer_counts.shape[0])

    def _check_layer(self, layer: int) -> None:
        if layer < 0 or layer >= self.layer_count:
            raise InvalidIndexError(f"Invalid layer count: {layer}")

    def neuron_slice(self, layer: int) -> slice:
        """Slice of the neuron buffer holding every neuron of ``layer``."""

        self._check_layer(layer)
        start = int(self.layer_index[layer])
        return slice(start, start + int(self.layer_counts[layer]))

    def context_slice(self, layer: int) -> slice:
        """Slice of the neuron buffer holding the trailing context neurons of ``layer``."""

        self._check_layer(layer)
        end = int(self.layer_index[layer] + self.layer_counts[layer])
        return slice(end - int(self.layer_context_count[layer]), end)

    def dropout_rate(self, layer: int) -> float:
        if self.layer_dropout_rates.shape[0] > layer:
            return float(self.layer_dropout_rates[layer])
        return 0.0


@dataclass
class NetworkBuffers:
    """Mutable flat buffers owned by one network instance."""

    weights: Array
    layer_output: Array
    layer_sums: Array


@dataclass(frozen=True, eq=False)
class ContextState:
    """Snapshot of every context neuron, concatenated in internal layer order."""

    values: Array = field(default_factory=lambda: _frozen([], np.float64))

    @classmethod
    def capture(cls, topology: EncodedTopology, layer_output: Array) -> "ContextState":
        parts = [
            layer_output[topology.context_slice(layer)]
            for layer in range(topology.layer_count)
        ]
        values = np.concatenate(parts) if parts else np.zeros(0)
        return cls(values=_frozen(values.copy(), np.float64))

    def __len__(self) -> int:
        return int(self.values.shape[0])
