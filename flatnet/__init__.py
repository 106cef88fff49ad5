"""flatnet public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.errors import InvalidIndexError, NetworkError
from .core.topology import encode
from .core.types import ContextState, EncodedTopology, LayerDescriptor
from .network import DEFAULT_BIAS_ACTIVATION, NO_BIAS_ACTIVATION, BasicNetwork
from .patterns import elman, feedforward, jordan
from . import presets  # noqa: F401
from .presets import build_network, load_config, load_preset

__all__ = [
    "BasicNetwork",
    "ContextState",
    "DEFAULT_BIAS_ACTIVATION",
    "EncodedTopology",
    "InvalidIndexError",
    "LayerDescriptor",
    "NO_BIAS_ACTIVATION",
    "NetworkError",
    "activations",
    "build_network",
    "elman",
    "encode",
    "feedforward",
    "jordan",
    "load_config",
    "load_preset",
    "presets",
    "types",
]
