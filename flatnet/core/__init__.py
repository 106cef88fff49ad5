"""Core numerical primitives for flatnet."""

from . import activations, errors, propagation, topology, types

__all__ = ["activations", "errors", "propagation", "topology", "types"]
