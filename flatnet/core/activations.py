"""Activation functions applied in place over slices of the neuron buffer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Protocol

import numpy as np

from .types import Array


class ActivationFunction(Protocol):
    """Capability applied to ``buffer[offset:offset + length]`` in place."""

    def apply(self, buffer: Array, offset: int, length: int) -> None:
        """Activate ``length`` values of ``buffer`` starting at ``offset``."""


class ActivationLinear:
    """Identity activation; leaves the sums untouched."""

    def apply(self, buffer: Array, offset: int, length: int) -> None:
        return None


class ActivationSigmoid:
    def apply(self, buffer: Array, offset: int, length: int) -> None:
        view = buffer[offset : offset + length]
        np.negative(view, out=view)
        np.exp(view, out=view)
        view += 1.0
        np.reciprocal(view, out=view)


class ActivationTANH:
    def apply(self, buffer: Array, offset: int, length: int) -> None:
        view = buffer[offset : offset + length]
        np.tanh(view, out=view)


@dataclass
class ActivationReLU:
    """Rectifier: values at or below ``threshold`` become ``low``."""

    threshold: float = 0.0
    low: float = 0.0

    def apply(self, buffer: Array, offset: int, length: int) -> None:
        view = buffer[offset : offset + length]
        view[view <= self.threshold] = self.low


class ActivationSoftMax:
    """Softmax over the slice, stabilised by subtracting the maximum."""

    def apply(self, buffer: Array, offset: int, length: int) -> None:
        if length == 0:
            return
        view = buffer[offset : offset + length]
        view -= view.max()
        np.exp(view, out=view)
        view /= view.sum()


ActivationFactory = Callable[[], ActivationFunction]


class ActivationRegistry:
    """Name to factory lookup for activation functions."""

    def __init__(self) -> None:
        self._registry: Dict[str, ActivationFactory] = {}

    def register(self, name: str, factory: ActivationFactory) -> None:
        self._registry[name] = factory

    def get(self, name: str) -> ActivationFunction:
        if name not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise KeyError(f"Unknown activation {name!r}. Available activations: {available}")
        return self._registry[name]()

    def names(self) -> Iterable[str]:
        return sorted(self._registry)


def resolve(activation: str | ActivationFunction) -> ActivationFunction:
    """Return ``activation`` itself, or a fresh instance when given a name."""

    if isinstance(activation, str):
        return REGISTRY.get(activation)
    return activation


REGISTRY = ActivationRegistry()
REGISTRY.register("linear", ActivationLinear)
REGISTRY.register("sigmoid", ActivationSigmoid)
REGISTRY.register("tanh", ActivationTANH)
REGISTRY.register("relu", ActivationReLU)
REGISTRY.register("softmax", ActivationSoftMax)


__all__ = [
    "ActivationFunction",
    "ActivationLinear",
    "ActivationReLU",
    "ActivationRegistry",
    "ActivationSigmoid",
    "ActivationSoftMax",
    "ActivationTANH",
    "REGISTRY",
    "resolve",
]
