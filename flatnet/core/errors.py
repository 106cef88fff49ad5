"""Error types raised by flatnet."""

from __future__ import annotations


class NetworkError(Exception):
    """Base class for errors raised by a flat network."""


class InvalidIndexError(NetworkError, IndexError):
    """A layer or neuron index is out of range, or names a missing connection."""
