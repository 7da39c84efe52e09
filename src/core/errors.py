# src/core/errors.py — v1
"""Exception taxonomy shared by every peernet module.

All errors are raised synchronously to the caller. The only internal retry
loop is the stub-matching generator, which converts exhaustion into
GenerationExhaustedError.
"""

from __future__ import annotations


class PeernetError(Exception):
    """Base class for all peernet errors."""


class InvalidEdgeError(PeernetError, ValueError):
    """Raised when an edge cannot be added to a graph (self-loop, bad arity, bad weight)."""


class DegreeSequenceError(PeernetError, ValueError):
    """Raised when a degree sequence is not graphical."""


class GenerationExhaustedError(PeernetError, RuntimeError):
    """Raised when no simple realization is found within the retry budget."""

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class InvalidArgumentError(PeernetError, ValueError):
    """Raised for out-of-range arguments (zero trials, negative weights, unknown modes)."""
