"""Exception types raised by the splitting engine."""
from __future__ import annotations

__all__ = ["SplitterError", "ResourceLoadError", "InferenceError"]


class SplitterError(Exception):
    """Base class for all errors raised by :mod:`tokensplit`."""


class ResourceLoadError(SplitterError):
    """A parameter file or model artifact is missing, truncated or mis-sized.

    Raised while a :class:`~tokensplit.splitter.Splitter` is being built. An
    engine that failed to load is never handed back to the caller.
    """


class InferenceError(SplitterError):
    """The emission provider failed to score a chunk of sequences."""
