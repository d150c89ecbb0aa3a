"""Emission providers: the boundary to the external character scoring model.

A provider receives a ``(B, L)`` int64 id matrix of equal-length sequences and
returns a ``(B, L, T)`` array of per-position tag scores. Whatever goes wrong
inside the model is reported as :class:`~tokensplit.errors.InferenceError`.

Providers own whatever runtime resources the model needs and release them in
``close()``. They are also context managers, so the usual way to hold one is
a ``with`` block (or letting :class:`~tokensplit.splitter.Splitter` own it).
"""
from __future__ import annotations
import importlib
import logging
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, Union, runtime_checkable

import numpy as np

from .errors import InferenceError, ResourceLoadError
from .types import NUM_TAGS

logger = logging.getLogger(__name__)

__all__ = [
    "EmissionProvider",
    "BaseEmissionProvider",
    "CallableEmissionProvider",
    "TorchScriptEmissionProvider",
    "check_emissions",
    "load_provider",
]


@runtime_checkable
class EmissionProvider(Protocol):
    """Structural interface every emission provider satisfies."""

    thread_safe: bool

    def score(self, ids: np.ndarray) -> np.ndarray: ...

    def close(self) -> None: ...


def check_emissions(emissions: Any, ids: np.ndarray, num_tags: int = NUM_TAGS) -> np.ndarray:
    """
    Validates a provider result against the ids it was computed from.

    Returns:
        The emissions as a float32 array of shape ``(B, L, T)``.

    Raises:
        InferenceError: If the result cannot be read as numbers or has the
            wrong shape.
    """
    try:
        arr = np.asarray(emissions, dtype=np.float32)
    except (TypeError, ValueError) as e:
        raise InferenceError(f"Emission scores are not numeric: {e}") from e

    expected = (ids.shape[0], ids.shape[1], num_tags)
    if arr.shape != expected:
        raise InferenceError(f"Emission scores have shape {arr.shape}, expected {expected}.")
    return arr


class BaseEmissionProvider:
    """
    Shared plumbing for providers: context management, closed-state guard and
    error translation.

    Subclasses implement :meth:`_run` and, if they hold resources, :meth:`_release`.
    """

    thread_safe = False

    def __init__(self, num_tags: int = NUM_TAGS):
        self.num_tags = num_tags
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _run(self, ids: np.ndarray) -> Any:
        raise NotImplementedError

    def _release(self) -> None:
        pass

    def score(self, ids: np.ndarray) -> np.ndarray:
        if self._closed:
            raise InferenceError(f"{type(self).__name__} has been closed.")
        ids = np.asarray(ids, dtype=np.int64)
        if ids.ndim != 2:
            raise InferenceError(f"Expected a (B, L) id matrix, got shape {ids.shape}.")
        try:
            raw = self._run(ids)
        except InferenceError:
            raise
        except Exception as e:
            logger.error("Emission provider failed on batch of shape %s: %s", ids.shape, e)
            raise InferenceError(f"Emission scoring failed: {e}") from e
        return check_emissions(raw, ids, self.num_tags)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class CallableEmissionProvider(BaseEmissionProvider):
    """
    Adapts a plain function ``ids -> emissions`` to the provider interface.

    Attributes:
        fn: The scoring function; it receives the ``(B, L)`` int64 id matrix.
        thread_safe: Whether ``fn`` may be called from several threads at once.
    """

    def __init__(
        self,
        fn: Callable[[np.ndarray], Any],
        *,
        thread_safe: bool = False,
        on_close: Optional[Callable[[], None]] = None,
        num_tags: int = NUM_TAGS,
    ):
        super().__init__(num_tags=num_tags)
        self.fn = fn
        self.thread_safe = thread_safe
        self._on_close = on_close

    def _run(self, ids: np.ndarray) -> Any:
        return self.fn(ids)

    def _release(self) -> None:
        if self._on_close is not None:
            self._on_close()


class TorchScriptEmissionProvider(BaseEmissionProvider):
    """
    Runs a TorchScript character model exported with a single ``chars`` input.

    The model is expected to map a ``(B, L)`` long tensor to ``(B, L, T)``
    emission scores. Inference runs on CPU unless ``device`` says otherwise.
    """

    def __init__(self, model_path: Union[str, Path], device: str = "cpu", num_tags: int = NUM_TAGS):
        super().__init__(num_tags=num_tags)
        try:
            import torch
        except ImportError as e:
            raise ResourceLoadError(
                "TorchScriptEmissionProvider requires the 'torch' extra to be installed."
            ) from e

        path = Path(model_path)
        if not path.is_file():
            raise ResourceLoadError(f"Emission model not found at: {path}")
        try:
            self._model = torch.jit.load(str(path), map_location=device)
        except (RuntimeError, ValueError) as e:
            raise ResourceLoadError(f"Could not load emission model {path}: {e}") from e
        self._model.eval()
        self._torch = torch
        self._device = torch.device(device)
        logger.info("Loaded TorchScript emission model from %s on %s", path, device)

    def _run(self, ids: np.ndarray) -> np.ndarray:
        torch = self._torch
        chars = torch.from_numpy(ids).to(self._device)
        with torch.inference_mode():
            out = self._model(chars)
        if isinstance(out, (tuple, list)):
            out = out[0]
        return out.float().cpu().numpy()

    def _release(self) -> None:
        self._model = None


def load_provider(spec: str, *args: Any, **kwargs: Any) -> EmissionProvider:
    """
    Builds a provider from a ``"package.module:factory"`` import path.

    The factory is called with ``*args`` and ``**kwargs`` (the CLI passes the
    loaded :class:`~tokensplit.config.Config`). A bare callable result that is
    not already a provider is wrapped in :class:`CallableEmissionProvider`.

    Raises:
        ResourceLoadError: If the module or attribute cannot be resolved, or
            the factory itself fails.
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ResourceLoadError(f"Provider spec must look like 'module:factory', got '{spec}'.")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ResourceLoadError(f"Could not import provider module '{module_name}': {e}") from e
    try:
        factory = getattr(module, attr)
    except AttributeError as e:
        raise ResourceLoadError(f"Module '{module_name}' has no attribute '{attr}'.") from e

    try:
        provider = factory(*args, **kwargs)
    except ResourceLoadError:
        raise
    except Exception as e:
        raise ResourceLoadError(f"Provider factory '{spec}' failed: {e}") from e
    if isinstance(provider, EmissionProvider):
        return provider
    if callable(provider):
        return CallableEmissionProvider(provider)
    raise ResourceLoadError(f"Provider factory '{spec}' returned {type(provider).__name__}.")
