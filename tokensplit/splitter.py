"""The public splitting engine.

:class:`Splitter` ties together an emission provider, a transition model and
the batch scheduler. It is built once, explicitly, and then passed to
whatever needs to split text; nothing is initialized behind the caller's
back. The engine owns its provider and releases it when closed, so it is
normally used as a context manager::

    with Splitter.from_config(load_config("config.yaml")) as splitter:
        splitter.split("chatgptlogin")        # ['chatgpt', 'login']
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .batching import BatchScheduler
from .config import Config
from .emissions import EmissionProvider, TorchScriptEmissionProvider, load_provider
from .errors import SplitterError
from .transitions import TransitionModel, load_transitions
from .types import DEFAULT_SUB_BATCH, MAX_LEN, Words

logger = logging.getLogger(__name__)


class Splitter:
    """
    Splits concatenated alphanumeric tokens into words.

    Attributes:
        provider: The emission provider owned by this engine.
        model: The read-only transition model.
        max_len: Inputs are lowercased and cut to this many characters.
        max_sub_batch: Default chunk size for :meth:`split_batch`.
    """

    def __init__(
        self,
        provider: EmissionProvider,
        model: TransitionModel,
        *,
        max_len: int = MAX_LEN,
        max_sub_batch: int = DEFAULT_SUB_BATCH,
        workers: int = 1,
        show_progress: bool = False,
    ):
        self.provider = provider
        self.model = model
        self.max_len = max_len
        self.max_sub_batch = max_sub_batch
        self._scheduler = BatchScheduler(
            provider, model, max_len=max_len, workers=workers, show_progress=show_progress
        )
        self._closed = False

    @classmethod
    def from_config(cls, cfg: Config, provider: Optional[EmissionProvider] = None) -> "Splitter":
        """
        Builds an engine from a loaded configuration.

        The provider is taken from ``provider`` if given, else from the
        ``cfg.provider`` factory path, else a TorchScript model is loaded from
        ``cfg.paths["emission_model"]``. If the transition tables then fail to
        load, a provider created here is closed before the error propagates.

        Raises:
            ResourceLoadError: If any model artifact cannot be loaded.
        """
        owned = provider is None
        if provider is None:
            if cfg.provider:
                provider = load_provider(cfg.provider, cfg)
            else:
                provider = TorchScriptEmissionProvider(cfg.resolve("emission_model"))

        try:
            model = load_transitions(cfg.model_dir, cfg.paths)
        except Exception:
            if owned:
                provider.close()
            raise

        return cls(
            provider,
            model,
            max_len=cfg.max_len,
            max_sub_batch=cfg.max_sub_batch,
            workers=cfg.workers,
            show_progress=cfg.show_progress,
        )

    @classmethod
    def from_dir(cls, model_dir: Union[str, Path], provider: EmissionProvider, **kwargs) -> "Splitter":
        """Builds an engine from the default transition files in ``model_dir``."""
        return cls(provider, load_transitions(model_dir), **kwargs)

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise SplitterError("Splitter has been closed.")

    def split(self, text: str) -> Words:
        """
        Splits a single token into words.

        Empty input returns ``[]``. Characters outside ``a-z0-9`` are kept in
        the output but scored as unknown, and input longer than ``max_len`` is
        truncated.

        Raises:
            InferenceError: If the emission provider fails.
        """
        self._check_open()
        return self._scheduler.decode_all([text], 1)[0]

    def split_batch(self, texts: Sequence[str], max_sub_batch: Optional[int] = None) -> List[Words]:
        """
        Splits many tokens, grouping equal-length inputs into shared provider calls.

        The result is index-aligned with ``texts`` and equal, item by item, to
        calling :meth:`split` on each input.

        Args:
            texts: The tokens to split.
            max_sub_batch: Maximum items per provider call; defaults to the
                engine's ``max_sub_batch``.

        Raises:
            InferenceError: If the emission provider fails on any chunk. No
                partial result is returned.
        """
        self._check_open()
        if not texts:
            return []
        size = self.max_sub_batch if max_sub_batch is None else max_sub_batch
        return self._scheduler.decode_all(texts, size)

    def close(self) -> None:
        """Releases the emission provider. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        logger.debug("Closing splitter and its emission provider")
        self.provider.close()

    def __enter__(self) -> "Splitter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
