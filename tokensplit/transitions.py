"""Loading and validation of the learned tag transition scores.

The transition model consists of three flat float32 tables persisted as raw
little-endian binaries: the start bias (``T`` values), the end bias (``T``
values) and the pairwise matrix (``T*T`` values, row-major so that entry
``i*T + j`` scores a move from tag ``i`` to tag ``j``).
"""
from __future__ import annotations
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

import numpy as np

from .errors import ResourceLoadError
from .types import NUM_TAGS

logger = logging.getLogger(__name__)

START_FILE = "start_transitions.bin"
END_FILE = "end_transitions.bin"
PAIRWISE_FILE = "transitions.bin"

PathLike = Union[str, Path]


def _frozen(values: Sequence[float], name: str, expected: int) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float32).reshape(-1)
    if arr.size != expected:
        raise ResourceLoadError(
            f"Transition table '{name}' has {arr.size} values, expected {expected}."
        )
    arr = arr.copy()
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class TransitionModel:
    """
    Immutable CRF transition scores for the two-tag boundary model.

    Instances are built once and then shared read-only, so a single model can
    be used by any number of concurrent decode calls.

    Attributes:
        start: Score for starting the sequence in each tag, shape ``(T,)``.
        end: Score for ending the sequence in each tag, shape ``(T,)``.
        pairwise: Score for moving from tag ``i`` to tag ``j``, shape ``(T, T)``.
    """
    start: np.ndarray
    end: np.ndarray
    pairwise: np.ndarray

    def __post_init__(self) -> None:
        start = np.asarray(self.start, dtype=np.float32).reshape(-1)
        num_tags = start.size
        if num_tags < 1:
            raise ResourceLoadError("Transition table 'start' is empty.")
        # frozen dataclass: store validated read-only copies
        object.__setattr__(self, "start", _frozen(start, "start", num_tags))
        object.__setattr__(self, "end", _frozen(self.end, "end", num_tags))
        matrix = _frozen(self.pairwise, "pairwise", num_tags * num_tags).reshape(num_tags, num_tags)
        matrix.setflags(write=False)
        object.__setattr__(self, "pairwise", matrix)

    @property
    def num_tags(self) -> int:
        return int(self.start.shape[0])

    @classmethod
    def from_arrays(
        cls,
        start: Sequence[float],
        end: Sequence[float],
        pairwise: Sequence[float],
        num_tags: int = NUM_TAGS,
    ) -> "TransitionModel":
        """
        Builds a model from in-memory tables after validating their sizes.

        ``pairwise`` may be given flat (row-major) or already shaped ``(T, T)``.

        Raises:
            ResourceLoadError: If any table has the wrong number of elements.
        """
        start_arr = _frozen(start, "start", num_tags)
        end_arr = _frozen(end, "end", num_tags)
        flat = _frozen(pairwise, "pairwise", num_tags * num_tags)
        matrix = flat.reshape(num_tags, num_tags)
        matrix.setflags(write=False)
        return cls(start=start_arr, end=end_arr, pairwise=matrix)


def read_float32_bin(path: PathLike) -> np.ndarray:
    """
    Reads a flat little-endian float32 binary file.

    Args:
        path: Location of the ``.bin`` file.

    Returns:
        A 1-D float32 array holding every value in the file.

    Raises:
        ResourceLoadError: If the file cannot be read or its size is not a
            multiple of four bytes.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ResourceLoadError(f"Could not read parameter file {path}: {e}") from e

    if len(data) % 4 != 0:
        raise ResourceLoadError(
            f"Parameter file {path} is truncated: {len(data)} bytes is not a multiple of 4."
        )
    return np.frombuffer(data, dtype="<f4").astype(np.float32)


def write_float32_bin(path: PathLike, values: Sequence[float]) -> None:
    """Writes ``values`` as a flat little-endian float32 binary file."""
    Path(path).write_bytes(np.asarray(values, dtype="<f4").reshape(-1).tobytes())


def load_transitions(
    model_dir: PathLike,
    file_names: Optional[Mapping[str, str]] = None,
    num_tags: int = NUM_TAGS,
) -> TransitionModel:
    """
    Loads the three transition tables from ``model_dir``.

    Args:
        model_dir: Directory holding the ``.bin`` parameter files.
        file_names: Optional overrides for the ``start_transitions``,
            ``end_transitions`` and ``transitions`` file names.
        num_tags: Expected tag count ``T``.

    Returns:
        A validated, read-only :class:`TransitionModel`.

    Raises:
        ResourceLoadError: If any file is missing, unreadable or mis-sized.
    """
    names = {
        "start_transitions": START_FILE,
        "end_transitions": END_FILE,
        "transitions": PAIRWISE_FILE,
    }
    if file_names:
        names.update({k: v for k, v in file_names.items() if k in names and v})

    base = Path(model_dir)
    tables = {}
    for key, name in names.items():
        path = base / name
        if not path.is_file():
            raise ResourceLoadError(f"Missing transition parameter file: {path}")
        tables[key] = read_float32_bin(path)
        logger.debug("Loaded %d values from %s", tables[key].size, path)

    model = TransitionModel.from_arrays(
        start=tables["start_transitions"],
        end=tables["end_transitions"],
        pairwise=tables["transitions"],
        num_tags=num_tags,
    )
    logger.info("Loaded transition model (%d tags) from %s", model.num_tags, base)
    return model
