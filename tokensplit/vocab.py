# tokensplit/vocab.py
"""Character vocabulary and text normalization.

The vocabulary is fixed: ``a-z`` followed by ``0-9``, mapped to ids 2..37.
Id 0 is reserved for padding and id 1 stands in for any character outside
the vocabulary. All indexing is done by code point, so a non-ASCII letter
occupies exactly one position and encodes to :data:`UNK_IDX`.
"""
from __future__ import annotations
from types import MappingProxyType
from typing import List, Mapping, Sequence

import numpy as np

from .types import MAX_LEN, PAD_IDX, UNK_IDX

CHARS = "abcdefghijklmnopqrstuvwxyz0123456789"

ITOCH = ("<pad>", "<unk>") + tuple(CHARS)
CTOIX: Mapping[str, int] = MappingProxyType({c: i + 2 for i, c in enumerate(CHARS)})
VOCAB_SIZE = len(ITOCH)


def normalize(text: str, max_len: int = MAX_LEN) -> str:
    """Lowercases ``text`` and truncates it to ``max_len`` code points."""
    return text.lower()[:max_len]


def encode(text: str) -> List[int]:
    # unknown characters degrade to UNK_IDX, never raise
    return [CTOIX.get(c, UNK_IDX) for c in text]


def encode_batch(texts: Sequence[str]) -> np.ndarray:
    """
    Encodes equal-length texts into a ``(B, L)`` int64 id matrix.

    Args:
        texts: Normalized texts that all share the same length.

    Returns:
        A dense int64 array suitable for a single emission provider call.

    Raises:
        ValueError: If the texts do not all have the same length.
    """
    if not texts:
        return np.zeros((0, 0), dtype=np.int64)
    length = len(texts[0])
    ids = np.full((len(texts), length), PAD_IDX, dtype=np.int64)
    for row, text in enumerate(texts):
        if len(text) != length:
            raise ValueError(
                f"encode_batch expects equal-length texts, got {len(text)} and {length}"
            )
        ids[row, :] = encode(text)
    return ids


def decode_ids(ids: Sequence[int]) -> str:
    """Maps ids back to characters; padding is dropped and unknowns become '?'."""
    out = []
    for x in ids:
        if x == PAD_IDX:
            continue
        out.append("?" if x == UNK_IDX else ITOCH[x])
    return "".join(out)
