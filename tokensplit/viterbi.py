"""Viterbi decoding over the two-tag linear-chain CRF.

Given per-position emission scores and a :class:`TransitionModel`, the
decoder returns the tag path with the highest total score

    start[y0] + sum_t emissions[t][yt] + sum_t pairwise[y(t-1)][yt] + end[yL-1]

This is a raw max-sum search. No softmax or normalization is applied, so the
scores are only meaningful relative to each other. Ties are always resolved
toward the lowest tag index, both when choosing a backpointer and when
choosing the final tag, which keeps the output reproducible.
"""
from __future__ import annotations
from typing import List, Sequence

import numpy as np

from .transitions import TransitionModel
from .types import LabelPath


def _as_matrix(emissions, num_tags: int) -> np.ndarray:
    arr = np.asarray(emissions, dtype=np.float64)
    if arr.ndim == 1 and arr.size == 0:
        arr = arr.reshape(0, num_tags)
    if arr.ndim != 2 or arr.shape[1] != num_tags:
        raise ValueError(
            f"Emissions must have shape (L, {num_tags}), got {arr.shape}."
        )
    return arr


def viterbi_decode(emissions, model: TransitionModel) -> LabelPath:
    """
    Finds the maximum-scoring tag path for a single sequence.

    Args:
        emissions: An ``(L, T)`` array-like of per-position tag scores.
        model: The transition scores to combine with the emissions.

    Returns:
        A list of ``L`` tag ids. An empty sequence yields an empty path.

    Raises:
        ValueError: If ``emissions`` is not shaped ``(L, T)``.
    """
    num_tags = model.num_tags
    em = _as_matrix(emissions, num_tags)
    seq_len = em.shape[0]
    if seq_len == 0:
        return []

    start = model.start.astype(np.float64)
    end = model.end.astype(np.float64)
    pairwise = model.pairwise.astype(np.float64)

    score = start + em[0]
    history = np.zeros((max(seq_len - 1, 0), num_tags), dtype=np.int64)

    for t in range(1, seq_len):
        # candidates[i, j]: best score ending in i, then moving to j
        candidates = score[:, None] + pairwise
        # argmax returns the first maximum, i.e. the lowest source tag
        best_prev = np.argmax(candidates, axis=0)
        history[t - 1] = best_prev
        score = candidates[best_prev, np.arange(num_tags)] + em[t]

    best_last = int(np.argmax(score + end))

    path = [0] * seq_len
    path[-1] = best_last
    for t in range(seq_len - 2, -1, -1):
        path[t] = int(history[t][path[t + 1]])
    return path


def viterbi_decode_batch(emissions, model: TransitionModel) -> List[LabelPath]:
    """Decodes every row of a ``(B, L, T)`` emission tensor independently."""
    arr = np.asarray(emissions)
    if arr.ndim != 3:
        raise ValueError(f"Batch emissions must have shape (B, L, T), got {arr.shape}.")
    return [viterbi_decode(arr[b], model) for b in range(arr.shape[0])]


def path_score(emissions, path: Sequence[int], model: TransitionModel) -> float:
    """
    Computes the total score of ``path`` under ``emissions`` and ``model``.

    Used to compare a decoded path against alternatives; the empty path scores
    ``0.0``.
    """
    em = _as_matrix(emissions, model.num_tags)
    if len(path) != em.shape[0]:
        raise ValueError(f"Path length {len(path)} does not match {em.shape[0]} positions.")
    if not path:
        return 0.0

    total = float(model.start[path[0]]) + float(model.end[path[-1]])
    for t, tag in enumerate(path):
        total += float(em[t][tag])
        if t > 0:
            total += float(model.pairwise[path[t - 1]][tag])
    return total
