from __future__ import annotations
from typing import Sequence

from .types import BOUNDARY, Words


def assemble_words(text: str, path: Sequence[int]) -> Words:
    """
    Cuts ``text`` into words at the positions tagged as boundaries.

    The text and the path are walked together, one code point per tag. A
    boundary tag closes the word collected so far and opens a new one. The
    first character always opens the first word, whatever its tag, so the
    concatenation of the returned words is exactly ``text``.

    Args:
        text: The normalized text that was decoded.
        path: One tag per character of ``text``.

    Returns:
        The ordered, non-empty words.

    Raises:
        ValueError: If ``path`` and ``text`` differ in length.
    """
    if len(path) != len(text):
        raise ValueError(f"Tag path has {len(path)} tags for {len(text)} characters.")

    words: Words = []
    current = []
    for char, tag in zip(text, path):
        if tag == BOUNDARY and current:
            words.append("".join(current))
            current = []
        current.append(char)

    if current:
        words.append("".join(current))
    return words
