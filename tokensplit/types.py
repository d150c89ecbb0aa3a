# tokensplit/types.py

from __future__ import annotations
from typing import List

__all__ = [
    "LabelPath",
    "Words",
    "NUM_TAGS",
    "CONTINUE",
    "BOUNDARY",
    "PAD_IDX",
    "UNK_IDX",
    "MAX_LEN",
    "DEFAULT_SUB_BATCH",
]

LabelPath = List[int]
Words = List[str]

# Tag 1 opens a new word, tag 0 extends the current one.
NUM_TAGS = 2
CONTINUE = 0
BOUNDARY = 1

PAD_IDX = 0
UNK_IDX = 1

MAX_LEN = 64
DEFAULT_SUB_BATCH = 256
