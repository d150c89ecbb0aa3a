# tokensplit/io_utils.py
"""Provides utility functions for reading inputs and saving split results.

Inputs come either as a plain text file with one token per line, or as a CSV
ranking of domains from which the label before the first dot is extracted.
Results are written as JSON under a "results" key, one object per input,
keeping the input order.
"""
import csv
import json
from typing import List, Optional, Sequence


def load_texts(path: str) -> List[str]:
    """
    Loads one token per line from a UTF-8 text file.

    Blank lines and surrounding whitespace are dropped.

    Raises:
        FileNotFoundError: If the file at the specified path does not exist.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return [line.strip() for line in f if line.strip()]
    except FileNotFoundError:
        raise FileNotFoundError(f"Input file not found at: {path}")


def load_domain_prefixes(
    path: str,
    column: int = 2,
    min_len: int = 10,
    limit: Optional[int] = None,
    skip_header: bool = True,
) -> List[str]:
    """
    Extracts domain labels from a CSV ranking file.

    For each row the domain in ``column`` is cut at its first dot. Labels that
    contain a hyphen, or that are not longer than ``min_len`` characters, are
    skipped since they are either already split or too short to be interesting.

    Args:
        path: The CSV file to read.
        column: Zero-based index of the domain column.
        min_len: Labels must be strictly longer than this to be kept.
        limit: Stops after this many labels have been collected.
        skip_header: Whether the first row is a header.

    Returns:
        The collected labels in file order.

    Raises:
        FileNotFoundError: If the file at the specified path does not exist.
    """
    labels: List[str] = []
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            reader = csv.reader(f)
            if skip_header:
                next(reader, None)
            for row in reader:
                if len(row) <= column:
                    continue
                label = row[column].split(".", 1)[0]
                if "-" in label or len(label) <= min_len:
                    continue
                labels.append(label)
                if limit is not None and len(labels) >= limit:
                    break
    except FileNotFoundError:
        raise FileNotFoundError(f"Domain file not found at: {path}")
    return labels


def save_results(path: str, texts: Sequence[str], results: Sequence[Sequence[str]]) -> None:
    """
    Saves split results to a JSON file.

    Raises:
        ValueError: If ``texts`` and ``results`` differ in length.
    """
    if len(texts) != len(results):
        raise ValueError(f"Got {len(results)} results for {len(texts)} inputs.")
    data = {
        "results": [
            {"input": text, "words": list(words)} for text, words in zip(texts, results)
        ]
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
