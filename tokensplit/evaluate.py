"""Exact-match accuracy of a splitter against labeled examples."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple


@dataclass(frozen=True)
class CaseResult:
    text: str
    expected: Tuple[str, ...]
    got: Tuple[str, ...]

    @property
    def passed(self) -> bool:
        return self.expected == self.got


def evaluate(splitter, cases: Sequence[Tuple[str, Sequence[str]]], max_sub_batch: int = 256) -> Dict:
    """
    Splits every case in one batch and compares against the expected words.

    Args:
        splitter: Anything with a ``split_batch(texts, max_sub_batch)`` method.
        cases: ``(text, expected_words)`` pairs.

    Returns:
        A dictionary with the per-case ``results`` and the ``passed``,
        ``failed``, ``total`` and ``accuracy`` summary values.
    """
    texts = [text for text, _ in cases]
    outputs = splitter.split_batch(texts, max_sub_batch) if texts else []
    rows: List[CaseResult] = [
        CaseResult(text, tuple(expected), tuple(got))
        for (text, expected), got in zip(cases, outputs)
    ]
    passed = sum(1 for r in rows if r.passed)
    total = len(rows)
    return {
        "results": rows,
        "passed": passed,
        "failed": total - passed,
        "total": total,
        "accuracy": passed / total if total else 0.0,
    }


def format_report(summary: Dict) -> str:
    """Renders an :func:`evaluate` summary as a fixed-width table."""
    lines = [f"{'Input':<20} | {'Expected':<25} | {'Got':<25} | Status", "-" * 85]
    for r in summary["results"]:
        status = "PASS" if r.passed else "FAIL"
        lines.append(f"{r.text:<20} | {' '.join(r.expected):<25} | {' '.join(r.got):<25} | {status}")
    lines.append("-" * 85)
    lines.append(
        f"Total: {summary['total']} | Passed: {summary['passed']} | "
        f"Failed: {summary['failed']} | Accuracy: {summary['accuracy'] * 100:.1f}%"
    )
    return "\n".join(lines)
