"""Length-bucketed batch decoding.

Emission scoring is far cheaper per item when many sequences go through the
model in one call, but the model wants a dense, fixed-shape input. The
scheduler therefore buckets inputs by their normalized length, so that every
chunk it sends to the provider is a plain ``(B, L)`` matrix with no padding or
masking. Each chunk is then decoded row by row and the words are written back
at the original input positions.

Bucketing and chunking only change *how many* sequences share a provider call,
never the per-sequence arithmetic, so the output of :meth:`BatchScheduler.decode_all`
is identical to decoding each input on its own.
"""
from __future__ import annotations
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass
import logging
import threading
from typing import Dict, List, Optional, Sequence, Tuple

from tqdm import tqdm

from .assembler import assemble_words
from .emissions import EmissionProvider, check_emissions
from .errors import InferenceError
from .transitions import TransitionModel
from .types import DEFAULT_SUB_BATCH, MAX_LEN, Words
from .viterbi import viterbi_decode_batch
from .vocab import encode_batch, normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchItem:
    """One normalized input together with its position in the caller's list."""
    index: int
    text: str


Chunk = Tuple[BatchItem, ...]


def plan_chunks(
    texts: Sequence[str],
    max_sub_batch: int = DEFAULT_SUB_BATCH,
    max_len: int = MAX_LEN,
) -> Tuple[List[Optional[Words]], List[Chunk]]:
    """
    Normalizes ``texts`` and splits the non-empty ones into decode chunks.

    Args:
        texts: Raw caller inputs.
        max_sub_batch: Upper bound on the number of items per chunk. Values
            below 1 fall back to the default chunk size.
        max_len: Maximum normalized length in code points.

    Returns:
        A pair ``(results, chunks)``. ``results`` has one slot per input; slots
        for inputs that are empty after normalization already hold ``[]`` and
        the rest are ``None``. ``chunks`` lists the equal-length groups to
        decode, shortest length first, each at most ``max_sub_batch`` long.
    """
    if max_sub_batch <= 0:
        max_sub_batch = DEFAULT_SUB_BATCH

    results: List[Optional[Words]] = [None] * len(texts)
    groups: Dict[int, List[BatchItem]] = {}
    for i, raw in enumerate(texts):
        text = normalize(raw, max_len)
        if not text:
            results[i] = []
            continue
        groups.setdefault(len(text), []).append(BatchItem(i, text))

    chunks: List[Chunk] = []
    for length in sorted(groups):
        group = groups[length]
        for start in range(0, len(group), max_sub_batch):
            chunks.append(tuple(group[start : start + max_sub_batch]))
    return results, chunks


class BatchScheduler:
    """
    Drives emission scoring and Viterbi decoding over length-bucketed chunks.

    The scheduler itself is stateless between calls. With ``workers > 1``
    chunks run on a thread pool; each chunk owns its own id and emission
    buffers and only ever produces results for its own input indices. Calls
    into a provider that does not declare ``thread_safe`` are serialized.

    Attributes:
        provider: Source of per-position emission scores.
        model: Shared, read-only transition scores.
        max_len: Normalization length cap.
        workers: Number of chunks decoded concurrently.
        show_progress: Displays a tqdm progress bar over chunks.
    """

    def __init__(
        self,
        provider: EmissionProvider,
        model: TransitionModel,
        *,
        max_len: int = MAX_LEN,
        workers: int = 1,
        show_progress: bool = False,
    ):
        self.provider = provider
        self.model = model
        self.max_len = max_len
        self.workers = max(1, int(workers))
        self.show_progress = show_progress
        self._provider_lock = threading.Lock()

    def _call_provider(self, ids):
        try:
            return self.provider.score(ids)
        except InferenceError:
            raise
        except Exception as e:
            logger.error("Emission provider failed on batch of shape %s: %s", ids.shape, e)
            raise InferenceError(f"Emission scoring failed: {e}") from e

    def _score(self, ids):
        if getattr(self.provider, "thread_safe", False):
            return self._call_provider(ids)
        with self._provider_lock:
            return self._call_provider(ids)

    def decode_chunk(self, chunk: Chunk) -> List[Tuple[int, Words]]:
        """Scores one equal-length chunk and returns ``(index, words)`` pairs."""
        texts = [item.text for item in chunk]
        ids = encode_batch(texts)
        emissions = check_emissions(self._score(ids), ids, self.model.num_tags)

        paths = viterbi_decode_batch(emissions, self.model)
        return [(item.index, assemble_words(item.text, path)) for item, path in zip(chunk, paths)]

    def decode_all(self, texts: Sequence[str], max_sub_batch: int = DEFAULT_SUB_BATCH) -> List[Words]:
        """
        Splits every input and returns the words in input order.

        Either every slot is filled or the call raises; a failing chunk never
        leaves a partially-populated result behind.

        Raises:
            InferenceError: If the provider fails on any chunk.
        """
        results, chunks = plan_chunks(texts, max_sub_batch, self.max_len)
        logger.debug(
            "Decoding %d inputs in %d chunks (%d empty)",
            len(texts), len(chunks), sum(1 for r in results if r is not None),
        )

        progress = tqdm(total=len(chunks), desc="Splitting", unit="chunk", disable=not self.show_progress)
        try:
            if self.workers == 1 or len(chunks) <= 1:
                decoded = []
                for chunk in chunks:
                    decoded.extend(self.decode_chunk(chunk))
                    progress.update(1)
            else:
                decoded = self._decode_parallel(chunks, progress)
        finally:
            progress.close()

        for index, words in decoded:
            results[index] = words
        return [list(r) for r in results]

    def _decode_parallel(self, chunks: Sequence[Chunk], progress) -> List[Tuple[int, Words]]:
        decoded: List[Tuple[int, Words]] = []
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = [executor.submit(self.decode_chunk, chunk) for chunk in chunks]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for future in pending:
                future.cancel()
            for future in futures:
                if future.cancelled():
                    continue
                # re-raises the first chunk failure
                decoded.extend(future.result())
                progress.update(1)
        return decoded
