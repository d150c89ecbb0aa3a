import numpy as np
import pytest

from lexicon_provider import CountingProvider, PlainProvider, lexicon_emissions
from tokensplit.batching import BatchScheduler, plan_chunks
from tokensplit.emissions import CallableEmissionProvider
from tokensplit.errors import InferenceError

INPUTS = [
    "chatgptlogin",
    "HelloWorld",
    "",
    "openaikey",
    "abcdefghij",
    "x" * 80,
    "naïve-café",
    "microsoftoffice",
    "helloworld",
    "q",
]


def test_plan_groups_by_length_and_chunks():
    results, chunks = plan_chunks(["aaa", "bb", "", "ccc", "ddd"], max_sub_batch=2)

    assert results == [None, None, [], None, None]
    assert [[item.index for item in chunk] for chunk in chunks] == [[1], [0, 3], [4]]
    assert all(len({len(item.text) for item in chunk}) == 1 for chunk in chunks)


def test_plan_normalizes_before_grouping():
    _, chunks = plan_chunks(["ABC", "y" * 70], max_len=64)
    texts = [item.text for chunk in chunks for item in chunk]
    assert texts == ["abc", "y" * 64]


def test_non_positive_chunk_size_falls_back_to_default():
    _, chunks = plan_chunks(["aa"] * 300, max_sub_batch=0)
    assert [len(c) for c in chunks] == [256, 44]


def test_one_provider_call_per_chunk(transition_model):
    provider = CountingProvider()
    scheduler = BatchScheduler(provider, transition_model)

    scheduler.decode_all(["chatgptlogin", "helloworld", "openaikey", "abcdefghij"])

    assert provider.calls == [(1, 9), (2, 10), (1, 12)]


def test_empty_inputs_skip_the_provider(transition_model):
    provider = CountingProvider()
    scheduler = BatchScheduler(provider, transition_model)

    assert scheduler.decode_all(["", ""]) == [[], []]
    assert provider.calls == []


@pytest.mark.parametrize("chunk_size", [1, 2, 3, 256])
def test_batch_matches_single_item_decoding(transition_model, chunk_size):
    scheduler = BatchScheduler(CountingProvider(), transition_model)

    batch = scheduler.decode_all(INPUTS, chunk_size)
    singles = [scheduler.decode_all([text], 1)[0] for text in INPUTS]

    assert batch == singles


def test_output_order_follows_input(transition_model):
    scheduler = BatchScheduler(CountingProvider(), transition_model)
    results = scheduler.decode_all(["helloworld", "chatgptlogin", "", "helloworld"])
    assert results == [["hello", "world"], ["chatgpt", "login"], [], ["hello", "world"]]


def test_reconstruction_invariant(transition_model):
    scheduler = BatchScheduler(CountingProvider(), transition_model)
    for text, words in zip(INPUTS, scheduler.decode_all(INPUTS)):
        assert "".join(words) == text.lower()[:64]
        assert all(words)


def test_processing_order_does_not_change_results(transition_model):
    scheduler = BatchScheduler(CountingProvider(), transition_model)
    forward = scheduler.decode_all(INPUTS, 2)
    backward = scheduler.decode_all(list(reversed(INPUTS)), 2)
    assert forward == list(reversed(backward))


@pytest.mark.parametrize("thread_safe", [True, False])
def test_parallel_workers_match_sequential(transition_model, thread_safe):
    inputs = INPUTS * 20
    sequential = BatchScheduler(CountingProvider(), transition_model).decode_all(inputs, 3)
    parallel = BatchScheduler(
        CountingProvider(thread_safe=thread_safe), transition_model, workers=4
    ).decode_all(inputs, 3)
    assert parallel == sequential


def _failing_on_length(length):
    def score(ids):
        if ids.shape[1] == length:
            raise RuntimeError("model crashed")
        return lexicon_emissions(ids)
    return score


@pytest.mark.parametrize("workers", [1, 3])
def test_chunk_failure_fails_whole_call(transition_model, workers):
    scheduler = BatchScheduler(
        CallableEmissionProvider(_failing_on_length(10)), transition_model, workers=workers
    )
    with pytest.raises(InferenceError):
        scheduler.decode_all(["chatgptlogin", "helloworld", "openaikey"], 1)


def test_bad_emission_shape_raises_inference_error(transition_model):
    provider = CallableEmissionProvider(lambda ids: np.zeros((ids.shape[0], ids.shape[1], 3)))
    scheduler = BatchScheduler(provider, transition_model)
    with pytest.raises(InferenceError):
        scheduler.decode_all(["abc"])


@pytest.mark.parametrize("workers", [1, 3])
def test_plain_provider_failure_is_wrapped(transition_model, workers):
    scheduler = BatchScheduler(PlainProvider(MemoryError("arena")), transition_model, workers=workers)
    with pytest.raises(InferenceError):
        scheduler.decode_all(["chatgptlogin", "helloworld", "openaikey"], 1)
