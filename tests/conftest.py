"""Shared fixtures: a fixed transition model and a lexicon-driven provider."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_paths() -> None:
    tests_dir = Path(__file__).resolve().parent
    for path in (tests_dir.parent, tests_dir):
        if str(path) not in sys.path:
            sys.path.insert(0, str(path))


_ensure_paths()

from lexicon_provider import CountingProvider  # noqa: E402
from tokensplit.splitter import Splitter  # noqa: E402
from tokensplit.transitions import TransitionModel, write_float32_bin  # noqa: E402

START = [-0.5, 0.5]
END = [0.2, -0.1]
PAIRWISE = [0.3, 0.1, 0.4, -1.0]


@pytest.fixture
def transition_model() -> TransitionModel:
    return TransitionModel.from_arrays(START, END, PAIRWISE)


@pytest.fixture
def model_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "models"
    directory.mkdir()
    write_float32_bin(directory / "start_transitions.bin", START)
    write_float32_bin(directory / "end_transitions.bin", END)
    write_float32_bin(directory / "transitions.bin", PAIRWISE)
    return directory


@pytest.fixture
def provider() -> CountingProvider:
    return CountingProvider()


@pytest.fixture
def splitter(provider, transition_model):
    with Splitter(provider, transition_model) as engine:
        yield engine
