from pathlib import Path

import pytest

from tokensplit.config import DEFAULT_PATHS, Config, load_config


def test_load_config_reads_values_and_merges_paths(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
max_len: 32
max_sub_batch: 64
workers: 2
log_level: info
provider: lexicon_provider:build
paths:
  model_dir: weights
  transitions: pairwise.bin
""".strip(),
        encoding="utf-8",
    )

    cfg = load_config(str(config_path))

    assert cfg.max_len == 32
    assert cfg.max_sub_batch == 64
    assert cfg.workers == 2
    assert cfg.log_level == "INFO"
    assert cfg.provider == "lexicon_provider:build"
    assert cfg.paths["transitions"] == "pairwise.bin"
    assert cfg.paths["start_transitions"] == DEFAULT_PATHS["start_transitions"]
    assert cfg.model_dir == tmp_path.resolve() / "weights"
    assert cfg.resolve("transitions") == tmp_path.resolve() / "weights" / "pairwise.bin"


def test_empty_config_uses_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("", encoding="utf-8")

    cfg = load_config(str(config_path))

    assert cfg.max_len == 64
    assert cfg.max_sub_batch == 256
    assert cfg.provider is None
    assert cfg.paths == DEFAULT_PATHS


def test_load_config_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))


def test_load_config_rejects_non_dict_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("- not a mapping", encoding="utf-8")

    with pytest.raises(TypeError):
        load_config(str(config_path))


def test_load_config_rejects_bad_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("max_len: [1, 2", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(str(config_path))


@pytest.mark.parametrize("body", ["max_len: 0", "workers: 0"])
def test_load_config_rejects_out_of_range_values(tmp_path: Path, body: str) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(body, encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(str(config_path))


def test_resolve_unknown_key() -> None:
    with pytest.raises(KeyError):
        Config().resolve("nonexistent")
