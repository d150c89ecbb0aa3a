# tokensplit/config.py
"""Manages the loading and validation of splitter configuration.

This module defines the `Config` dataclass, a single typed container for the
engine's settings, and the `load_config` function that reads them from a
`config.yaml` file. Relative model paths are resolved against the directory
holding the YAML file, so a configuration can be moved together with its
model directory.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import yaml

from .types import DEFAULT_SUB_BATCH, MAX_LEN

DEFAULT_PATHS = {
    "model_dir": "models",
    "start_transitions": "start_transitions.bin",
    "end_transitions": "end_transitions.bin",
    "transitions": "transitions.bin",
    "emission_model": "emissions.pt",
}


@dataclass
class Config:
    """
    A typed configuration object that holds all settings for the splitter.

    Attributes:
        max_len: Inputs are truncated to this many characters after lowercasing.
        max_sub_batch: The largest number of equal-length inputs sent to the
                       emission provider in one call.
        workers: Number of chunks decoded concurrently by the batch scheduler.
        show_progress: Shows a progress bar while splitting large batches.
        log_level: Name of the logging level used by the command-line tools.
        provider: Optional ``"module:factory"`` path of an emission provider
                  factory. When unset, the TorchScript model in ``paths`` is used.
        paths: File locations for the model directory, the three transition
               tables and the emission model.
        base_dir: Directory that relative entries in ``paths`` are resolved against.
    """
    max_len: int = MAX_LEN
    max_sub_batch: int = DEFAULT_SUB_BATCH
    workers: int = 1
    show_progress: bool = False
    log_level: str = "WARNING"
    provider: Optional[str] = None
    paths: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PATHS))
    base_dir: str = "."

    @property
    def model_dir(self) -> Path:
        return Path(self.base_dir) / self.paths.get("model_dir", DEFAULT_PATHS["model_dir"])

    def resolve(self, key: str) -> Path:
        """Returns the absolute location of a model file listed in ``paths``."""
        name = self.paths.get(key, DEFAULT_PATHS.get(key))
        if name is None:
            raise KeyError(f"Unknown path key: {key}")
        return self.model_dir / name


def load_config(path: str = "config.yaml") -> Config:
    """
    Loads and validates a YAML configuration file into a `Config` object.

    Keys that are absent fall back to the dataclass defaults. Entries under
    ``paths`` are merged over the default file names, so a configuration only
    needs to list the files it renames.

    Args:
        path: The path to the `config.yaml` file.

    Returns:
        A fully populated and validated `Config` object.

    Raises:
        FileNotFoundError: If the specified file cannot be found.
        ValueError: If the YAML cannot be parsed or a value is out of range.
        TypeError: If the root of the YAML file is not a dictionary.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            y = yaml.safe_load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found at: {path}")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML file at {path}: {e}")

    if y is None:
        y = {}
    if not isinstance(y, dict):
        raise TypeError(f"Configuration file {path} must be a dictionary.")

    paths_yaml = y.get("paths", {}) or {}
    if not isinstance(paths_yaml, dict):
        raise TypeError(f"'paths' in {path} must be a dictionary.")

    cfg = Config(
        max_len=int(y.get("max_len", MAX_LEN)),
        max_sub_batch=int(y.get("max_sub_batch", DEFAULT_SUB_BATCH)),
        workers=int(y.get("workers", 1)),
        show_progress=bool(y.get("show_progress", False)),
        log_level=str(y.get("log_level", "WARNING")).upper(),
        provider=y.get("provider") or None,
        paths={**DEFAULT_PATHS, **{k: str(v) for k, v in paths_yaml.items()}},
        base_dir=str(Path(path).resolve().parent),
    )
    validate_config(cfg)
    return cfg


def validate_config(cfg: Config) -> None:
    """Raises ``ValueError`` for settings the engine cannot run with."""
    if cfg.max_len < 1:
        raise ValueError(f"max_len must be at least 1, got {cfg.max_len}.")
    if cfg.workers < 1:
        raise ValueError(f"workers must be at least 1, got {cfg.workers}.")
