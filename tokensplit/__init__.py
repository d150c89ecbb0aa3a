"""Word segmentation for concatenated alphanumeric tokens."""
from .config import Config, load_config
from .emissions import CallableEmissionProvider, EmissionProvider, TorchScriptEmissionProvider
from .errors import InferenceError, ResourceLoadError, SplitterError
from .splitter import Splitter
from .transitions import TransitionModel, load_transitions

__all__ = [
    "Config",
    "load_config",
    "CallableEmissionProvider",
    "EmissionProvider",
    "TorchScriptEmissionProvider",
    "InferenceError",
    "ResourceLoadError",
    "SplitterError",
    "Splitter",
    "TransitionModel",
    "load_transitions",
]
