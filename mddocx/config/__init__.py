from .loader import load_config
from .models import (
    CodeStyleConfig,
    DiagramConfig,
    ImageConfig,
    MdDocxConfig,
    MergeConfig,
)

__all__ = [
    "CodeStyleConfig",
    "DiagramConfig",
    "ImageConfig",
    "MdDocxConfig",
    "MergeConfig",
    "load_config",
]
