"""Configuration schemas - re-exports for convenience."""

from cell_vsm.loader import ConfigLoader, DefaultsConfig
from cell_vsm.models import StationDefaults, VsmConfig, VsmDocument

__all__ = [
    "ConfigLoader",
    "DefaultsConfig",
    "StationDefaults",
    "VsmConfig",
    "VsmDocument",
]
