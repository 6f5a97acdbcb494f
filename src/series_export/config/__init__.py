"""
Configuration layer

Responsibilities:
- load config/export_runtime.yaml (runtime options, env overridable)
- load the packaged layout spec (resources/layout.yaml)
- typed access to both
"""

from .runtime_config import RuntimeConfig, get_config, reload_config
from .spec_loader import LayoutSpec, SpecLoader, load_layout

__all__ = [
    "SpecLoader",
    "LayoutSpec",
    "load_layout",
    "RuntimeConfig",
    "get_config",
    "reload_config",
]
