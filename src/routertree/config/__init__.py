"""Configuration utilities for routertree."""

from .policies import Policies, TreePolicy, load_policies
from .settings import PathsConfig, Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "PathsConfig",
    "Policies",
    "TreePolicy",
    "load_policies",
]
