# dagrad/config.py
"""
Runtime configuration for dagrad.

Values come from the environment the first time they are read:

    DAGRAD_DTYPE       numpy dtype name for node values (default: float64)
    DAGRAD_LOG_LEVEL   level name for the "dagrad" logger (default: WARNING)
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass, replace
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class Config:
    """Shared configuration for graph construction and logging."""
    dtype: np.dtype = np.dtype(np.float64)
    log_level: int = logging.WARNING

    def __post_init__(self):
        try:
            dtype = np.dtype(self.dtype)
        except TypeError:
            raise ValueError(f"{self.dtype!r} is not a numpy dtype")
        if dtype.kind != "f":
            raise ValueError(f"dtype must be a floating dtype, got {dtype.name!r}")
        object.__setattr__(self, "dtype", dtype)

    @staticmethod
    def from_env() -> 'Config':
        dtype_name = os.getenv("DAGRAD_DTYPE", "float64")
        level_name = os.getenv("DAGRAD_LOG_LEVEL", "WARNING").upper()
        level = getattr(logging, level_name, logging.WARNING)
        try:
            return Config(dtype=dtype_name, log_level=level)
        except ValueError as e:
            raise ValueError(f"DAGRAD_DTYPE={dtype_name!r}: {e}") from e


_config: Optional[Config] = None


def get_config() -> Config:
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def set_config(config: Optional[Config] = None, **overrides) -> Config:
    """
    Replace the active configuration.

    Either pass a full Config, or keyword overrides applied to the current one:
        set_config(dtype=np.float32)
    Returns the new active Config. Nodes built earlier keep their dtype.
    """
    global _config
    base = config if config is not None else get_config()
    _config = replace(base, **overrides)

    from .logger import get_logger
    get_logger().setLevel(_config.log_level)
    return _config


def reset_config() -> Config:
    """Drop any overrides and re-read the environment."""
    global _config
    _config = None
    return set_config()
