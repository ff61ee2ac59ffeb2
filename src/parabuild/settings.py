# settings.py
from __future__ import annotations
import os

from .errors import ConfigurationError


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ConfigurationError(f"{name} must be >= 1, got {value}")
    return value


# read on use, so a bad value is reported by the CLI instead of breaking import
def default_workers() -> int:
    return _int_env("PARABUILD_WORKERS", os.cpu_count() or 1)


def tsc_command() -> str:
    return os.environ.get("PARABUILD_TSC", "tsc")


def output_tail() -> int:
    return _int_env("PARABUILD_OUTPUT_TAIL", 4000)
