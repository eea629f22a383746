from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .rand import Xer2Random
from .source import GeneratorShapeError, Source, StateLengthError, StateValueError

try:
    __version__ = version("xer2")
except PackageNotFoundError:  # pragma: no cover
    # Allow running from source (e.g. `PYTHONPATH=src`) without installed package metadata.
    __version__ = "0.0.0+dev"

__all__ = [
    "GeneratorShapeError",
    "Source",
    "StateLengthError",
    "StateValueError",
    "Xer2Random",
    "cli",
    "config",
    "trace",
    "lcg",
    "paths",
    "rand",
    "source",
    "state",
]
