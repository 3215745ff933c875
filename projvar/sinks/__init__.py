"""Output sinks for resolved values."""

from __future__ import annotations

from .base import ResolvedValue, Sink, SinkError
from .bash_file import BashFileSink
from .env import EnvSink
from .json_file import JsonFileSink

__all__ = [
    "BashFileSink",
    "EnvSink",
    "JsonFileSink",
    "ResolvedValue",
    "Sink",
    "SinkError",
]
