"""Editing buffer for shadowlink profiles."""

from .buffer import EditingBuffer
from .buffer import EditingConflictError
from .buffer import Key
from .buffer import deserialize_profile
from .buffer import parse_port
from .buffer import serialize_profile

__all__ = [
    "EditingBuffer",
    "EditingConflictError",
    "Key",
    "deserialize_profile",
    "parse_port",
    "serialize_profile",
]
