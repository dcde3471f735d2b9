"""
LayerFactory Core Enumerations

Type-safe enums for engine preferences and operator parameters.
All enums inherit from (str, Enum) for JSON/YAML serialization compatibility.

This module provides:
- Engine: Backend preference for an operator (default, native, accelerated)
- PoolMethod: Pooling reductions
- NormRegion: Local response normalization regions
"""
from __future__ import annotations

from enum import Enum, unique
from typing import Any


@unique
class Engine(str, Enum):
    """Backend preference for an operator.

    DEFAULT is a request, never a resolved choice: every resolution
    rule turns it into NATIVE or ACCELERATED.

    Members:
        DEFAULT: Let the resolution rule decide
        NATIVE: Reference implementation, supports every parameter
        ACCELERATED: cuDNN-backed implementation
    """

    DEFAULT = "default"
    NATIVE = "native"
    ACCELERATED = "accelerated"

    @classmethod
    def parse(cls, value: Any) -> "Engine | str":
        """Parse an engine preference from configuration.

        Accepts members, member values, case-insensitive member names,
        and the legacy aliases "caffe" and "cudnn". Anything else is
        returned unchanged as a string so that the consuming rule can
        reject it with the operator's name.

        Args:
            value: Raw preference value (None means DEFAULT).

        Returns:
            Engine member, or the raw string if unrecognised.
        """
        if value is None:
            return cls.DEFAULT
        if isinstance(value, cls):
            return value

        raw = str(value)
        key = raw.strip().lower()
        if key in _ENGINE_ALIASES:
            return _ENGINE_ALIASES[key]
        return raw


_ENGINE_ALIASES: dict[str, Engine] = {
    "default": Engine.DEFAULT,
    "native": Engine.NATIVE,
    "accelerated": Engine.ACCELERATED,
    "caffe": Engine.NATIVE,
    "cudnn": Engine.ACCELERATED,
}


@unique
class PoolMethod(str, Enum):
    """Pooling reduction methods.

    Members:
        MAX: Max pooling (tracks argmax indices)
        AVE: Average pooling
        STOCHASTIC: Stochastic pooling (native engine only)
    """

    MAX = "max"
    AVE = "ave"
    STOCHASTIC = "stochastic"


@unique
class NormRegion(str, Enum):
    """Local response normalization regions.

    Members:
        ACROSS_CHANNELS: Normalize over neighbouring channels
        WITHIN_CHANNEL: Normalize over a spatial window in each channel
    """

    ACROSS_CHANNELS = "across_channels"
    WITHIN_CHANNEL = "within_channel"
