"""
LayerFactory Reason Codes

Structured reason codes explaining engine resolution decisions.
A reason never signals failure: it records why a rule picked an engine
other than the one requested (a downgrade) or why a default was biased.

This module provides:
- ReasonCategory: Categories of resolution reasons
- Reason: Frozen dataclass for structured reasons
- Individual reason code constants
- ALL_REASON_CODES: Mapping of all codes to their categories
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum, unique
from typing import Any


@unique
class ReasonCategory(str, Enum):
    """Categories of resolution reasons."""

    BACKEND = "backend"
    SHAPE = "shape"
    CORRECTNESS = "correctness"
    POLICY = "policy"


@dataclass(frozen=True, slots=True)
class Reason:
    """Structured resolution reason.

    Attributes:
        code: Unique string identifier (SCREAMING_SNAKE_CASE)
        message: Human-readable description of the reason
        category: ReasonCategory for grouping
    """

    code: str
    message: str
    category: ReasonCategory

    def __str__(self) -> str:
        """Return formatted string representation."""
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON compatibility.

        Returns:
            Dict with 'code', 'message', 'category' keys.
        """
        return {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Reason:
        """Deserialize from dictionary.

        Args:
            d: Dict with 'code', 'message', 'category' keys.

        Returns:
            New Reason instance.
        """
        return cls(
            code=d["code"],
            message=d["message"],
            category=ReasonCategory(d["category"]),
        )


# =============================================================================
# Backend Reason Codes
# =============================================================================

ACCELERATED_UNAVAILABLE = "ACCELERATED_UNAVAILABLE"
"""Accelerated engine is not compiled in or not usable at runtime."""

ACCELERATED_DELEGATED = "ACCELERATED_DELEGATED"
"""Accelerated engine is served by the native implementation."""


# =============================================================================
# Shape Reason Codes
# =============================================================================

DILATION_UNSUPPORTED = "DILATION_UNSUPPORTED"
"""Accelerated convolution does not support dilation > 1."""

MULTIPLE_OUTPUTS_UNSUPPORTED = "MULTIPLE_OUTPUTS_UNSUPPORTED"
"""Accelerated pooling produces a single output tensor only."""

LRN_WINDOW_UNSUPPORTED = "LRN_WINDOW_UNSUPPORTED"
"""Normalization window is outside the accelerated engine's limits."""


# =============================================================================
# Correctness Reason Codes
# =============================================================================

MAX_POOL_INDEX_TRACKING = "MAX_POOL_INDEX_TRACKING"
"""Accelerated max pooling breaks index tracking under in-place layers."""

POOL_METHOD_UNSUPPORTED = "POOL_METHOD_UNSUPPORTED"
"""Accelerated pooling has no kernel for the requested method."""


# =============================================================================
# Policy Reason Codes
# =============================================================================

NATIVE_PREFERRED = "NATIVE_PREFERRED"
"""Rule prefers the native engine by default."""


ALL_REASON_CODES: dict[str, ReasonCategory] = {
    ACCELERATED_UNAVAILABLE: ReasonCategory.BACKEND,
    ACCELERATED_DELEGATED: ReasonCategory.BACKEND,
    DILATION_UNSUPPORTED: ReasonCategory.SHAPE,
    MULTIPLE_OUTPUTS_UNSUPPORTED: ReasonCategory.SHAPE,
    LRN_WINDOW_UNSUPPORTED: ReasonCategory.SHAPE,
    MAX_POOL_INDEX_TRACKING: ReasonCategory.CORRECTNESS,
    POOL_METHOD_UNSUPPORTED: ReasonCategory.CORRECTNESS,
    NATIVE_PREFERRED: ReasonCategory.POLICY,
}


def make_reason(code: str, message: str) -> Reason:
    """Factory function to create a Reason with automatic category lookup.

    Args:
        code: Reason code string (must be in ALL_REASON_CODES).
        message: Human-readable message.

    Returns:
        New Reason instance with correct category.

    Raises:
        ValueError: If code is not found in ALL_REASON_CODES.
    """
    if code not in ALL_REASON_CODES:
        raise ValueError(f"Unknown reason code: {code}")
    return Reason(code=code, message=message, category=ALL_REASON_CODES[code])
