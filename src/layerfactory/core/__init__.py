"""
LayerFactory Core Module

Core utilities and parameter validation logic.
"""
from layerfactory.core.validation import (
    expand_spatial,
    read_enum,
    read_float,
    read_int_tuple,
    read_positive_int,
)

__all__ = [
    "expand_spatial",
    "read_enum",
    "read_float",
    "read_int_tuple",
    "read_positive_int",
]
