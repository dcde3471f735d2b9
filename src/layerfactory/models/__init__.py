"""
LayerFactory Data Models

Dataclasses describing operators to be constructed.
"""
from layerfactory.models.operator_spec import OperatorSpec

__all__ = [
    "OperatorSpec",
]
