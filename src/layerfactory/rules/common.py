"""
Single-Engine Resolution Rules

Operators with one implementation ignore the engine preference.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from layerfactory.operators.common import DropoutOperator, InputOperator, MemoryDataOperator
from layerfactory.operators.data import (
    ImageDepthLabelDataOperator,
    ImageLabelDataOperator,
    MeshImageLabelDataOperator,
)
from layerfactory.operators.loss import (
    AccuracyOperator,
    CRFLossOperator,
    SoftmaxWithLossOperator,
)
from layerfactory.operators.mesh import Image2MeshOperator
from layerfactory.rules.base import SingleEngineRule

if TYPE_CHECKING:
    from layerfactory.registry import OperatorRegistry


SINGLE_ENGINE_RULES: tuple[SingleEngineRule, ...] = (
    SingleEngineRule("Input", InputOperator),
    SingleEngineRule("MemoryData", MemoryDataOperator),
    SingleEngineRule("Dropout", DropoutOperator),
    SingleEngineRule("SoftmaxWithLoss", SoftmaxWithLossOperator),
    SingleEngineRule("Accuracy", AccuracyOperator),
    SingleEngineRule("ImageLabelData", ImageLabelDataOperator),
    SingleEngineRule("ImageDepthLabelData", ImageDepthLabelDataOperator),
    SingleEngineRule("MeshImageLabelData", MeshImageLabelDataOperator),
    SingleEngineRule("Image2Mesh", Image2MeshOperator),
    SingleEngineRule("CRFLoss", CRFLossOperator),
)

# Older network descriptions name these types with a "Layer" suffix
LEGACY_SUFFIX = "Layer"
LEGACY_ALIASES: tuple[str, ...] = (
    "Input",
    "Dropout",
    "SoftmaxWithLoss",
    "Accuracy",
    "ImageLabelData",
    "ImageDepthLabelData",
    "MeshImageLabelData",
    "Image2Mesh",
    "CRFLoss",
)


def legacy_rules() -> tuple[SingleEngineRule, ...]:
    """Rules registering each aliased type under its suffixed name."""
    by_name = {rule.type_name: rule for rule in SINGLE_ENGINE_RULES}
    return tuple(
        SingleEngineRule(name + LEGACY_SUFFIX, by_name[name].native)
        for name in LEGACY_ALIASES
    )


def register(registry: "OperatorRegistry") -> None:
    registry.register_many(
        [(rule.type_name, rule) for rule in SINGLE_ENGINE_RULES + legacy_rules()]
    )
