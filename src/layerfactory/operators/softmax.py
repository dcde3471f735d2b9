"""
LayerFactory Softmax Operators
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import torch
import torch.nn.functional as F

from layerfactory.enums import Engine
from layerfactory.exceptions import ConfigurationError
from layerfactory.operators.base import BaseOperator

if TYPE_CHECKING:
    from layerfactory.models.operator_spec import OperatorSpec


class SoftmaxOperator(BaseOperator):
    """Native softmax.

    Parameters:
        axis: Axis to normalize over (default 1, the channel axis).
    """

    variant = "native"

    def __init__(self, spec: "OperatorSpec") -> None:
        super().__init__(spec)
        axis = spec.param("axis", 1)
        if isinstance(axis, bool) or not isinstance(axis, int):
            raise ConfigurationError(
                f"Layer '{spec.display_name}': softmax axis must be an integer",
                config_key="axis",
                expected="integer",
                got=axis,
            )
        self.axis = axis

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return F.softmax(x, dim=self.axis)


class AcceleratedSoftmaxOperator(SoftmaxOperator):
    """cuDNN softmax."""

    engine = Engine.ACCELERATED
    variant = "cudnn"
