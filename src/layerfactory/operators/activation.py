"""
LayerFactory Elementwise Activation Operators

ReLU (with optional leak), sigmoid, and hyperbolic tangent.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import torch
import torch.nn.functional as F

from layerfactory.core.validation import read_float
from layerfactory.enums import Engine
from layerfactory.operators.base import BaseOperator

if TYPE_CHECKING:
    from layerfactory.models.operator_spec import OperatorSpec


class ReLUOperator(BaseOperator):
    """Native rectified linear unit.

    Parameters:
        negative_slope: Leak for negative inputs (default 0.0).
    """

    variant = "native"

    def __init__(self, spec: "OperatorSpec") -> None:
        super().__init__(spec)
        self.negative_slope = read_float(spec, "negative_slope", 0.0)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        if self.negative_slope == 0.0:
            return F.relu(x)
        return F.leaky_relu(x, self.negative_slope)


class AcceleratedReLUOperator(ReLUOperator):
    """cuDNN ReLU."""

    engine = Engine.ACCELERATED
    variant = "cudnn"


class SigmoidOperator(BaseOperator):
    """Native logistic sigmoid."""

    variant = "native"

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return torch.sigmoid(x)


class AcceleratedSigmoidOperator(SigmoidOperator):
    """cuDNN sigmoid."""

    engine = Engine.ACCELERATED
    variant = "cudnn"


class TanHOperator(BaseOperator):
    """Native hyperbolic tangent."""

    variant = "native"

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return torch.tanh(x)


class AcceleratedTanHOperator(TanHOperator):
    """cuDNN tanh."""

    engine = Engine.ACCELERATED
    variant = "cudnn"
