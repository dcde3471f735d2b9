"""
LayerFactory Local Response Normalization Operators

Across-channel LRN and within-channel (local contrast) normalization.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import torch
import torch.nn.functional as F

from layerfactory.core.validation import read_enum, read_float, read_positive_int
from layerfactory.enums import Engine, NormRegion
from layerfactory.exceptions import ConfigurationError
from layerfactory.operators.base import BaseOperator

if TYPE_CHECKING:
    from layerfactory.models.operator_spec import OperatorSpec


class LRNOperator(BaseOperator):
    """Native local response normalization.

    Across channels:  y = x / (k + alpha / n * sum_{channel window} x^2) ^ beta
    Within channel:   y = x / (k + alpha * mean_{spatial window} x^2) ^ beta

    Parameters:
        local_size: Window size n, odd (default 5).
        alpha: Scale (default 1.0).
        beta: Exponent (default 0.75).
        k: Offset (default 1.0).
        norm_region: NormRegion (default ACROSS_CHANNELS).
    """

    variant = "native"

    def __init__(self, spec: "OperatorSpec") -> None:
        super().__init__(spec)
        self.local_size = read_positive_int(spec, "local_size", 5)
        if self.local_size % 2 == 0:
            raise ConfigurationError(
                f"Layer '{spec.display_name}': LRN only supports odd local_size",
                config_key="local_size",
                expected="odd positive integer",
                got=self.local_size,
            )
        self.alpha = read_float(spec, "alpha", 1.0)
        self.beta = read_float(spec, "beta", 0.75)
        self.k = read_float(spec, "k", 1.0)
        self.norm_region = read_enum(
            spec, "norm_region", NormRegion, NormRegion.ACROSS_CHANNELS,
        )

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """Normalize x of shape (N, C, H, W)."""
        if self.norm_region is NormRegion.ACROSS_CHANNELS:
            return F.local_response_norm(
                x, self.local_size, alpha=self.alpha, beta=self.beta, k=self.k,
            )

        pad = (self.local_size - 1) // 2
        mean_sq = F.avg_pool2d(
            x * x,
            self.local_size,
            stride=1,
            padding=pad,
            count_include_pad=True,
        )
        return x * (self.k + self.alpha * mean_sq).pow(-self.beta)


class AcceleratedLRNOperator(LRNOperator):
    """cuDNN across-channel LRN."""

    engine = Engine.ACCELERATED
    variant = "cudnn_lrn"


class AcceleratedLCNOperator(LRNOperator):
    """cuDNN within-channel (local contrast) normalization."""

    engine = Engine.ACCELERATED
    variant = "cudnn_lcn"
