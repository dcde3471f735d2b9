"""
LayerFactory Convolution Operators

Convolution and transposed convolution over 1-3 spatial axes.
Weights are owned by the caller and passed to forward.
"""
from __future__ import annotations

from typing import Callable, TYPE_CHECKING

import torch
import torch.nn.functional as F

from layerfactory.core.validation import (
    expand_spatial,
    read_int_tuple,
    read_positive_int,
)
from layerfactory.enums import Engine
from layerfactory.exceptions import ConfigurationError
from layerfactory.operators.base import BaseOperator

if TYPE_CHECKING:
    from layerfactory.models.operator_spec import OperatorSpec


_CONV: dict[int, Callable[..., torch.Tensor]] = {
    1: F.conv1d,
    2: F.conv2d,
    3: F.conv3d,
}

_CONV_TRANSPOSE: dict[int, Callable[..., torch.Tensor]] = {
    1: F.conv_transpose1d,
    2: F.conv_transpose2d,
    3: F.conv_transpose3d,
}


def _spatial_ndim(x: torch.Tensor, type_name: str) -> int:
    ndim = x.dim() - 2
    if ndim not in _CONV:
        raise ConfigurationError(
            f"{type_name} expects (N, C, *spatial) input with 1-3 spatial axes, "
            f"got shape {tuple(x.shape)}",
            expected="3D-5D tensor",
            got=tuple(x.shape),
        )
    return ndim


class ConvolutionOperator(BaseOperator):
    """Native convolution.

    Parameters:
        stride: Per-axis stride (default 1).
        pad: Per-axis zero padding (default 0).
        dilation: Per-axis dilation (default 1).
        group: Number of channel groups (default 1).
    """

    variant = "native"

    def __init__(self, spec: "OperatorSpec") -> None:
        super().__init__(spec)
        self.stride = read_int_tuple(spec, "stride", 1, minimum=1)
        self.pad = read_int_tuple(spec, "pad", 0, minimum=0)
        self.dilation = read_int_tuple(spec, "dilation", 1, minimum=1)
        self.group = read_positive_int(spec, "group", 1)

    def forward(
        self,
        x: torch.Tensor,
        weight: torch.Tensor,
        bias: torch.Tensor | None = None,
    ) -> torch.Tensor:
        """Convolve x with weight.

        Args:
            x: Input (N, C_in, *spatial).
            weight: Filters (C_out, C_in / group, *kernel).
            bias: Optional bias (C_out,).

        Returns:
            Output (N, C_out, *spatial_out).
        """
        ndim = _spatial_ndim(x, self.type_name)
        return _CONV[ndim](
            x,
            weight,
            bias,
            stride=expand_spatial(self.stride, ndim, "stride"),
            padding=expand_spatial(self.pad, ndim, "pad"),
            dilation=expand_spatial(self.dilation, ndim, "dilation"),
            groups=self.group,
        )


class AcceleratedConvolutionOperator(ConvolutionOperator):
    """cuDNN convolution."""

    engine = Engine.ACCELERATED
    variant = "cudnn"


class DeconvolutionOperator(ConvolutionOperator):
    """Native transposed convolution.

    Also serves accelerated requests: there is no separate cuDNN
    deconvolution implementation.
    """

    variant = "native"

    def forward(
        self,
        x: torch.Tensor,
        weight: torch.Tensor,
        bias: torch.Tensor | None = None,
    ) -> torch.Tensor:
        """Transposed convolution of x with weight.

        Args:
            x: Input (N, C_in, *spatial).
            weight: Filters (C_in, C_out / group, *kernel).
            bias: Optional bias (C_out,).

        Returns:
            Output (N, C_out, *spatial_out).
        """
        ndim = _spatial_ndim(x, self.type_name)
        return _CONV_TRANSPOSE[ndim](
            x,
            weight,
            bias,
            stride=expand_spatial(self.stride, ndim, "stride"),
            padding=expand_spatial(self.pad, ndim, "pad"),
            groups=self.group,
            dilation=expand_spatial(self.dilation, ndim, "dilation"),
        )
