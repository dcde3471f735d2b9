"""
LayerFactory Pooling Operators

Max, average, and stochastic pooling over 1-3 spatial axes, with
ceil-mode output sizing.
"""
from __future__ import annotations

from typing import Any, TYPE_CHECKING

import torch
import torch.nn.functional as F

from layerfactory.core.validation import (
    expand_spatial,
    read_enum,
    read_int_tuple,
)
from layerfactory.enums import Engine, PoolMethod
from layerfactory.exceptions import ConfigurationError
from layerfactory.operators.base import BaseOperator

if TYPE_CHECKING:
    from layerfactory.models.operator_spec import OperatorSpec


_MAX_POOL = {1: F.max_pool1d, 2: F.max_pool2d, 3: F.max_pool3d}
_AVG_POOL = {1: F.avg_pool1d, 2: F.avg_pool2d, 3: F.avg_pool3d}


class PoolingOperator(BaseOperator):
    """Native pooling.

    Supports every method and a second output holding the max-pooling
    argmax indices.

    Parameters:
        method: PoolMethod (default MAX).
        kernel_size: Per-axis window (required unless global_pooling).
        stride: Per-axis stride (default 1).
        pad: Per-axis padding (default 0).
        global_pooling: Pool over the whole spatial extent (default False).
    """

    variant = "native"

    def __init__(self, spec: "OperatorSpec") -> None:
        super().__init__(spec)
        self.method = read_enum(spec, "method", PoolMethod, PoolMethod.MAX)
        self.global_pooling = bool(spec.param("global_pooling", False))
        self.stride = read_int_tuple(spec, "stride", 1, minimum=1)
        self.pad = read_int_tuple(spec, "pad", 0, minimum=0)

        if self.global_pooling:
            self.kernel_size: tuple[int, ...] | None = None
        elif spec.param("kernel_size") is None:
            raise ConfigurationError(
                f"Layer '{spec.display_name}': pooling requires kernel_size "
                "unless global_pooling is set",
                config_key="kernel_size",
            )
        else:
            self.kernel_size = read_int_tuple(spec, "kernel_size", 1, minimum=1)

        if self.num_outputs > 2 or (self.num_outputs == 2 and self.method is not PoolMethod.MAX):
            raise ConfigurationError(
                f"Layer '{spec.display_name}': only max pooling has a second "
                f"(index) output, got {self.num_outputs} outputs for {self.method.name}",
                config_key="num_outputs",
                expected="1, or 2 for max pooling",
                got=self.num_outputs,
            )

    def forward(self, x: torch.Tensor) -> Any:
        """Pool x.

        Args:
            x: Input (N, C, *spatial).

        Returns:
            Pooled tensor, or (pooled, indices) when two outputs are requested.
        """
        ndim = x.dim() - 2
        if ndim not in _MAX_POOL:
            raise ConfigurationError(
                f"Pooling expects 1-3 spatial axes, got shape {tuple(x.shape)}",
                got=tuple(x.shape),
            )

        if self.global_pooling:
            kernel = tuple(x.shape[2:])
            stride = kernel
            pad = (0,) * ndim
        else:
            kernel = expand_spatial(self.kernel_size, ndim, "kernel_size")
            stride = expand_spatial(self.stride, ndim, "stride")
            pad = expand_spatial(self.pad, ndim, "pad")

        if self.method is PoolMethod.MAX:
            return _MAX_POOL[ndim](
                x,
                kernel,
                stride,
                pad,
                ceil_mode=True,
                return_indices=self.num_outputs > 1,
            )

        if self.method is PoolMethod.AVE:
            return _AVG_POOL[ndim](x, kernel, stride, pad, ceil_mode=True)

        # Stochastic pooling, test phase: activation-weighted average.
        squares = _AVG_POOL[ndim](x * x, kernel, stride, pad, ceil_mode=True)
        sums = _AVG_POOL[ndim](x, kernel, stride, pad, ceil_mode=True)
        return torch.where(sums != 0, squares / sums, torch.zeros_like(sums))


class AcceleratedPoolingOperator(PoolingOperator):
    """cuDNN pooling (single output, max or average)."""

    engine = Engine.ACCELERATED
    variant = "cudnn"
