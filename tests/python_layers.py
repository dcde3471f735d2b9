"""Operators defined in Python for the Python layer tests."""
import torch

from layerfactory.operators.base import BaseOperator


class ScaleOperator(BaseOperator):
    """Multiplies its input by the float in param_str."""

    def __init__(self, spec):
        super().__init__(spec)
        self.scale = float(spec.param("param_str", "1.0"))

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return x * self.scale


def broken_layer(spec):
    raise ValueError(f"cannot parse param_str {spec.param('param_str')!r}")


def not_an_operator(spec):
    return object()


NOT_CALLABLE = 42


def register_scale(registry):
    """Plugin hook registering ScaleOperator as "Scale"."""
    from layerfactory.registry import register_operator_class

    register_operator_class("Scale", ScaleOperator, registry=registry)


def register_broken(registry):
    raise RuntimeError("plugin misconfigured")
