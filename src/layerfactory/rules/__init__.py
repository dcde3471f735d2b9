"""
LayerFactory Resolution Rules

One rule per operator type. Each rule module exposes a ``register``
hook; ``install_builtin_rules`` calls them all on a registry.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from layerfactory.rules import activation, common, convolution, foreign, normalization, pooling
from layerfactory.rules.activation import ReLURule, SigmoidRule, SoftmaxRule, TanHRule
from layerfactory.rules.base import Resolution, ResolutionRule, SingleEngineRule
from layerfactory.rules.convolution import ConvolutionRule, DeconvolutionRule
from layerfactory.rules.foreign import PythonRule
from layerfactory.rules.normalization import LRNRule
from layerfactory.rules.pooling import PoolingRule

if TYPE_CHECKING:
    from layerfactory.registry import OperatorRegistry

_BUILTIN_MODULES = (
    convolution,
    pooling,
    normalization,
    activation,
    common,
    foreign,
)


def install_builtin_rules(registry: "OperatorRegistry") -> None:
    """Register every built-in rule on registry.

    Safe to call more than once on the same registry: each hook
    registers the same rule objects.
    """
    for module in _BUILTIN_MODULES:
        module.register(registry)


__all__ = [
    "Resolution",
    "ResolutionRule",
    "SingleEngineRule",
    "ConvolutionRule",
    "DeconvolutionRule",
    "PoolingRule",
    "LRNRule",
    "ReLURule",
    "SigmoidRule",
    "TanHRule",
    "SoftmaxRule",
    "PythonRule",
    "install_builtin_rules",
]
