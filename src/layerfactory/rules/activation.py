"""
Activation and Softmax Resolution Rules

These operators resolve DEFAULT to the native engine even when the
accelerated engine is available; ACCELERATED must be requested
explicitly. Once requested, the accelerated variant accepts every
parameter combination.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from layerfactory.operators.activation import (
    AcceleratedReLUOperator,
    AcceleratedSigmoidOperator,
    AcceleratedTanHOperator,
    ReLUOperator,
    SigmoidOperator,
    TanHOperator,
)
from layerfactory.operators.softmax import AcceleratedSoftmaxOperator, SoftmaxOperator
from layerfactory.rules.base import ResolutionRule

if TYPE_CHECKING:
    from layerfactory.registry import OperatorRegistry


class ReLURule(ResolutionRule):
    type_name = "ReLU"
    native = ReLUOperator
    accelerated = AcceleratedReLUOperator
    prefer_native_by_default = True


class SigmoidRule(ResolutionRule):
    type_name = "Sigmoid"
    native = SigmoidOperator
    accelerated = AcceleratedSigmoidOperator
    prefer_native_by_default = True


class TanHRule(ResolutionRule):
    type_name = "TanH"
    native = TanHOperator
    accelerated = AcceleratedTanHOperator
    prefer_native_by_default = True


class SoftmaxRule(ResolutionRule):
    type_name = "Softmax"
    native = SoftmaxOperator
    accelerated = AcceleratedSoftmaxOperator
    prefer_native_by_default = True


ACTIVATION_RULES: tuple[ResolutionRule, ...] = (
    ReLURule(),
    SigmoidRule(),
    TanHRule(),
    SoftmaxRule(),
)


def register(registry: "OperatorRegistry") -> None:
    for rule in ACTIVATION_RULES:
        registry.register(rule.type_name, rule)
