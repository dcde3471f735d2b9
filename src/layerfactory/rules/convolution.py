"""
Convolution Resolution Rules

The accelerated convolution kernels predate dilation support, so any
dilation factor above one is served by the native implementation
unless the capability probe says otherwise.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from layerfactory import reasons as ReasonCodes
from layerfactory.core.validation import read_int_tuple
from layerfactory.operators.convolution import (
    AcceleratedConvolutionOperator,
    ConvolutionOperator,
    DeconvolutionOperator,
)
from layerfactory.reasons import Reason, make_reason
from layerfactory.rules.base import ResolutionRule

if TYPE_CHECKING:
    from layerfactory.capabilities import CapabilityProbe
    from layerfactory.models.operator_spec import OperatorSpec
    from layerfactory.operators.base import BaseOperator
    from layerfactory.registry import OperatorRegistry


def _dilation_reasons(spec: "OperatorSpec", caps: "CapabilityProbe") -> list[Reason]:
    if caps.supports_dilated_convolution:
        return []
    dilation = read_int_tuple(spec, "dilation", 1, minimum=1)
    if any(d > 1 for d in dilation):
        return [make_reason(
            ReasonCodes.DILATION_UNSUPPORTED,
            f"dilation {dilation} > 1 is not supported by the accelerated engine",
        )]
    return []


class ConvolutionRule(ResolutionRule):
    """Convolution: accelerated when available and undilated."""

    type_name = "Convolution"
    native = ConvolutionOperator
    accelerated = AcceleratedConvolutionOperator

    def check_accelerated(self, spec, caps):
        return _dilation_reasons(spec, caps)


class DeconvolutionRule(ResolutionRule):
    """Transposed convolution.

    Resolves like Convolution, but the accelerated engine has no
    transposed kernel of its own: an accelerated choice is served by
    the native implementation and recorded as delegated.
    """

    type_name = "Deconvolution"
    native = DeconvolutionOperator
    accelerated = DeconvolutionOperator

    def check_accelerated(self, spec, caps):
        return _dilation_reasons(spec, caps)

    def select_accelerated(
        self,
        spec: "OperatorSpec",
        caps: "CapabilityProbe",
        reasons: list[Reason],
    ) -> type["BaseOperator"]:
        reasons.append(make_reason(
            ReasonCodes.ACCELERATED_DELEGATED,
            "accelerated deconvolution runs the native implementation",
        ))
        return DeconvolutionOperator


CONVOLUTION_RULE = ConvolutionRule()
DECONVOLUTION_RULE = DeconvolutionRule()


def register(registry: "OperatorRegistry") -> None:
    registry.register(ConvolutionRule.type_name, CONVOLUTION_RULE)
    registry.register(DeconvolutionRule.type_name, DECONVOLUTION_RULE)
