"""
Pooling Resolution Rule
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from layerfactory import reasons as ReasonCodes
from layerfactory.core.validation import read_enum
from layerfactory.enums import PoolMethod
from layerfactory.operators.pooling import AcceleratedPoolingOperator, PoolingOperator
from layerfactory.reasons import Reason, make_reason
from layerfactory.rules.base import ResolutionRule

if TYPE_CHECKING:
    from layerfactory.capabilities import CapabilityProbe
    from layerfactory.models.operator_spec import OperatorSpec
    from layerfactory.registry import OperatorRegistry


class PoolingRule(ResolutionRule):
    """Pooling: accelerated when available, with three exclusions.

    - More than one output: the accelerated kernel produces no index
      output (unless the probe reports multi-output support).
    - MAX: accelerated max pooling assumes its output is never modified
      in place, which breaks index tracking for in-place consumers.
    - STOCHASTIC: the accelerated engine has no stochastic kernel.
    """

    type_name = "Pooling"
    native = PoolingOperator
    accelerated = AcceleratedPoolingOperator

    def check_accelerated(
        self,
        spec: "OperatorSpec",
        caps: "CapabilityProbe",
    ) -> list[Reason]:
        reasons: list[Reason] = []

        if spec.num_outputs > 1 and not caps.supports_multi_output_pooling:
            reasons.append(make_reason(
                ReasonCodes.MULTIPLE_OUTPUTS_UNSUPPORTED,
                f"{spec.num_outputs} outputs requested, accelerated pooling has one",
            ))

        method = read_enum(spec, "method", PoolMethod, PoolMethod.MAX)
        if method is PoolMethod.MAX:
            reasons.append(make_reason(
                ReasonCodes.MAX_POOL_INDEX_TRACKING,
                "accelerated max pooling breaks index tracking under in-place layers",
            ))
        elif method is PoolMethod.STOCHASTIC:
            reasons.append(make_reason(
                ReasonCodes.POOL_METHOD_UNSUPPORTED,
                "accelerated engine has no stochastic pooling",
            ))

        return reasons


POOLING_RULE = PoolingRule()


def register(registry: "OperatorRegistry") -> None:
    registry.register(PoolingRule.type_name, POOLING_RULE)
