"""
Local Response Normalization Resolution Rule
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from layerfactory import reasons as ReasonCodes
from layerfactory.core.validation import read_enum, read_positive_int
from layerfactory.enums import NormRegion
from layerfactory.operators.base import BaseOperator
from layerfactory.operators.normalization import (
    AcceleratedLCNOperator,
    AcceleratedLRNOperator,
    LRNOperator,
)
from layerfactory.reasons import Reason, make_reason
from layerfactory.rules.base import ResolutionRule

if TYPE_CHECKING:
    from layerfactory.capabilities import CapabilityProbe
    from layerfactory.models.operator_spec import OperatorSpec
    from layerfactory.registry import OperatorRegistry


class LRNRule(ResolutionRule):
    """LRN: accelerated when available.

    Within-channel normalization is served by the accelerated local
    contrast normalization variant. Across-channel normalization needs
    the window to fit the accelerated engine's limits.
    """

    type_name = "LRN"
    native = LRNOperator
    accelerated = AcceleratedLRNOperator

    def _region(self, spec: "OperatorSpec") -> NormRegion:
        return read_enum(spec, "norm_region", NormRegion, NormRegion.ACROSS_CHANNELS)

    def check_accelerated(
        self,
        spec: "OperatorSpec",
        caps: "CapabilityProbe",
    ) -> list[Reason]:
        if self._region(spec) is NormRegion.WITHIN_CHANNEL:
            return []

        local_size = read_positive_int(spec, "local_size", 5)
        if not caps.lrn_window_supported(local_size):
            return [make_reason(
                ReasonCodes.LRN_WINDOW_UNSUPPORTED,
                f"local_size {local_size} outside accelerated range "
                f"[{caps.min_lrn_window}, {caps.max_lrn_window}]",
            )]
        return []

    def select_accelerated(
        self,
        spec: "OperatorSpec",
        caps: "CapabilityProbe",
        reasons: list[Reason],
    ) -> type[BaseOperator]:
        if self._region(spec) is NormRegion.WITHIN_CHANNEL:
            return AcceleratedLCNOperator
        return AcceleratedLRNOperator


LRN_RULE = LRNRule()


def register(registry: "OperatorRegistry") -> None:
    registry.register(LRNRule.type_name, LRN_RULE)
