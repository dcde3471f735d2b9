"""
LayerFactory Resolution Rules

Base class for per-operator engine resolution. A rule is a creator: it
is registered under one operator type and, called with a spec and a
capability snapshot, returns a freshly constructed operator.

Resolution is split from construction so that the decision itself is a
pure function of (engine preference, parameters, capabilities) and can
be inspected without building anything.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, TYPE_CHECKING

from layerfactory import reasons as ReasonCodes
from layerfactory.enums import Engine
from layerfactory.exceptions import EngineUnavailableError, UnknownEngineError
from layerfactory.reasons import Reason, make_reason

if TYPE_CHECKING:
    from layerfactory.capabilities import CapabilityProbe
    from layerfactory.models.operator_spec import OperatorSpec
    from layerfactory.operators.base import BaseOperator

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of resolving an operator spec to an implementation.

    Attributes:
        type_name: Operator type that was resolved.
        requested: Engine preference from the spec.
        engine: Engine chosen (never DEFAULT).
        impl: Implementation class to instantiate.
        reasons: Why the chosen engine differs from the naive choice.
        downgraded: Whether the accelerated engine was rejected for this spec.
    """

    type_name: str
    requested: Engine | str
    engine: Engine
    impl: type["BaseOperator"]
    reasons: tuple[Reason, ...] = ()
    downgraded: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for reports.

        Returns:
            Dict with resolution fields; impl is given by class name.
        """
        requested = (
            self.requested.value if isinstance(self.requested, Engine) else self.requested
        )
        return {
            "type_name": self.type_name,
            "requested": requested,
            "engine": self.engine.value,
            "impl": self.impl.__name__,
            "variant": self.impl.variant,
            "reasons": [r.to_dict() for r in self.reasons],
            "downgraded": self.downgraded,
        }


class ResolutionRule:
    """Engine resolution for one operator type.

    Subclasses set ``type_name``, ``native`` and ``accelerated`` and
    override ``check_accelerated`` to list the conditions under which
    the accelerated implementation cannot honor a spec.

    Resolution steps:
    1. DEFAULT becomes ACCELERATED when the probe reports it available,
       otherwise NATIVE. Rules with ``prefer_native_by_default`` resolve
       DEFAULT to NATIVE regardless.
    2. ACCELERATED is re-validated by ``check_accelerated``; any reason
       returned downgrades to NATIVE.
    3. NATIVE always uses the native implementation.
    4. Any other engine value raises UnknownEngineError.

    Attributes:
        type_name: Operator type this rule is registered under.
        native: Native implementation class.
        accelerated: Accelerated implementation class.
        prefer_native_by_default: Resolve DEFAULT to NATIVE even when
            the accelerated engine is available.
    """

    type_name: ClassVar[str]
    native: ClassVar[type["BaseOperator"]]
    accelerated: ClassVar[type["BaseOperator"] | None] = None
    prefer_native_by_default: ClassVar[bool] = False

    def check_accelerated(
        self,
        spec: "OperatorSpec",
        caps: "CapabilityProbe",
    ) -> list[Reason]:
        """List reasons the accelerated implementation cannot serve spec.

        Args:
            spec: Operator spec.
            caps: Capability snapshot.

        Returns:
            Empty list if the accelerated implementation is usable.
        """
        return []

    def select_accelerated(
        self,
        spec: "OperatorSpec",
        caps: "CapabilityProbe",
        reasons: list[Reason],
    ) -> type["BaseOperator"]:
        """Pick the accelerated implementation class for spec.

        Rules with several accelerated variants override this; they may
        append informational reasons.
        """
        if self.accelerated is None:
            raise UnknownEngineError(
                spec.display_name, Engine.ACCELERATED, type_name=self.type_name,
            )
        return self.accelerated

    def _initial_engine(
        self,
        spec: "OperatorSpec",
        caps: "CapabilityProbe",
        reasons: list[Reason],
    ) -> Engine:
        engine = spec.engine

        if engine is Engine.DEFAULT:
            if self.prefer_native_by_default or self.accelerated is None:
                if caps.accelerated_available and self.accelerated is not None:
                    reasons.append(make_reason(
                        ReasonCodes.NATIVE_PREFERRED,
                        f"{self.type_name} uses the native engine unless "
                        "accelerated is requested explicitly",
                    ))
                return Engine.NATIVE
            if not caps.accelerated_available:
                reasons.append(make_reason(
                    ReasonCodes.ACCELERATED_UNAVAILABLE,
                    "accelerated engine is not available",
                ))
                return Engine.NATIVE
            return Engine.ACCELERATED

        if engine is Engine.NATIVE:
            return Engine.NATIVE

        if engine is Engine.ACCELERATED and self.accelerated is not None:
            if not caps.accelerated_available:
                raise EngineUnavailableError(
                    spec.display_name, engine, type_name=self.type_name,
                )
            return Engine.ACCELERATED

        raise UnknownEngineError(spec.display_name, engine, type_name=self.type_name)

    def resolve(self, spec: "OperatorSpec", caps: "CapabilityProbe") -> Resolution:
        """Decide which implementation serves spec.

        Pure: depends only on the spec and the capability snapshot.

        Args:
            spec: Operator spec.
            caps: Capability snapshot.

        Returns:
            Resolution naming the implementation class.

        Raises:
            UnknownEngineError: If the spec names an engine this rule lacks.
            EngineUnavailableError: If ACCELERATED is requested but absent.
        """
        reasons: list[Reason] = []
        engine = self._initial_engine(spec, caps, reasons)

        if engine is Engine.ACCELERATED:
            rejections = self.check_accelerated(spec, caps)
            if rejections:
                return Resolution(
                    type_name=self.type_name,
                    requested=spec.engine,
                    engine=Engine.NATIVE,
                    impl=self.native,
                    reasons=tuple(reasons + rejections),
                    downgraded=True,
                )
            impl = self.select_accelerated(spec, caps, reasons)
            return Resolution(
                type_name=self.type_name,
                requested=spec.engine,
                engine=Engine.ACCELERATED,
                impl=impl,
                reasons=tuple(reasons),
            )

        return Resolution(
            type_name=self.type_name,
            requested=spec.engine,
            engine=Engine.NATIVE,
            impl=self.native,
            reasons=tuple(reasons),
        )

    def __call__(self, spec: "OperatorSpec", caps: "CapabilityProbe") -> "BaseOperator":
        """Resolve and construct the operator for spec."""
        resolution = self.resolve(spec, caps)

        for reason in resolution.reasons:
            if resolution.downgraded:
                logger.info(
                    f"Layer '{spec.display_name}' ({self.type_name}): "
                    f"using native engine: {reason}"
                )
            else:
                logger.debug(f"Layer '{spec.display_name}' ({self.type_name}): {reason}")

        return resolution.impl(spec)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type_name={self.type_name!r})"


class SingleEngineRule(ResolutionRule):
    """Rule for operators with a single implementation.

    The engine preference is ignored: the implementation is always built.
    Two rules are equal when they build the same class under the same
    type name, which keeps repeated registration idempotent.
    """

    def __init__(self, type_name: str, impl: type["BaseOperator"]) -> None:
        self.type_name = type_name
        self.native = impl

    def resolve(self, spec: "OperatorSpec", caps: "CapabilityProbe") -> Resolution:
        return Resolution(
            type_name=self.type_name,
            requested=spec.engine,
            engine=self.native.engine,
            impl=self.native,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SingleEngineRule):
            return NotImplemented
        return (self.type_name, self.native) == (other.type_name, other.native)

    def __hash__(self) -> int:
        return hash((self.type_name, self.native))
