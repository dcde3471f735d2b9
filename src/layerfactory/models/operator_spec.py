"""
LayerFactory Operator Specification

Dataclass describing one operator instance to be constructed.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping

from layerfactory.enums import Engine
from layerfactory.exceptions import ConfigurationError


@dataclass(frozen=True, slots=True)
class OperatorSpec:
    """Operator specification.

    Describes which operator to build, which engine the caller prefers,
    and the operator-specific parameters. Immutable (frozen), and the
    parameter mapping is wrapped read-only, so a spec can be shared
    across threads.

    Parameters are deliberately untyped here: each resolution rule reads
    and validates only the keys it consumes.

    Attributes:
        type_name: Operator type, selects the resolution rule (e.g., "Convolution")
        name: Declared operator name, embedded in error messages
        engine: Engine preference (Engine member or an unrecognised raw string)
        params: Operator-specific parameters
        num_outputs: Number of output tensors requested
    """

    type_name: str
    name: str = ""
    engine: Engine | str = Engine.DEFAULT
    params: Mapping[str, Any] = field(default_factory=dict)
    num_outputs: int = 1

    def __post_init__(self) -> None:
        """Normalize engine, freeze params and check the output count."""
        count = self.num_outputs
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise ConfigurationError(
                f"Layer '{self.name or self.type_name}': num_outputs must be a "
                f"positive integer, got {count!r}",
                config_key="num_outputs",
                expected="integer >= 1",
                got=count,
            )
        object.__setattr__(self, "engine", Engine.parse(self.engine))
        if not isinstance(self.params, MappingProxyType):
            object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    @property
    def display_name(self) -> str:
        """Name used in diagnostics (falls back to the type name)."""
        return self.name or self.type_name

    def param(self, key: str, default: Any = None) -> Any:
        """Get an operator parameter.

        Args:
            key: Parameter name.
            default: Value returned when the parameter is absent.

        Returns:
            Parameter value or default.
        """
        return self.params.get(key, default)

    def with_engine(self, engine: Engine | str) -> "OperatorSpec":
        """Return a copy of this spec with a different engine preference."""
        return replace(self, engine=engine, params=dict(self.params))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON/YAML compatibility.

        Returns:
            Dict with operator spec fields.
        """
        engine = self.engine.value if isinstance(self.engine, Engine) else self.engine
        return {
            "type": self.type_name,
            "name": self.name,
            "engine": engine,
            "params": dict(self.params),
            "num_outputs": self.num_outputs,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "OperatorSpec":
        """Deserialize from dictionary.

        Accepts either "type" or "type_name" for the operator type.

        Args:
            d: Dict with operator spec fields.

        Returns:
            New OperatorSpec instance.

        Raises:
            KeyError: If no operator type is given.
            ConfigurationError: If num_outputs is not a positive integer.
        """
        type_name = d["type"] if "type" in d else d["type_name"]
        return cls(
            type_name=type_name,
            name=d.get("name", ""),
            engine=Engine.parse(d.get("engine")),
            params=d.get("params") or {},
            num_outputs=d.get("num_outputs", 1),
        )
