"""
Parameter Validation

Typed readers for operator parameters. Specs carry an untyped parameter
mapping; each rule and operator reads the keys it consumes through these
helpers, which raise ConfigurationError naming the operator and key.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Sequence, TypeVar, TYPE_CHECKING

from layerfactory.exceptions import ConfigurationError

if TYPE_CHECKING:
    from layerfactory.models.operator_spec import OperatorSpec

E = TypeVar("E", bound=Enum)


def _invalid(spec: "OperatorSpec", key: str, expected: str, got: Any) -> ConfigurationError:
    return ConfigurationError(
        f"Layer '{spec.display_name}': parameter '{key}' must be {expected}, got {got!r}",
        config_key=key,
        expected=expected,
        got=got,
    )


def read_int_tuple(
    spec: "OperatorSpec",
    key: str,
    default: int,
    *,
    minimum: int = 0,
) -> tuple[int, ...]:
    """Read a repeated integer parameter (e.g., per-dimension dilation).

    A scalar is accepted as a one-element tuple. A missing or empty value
    yields (default,).

    Args:
        spec: Operator spec to read from.
        key: Parameter name.
        default: Value used when the parameter is absent.
        minimum: Smallest accepted element.

    Returns:
        Tuple of integers.

    Raises:
        ConfigurationError: If any element is not an integer >= minimum.
    """
    raw = spec.param(key)
    if raw is None:
        return (default,)

    values: Sequence[Any] = raw if isinstance(raw, (list, tuple)) else [raw]
    if len(values) == 0:
        return (default,)

    result: list[int] = []
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
            raise _invalid(spec, key, f"integer(s) >= {minimum}", raw)
        result.append(value)
    return tuple(result)


def expand_spatial(
    values: tuple[int, ...],
    ndim: int,
    key: str = "value",
) -> tuple[int, ...]:
    """Broadcast a per-dimension parameter to ndim spatial axes.

    Args:
        values: One value (shared) or exactly ndim values.
        ndim: Number of spatial axes.
        key: Parameter name, for the error message.

    Returns:
        Tuple of length ndim.

    Raises:
        ConfigurationError: If the length matches neither 1 nor ndim.
    """
    if len(values) == ndim:
        return values
    if len(values) == 1:
        return values * ndim
    raise ConfigurationError(
        f"Parameter '{key}' has {len(values)} values for {ndim} spatial axes",
        config_key=key,
        expected=f"1 or {ndim} values",
        got=values,
    )


def read_positive_int(spec: "OperatorSpec", key: str, default: int) -> int:
    """Read a strictly positive integer parameter."""
    value = spec.param(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise _invalid(spec, key, "a positive integer", value)
    return value


def read_float(
    spec: "OperatorSpec",
    key: str,
    default: float,
    *,
    minimum: float | None = None,
    maximum: float | None = None,
) -> float:
    """Read a float parameter with optional inclusive bounds."""
    value = spec.param(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _invalid(spec, key, "a number", value)
    value = float(value)
    if minimum is not None and value < minimum:
        raise _invalid(spec, key, f"a number >= {minimum}", value)
    if maximum is not None and value > maximum:
        raise _invalid(spec, key, f"a number <= {maximum}", value)
    return value


def read_enum(spec: "OperatorSpec", key: str, enum_cls: type[E], default: E) -> E:
    """Read an enum parameter by member, value, or case-insensitive name.

    Raises:
        ConfigurationError: If the value names no member of enum_cls.
    """
    value = spec.param(key)
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value

    text = str(value).strip()
    for member in enum_cls:
        if text == member.value or text.upper() == member.name:
            return member
    raise _invalid(
        spec, key, f"one of {[m.name for m in enum_cls]}", value,
    )
