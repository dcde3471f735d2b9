"""
LayerFactory Entry Point

``create`` is the single operation the rest of a network engine calls:
it looks up the creator for a spec's type and invokes it. All
operator-specific logic lives in the creators.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, TYPE_CHECKING

from layerfactory.capabilities import get_capabilities
from layerfactory.exceptions import ConfigurationError
from layerfactory.models.operator_spec import OperatorSpec
from layerfactory.registry import get_registry

if TYPE_CHECKING:
    from layerfactory.capabilities import CapabilityProbe
    from layerfactory.operators.base import BaseOperator
    from layerfactory.registry import OperatorRegistry
    from layerfactory.rules.base import Resolution

logger = logging.getLogger(__name__)


def _as_spec(spec: OperatorSpec | Mapping[str, Any]) -> OperatorSpec:
    if isinstance(spec, OperatorSpec):
        return spec
    return OperatorSpec.from_dict(spec)


def create(
    spec: OperatorSpec | Mapping[str, Any],
    *,
    capabilities: "CapabilityProbe | None" = None,
    registry: "OperatorRegistry | None" = None,
) -> "BaseOperator":
    """Construct the operator described by spec.

    Args:
        spec: Operator spec, or a mapping accepted by OperatorSpec.from_dict.
        capabilities: Capability snapshot (default: detected once per process).
        registry: Registry to look up (default: global registry).

    Returns:
        New operator instance owned by the caller.

    Raises:
        UnknownOperatorError: If spec.type_name is not registered.
        UnknownEngineError: If the engine preference is not valid for the type.
        ConfigurationError: If the parameters are invalid.
        ForeignOperatorError: If a Python layer fails to construct.

    Example:
        >>> import layerfactory as lf
        >>>
        >>> conv = lf.create({"type": "Convolution", "name": "conv1",
        ...                   "params": {"stride": 2}})
        >>> print(conv.variant)
    """
    spec = _as_spec(spec)
    if registry is None:
        registry = get_registry()
    if capabilities is None:
        capabilities = get_capabilities()

    creator = registry.lookup(spec.type_name)
    return creator(spec, capabilities)


def explain(
    spec: OperatorSpec | Mapping[str, Any],
    *,
    capabilities: "CapabilityProbe | None" = None,
    registry: "OperatorRegistry | None" = None,
) -> "Resolution":
    """Resolve spec without constructing the operator.

    Args:
        spec: Operator spec, or a mapping accepted by OperatorSpec.from_dict.
        capabilities: Capability snapshot (default: detected once per process).
        registry: Registry to look up (default: global registry).

    Returns:
        Resolution with the chosen engine, implementation and reasons.

    Raises:
        UnknownOperatorError: If spec.type_name is not registered.
        ConfigurationError: If the creator has no resolution step.
    """
    spec = _as_spec(spec)
    if registry is None:
        registry = get_registry()
    creator = registry.lookup(spec.type_name)

    resolve = getattr(creator, "resolve", None)
    if not callable(resolve):
        raise ConfigurationError(
            f"Operator type '{spec.type_name}' cannot be explained: "
            f"its creator {creator!r} has no resolve step",
            config_key="type_name",
            got=spec.type_name,
        )

    if capabilities is None:
        capabilities = get_capabilities()
    resolution = resolve(spec, capabilities)
    logger.debug(
        f"Resolved '{spec.display_name}' ({spec.type_name}) to "
        f"{resolution.impl.__name__} on {resolution.engine.value}"
    )
    return resolution


def list_operators(registry: "OperatorRegistry | None" = None) -> list[str]:
    """List registered operator type names, sorted."""
    if registry is None:
        registry = get_registry()
    return list(registry.type_names)
