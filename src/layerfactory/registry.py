"""
LayerFactory Operator Registry

Maps operator type names to creators. A creator is any callable taking
(spec, capabilities) and returning a BaseOperator; the built-in ones are
ResolutionRule instances.

Thread-safe registration and lookup.
"""
from __future__ import annotations

import logging
import threading
from threading import RLock
from typing import Callable, Sequence, TYPE_CHECKING

from layerfactory.exceptions import DuplicateRegistrationError, UnknownOperatorError

if TYPE_CHECKING:
    from layerfactory.capabilities import CapabilityProbe
    from layerfactory.models.operator_spec import OperatorSpec
    from layerfactory.operators.base import BaseOperator

logger = logging.getLogger(__name__)

Creator = Callable[["OperatorSpec", "CapabilityProbe"], "BaseOperator"]

# Global registry instance
_registry: "OperatorRegistry | None" = None
_registry_lock = threading.Lock()


class OperatorRegistry:
    """Registry of operator creators keyed by type name.

    Type names are unique. Registering the same creator twice under the
    same name is a no-op, so module registration hooks may run more
    than once; a different creator for a taken name is an error.

    All public methods are thread-safe.
    """

    __slots__ = ("_lock", "_creators")

    def __init__(self) -> None:
        """Initialize empty operator registry."""
        self._lock = RLock()
        self._creators: dict[str, Creator] = {}

    def _check(self, type_name: str, creator: Creator) -> bool:
        """Return True if creator still needs inserting."""
        existing = self._creators.get(type_name)
        if existing is None:
            return True
        if existing is creator or existing == creator:
            return False
        raise DuplicateRegistrationError(type_name)

    def register(self, type_name: str, creator: Creator) -> None:
        """Register a creator for an operator type.

        Args:
            type_name: Operator type name.
            creator: Callable (spec, capabilities) -> BaseOperator.

        Raises:
            DuplicateRegistrationError: If type_name has a different creator.
            TypeError: If creator is not callable.
        """
        if not callable(creator):
            raise TypeError(f"Creator for '{type_name}' is not callable: {creator!r}")

        with self._lock:
            if self._check(type_name, creator):
                self._creators[type_name] = creator
                logger.debug(f"Registered operator type '{type_name}': {creator!r}")

    def register_many(self, entries: Sequence[tuple[str, Creator]]) -> None:
        """Register several creators atomically.

        If any entry conflicts, nothing is registered.

        Args:
            entries: (type_name, creator) pairs.

        Raises:
            DuplicateRegistrationError: On a conflict with the registry or
                within the batch.
        """
        with self._lock:
            pending: dict[str, Creator] = {}
            for type_name, creator in entries:
                if not callable(creator):
                    raise TypeError(
                        f"Creator for '{type_name}' is not callable: {creator!r}"
                    )
                if type_name in pending:
                    if pending[type_name] is creator or pending[type_name] == creator:
                        continue
                    raise DuplicateRegistrationError(type_name)
                if self._check(type_name, creator):
                    pending[type_name] = creator

            self._creators.update(pending)
            for type_name in pending:
                logger.debug(f"Registered operator type '{type_name}'")

    def lookup(self, type_name: str) -> Creator:
        """Get the creator for an operator type.

        Args:
            type_name: Operator type name.

        Returns:
            The registered creator.

        Raises:
            UnknownOperatorError: If no creator is registered.
        """
        with self._lock:
            creator = self._creators.get(type_name)
            if creator is None:
                raise UnknownOperatorError(type_name, known=sorted(self._creators))
            return creator

    @property
    def type_names(self) -> tuple[str, ...]:
        """Registered type names, sorted."""
        with self._lock:
            return tuple(sorted(self._creators))

    def clear(self) -> None:
        """Remove every registration. For tests."""
        with self._lock:
            self._creators.clear()

    def __contains__(self, type_name: object) -> bool:
        with self._lock:
            return type_name in self._creators

    def __len__(self) -> int:
        with self._lock:
            return len(self._creators)

    def __repr__(self) -> str:
        return f"OperatorRegistry({len(self)} types)"


def get_registry() -> OperatorRegistry:
    """Get the global operator registry.

    The first call creates the registry and installs the built-in rules;
    when configured with autoload_plugins it also loads entry-point
    plugins. The registry is published before plugins load, so plugin
    modules may register through the module-level helpers.

    Returns:
        OperatorRegistry singleton instance.
    """
    global _registry
    if _registry is not None:
        return _registry

    with _registry_lock:
        if _registry is not None:
            return _registry

        from layerfactory.rules import install_builtin_rules

        registry = OperatorRegistry()
        install_builtin_rules(registry)
        logger.debug(f"Initialized operator registry with {len(registry)} types")
        _registry = registry

    # Outside the lock: plugin imports may call get_registry() again
    from layerfactory.config import get_config

    config = get_config()
    if config.autoload_plugins:
        from layerfactory.plugins import load_plugins
        load_plugins(config.plugin_group, registry=registry)

    return registry


def register_creator(
    type_name: str,
    creator: Creator | None = None,
    registry: OperatorRegistry | None = None,
):
    """Register a creator with the global (or given) registry.

    Usable as a plain call::

        register_creator("Scale", make_scale)

    or as a decorator::

        @register_creator("Scale")
        def make_scale(spec, caps):
            return ScaleOperator(spec)

    Args:
        type_name: Operator type name.
        creator: Creator callable; omit to use as a decorator.
        registry: Target registry (default: global registry).

    Returns:
        The creator, or a decorator when creator is omitted.
    """
    def decorator(fn: Creator) -> Creator:
        target = registry if registry is not None else get_registry()
        target.register(type_name, fn)
        return fn

    if creator is None:
        return decorator
    return decorator(creator)


def register_operator_class(
    type_name: str,
    cls: type["BaseOperator"],
    registry: OperatorRegistry | None = None,
) -> type["BaseOperator"]:
    """Register an operator class as its own single-engine creator.

    The class is constructed from the spec regardless of engine
    preference.

    Args:
        type_name: Operator type name.
        cls: BaseOperator subclass.
        registry: Target registry (default: global registry).

    Returns:
        cls, so this can be applied after a class definition.
    """
    from layerfactory.rules.base import SingleEngineRule

    target = registry if registry is not None else get_registry()
    target.register(type_name, SingleEngineRule(type_name, cls))
    return cls
