"""
LayerFactory Exception Hierarchy

Every failure raised by operator construction is fatal to the caller:
each one reflects a configuration or build defect, never a transient
condition, so nothing in the package retries.
"""
from __future__ import annotations

from typing import Any, Optional, Sequence


class LayerFactoryError(Exception):
    """Base exception for all LayerFactory errors.

    All LayerFactory-specific exceptions inherit from this class,
    allowing callers to catch every construction failure with a single
    except clause.

    Attributes:
        message: Human-readable error description.
        context: Optional dict of additional context for debugging.
    """

    def __init__(
        self,
        message: str,
        *,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        """Initialize LayerFactoryError.

        Args:
            message: Error message.
            context: Optional context dict.
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        ctx_str = f", context={self.context}" if self.context else ""
        return f"{self.__class__.__name__}({self.message!r}{ctx_str})"


class UnknownOperatorError(LayerFactoryError):
    """Raised when no creator is registered for an operator type.

    Attributes:
        type_name: The operator type that was requested.
        known: Type names registered at the time of the lookup.
    """

    def __init__(
        self,
        type_name: str,
        *,
        known: Optional[Sequence[str]] = None,
        message: Optional[str] = None,
    ) -> None:
        """Initialize UnknownOperatorError.

        Args:
            type_name: Requested operator type.
            known: Registered operator types.
            message: Optional custom message.
        """
        self.type_name = type_name
        self.known = sorted(known) if known else []

        if message is None:
            message = (
                f"Unknown operator type: '{type_name}' "
                f"(known types: {', '.join(self.known) or '<none>'})"
            )

        super().__init__(
            message,
            context={"type_name": type_name, "known": self.known},
        )


class UnknownEngineError(LayerFactoryError):
    """Raised when an operator names an engine its rule does not offer.

    Attributes:
        operator_name: Declared name of the operator.
        engine: The rejected engine value.
        type_name: Operator type whose rule rejected it.
    """

    def __init__(
        self,
        operator_name: str,
        engine: Any,
        *,
        type_name: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        """Initialize UnknownEngineError.

        Args:
            operator_name: Declared operator name.
            engine: Engine value that was requested.
            type_name: Operator type.
            message: Optional custom message.
        """
        self.operator_name = operator_name
        self.engine = engine
        self.type_name = type_name

        if message is None:
            message = f"Layer '{operator_name}' has unknown engine: {engine!s}"

        super().__init__(
            message,
            context={
                "operator_name": operator_name,
                "engine": str(engine),
                "type_name": type_name,
            },
        )


class EngineUnavailableError(UnknownEngineError):
    """Raised when the accelerated engine is requested but not present.

    The accelerated implementation does not exist in this process, so an
    explicit request for it is treated like a request for an unknown
    engine.
    """

    def __init__(
        self,
        operator_name: str,
        engine: Any,
        *,
        type_name: Optional[str] = None,
        reason: str = "accelerated engine is not available",
    ) -> None:
        """Initialize EngineUnavailableError.

        Args:
            operator_name: Declared operator name.
            engine: Engine value that was requested.
            type_name: Operator type.
            reason: Why the engine is missing.
        """
        self.reason = reason
        super().__init__(
            operator_name,
            engine,
            type_name=type_name,
            message=(
                f"Layer '{operator_name}' requested engine {engine!s}: {reason}"
            ),
        )


class DuplicateRegistrationError(LayerFactoryError):
    """Raised when two creators claim the same operator type.

    Attributes:
        type_name: The contested operator type.
    """

    def __init__(self, type_name: str) -> None:
        """Initialize DuplicateRegistrationError.

        Args:
            type_name: Operator type registered twice.
        """
        self.type_name = type_name
        super().__init__(
            f"Operator type '{type_name}' already registered",
            context={"type_name": type_name},
        )


class ForeignOperatorError(LayerFactoryError):
    """Raised when a Python-defined operator fails to construct.

    Wraps whatever the user module raised; the original exception is
    chained as ``__cause__``.

    Attributes:
        module: Module the operator was loaded from.
        layer: Callable name inside the module.
        original_error: The underlying exception, if any.
    """

    def __init__(
        self,
        module: str,
        layer: str,
        original_error: Optional[BaseException] = None,
        *,
        message: Optional[str] = None,
    ) -> None:
        """Initialize ForeignOperatorError.

        Args:
            module: Module name.
            layer: Callable name.
            original_error: Exception raised by the module, if any.
            message: Optional custom message.
        """
        self.module = module
        self.layer = layer
        self.original_error = original_error

        if message is None:
            message = f"Python layer '{module}.{layer}' failed: {original_error}"

        context: dict[str, Any] = {"module": module, "layer": layer}
        if original_error is not None:
            context["error_type"] = type(original_error).__name__
            context["error_message"] = str(original_error)

        super().__init__(message, context=context)
        if original_error is not None:
            self.__cause__ = original_error


class ConfigurationError(LayerFactoryError):
    """Raised when operator parameters or package configuration are invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[Any] = None,
        got: Optional[Any] = None,
    ) -> None:
        """Initialize ConfigurationError.

        Args:
            message: Error message.
            config_key: The configuration key with the error.
            expected: Expected value or type.
            got: Actual value received.
        """
        self.config_key = config_key
        self.expected = expected
        self.got = got

        super().__init__(
            message,
            context={
                "config_key": config_key,
                "expected": expected,
                "got": got,
            },
        )


class PluginLoadError(LayerFactoryError):
    """Raised when an operator plugin fails to load or register.

    Attributes:
        plugin: Entry point name.
        group: Entry point group.
    """

    def __init__(
        self,
        plugin: str,
        group: str,
        original_error: Optional[BaseException] = None,
    ) -> None:
        self.plugin = plugin
        self.group = group
        super().__init__(
            f"Plugin '{plugin}' in group '{group}' failed: {original_error}",
            context={"plugin": plugin, "group": group},
        )
        if original_error is not None:
            self.__cause__ = original_error
