"""
Python Operator Rule

Defers construction of a ``Python`` operator to a user module: the spec
names a module and a callable inside it, and that callable builds the
operator from the spec. The rule does not interpret what the module
does; any failure is logged with its traceback and re-raised as a
ForeignOperatorError.

Spec parameters:
    module: Importable module name.
    layer: Name of a callable in the module taking the spec.
    param_str: Free-form string passed through untouched for the module.
"""
from __future__ import annotations

import importlib
import logging
import threading
from typing import TYPE_CHECKING

from layerfactory.exceptions import ConfigurationError, ForeignOperatorError
from layerfactory.operators.base import BaseOperator

if TYPE_CHECKING:
    from layerfactory.capabilities import CapabilityProbe
    from layerfactory.models.operator_spec import OperatorSpec
    from layerfactory.registry import OperatorRegistry

logger = logging.getLogger(__name__)


def _read_name(spec: "OperatorSpec", key: str) -> str:
    value = spec.param(key)
    if not isinstance(value, str) or not value:
        raise ConfigurationError(
            f"Layer '{spec.display_name}': Python layers require a '{key}' name",
            config_key=key,
            expected="non-empty string",
            got=value,
        )
    return value


class PythonRule:
    """Creator for operators defined in Python modules.

    Not a ResolutionRule: the implementation class is only known once
    the user callable has run, so there is nothing to resolve ahead of
    construction.
    """

    type_name = "Python"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._initialized = False

    def _ensure_initialized(self) -> None:
        """Refresh import finders once before the first user import."""
        if self._initialized:
            return
        with self._lock:
            if not self._initialized:
                importlib.invalidate_caches()
                self._initialized = True
                logger.debug("Python operator runtime initialized")

    def __call__(self, spec: "OperatorSpec", caps: "CapabilityProbe") -> BaseOperator:
        module_name = _read_name(spec, "module")
        layer_name = _read_name(spec, "layer")

        self._ensure_initialized()

        try:
            module = importlib.import_module(module_name)
            factory = getattr(module, layer_name)
            operator = factory(spec)
        except Exception as e:
            logger.exception(
                f"Python layer '{spec.display_name}' ({module_name}.{layer_name}) "
                "failed to construct"
            )
            raise ForeignOperatorError(module_name, layer_name, e) from e

        if not isinstance(operator, BaseOperator):
            raise ForeignOperatorError(
                module_name,
                layer_name,
                message=(
                    f"Python layer '{module_name}.{layer_name}' returned "
                    f"{type(operator).__name__}, expected a BaseOperator"
                ),
            )

        logger.debug(
            f"Built Python layer '{spec.display_name}' from {module_name}.{layer_name}"
        )
        return operator

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type_name={self.type_name!r})"


PYTHON_RULE = PythonRule()


def register(registry: "OperatorRegistry") -> None:
    registry.register(PythonRule.type_name, PYTHON_RULE)
