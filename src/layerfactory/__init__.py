"""
LayerFactory - Operator Construction with Engine Resolution

Builds network operators from declarative specs, choosing between the
native implementation and the accelerated (cuDNN) one per operator
according to the requested engine, the detected runtime capabilities
and the known limitations of the accelerated kernels.

Main APIs:
- lf.create(): Construct an operator from a spec
- lf.explain(): Show which implementation a spec resolves to, and why
- lf.register_creator(): Add an operator type
- lf.list_operators(): Registered operator types
"""

__version__ = "0.1.0"

from layerfactory.capabilities import (
    CapabilityProbe,
    detect_capabilities,
    get_capabilities,
)
from layerfactory.config import (
    LayerFactoryConfig,
    config_from_env,
    configure,
    get_config,
    load_config,
)
from layerfactory.enums import Engine, NormRegion, PoolMethod
from layerfactory.exceptions import (
    ConfigurationError,
    DuplicateRegistrationError,
    EngineUnavailableError,
    ForeignOperatorError,
    LayerFactoryError,
    PluginLoadError,
    UnknownEngineError,
    UnknownOperatorError,
)
from layerfactory.factory import create, explain, list_operators
from layerfactory.models import OperatorSpec
from layerfactory.operators.base import BaseOperator
from layerfactory.plugins import load_plugins
from layerfactory.reasons import (
    ALL_REASON_CODES,
    Reason,
    ReasonCategory,
)
from layerfactory.registry import (
    OperatorRegistry,
    get_registry,
    register_creator,
    register_operator_class,
)
from layerfactory.rules import Resolution, ResolutionRule, SingleEngineRule

__all__ = [
    "__version__",
    # Factory
    "create",
    "explain",
    "list_operators",
    # Registry
    "OperatorRegistry",
    "get_registry",
    "register_creator",
    "register_operator_class",
    "load_plugins",
    # Resolution
    "Resolution",
    "ResolutionRule",
    "SingleEngineRule",
    "CapabilityProbe",
    "detect_capabilities",
    "get_capabilities",
    # Models
    "OperatorSpec",
    "BaseOperator",
    "Engine",
    "PoolMethod",
    "NormRegion",
    # Reasons
    "Reason",
    "ReasonCategory",
    "ALL_REASON_CODES",
    # Configuration
    "LayerFactoryConfig",
    "configure",
    "get_config",
    "load_config",
    "config_from_env",
    # Exceptions
    "LayerFactoryError",
    "UnknownOperatorError",
    "UnknownEngineError",
    "EngineUnavailableError",
    "DuplicateRegistrationError",
    "ForeignOperatorError",
    "ConfigurationError",
    "PluginLoadError",
]
