"""LayerFactory Configuration.

Process-wide settings that shape capability detection and plugin loading:
- configure() - Set global configuration
- get_config() - Get current configuration
- load_config() - Load configuration from a YAML file
- config_from_env() - Apply LAYERFACTORY_* environment overrides

Configuration must be settled before the first operator is created: the
capability probe is computed once and never revisited.
"""
from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

import yaml

from layerfactory.exceptions import ConfigurationError

ENV_PREFIX = "LAYERFACTORY_"

DEFAULT_PLUGIN_GROUP = "layerfactory.operators"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


@dataclass
class LayerFactoryConfig:
    """Global LayerFactory configuration.

    Attributes:
        disable_accelerated: If True, the capability probe reports the
            accelerated engine as unavailable even when cuDNN is present.
        plugin_group: Entry point group scanned by load_plugins().
        autoload_plugins: If True, the process-wide registry loads plugins
            from plugin_group when it is first created.
    """
    disable_accelerated: bool = False
    plugin_group: str = DEFAULT_PLUGIN_GROUP
    autoload_plugins: bool = False


@dataclass
class GlobalState:
    """Global state for LayerFactory."""
    config: LayerFactoryConfig = field(default_factory=LayerFactoryConfig)
    _lock: threading.Lock = field(default_factory=threading.Lock)


_global_state: Optional[GlobalState] = None
_state_lock = threading.Lock()


def _get_global_state() -> GlobalState:
    """Get or create global state."""
    global _global_state
    if _global_state is None:
        with _state_lock:
            if _global_state is None:
                _global_state = GlobalState()
    return _global_state


def configure(
    disable_accelerated: Optional[bool] = None,
    plugin_group: Optional[str] = None,
    autoload_plugins: Optional[bool] = None,
    reset: bool = False,
) -> None:
    """Configure LayerFactory global settings.

    Args:
        disable_accelerated: Force the native engine everywhere.
        plugin_group: Entry point group for operator plugins.
        autoload_plugins: Load plugins when the global registry is built.
        reset: If True, reset all settings to defaults first.

    Example:
        >>> import layerfactory as lf
        >>> lf.configure(disable_accelerated=True)
        >>> lf.configure(reset=True)
    """
    state = _get_global_state()

    with state._lock:
        if reset:
            state.config = LayerFactoryConfig()

        if disable_accelerated is not None:
            state.config.disable_accelerated = bool(disable_accelerated)
        if plugin_group is not None:
            if not plugin_group:
                raise ConfigurationError(
                    "plugin_group must be a non-empty string",
                    config_key="plugin_group",
                    expected="non-empty string",
                    got=plugin_group,
                )
            state.config.plugin_group = plugin_group
        if autoload_plugins is not None:
            state.config.autoload_plugins = bool(autoload_plugins)


def get_config() -> LayerFactoryConfig:
    """Get current LayerFactory configuration.

    Returns:
        Copy of the current configuration.
    """
    state = _get_global_state()
    with state._lock:
        return LayerFactoryConfig(
            disable_accelerated=state.config.disable_accelerated,
            plugin_group=state.config.plugin_group,
            autoload_plugins=state.config.autoload_plugins,
        )


def _parse_bool(key: str, value: Any) -> bool:
    """Parse a boolean from YAML or an environment variable."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"Invalid boolean for '{key}': {value!r}",
        config_key=key,
        expected="boolean",
        got=value,
    )


def load_config(path: str) -> None:
    """Load configuration from YAML file.

    Args:
        path: Path to YAML configuration file.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If config file is invalid.

    YAML format::

        disable_accelerated: false
        plugin_group: layerfactory.operators
        autoload_plugins: true
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid config file format: {path}",
            expected="mapping",
            got=type(data).__name__,
        )

    configure(
        disable_accelerated=(
            _parse_bool("disable_accelerated", data["disable_accelerated"])
            if "disable_accelerated" in data else None
        ),
        plugin_group=data.get("plugin_group"),
        autoload_plugins=(
            _parse_bool("autoload_plugins", data["autoload_plugins"])
            if "autoload_plugins" in data else None
        ),
    )


def config_from_env(env_prefix: str = ENV_PREFIX) -> None:
    """Apply configuration overrides from environment variables.

    Environment Variable Format:
        LAYERFACTORY_DISABLE_ACCELERATED=1
        LAYERFACTORY_PLUGIN_GROUP=my.operators
        LAYERFACTORY_AUTOLOAD_PLUGINS=true

    Args:
        env_prefix: Environment variable prefix.
    """
    disable = os.environ.get(f"{env_prefix}DISABLE_ACCELERATED")
    group = os.environ.get(f"{env_prefix}PLUGIN_GROUP")
    autoload = os.environ.get(f"{env_prefix}AUTOLOAD_PLUGINS")

    configure(
        disable_accelerated=(
            _parse_bool(f"{env_prefix}DISABLE_ACCELERATED", disable)
            if disable is not None else None
        ),
        plugin_group=group or None,
        autoload_plugins=(
            _parse_bool(f"{env_prefix}AUTOLOAD_PLUGINS", autoload)
            if autoload is not None else None
        ),
    )
