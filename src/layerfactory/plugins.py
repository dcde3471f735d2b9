"""
LayerFactory Plugins

Third-party packages add operator types by declaring an entry point in
the ``layerfactory.operators`` group. Each entry point loads to a
callable that receives the registry and registers its creators::

    [project.entry-points."layerfactory.operators"]
    scale = "my_package.layers:register"
"""
from __future__ import annotations

import logging
from importlib.metadata import entry_points
from typing import TYPE_CHECKING

from layerfactory.config import DEFAULT_PLUGIN_GROUP
from layerfactory.exceptions import LayerFactoryError, PluginLoadError

if TYPE_CHECKING:
    from layerfactory.registry import OperatorRegistry

logger = logging.getLogger(__name__)


def load_plugins(
    group: str = DEFAULT_PLUGIN_GROUP,
    registry: "OperatorRegistry | None" = None,
) -> list[str]:
    """Load every entry point in group and let it register creators.

    Args:
        group: Entry point group name.
        registry: Target registry (default: global registry).

    Returns:
        Names of the loaded plugins, in load order.

    Raises:
        PluginLoadError: If a plugin fails to import or register.
    """
    if registry is None:
        from layerfactory.registry import get_registry
        registry = get_registry()

    loaded: list[str] = []
    for ep in entry_points(group=group):
        try:
            hook = ep.load()
            hook(registry)
        except LayerFactoryError:
            raise
        except Exception as e:
            raise PluginLoadError(ep.name, group, e) from e
        loaded.append(ep.name)
        logger.debug(f"Loaded operator plugin '{ep.name}' from {ep.value}")

    if loaded:
        logger.info(f"Loaded {len(loaded)} operator plugin(s) from '{group}'")
    return loaded
