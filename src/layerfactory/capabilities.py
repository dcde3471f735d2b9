"""
LayerFactory Capability Probe

Read-only facts about what the accelerated (cuDNN) engine supports in
this process. The snapshot is detected once, cached for the process
lifetime, and read by every resolution rule.

This module provides:
- CapabilityProbe: Frozen snapshot of accelerated-engine capabilities
- detect_capabilities(): Build a snapshot from the torch runtime
- get_capabilities(): Process-wide cached snapshot
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Final

from layerfactory.config import LayerFactoryConfig, get_config

logger = logging.getLogger(__name__)

# cudnn.h: CUDNN_LRN_MIN_N / CUDNN_LRN_MAX_N
CUDNN_LRN_MIN_N: Final[int] = 1
CUDNN_LRN_MAX_N: Final[int] = 16


@dataclass(frozen=True, slots=True)
class CapabilityProbe:
    """Accelerated engine capability snapshot.

    Immutable (frozen) for thread safety: rules may read it concurrently.

    Attributes:
        accelerated_available: Whether cuDNN is compiled in and usable.
        accelerated_version: cuDNN version as an integer (e.g., 8902), or None.
        min_lrn_window: Smallest normalization window cuDNN accepts.
        max_lrn_window: Largest normalization window cuDNN accepts.
        supports_dilated_convolution: Whether accelerated convolution handles dilation.
        supports_multi_output_pooling: Whether accelerated pooling handles extra outputs.
        device: Device the accelerated engine runs on ("cuda" or "cpu").
    """

    accelerated_available: bool
    accelerated_version: int | None = None
    min_lrn_window: int = CUDNN_LRN_MIN_N
    max_lrn_window: int = CUDNN_LRN_MAX_N
    supports_dilated_convolution: bool = False
    supports_multi_output_pooling: bool = False
    device: str = "cpu"

    @classmethod
    def native_only(cls) -> "CapabilityProbe":
        """Snapshot of a process without an accelerated engine."""
        return cls(accelerated_available=False)

    @classmethod
    def accelerated(
        cls,
        version: int | None = None,
        **overrides: Any,
    ) -> "CapabilityProbe":
        """Snapshot of a process with a usable accelerated engine.

        Args:
            version: cuDNN version to report.
            **overrides: Any other field to override.

        Returns:
            New CapabilityProbe with accelerated_available=True.
        """
        fields: dict[str, Any] = {"device": "cuda"}
        fields.update(overrides)
        return cls(accelerated_available=True, accelerated_version=version, **fields)

    def lrn_window_supported(self, local_size: int) -> bool:
        """Check a normalization window against the accelerated limits."""
        return self.min_lrn_window <= local_size <= self.max_lrn_window

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for diagnostics.

        Returns:
            Dict with capability fields.
        """
        return {
            "accelerated_available": self.accelerated_available,
            "accelerated_version": self.accelerated_version,
            "min_lrn_window": self.min_lrn_window,
            "max_lrn_window": self.max_lrn_window,
            "supports_dilated_convolution": self.supports_dilated_convolution,
            "supports_multi_output_pooling": self.supports_multi_output_pooling,
            "device": self.device,
        }


def _detect_cudnn() -> tuple[bool, int | None]:
    """Detect whether cuDNN is usable and its version.

    Returns:
        Tuple of (usable, version). Never raises.
    """
    try:
        import torch

        if not torch.backends.cudnn.is_available():
            return False, None
        if not torch.cuda.is_available():
            logger.debug("cuDNN is compiled in but no CUDA device is visible")
            return False, torch.backends.cudnn.version()
        return True, torch.backends.cudnn.version()

    except (ImportError, AttributeError, RuntimeError) as e:
        logger.warning(f"cuDNN capability check failed: {e}")
        return False, None


def detect_capabilities(config: LayerFactoryConfig | None = None) -> CapabilityProbe:
    """Detect accelerated engine capabilities from the torch runtime.

    Args:
        config: Configuration to honor. Uses the global config if None.

    Returns:
        Fresh CapabilityProbe snapshot.
    """
    if config is None:
        config = get_config()
    usable, version = _detect_cudnn()

    if usable and config.disable_accelerated:
        logger.info("Accelerated engine disabled by configuration")
        usable = False

    probe = CapabilityProbe(
        accelerated_available=usable,
        accelerated_version=version,
        device="cuda" if usable else "cpu",
    )
    logger.debug(f"Detected capabilities: {probe.to_dict()}")
    return probe


_capabilities: CapabilityProbe | None = None
_capabilities_lock = threading.Lock()


def get_capabilities() -> CapabilityProbe:
    """Get the process-wide capability snapshot.

    Detected on first call and cached; later configuration changes do
    not affect it.

    Returns:
        CapabilityProbe singleton.
    """
    global _capabilities
    if _capabilities is None:
        with _capabilities_lock:
            if _capabilities is None:
                _capabilities = detect_capabilities()
    return _capabilities
