"""
PyTest Configuration for LayerFactory Tests

Provides fixtures, markers, and test setup.
"""
import sys
from pathlib import Path

import pytest
import torch

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Add tests directory to path for helper modules
tests_path = Path(__file__).parent
sys.path.insert(0, str(tests_path))


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "gpu: mark test as requiring GPU")
    config.addinivalue_line("markers", "slow: mark test as slow running")


@pytest.fixture(scope="session")
def cuda_device():
    """Get CUDA device if available, otherwise skip."""
    if torch.cuda.is_available():
        return torch.device("cuda:0")
    pytest.skip("CUDA not available")


@pytest.fixture
def accelerated_caps():
    """Capability snapshot with the accelerated engine available."""
    from layerfactory.capabilities import CapabilityProbe
    return CapabilityProbe.accelerated(version=8902)


@pytest.fixture
def native_caps():
    """Capability snapshot without an accelerated engine."""
    from layerfactory.capabilities import CapabilityProbe
    return CapabilityProbe.native_only()


@pytest.fixture
def registry():
    """Fresh registry holding the built-in rules."""
    from layerfactory.registry import OperatorRegistry
    from layerfactory.rules import install_builtin_rules

    reg = OperatorRegistry()
    install_builtin_rules(reg)
    return reg


@pytest.fixture
def empty_registry():
    """Fresh registry with nothing registered."""
    from layerfactory.registry import OperatorRegistry
    return OperatorRegistry()


@pytest.fixture
def reset_globals(monkeypatch):
    """Isolate the process-wide registry, capability snapshot and config."""
    import layerfactory.capabilities
    import layerfactory.registry
    from layerfactory.config import configure

    monkeypatch.setattr(layerfactory.registry, "_registry", None)
    monkeypatch.setattr(layerfactory.capabilities, "_capabilities", None)
    configure(reset=True)
    yield
    configure(reset=True)
