"""
LayerFactory Base Operator

Abstract base class for all operator implementations.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, ContextManager, TYPE_CHECKING

import torch

from layerfactory.enums import Engine

if TYPE_CHECKING:
    from layerfactory.models.operator_spec import OperatorSpec


class BaseOperator(ABC):
    """Abstract base class for operator implementations.

    Every implementation is constructed from an OperatorSpec and then
    driven by the execution engine through ``__call__``. Subclasses read
    and validate their parameters in ``__init__`` so a misconfigured spec
    fails at construction, not at the first forward pass.

    Attributes:
        engine: Engine this implementation runs on (NATIVE or ACCELERATED).
        variant: Short implementation identifier (e.g., "cudnn_lcn").
    """

    engine: ClassVar[Engine] = Engine.NATIVE
    variant: ClassVar[str] = "native"

    def __init__(self, spec: "OperatorSpec") -> None:
        """Initialize the operator.

        Args:
            spec: Operator specification.
        """
        self._spec = spec

    @property
    def spec(self) -> "OperatorSpec":
        """Get the spec this operator was built from."""
        return self._spec

    @property
    def type_name(self) -> str:
        """Get operator type name."""
        return self._spec.type_name

    @property
    def name(self) -> str:
        """Get declared operator name."""
        return self._spec.name

    @property
    def num_outputs(self) -> int:
        """Get number of requested outputs."""
        return self._spec.num_outputs

    @abstractmethod
    def forward(self, *inputs: Any, **kwargs: Any) -> Any:
        """Compute the operator's outputs.

        Args:
            *inputs: Input tensors.
            **kwargs: Operator-specific arguments.

        Returns:
            Output tensor, or a tuple when the operator has several outputs.
        """

    def engine_context(self) -> ContextManager[None]:
        """Context that routes torch kernels to this operator's engine.

        Native operators run with cuDNN disabled; accelerated operators
        run with it enabled. Other cuDNN flags are left as they are.
        """
        cudnn = torch.backends.cudnn
        return cudnn.flags(
            enabled=self.engine is Engine.ACCELERATED,
            benchmark=cudnn.benchmark,
            benchmark_limit=cudnn.benchmark_limit,
            deterministic=cudnn.deterministic,
            allow_tf32=cudnn.allow_tf32,
        )

    def __call__(self, *inputs: Any, **kwargs: Any) -> Any:
        """Run forward on this operator's engine."""
        with self.engine_context():
            return self.forward(*inputs, **kwargs)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name={self.name!r}, "
            f"engine={self.engine.value}, variant={self.variant!r})"
        )
