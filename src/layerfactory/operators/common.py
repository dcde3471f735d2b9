"""
LayerFactory Common Operators

Operators with a single (native) implementation: input placeholders,
in-memory data feeding, and dropout.
"""
from __future__ import annotations

import logging
from typing import Any, TYPE_CHECKING

import torch
import torch.nn.functional as F

from layerfactory.core.validation import read_float, read_positive_int
from layerfactory.exceptions import ConfigurationError
from layerfactory.operators.base import BaseOperator

if TYPE_CHECKING:
    from layerfactory.models.operator_spec import OperatorSpec

logger = logging.getLogger(__name__)


def _read_shapes(spec: "OperatorSpec") -> list[tuple[int, ...]]:
    raw = spec.param("shape", [])
    if raw and all(isinstance(d, int) and not isinstance(d, bool) for d in raw):
        raw = [raw]

    shapes: list[tuple[int, ...]] = []
    for shape in raw:
        if not isinstance(shape, (list, tuple)) or not all(
            isinstance(d, int) and not isinstance(d, bool) and d >= 0 for d in shape
        ):
            raise ConfigurationError(
                f"Layer '{spec.display_name}': invalid input shape {shape!r}",
                config_key="shape",
                expected="list of non-negative integers",
                got=shape,
            )
        shapes.append(tuple(shape))
    return shapes


class InputOperator(BaseOperator):
    """Network input placeholder.

    Declares the shape of each network input. Called with tensors it
    checks and forwards them; called without, it produces zero tensors
    of the declared shapes.

    Parameters:
        shape: One shape, or one shape per output.
    """

    def __init__(self, spec: "OperatorSpec") -> None:
        super().__init__(spec)
        self.shapes = _read_shapes(spec)
        if self.shapes and len(self.shapes) not in (1, spec.num_outputs):
            raise ConfigurationError(
                f"Layer '{spec.display_name}': {len(self.shapes)} shapes for "
                f"{spec.num_outputs} outputs",
                config_key="shape",
                expected=f"1 or {spec.num_outputs} shapes",
                got=len(self.shapes),
            )

    def _shape_for(self, index: int) -> tuple[int, ...] | None:
        if not self.shapes:
            return None
        return self.shapes[0] if len(self.shapes) == 1 else self.shapes[index]

    def forward(self, *inputs: torch.Tensor) -> Any:
        if not inputs:
            if not self.shapes:
                raise ConfigurationError(
                    f"Layer '{self.spec.display_name}': no inputs given and no shape declared",
                    config_key="shape",
                )
            outputs = tuple(
                torch.zeros(self._shape_for(i)) for i in range(self.num_outputs)
            )
        else:
            for i, tensor in enumerate(inputs):
                expected = self._shape_for(i) if i < self.num_outputs else None
                if expected is not None and tuple(tensor.shape) != expected:
                    raise ConfigurationError(
                        f"Layer '{self.spec.display_name}': input {i} has shape "
                        f"{tuple(tensor.shape)}, declared {expected}",
                        config_key="shape",
                        expected=expected,
                        got=tuple(tensor.shape),
                    )
            outputs = inputs

        return outputs[0] if len(outputs) == 1 else outputs


class MemoryDataOperator(BaseOperator):
    """Serves mini-batches from tensors held in memory.

    Call ``reset`` with the full data and labels, then each forward
    returns the next (data, labels) batch, wrapping around at the end.

    Parameters:
        batch_size: Examples per batch.
        channels, height, width: Expected per-example data shape.
    """

    def __init__(self, spec: "OperatorSpec") -> None:
        super().__init__(spec)
        self.batch_size = read_positive_int(spec, "batch_size", 1)
        self.example_shape = (
            read_positive_int(spec, "channels", 1),
            read_positive_int(spec, "height", 1),
            read_positive_int(spec, "width", 1),
        )
        self._data: torch.Tensor | None = None
        self._labels: torch.Tensor | None = None
        self._pos = 0

    def reset(self, data: torch.Tensor, labels: torch.Tensor) -> None:
        """Replace the served data.

        Args:
            data: Examples (N, channels, height, width).
            labels: Labels (N,).

        Raises:
            ConfigurationError: On shape mismatch or N not a multiple of batch_size.
        """
        if tuple(data.shape[1:]) != self.example_shape:
            raise ConfigurationError(
                f"Layer '{self.spec.display_name}': data examples have shape "
                f"{tuple(data.shape[1:])}, expected {self.example_shape}",
                expected=self.example_shape,
                got=tuple(data.shape[1:]),
            )
        if labels.shape[0] != data.shape[0]:
            raise ConfigurationError(
                f"Layer '{self.spec.display_name}': {data.shape[0]} examples "
                f"but {labels.shape[0]} labels",
            )
        if data.shape[0] % self.batch_size != 0:
            raise ConfigurationError(
                f"Layer '{self.spec.display_name}': number of examples "
                f"{data.shape[0]} is not a multiple of batch_size {self.batch_size}",
                config_key="batch_size",
            )
        self._data = data
        self._labels = labels
        self._pos = 0
        logger.debug(f"MemoryData '{self.name}' reset with {data.shape[0]} examples")

    def forward(self) -> tuple[torch.Tensor, torch.Tensor]:
        if self._data is None or self._labels is None:
            raise ConfigurationError(
                f"Layer '{self.spec.display_name}': reset() must be called before forward()",
            )
        start = self._pos
        end = start + self.batch_size
        self._pos = end % self._data.shape[0]
        return self._data[start:end], self._labels[start:end]


class DropoutOperator(BaseOperator):
    """Inverted dropout.

    Parameters:
        dropout_ratio: Probability of zeroing an element, in [0, 1) (default 0.5).
    """

    def __init__(self, spec: "OperatorSpec") -> None:
        super().__init__(spec)
        self.dropout_ratio = read_float(spec, "dropout_ratio", 0.5, minimum=0.0)
        if self.dropout_ratio >= 1.0:
            raise ConfigurationError(
                f"Layer '{spec.display_name}': dropout_ratio must be < 1",
                config_key="dropout_ratio",
                expected="[0, 1)",
                got=self.dropout_ratio,
            )
        self.training = True

    def train(self, mode: bool = True) -> "DropoutOperator":
        """Switch between training (drop) and inference (identity)."""
        self.training = mode
        return self

    def eval(self) -> "DropoutOperator":
        return self.train(False)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return F.dropout(x, p=self.dropout_ratio, training=self.training)
