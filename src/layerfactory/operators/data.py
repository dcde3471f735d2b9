"""
LayerFactory Dense Data Operators

Data layers serving images together with pixel-aligned targets (label
maps, depth maps) and optional per-example targets (mesh vertices).
Spatial augmentation (crop, mirror) is applied jointly to every dense
field of an example so the targets stay aligned with the image.

The data is held in memory: call ``reset`` with one tensor per field,
then each forward returns the next batch as a tuple in field order.
"""
from __future__ import annotations

import logging
from typing import ClassVar, TYPE_CHECKING

import torch

from layerfactory.core.validation import read_positive_int
from layerfactory.exceptions import ConfigurationError
from layerfactory.operators.base import BaseOperator

if TYPE_CHECKING:
    from layerfactory.models.operator_spec import OperatorSpec

logger = logging.getLogger(__name__)


def _read_flag(spec: "OperatorSpec", key: str, default: bool) -> bool:
    value = spec.param(key, default)
    if not isinstance(value, bool):
        raise ConfigurationError(
            f"Layer '{spec.display_name}': parameter '{key}' must be a boolean, got {value!r}",
            config_key=key,
            expected="a boolean",
            got=value,
        )
    return value


class DenseDataOperator(BaseOperator):
    """Base class for in-memory data layers with aligned dense targets.

    Dense fields share their last two (height, width) axes with the image
    and are cropped and mirrored together. Per-example fields go through
    ``_adjust_example``, which leaves them unchanged unless overridden.

    Parameters:
        batch_size: Examples per batch (default 1).
        crop_size: Side of the square crop; 0 disables cropping (default 0).
        mirror: Randomly flip examples horizontally while training (default False).
        shuffle: Reshuffle the example order every epoch (default False).
        seed: Seed for shuffling and augmentation (default: unseeded).

    While training, crops are taken at random offsets; in eval mode they
    are centered and nothing is mirrored.
    """

    dense_fields: ClassVar[tuple[str, ...]] = ("data", "label")
    example_fields: ClassVar[tuple[str, ...]] = ()
    supports_mirror: ClassVar[bool] = True

    def __init__(self, spec: "OperatorSpec") -> None:
        super().__init__(spec)
        self.batch_size = read_positive_int(spec, "batch_size", 1)

        crop = spec.param("crop_size", 0)
        if isinstance(crop, bool) or not isinstance(crop, int) or crop < 0:
            raise ConfigurationError(
                f"Layer '{spec.display_name}': crop_size must be a non-negative integer",
                config_key="crop_size",
                expected="integer >= 0",
                got=crop,
            )
        self.crop_size = crop

        self.mirror = _read_flag(spec, "mirror", False)
        if self.mirror and not self.supports_mirror:
            raise ConfigurationError(
                f"Layer '{spec.display_name}': mirror is not supported by "
                f"{self.type_name}; flipping would break per-example targets",
                config_key="mirror",
                expected=False,
                got=True,
            )
        self.shuffle = _read_flag(spec, "shuffle", False)

        seed = spec.param("seed")
        self._generator = torch.Generator()
        if seed is None:
            self._generator.seed()
        else:
            self._generator.manual_seed(int(seed))

        self.training = True
        self._tensors: tuple[torch.Tensor, ...] = ()
        self._order: torch.Tensor | None = None
        self._pos = 0

    @property
    def fields(self) -> tuple[str, ...]:
        """Output field names, in forward order."""
        return self.dense_fields + self.example_fields

    def train(self, mode: bool = True) -> "DenseDataOperator":
        """Switch between training (random) and eval (deterministic) transforms."""
        self.training = mode
        return self

    def eval(self) -> "DenseDataOperator":
        return self.train(False)

    def reset(self, *tensors: torch.Tensor) -> None:
        """Replace the served data.

        Args:
            *tensors: One tensor per field, in ``fields`` order, all with
                the same number of examples. Dense fields must share
                their spatial size.

        Raises:
            ConfigurationError: On a field count, example count or
                spatial size mismatch.
        """
        name = self.spec.display_name
        if len(tensors) != len(self.fields):
            raise ConfigurationError(
                f"Layer '{name}': expected {len(self.fields)} tensors "
                f"{self.fields}, got {len(tensors)}",
                expected=len(self.fields),
                got=len(tensors),
            )

        count = tensors[0].shape[0]
        if count == 0:
            raise ConfigurationError(f"Layer '{name}': no examples given")
        for field_name, tensor in zip(self.fields, tensors):
            if tensor.shape[0] != count:
                raise ConfigurationError(
                    f"Layer '{name}': field '{field_name}' has {tensor.shape[0]} "
                    f"examples, expected {count}",
                )

        dense = tensors[:len(self.dense_fields)]
        size = tuple(dense[0].shape[-2:])
        for field_name, tensor in zip(self.dense_fields, dense):
            if tensor.dim() < 3 or tuple(tensor.shape[-2:]) != size:
                raise ConfigurationError(
                    f"Layer '{name}': field '{field_name}' has shape "
                    f"{tuple(tensor.shape)}, expected spatial size {size}",
                    expected=size,
                    got=tuple(tensor.shape),
                )
        if self.crop_size > min(size):
            raise ConfigurationError(
                f"Layer '{name}': crop_size {self.crop_size} exceeds image size {size}",
                config_key="crop_size",
                expected=f"<= {min(size)}",
                got=self.crop_size,
            )

        self._tensors = tensors
        self._order = self._new_order(count)
        self._pos = 0
        logger.debug(f"{self.type_name} '{self.name}' reset with {count} examples")

    def _new_order(self, count: int) -> torch.Tensor:
        if self.shuffle:
            return torch.randperm(count, generator=self._generator)
        return torch.arange(count)

    def _next_indices(self) -> list[int]:
        count = self._order.shape[0]
        indices: list[int] = []
        while len(indices) < self.batch_size:
            if self._pos == count:
                self._order = self._new_order(count)
                self._pos = 0
            take = min(self.batch_size - len(indices), count - self._pos)
            indices.extend(self._order[self._pos:self._pos + take].tolist())
            self._pos += take
        return indices

    def _transform(self, height: int, width: int) -> tuple[int, int, bool]:
        """Pick (top, left, flip) for one example."""
        crop = self.crop_size
        if not crop:
            top = left = 0
        elif self.training:
            top = int(torch.randint(height - crop + 1, (1,), generator=self._generator))
            left = int(torch.randint(width - crop + 1, (1,), generator=self._generator))
        else:
            top = (height - crop) // 2
            left = (width - crop) // 2

        flip = False
        if self.mirror and self.training:
            flip = bool(torch.randint(2, (1,), generator=self._generator))
        return top, left, flip

    def _crop_and_flip(
        self, example: torch.Tensor, top: int, left: int, flip: bool,
    ) -> torch.Tensor:
        if self.crop_size:
            example = example[..., top:top + self.crop_size, left:left + self.crop_size]
        if flip:
            example = example.flip(-1)
        return example

    def _adjust_example(
        self, field_name: str, example: torch.Tensor, top: int, left: int,
    ) -> torch.Tensor:
        """Adapt a per-example target to the crop. Identity by default."""
        return example

    def forward(self) -> tuple[torch.Tensor, ...]:
        if self._order is None:
            raise ConfigurationError(
                f"Layer '{self.spec.display_name}': reset() must be called before forward()",
            )

        num_dense = len(self.dense_fields)
        height, width = self._tensors[0].shape[-2:]
        columns: list[list[torch.Tensor]] = [[] for _ in self.fields]

        for index in self._next_indices():
            top, left, flip = self._transform(height, width)
            for k, tensor in enumerate(self._tensors):
                example = tensor[index]
                if k < num_dense:
                    example = self._crop_and_flip(example, top, left, flip)
                else:
                    example = self._adjust_example(self.fields[k], example, top, left)
                columns[k].append(example)

        return tuple(torch.stack(column) for column in columns)


class ImageLabelDataOperator(DenseDataOperator):
    """Images with pixel-wise label maps (semantic segmentation)."""

    dense_fields = ("data", "label")


class ImageDepthLabelDataOperator(DenseDataOperator):
    """Images with aligned depth maps and label maps."""

    dense_fields = ("data", "depth", "label")


class MeshImageLabelDataOperator(DenseDataOperator):
    """Images and label maps with per-example mesh vertex targets.

    Mesh vertices are given in the image's pixel coordinates and are
    shifted by the crop offset. Mirroring is rejected since it would
    also require a vertex correspondence permutation.
    """

    dense_fields = ("data", "label")
    example_fields = ("mesh",)
    supports_mirror = False

    def _adjust_example(
        self, field_name: str, example: torch.Tensor, top: int, left: int,
    ) -> torch.Tensor:
        if not self.crop_size:
            return example
        return example - torch.tensor([left, top], dtype=example.dtype)
