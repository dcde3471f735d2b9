"""
LayerFactory Mesh Operators
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import torch
import torch.nn.functional as F

from layerfactory.exceptions import ConfigurationError
from layerfactory.operators.base import BaseOperator

if TYPE_CHECKING:
    from layerfactory.models.operator_spec import OperatorSpec


class Image2MeshOperator(BaseOperator):
    """Samples image features at mesh vertex positions.

    Each vertex gathers the bilinearly interpolated feature vector at its
    (x, y) image position. Vertices outside the image read zeros.

    Parameters:
        normalized: Vertex coordinates are in [-1, 1] rather than pixels
            (default False).
    """

    def __init__(self, spec: "OperatorSpec") -> None:
        super().__init__(spec)
        normalized = spec.param("normalized", False)
        if not isinstance(normalized, bool):
            raise ConfigurationError(
                f"Layer '{spec.display_name}': normalized must be a boolean",
                config_key="normalized",
                expected="a boolean",
                got=normalized,
            )
        self.normalized = normalized

    def forward(self, features: torch.Tensor, vertices: torch.Tensor) -> torch.Tensor:
        """Gather per-vertex features.

        Args:
            features: Feature maps (N, C, H, W).
            vertices: Vertex positions (N, V, 2) as (x, y).

        Returns:
            Per-vertex features (N, C, V).
        """
        if vertices.dim() != 3 or vertices.shape[-1] != 2:
            raise ConfigurationError(
                f"Layer '{self.spec.display_name}': vertices must be shaped (N, V, 2), "
                f"got {tuple(vertices.shape)}",
            )

        grid = vertices.to(features.dtype)
        if not self.normalized:
            height, width = features.shape[-2:]
            scale = torch.tensor(
                [max(width - 1, 1), max(height - 1, 1)],
                dtype=features.dtype,
                device=features.device,
            )
            grid = grid * (2.0 / scale) - 1.0

        sampled = F.grid_sample(
            features,
            grid.unsqueeze(1),
            mode="bilinear",
            padding_mode="zeros",
            align_corners=True,
        )
        return sampled.squeeze(2)
