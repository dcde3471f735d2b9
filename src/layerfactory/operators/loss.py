"""
LayerFactory Loss and Evaluation Operators
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import torch
import torch.nn.functional as F

from layerfactory.core.validation import read_float, read_positive_int
from layerfactory.exceptions import ConfigurationError
from layerfactory.operators.base import BaseOperator

if TYPE_CHECKING:
    from layerfactory.models.operator_spec import OperatorSpec

# torch.nn.functional.cross_entropy default
_NO_IGNORE = -100


def _read_axis(spec: "OperatorSpec") -> int:
    axis = spec.param("axis", 1)
    if isinstance(axis, bool) or not isinstance(axis, int):
        raise ConfigurationError(
            f"Layer '{spec.display_name}': axis must be an integer",
            config_key="axis",
            got=axis,
        )
    return axis


class SoftmaxWithLossOperator(BaseOperator):
    """Softmax followed by multinomial logistic loss.

    Parameters:
        axis: Class axis of the scores (default 1).
        ignore_label: Label value excluded from the loss (default none).
        normalize: Average over non-ignored labels if True (default),
            otherwise divide the summed loss by the batch size.
    """

    def __init__(self, spec: "OperatorSpec") -> None:
        super().__init__(spec)
        self.axis = _read_axis(spec)
        self.ignore_label: int | None = spec.param("ignore_label")
        self.normalize = bool(spec.param("normalize", True))

    def forward(self, scores: torch.Tensor, labels: torch.Tensor) -> torch.Tensor:
        """Compute the loss.

        Args:
            scores: Unnormalized class scores.
            labels: Integer labels, shaped like scores without the class axis.

        Returns:
            Scalar loss tensor.
        """
        if self.axis != 1:
            scores = scores.movedim(self.axis, 1)
        ignore_index = _NO_IGNORE if self.ignore_label is None else self.ignore_label

        if self.normalize:
            return F.cross_entropy(
                scores, labels.long(), ignore_index=ignore_index, reduction="mean",
            )
        total = F.cross_entropy(
            scores, labels.long(), ignore_index=ignore_index, reduction="sum",
        )
        return total / scores.shape[0]


class AccuracyOperator(BaseOperator):
    """Top-k classification accuracy.

    Parameters:
        top_k: A prediction counts if the label is among the k best scores (default 1).
        axis: Class axis of the scores (default 1).
        ignore_label: Label value excluded from the count (default none).
    """

    def __init__(self, spec: "OperatorSpec") -> None:
        super().__init__(spec)
        self.top_k = read_positive_int(spec, "top_k", 1)
        self.axis = _read_axis(spec)
        self.ignore_label: int | None = spec.param("ignore_label")

    def forward(self, scores: torch.Tensor, labels: torch.Tensor) -> torch.Tensor:
        """Compute accuracy as a scalar tensor in [0, 1]."""
        num_classes = scores.shape[self.axis]
        flat_scores = scores.movedim(self.axis, -1).reshape(-1, num_classes)
        flat_labels = labels.reshape(-1).long()

        if self.ignore_label is None:
            valid = torch.ones_like(flat_labels, dtype=torch.bool)
        else:
            valid = flat_labels != self.ignore_label

        k = min(self.top_k, num_classes)
        top = flat_scores.topk(k, dim=-1).indices
        hits = (top == flat_labels.unsqueeze(-1)).any(dim=-1) & valid
        count = valid.sum().clamp(min=1)
        return hits.sum().to(flat_scores.dtype) / count


class CRFLossOperator(BaseOperator):
    """Segmentation loss with a pairwise conditional random field term.

    The unary term is the softmax cross-entropy against the labels. The
    pairwise term penalizes neighbouring pixels (4-connectivity) whose
    predicted class distributions disagree, weighted by how similar the
    pixels look in the guidance image:

        affinity(p, q) = exp(-|I_p - I_q|^2 / (2 * sigma^2))
        pairwise = mean over neighbours of affinity * (1 - <P_p, P_q>)

    Parameters:
        pairwise_weight: Weight of the pairwise term (default 1.0).
        sigma: Bandwidth of the image affinity (default 0.1).
        ignore_label: Label value excluded from the unary term (default none).
    """

    def __init__(self, spec: "OperatorSpec") -> None:
        super().__init__(spec)
        self.pairwise_weight = read_float(spec, "pairwise_weight", 1.0, minimum=0.0)
        self.sigma = read_float(spec, "sigma", 0.1)
        if self.sigma <= 0:
            raise ConfigurationError(
                f"Layer '{spec.display_name}': sigma must be positive",
                config_key="sigma",
                expected="> 0",
                got=self.sigma,
            )
        self.ignore_label: int | None = spec.param("ignore_label")

    def pairwise(self, probs: torch.Tensor, image: torch.Tensor) -> torch.Tensor:
        """Mean affinity-weighted disagreement between neighbouring pixels."""
        terms = []
        for dim in (-1, -2):
            if probs.shape[dim] < 2:
                continue
            length = probs.shape[dim]
            p_a, p_b = probs.narrow(dim, 0, length - 1), probs.narrow(dim, 1, length - 1)
            i_a, i_b = image.narrow(dim, 0, length - 1), image.narrow(dim, 1, length - 1)

            affinity = torch.exp(-((i_a - i_b) ** 2).sum(dim=1) / (2 * self.sigma ** 2))
            disagreement = 1.0 - (p_a * p_b).sum(dim=1)
            terms.append((affinity * disagreement).flatten())

        if not terms:
            return probs.new_zeros(())
        return torch.cat(terms).mean()

    def forward(
        self,
        scores: torch.Tensor,
        labels: torch.Tensor,
        image: torch.Tensor,
    ) -> torch.Tensor:
        """Compute the loss.

        Args:
            scores: Unnormalized class scores (N, K, H, W).
            labels: Integer label maps (N, H, W).
            image: Guidance image (N, C, H, W).

        Returns:
            Scalar loss tensor.
        """
        if tuple(image.shape[-2:]) != tuple(scores.shape[-2:]):
            raise ConfigurationError(
                f"Layer '{self.spec.display_name}': image size {tuple(image.shape[-2:])} "
                f"does not match scores {tuple(scores.shape[-2:])}",
            )

        ignore_index = _NO_IGNORE if self.ignore_label is None else self.ignore_label
        unary = F.cross_entropy(scores, labels.long(), ignore_index=ignore_index)

        if self.pairwise_weight == 0:
            return unary
        probs = F.softmax(scores, dim=1)
        return unary + self.pairwise_weight * self.pairwise(probs, image.to(probs.dtype))
