"""Weighted Hamming loss between two label assignments."""

from __future__ import annotations

import numpy as np

from .errors import ConsistencyError
from .interfaces import LabelAssignment

__all__ = ["hamming_loss"]


def hamming_loss(y_truth: LabelAssignment, y_pred: LabelAssignment) -> float:
    """Sum of the truth's loss weights over positions where the states differ.

    With unit loss weights this is the Hamming distance.
    """
    s_truth = np.asarray(y_truth.get_data())
    s_pred = np.asarray(y_pred.get_data())
    if s_truth.shape[0] != s_pred.shape[0]:
        raise ConsistencyError(
            f"delta_loss(): label lengths differ ({s_truth.shape[0]} vs {s_pred.shape[0]})"
        )
    weights = np.asarray(y_truth.get_loss_weights(), dtype=float)
    return float(np.sum(weights[s_truth != s_pred]))
