"""Label assignments and the per-example containers fed to the model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from .interfaces import FactorGraphInstance

__all__ = ["FactorGraphObservation", "FactorGraphFeatures", "FactorGraphLabels"]


class FactorGraphObservation:
    """Discrete state per variable, with optional per-variable loss weights.

    Unweighted observations weigh every position by 1, which turns the
    weighted Hamming loss into the plain Hamming distance.
    """

    def __init__(self, states: Sequence[int], loss_weights: Optional[Sequence[float]] = None) -> None:
        self._states = np.asarray(states, dtype=np.int64).reshape(-1)
        if loss_weights is None:
            self._loss_weights = np.ones(self._states.shape[0], dtype=float)
        else:
            self._loss_weights = np.asarray(loss_weights, dtype=float).reshape(-1)
        if self._loss_weights.shape[0] != self._states.shape[0]:
            raise ValueError(
                f"loss_weights length {self._loss_weights.shape[0]} does not match "
                f"number of variables {self._states.shape[0]}"
            )

    def get_data(self) -> np.ndarray:
        return self._states

    def get_loss_weights(self) -> np.ndarray:
        return self._loss_weights

    def __repr__(self) -> str:
        return f"FactorGraphObservation(states={self._states.tolist()})"


@dataclass
class FactorGraphFeatures:
    """Ordered collection of factor graph instances, one per example."""

    samples: List[FactorGraphInstance] = field(default_factory=list)

    def add_sample(self, instance: FactorGraphInstance) -> int:
        self.samples.append(instance)
        return len(self.samples) - 1

    def get_sample(self, index: int) -> FactorGraphInstance:
        return self.samples[index]

    def get_num_samples(self) -> int:
        return len(self.samples)


@dataclass
class FactorGraphLabels:
    """Ground-truth observations aligned with ``FactorGraphFeatures``."""

    labels: List[FactorGraphObservation] = field(default_factory=list)

    def add_label(self, label: FactorGraphObservation) -> int:
        self.labels.append(label)
        return len(self.labels) - 1

    def get_label(self, index: int) -> FactorGraphObservation:
        return self.labels[index]

    def get_num_labels(self) -> int:
        return len(self.labels)
