"""Interfaces for the structured-output factor graph model.

Exposes strict typed Protocols for the external collaborators (factor types,
factors, factor graph instances, MAP inference engines) and the inference
mode enum.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Protocol, Sequence, runtime_checkable

import numpy as np

__all__ = [
    "MAPInferenceType",
    "FactorType",
    "Factor",
    "FactorGraphInstance",
    "FactorGraphSamples",
    "StructuredLabelSet",
    "LabelAssignment",
    "MAPInference",
    "InferenceFactory",
]


class MAPInferenceType(Enum):
    """MAP inference modes understood by the external inference engine."""

    TREE_MAX_PROD = "tree_max_prod"
    LOOPY_MAX_PROD = "loopy_max_prod"
    LP_RELAXATION = "lp_relaxation"
    TRWS_MAX_PROD = "trws_max_prod"
    GEMPLP = "gemplp"
    GRAPH_CUT = "graph_cut"

    @property
    def requires_tree(self) -> bool:
        return self is MAPInferenceType.TREE_MAX_PROD

    @property
    def requires_submodularity(self) -> bool:
        return self is MAPInferenceType.GRAPH_CUT


@runtime_checkable
class FactorType(Protocol):
    """Template shared by factors: parameters plus cardinality structure."""

    def get_type_id(self) -> int:
        ...

    def get_w_dim(self) -> int:
        ...

    def get_w(self) -> np.ndarray:
        """Return the type's local weight vector (length ``w_dim``)."""
        ...

    def set_w(self, w: np.ndarray) -> None:
        ...

    def get_cardinalities(self) -> Sequence[int]:
        """Domain size of every variable the factor touches."""
        ...

    def get_num_assignments(self) -> int:
        ...

    def index_from_universe_assignment(
        self, states: Sequence[int], variables: Sequence[int]
    ) -> int:
        """Table row for the assignment ``states`` restricted to ``variables``."""
        ...


@runtime_checkable
class Factor(Protocol):
    """Instantiated potential over a subset of an instance's variables."""

    def get_factor_type(self) -> FactorType:
        ...

    def get_data(self) -> np.ndarray:
        ...

    def get_variables(self) -> Sequence[int]:
        ...


@runtime_checkable
class LabelAssignment(Protocol):
    """Per-variable discrete states with per-variable loss weights."""

    def get_data(self) -> np.ndarray:
        ...

    def get_loss_weights(self) -> np.ndarray:
        ...


@runtime_checkable
class FactorGraphInstance(Protocol):
    """Per-example graph structure; energies are computed externally."""

    def connect_components(self) -> None:
        ...

    def is_tree_graph(self) -> bool:
        ...

    def compute_energies(self) -> None:
        """Recompute every factor's energy table from current type weights."""
        ...

    def evaluate_energy(self, states: np.ndarray) -> float:
        ...

    def loss_augmentation(self, y_truth: LabelAssignment) -> None:
        """Subtract the per-assignment loss from every energy table."""
        ...

    def get_factors(self) -> Sequence[Factor]:
        ...


@runtime_checkable
class FactorGraphSamples(Protocol):
    def get_sample(self, index: int) -> FactorGraphInstance:
        ...

    def get_num_samples(self) -> int:
        ...


@runtime_checkable
class StructuredLabelSet(Protocol):
    def get_label(self, index: int) -> LabelAssignment:
        ...

    def get_num_labels(self) -> int:
        ...


@runtime_checkable
class MAPInference(Protocol):
    """MAP inference engine bound to one factor graph instance."""

    def inference(self) -> Any:
        ...

    def get_structured_outputs(self) -> LabelAssignment:
        ...


InferenceFactory = Callable[[FactorGraphInstance, MAPInferenceType], MAPInference]
