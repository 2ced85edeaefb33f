"""Factor graph model for structured-output learning.

The model owns the factor type registry, the global parameter mapping and the
loss-augmented argmax oracle, and exposes the operations a structured SVM
solver needs:

    - add_factor_type / del_factor_type / get_factor_type
    - dimension, get_joint_feature_vector
    - argmax(w, index, training) -> ResultSet
    - delta_loss(y_truth, y_pred)
    - init_primal_opt(regularization) -> (C, lb, ub)

Mutation (add/del, w_to_fparams) must not overlap with argmax or
get_joint_feature_vector on the same model instance; callers that
parallelize across examples serialize mutation externally.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

import numpy as np

from .constraints import build_primal_constraints
from .errors import ConfigurationError
from .interfaces import (
    FactorGraphSamples,
    FactorType,
    InferenceFactory,
    LabelAssignment,
    MAPInferenceType,
    StructuredLabelSet,
)
from .joint_features import JointFeatureComputer
from .loss import hamming_loss
from .oracle import ArgmaxCallback, ArgmaxOracle, ArgmaxTrace, OracleState, ResultSet
from .parameter_mapping import ParameterMapping
from .registry import FactorTypeRegistry

__all__ = ["FactorGraphModel", "MappingChangedCallback"]

MappingChangedCallback = Callable[[np.ndarray], None]

_ORACLE_SETTINGS = ("inference_type", "verbose")


@dataclass
class FactorGraphModel:
    """Structured model over factor graph examples with simple event hooks."""

    features: FactorGraphSamples
    labels: StructuredLabelSet
    inference_factory: InferenceFactory
    inference_type: MAPInferenceType = MAPInferenceType.TREE_MAX_PROD
    verbose: bool = False

    on_argmax: List[ArgmaxCallback] = field(default_factory=list)
    on_mapping_changed: List[MappingChangedCallback] = field(default_factory=list)

    _registry: FactorTypeRegistry = field(init=False, repr=False)
    _mapping: ParameterMapping = field(init=False, repr=False)
    _joint_features: JointFeatureComputer = field(init=False, repr=False)
    _oracle: ArgmaxOracle = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._validate_configuration()
        self._registry = FactorTypeRegistry()
        self._mapping = ParameterMapping(registry=self._registry)
        # registered after the mapping so hooks see the rebuilt cache
        self._registry.on_changed.append(self._emit_mapping_changed)
        self._joint_features = JointFeatureComputer(features=self.features, mapping=self._mapping)
        self._oracle = ArgmaxOracle(
            features=self.features,
            labels=self.labels,
            mapping=self._mapping,
            joint_features=self._joint_features,
            inference_factory=self.inference_factory,
            inference_type=self.inference_type,
            verbose=self.verbose,
            on_argmax=self.on_argmax,
        )

    def __setattr__(self, name: str, value) -> None:
        # the oracle keeps its own copy of the inference settings
        if name in _ORACLE_SETTINGS and "_oracle" in self.__dict__:
            if name == "inference_type" and not isinstance(value, MAPInferenceType):
                raise ValueError(f"inference_type must be a MAPInferenceType, got {value!r}")
            setattr(self._oracle, name, value)
        super().__setattr__(name, value)

    # --- factor types ---

    def add_factor_type(self, ftype: FactorType) -> bool:
        return self._registry.add(ftype)

    def del_factor_type(self, ftype_id: int) -> FactorType:
        return self._registry.remove(ftype_id)

    def get_factor_type(self, ftype_id: int) -> Optional[FactorType]:
        return self._registry.get(ftype_id)

    def get_factor_types(self) -> Tuple[FactorType, ...]:
        return self._registry.types()

    # --- parameter mapping ---

    def get_global_params_mapping(self) -> np.ndarray:
        return np.array(self._registry.w_map, copy=True)

    def get_params_mapping(self, ftype_id: int) -> np.ndarray:
        return self._mapping.slots_for(ftype_id)

    def dimension(self) -> int:
        return self._mapping.dimension()

    def get_dim(self) -> int:
        return self.dimension()

    def get_num_samples(self) -> int:
        return int(self.features.get_num_samples())

    def fparams_to_w(self) -> np.ndarray:
        return self._mapping.collect_global().copy()

    def w_to_fparams(self, w: np.ndarray) -> bool:
        return self._mapping.distribute_global(w)

    # --- structured learning ---

    def get_joint_feature_vector(self, feat_idx: int, y: LabelAssignment) -> np.ndarray:
        return self._joint_features.compute(feat_idx, y)

    def argmax(self, w: np.ndarray, feat_idx: int, training: bool = True) -> ResultSet:
        return self._oracle.argmax(w, feat_idx, training)

    def delta_loss(self, y1: LabelAssignment, y2: LabelAssignment) -> float:
        return hamming_loss(y1, y2)

    def init_primal_opt(self, regularization: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Regularization matrix and box bounds for QP-based solvers."""
        return build_primal_constraints(regularization, self.inference_type, self._mapping)

    @property
    def oracle_state(self) -> OracleState:
        return self._oracle.state

    @property
    def last_trace(self) -> Optional[ArgmaxTrace]:
        return self._oracle.last_trace

    # --- internals ---

    def _emit_mapping_changed(self, event: str, ftype: FactorType) -> None:  # noqa: ARG002
        if not self.on_mapping_changed:
            return
        w_map = self.get_global_params_mapping()
        for cb in self.on_mapping_changed:
            cb(w_map)

    def _validate_configuration(self) -> None:
        if not isinstance(self.inference_type, MAPInferenceType):
            raise ValueError(f"inference_type must be a MAPInferenceType, got {self.inference_type!r}")
        assert callable(self.inference_factory), "inference_factory must be callable"
        num_samples = int(self.features.get_num_samples())
        num_labels = int(self.labels.get_num_labels())
        if num_samples != num_labels:
            raise ConfigurationError(
                f"features/labels length mismatch ({num_samples} samples, {num_labels} labels)"
            )
