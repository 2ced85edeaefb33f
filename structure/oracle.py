"""Loss-augmented argmax (max-oracle) for margin-based structured training.

The margin constraints of a structured SVM are

    E(x_i, y; w) - E(x_i, y_i; w) >= L(y_i, y) - xi_i

so xi_i is bounded below by the max-oracle

    max_y { L(y_i, y) - E(x_i, y; w) + E(x_i, y_i; w) }
      = -min_y { E(x_i, y; w) - L(y_i, y) } + E(x_i, y_i; w).

Inference minimizes energy over the loss-augmented tables, so the oracle value
is recovered as [L(y_i, y*) - E(x_i, y*; w)] + E(x_i, y_i; w), where the
energy of y* is evaluated on the augmented tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

import numpy as np

from .errors import ConsistencyError
from .interfaces import (
    FactorGraphSamples,
    InferenceFactory,
    LabelAssignment,
    MAPInferenceType,
    StructuredLabelSet,
)
from .joint_features import JointFeatureComputer
from .loss import hamming_loss
from .parameter_mapping import ParameterMapping

__all__ = ["OracleState", "ResultSet", "ArgmaxTrace", "ArgmaxOracle", "ArgmaxCallback"]


class OracleState(Enum):
    IDLE = "idle"
    PREPARED = "prepared"
    ENERGIES_COMPUTED = "energies_computed"
    LOSS_AUGMENTED = "loss_augmented"
    INFERRED = "inferred"
    DONE = "done"


@dataclass
class ResultSet:
    """Output of one argmax call."""

    argmax: LabelAssignment
    psi_truth: np.ndarray
    psi_pred: np.ndarray
    score: float
    delta: float
    psi_computed: bool = True

    def slack(self, w: np.ndarray) -> float:
        """<w, psi_pred> + delta - <w, psi_truth>."""
        w_arr = np.asarray(w, dtype=float)
        return float(np.dot(w_arr, self.psi_pred) + self.delta - np.dot(w_arr, self.psi_truth))


@dataclass(frozen=True)
class ArgmaxTrace:
    """Diagnostics of a single argmax call."""

    example_index: int
    training: bool
    w: np.ndarray
    states_truth: np.ndarray
    states_pred: np.ndarray
    energy_truth: float
    energy_pred: float
    dot_truth: float
    dot_pred: float
    delta: float
    score: float
    slack: float


ArgmaxCallback = Callable[[ArgmaxTrace], None]


@dataclass
class ArgmaxOracle:
    features: FactorGraphSamples
    labels: StructuredLabelSet
    mapping: ParameterMapping
    joint_features: JointFeatureComputer
    inference_factory: InferenceFactory
    inference_type: MAPInferenceType = MAPInferenceType.TREE_MAX_PROD
    verbose: bool = False
    on_argmax: List[ArgmaxCallback] = field(default_factory=list)

    state: OracleState = field(default=OracleState.IDLE, init=False)
    last_trace: Optional[ArgmaxTrace] = field(default=None, init=False, repr=False)

    def argmax(self, w: np.ndarray, example_index: int, training: bool = True) -> ResultSet:
        self.state = OracleState.IDLE
        fg = self.features.get_sample(example_index)

        # prepare factor graph
        fg.connect_components()
        if self.inference_type.requires_tree and not fg.is_tree_graph():
            raise ConsistencyError(
                f"argmax(): {self.inference_type.name} requires a tree, "
                f"example {example_index} is not a tree graph"
            )
        self.state = OracleState.PREPARED

        # update factor parameters
        self.mapping.distribute_global(w)
        fg.compute_energies()
        self.state = OracleState.ENERGIES_COMPUTED

        y_truth = self.labels.get_label(example_index)
        states_gt = np.asarray(y_truth.get_data())

        # E(x_i, y_i; w)
        psi_truth = self.joint_features.compute(example_index, y_truth)
        energy_gt = float(fg.evaluate_energy(states_gt))
        score = energy_gt

        # - min_y [ E(x_i, y; w) - delta(y_i, y) ]
        if training:
            fg.loss_augmentation(y_truth)
            self.state = OracleState.LOSS_AUGMENTED

        infer_met = self.inference_factory(fg, self.inference_type)
        infer_met.inference()
        y_star = infer_met.get_structured_outputs()
        self.state = OracleState.INFERRED

        states_star = np.asarray(y_star.get_data())
        psi_pred = self.joint_features.compute(example_index, y_star)
        l_energy_pred = float(fg.evaluate_energy(states_star))
        score -= l_energy_pred
        delta = hamming_loss(y_truth, y_star)

        result = ResultSet(argmax=y_star, psi_truth=psi_truth, psi_pred=psi_pred, score=score, delta=delta)
        self.state = OracleState.DONE

        if self.on_argmax or self.verbose:
            self._emit(
                w,
                example_index,
                training,
                result,
                states_gt=states_gt,
                states_star=states_star,
                energy_gt=energy_gt,
                energy_pred=l_energy_pred,
            )
        return result

    def _emit(
        self,
        w: np.ndarray,
        example_index: int,
        training: bool,
        result: ResultSet,
        *,
        states_gt: np.ndarray,
        states_star: np.ndarray,
        energy_gt: float,
        energy_pred: float,
    ) -> ArgmaxTrace:
        w_arr = np.asarray(w, dtype=float).copy()
        dot_pred = float(np.dot(w_arr, result.psi_pred))
        dot_truth = float(np.dot(w_arr, result.psi_truth))
        trace = ArgmaxTrace(
            example_index=int(example_index),
            training=bool(training),
            w=w_arr,
            states_truth=states_gt.copy(),
            states_pred=states_star.copy(),
            energy_truth=energy_gt,
            energy_pred=energy_pred,
            dot_truth=dot_truth,
            dot_pred=dot_pred,
            delta=float(result.delta),
            score=float(result.score),
            slack=dot_pred + float(result.delta) - dot_truth,
        )
        if self.verbose:
            self.last_trace = trace
        for cb in self.on_argmax:
            cb(trace)
        return trace
