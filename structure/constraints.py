"""Primal QP setup: regularization matrix and box bounds on the weights.

Graph-cut inference needs submodular pairwise energies. For a binary
pairwise factor with the table layout

    w[0] = E(0, 0), w[1] = E(1, 0), w[2] = E(0, 1), w[3] = E(1, 1)

submodularity is w[1] + w[2] - w[0] - w[3] >= 0. The model is
over-parameterized, so the constraint is imposed as w[0] = w[3] = 0 and
w[1], w[2] >= 0.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .errors import ConsistencyError
from .interfaces import MAPInferenceType
from .parameter_mapping import ParameterMapping

__all__ = ["build_primal_constraints"]


def _is_pairwise_binary(cardinalities: np.ndarray) -> bool:
    return cardinalities.shape[0] == 2 and bool(np.all(cardinalities == 2))


def build_primal_constraints(
    regularization: float,
    inference_type: MAPInferenceType,
    mapping: ParameterMapping,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return ``(C, lb, ub)`` over the current global weight vector."""
    dim_w = mapping.dimension()
    C = float(regularization) * np.eye(dim_w)
    lb = np.full(dim_w, -np.inf)
    ub = np.full(dim_w, np.inf)

    if not inference_type.requires_submodularity:
        return C, lb, ub

    for ftype in mapping.registry:
        card = np.asarray(ftype.get_cardinalities()).reshape(-1)
        if not _is_pairwise_binary(card):
            continue
        # TODO: support edge features on pairwise factors (w_dim = 4 * num_edge_features)
        if int(ftype.get_w_dim()) != 4:
            raise ConsistencyError(
                f"graph cut doesn't support edge features currently "
                f"(factor type {ftype.get_type_id()} has w_dim {ftype.get_w_dim()})"
            )
        fw_map = mapping.slots_for(ftype.get_type_id())
        lb[fw_map[[0, 3]]] = 0.0
        ub[fw_map[[0, 3]]] = 0.0
        lb[fw_map[[1, 2]]] = 0.0
    return C, lb, ub
