"""Joint feature vector psi(x, y) of a factor graph example.

psi is the negated energy basis, so that <w, psi(x, y)> = -E(x, y; w).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .errors import ConsistencyError
from .interfaces import FactorGraphSamples, LabelAssignment
from .parameter_mapping import ParameterMapping

__all__ = ["JointFeatureComputer"]


@dataclass
class JointFeatureComputer:
    features: FactorGraphSamples
    mapping: ParameterMapping

    def compute(self, example_index: int, label: LabelAssignment) -> np.ndarray:
        instance = self.features.get_sample(example_index)
        states = np.asarray(label.get_data(), dtype=np.int64)

        psi = np.zeros(self.mapping.dimension(), dtype=float)
        for factor in instance.get_factors():
            ftype = factor.get_factor_type()
            type_id = ftype.get_type_id()
            w_map = self.mapping.slots_for(type_id)
            if w_map.shape[0] != int(ftype.get_w_dim()):
                raise ConsistencyError(
                    f"factor type {type_id}: {w_map.shape[0]} slots for w_dim {ftype.get_w_dim()}"
                )
            dat = np.asarray(factor.get_data(), dtype=float).reshape(-1)
            dat_size = dat.shape[0]
            if w_map.shape[0] != dat_size * int(ftype.get_num_assignments()):
                raise ConsistencyError(
                    f"factor type {type_id}: {w_map.shape[0]} slots cannot hold "
                    f"{ftype.get_num_assignments()} assignments x {dat_size} features"
                )
            ei = int(ftype.index_from_universe_assignment(states, factor.get_variables()))
            psi[w_map[ei * dat_size:(ei + 1) * dat_size]] += dat

        # -E(x, y) = <w, psi(x, y)>
        return -psi
