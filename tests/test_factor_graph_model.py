from __future__ import annotations

import numpy as np
import pytest

from structure.errors import ConfigurationError
from structure.interfaces import MAPInferenceType
from structure.model import FactorGraphModel
from structure.observation import FactorGraphFeatures, FactorGraphLabels, FactorGraphObservation
from structure.table_factor_type import TableFactorType

from factor_graph_doubles import BruteForceInference, TinyFactorGraph


def test_features_and_labels_must_align():
    features = FactorGraphFeatures([TinyFactorGraph(cardinalities=[2])])
    labels = FactorGraphLabels()
    with pytest.raises(ConfigurationError, match="mismatch"):
        FactorGraphModel(features=features, labels=labels, inference_factory=BruteForceInference)


def test_inference_type_is_validated():
    with pytest.raises(ValueError):
        FactorGraphModel(
            features=FactorGraphFeatures(),
            labels=FactorGraphLabels(),
            inference_factory=BruteForceInference,
            inference_type="graph_cut",  # type: ignore[arg-type]
        )


def test_factor_type_accessors(chain_problem):
    problem = chain_problem()
    model = problem["model"]
    assert model.get_factor_types() == (problem["unary"], problem["pairwise"])
    assert model.get_factor_type(1) is problem["pairwise"]
    assert model.get_factor_type(2) is None
    assert model.get_dim() == model.dimension() == 8
    assert model.get_num_samples() == 1


def test_global_params_mapping_is_a_copy(chain_problem):
    model = chain_problem()["model"]
    w_map = model.get_global_params_mapping()
    assert w_map.tolist() == [0, 0, 0, 0, 1, 1, 1, 1]
    w_map[0] = 5
    assert model.get_global_params_mapping()[0] == 0


def test_del_factor_type_shrinks_dimension(chain_problem):
    problem = chain_problem()
    model = problem["model"]
    model.w_to_fparams(np.arange(8, dtype=float))
    removed = model.del_factor_type(0)
    assert removed is problem["unary"]
    assert model.dimension() == 4
    assert model.get_params_mapping(1).tolist() == [0, 1, 2, 3]
    assert model.fparams_to_w().tolist() == [4.0, 5.0, 6.0, 7.0]


def test_w_to_fparams_reports_propagation(chain_problem):
    model = chain_problem()["model"]
    w = np.linspace(-1.0, 1.0, 8)
    assert model.w_to_fparams(w) is True
    assert model.w_to_fparams(w.copy()) is False


def test_mapping_hooks_fire_after_cache_rebuild():
    seen = []
    model = FactorGraphModel(
        features=FactorGraphFeatures(),
        labels=FactorGraphLabels(),
        inference_factory=BruteForceInference,
        inference_type=MAPInferenceType.LP_RELAXATION,
    )
    model.on_mapping_changed.append(lambda w_map: seen.append((w_map.tolist(), model.fparams_to_w().tolist())))
    model.add_factor_type(TableFactorType(type_id=1, cardinalities=[2], w=[0.5, -0.5]))
    model.add_factor_type(TableFactorType(type_id=2, cardinalities=[3], w=[1.0, 1.0, 1.0]))
    model.del_factor_type(1)
    assert seen == [
        ([1, 1], [0.5, -0.5]),
        ([1, 1, 2, 2, 2], [0.5, -0.5, 1.0, 1.0, 1.0]),
        ([2, 2, 2], [1.0, 1.0, 1.0]),
    ]


def test_duplicate_factor_type_does_not_fire_hooks(chain_problem):
    model = chain_problem()["model"]
    seen = []
    model.on_mapping_changed.append(seen.append)
    with pytest.warns(RuntimeWarning):
        assert model.add_factor_type(TableFactorType(type_id=0, cardinalities=[2])) is False
    assert seen == []


def test_joint_feature_vector_uses_label_states(chain_problem):
    model = chain_problem()["model"]
    psi = model.get_joint_feature_vector(0, FactorGraphObservation([0, 0, 0]))
    assert psi.tolist() == [-1.5, -1.5, 0.0, 0.0, -2.0, 0.0, 0.0, 0.0]
