from __future__ import annotations

import numpy as np
import pytest

from structure.errors import ConsistencyError, FactorTypeNotFoundError
from structure.joint_features import JointFeatureComputer
from structure.observation import FactorGraphFeatures, FactorGraphObservation
from structure.parameter_mapping import ParameterMapping
from structure.table_factor_type import TableFactorType

from factor_graph_doubles import TableFactor, TinyFactorGraph


def _single_factor_setup(data):
    ftype = TableFactorType(type_id=3, cardinalities=[2], w_dim=4)
    fg = TinyFactorGraph(cardinalities=[2])
    fg.add_factor(TableFactor(ftype, [0], np.asarray(data, dtype=float)))
    features = FactorGraphFeatures([fg])
    mapping = ParameterMapping()
    mapping.registry.add(ftype)
    return JointFeatureComputer(features=features, mapping=mapping), ftype


def test_single_factor_fills_assignment_block_with_negated_data():
    jfc, _ = _single_factor_setup([1.0, 1.0])
    psi = jfc.compute(0, FactorGraphObservation([1]))
    assert psi.tolist() == [0.0, 0.0, -1.0, -1.0]


def test_block_is_offset_by_earlier_factor_types():
    ftype_other = TableFactorType(type_id=9, cardinalities=[3])
    ftype = TableFactorType(type_id=3, cardinalities=[2], w_dim=4)
    fg = TinyFactorGraph(cardinalities=[2])
    fg.add_factor(TableFactor(ftype, [0], np.array([2.0, 3.0])))
    mapping = ParameterMapping()
    mapping.registry.add(ftype_other)
    mapping.registry.add(ftype)
    jfc = JointFeatureComputer(features=FactorGraphFeatures([fg]), mapping=mapping)
    psi = jfc.compute(0, FactorGraphObservation([0]))
    assert psi.tolist() == [0.0, 0.0, 0.0, -2.0, -3.0, 0.0, 0.0]


def test_shared_factor_type_accumulates(chain_problem):
    problem = chain_problem(truths=[(1, 1, 1)])
    model = problem["model"]
    psi = model.get_joint_feature_vector(0, FactorGraphObservation([1, 1, 1]))
    # unary slots: assignment 1 -> slots 2,3; data (1,0) + (0,1) + (.5,.5)
    assert psi[:4].tolist() == [0.0, 0.0, -1.5, -1.5]
    # pairwise (1,1) -> table row 3 -> global slot 7, two edges
    assert psi[4:].tolist() == [0.0, 0.0, 0.0, -2.0]


def test_inner_product_is_negative_energy(chain_problem):
    problem = chain_problem()
    model = problem["model"]
    rng = np.random.default_rng(3)
    w = rng.normal(size=model.dimension())
    model.w_to_fparams(w)
    fg = problem["graphs"][0]
    fg.compute_energies()
    for states in ([0, 0, 0], [0, 1, 1], [1, 0, 1], [1, 1, 1]):
        psi = model.get_joint_feature_vector(0, FactorGraphObservation(states))
        assert float(np.dot(w, psi)) == pytest.approx(-fg.evaluate_energy(np.asarray(states)))


def test_data_size_mismatch_raises():
    jfc, _ = _single_factor_setup([1.0, 1.0, 1.0])
    with pytest.raises(ConsistencyError):
        jfc.compute(0, FactorGraphObservation([0]))


def test_unregistered_factor_type_raises():
    ftype = TableFactorType(type_id=3, cardinalities=[2])
    fg = TinyFactorGraph(cardinalities=[2])
    fg.add_factor(TableFactor(ftype, [0], np.ones(1)))
    jfc = JointFeatureComputer(features=FactorGraphFeatures([fg]), mapping=ParameterMapping())
    with pytest.raises(FactorTypeNotFoundError):
        jfc.compute(0, FactorGraphObservation([0]))
