from __future__ import annotations

from typing import Any, Callable, Dict, Sequence

import pytest

from structure.interfaces import MAPInferenceType
from structure.model import FactorGraphModel
from structure.observation import FactorGraphFeatures, FactorGraphLabels, FactorGraphObservation
from structure.table_factor_type import TableFactorType

from factor_graph_doubles import BruteForceInference, chain_graph


@pytest.fixture
def chain_problem() -> Callable[..., Dict[str, Any]]:
    """Build a binary chain model: unary type 0 (2 features), pairwise type 1."""

    def build(
        inference_type: MAPInferenceType = MAPInferenceType.TREE_MAX_PROD,
        tree: bool = True,
        truths: Sequence[Sequence[int]] = ((0, 1, 1),),
        unary_data: Sequence[Sequence[Sequence[float]]] = (((1.0, 0.0), (0.0, 1.0), (0.5, 0.5)),),
        verbose: bool = False,
    ) -> Dict[str, Any]:
        unary = TableFactorType(type_id=0, cardinalities=[2], w=[0.0] * 4)
        pairwise = TableFactorType(type_id=1, cardinalities=[2, 2], w=[0.0] * 4)
        features = FactorGraphFeatures()
        labels = FactorGraphLabels()
        graphs = []
        for truth, dat in zip(truths, unary_data):
            fg = chain_graph(unary, pairwise, dat, tree=tree)
            graphs.append(fg)
            features.add_sample(fg)
            labels.add_label(FactorGraphObservation(truth))
        BruteForceInference.instances.clear()
        model = FactorGraphModel(
            features=features,
            labels=labels,
            inference_factory=BruteForceInference,
            inference_type=inference_type,
            verbose=verbose,
        )
        model.add_factor_type(unary)
        model.add_factor_type(pairwise)
        return {
            "model": model,
            "unary": unary,
            "pairwise": pairwise,
            "graphs": graphs,
            "labels": labels,
        }

    return build
