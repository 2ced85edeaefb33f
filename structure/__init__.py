"""Structured-output learning over factor graphs."""

from .errors import ConfigurationError, ConsistencyError, FactorTypeNotFoundError
from .interfaces import MAPInferenceType
from .model import FactorGraphModel
from .observation import FactorGraphFeatures, FactorGraphLabels, FactorGraphObservation
from .oracle import ArgmaxTrace, OracleState, ResultSet
from .table_factor_type import TableFactorType

__all__ = [
    "ConfigurationError",
    "ConsistencyError",
    "FactorTypeNotFoundError",
    "MAPInferenceType",
    "FactorGraphModel",
    "FactorGraphFeatures",
    "FactorGraphLabels",
    "FactorGraphObservation",
    "ArgmaxTrace",
    "OracleState",
    "ResultSet",
    "TableFactorType",
]
