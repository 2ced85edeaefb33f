"""Table factor type: one weight block per joint assignment of its variables.

The energy table of a factor is laid out row-major with the *first* variable
varying fastest. For a pairwise binary type this gives:

    index 0 -> (0, 0)
    index 1 -> (1, 0)
    index 2 -> (0, 1)
    index 3 -> (1, 1)

Each table row owns ``data_size`` consecutive weights, so
``w_dim == num_assignments * data_size``.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from .errors import ConfigurationError, ConsistencyError

__all__ = ["TableFactorType"]


class TableFactorType:
    """Concrete factor type with a dense parameter table."""

    def __init__(
        self,
        type_id: int,
        cardinalities: Sequence[int],
        w: Optional[Sequence[float]] = None,
        w_dim: Optional[int] = None,
    ) -> None:
        cards = np.asarray(cardinalities, dtype=np.int64).reshape(-1)
        if cards.size == 0 or np.any(cards <= 0):
            raise ConfigurationError("cardinalities must be a non-empty vector of positive sizes")
        self._type_id = int(type_id)
        self._cardinalities = cards
        self._num_assignments = int(np.prod(cards))
        if w is not None:
            self._w = np.asarray(w, dtype=float).reshape(-1).copy()
        else:
            dim = self._num_assignments if w_dim is None else int(w_dim)
            self._w = np.zeros(dim, dtype=float)
        if w_dim is not None and int(w_dim) != self._w.shape[0]:
            raise ConfigurationError(f"w_dim {w_dim} does not match len(w) {self._w.shape[0]}")
        # cumulative strides, first variable fastest
        self._strides = np.concatenate(([1], np.cumprod(cards)[:-1])).astype(np.int64)

    def get_type_id(self) -> int:
        return self._type_id

    def get_w_dim(self) -> int:
        return int(self._w.shape[0])

    def get_w(self) -> np.ndarray:
        return self._w

    def set_w(self, w: np.ndarray) -> None:
        arr = np.asarray(w, dtype=float).reshape(-1)
        if arr.shape[0] != self._w.shape[0]:
            raise ConsistencyError(
                f"factor type {self._type_id}: expected {self._w.shape[0]} weights, got {arr.shape[0]}"
            )
        self._w = arr.copy()

    def get_cardinalities(self) -> np.ndarray:
        return self._cardinalities

    def get_num_assignments(self) -> int:
        return self._num_assignments

    @property
    def data_size(self) -> int:
        """Weights per table row (1 when the factor carries no features)."""
        return self.get_w_dim() // self._num_assignments

    def index_from_assignment(self, assignment: Sequence[int]) -> int:
        local = np.asarray(assignment, dtype=np.int64).reshape(-1)
        if local.shape != self._cardinalities.shape:
            raise ConsistencyError(
                f"factor type {self._type_id}: assignment of {local.shape[0]} states "
                f"for {self._cardinalities.shape[0]} variables"
            )
        if not np.all((local >= 0) & (local < self._cardinalities)):
            raise ConsistencyError(
                f"factor type {self._type_id}: states {local.tolist()} out of range "
                f"for cardinalities {self._cardinalities.tolist()}"
            )
        return int(np.dot(local, self._strides))

    def index_from_universe_assignment(self, states: Sequence[int], variables: Sequence[int]) -> int:
        universe = np.asarray(states, dtype=np.int64)
        return self.index_from_assignment(universe[np.asarray(variables, dtype=np.int64)])

    def __repr__(self) -> str:
        return (
            f"TableFactorType(type_id={self._type_id}, "
            f"cardinalities={self._cardinalities.tolist()}, w_dim={self.get_w_dim()})"
        )
