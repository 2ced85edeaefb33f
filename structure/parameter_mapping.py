"""Bidirectional mapping between the global weight vector and factor types.

``collect_global`` scatters every registered type's local weights into the
cached global vector ``w_cache``; ``distribute_global`` gathers a global
vector back into the types. Propagation touches every factor type, so
``distribute_global`` compares by value first and skips unchanged vectors.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .errors import ConsistencyError, FactorTypeNotFoundError
from .interfaces import FactorType
from .registry import FactorTypeRegistry

__all__ = ["ParameterMapping"]


@dataclass
class ParameterMapping:
    registry: FactorTypeRegistry = field(default_factory=FactorTypeRegistry)

    _w_cache: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=float), init=False, repr=False)

    def __post_init__(self) -> None:
        self.registry.on_changed.append(self._on_registry_changed)
        if len(self.registry) > 0:
            self.collect_global()

    def slots_for(self, type_id: int) -> np.ndarray:
        """Global indices owned by ``type_id``, in the type's local weight order."""
        if self.registry.get(type_id) is None:
            raise FactorTypeNotFoundError(int(type_id))
        return np.flatnonzero(self.registry.w_map == int(type_id))

    def dimension(self) -> int:
        return self.registry.dimension()

    @property
    def w_cache(self) -> np.ndarray:
        return self._w_cache

    def collect_global(self) -> np.ndarray:
        """Rebuild ``w_cache`` from the factor types' own weights."""
        dim = self.dimension()
        if self._w_cache.shape[0] != dim:
            self._w_cache = np.zeros(dim, dtype=float)
        offset = 0
        for ftype in self.registry:
            fw = np.asarray(ftype.get_w(), dtype=float).reshape(-1)
            fw_map = self.slots_for(ftype.get_type_id())
            if fw_map.shape[0] != fw.shape[0]:
                raise ConsistencyError(
                    f"fparams_to_w(): factor type {ftype.get_type_id()} owns "
                    f"{fw_map.shape[0]} slots but carries {fw.shape[0]} weights"
                )
            self._w_cache[fw_map] = fw
            offset += int(ftype.get_w_dim())
        if offset != self._w_cache.shape[0]:
            raise ConsistencyError(
                f"fparams_to_w(): collected {offset} weights for a cache of length {self._w_cache.shape[0]}"
            )
        return self._w_cache

    def distribute_global(self, w: np.ndarray) -> bool:
        """Push ``w`` into every factor type. Returns False when ``w`` is unchanged."""
        w_arr = np.asarray(w, dtype=float).reshape(-1)
        if np.array_equal(w_arr, self._w_cache):
            return False
        if w_arr.shape[0] != self._w_cache.shape[0]:
            raise ConsistencyError(
                f"w_to_fparams(): expected a weight vector of length {self._w_cache.shape[0]}, "
                f"got {w_arr.shape[0]}"
            )
        self._w_cache = w_arr.copy()
        offset = 0
        for ftype in self.registry:
            fw_map = self.slots_for(ftype.get_type_id())
            ftype.set_w(self._w_cache[fw_map].copy())
            offset += int(ftype.get_w_dim())
        if offset != self._w_cache.shape[0]:
            raise ConsistencyError(
                f"w_to_fparams(): distributed {offset} weights from a cache of length {self._w_cache.shape[0]}"
            )
        return True

    def _on_registry_changed(self, event: str, ftype: FactorType) -> None:  # noqa: ARG002
        self.collect_global()
