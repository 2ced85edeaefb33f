"""Ordered registry of factor types and the global parameter map (``w_map``).

``w_map`` holds one type id per slot of the global weight vector. Slots of a
type are contiguous and appear in registration order; the number of slots
carrying id ``t`` equals ``w_dim`` of type ``t``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple
import warnings

import numpy as np

from .errors import ConfigurationError, ConsistencyError, FactorTypeNotFoundError
from .interfaces import FactorType

__all__ = ["FactorTypeRegistry", "RegistryChangeCallback"]

# (event, factor type) with event in {"add", "remove"}
RegistryChangeCallback = Callable[[str, FactorType], None]


@dataclass
class FactorTypeRegistry:
    """Registry with simple change hooks."""

    on_changed: List[RegistryChangeCallback] = field(default_factory=list)

    _types: List[FactorType] = field(default_factory=list, init=False, repr=False)
    _w_map: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int64), init=False, repr=False)

    def add(self, ftype: FactorType) -> bool:
        """Register ``ftype`` and append its slots to ``w_map``.

        Returns False (with a warning) when a type with the same id is
        already registered; the registry is left untouched in that case.
        """
        w_dim = int(ftype.get_w_dim())
        if w_dim <= 0:
            raise ConfigurationError(
                f"add_factor_type(): number of parameters can't be {w_dim} "
                f"(factor type id = {ftype.get_type_id()})"
            )
        type_id = int(ftype.get_type_id())
        if self.get(type_id) is not None:
            warnings.warn(
                f"add_factor_type(): factor_type (id = {type_id}) has been added!",
                RuntimeWarning,
                stacklevel=2,
            )
            return False
        self._w_map = np.concatenate([self._w_map, np.full(w_dim, type_id, dtype=np.int64)])
        self._types.append(ftype)
        self._emit("add", ftype)
        return True

    def remove(self, type_id: int) -> FactorType:
        """Unregister ``type_id`` and drop its slots, keeping the others in order."""
        type_id = int(type_id)
        for pos, ftype in enumerate(self._types):
            if int(ftype.get_type_id()) == type_id:
                break
        else:
            raise FactorTypeNotFoundError(type_id)
        removed = self._types.pop(pos)
        w_dim = int(removed.get_w_dim())
        prev_len = self._w_map.shape[0]
        self._w_map = self._w_map[self._w_map != type_id]
        if self._w_map.shape[0] != prev_len - w_dim:
            raise ConsistencyError(
                f"del_factor_type(): w_map shrank by {prev_len - self._w_map.shape[0]} "
                f"slots, expected {w_dim}"
            )
        self._emit("remove", removed)
        return removed

    def get(self, type_id: int) -> Optional[FactorType]:
        # ids are unique; first match wins
        for ftype in self._types:
            if int(ftype.get_type_id()) == int(type_id):
                return ftype
        return None

    def dimension(self) -> int:
        return int(self._w_map.shape[0])

    @property
    def w_map(self) -> np.ndarray:
        """Read-only view of the parameter map."""
        view = self._w_map.view()
        view.flags.writeable = False
        return view

    def types(self) -> Tuple[FactorType, ...]:
        return tuple(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self):
        return iter(tuple(self._types))

    def __contains__(self, type_id: object) -> bool:
        return isinstance(type_id, (int, np.integer)) and self.get(int(type_id)) is not None

    def _emit(self, event: str, ftype: FactorType) -> None:
        for cb in self.on_changed:
            cb(event, ftype)
