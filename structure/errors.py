"""Error taxonomy for the factor graph model.

All errors signal caller misuse or a broken internal invariant; none of them
are meant to be caught and retried inside a single call.
"""

from __future__ import annotations

__all__ = [
    "FactorGraphModelError",
    "ConfigurationError",
    "ConsistencyError",
    "FactorTypeNotFoundError",
]


class FactorGraphModelError(RuntimeError):
    """Base exception for factor graph model utilities."""


class ConfigurationError(FactorGraphModelError, ValueError):
    """Invalid factor type registration or model configuration."""


class ConsistencyError(FactorGraphModelError, AssertionError):
    """An internal structural invariant does not hold."""


class FactorTypeNotFoundError(FactorGraphModelError, LookupError):
    """No factor type with the requested id is registered."""

    def __init__(self, type_id: int) -> None:
        super().__init__(f"factor type (id = {type_id}) is not registered")
        self.type_id = type_id
