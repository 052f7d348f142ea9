"""
Scope definitions.
"""

from enum import Enum


class ServiceScope(str, Enum):
    """Provider lifetime scopes."""

    SINGLETON = "singleton"  # One instance per container
    TRANSIENT = "transient"  # New instance every resolve


def is_cacheable(scope: str) -> bool:
    """Everything except transient is cached per container."""
    return scope != ServiceScope.TRANSIENT
