"""
DI-specific error types with actionable messages.
"""

from typing import Any, List, Optional


def token_name(token: Any) -> str:
    """Human-readable name for a provider token."""
    if isinstance(token, type):
        return token.__qualname__
    if isinstance(token, str):
        return token
    name = getattr(token, "__name__", None)
    if name:
        return name
    return repr(token)


class DIError(Exception):
    """Base exception for DI errors."""
    pass


class ProviderNotFoundError(DIError):
    """No provider for the requested token in the container chain."""

    def __init__(self, token: Any, requested_by: Optional[Any] = None):
        self.token = token
        self.requested_by = requested_by

        name = token_name(token)
        msg = f"No provider found for token={name}"
        if requested_by is not None:
            msg += f"\nRequested by: {token_name(requested_by)}"
        msg += "\n\nSuggested fixes:"
        msg += f"\n  - Add {name} to services=[...] in your @module"
        msg += f"\n  - Declare it with @service() or register a provider for it"
        msg += f"\n  - Use Inject({name}) on the constructor parameter that needs it"

        super().__init__(msg)


class InvalidProviderError(DIError):
    """Provider has none of use_class, use_value or use_factory."""

    def __init__(self, token: Any):
        self.token = token
        super().__init__(
            f"Invalid provider for token={token_name(token)}: "
            f"needs use_class, use_value, or use_factory"
        )


class DuplicateProviderError(DIError):
    """A different provider is already registered under the same token."""

    def __init__(self, token: Any):
        self.token = token
        super().__init__(
            f"Provider for {token_name(token)} already registered in this container"
        )


class DependencyCycleError(DIError):
    """Circular dependency detected while constructing a provider."""

    def __init__(self, cycle: List[Any]):
        self.cycle = cycle

        msg = "Detected dependency cycle:"
        for i, token in enumerate(cycle):
            arrow = " -> " if i < len(cycle) - 1 else ""
            msg += f"\n  {token_name(token)}{arrow}"

        msg += "\n\nSuggested fixes:"
        msg += "\n  - Extract the shared part into a separate service"
        msg += "\n  - Replace one direct dependency with a factory provider"

        super().__init__(msg)
