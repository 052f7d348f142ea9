"""
Plinth Dependency Injection

Hierarchical containers with singleton/transient scoping, parent delegation
and metadata-driven constructor injection.
"""

from .core import Container

from .providers import (
    Provider,
    ClassProvider,
    FactoryProvider,
    ValueProvider,
    MISSING,
)

from .scopes import ServiceScope

from .decorators import (
    service,
    injectable,
    inject,
    Inject,
    record_injections,
)

from .diagnostics import (
    DIDiagnostics,
    DIEvent,
    DIEventType,
    ConsoleDiagnosticListener,
    RecordingDiagnosticListener,
)

from .errors import (
    DIError,
    ProviderNotFoundError,
    InvalidProviderError,
    DuplicateProviderError,
    DependencyCycleError,
)

__all__ = [
    # Core
    "Container",

    # Providers
    "Provider",
    "ClassProvider",
    "FactoryProvider",
    "ValueProvider",
    "MISSING",

    # Scopes
    "ServiceScope",

    # Decorators
    "service",
    "injectable",
    "inject",
    "Inject",
    "record_injections",

    # Diagnostics
    "DIDiagnostics",
    "DIEvent",
    "DIEventType",
    "ConsoleDiagnosticListener",
    "RecordingDiagnosticListener",

    # Errors
    "DIError",
    "ProviderNotFoundError",
    "InvalidProviderError",
    "DuplicateProviderError",
    "DependencyCycleError",
]
