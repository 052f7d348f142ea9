"""
Dependency Container.

Hierarchical registry + resolver of providers. Each container owns its
provider table and its singleton cache and holds a non-owning reference to an
optional parent. Lookups that miss locally are delegated up the chain, so a
module's services are visible to its descendants but never to its ancestors.
"""

from typing import Any, Dict, Iterator, List, Optional, Tuple, Type, TypeVar
import logging
import time

from ..metadata import MetadataRegistry, get_registry
from .diagnostics import DIDiagnostics, DIEventType
from .errors import (
    DependencyCycleError,
    DuplicateProviderError,
    InvalidProviderError,
    ProviderNotFoundError,
    token_name,
)
from .providers import ClassProvider, Provider
from .scopes import ServiceScope, is_cacheable


T = TypeVar("T")

logger = logging.getLogger("plinth.di.core")


class Container:
    """
    DI Container - provider registry plus per-container singleton cache.

    Args:
        parent: Container consulted when a token is not registered here
        registry: Metadata registry used for injection overrides and for
            recognising injectable services (defaults to the process-wide one)
        auto_register: Register a declared ``@service`` class on first resolve
            when no provider for it exists anywhere in the chain
        diagnostics: Event bus for registration/resolution events
        name: Label used in logs (usually the owning module)

    Example:
        root = Container()
        root.register(ClassProvider(UserRepo))
        child = root.child()
        child.register(ClassProvider(UsersService, deps=[UserRepo]))
        svc = child.resolve(UsersService)
    """

    __slots__ = (
        "_providers",
        "_singletons",
        "_parent",
        "_registry",
        "_auto_register",
        "_diagnostics",
        "_resolving",
        "name",
    )

    def __init__(
        self,
        parent: Optional["Container"] = None,
        *,
        registry: Optional[MetadataRegistry] = None,
        auto_register: bool = True,
        diagnostics: Optional[DIDiagnostics] = None,
        name: Optional[str] = None,
    ):
        self._providers: Dict[Any, Provider] = {}
        self._singletons: Dict[Any, Any] = {}
        self._parent = parent
        self._registry = registry if registry is not None else get_registry()
        self._auto_register = auto_register
        self._diagnostics = diagnostics or (parent._diagnostics if parent else DIDiagnostics())
        self._resolving: List[Any] = []
        self.name = name

    @property
    def parent(self) -> Optional["Container"]:
        return self._parent

    @property
    def diagnostics(self) -> DIDiagnostics:
        return self._diagnostics

    def register(self, *providers: Provider) -> "Container":
        """
        Register one or more providers.

        Re-registering an equal provider is a no-op; a different provider for
        an already registered token raises ``DuplicateProviderError``.
        """
        for provider in providers:
            existing = self._providers.get(provider.token)
            if existing is not None:
                if existing == provider:
                    continue
                raise DuplicateProviderError(provider.token)

            self._providers[provider.token] = provider
            logger.debug(
                "Registered %s provider for %s in container %s",
                provider.kind, token_name(provider.token), self.name or "<anonymous>",
            )
            self._diagnostics.emit(
                DIEventType.REGISTRATION,
                token=token_name(provider.token),
                provider_kind=provider.kind,
            )
        return self

    def add_class(self, cls: Type[T]) -> "Container":
        """Register ``cls`` as a singleton using its declared ``@service`` deps."""
        meta = self._registry.service_meta(cls)
        return self.register(ClassProvider(cls, deps=meta.deps if meta else ()))

    def child(self, name: Optional[str] = None) -> "Container":
        """Create a child container delegating misses to this one."""
        return Container(
            self,
            registry=self._registry,
            auto_register=self._auto_register,
            diagnostics=self._diagnostics,
            name=name,
        )

    def has(self, token: Any) -> bool:
        """True if ``token`` is registered in this container (parents ignored)."""
        return token in self._providers

    def is_registered(self, token: Any) -> bool:
        """True if ``token`` is registered here or in any ancestor."""
        return self._owner_of(token) is not None

    def providers(self) -> Iterator[Tuple[Any, Provider]]:
        """Locally registered ``(token, provider)`` pairs, in registration order."""
        return iter(list(self._providers.items()))

    def resolve(self, token: Any) -> Any:
        """
        Resolve ``token`` to an instance.

        Singletons are created at most once per container; transient
        providers produce a new instance per call.

        Raises:
            ProviderNotFoundError: No provider anywhere in the chain
            InvalidProviderError: Provider has no class/value/factory
            DependencyCycleError: Provider re-entered during construction
        """
        if token in self._singletons:
            return self._singletons[token]

        provider = self._providers.get(token)

        if provider is None and self._should_auto_register(token):
            self.add_class(token)
            provider = self._providers[token]
            logger.debug("Auto-registered %s in container %s", token_name(token), self.name or "<anonymous>")
            self._diagnostics.emit(DIEventType.AUTO_REGISTRATION, token=token_name(token))

        requester = self._resolving[-1] if self._resolving else None
        if provider is None:
            if self._parent is None:
                raise ProviderNotFoundError(token, requested_by=requester)
            try:
                return self._parent.resolve(token)
            except ProviderNotFoundError as exc:
                # The parent cannot see which provider in this container asked
                if exc.token == token and exc.requested_by is None and requester is not None:
                    raise ProviderNotFoundError(token, requested_by=requester) from None
                raise

        return self._instantiate(provider)

    # ------------------------------------------------------------------

    def _owner_of(self, token: Any) -> Optional["Container"]:
        container: Optional[Container] = self
        while container is not None:
            if token in container._providers:
                return container
            container = container._parent
        return None

    def _should_auto_register(self, token: Any) -> bool:
        if not self._auto_register or not isinstance(token, type):
            return False
        if not self._registry.is_injectable(token):
            return False
        # Ancestors that already provide the class keep their shared singleton
        return self._parent is None or not self._parent.is_registered(token)

    def _instantiate(self, provider: Provider) -> Any:
        kind = provider.kind
        if kind is None:
            raise InvalidProviderError(provider.token)

        if kind == "value":
            return provider.use_value

        token = provider.token
        if token in self._resolving:
            cycle = self._resolving[self._resolving.index(token):] + [token]
            raise DependencyCycleError(cycle)

        started = time.perf_counter()
        self._resolving.append(token)
        try:
            if kind == "factory":
                instance = provider.use_factory(self)
            else:
                instance = provider.use_class(*self._constructor_args(provider))
        except Exception as exc:
            self._diagnostics.emit(DIEventType.RESOLUTION_FAILURE, token=token_name(token), error=exc)
            raise
        finally:
            self._resolving.pop()

        if is_cacheable(provider.scope):
            self._singletons[token] = instance

        if self._diagnostics.enabled:
            self._diagnostics.emit(
                DIEventType.RESOLUTION_SUCCESS,
                token=token_name(token),
                provider_kind=kind,
                duration=time.perf_counter() - started,
            )
        return instance

    def _constructor_args(self, provider: Provider) -> List[Any]:
        """
        Build the positional constructor arguments for a class provider.

        Declared deps win, with injection overrides replacing entries by
        index. Without declared deps the overrides alone produce a dense
        list with ``None`` in unbound slots.
        """
        overrides = self._registry.inject_params(provider.use_class)
        deps = provider.deps

        if deps:
            args = []
            for index, dep in enumerate(deps):
                if index in overrides:
                    args.append(self.resolve(overrides[index]))
                elif dep is None:
                    args.append(None)
                else:
                    args.append(self.resolve(dep))
            return args

        if overrides:
            args = [None] * (max(overrides) + 1)
            for index, dep in overrides.items():
                args[index] = self.resolve(dep)
            return args

        return []

    def __repr__(self) -> str:
        return (
            f"Container(name={self.name!r}, providers={len(self._providers)}, "
            f"singletons={len(self._singletons)}, has_parent={self._parent is not None})"
        )


__all__ = ["Container", "ServiceScope"]
