"""
Provider records.

A provider is the recipe a container uses to produce the instance for one
token: exactly one of a class to instantiate, a fixed value, or a factory
called with the container.
"""

from typing import Any, Callable, Optional, Sequence, Tuple, Type, TypeVar
from dataclasses import dataclass

from .scopes import ServiceScope


T = TypeVar("T")


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"


# ``None`` is a legitimate fixed value, so absence needs its own sentinel
MISSING: Any = _Missing()


@dataclass
class Provider:
    """
    Registered recipe for one token.

    Attributes:
        token: Identity the provider is registered and resolved under
        use_class: Class to instantiate
        use_value: Fixed value returned as-is
        use_factory: Callable invoked with the resolving container
        deps: Explicit dependency tokens for ``use_class``
        scope: "singleton" (cached per container) or "transient"
    """

    token: Any
    use_class: Optional[type] = None
    use_value: Any = MISSING
    use_factory: Optional[Callable[[Any], Any]] = None
    deps: Tuple[Any, ...] = ()
    scope: str = ServiceScope.SINGLETON

    @property
    def kind(self) -> Optional[str]:
        """"value", "factory", "class", or None for a malformed provider."""
        if self.use_value is not MISSING:
            return "value"
        if self.use_factory is not None:
            return "factory"
        if self.use_class is not None:
            return "class"
        return None


def ClassProvider(
    cls: Type[T],
    deps: Sequence[Any] = (),
    scope: str = ServiceScope.SINGLETON,
    token: Any = None,
) -> Provider:
    """Provider that instantiates ``cls`` (registered under ``token`` or ``cls``)."""
    return Provider(
        token=cls if token is None else token,
        use_class=cls,
        deps=tuple(deps),
        scope=scope,
    )


def ValueProvider(token: Any, value: Any) -> Provider:
    """Provider that always returns ``value``."""
    return Provider(token=token, use_value=value)


def FactoryProvider(
    token: Any,
    factory: Callable[[Any], Any],
    scope: str = ServiceScope.SINGLETON,
) -> Provider:
    """Provider whose instance is ``factory(container)``."""
    return Provider(token=token, use_factory=factory, scope=scope)
