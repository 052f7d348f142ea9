"""
Decorators and injection markers for ergonomic DI usage.
"""

from typing import Any, Callable, Optional, Sequence, Type, TypeVar
from dataclasses import dataclass

from ..metadata import MetadataRegistry, get_registry, iter_markers


T = TypeVar("T")


@dataclass(frozen=True)
class Inject:
    """
    Constructor injection override.

    The token is taken from the marker, or from the annotation when the
    marker is used inside ``Annotated`` without one.

    Usage:
        def __init__(self, repo=Inject(UserRepo)):
            ...

        def __init__(self, repo: Annotated[UserRepo, Inject()]):
            ...
    """

    token: Optional[Any] = None


def inject(token: Optional[Any] = None) -> Inject:
    """Create an injection marker (lower-case alias of ``Inject``)."""
    return Inject(token)


def record_injections(cls: type, registry: Optional[MetadataRegistry] = None) -> None:
    """
    Scan ``cls.__init__`` (inherited constructors included) for ``Inject``
    markers and store them as ``{param index: token}`` overrides.
    """
    registry = registry or get_registry()
    init = getattr(cls, "__init__", None)
    if init is None or init is object.__init__:
        return
    for index, marker, annotation in iter_markers(init, Inject):
        token = marker.token if marker.token is not None else annotation
        if token is None or token is Any:
            raise TypeError(
                f"Inject() on parameter {index} of {cls.__qualname__}.__init__ "
                f"needs a token or a type annotation"
            )
        registry.set_inject(cls, index, token)


def service(
    deps: Optional[Sequence[Any]] = None,
    *,
    registry: Optional[MetadataRegistry] = None,
) -> Callable[[Type[T]], Type[T]]:
    """
    Decorator to mark a class as an injectable service.

    Args:
        deps: Explicit constructor dependency tokens, in parameter order
        registry: Target registry (defaults to the process-wide one)

    Example:
        @service([UserRepo])
        class UsersService:
            def __init__(self, repo):
                self.repo = repo
    """
    def decorator(cls: Type[T]) -> Type[T]:
        target = registry or get_registry()
        target.define_service(cls, deps or ())
        record_injections(cls, target)
        return cls

    return decorator


# Convenience alias
injectable = service
