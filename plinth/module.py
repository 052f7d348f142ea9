"""
Module descriptors.

A module is the unit of composition: it lists the services, controllers,
WebSocket controllers, macros and sub-modules it owns, plus node options, a
shared guard and lifecycle hooks.

Example:
    @module(
        name="users",
        prefix="/api",
        imports=[AuthModule],
        services=[UsersService],
        controllers=[UsersController],
        guard=Guard(before_handle=require_auth),
        hooks=Hooks(on_error=log_error),
    )
    class UsersModule:
        pass
"""

from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union
from dataclasses import dataclass, field, fields

from .host import LIFECYCLE_HOOKS
from .metadata import MetadataRegistry, get_registry


T = TypeVar("T")

HookSpec = Union[None, Callable, Sequence[Callable]]


def as_hook_list(value: HookSpec) -> List[Callable]:
    """Normalise a single hook or a sequence of hooks to a list."""
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


@dataclass(frozen=True)
class Guard:
    """Before/after hook pair applied to every HTTP route of a module."""

    before_handle: HookSpec = None
    after_handle: HookSpec = None

    @classmethod
    def coerce(cls, value: Union[None, "Guard", Mapping[str, Any]]) -> Optional["Guard"]:
        if value is None or isinstance(value, Guard):
            return value
        return cls(**dict(value))

    def as_options(self) -> Dict[str, Any]:
        """Guard-scope options; empty when neither hook is set."""
        options: Dict[str, Any] = {}
        if self.before_handle:
            options["before_handle"] = self.before_handle
        if self.after_handle:
            options["after_handle"] = self.after_handle
        return options


@dataclass(frozen=True)
class Hooks:
    """Module-level lifecycle hooks; each entry is one function or a list."""

    on_request: HookSpec = None
    on_parse: HookSpec = None
    on_transform: HookSpec = None
    on_before_handle: HookSpec = None
    on_after_handle: HookSpec = None
    on_after_response: HookSpec = None
    on_error: HookSpec = None
    map_response: HookSpec = None

    @classmethod
    def coerce(cls, value: Union[None, "Hooks", Mapping[str, Any]]) -> "Hooks":
        if value is None:
            return cls()
        if isinstance(value, Hooks):
            return value
        return cls(**dict(value))

    def chains(self) -> Iterator[Tuple[str, List[Callable]]]:
        """``(node method, hooks)`` in attachment order, skipping empty chains."""
        for attr, method in LIFECYCLE_HOOKS:
            hooks = as_hook_list(getattr(self, attr))
            if hooks:
                yield method, hooks

    def __bool__(self) -> bool:
        return any(getattr(self, f.name) for f in fields(self))


@dataclass(frozen=True)
class ModuleMeta:
    """Immutable module descriptor."""

    name: Optional[str] = None
    prefix: Optional[str] = None
    scoped: Optional[bool] = None
    imports: Tuple[type, ...] = ()
    services: Tuple[type, ...] = ()
    controllers: Tuple[type, ...] = ()
    ws_controllers: Tuple[type, ...] = ()
    macros: Tuple[type, ...] = ()
    providers: Tuple[Any, ...] = ()
    guard: Optional[Guard] = None
    hooks: Hooks = field(default_factory=Hooks)

    def node_options(self) -> Dict[str, Any]:
        """Host node constructor options; only the ones that are set."""
        options: Dict[str, Any] = {}
        if self.name:
            options["name"] = self.name
        if self.scoped is not None:
            options["scoped"] = self.scoped
        if self.prefix:
            options["prefix"] = self.prefix
        return options

    def guard_options(self) -> Dict[str, Any]:
        return self.guard.as_options() if self.guard else {}


def module(
    name: Optional[str] = None,
    *,
    prefix: Optional[str] = None,
    scoped: Optional[bool] = None,
    imports: Sequence[type] = (),
    services: Sequence[type] = (),
    controllers: Sequence[type] = (),
    ws_controllers: Sequence[type] = (),
    macros: Sequence[type] = (),
    providers: Sequence[Any] = (),
    guard: Union[None, Guard, Mapping[str, Any]] = None,
    hooks: Union[None, Hooks, Mapping[str, Any]] = None,
    registry: Optional[MetadataRegistry] = None,
) -> Callable[[Type[T]], Type[T]]:
    """Attach a ``ModuleMeta`` descriptor to the decorated class."""
    meta = ModuleMeta(
        name=name,
        prefix=prefix,
        scoped=scoped,
        imports=tuple(imports),
        services=tuple(services),
        controllers=tuple(controllers),
        ws_controllers=tuple(ws_controllers),
        macros=tuple(macros),
        providers=tuple(providers),
        guard=Guard.coerce(guard),
        hooks=Hooks.coerce(hooks),
    )

    def decorator(cls: Type[T]) -> Type[T]:
        (registry or get_registry()).define_module(cls, meta)
        return cls

    return decorator
