"""
WebSocket Controller Decorators

- @ws_controller(prefix) - Declare a WebSocket controller
- @ws(path) - Declare a WebSocket endpoint; the method returns ``WsHandlers``
- @ws_schema(...) - Attach a validation payload to an endpoint

Example:
    @ws_controller("/chat")
    class ChatSocket:
        def __init__(self, chat=Inject(ChatService)):
            self.chat = chat

        @ws_schema(body={"text": str})
        @ws("/room")
        def room(self):
            return WsHandlers(open=self.on_open, message=self.on_message)
"""

from typing import Any, Callable, Iterator, Mapping, Optional, Tuple, Type, TypeVar
from dataclasses import dataclass, fields

from ..di.decorators import record_injections
from ..metadata import MetadataRegistry, declared_members, get_registry


F = TypeVar("F", bound=Callable[..., Any])
T = TypeVar("T")


@dataclass(frozen=True)
class WsHandlers:
    """
    Handler bundle returned by a ``@ws`` method. Every capability is optional.

    Attributes:
        open: ``open(ws)``
        message: ``message(ws, message)``
        close: ``close(ws, code, reason)``
        drain: ``drain(ws)``
    """

    open: Optional[Callable] = None
    message: Optional[Callable] = None
    close: Optional[Callable] = None
    drain: Optional[Callable] = None

    @classmethod
    def coerce(cls, value: Any) -> "WsHandlers":
        """Accept a bundle, a mapping of capabilities, or any object exposing them."""
        if isinstance(value, WsHandlers):
            return value
        names = [f.name for f in fields(cls)]
        if isinstance(value, Mapping):
            return cls(**{name: value.get(name) for name in names})
        return cls(**{name: getattr(value, name, None) for name in names})

    def capabilities(self) -> Iterator[Tuple[str, Callable]]:
        """Present capabilities as ``(name, callback)``, in declaration order."""
        for f in fields(self):
            callback = getattr(self, f.name)
            if callback:
                yield f.name, callback


def ws(path: str = "") -> Callable[[F], F]:
    """Declare a WebSocket endpoint at ``path`` (relative to the controller prefix)."""
    def decorator(func: F) -> F:
        if "__ws_routes__" not in func.__dict__:
            func.__ws_routes__ = []
        func.__ws_routes__.append(path or "")
        return func

    return decorator


def ws_schema(payload: Optional[Mapping[str, Any]] = None, **fields_: Any) -> Callable[[F], F]:
    """Attach a validation payload to a WebSocket endpoint (last write wins)."""
    merged = dict(payload or {})
    merged.update(fields_)

    def decorator(func: F) -> F:
        func.__ws_schema__ = merged
        return func

    return decorator


def ws_controller(
    prefix: str = "",
    *,
    registry: Optional[MetadataRegistry] = None,
) -> Callable[[Type[T]], Type[T]]:
    """Mark a class as a WebSocket controller mounted under ``prefix``."""
    def decorator(cls: Type[T]) -> Type[T]:
        target = registry or get_registry()
        target.define_ws_controller(cls, prefix or "")
        record_injections(cls, target)

        for key, func in declared_members(cls):
            if "__ws_schema__" in func.__dict__:
                target.set_ws_schema(cls, key, func.__ws_schema__)
            for path in func.__dict__.get("__ws_routes__", []):
                target.add_ws_route(cls, path, key)

        return cls

    return decorator
