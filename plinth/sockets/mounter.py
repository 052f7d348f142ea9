"""
WS Mounter - registers WebSocket routes of a controller on the host node.
"""

from typing import Any, Callable, Dict, Mapping, Optional
import inspect
import logging

from ..di.core import Container
from ..host import join_path
from ..metadata import MetadataRegistry, get_registry
from .decorators import WsHandlers


logger = logging.getLogger("plinth.sockets.mounter")


def bind_capability(callback: Callable, instance: Any) -> Callable:
    """
    Bind ``callback`` to ``instance`` when it is a plain function defined on
    the instance's class; bound methods and closures are returned unchanged.
    """
    if inspect.isfunction(callback):
        if getattr(type(instance), callback.__name__, None) is callback:
            return callback.__get__(instance, type(instance))
    return callback


def ws_options(schema: Optional[Any], handlers: WsHandlers, instance: Any) -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    if schema:
        if isinstance(schema, Mapping):
            options.update(schema)
        else:
            options["schema"] = schema
    for name, callback in handlers.capabilities():
        options[name] = bind_capability(callback, instance)
    return options


def mount_ws_controller(
    app: Any,
    controller_cls: type,
    container: Container,
    registry: Optional[MetadataRegistry] = None,
) -> Any:
    """
    Register every WebSocket route of ``controller_cls`` on ``app``.

    The controller is resolved once; each route method is called with no
    arguments to obtain its handler bundle.
    """
    registry = registry or get_registry()
    instance = container.resolve(controller_cls)
    prefix = registry.ws_prefix(controller_cls)

    for route in registry.ws_routes(controller_cls):
        full_path = join_path(prefix, route.path)
        handlers = WsHandlers.coerce(getattr(instance, route.key)())
        options = ws_options(route.schema, handlers, instance)
        app = app.ws(full_path, options)
        logger.debug(
            "Mounted WS %s -> %s.%s (%s)",
            full_path, controller_cls.__name__, route.key,
            ", ".join(name for name, _ in handlers.capabilities()) or "no handlers",
        )
    return app
