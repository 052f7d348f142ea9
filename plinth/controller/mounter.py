"""
Route Mounter - turns controller route metadata into host registrations.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional
import functools
import logging

from ..di.core import Container
from ..host import VERB_REGISTRARS, join_path
from ..metadata import MetadataRegistry, RouteDefinition, get_registry, positional_defaults
from ..params import ParamBinding, build_arguments


logger = logging.getLogger("plinth.controller.mounter")


def make_handler(method: Callable, bindings: List[ParamBinding]) -> Callable[[Any], Any]:
    """
    Wrap a bound controller method as a single-argument host handler.

    Without bindings the raw context is passed through; otherwise the
    context is expanded into the dense positional argument list, with
    unbound slots taking the method's parameter defaults.
    """
    if not bindings:
        def handler(ctx):
            return method(ctx)
    else:
        defaults = positional_defaults(method)

        def handler(ctx):
            return method(*build_arguments(bindings, ctx, defaults))

    functools.update_wrapper(handler, method, updated=())
    handler.__param_bindings__ = list(bindings)
    return handler


def route_options(route: RouteDefinition) -> Dict[str, Any]:
    """Registration options for one route; absent entries are omitted."""
    options: Dict[str, Any] = {}
    if route.schema:
        if isinstance(route.schema, Mapping):
            options.update(route.schema)
        else:
            options["schema"] = route.schema
    if route.before_handle:
        options["before_handle"] = route.before_handle
    if route.after_handle:
        options["after_handle"] = route.after_handle
    if route.on_error:
        options["error"] = route.on_error
    if route.detail:
        options["detail"] = route.detail
    return options


def mount_http_controller(
    app: Any,
    controller_cls: type,
    container: Container,
    guard: Optional[Mapping[str, Any]] = None,
    registry: Optional[MetadataRegistry] = None,
) -> Any:
    """
    Register every route of ``controller_cls`` on ``app``.

    The controller instance is resolved once from ``container``. When
    ``guard`` carries hooks, all routes are registered inside one guard
    scope applying them.

    Returns:
        The host node to continue chaining on
    """
    registry = registry or get_registry()
    instance = container.resolve(controller_cls)
    prefix = registry.controller_prefix(controller_cls)
    routes = registry.routes(controller_cls)

    def register_routes(node: Any) -> Any:
        for route in routes:
            full_path = join_path(prefix, route.path)
            handler = make_handler(
                getattr(instance, route.key),
                registry.params(controller_cls, route.key),
            )
            registrar = getattr(node, VERB_REGISTRARS[route.verb])
            node = registrar(full_path, handler, route_options(route))
            logger.debug(
                "Mounted %s %s -> %s.%s",
                route.verb, full_path, controller_cls.__name__, route.key,
            )
        return node

    if guard:
        return app.guard(dict(guard), register_routes)
    return register_routes(app)
