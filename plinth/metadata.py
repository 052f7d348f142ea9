"""
Metadata Registry

Per-class / per-method store of declarative descriptors: service dependency
lists, constructor injection overrides, controller prefixes, route
descriptors, parameter bindings, WebSocket routes, macro handlers and module
descriptors.

Each kind of descriptor lives in its own table. Route, WS route and
parameter-binding lists are additive; scalar descriptors (prefix, schema,
detail, hooks) are last-write-wins. Reads never fail: absent entries come
back as empty containers.

The decorators in ``plinth.di``, ``plinth.controller``, ``plinth.sockets``,
``plinth.macro`` and ``plinth.module`` are thin writers over this API, so the
same tables can be built explicitly without decorators.
"""

from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
    get_args,
    get_origin,
)
from dataclasses import dataclass, replace
import inspect
import typing

from .params import Param, ParamBinding, sort_bindings


HTTP_VERBS = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD", "ALL")

# Per-method route options recognised by ``set_route_option``
ROUTE_OPTIONS = ("schema", "before_handle", "after_handle", "on_error", "detail")


@dataclass(frozen=True)
class ServiceMeta:
    """Declared dependency list of an injectable class."""

    deps: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class RouteDefinition:
    """
    One HTTP route declared on a controller.

    Attributes:
        verb: Upper-case HTTP verb, or "ALL"
        path: Route path relative to the controller prefix
        key: Name of the controller method
        schema: Opaque validation payload forwarded to the host
        before_handle: Per-route before hook(s)
        after_handle: Per-route after hook(s)
        on_error: Per-route error hook(s)
        detail: Documentation detail forwarded to the host
    """

    verb: str
    path: str
    key: str
    schema: Optional[Mapping[str, Any]] = None
    before_handle: Any = None
    after_handle: Any = None
    on_error: Any = None
    detail: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class WsRouteDefinition:
    """One WebSocket route declared on a WS controller."""

    path: str
    key: str
    schema: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class MacroMeta:
    name: str


class MetadataRegistry:
    """
    Descriptor tables keyed by class (and member name for per-method data).

    Example:
        registry = MetadataRegistry()
        registry.define_controller(UsersController, "/users")
        registry.add_route(UsersController, "GET", "/:id", "get_one")
        registry.add_param(UsersController, "get_one", ParamBinding(0, Path("id")))
    """

    def __init__(self):
        self._services: Dict[type, ServiceMeta] = {}
        self._inject: Dict[type, Dict[int, Any]] = {}
        self._controllers: Dict[type, str] = {}
        self._routes: Dict[type, List[RouteDefinition]] = {}
        self._route_options: Dict[Tuple[type, str], Dict[str, Any]] = {}
        self._params: Dict[Tuple[type, str], List[ParamBinding]] = {}
        self._ws_controllers: Dict[type, str] = {}
        self._ws_routes: Dict[type, List[WsRouteDefinition]] = {}
        self._ws_schemas: Dict[Tuple[type, str], Mapping[str, Any]] = {}
        self._macros: Dict[type, MacroMeta] = {}
        self._macro_handlers: Dict[type, Dict[str, str]] = {}
        self._modules: Dict[type, Any] = {}

    # ------------------------------------------------------------------
    # Services and injection
    # ------------------------------------------------------------------

    def define_service(self, cls: type, deps: Sequence[Any] = ()) -> None:
        self._services[cls] = ServiceMeta(deps=tuple(deps))

    def is_injectable(self, cls: Any) -> bool:
        """True if ``cls`` was declared as a service."""
        try:
            return cls in self._services
        except TypeError:
            return False

    def service_meta(self, cls: type) -> Optional[ServiceMeta]:
        return self._services.get(cls)

    def set_inject(self, cls: type, index: int, token: Any) -> None:
        """Declare that constructor parameter ``index`` of ``cls`` resolves ``token``."""
        self._inject.setdefault(cls, {})[index] = token

    def inject_params(self, cls: type) -> Dict[int, Any]:
        """Return ``{param index: token}`` overrides for ``cls``."""
        return dict(self._inject.get(cls, {}))

    # ------------------------------------------------------------------
    # HTTP controllers
    # ------------------------------------------------------------------

    def define_controller(self, cls: type, prefix: str = "") -> None:
        self._controllers[cls] = prefix

    def is_controller(self, cls: type) -> bool:
        return cls in self._controllers

    def controller_prefix(self, cls: type) -> str:
        return self._controllers.get(cls, "")

    def set_route_option(self, cls: type, key: str, option: str, value: Any) -> None:
        """
        Set a per-method route option (last write wins).

        Routes already declared for the method pick up the new value, so the
        call order relative to ``add_route`` does not matter.
        """
        if option not in ROUTE_OPTIONS:
            raise ValueError(f"Unknown route option '{option}'; expected one of {ROUTE_OPTIONS}")
        self._route_options.setdefault((cls, key), {})[option] = value
        routes = self._routes.get(cls)
        if routes:
            self._routes[cls] = [
                replace(r, **{option: value}) if r.key == key else r for r in routes
            ]

    def route_options(self, cls: type, key: str) -> Dict[str, Any]:
        return dict(self._route_options.get((cls, key), {}))

    def add_route(self, cls: type, verb: str, path: str, key: str) -> RouteDefinition:
        verb = verb.upper()
        if verb not in HTTP_VERBS:
            raise ValueError(f"Unsupported HTTP verb '{verb}'")
        route = RouteDefinition(verb=verb, path=path, key=key, **self.route_options(cls, key))
        self._routes.setdefault(cls, []).append(route)
        return route

    def routes(self, cls: type) -> List[RouteDefinition]:
        """Routes of ``cls`` in declaration order."""
        return list(self._routes.get(cls, []))

    # ------------------------------------------------------------------
    # Parameter bindings
    # ------------------------------------------------------------------

    def add_param(self, cls: type, key: str, binding: ParamBinding) -> None:
        self._params.setdefault((cls, key), []).append(binding)

    def params(self, cls: type, key: str) -> List[ParamBinding]:
        """Bindings for method ``key`` sorted by ascending index."""
        return sort_bindings(self._params.get((cls, key), []))

    # ------------------------------------------------------------------
    # WebSocket controllers
    # ------------------------------------------------------------------

    def define_ws_controller(self, cls: type, prefix: str = "") -> None:
        self._ws_controllers[cls] = prefix

    def is_ws_controller(self, cls: type) -> bool:
        return cls in self._ws_controllers

    def ws_prefix(self, cls: type) -> str:
        return self._ws_controllers.get(cls, "")

    def set_ws_schema(self, cls: type, key: str, schema: Mapping[str, Any]) -> None:
        self._ws_schemas[(cls, key)] = schema
        routes = self._ws_routes.get(cls)
        if routes:
            self._ws_routes[cls] = [
                replace(r, schema=schema) if r.key == key else r for r in routes
            ]

    def add_ws_route(self, cls: type, path: str, key: str) -> WsRouteDefinition:
        route = WsRouteDefinition(path=path, key=key, schema=self._ws_schemas.get((cls, key)))
        self._ws_routes.setdefault(cls, []).append(route)
        return route

    def ws_routes(self, cls: type) -> List[WsRouteDefinition]:
        return list(self._ws_routes.get(cls, []))

    # ------------------------------------------------------------------
    # Macros
    # ------------------------------------------------------------------

    def define_macro(self, cls: type, name: str) -> None:
        self._macros[cls] = MacroMeta(name=name)

    def macro_meta(self, cls: type) -> Optional[MacroMeta]:
        return self._macros.get(cls)

    def add_macro_handler(self, cls: type, field_name: str, key: str) -> None:
        self._macro_handlers.setdefault(cls, {})[field_name] = key

    def macro_handlers(self, cls: type) -> Dict[str, str]:
        """``{option field: method name}`` for a macro class."""
        return dict(self._macro_handlers.get(cls, {}))

    # ------------------------------------------------------------------
    # Modules
    # ------------------------------------------------------------------

    def define_module(self, cls: type, meta: Any) -> None:
        self._modules[cls] = meta

    def module_meta(self, cls: type) -> Optional[Any]:
        return self._modules.get(cls)

    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Drop every descriptor. Intended for test isolation."""
        self.__init__()


# Process-wide registry written by the decorators
registry = MetadataRegistry()


def get_registry() -> MetadataRegistry:
    return registry


# ----------------------------------------------------------------------
# Signature scanning shared by the class decorators
# ----------------------------------------------------------------------


def _resolved_annotations(func: Callable) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(func, include_extras=True)
    except Exception:
        # Unresolvable forward references: fall back to the raw annotations
        return dict(getattr(func, "__annotations__", {}))


def iter_markers(
    func: Callable,
    marker_type: Type,
) -> Iterator[Tuple[int, Any, Any]]:
    """
    Yield ``(index, marker, annotation)`` for parameters of ``func`` carrying
    a ``marker_type`` instance, either as default value or as ``Annotated``
    metadata. ``self``/``cls`` are skipped and do not count toward the index.
    """
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return

    hints = _resolved_annotations(func)
    index = 0
    for position, (name, param) in enumerate(sig.parameters.items()):
        if position == 0 and name in ("self", "cls"):
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue

        annotation = hints.get(name)
        marker = None
        base = annotation

        if get_origin(annotation) is typing.Annotated:
            args = get_args(annotation)
            base = args[0]
            for meta in args[1:]:
                if isinstance(meta, marker_type):
                    marker = meta
                    break

        if marker is None and isinstance(param.default, marker_type):
            marker = param.default

        if marker is not None:
            yield index, marker, base
        index += 1


def positional_defaults(func: Callable) -> Dict[int, Any]:
    """
    ``{index: default}`` for parameters of ``func`` with a plain default,
    indexed like ``iter_markers``. Marker defaults are left out.
    """
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return {}

    defaults: Dict[int, Any] = {}
    index = 0
    for position, (name, param) in enumerate(sig.parameters.items()):
        if position == 0 and name in ("self", "cls"):
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if param.default is not inspect.Parameter.empty and not isinstance(param.default, Param):
            defaults[index] = param.default
        index += 1
    return defaults


def declared_members(cls: type) -> Iterator[Tuple[str, Callable]]:
    """
    Functions defined in ``cls`` and its bases, base classes first.

    A name redefined in a subclass yields the subclass function.
    """
    members: Dict[str, Callable] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for key, value in vars(klass).items():
            if isinstance(value, (staticmethod, classmethod)):
                value = value.__func__
            if inspect.isfunction(value):
                members[key] = value
            elif key in members:
                # Shadowed by a non-function attribute
                del members[key]
    yield from members.items()
