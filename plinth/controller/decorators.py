"""
Controller Decorators

HTTP verb and per-route option decorators for controller methods.

Method decorators only attach metadata to the function object; nothing is
written to the registry until ``@controller`` runs over the finished class
body. Stacking order of method decorators is therefore irrelevant.

Example:
    @controller("/users")
    class UsersController:
        def __init__(self, users=Inject(UsersService)):
            self.users = users

        @schema(body={"name": str})
        @before_handle(require_auth)
        @POST("/")
        def create(self, body=Body(), set=Set()):
            ...
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Type, TypeVar, Union

from ..di.decorators import record_injections
from ..metadata import MetadataRegistry, declared_members, get_registry, iter_markers
from ..params import Param, ParamBinding


F = TypeVar("F", bound=Callable[..., Any])
T = TypeVar("T")


class RouteDecorator:
    """
    Base route decorator.

    Appends a ``{"http_method", "path"}`` entry to ``__route_metadata__`` of
    the decorated function. A method may carry several routes.
    """

    method: Optional[str] = None

    def __init__(self, path: str = ""):
        self.path = path or ""

    def __call__(self, func: F) -> F:
        if "__route_metadata__" not in func.__dict__:
            func.__route_metadata__ = []
        func.__route_metadata__.append({"http_method": self.method, "path": self.path})
        return func


class GET(RouteDecorator):
    """GET request decorator."""

    method = "GET"


class POST(RouteDecorator):
    """POST request decorator."""

    method = "POST"


class PUT(RouteDecorator):
    """PUT request decorator."""

    method = "PUT"


class PATCH(RouteDecorator):
    """PATCH request decorator."""

    method = "PATCH"


class DELETE(RouteDecorator):
    """DELETE request decorator."""

    method = "DELETE"


class OPTIONS(RouteDecorator):
    """OPTIONS request decorator."""

    method = "OPTIONS"


class HEAD(RouteDecorator):
    """HEAD request decorator."""

    method = "HEAD"


class ALL(RouteDecorator):
    """Registers the handler for every HTTP method."""

    method = "ALL"


_VERB_DECORATORS = {
    "GET": GET,
    "POST": POST,
    "PUT": PUT,
    "PATCH": PATCH,
    "DELETE": DELETE,
    "OPTIONS": OPTIONS,
    "HEAD": HEAD,
    "ALL": ALL,
}


def route(methods: Union[str, Sequence[str]], path: str = "") -> Callable[[F], F]:
    """
    Generic route decorator.

    Example:
        @route(["GET", "POST"], "/items")
        def handle_items(self, ctx):
            ...
    """
    verbs = [methods] if isinstance(methods, str) else list(methods)
    for verb in verbs:
        if verb.upper() not in _VERB_DECORATORS:
            raise ValueError(f"Unsupported HTTP verb '{verb}'")

    def decorator(func: F) -> F:
        for verb in verbs:
            func = _VERB_DECORATORS[verb.upper()](path)(func)
        return func

    return decorator


# ----------------------------------------------------------------------
# Per-route options
# ----------------------------------------------------------------------


def _route_option(option: str, value: Any) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        if "__route_options__" not in func.__dict__:
            func.__route_options__ = {}
        func.__route_options__[option] = value
        return func

    return decorator


def _payload(payload: Optional[Mapping[str, Any]], fields: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(payload or {})
    merged.update(fields)
    return merged


def schema(payload: Optional[Mapping[str, Any]] = None, **fields: Any) -> Callable[[F], F]:
    """
    Attach a validation payload (``body``, ``query``, ``params``, ``headers``,
    ``response``...). The payload is forwarded to the host untouched.
    """
    return _route_option("schema", _payload(payload, fields))


def before_handle(hook: Union[Callable, List[Callable]]) -> Callable[[F], F]:
    """Per-route before-handle hook(s)."""
    return _route_option("before_handle", hook)


def after_handle(hook: Union[Callable, List[Callable]]) -> Callable[[F], F]:
    """Per-route after-handle hook(s)."""
    return _route_option("after_handle", hook)


def on_error(hook: Union[Callable, List[Callable]]) -> Callable[[F], F]:
    """Per-route error hook(s)."""
    return _route_option("on_error", hook)


def detail(payload: Optional[Mapping[str, Any]] = None, **fields: Any) -> Callable[[F], F]:
    """Documentation detail (tags, summary, ...) forwarded to the host."""
    return _route_option("detail", _payload(payload, fields))


def param(index: int, marker: Param) -> Callable[[F], F]:
    """
    Bind handler argument ``index`` explicitly.

    Useful for handlers taking ``*args`` or when markers cannot be placed in
    the signature. Explicit bindings win over signature markers at the same
    index.

    Example:
        @param(1, Query())
        @param(0, Path("id"))
        @GET("/:id")
        def get_one(self, *args):
            ...
    """
    if index < 0:
        raise ValueError("Parameter index must be >= 0")

    def decorator(func: F) -> F:
        if "__param_bindings__" not in func.__dict__:
            func.__param_bindings__ = []
        func.__param_bindings__.append(ParamBinding(index, marker))
        return func

    return decorator


# ----------------------------------------------------------------------
# Class decorator
# ----------------------------------------------------------------------


def collect_param_bindings(func: Callable) -> List[ParamBinding]:
    """Signature markers plus explicit ``@param`` bindings, one per index."""
    bindings: Dict[int, ParamBinding] = {}
    for index, marker, _ in iter_markers(func, Param):
        bindings[index] = ParamBinding(index, marker)
    for binding in func.__dict__.get("__param_bindings__", []):
        bindings[binding.index] = binding
    return list(bindings.values())


def controller(
    prefix: str = "",
    *,
    registry: Optional[MetadataRegistry] = None,
) -> Callable[[Type[T]], Type[T]]:
    """
    Mark a class as an HTTP controller mounted under ``prefix``.

    Collects the routes, route options and parameter bindings of every
    method defined in the class body, and the ``Inject`` overrides of its
    constructor.
    """
    def decorator(cls: Type[T]) -> Type[T]:
        target = registry or get_registry()
        target.define_controller(cls, prefix or "")
        record_injections(cls, target)

        for key, func in declared_members(cls):
            for option, value in func.__dict__.get("__route_options__", {}).items():
                target.set_route_option(cls, key, option, value)
            for metadata in func.__dict__.get("__route_metadata__", []):
                target.add_route(cls, metadata["http_method"], metadata["path"], key)
            for binding in collect_param_bindings(func):
                target.add_param(cls, key, binding)

        return cls

    return decorator
