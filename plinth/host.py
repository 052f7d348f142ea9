"""
Host framework boundary.

Plinth does not serve traffic. It drives an externally supplied application
node through the protocol below; any host exposing these calls can be
composed against (``plinth.testing.MockApp`` is a recording implementation).

Every registration call returns the node to continue chaining on, which is
normally the node itself.
"""

from typing import Any, Callable, Dict, Mapping, Optional, Protocol, runtime_checkable


Handler = Callable[[Any], Any]
Options = Dict[str, Any]

# Verbs with a dedicated registrar on the host node
VERB_REGISTRARS = {
    "GET": "get",
    "POST": "post",
    "PUT": "put",
    "PATCH": "patch",
    "DELETE": "delete",
    "OPTIONS": "options",
    "HEAD": "head",
    "ALL": "all",
}

# Lifecycle hook kinds in attachment order: module hook field -> node method
LIFECYCLE_HOOKS = (
    ("on_request", "on_request"),
    ("on_parse", "on_parse"),
    ("on_transform", "on_transform"),
    ("on_before_handle", "on_before_handle"),
    ("on_after_handle", "on_after_handle"),
    ("on_after_response", "on_after_response"),
    ("on_error", "on_error"),
    ("map_response", "map_response"),
)


@runtime_checkable
class HostApp(Protocol):
    """Application node API consumed by the composer and mounters."""

    def get(self, path: str, handler: Handler, options: Options) -> "HostApp": ...
    def post(self, path: str, handler: Handler, options: Options) -> "HostApp": ...
    def put(self, path: str, handler: Handler, options: Options) -> "HostApp": ...
    def patch(self, path: str, handler: Handler, options: Options) -> "HostApp": ...
    def delete(self, path: str, handler: Handler, options: Options) -> "HostApp": ...
    def options(self, path: str, handler: Handler, options: Options) -> "HostApp": ...
    def head(self, path: str, handler: Handler, options: Options) -> "HostApp": ...
    def all(self, path: str, handler: Handler, options: Options) -> "HostApp": ...

    def guard(self, hooks: Mapping[str, Any], build: Callable[["HostApp"], "HostApp"]) -> "HostApp": ...

    def on_request(self, fn: Callable) -> "HostApp": ...
    def on_parse(self, fn: Callable) -> "HostApp": ...
    def on_transform(self, fn: Callable) -> "HostApp": ...
    def on_before_handle(self, fn: Callable) -> "HostApp": ...
    def on_after_handle(self, fn: Callable) -> "HostApp": ...
    def on_after_response(self, fn: Callable) -> "HostApp": ...
    def on_error(self, fn: Callable) -> "HostApp": ...
    def map_response(self, fn: Callable) -> "HostApp": ...

    def ws(self, path: str, options: Options) -> "HostApp": ...
    def use(self, node: "HostApp") -> "HostApp": ...
    def macro(self, table: Mapping[str, Callable[[Any], Any]]) -> "HostApp": ...


class AppFactory(Protocol):
    """Constructor of host nodes: ``factory(name=?, prefix=?, scoped=?)``."""

    def __call__(
        self,
        *,
        name: Optional[str] = ...,
        prefix: Optional[str] = ...,
        scoped: Optional[bool] = ...,
    ) -> HostApp: ...


def join_path(prefix: str, path: str) -> str:
    """Concatenate a controller prefix and a route path; empty becomes ``/``."""
    return f"{prefix or ''}{path or ''}" or "/"
