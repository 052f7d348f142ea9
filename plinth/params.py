"""
Handler parameter bindings.

A binding maps one positional handler argument to a value pulled out of the
request/connection context. Each binding is a tagged case (``ParamKind``), not
an opaque closure, so binding tables stay inspectable.

Example:
    @GET("/:id")
    def get_one(self, id=Path("id"), set=Set()):
        ...
"""

from typing import Any, Iterable, List, Mapping, Optional
from dataclasses import dataclass
from enum import Enum


class ParamKind(str, Enum):
    """What part of the context a binding extracts."""

    CONTEXT = "context"
    BODY = "body"
    QUERY = "query"
    PARAMS = "params"
    HEADERS = "headers"
    COOKIE = "cookie"
    SET = "set"
    PATH_FIELD = "path_field"
    QUERY_FIELD = "query_field"


# kind -> context attribute
_CONTEXT_FIELDS = {
    ParamKind.BODY: "body",
    ParamKind.QUERY: "query",
    ParamKind.PARAMS: "params",
    ParamKind.HEADERS: "headers",
    ParamKind.COOKIE: "cookie",
    ParamKind.SET: "set",
}


def read_field(source: Any, key: str) -> Any:
    """Read ``key`` from a mapping or an attribute-style object, ``None`` if absent."""
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(key)
    return getattr(source, key, None)


@dataclass(frozen=True)
class Param:
    """
    Binding marker.

    Used as a parameter default (``body=Body()``) or as ``Annotated``
    metadata (``Annotated[dict, Body()]``).
    """

    kind: ParamKind
    name: Optional[str] = None

    def extract(self, ctx: Any) -> Any:
        """Pull this binding's value out of ``ctx``."""
        kind = self.kind
        if kind is ParamKind.CONTEXT:
            return ctx
        if kind is ParamKind.PATH_FIELD:
            return read_field(read_field(ctx, "params"), self.name)
        if kind is ParamKind.QUERY_FIELD:
            return read_field(read_field(ctx, "query"), self.name)
        return read_field(ctx, _CONTEXT_FIELDS[kind])


class Ctx(Param):
    """Whole context."""

    def __init__(self):
        super().__init__(ParamKind.CONTEXT)


class Body(Param):
    """Request body."""

    def __init__(self):
        super().__init__(ParamKind.BODY)


class Query(Param):
    """Query parameters."""

    def __init__(self):
        super().__init__(ParamKind.QUERY)


class Params(Param):
    """Path parameters."""

    def __init__(self):
        super().__init__(ParamKind.PARAMS)


class Headers(Param):
    """Request headers."""

    def __init__(self):
        super().__init__(ParamKind.HEADERS)


class Cookie(Param):
    """Cookie jar."""

    def __init__(self):
        super().__init__(ParamKind.COOKIE)


class Set(Param):
    """Response mutator (status, headers, cookies) exposed by the host."""

    def __init__(self):
        super().__init__(ParamKind.SET)


class Path(Param):
    """A single named path parameter: ``Path("id")`` -> ``ctx.params["id"]``."""

    def __init__(self, name: str):
        super().__init__(ParamKind.PATH_FIELD, name)


class Q(Param):
    """A single named query field: ``Q("page")`` -> ``ctx.query["page"]``."""

    def __init__(self, name: str):
        super().__init__(ParamKind.QUERY_FIELD, name)


@dataclass(frozen=True)
class ParamBinding:
    """(parameter index, extraction) pair for one handler argument."""

    index: int
    param: Param

    def extract(self, ctx: Any) -> Any:
        return self.param.extract(ctx)


def sort_bindings(bindings: Iterable[ParamBinding]) -> List[ParamBinding]:
    """Order bindings by ascending index (consumption order)."""
    return sorted(bindings, key=lambda b: b.index)


def build_arguments(
    bindings: List[ParamBinding],
    ctx: Any,
    defaults: Optional[Mapping[int, Any]] = None,
) -> List[Any]:
    """
    Build the dense positional argument list for a handler call.

    Slots between 0 and the highest bound index that have no binding take
    their parameter default from ``defaults``, else ``None``.
    """
    if not bindings:
        return []
    ordered = sort_bindings(bindings)
    defaults = defaults or {}
    args: List[Any] = [defaults.get(i) for i in range(ordered[-1].index + 1)]
    for binding in ordered:
        args[binding.index] = binding.extract(ctx)
    return args
