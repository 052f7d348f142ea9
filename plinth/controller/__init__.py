"""
Plinth Controllers

Class-based HTTP controllers: route declaration and mounting.
"""

from .decorators import (
    controller,
    RouteDecorator,
    GET,
    POST,
    PUT,
    PATCH,
    DELETE,
    OPTIONS,
    HEAD,
    ALL,
    route,
    schema,
    before_handle,
    after_handle,
    on_error,
    detail,
    param,
)
from .mounter import mount_http_controller, make_handler, route_options

__all__ = [
    "controller",
    "RouteDecorator",
    "GET",
    "POST",
    "PUT",
    "PATCH",
    "DELETE",
    "OPTIONS",
    "HEAD",
    "ALL",
    "route",
    "schema",
    "before_handle",
    "after_handle",
    "on_error",
    "detail",
    "param",
    "mount_http_controller",
    "make_handler",
    "route_options",
]
