"""
Plinth testing helpers.

Usage:
    from plinth.testing import MockApp
    from plinth.composer import Composer

    app = Composer(MockApp).compose(AppModule)
    response = await app.dispatch("GET", "/users/1")
"""

from .app import (
    MockApp,
    MockContext,
    MockResponse,
    ResponseSet,
    RouteRecord,
    WsRecord,
    match_path,
)

__all__ = [
    "MockApp",
    "MockContext",
    "MockResponse",
    "ResponseSet",
    "RouteRecord",
    "WsRecord",
    "match_path",
]
