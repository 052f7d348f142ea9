"""
Plinth WebSockets

WebSocket controllers: endpoint declaration, handler bundles and mounting.
"""

from .decorators import ws_controller, ws, ws_schema, WsHandlers
from .mounter import mount_ws_controller, bind_capability

__all__ = [
    "ws_controller",
    "ws",
    "ws_schema",
    "WsHandlers",
    "mount_ws_controller",
    "bind_capability",
]
