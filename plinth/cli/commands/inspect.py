"""
Composition inspection commands.

Loads a module class from an import path, composes it against the configured
host and reports what was mounted: routes, WebSocket routes, hooks, macros
and the providers of every module container.
"""

import importlib
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

from ...composer import Composer
from ...config import Settings
from ...di.diagnostics import ConsoleDiagnosticListener, DIDiagnostics
from ...di.errors import token_name
from ...di.scopes import ServiceScope


def load_target(target: str) -> type:
    """Import ``package.module:ModuleClass``; the working directory is importable."""
    module_path, sep, attr = target.partition(":")
    if not sep or not module_path or not attr:
        raise ValueError(f"Target must look like 'package.module:AppModule', got '{target}'")

    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    module = importlib.import_module(module_path)
    try:
        return getattr(module, attr)
    except AttributeError:
        raise ValueError(f"'{attr}' not found in module '{module_path}'") from None


def compose_target(target: str, settings: Settings, verbose: bool = False) -> Tuple[Composer, Any]:
    diagnostics = DIDiagnostics()
    if verbose:
        diagnostics.add_listener(ConsoleDiagnosticListener())
    composer = Composer(settings=settings, diagnostics=diagnostics)
    app = composer.compose(load_target(target))
    return composer, app


def _handler_name(handler: Any) -> str:
    wrapped = getattr(handler, "__wrapped__", handler)
    return getattr(wrapped, "__qualname__", repr(wrapped))


def _hook_names(hooks: Any) -> List[str]:
    if not hooks:
        return []
    if not isinstance(hooks, (list, tuple)):
        hooks = [hooks]
    return [getattr(h, "__qualname__", repr(h)) for h in hooks]


def build_report(app: Any) -> Dict[str, Any]:
    """
    Summarise a composed node tree.

    Requires a host node that can be walked (``plinth.testing.MockApp``).
    """
    if not hasattr(app, "walk"):
        raise ValueError(f"Host node {type(app).__name__} does not support inspection")

    routes = []
    for path, record, _ in app.iter_routes():
        routes.append({
            "method": record.method,
            "path": path,
            "handler": _handler_name(record.handler),
            "options": sorted(record.options),
            "guarded": bool(record.guards),
        })

    ws_routes = []
    for path, record in app.iter_ws_routes():
        ws_routes.append({
            "path": path,
            "handlers": sorted(k for k in ("open", "message", "close", "drain") if k in record.options),
        })

    nodes = []
    for base, node, _ in app.walk():
        nodes.append({
            "name": node.name,
            "prefix": base,
            "hooks": {kind: _hook_names(fns) for kind, fns in node.hooks.items()},
        })

    return {
        "nodes": nodes,
        "routes": routes,
        "ws_routes": ws_routes,
        "macros": sorted(app.all_macros()),
    }


def build_provider_report(composer: Composer) -> List[Dict[str, Any]]:
    report = []
    for module_cls, container in composer.composed_modules():
        report.append({
            "module": module_cls.__qualname__,
            "container": container.name,
            "parent": container.parent.name if container.parent else None,
            "providers": [
                {
                    "token": token_name(token),
                    "kind": provider.kind,
                    "scope": ServiceScope(provider.scope).value,
                    "deps": [token_name(d) if d is not None else None for d in provider.deps],
                }
                for token, provider in container.providers()
            ],
        })
    return report
