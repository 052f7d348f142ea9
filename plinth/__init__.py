"""
Plinth - metadata-driven dependency injection and module composition.

Declare services, controllers, WebSocket controllers, macros and modules with
decorators; the composer reads the collected metadata and assembles a host
application graph: resolved singletons, mounted routes and hook chains.

Example:
    from plinth import module, controller, service, GET, Inject, Path, Composer
    from plinth.testing import MockApp

    @service()
    class UsersService:
        def find(self, user_id):
            ...

    @controller("/users")
    class UsersController:
        def __init__(self, users=Inject(UsersService)):
            self.users = users

        @GET("/:id")
        def get_one(self, user_id=Path("id")):
            return self.users.find(user_id)

    @module(name="users", services=[UsersService], controllers=[UsersController])
    class UsersModule:
        pass

    app = Composer(MockApp).compose(UsersModule)
"""

__version__ = "0.3.0"

from .di import (
    Container,
    Provider,
    ClassProvider,
    ValueProvider,
    FactoryProvider,
    ServiceScope,
    service,
    injectable,
    inject,
    Inject,
    DIError,
    ProviderNotFoundError,
    InvalidProviderError,
    DuplicateProviderError,
    DependencyCycleError,
)

from .params import (
    ParamKind,
    Param,
    ParamBinding,
    Ctx,
    Body,
    Query,
    Params,
    Headers,
    Cookie,
    Set,
    Path,
    Q,
    build_arguments,
)

from .metadata import MetadataRegistry, get_registry

from .controller import (
    controller,
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

from .sockets import ws_controller, ws, ws_schema, WsHandlers

from .macro import macro, macro_handler, build_macro_table, build_macro_plugin

from .module import module, ModuleMeta, Guard, Hooks

from .composer import Composer, build_module, configure, get_composer, reset_composition

from .config import Settings, ConfigLoader

from .errors import (
    CompositionError,
    ConfigurationError,
    MacroDefinitionError,
    ModuleCycleError,
    ModuleDefinitionError,
)


def reset() -> None:
    """Clear the process-wide metadata registry and composition cache."""
    get_registry().reset()
    reset_composition()


__all__ = [
    "__version__",
    "reset",
    # DI
    "Container",
    "Provider",
    "ClassProvider",
    "ValueProvider",
    "FactoryProvider",
    "ServiceScope",
    "service",
    "injectable",
    "inject",
    "Inject",
    # Params
    "ParamKind",
    "Param",
    "ParamBinding",
    "Ctx",
    "Body",
    "Query",
    "Params",
    "Headers",
    "Cookie",
    "Set",
    "Path",
    "Q",
    "build_arguments",
    # Metadata
    "MetadataRegistry",
    "get_registry",
    # Controllers
    "controller",
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
    # WebSockets
    "ws_controller",
    "ws",
    "ws_schema",
    "WsHandlers",
    # Macros
    "macro",
    "macro_handler",
    "build_macro_table",
    "build_macro_plugin",
    # Modules
    "module",
    "ModuleMeta",
    "Guard",
    "Hooks",
    "Composer",
    "build_module",
    "configure",
    "get_composer",
    "reset_composition",
    # Config
    "Settings",
    "ConfigLoader",
    # Errors
    "DIError",
    "ProviderNotFoundError",
    "InvalidProviderError",
    "DuplicateProviderError",
    "DependencyCycleError",
    "CompositionError",
    "ConfigurationError",
    "MacroDefinitionError",
    "ModuleCycleError",
    "ModuleDefinitionError",
]
