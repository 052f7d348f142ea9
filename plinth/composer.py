"""
Module Composer.

Builds one host node per ``@module`` class, recursively, with one DI
container per module chained to the importing module's container.

Composition steps for a module:
    1. Serve the cached node if the module was already composed
    2. Create the module container (child of the importer's container)
    3. Register providers, services, controllers and WS controllers
    4. Create the host node with the module's name/prefix/scoped options
    5. Attach lifecycle hook chains
    6. Mount macros
    7. Compose imports with this container as parent and mount them
    8. Mount HTTP controllers, inside a guard scope when one is declared
    9. Mount WS controllers
    10. Cache and return the finished node

The cache entry is written before imports are composed, so diamond imports
share one node and one container subtree. A module that re-enters its own
composition through its imports raises ``ModuleCycleError``.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from .config import Settings
from .controller.mounter import mount_http_controller
from .di.core import Container
from .di.diagnostics import DIDiagnostics
from .di.providers import ClassProvider, Provider
from .errors import ModuleCycleError, ModuleDefinitionError
from .host import AppFactory, HostApp
from .macro import build_macro_plugin
from .metadata import MetadataRegistry, get_registry
from .module import ModuleMeta
from .sockets.mounter import mount_ws_controller


logger = logging.getLogger("plinth.composer")


class Composer:
    """
    Composes module graphs against a host node factory.

    Args:
        app_factory: Host node constructor ``factory(name=?, prefix=?, scoped=?)``;
            defaults to ``settings.load_host()``
        registry: Metadata registry to read descriptors from
        settings: Runtime settings (``strict`` disables auto-registration)
        diagnostics: DI event bus shared by every module container

    Example:
        composer = Composer(MockApp)
        app = composer.compose(AppModule)
        users = composer.container_for(UsersModule).resolve(UsersService)
    """

    def __init__(
        self,
        app_factory: Optional[AppFactory] = None,
        *,
        registry: Optional[MetadataRegistry] = None,
        settings: Optional[Settings] = None,
        diagnostics: Optional[DIDiagnostics] = None,
    ):
        self.settings = settings or Settings()
        self.registry = registry if registry is not None else get_registry()
        self.diagnostics = diagnostics or DIDiagnostics()
        self._app_factory = app_factory
        self._nodes: Dict[type, Any] = {}
        self._containers: Dict[type, Container] = {}
        self._in_progress: List[type] = []
        self._macro_instances: Dict[type, Any] = {}

    @property
    def app_factory(self) -> AppFactory:
        if self._app_factory is None:
            self._app_factory = self.settings.load_host()
        return self._app_factory

    def compose(self, module_cls: type, parent: Optional[Container] = None) -> HostApp:
        """
        Compose ``module_cls`` and return its host node.

        Raises:
            ModuleDefinitionError: ``module_cls`` has no module descriptor
            ModuleCycleError: ``module_cls`` imports itself, directly or not
        """
        if module_cls in self._in_progress:
            start = self._in_progress.index(module_cls)
            raise ModuleCycleError(self._in_progress[start:] + [module_cls])

        if module_cls in self._nodes:
            logger.debug("Module %s served from cache", module_cls.__qualname__)
            return self._nodes[module_cls]

        meta = self.registry.module_meta(module_cls)
        if meta is None:
            raise ModuleDefinitionError(module_cls)

        self._in_progress.append(module_cls)
        try:
            app = self._build(module_cls, meta, parent)
        except Exception:
            self._nodes.pop(module_cls, None)
            self._containers.pop(module_cls, None)
            raise
        finally:
            self._in_progress.pop()

        self._nodes[module_cls] = app
        logger.info(
            "Composed module %s (%d controllers, %d ws controllers, %d imports)",
            meta.name or module_cls.__qualname__,
            len(meta.controllers), len(meta.ws_controllers), len(meta.imports),
        )
        return app

    def container_for(self, module_cls: type) -> Container:
        """Container of an already composed module."""
        try:
            return self._containers[module_cls]
        except KeyError:
            raise KeyError(f"Module {module_cls.__qualname__} has not been composed") from None

    def composed_modules(self) -> List[Tuple[type, Container]]:
        """``(module, container)`` pairs in composition start order."""
        return list(self._containers.items())

    def reset(self) -> None:
        """Forget every composed node, container and macro instance."""
        self._nodes.clear()
        self._containers.clear()
        self._in_progress.clear()
        self._macro_instances.clear()

    # ------------------------------------------------------------------

    def _build(self, module_cls: type, meta: ModuleMeta, parent: Optional[Container]) -> Any:
        container = Container(
            parent,
            registry=self.registry,
            auto_register=not self.settings.strict,
            diagnostics=self.diagnostics,
            name=meta.name or module_cls.__qualname__,
        )
        self._containers[module_cls] = container

        container.register(*meta.providers)
        for cls in (*meta.services, *meta.controllers, *meta.ws_controllers):
            container.register(self.class_provider(cls))

        app = self.app_factory(**meta.node_options())

        for method, hooks in meta.hooks.chains():
            for hook in hooks:
                app = getattr(app, method)(hook)

        for macro_cls in meta.macros:
            app = app.use(self._macro_plugin(macro_cls))

        # Written before imports so repeated and diamond imports hit the cache
        self._nodes[module_cls] = app

        for sub in meta.imports:
            app = app.use(self.compose(sub, container))

        guard = meta.guard_options()
        for controller_cls in meta.controllers:
            app = mount_http_controller(app, controller_cls, container, guard, self.registry)

        for controller_cls in meta.ws_controllers:
            app = mount_ws_controller(app, controller_cls, container, self.registry)

        return app

    def class_provider(self, cls: type) -> Provider:
        """
        Singleton provider for ``cls``.

        Declared ``@service`` deps win; otherwise the ``Inject`` overrides
        give a dense dependency list with ``None`` in unbound slots.
        """
        meta = self.registry.service_meta(cls)
        if meta and meta.deps:
            return ClassProvider(cls, deps=meta.deps)

        overrides = self.registry.inject_params(cls)
        if overrides:
            deps: List[Any] = [None] * (max(overrides) + 1)
            for index, token in overrides.items():
                deps[index] = token
            return ClassProvider(cls, deps=deps)

        return ClassProvider(cls)

    def _macro_plugin(self, macro_cls: type) -> Any:
        instance = self._macro_instances.get(macro_cls)
        if instance is None:
            # Surface a missing @macro before instantiating the class
            if self.registry.macro_meta(macro_cls) is not None:
                instance = self._macro_instances[macro_cls] = macro_cls()
        return build_macro_plugin(self.app_factory, macro_cls, instance, self.registry)


# ----------------------------------------------------------------------
# Process-wide default composer
# ----------------------------------------------------------------------

_default_composer: Optional[Composer] = None


def get_composer() -> Composer:
    """Return the process-wide composer, creating it on first use."""
    global _default_composer
    if _default_composer is None:
        _default_composer = Composer()
    return _default_composer


def configure(
    app_factory: Optional[Callable[..., Any]] = None,
    *,
    settings: Optional[Settings] = None,
) -> Composer:
    """Replace the process-wide composer (drops its composition cache)."""
    global _default_composer
    _default_composer = Composer(app_factory, settings=settings)
    return _default_composer


def build_module(module_cls: type, parent: Optional[Container] = None) -> Any:
    """Compose ``module_cls`` with the process-wide composer."""
    return get_composer().compose(module_cls, parent)


def reset_composition() -> None:
    """Clear the process-wide composition cache."""
    if _default_composer is not None:
        _default_composer.reset()
