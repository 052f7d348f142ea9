"""
Macro Adapter

Turns a ``@macro`` class into the ``{option field -> callback}`` table taken
by the host's extension mechanism.

Example:
    @macro("auth")
    class AuthMacro:
        @macro_handler("is_signed_in")
        def is_signed_in(self, enabled):
            return {"before_handle": require_session} if enabled else {}
"""

from typing import Any, Callable, Dict, Optional, Type, TypeVar
import logging

from .errors import MacroDefinitionError
from .metadata import MetadataRegistry, declared_members, get_registry


F = TypeVar("F", bound=Callable[..., Any])
T = TypeVar("T")

logger = logging.getLogger("plinth.macro")


def macro_handler(field: str) -> Callable[[F], F]:
    """Expose the method as the handler for macro option ``field``."""
    def decorator(func: F) -> F:
        if "__macro_fields__" not in func.__dict__:
            func.__macro_fields__ = []
        func.__macro_fields__.append(field)
        return func

    return decorator


def macro(
    name: str,
    *,
    registry: Optional[MetadataRegistry] = None,
) -> Callable[[Type[T]], Type[T]]:
    """Declare a macro class named ``name``."""
    if not name:
        raise ValueError("@macro requires a non-empty name")

    def decorator(cls: Type[T]) -> Type[T]:
        target = registry or get_registry()
        target.define_macro(cls, name)
        for key, func in declared_members(cls):
            for field in func.__dict__.get("__macro_fields__", []):
                target.add_macro_handler(cls, field, key)
        return cls

    return decorator


def build_macro_table(
    macro_cls: type,
    instance: Any = None,
    registry: Optional[MetadataRegistry] = None,
) -> Dict[str, Callable[[Any], Any]]:
    """
    Build the option-handler table of ``macro_cls``.

    Each callback delegates to one shared instance of the class (created here
    with no arguments unless ``instance`` is given).

    Raises:
        MacroDefinitionError: ``macro_cls`` has no ``@macro`` name
    """
    registry = registry or get_registry()
    if registry.macro_meta(macro_cls) is None:
        raise MacroDefinitionError(macro_cls)

    if instance is None:
        instance = macro_cls()

    table: Dict[str, Callable[[Any], Any]] = {}
    for field, key in registry.macro_handlers(macro_cls).items():
        method = getattr(instance, key)
        table[field] = lambda value, _method=method: _method(value)
    return table


def build_macro_plugin(
    app_factory: Callable[..., Any],
    macro_cls: type,
    instance: Any = None,
    registry: Optional[MetadataRegistry] = None,
) -> Any:
    """Create a host node named after the macro carrying its handler table."""
    registry = registry or get_registry()
    table = build_macro_table(macro_cls, instance, registry)
    meta = registry.macro_meta(macro_cls)
    logger.debug("Built macro %r with fields %s", meta.name, sorted(table))
    return app_factory(name=meta.name).macro(table)
