"""
Composition error types with rich diagnostics.

Raised while modules are being composed; all of them are fatal to bootstrap.
"""

from typing import Any, Dict, List, Optional


class CompositionError(Exception):
    """Base error for module composition and configuration problems."""

    def __init__(
        self,
        message: str,
        *,
        suggestion: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def format_error(self) -> str:
        """Format error with details and suggestion."""
        lines = [f"{self.__class__.__name__}: {self.message}"]

        if self.details:
            lines.append("\n   Details:")
            for key, value in self.details.items():
                lines.append(f"   - {key}: {value}")

        if self.suggestion:
            lines.append(f"\n   Suggestion: {self.suggestion}")

        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format_error()


class ConfigurationError(CompositionError):
    """Invalid settings (unknown host factory, bad config file, ...)."""


class MacroDefinitionError(CompositionError):
    """A class used as a macro lacks its ``@macro(name=...)`` declaration."""

    def __init__(self, macro_class: type):
        self.macro_class = macro_class
        super().__init__(
            f"{macro_class.__qualname__} must use @macro(name=...)",
            suggestion="Decorate the class with @macro(\"<name>\") before listing it in macros=[...]",
        )


class ModuleDefinitionError(CompositionError):
    """A class was composed as a module without a ``@module`` declaration."""

    def __init__(self, module_class: type):
        self.module_class = module_class
        super().__init__(
            f"{module_class.__qualname__} is not a module",
            suggestion="Decorate the class with @module(...) or pass a ModuleMeta explicitly",
        )


class ModuleCycleError(CompositionError):
    """
    Circular module imports.

    Example:
        UsersModule imports AuthModule
        AuthModule imports UsersModule  <- CYCLE
    """

    def __init__(self, cycle: List[type]):
        self.cycle = cycle
        names = [c.__qualname__ for c in cycle]
        super().__init__(
            f"Circular module import detected: {' -> '.join(names)}",
            suggestion=(
                "Move the shared services into a third module imported by both, "
                "or rely on services bubbling up through the parent container."
            ),
            details={"cycle": names, "cycle_length": len(cycle) - 1},
        )
