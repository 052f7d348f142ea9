"""
Configuration loading.

Merge order (later overrides earlier):
    1. Defaults (``Settings`` field defaults)
    2. Config file (YAML or JSON)
    3. ``.env`` file (only ``PLINTH_*`` keys)
    4. Environment variables (``PLINTH_*``)
    5. Manual overrides
"""

from typing import Any, Callable, Dict, Mapping, Optional
from dataclasses import asdict, dataclass, fields
from pathlib import Path
import importlib
import json
import logging
import os

import yaml
from dotenv import dotenv_values

from .errors import ConfigurationError


logger = logging.getLogger("plinth.config")


@dataclass
class Settings:
    """
    Runtime settings.

    Attributes:
        host: Import path (``pkg.module:Factory``) of the host node factory
        strict: Disable auto-registration of undeclared ``@service`` classes
        log_level: Level applied to the ``plinth`` logger by the CLI
    """

    host: str = "plinth.testing:MockApp"
    strict: bool = False
    log_level: str = "WARNING"

    def load_host(self) -> Callable[..., Any]:
        """Import the host node factory named by ``host``."""
        module_path, sep, attr = self.host.partition(":")
        if not sep or not module_path or not attr:
            raise ConfigurationError(
                f"Invalid host reference '{self.host}'",
                suggestion="Use the form 'package.module:Factory'",
            )
        try:
            module = importlib.import_module(module_path)
        except ImportError as exc:
            raise ConfigurationError(
                f"Cannot import host module '{module_path}'",
                details={"error": exc},
            ) from exc
        factory = getattr(module, attr, None)
        if factory is None or not callable(factory):
            raise ConfigurationError(
                f"Host factory '{attr}' not found in '{module_path}'",
                details={"host": self.host},
            )
        return factory

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ConfigLoader:
    """
    Loads and merges settings from multiple sources.

    Example:
        settings = ConfigLoader.load("plinth.yaml", env_file=".env")
    """

    def __init__(self, env_prefix: str = "PLINTH_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        path: Optional[str] = None,
        env_prefix: str = "PLINTH_",
        env_file: Optional[str] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> Settings:
        """
        Load settings.

        Args:
            path: YAML (``.yaml``/``.yml``) or JSON config file
            env_prefix: Prefix for environment variables
            env_file: Path to a ``.env`` file
            overrides: Manual overrides (highest precedence)

        Raises:
            ConfigurationError: Unreadable file or unknown setting
        """
        loader = cls(env_prefix=env_prefix)

        if path:
            loader._load_file(Path(path))
        if env_file:
            loader._load_env_file(env_file)
        loader._load_from_env(os.environ)
        if overrides:
            loader.config_data.update(overrides)

        return loader.build()

    def build(self) -> Settings:
        known = {f.name for f in fields(Settings)}
        unknown = sorted(set(self.config_data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown setting(s): {', '.join(unknown)}",
                details={"known": sorted(known)},
            )
        return Settings(**self.config_data)

    def _load_file(self, path: Path):
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        with open(path) as f:
            try:
                if path.suffix == ".json":
                    data = json.load(f)
                elif path.suffix in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                else:
                    raise ConfigurationError(
                        f"Unsupported config file type '{path.suffix}'",
                        suggestion="Use a .yaml, .yml or .json file",
                    )
            except (json.JSONDecodeError, yaml.YAMLError) as exc:
                raise ConfigurationError(f"Cannot parse {path}", details={"error": exc}) from exc

        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        # A top-level "plinth:" section is accepted as well
        data = data.get("plinth", data)
        logger.debug("Loaded settings from %s", path)
        self.config_data.update(data)

    def _load_env_file(self, path: str):
        if not Path(path).exists():
            return
        self._load_from_env(dotenv_values(path))

    def _load_from_env(self, environ: Mapping[str, Optional[str]]):
        # Unrelated variables may share the prefix; only files and overrides are strict
        known = {f.name for f in fields(Settings)}
        for key, value in environ.items():
            if key.startswith(self.env_prefix) and value is not None:
                name = key[len(self.env_prefix):].lower()
                if name not in known:
                    logger.debug("Ignoring unknown environment setting %s", key)
                    continue
                self.config_data[name] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes", "1"):
            return True
        if value.lower() in ("false", "no", "0"):
            return False
        return value
