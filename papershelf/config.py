"""Configuration management.

``Settings`` is an immutable snapshot of the configuration variables used
for one run.  ``Configuration`` wraps it together with the search list it
was loaded from and writes it back on exit when it was created from
built-in defaults::

    with Configuration.load() as conf:
        settings = conf.settings

The configuration file is YAML and is looked up in a platform-specific
search list (see :class:`ConfigPaths`); the first existing file wins.
"""

import logging
import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from types import TracebackType
from typing import Any, Mapping, Optional, Sequence

import yaml

from papershelf.errors import ConfigurationError

logger = logging.getLogger(__name__)

APP_NAME = "papershelf"


# ---------------------------------------------------------------------------
# Settings dataclass
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Settings:
    """Configuration variables.

    ``name_pattern`` placeholders:

    * ``%F`` / ``%f`` – original file name (as-is / lower case)
    * ``%K`` / ``%k`` – citation key
    * ``%A`` / ``%a`` – author names, at most ``max_author_names``
    * ``%L`` / ``%l`` – author last names
    * ``%T`` / ``%t`` – title
    * ``%Y`` / ``%y`` – four / two digit year
    * ``%M`` / ``%m`` – month name, empty when unknown
    """

    document_location: Path
    library_location: Path
    name_pattern: str = "%A-%y-%T"
    max_author_names: int = 2
    author_separator: str = "_"
    move_files: bool = True

    @classmethod
    def defaults(cls, paths: "ConfigPaths") -> "Settings":
        """Built-in defaults: ``<documents>/Papers`` holding ``library.json``."""
        document_location = paths.document_dir / "Papers"
        return cls(
            document_location=document_location,
            library_location=document_location / "library.json",
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], defaults: "Settings") -> "Settings":
        """Build settings from a parsed YAML mapping, filling gaps from *defaults*.

        Raises:
            ConfigurationError: If a value has the wrong type
        """
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            logger.warning("Ignoring unknown configuration keys: %s", sorted(unknown))

        def pick(name: str, kind: type) -> Any:
            value = data.get(name)
            if value is None:
                return getattr(defaults, name)
            # bool is an int subclass; reject it where a number is expected
            if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
                raise ConfigurationError(
                    f"Configuration value '{name}' must be of type {kind.__name__}, "
                    f"got {value!r}"
                )
            return value

        max_author_names = pick("max_author_names", int)
        if max_author_names < 0:
            raise ConfigurationError("Configuration value 'max_author_names' must not be negative")

        return cls(
            document_location=Path(pick("document_location", str)).expanduser(),
            library_location=Path(pick("library_location", str)).expanduser(),
            name_pattern=pick("name_pattern", str),
            max_author_names=max_author_names,
            author_separator=pick("author_separator", str),
            move_files=pick("move_files", bool),
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "document_location": str(self.document_location),
            "library_location": str(self.library_location),
            "name_pattern": self.name_pattern,
            "max_author_names": self.max_author_names,
            "author_separator": self.author_separator,
            "move_files": self.move_files,
        }


# ---------------------------------------------------------------------------
# Search path resolver
# ---------------------------------------------------------------------------

class ConfigPaths:
    """Where to look for the configuration file and the user's documents."""

    def __init__(self, config_files: Sequence[Path], document_dir: Path):
        if not config_files:
            raise ValueError("At least one configuration path is required")
        self.config_files = [Path(p) for p in config_files]
        self.document_dir = Path(document_dir)

    @classmethod
    def for_platform(
        cls,
        platform: str = sys.platform,
        environ: Optional[Mapping[str, str]] = None,
        home: Optional[Path] = None,
    ) -> "ConfigPaths":
        """Resolve the search list for *platform* (``sys.platform`` values)."""
        env = os.environ if environ is None else environ
        home = home or Path.home()

        if platform.startswith("win"):
            appdata = Path(env.get("APPDATA") or home / "AppData" / "Roaming")
            config_files = [appdata / APP_NAME / "config.yaml"]
        elif platform == "darwin":
            config_files = [home / "Library" / "Application Support" / APP_NAME / "config.yaml"]
        else:
            config_home = Path(env.get("XDG_CONFIG_HOME") or home / ".config")
            config_files = [
                config_home / APP_NAME / "config.yaml",
                Path(f"/etc/{APP_NAME}.yaml"),
            ]

        document_dir = Path(env.get("XDG_DOCUMENTS_DIR") or home / "Documents")
        return cls(config_files, document_dir)

    def existing(self) -> Optional[Path]:
        """Return the first configuration file that exists, or None."""
        return next((p for p in self.config_files if p.exists()), None)

    def save_target(self) -> Path:
        """Return the file a configuration is written to."""
        return self.existing() or self.config_files[0]


# ---------------------------------------------------------------------------
# Configuration (load / save lifecycle)
# ---------------------------------------------------------------------------

class Configuration:
    """Settings plus the bookkeeping needed to persist them."""

    def __init__(self, settings: Settings, paths: ConfigPaths, modified: bool = False):
        self.settings = settings
        self.paths = paths
        self.modified = modified

    @classmethod
    def load(cls, paths: Optional[ConfigPaths] = None) -> "Configuration":
        """Load the first existing configuration file, else use defaults.

        Defaults are marked as modified so they get written on exit.

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        paths = paths or ConfigPaths.for_platform()
        defaults = Settings.defaults(paths)
        path = paths.existing()
        if path is None:
            logger.debug("No configuration file found, using defaults")
            return cls(defaults, paths, modified=True)

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(
                f"Saving or loading configuration failed; could not read {path}: {exc}"
            ) from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a mapping")

        logger.debug("Loaded configuration from %s", path)
        return cls(Settings.from_mapping(data, defaults), paths)

    def save(self) -> Path:
        """Write the settings to the first existing search path (or the first one).

        Raises:
            ConfigurationError: On I/O or serialization failure
        """
        path = self.paths.save_target()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                yaml.dump(
                    self.settings.to_mapping(),
                    f,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                )
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(
                f"Saving or loading configuration failed; could not write {path}: {exc}"
            ) from exc
        self.modified = False
        logger.info("Wrote configuration to %s", path)
        return path

    def close(self) -> None:
        """Save if modified; failures are logged, not raised."""
        if not self.modified:
            return
        try:
            self.save()
        except ConfigurationError as exc:
            logger.error("Failed to save configuration: %s", exc)

    def __enter__(self) -> "Configuration":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()
