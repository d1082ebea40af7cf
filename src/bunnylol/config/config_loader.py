"""Bunnylol configuration loader with Pydantic v2 validation.

Loads and validates a ``config.yaml`` file into a typed
:class:`BunnylolConfig` object.  Unknown keys are allowed to support
future schema additions without breakage.

Lookup order for the config file:

1. ``/etc/bunnylol/config.yaml`` (system-wide) when it exists.
2. ``$XDG_CONFIG_HOME/bunnylol/config.yaml`` (defaults to
   ``~/.config/bunnylol/config.yaml``).

Example
-------
>>> loader = ConfigLoader()
>>> config = loader.load(Path("config.yaml"))
>>> config.aliases
{'work': 'gh mycompany/repo'}
"""
from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from bunnylol.plugins.paths import APP_PREFIX, data_dir, xdg_config_home
from bunnylol.plugins.sandbox import DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

CONFIG_FILENAME: str = "config.yaml"
SYSTEM_CONFIG_PATH: Path = Path("/etc") / APP_PREFIX / CONFIG_FILENAME

_LOCAL_PREFIXES: tuple[str, ...] = ("localhost", "127.0.0.1", "0.0.0.0")
_LOG_LEVELS: frozenset[str] = frozenset({"debug", "info", "warning", "error", "critical"})


class HistoryConfig(BaseModel):
    """Configuration for command history recording."""

    model_config = {"extra": "allow"}

    enabled: bool = Field(default=True)
    max_entries: int = Field(default=1000, ge=1)
    path: Path | None = Field(default=None)

    def resolved_path(self) -> Path:
        """Return the configured history file or the XDG default."""
        if self.path is not None:
            return self.path.expanduser()
        return data_dir() / "history.jsonl"


class ServerConfig(BaseModel):
    """Configuration for ``bunnylol serve``."""

    model_config = {"extra": "allow"}

    port: int = Field(default=8085, ge=1, le=65535)
    address: str = Field(default="127.0.0.1")
    log_level: str = Field(default="info")
    server_display_url: str | None = Field(default=None)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().lower()
        if level not in _LOG_LEVELS:
            raise ValueError(
                f"Unknown log_level {value!r}; expected one of {sorted(_LOG_LEVELS)}"
            )
        return level

    def display_url(self) -> str:
        """Return the public URL shown on the landing page.

        Values with an explicit scheme are used as-is.  Bare local
        addresses get ``http://`` and bare public hosts get ``https://``.
        Without a configured value the local port is used.
        """
        if self.server_display_url is None:
            return f"http://localhost:{self.port}"
        url = self.server_display_url.strip()
        if url.startswith(("http://", "https://")):
            return url
        if url.startswith(_LOCAL_PREFIXES):
            return f"http://{url}"
        return f"https://{url}"


class BunnylolConfig(BaseModel):
    """Top-level bunnylol configuration schema.

    Loaded from ``config.yaml``.  All sections are optional and fall back
    to sensible defaults.
    """

    model_config = {"extra": "allow"}

    browser: str | None = Field(default=None)
    default_search: str = Field(default="google")
    aliases: dict[str, str] = Field(default_factory=dict)
    plugin_dirs: list[Path] = Field(default_factory=list)
    execution_timeout_seconds: float | None = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    watch: bool = Field(default=True)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @field_validator("aliases")
    @classmethod
    def validate_aliases(cls, values: dict[str, str]) -> dict[str, str]:
        cleaned: dict[str, str] = {}
        for key, target in values.items():
            if not key.strip():
                raise ValueError("Alias names must not be empty")
            if not target.strip():
                raise ValueError(f"Alias {key!r} has an empty target")
            cleaned[key.strip()] = target
        return cleaned


class ConfigLoader:
    """Loads and validates bunnylol YAML configuration.

    Example
    -------
    >>> loader = ConfigLoader()
    >>> config = loader.load(Path("config.yaml"))
    """

    def load(self, config_path: Path) -> BunnylolConfig:
        """Load and validate a bunnylol YAML file.

        Parameters
        ----------
        config_path:
            Path to the ``config.yaml`` file.

        Returns
        -------
        BunnylolConfig
            Validated configuration object.

        Raises
        ------
        FileNotFoundError:
            When the config file does not exist.
        ValueError:
            When the YAML is malformed or fails Pydantic validation.
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Bunnylol config not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as fh:
            return self._validate(fh.read(), str(config_path))

    def load_string(self, yaml_content: str) -> BunnylolConfig:
        """Load and validate a YAML string directly."""
        return self._validate(yaml_content, "<string>")

    def defaults(self) -> BunnylolConfig:
        """Return a default configuration with all defaults applied."""
        return BunnylolConfig()

    def load_default_location(self) -> BunnylolConfig:
        """Load the config from its standard location, or defaults.

        A missing file yields the defaults; an invalid file raises
        ``ValueError`` so the caller can decide how to report it.
        """
        path = self.default_path()
        if not path.exists():
            logger.debug("No config file at %s; using defaults", path)
            return self.defaults()
        return self.load(path)

    def write(self, config: BunnylolConfig, output_path: Path) -> None:
        """Serialise *config* as YAML to *output_path*."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        data = config.model_dump(mode="json", exclude_none=True)
        with output_path.open("w", encoding="utf-8") as fh:
            yaml.dump(data, fh, default_flow_style=False, sort_keys=False, allow_unicode=True)
        logger.info("Wrote bunnylol config to %s", output_path)

    @staticmethod
    def user_path() -> Path:
        """Return the per-user config file location."""
        return xdg_config_home() / APP_PREFIX / CONFIG_FILENAME

    @classmethod
    def default_path(cls) -> Path:
        """Return the config file that :meth:`load_default_location` reads."""
        user_path = cls.user_path()
        if SYSTEM_CONFIG_PATH.exists():
            if user_path.exists():
                logger.warning(
                    "Config found at both %s and %s; using %s",
                    SYSTEM_CONFIG_PATH,
                    user_path,
                    SYSTEM_CONFIG_PATH,
                )
            return SYSTEM_CONFIG_PATH
        return user_path

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(yaml_content: str, source: str) -> BunnylolConfig:
        try:
            raw = yaml.safe_load(yaml_content) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {source}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ValueError(f"Config {source} must be a mapping at the top level")
        try:
            return BunnylolConfig.model_validate(raw)
        except ValidationError as exc:
            raise ValueError(f"Invalid config {source}: {exc}") from exc
