"""Configuration management for treesync."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import TreesyncConfig
from .resolver import flatten_for_env, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.treesync/config.yaml")
COLLECTION_CONFIG_NAME = "config.yaml"
ENV_PREFIX = "TREESYNC__"
_CONFIG_HEADER = textwrap.dedent(
    """\
    # treesync configuration file
    # Generated automatically; manage via `treesync config edit` or `treesync config set`.
    """
)


class ConfigManager:
    """Load and persist configuration data, applying precedence rules.

    Sources are layered as defaults, the user configuration file, an optional
    per-collection file stored in the collection's state directory,
    ``TREESYNC__SECTION__KEY`` environment variables, and CLI overrides.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
        collection_dir: Path | None = None,
    ) -> TreesyncConfig:
        """Load configuration data, applying precedence rules.

        Args:
            cli_overrides: Dotted-key overrides supplied on the command line.
            include_env: Whether environment overrides participate.
            ensure_file: Whether to create the user file when it is missing.
            env_overrides: Explicit environment mapping replacing ``os.environ``.
            collection_dir: State directory of a collection whose
                ``config.yaml`` layers over the user file.

        Returns:
            TreesyncConfig: Validated configuration.

        Raises:
            ConfigError: If a file cannot be parsed or values fail validation.
        """
        if ensure_file:
            self.ensure_exists()

        file_layers = [self._read_file(self._config_path)]
        if collection_dir is not None:
            file_layers.append(self._read_file(collection_dir / COLLECTION_CONFIG_NAME))

        env_data: Mapping[str, str] | None
        if include_env:
            env_data = env_overrides if env_overrides is not None else self._env
        else:
            env_data = None

        return resolve_with_precedence(
            defaults=TreesyncConfig(),
            file_overrides=file_layers,
            env_overrides=self._extract_env(env_data) if env_data else None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return raw overrides stored in the user file."""
        return self._read_file(self._config_path)

    def save(self, config: TreesyncConfig | Mapping[str, Any]) -> None:
        """Persist configuration data to the user file."""
        data = config.model_dump(mode="python") if isinstance(config, TreesyncConfig) else dict(config)
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        serialized = yaml.safe_dump(data, sort_keys=False)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        self._config_path.write_text(
            f"{_CONFIG_HEADER}# Last updated: {stamp}\n{serialized}", encoding="utf-8"
        )

    def ensure_exists(self) -> Path:
        """Create a configuration file with defaults if one does not exist."""
        if not self._config_path.exists():
            self.save(TreesyncConfig())
        return self._config_path

    def read_text(self) -> str:
        """Return the current configuration file contents."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    def _read_file(self, path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}

        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file {path}: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError(f"Configuration file {path} must contain a mapping at the top level.")

        return raw

    def _extract_env(self, env: Mapping[str, str]) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        for name, raw_value in env.items():
            if not name.startswith(ENV_PREFIX):
                continue
            segments = [segment.lower() for segment in name[len(ENV_PREFIX) :].split("__") if segment]
            if not segments:
                continue
            try:
                parsed_value: Any = yaml.safe_load(raw_value)
            except yaml.YAMLError:
                parsed_value = raw_value

            node = overrides
            for segment in segments[:-1]:
                child = node.get(segment)
                if not isinstance(child, dict):
                    child = {}
                    node[segment] = child
                node = child
            node[segments[-1]] = parsed_value

        return overrides


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "COLLECTION_CONFIG_NAME",
    "TreesyncConfig",
    "resolve_with_precedence",
    "flatten_for_env",
    "ConfigError",
]
