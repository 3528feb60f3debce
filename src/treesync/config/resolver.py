"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping, Sequence, Union

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import TreesyncConfig

FileOverrides = Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]


def resolve_with_precedence(
    *,
    defaults: TreesyncConfig,
    file_overrides: FileOverrides | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> TreesyncConfig:
    """Merge configuration sources over the defaults.

    Later sources win: file layers in the order given, then the environment,
    then the command line. Keys may be nested mappings or dotted paths.

    Raises:
        ConfigError: If a source is malformed or the merged values are invalid.
    """
    if file_overrides is None:
        file_layers: list[Mapping[str, Any]] = []
    elif isinstance(file_overrides, MappingABC):
        file_layers = [file_overrides]
    else:
        file_layers = list(file_overrides)

    sources: list[tuple[str, Mapping[str, Any]]] = [("file", layer) for layer in file_layers]
    if env_overrides is not None:
        sources.append(("environment", env_overrides))
    if cli_overrides is not None:
        sources.append(("cli", cli_overrides))

    merged = defaults.model_dump(mode="python")
    for name, source in sources:
        merged = _deep_merge(merged, _normalize_mapping(source, source_name=name))

    try:
        return TreesyncConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: TreesyncConfig) -> Dict[str, str]:
    """Flatten the config into `TREESYNC__SECTION__KEY` environment variable mappings."""
    flat: Dict[str, str] = {}

    def _recurse(prefix: list[str], value: Any) -> None:
        if isinstance(value, dict):
            for child_key, child in value.items():
                _recurse(prefix + [str(child_key)], child)
            return
        env_key = "TREESYNC__" + "__".join(part.upper() for part in prefix)
        if isinstance(value, list):
            flat[env_key] = yaml.safe_dump(value, default_flow_style=True).strip()
        else:
            flat[env_key] = "null" if value is None else str(value)

    _recurse([], config.model_dump(mode="python"))
    return flat


def _normalize_mapping(source: Mapping[str, Any], *, source_name: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    result: dict[str, Any] = {}
    for dotted, value in dict(source).items():
        if not isinstance(dotted, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        path = dotted.split(".")
        node = result
        for segment in path[:-1]:
            existing = node.setdefault(segment, {})
            if not isinstance(existing, dict):
                raise ConfigError(
                    f"{source_name.capitalize()} override for {dotted} conflicts with existing value."
                )
            node = existing
        leaf = path[-1]
        if isinstance(value, MappingABC):
            nested = _normalize_mapping(value, source_name=source_name)
            existing_leaf = node.get(leaf)
            node[leaf] = _deep_merge(existing_leaf, nested) if isinstance(existing_leaf, dict) else nested
        else:
            node[leaf] = value
    return result


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        if isinstance(value, MappingABC) and isinstance(merged.get(key), MappingABC):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = ["resolve_with_precedence", "flatten_for_env"]
