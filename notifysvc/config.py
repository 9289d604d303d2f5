"""Loading of the application configuration from YAML, a .env file and the environment."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import dotenv_values

from .models import AppConfig

_CONFIG_NAME = "app_config"
_EXTENSIONS = (".yaml", ".yml")


class ConfigError(Exception):
    """Raised when the configuration cannot be read or decoded."""


def _lower_keys(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value


def _find_config(config_dir: Path) -> Path:
    for ext in _EXTENSIONS:
        candidate = config_dir / f"{_CONFIG_NAME}{ext}"
        if candidate.is_file():
            return candidate
    raise ConfigError(f'error reading config file: Config File "{_CONFIG_NAME}" Not Found in "{config_dir}"')


def _set_path(data: dict[str, Any], path: list[str], value: Any) -> None:
    node = data
    for part in path[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[path[-1]] = value


def _merge_env_file(data: dict[str, Any], env_path: Path) -> None:
    try:
        values = dotenv_values(env_path)
    except (OSError, ValueError):
        return
    for key, value in values.items():
        if value is None:
            continue
        _set_path(data, key.lower().split("."), value)


def _leaf_paths(data: Mapping[str, Any], prefix: tuple[str, ...] = ()) -> list[tuple[str, ...]]:
    paths: list[tuple[str, ...]] = []
    for key, value in data.items():
        path = prefix + (key,)
        if isinstance(value, Mapping):
            paths.extend(_leaf_paths(value, path))
        else:
            paths.append(path)
    return paths


def _apply_environment(data: dict[str, Any], environ: Mapping[str, str]) -> None:
    for path in _leaf_paths(data):
        name = ".".join(path).upper()
        if name in environ:
            _set_path(data, list(path), environ[name])


def load_app_config(
    config_dir: str | os.PathLike[str] = "configs",
    env_path: str | os.PathLike[str] = os.path.join("cmd", ".env"),
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Read ``app_config.yaml``, merge the optional .env file, then apply environment overrides."""
    source = _find_config(Path(config_dir))
    try:
        loaded = yaml.safe_load(source.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"error reading config file: {exc}") from exc
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, Mapping):
        raise ConfigError("error reading config file: top level must be a mapping")
    data: dict[str, Any] = _lower_keys(loaded)

    env_file = Path(env_path)
    if env_file.is_file():
        _merge_env_file(data, env_file)

    _apply_environment(data, os.environ if environ is None else environ)

    try:
        return AppConfig.from_mapping(data)
    except ValueError as exc:
        raise ConfigError(f"unable to decode into struct: {exc}") from exc