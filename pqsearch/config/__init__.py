from __future__ import annotations

import argparse
import os
import sys
import tomllib
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
DEFAULT_CONFIG_FILE = Path.home() / ".config" / "pqsearch" / "config.toml"
ENV_FILE_ENV_VAR = "PQSEARCH_ENV_FILE"
CONFIG_FILE_ENV_VAR = "PQSEARCH_CONFIG_FILE"

_PATH_TO_ENV_KEY: dict[tuple[str, str], str] = {
    ("manticore", "host"): "MANTICORE_HOST",
    ("manticore", "port"): "MANTICORE_PORT",
    ("manticore", "user"): "MANTICORE_USER",
    ("manticore", "password"): "MANTICORE_PASSWORD",
    ("percolate", "index"): "PQSEARCH_DEFAULT_INDEX",
}
_ENV_KEY_TO_PATH = {env_name: path for path, env_name in _PATH_TO_ENV_KEY.items()}

_DEFAULTS: dict[tuple[str, str], str] = {
    ("manticore", "host"): "127.0.0.1",
    ("manticore", "port"): "9306",
    ("manticore", "user"): "",
    ("manticore", "password"): "",
}

_SECTION_FIELDS: dict[str, set[str]] = {}
for section, field in _PATH_TO_ENV_KEY:
    _SECTION_FIELDS.setdefault(section, set()).add(field)


class ConfigError(RuntimeError):
    """Raised when the configuration cannot be loaded."""


@dataclass(frozen=True)
class ManticoreConfig:
    host: str
    port: int
    user: str
    password: str


@dataclass(frozen=True)
class PercolateConfig:
    index: str | None


@dataclass(frozen=True)
class AppConfig:
    manticore: ManticoreConfig
    percolate: PercolateConfig


_CONFIG_CACHE: AppConfig | None = None


def get_config() -> AppConfig:
    """Return a cached configuration using the default sources."""
    global _CONFIG_CACHE
    if _CONFIG_CACHE is None:
        _CONFIG_CACHE = load_config()
    return _CONFIG_CACHE


def load_config(
    *,
    env_file: Path | str | None = None,
    config_file: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load a configuration from `.env`, the personal config file, and environment variables."""
    env_path = _resolve_path(env_file, ENV_FILE_ENV_VAR, DEFAULT_ENV_FILE)
    config_path = _resolve_path(config_file, CONFIG_FILE_ENV_VAR, DEFAULT_CONFIG_FILE)

    merged: dict[str, Any] = {}
    _deep_merge(merged, _env_mapping_to_nested(_parse_env_file(env_path)))
    _deep_merge(merged, _filter_known_sections(_read_config_file(config_path)))
    runtime_values = environ if environ is not None else os.environ
    _deep_merge(merged, _env_mapping_to_nested(runtime_values))
    return _build_app_config(merged)


def doctor(*, env_file: Path | str | None = None, config_file: Path | str | None = None) -> bool:
    """Validate configuration sources and print a diagnostic summary."""
    try:
        config = load_config(env_file=env_file, config_file=config_file)
    except ConfigError as exc:
        print("Configuration invalid:", file=sys.stderr)
        print(f"  {exc}", file=sys.stderr)
        return False

    print("Configuration looks good.", file=sys.stdout)
    print(f"  Manticore host: {config.manticore.host}", file=sys.stdout)
    print(f"  Manticore port: {config.manticore.port}", file=sys.stdout)
    user = config.manticore.user or "<anonymous>"
    print(f"  Manticore user: {user}", file=sys.stdout)
    default_index = config.percolate.index or "<not set>"
    print(f"  Default percolate index: {default_index}", file=sys.stdout)
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Inspect pqsearch connection settings.")
    subparsers = parser.add_subparsers(dest="command")

    doctor_parser = subparsers.add_parser("doctor", help="Load every source and report.")
    doctor_parser.add_argument("--env-file", type=Path, help=".env file to read instead.")
    doctor_parser.add_argument("--config-file", type=Path, help="TOML file to read instead.")

    args = parser.parse_args(argv)
    if args.command != "doctor":
        parser.print_help()
        return 1
    return 0 if doctor(env_file=args.env_file, config_file=args.config_file) else 1


def _build_app_config(data: Mapping[str, Any]) -> AppConfig:
    values: dict[tuple[str, str], str | None] = {}
    for path in _PATH_TO_ENV_KEY:
        section_name, key = path
        section = data.get(section_name)
        raw_value = section.get(key) if isinstance(section, Mapping) else None
        if raw_value is None or str(raw_value).strip() == "":
            values[path] = _DEFAULTS.get(path)
            continue
        values[path] = str(raw_value).strip()

    return AppConfig(
        manticore=ManticoreConfig(
            host=values[("manticore", "host")] or _DEFAULTS[("manticore", "host")],
            port=_parse_port(values[("manticore", "port")]),
            user=values[("manticore", "user")] or "",
            password=values[("manticore", "password")] or "",
        ),
        percolate=PercolateConfig(index=values[("percolate", "index")]),
    )


def _parse_port(raw: str | None) -> int:
    env_name = _PATH_TO_ENV_KEY[("manticore", "port")]
    try:
        port = int(raw or _DEFAULTS[("manticore", "port")])
    except ValueError as exc:
        raise ConfigError(f"Invalid value for {env_name}: {raw!r} is not an integer") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"Invalid value for {env_name}: {port} is out of range")
    return port


def _resolve_path(explicit: Path | str | None, env_var: str, default: Path) -> Path:
    if explicit is not None:
        return Path(explicit)
    override = os.environ.get(env_var)
    if override:
        return Path(override)
    return default


def _parse_env_file(path: Path) -> dict[str, str]:
    try:
        contents = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as exc:
        raise ConfigError(f"Failed to read env file {path}: {exc}") from exc

    values: dict[str, str] = {}
    for raw_line in contents.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        if "=" not in line:
            continue
        key, raw_value = line.split("=", 1)
        values[key.strip()] = _strip_quotes(raw_value.strip())
    return values


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and ((value[0] == value[-1]) and value.startswith(("'", '"'))):
        return value[1:-1]
    return value


def _read_config_file(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError:
        return {}
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Config file {path} is not valid TOML: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {path}: {exc}") from exc


def _filter_known_sections(raw: Mapping[str, Any]) -> dict[str, Any]:
    filtered: dict[str, Any] = {}
    for section, allowed_fields in _SECTION_FIELDS.items():
        raw_section = raw.get(section)
        if not isinstance(raw_section, Mapping):
            continue
        filtered_section = {
            field: str(raw_section[field]) for field in allowed_fields if field in raw_section
        }
        if filtered_section:
            filtered[section] = filtered_section
    return filtered


def _env_mapping_to_nested(mapping: Mapping[str, Any]) -> dict[str, Any]:
    nested: dict[str, Any] = {}
    for key, value in mapping.items():
        path = _ENV_KEY_TO_PATH.get(key)
        if path:
            nested.setdefault(path[0], {})[path[1]] = value
    return nested


def _deep_merge(target: MutableMapping[str, Any], data: Mapping[str, Any]) -> None:
    for key, value in data.items():
        if isinstance(value, Mapping):
            child = target.get(key)
            if not isinstance(child, MutableMapping):
                child = {}
                target[key] = child
            _deep_merge(child, value)
        elif value is not None:
            target[key] = value


__all__ = [
    "AppConfig",
    "ConfigError",
    "ManticoreConfig",
    "PercolateConfig",
    "doctor",
    "get_config",
    "load_config",
    "main",
]
