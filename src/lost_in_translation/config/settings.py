"""Configuration defaults and loading for the translation key scanner.

Precedence (later wins): defaults -> JSON config file -> environment.
Command line flags are applied on top by the CLI.

Config file (``lost-in-translation.json``)::

    {
      "locale": "en",
      "paths": ["resources/views", "app"],
      "lang_path": "lang",
      "extensions": ["php"],
      "max_workers": 4,
      "blade_directives": ["datetime"],
      "detect": {
        "functions": ["__", "trans", "trans_choice"],
        "static": ["Lang::get", "Lang::choice"],
        "method": ["translator->get"]
      }
    }

Environment: ``LIT_BASE_LOCALE``, ``LIT_PATHS`` (``os.pathsep`` separated),
``LIT_LANG_PATH``, ``LIT_MAX_WORKERS``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Final, List, Mapping, Optional

from ..parsing.call_matcher import CallTargets
from ..parsing.errors import ConfigError

CONFIG_FILENAME: Final = "lost-in-translation.json"
DEFAULT_BASE_LOCALE: Final = "en"
DEFAULT_PATHS: Final = ("resources/views", "app")
DEFAULT_EXTENSIONS: Final = ("php",)

ENV_BASE_LOCALE: Final = "LIT_BASE_LOCALE"
ENV_PATHS: Final = "LIT_PATHS"
ENV_LANG_PATH: Final = "LIT_LANG_PATH"
ENV_MAX_WORKERS: Final = "LIT_MAX_WORKERS"


@dataclass(frozen=True)
class Settings:
    base_locale: str = DEFAULT_BASE_LOCALE
    paths: List[str] = field(default_factory=lambda: list(DEFAULT_PATHS))
    lang_path: Optional[str] = None  # None: lang/ or resources/lang, whichever exists
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    max_workers: Optional[int] = None  # None: one worker per CPU
    blade_directives: List[str] = field(default_factory=list)
    targets: CallTargets = field(default_factory=CallTargets)

    def with_overrides(self, **changes: Any) -> "Settings":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _str_list(value: Any, name: str) -> List[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"`{name}` must be a list of strings", context={"key": name})
    return list(value)


def _workers(value: Any, name: str) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"`{name}` must be an integer, got {value!r}", context={"key": name}) from None
    if n < 1:
        raise ConfigError(f"`{name}` must be >= 1, got {n}", context={"key": name})
    return n


def settings_from_mapping(data: Mapping[str, Any], base: Settings | None = None) -> Settings:
    base = base or Settings()
    changes: dict[str, Any] = {}
    if "locale" in data:
        if not isinstance(data["locale"], str) or not data["locale"]:
            raise ConfigError("`locale` must be a non-empty string", context={"key": "locale"})
        changes["base_locale"] = data["locale"]
    if "paths" in data:
        changes["paths"] = _str_list(data["paths"], "paths")
    if "lang_path" in data:
        changes["lang_path"] = str(data["lang_path"])
    if "extensions" in data:
        changes["extensions"] = [e.lstrip("*") for e in _str_list(data["extensions"], "extensions")]
    if "max_workers" in data:
        changes["max_workers"] = _workers(data["max_workers"], "max_workers")
    if "blade_directives" in data:
        changes["blade_directives"] = _str_list(data["blade_directives"], "blade_directives")
    if "detect" in data:
        detect = data["detect"]
        if not isinstance(detect, Mapping):
            raise ConfigError("`detect` must be an object", context={"key": "detect"})
        try:
            changes["targets"] = CallTargets.from_mapping(dict(detect))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid `detect` entry: {e}", context={"key": "detect"}) from e
    return replace(base, **changes)


def load_config_file(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config file {p}: {e}", context={"path": str(p)}) from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {p}: {e}", context={"path": str(p)}) from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {p} must contain a JSON object", context={"path": str(p)})
    return data


def load_settings(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    cwd: str | Path = ".",
) -> Settings:
    """Resolve settings from the config file (explicit or ``./lost-in-translation.json``) and env."""
    env = os.environ if environ is None else environ
    settings = Settings()
    if config_path is not None:
        settings = settings_from_mapping(load_config_file(config_path), settings)
    else:
        default_file = Path(cwd) / CONFIG_FILENAME
        if default_file.is_file():
            settings = settings_from_mapping(load_config_file(default_file), settings)

    env_changes: dict[str, Any] = {}
    if env.get(ENV_BASE_LOCALE):
        env_changes["base_locale"] = env[ENV_BASE_LOCALE]
    if env.get(ENV_PATHS):
        env_changes["paths"] = [p for p in env[ENV_PATHS].split(os.pathsep) if p]
    if env.get(ENV_LANG_PATH):
        env_changes["lang_path"] = env[ENV_LANG_PATH]
    if env.get(ENV_MAX_WORKERS):
        env_changes["max_workers"] = _workers(env[ENV_MAX_WORKERS], ENV_MAX_WORKERS)
    return settings.with_overrides(**env_changes)
