# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# Purpose: Defines the config unit so this responsibility stays isolated, testable, and easy to evolve.

"""
Configuration loading utilities for BookNote.

Conventions:
- Machine-specific config: resources/config/machine.json
- Environment variables override JSON values.
- JSON values can reference environment variables using ${VAR_NAME} placeholders.

Only generic JSON dicts are returned, plus one typed view for the storage layer.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from booknote.services.exceptions import ConfigurationError

BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent
CONFIG_DIR = BASE_DIR / "resources" / "config"
RESOURCES_DIR = BASE_DIR / "resources"
DATA_DIR = BASE_DIR / "data"
LOGS_DIR = DATA_DIR / "logs"
STATIC_DIR = BASE_DIR / "static"

DEFAULT_STORAGE_CONFIG: Dict[str, Any] = {
    "storage": {
        "backend": "local",
        "delete_policy": "orphan",
        "save_feedback_s": 1.5,
        "spell_check_delay_s": 1.0,
        "local": {
            "data_dir": str(DATA_DIR),
            "key": "booknote_databases",
        },
        "remote": {
            "url": "https://placeholder.supabase.co",
            "api_key": "placeholder-key",
            "table": "booknote_saves",
            "row_id": "main_save",
            "column": "data",
            "timeout_s": 30,
        },
    }
}

_ENV_PATTERN = re.compile(r"\$\{([A-Z0-9_]+)\}")


def _interpolate_env(value: Any) -> Any:
    """Interpolate ${VAR} placeholders within strings using environment variables.

    Non-string types are returned unchanged.
    """
    if isinstance(value, str):

        def replace(match: re.Match[str]) -> str:
            var = match.group(1)
            return os.getenv(var, match.group(0))  # leave placeholder if unset

        return _ENV_PATTERN.sub(replace, value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(v) for v in value]
    return value


def _deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Deeply merge mapping 'override' into dict 'base'. Returns new dict.

    - For dict values, merges recursively.
    - For lists and scalars, override replaces base.
    """
    result: Dict[str, Any] = dict(base)
    for k, v in override.items():
        if isinstance(v, Mapping) and isinstance(result.get(k), Mapping):
            result[k] = _deep_merge(dict(result[k]), v)  # type: ignore[index]
        else:
            result[k] = v
    return result


def load_json_file(path: os.PathLike[str] | str | None) -> Dict[str, Any]:
    """Load JSON from path if it exists; return empty dict if missing.

    Raises ValueError for malformed JSON.
    """
    if path is None:
        return {}
    p = Path(path)
    if not p.exists():
        return {}
    try:
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON at {p}: {e}") from e


def _env_overrides_for_storage() -> Dict[str, Any]:
    """Collect storage-related environment variables into a nested dict structure.

    Supported variables:
    - BOOKNOTE_STORAGE_BACKEND -> storage.backend
    - BOOKNOTE_DELETE_POLICY -> storage.delete_policy
    - BOOKNOTE_DATA_DIR -> storage.local.data_dir
    - BOOKNOTE_STORAGE_KEY -> storage.local.key
    - SUPABASE_URL -> storage.remote.url
    - SUPABASE_ANON_KEY -> storage.remote.api_key
    - BOOKNOTE_REMOTE_TIMEOUT_S -> storage.remote.timeout_s (int if parseable)
    """
    storage: Dict[str, Any] = {}
    local: Dict[str, Any] = {}
    remote: Dict[str, Any] = {}

    backend = os.getenv("BOOKNOTE_STORAGE_BACKEND")
    delete_policy = os.getenv("BOOKNOTE_DELETE_POLICY")
    data_dir = os.getenv("BOOKNOTE_DATA_DIR")
    key = os.getenv("BOOKNOTE_STORAGE_KEY")
    url = os.getenv("SUPABASE_URL")
    api_key = os.getenv("SUPABASE_ANON_KEY")
    timeout_s = os.getenv("BOOKNOTE_REMOTE_TIMEOUT_S")

    if backend is not None:
        storage["backend"] = backend
    if delete_policy is not None:
        storage["delete_policy"] = delete_policy
    if data_dir is not None:
        local["data_dir"] = data_dir
    if key is not None:
        local["key"] = key
    if url is not None:
        remote["url"] = url
    if api_key is not None:
        remote["api_key"] = api_key
    if timeout_s is not None:
        try:
            remote["timeout_s"] = int(timeout_s)
        except ValueError:
            remote["timeout_s"] = timeout_s

    if local:
        storage["local"] = local
    if remote:
        storage["remote"] = remote
    return {"storage": storage} if storage else {}


def load_machine_config(
    path: os.PathLike[str] | str | None = "config/machine.json",
    defaults: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Load machine configuration applying precedence and interpolation.

    Precedence: env overrides > JSON file > defaults
    """
    defaults = dict(defaults or {})
    json_config = load_json_file(path)
    json_config = _interpolate_env(json_config)
    # Merge JSON over defaults, then env over that
    merged = _deep_merge(defaults, json_config)
    merged = _deep_merge(merged, _env_overrides_for_storage())
    return merged


@dataclass(frozen=True)
class StorageSettings:
    backend: str
    delete_policy: str
    save_feedback_s: float
    spell_check_delay_s: float
    data_dir: Path
    key: str
    remote_url: str
    remote_api_key: str
    remote_table: str
    remote_row_id: str
    remote_column: str
    remote_timeout_s: float


def _unresolved(value: Any) -> bool:
    return isinstance(value, str) and bool(_ENV_PATTERN.search(value))


def _as_float(value: Any, fallback: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return fallback


def storage_settings_from_config(config: Mapping[str, Any]) -> StorageSettings:
    """Build typed storage settings from a merged machine config dict."""
    merged = _deep_merge(DEFAULT_STORAGE_CONFIG, config)
    storage = merged["storage"]
    local = storage.get("local") or {}
    # placeholders whose variable is unset fall back to the defaults
    remote = {
        k: v for k, v in (storage.get("remote") or {}).items() if not _unresolved(v)
    }
    fallback = DEFAULT_STORAGE_CONFIG["storage"]

    backend = str(storage.get("backend") or "local").strip().lower()
    if backend not in ("local", "remote"):
        raise ConfigurationError(f"Unknown storage backend: {backend}")

    delete_policy = str(storage.get("delete_policy") or "orphan").strip().lower()
    if delete_policy not in ("orphan", "cascade"):
        raise ConfigurationError(f"Unknown delete policy: {delete_policy}")

    return StorageSettings(
        backend=backend,
        delete_policy=delete_policy,
        save_feedback_s=_as_float(
            storage.get("save_feedback_s"), fallback["save_feedback_s"]
        ),
        spell_check_delay_s=_as_float(
            storage.get("spell_check_delay_s"), fallback["spell_check_delay_s"]
        ),
        data_dir=Path(str(local.get("data_dir") or DATA_DIR)),
        key=str(local.get("key") or fallback["local"]["key"]),
        remote_url=str(remote.get("url") or fallback["remote"]["url"]),
        remote_api_key=str(remote.get("api_key") or fallback["remote"]["api_key"]),
        remote_table=str(remote.get("table") or fallback["remote"]["table"]),
        remote_row_id=str(remote.get("row_id") or fallback["remote"]["row_id"]),
        remote_column=str(remote.get("column") or fallback["remote"]["column"]),
        remote_timeout_s=_as_float(
            remote.get("timeout_s"), fallback["remote"]["timeout_s"]
        ),
    )


def load_storage_settings() -> StorageSettings:
    """Resolve storage settings from machine.json, env overrides and defaults.

    The machine.json location can be overridden by BOOKNOTE_MACHINE_CONFIG.
    """
    path = os.getenv("BOOKNOTE_MACHINE_CONFIG", str(CONFIG_DIR / "machine.json"))
    return storage_settings_from_config(
        load_machine_config(path, DEFAULT_STORAGE_CONFIG)
    )
