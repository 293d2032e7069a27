# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the storage logging unit so this responsibility stays isolated, testable, and easy to evolve."""

from __future__ import annotations

import datetime
import json
import logging
import os
import uuid
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

# Global list to store storage operations for the current session
storage_logs: List[Dict[str, Any]] = []

_SENSITIVE_HEADERS = ("apikey", "authorization")


def add_storage_log(log_entry: Dict[str, Any]):
    """Add a log entry to the global list, keeping only the last 100 entries.

    If BOOKNOTE_STORAGE_DUMP is set, also append the raw entry to a file.
    """
    if log_entry not in storage_logs:
        storage_logs.append(log_entry)
        if len(storage_logs) > 100:
            storage_logs.pop(0)

    if log_entry.get("error_detail"):
        logger.warning(
            "storage %s via %s failed: %s",
            log_entry.get("operation"),
            log_entry.get("backend"),
            log_entry["error_detail"],
        )

    if os.getenv("BOOKNOTE_STORAGE_DUMP") == "1":
        default_path = os.path.join("data", "logs", "storage_raw.log")
        log_path = os.getenv("BOOKNOTE_STORAGE_DUMP_PATH") or default_path
        try:
            os.makedirs(os.path.dirname(log_path) or ".", exist_ok=True)
            with open(log_path, "a", encoding="utf-8") as f:
                f.write("=" * 80 + "\n")
                f.write(f"TIMESTAMP: {datetime.datetime.now().isoformat()}\n")
                f.write("-" * 80 + "\n")
                f.write(json.dumps(log_entry, indent=2, default=str) + "\n")
                f.write("=" * 80 + "\n\n")
        except OSError as exc:
            # dev-only feature, never blocks a load or save
            logger.debug("could not write storage dump %s: %s", log_path, exc)


def create_log_entry(
    operation: str,
    backend: str,
    target: str,
    headers: Dict[str, str] | None = None,
) -> Dict[str, Any]:
    """Create a new log entry structure."""
    return {
        "id": str(uuid.uuid4()),
        "operation": operation,
        "backend": backend,
        "target": target,
        "headers": {
            k: ("***" if k.lower() in _SENSITIVE_HEADERS else v)
            for k, v in (headers or {}).items()
        },
        "timestamp_start": datetime.datetime.now().isoformat(),
        "timestamp_end": None,
        "status_code": None,
        "ok": None,
        "error_detail": None,
    }


def finish_log_entry(
    entry: Dict[str, Any],
    ok: bool,
    status_code: int | None = None,
    error_detail: str | None = None,
) -> Dict[str, Any]:
    entry["timestamp_end"] = datetime.datetime.now().isoformat()
    entry["ok"] = ok
    entry["status_code"] = status_code
    entry["error_detail"] = error_detail
    add_storage_log(entry)
    return entry
