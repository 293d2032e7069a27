# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the remote storage unit so this responsibility stays isolated, testable, and easy to evolve.

Talks to the Supabase REST endpoint (PostgREST) for a single row: fetch-one by
a constant id and upsert-one under that same id. Last writer wins.
"""

from __future__ import annotations

from typing import Any, Dict

import httpx

from booknote.core.config import StorageSettings
from booknote.services.exceptions import UpstreamError
from booknote.services.storage.storage_backend import StorageBackend
from booknote.services.storage.storage_logging import (
    create_log_entry,
    finish_log_entry,
)


def build_headers(api_key: str | None) -> Dict[str, str]:
    headers: Dict[str, str] = {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
    if api_key:
        headers["apikey"] = api_key
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def build_timeout(timeout_s: float) -> httpx.Timeout:
    try:
        return httpx.Timeout(float(timeout_s or 30))
    except (TypeError, ValueError):
        return httpx.Timeout(30.0)


class RemoteStorageBackend(StorageBackend):
    name = "remote"

    def __init__(
        self,
        base_url: str,
        api_key: str | None,
        *,
        table: str = "booknote_saves",
        row_id: str = "main_save",
        column: str = "data",
        timeout_s: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.row_id = row_id
        self.column = column
        self.timeout = build_timeout(timeout_s)
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: StorageSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "RemoteStorageBackend":
        return cls(
            settings.remote_url,
            settings.remote_api_key,
            table=settings.remote_table,
            row_id=settings.remote_row_id,
            column=settings.remote_column,
            timeout_s=settings.remote_timeout_s,
            transport=transport,
        )

    @property
    def table_url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def _client(self) -> httpx.AsyncClient:
        if not self.base_url.startswith(("http://", "https://")):
            raise UpstreamError(f"Invalid remote storage url: {self.base_url}")
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def load_document(self) -> Any | None:
        headers = build_headers(self.api_key)
        params = {"select": self.column, "id": f"eq.{self.row_id}"}
        entry = create_log_entry("load", self.name, self.table_url, headers)
        try:
            async with self._client() as client:
                response = await client.get(
                    self.table_url, headers=headers, params=params
                )
        except httpx.HTTPError as exc:
            finish_log_entry(entry, ok=False, error_detail=str(exc))
            raise UpstreamError(f"Failed to fetch library data: {exc}") from exc

        if response.status_code >= 400:
            detail = response.text[:500]
            finish_log_entry(
                entry, ok=False, status_code=response.status_code, error_detail=detail
            )
            raise UpstreamError(
                f"Remote storage returned {response.status_code}: {detail}"
            )

        finish_log_entry(entry, ok=True, status_code=response.status_code)
        rows = response.json()
        if isinstance(rows, dict):
            rows = [rows]
        if not rows:
            return None
        row = rows[0]
        if not isinstance(row, dict):
            raise ValueError("Unexpected row shape from remote storage")
        return row.get(self.column)

    async def save_document(self, document: Dict[str, Any]) -> None:
        headers = build_headers(self.api_key)
        headers["Prefer"] = "resolution=merge-duplicates,return=minimal"
        body = {"id": self.row_id, self.column: document}
        entry = create_log_entry("save", self.name, self.table_url, headers)
        try:
            async with self._client() as client:
                response = await client.post(self.table_url, headers=headers, json=body)
        except httpx.HTTPError as exc:
            finish_log_entry(entry, ok=False, error_detail=str(exc))
            raise UpstreamError(f"Failed to save library data: {exc}") from exc

        if response.status_code >= 400:
            detail = response.text[:500]
            finish_log_entry(
                entry, ok=False, status_code=response.status_code, error_detail=detail
            )
            raise UpstreamError(
                f"Remote storage returned {response.status_code}: {detail}"
            )
        finish_log_entry(entry, ok=True, status_code=response.status_code)
