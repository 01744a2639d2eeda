# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/status/store.py

from __future__ import annotations

import os
from pathlib import Path
from typing import List
from urllib.parse import quote, unquote

from pydantic import ValidationError

from ..errors import PersistenceError, StatusNotFound
from .models import StatusRecord

SUFFIX = ".json"


def status_key(host: str) -> str:
    """Filesystem-safe, reversible file stem for a host identity."""
    return quote(host, safe="")


class StatusStore:
    """
    One JSON document per host under base_dir.

    Every save replaces the previous snapshot in full (temp file + rename),
    so saving the same record twice leaves identical bytes on disk. Writes for
    different hosts use different files and can run concurrently.
    """

    def __init__(self, base_dir: str | Path = "status"):
        self.base_dir = Path(base_dir)

    def path_for(self, host: str) -> Path:
        return self.base_dir / f"{status_key(host)}{SUFFIX}"

    def save(self, record: StatusRecord) -> Path:
        path = self.path_for(record.host)
        tmp = path.with_name(f".{path.name}.tmp")
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            tmp.write_text(record.to_json(), encoding="utf-8")
            os.replace(tmp, path)
        except OSError as exc:
            raise PersistenceError(f"failed to save status for {record.host} to {path}: {exc}") from exc
        return path

    def load(self, host: str) -> StatusRecord:
        path = self.path_for(host)
        try:
            payload = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise StatusNotFound(f"no status recorded for {host}") from exc
        except OSError as exc:
            raise PersistenceError(f"failed to read status for {host} from {path}: {exc}") from exc

        try:
            return StatusRecord.from_json(payload)
        except ValidationError as exc:
            raise PersistenceError(f"invalid status document {path}: {exc}") from exc

    def list_hosts(self) -> List[str]:
        if not self.base_dir.is_dir():
            return []
        return sorted(
            unquote(p.name[: -len(SUFFIX)])
            for p in self.base_dir.glob(f"*{SUFFIX}")
            if not p.name.startswith(".")
        )
