# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/observers/events.py

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events of one kubesetup invocation
    host: Optional[str]  # None for fleet-level events

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_run_id() -> str:
    return str(uuid.uuid4())


def new_ctx(run_id: str, host: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": run_id,
        "host": host,
    }


# ----- Host lifecycle -----

@dataclass(frozen=True)
class HostStarted(BaseEvent):
    phases: List[str]

@dataclass(frozen=True)
class HostCompleted(BaseEvent):
    completed_phases: List[str]
    duration_ms: int

@dataclass(frozen=True)
class HostFailed(BaseEvent):
    phase: str
    error: str


# ----- Per-phase lifecycle -----

@dataclass(frozen=True)
class PhaseStarted(BaseEvent):
    phase: str

@dataclass(frozen=True)
class PhaseSucceeded(BaseEvent):
    phase: str
    duration_ms: int
    outputs: Dict[str, str] = field(default_factory=dict)  # captured command -> output

@dataclass(frozen=True)
class PhaseFailed(BaseEvent):
    phase: str
    fatal: bool
    error: str


# ----- Summary -----

@dataclass(frozen=True)
class FleetSummary(BaseEvent):
    completed: int
    failed: int
