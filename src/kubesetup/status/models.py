# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/status/models.py

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

INITIALIZING = "Initializing"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HostState(str, Enum):
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    FAILED = "Failed"


class StatusRecord(BaseModel):
    """
    Durable snapshot of one host's progress through the pipeline.

    Transitions only move forward: InProgress -> Completed | Failed. Once a
    record is terminal every mutator raises ValueError.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    host: str
    start_time: datetime
    end_time: Optional[datetime] = None
    current_phase: str = INITIALIZING
    state: HostState = HostState.IN_PROGRESS
    error: str = ""
    completed_phases: List[str] = Field(default_factory=list)

    @classmethod
    def start(cls, host: str, *, now: Optional[datetime] = None) -> "StatusRecord":
        return cls(host=host, start_time=now or _utc_now())

    @property
    def is_terminal(self) -> bool:
        return self.state is not HostState.IN_PROGRESS

    def _ensure_open(self) -> None:
        if self.is_terminal:
            raise ValueError(f"status record for {self.host} is already {self.state.value}")

    def enter_phase(self, name: str) -> None:
        self._ensure_open()
        self.current_phase = name

    def mark_phase_completed(self, name: str) -> None:
        self._ensure_open()
        if name in self.completed_phases:
            raise ValueError(f"phase {name} already completed for {self.host}")
        self.completed_phases.append(name)

    def fail(self, error: str, *, now: Optional[datetime] = None) -> None:
        self._ensure_open()
        if not error:
            raise ValueError("a failed status record needs an error description")
        self.state = HostState.FAILED
        self.error = error
        self.end_time = now or _utc_now()

    def complete(self, mandatory: Iterable[str] = (), *, now: Optional[datetime] = None) -> None:
        self._ensure_open()
        missing = [name for name in mandatory if name not in self.completed_phases]
        if missing:
            raise ValueError(f"cannot complete {self.host}: phases not completed: {', '.join(missing)}")
        self.state = HostState.COMPLETED
        self.error = ""
        self.end_time = now or _utc_now()

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2) + "\n"

    @classmethod
    def from_json(cls, payload: str) -> "StatusRecord":
        return cls.model_validate_json(payload)
