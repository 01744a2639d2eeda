# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/orchestrator/host.py

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Sequence

from ..config.models import SetupConfig
from ..errors import PersistenceError, PhaseError, SSHConnectionError
from ..execution.executor import RemoteExecutor
from ..execution.models import HostTarget
from ..observers.dispatcher import EventBus
from ..observers.events import (
    HostCompleted,
    HostFailed,
    HostStarted,
    PhaseFailed,
    PhaseStarted,
    PhaseSucceeded,
    new_ctx,
    new_run_id,
)
from ..phases.base import Phase, PhaseContext
from ..phases.pipeline import default_phases, mandatory_phase_names
from ..status.models import StatusRecord
from ..status.store import StatusStore

log = logging.getLogger("kubesetup")


class HostOrchestrator:
    """
    Drives one host through the phase pipeline.

    States: Initializing -> InProgress(<phase>) -> Completed | Failed.
    The StatusRecord is created here, owned by this run only, and saved to
    the store after every transition. A fatal phase failure stops the host;
    a non-fatal one is logged and the pipeline moves on. Store failures are
    logged and never change the outcome.
    """

    def __init__(
        self,
        target: HostTarget,
        config: SetupConfig,
        *,
        executor: RemoteExecutor,
        store: StatusStore,
        phases: Optional[Sequence[Phase]] = None,
        bus: Optional[EventBus] = None,
        run_id: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.target = target
        self.config = config
        self.executor = executor
        self.store = store
        self.phases: List[Phase] = list(phases) if phases is not None else default_phases()
        self.bus = bus or EventBus()
        self.run_id = run_id or new_run_id()
        self.sleep = sleep
        self.record: Optional[StatusRecord] = None

        names = [p.name for p in self.phases]
        if len(set(names)) != len(names):
            raise ValueError(f"phase names must be unique: {names}")

    @property
    def host(self) -> str:
        return self.target.address

    def _ctx(self):
        return new_ctx(self.run_id, self.host)

    def _checkpoint(self, record: StatusRecord) -> None:
        try:
            self.store.save(record)
        except PersistenceError as exc:
            log.error(f"[{self.host}] {exc}")

    def _fail(self, record: StatusRecord, error: str) -> StatusRecord:
        record.fail(error)
        self._checkpoint(record)
        log.error(f"[{self.host}] setup failed: {error}")
        self.bus.emit(HostFailed(phase=record.current_phase, error=error, **self._ctx()))
        return record

    def run(self) -> StatusRecord:
        record = self.record = StatusRecord.start(self.host)
        self._checkpoint(record)

        log.info(f"[{self.host}] starting setup")
        self.bus.emit(HostStarted(phases=[p.name for p in self.phases], **self._ctx()))

        try:
            connection = self.executor.connect(self.target)
        except SSHConnectionError as exc:
            return self._fail(record, f"SSH connection failed: {exc}")

        try:
            return self._run_pipeline(record, connection)
        finally:
            try:
                self.executor.close(connection)
            except Exception as exc:
                log.warning(f"[{self.host}] failed to close SSH connection: {exc}")

    def _run_pipeline(self, record: StatusRecord, connection) -> StatusRecord:
        ctx = PhaseContext(
            host=self.host,
            executor=self.executor,
            connection=connection,
            config=self.config,
            sleep=self.sleep,
        )

        for phase in self.phases:
            record.enter_phase(phase.name)
            self._checkpoint(record)
            log.info(f"[{self.host}] running {phase.name}")
            self.bus.emit(PhaseStarted(phase=phase.name, **self._ctx()))

            t0 = time.monotonic()
            try:
                report = phase.run(ctx)
            except PhaseError as exc:
                error = str(exc)
            except Exception as exc:
                log.exception(f"[{self.host}] unexpected error in {phase.name}")
                error = f"unexpected error: {exc}"
            else:
                duration_ms = int((time.monotonic() - t0) * 1000)
                record.mark_phase_completed(phase.name)
                self._checkpoint(record)
                outputs = {r.command: r.output for r in report.outputs} if report else {}
                self.bus.emit(
                    PhaseSucceeded(phase=phase.name, duration_ms=duration_ms, outputs=outputs, **self._ctx())
                )
                continue

            self.bus.emit(PhaseFailed(phase=phase.name, fatal=phase.fatal, error=error, **self._ctx()))
            if phase.fatal:
                return self._fail(record, f"{phase.name} failed: {error}")
            log.warning(f"[{self.host}] {phase.name} failed (non-fatal, continuing): {error}")

        record.complete(mandatory_phase_names(self.phases))
        self._checkpoint(record)

        duration_ms = int((record.end_time - record.start_time).total_seconds() * 1000)
        log.info(f"[{self.host}] setup completed successfully")
        self.bus.emit(
            HostCompleted(completed_phases=list(record.completed_phases), duration_ms=duration_ms, **self._ctx())
        )
        return record
