# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/orchestrator/fleet.py

from __future__ import annotations

import concurrent.futures
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..config.models import SetupConfig
from ..errors import PersistenceError
from ..execution.executor import RemoteExecutor, SSHExecutor
from ..execution.models import HostTarget
from ..observers.dispatcher import EventBus
from ..observers.events import FleetSummary, new_ctx, new_run_id
from ..phases.base import Phase
from ..phases.pipeline import default_phases
from ..status.models import HostState, StatusRecord
from ..status.store import StatusStore
from .host import HostOrchestrator

log = logging.getLogger("kubesetup")


@dataclass
class FleetReport:
    records: List[StatusRecord] = field(default_factory=list)

    @property
    def completed(self) -> List[StatusRecord]:
        return [r for r in self.records if r.state is HostState.COMPLETED]

    @property
    def failed(self) -> List[StatusRecord]:
        return [r for r in self.records if r.state is HostState.FAILED]

    def summary(self) -> str:
        return f"COMPLETED={len(self.completed)} FAILED={len(self.failed)}"


class FleetDriver:
    """
    Runs one HostOrchestrator per address. Hosts share nothing but the
    status store; a failed host never stops the others.

    workers=1 processes hosts one after another; more workers run hosts on a
    thread pool, one task per host.
    """

    def __init__(
        self,
        config: SetupConfig,
        *,
        executor: Optional[RemoteExecutor] = None,
        store: Optional[StatusStore] = None,
        phases_factory: Callable[[], Sequence[Phase]] = default_phases,
        bus: Optional[EventBus] = None,
        run_id: Optional[str] = None,
        workers: int = 1,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.config = config
        self.executor = executor or SSHExecutor()
        self.store = store or StatusStore()
        self.phases_factory = phases_factory
        self.bus = bus or EventBus()
        self.run_id = run_id or new_run_id()
        self.workers = workers
        self.sleep = sleep

    def _orchestrator(self, address: str) -> HostOrchestrator:
        target = HostTarget.from_settings(address, self.config.ssh)
        return HostOrchestrator(
            target,
            self.config,
            executor=self.executor,
            store=self.store,
            phases=self.phases_factory(),
            bus=self.bus,
            run_id=self.run_id,
            sleep=self.sleep,
        )

    def _run_host_guarded(self, address: str) -> StatusRecord:
        orchestrator = None
        try:
            orchestrator = self._orchestrator(address)
            return orchestrator.run()
        except Exception as exc:
            # The host orchestrator records its own failures, this only
            # catches bugs outside the pipeline; reuse the record it saved.
            log.exception(f"[{address}] setup aborted")
            record = orchestrator.record if orchestrator is not None else None
            if record is None:
                record = StatusRecord.start(address)
            if not record.is_terminal:
                record.fail(f"internal error: {exc}")
            try:
                self.store.save(record)
            except PersistenceError as save_exc:
                log.error(f"[{address}] {save_exc}")
            return record

    def run(self, addresses: Sequence[str]) -> FleetReport:
        report = FleetReport()
        if self.workers == 1 or len(addresses) <= 1:
            for address in addresses:
                report.records.append(self._run_host_guarded(address))
        else:
            with concurrent.futures.ThreadPoolExecutor(
                max_workers=min(self.workers, len(addresses)),
                thread_name_prefix="kubesetup-host",
            ) as pool:
                report.records.extend(pool.map(self._run_host_guarded, addresses))

        for record in report.failed:
            log.error(f"[{record.host}] FAILED at {record.current_phase}: {record.error}")
        log.info(f"fleet finished: {report.summary()}")
        self.bus.emit(
            FleetSummary(completed=len(report.completed), failed=len(report.failed), **new_ctx(self.run_id))
        )
        return report
