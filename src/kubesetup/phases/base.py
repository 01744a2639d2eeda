# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/phases/base.py

from __future__ import annotations

import logging
import os
import tempfile
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, ClassVar, List, Optional, Union

from ..config.models import SetupConfig
from ..errors import PhaseError
from ..execution.executor import RemoteExecutor
from ..execution.models import CommandResult

log = logging.getLogger("kubesetup")

MASK = "******"


@dataclass
class PhaseContext:
    """
    Everything a phase needs for one host's run. Built by the orchestrator,
    never shared between hosts.
    """
    host: str
    executor: RemoteExecutor
    connection: Any
    config: SetupConfig
    sleep: Callable[[float], None] = time.sleep


@dataclass(frozen=True)
class CommandStep:
    command: str
    capture: bool = False           # keep output in the phase report for audit
    description: str = ""
    secret: Optional[str] = None    # masked wherever the command is displayed

    @property
    def label(self) -> str:
        if self.secret:
            return self.command.replace(self.secret, MASK)
        return self.command

    def apply(self, ctx: PhaseContext) -> CommandResult:
        return ctx.executor.execute(ctx.connection, self.command)


@dataclass(frozen=True)
class FileStep:
    """
    Render a document to a local file, then upload it to the host.
    """
    local_path: Path
    remote_path: str
    content: str
    capture: bool = False
    description: str = ""

    @property
    def label(self) -> str:
        return f"write {self.local_path} -> {self.remote_path}"

    def write_local(self) -> None:
        # Hosts running in parallel share local_path; replace it whole so an
        # upload never reads a half-written file.
        parent = self.local_path.parent
        fd, tmp = tempfile.mkstemp(dir=parent, prefix=f".{self.local_path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(self.content)
            os.replace(tmp, self.local_path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def apply(self, ctx: PhaseContext) -> CommandResult:
        try:
            self.write_local()
        except OSError as exc:
            return CommandResult(
                command=self.label,
                exit_status=-1,
                reason=f"failed to write {self.local_path}: {exc}",
            )
        return ctx.executor.upload(ctx.connection, self.local_path, self.remote_path)


Step = Union[CommandStep, FileStep]


@dataclass
class PhaseReport:
    phase: str
    outputs: List[CommandResult] = field(default_factory=list)


class Phase(ABC):
    """
    One stage of the provisioning pipeline.

    Phases hold no per-run state: steps() builds the ordered step list from
    the config and run() executes it against the context's connection.
    Non-fatal phases may fail without failing the host.
    """

    name: ClassVar[str]
    fatal: ClassVar[bool] = True
    settle_seconds: ClassVar[float] = 0.0

    @abstractmethod
    def steps(self, config: SetupConfig) -> List[Step]:
        ...

    def run(self, ctx: PhaseContext) -> PhaseReport:
        return run_steps(self, self.steps(ctx.config), ctx)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name} fatal={self.fatal}>"


def run_steps(phase: Phase, steps: List[Step], ctx: PhaseContext) -> PhaseReport:
    """
    Run steps in order. The first failing step aborts the phase with a
    PhaseError carrying its command text and captured output.
    """
    report = PhaseReport(phase=phase.name)

    for index, step in enumerate(steps):
        if index and phase.settle_seconds:
            ctx.sleep(phase.settle_seconds)

        if step.description:
            log.info(f"[{ctx.host}] {phase.name}: {step.description}")
        log.debug(f"[{ctx.host}] {phase.name} $ {step.label}")

        result = step.apply(ctx)

        if not result.ok:
            raise PhaseError(
                phase.name,
                result.reason or f"exit status {result.exit_status}",
                command=step.label,
                output=result.output,
            )

        if step.capture:
            report.outputs.append(replace(result, command=step.label))
            log.info(f"[{ctx.host}] {phase.name} output for {step.label}:\n{result.output.rstrip()}")
        elif result.output:
            log.debug(f"[{ctx.host}] {phase.name} output:\n{result.output.rstrip()}")

    return report
