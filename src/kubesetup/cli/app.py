# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/cli/app.py

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from kubesetup.config.loader import load_config
from kubesetup.errors import ConfigError, PersistenceError, StatusNotFound
from kubesetup.execution.executor import SSHExecutor
from kubesetup.logging.log import init_logging
from kubesetup.observers.dispatcher import EventBus
from kubesetup.observers.jsonfile import JsonFileObserver
from kubesetup.observers.logger import LoggerObserver
from kubesetup.orchestrator.fleet import FleetDriver
from kubesetup.status.store import StatusStore

app = typer.Typer(help="Provision Kubernetes + monitoring on remote hosts over SSH", add_completion=False)
status_app = typer.Typer(help="Show stored per-host setup status", add_completion=False)


@app.command()
def provision(
    config: Path = typer.Argument(..., help="Setup config (JSON or YAML)"),
    hosts: List[str] = typer.Argument(..., help="One or more host addresses to provision"),
    status_dir: Path = typer.Option(
        Path("status"), "--status-dir", help="Directory for per-host status records"
    ),
    workers: int = typer.Option(
        1, "--workers", "-w", min=1, help="Hosts to provision at the same time"
    ),
    log_dir: Optional[Path] = typer.Option(
        None, "--log-dir", help="Directory for the run log (default: ~/.kubesetup/logs)"
    ),
    events: Optional[Path] = typer.Option(
        None, "--events", help="Append lifecycle events as JSON lines to this file"
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Exit with status 1 when any host failed"
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Show command output on the console"),
):
    """
    Run the setup pipeline (requirements, Kubernetes, monitoring, verify,
    backup) on every HOST. Outcomes are written to <status-dir>/<host>.json.
    """
    logger, run_id, _ = init_logging(base_dir=log_dir, verbose=debug)

    try:
        cfg = load_config(config)
    except ConfigError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=1)

    bus = EventBus()
    bus.subscribe(LoggerObserver(logger))
    if events:
        bus.subscribe(JsonFileObserver(events))

    driver = FleetDriver(
        cfg,
        executor=SSHExecutor(),
        store=StatusStore(status_dir),
        bus=bus,
        run_id=run_id,
        workers=workers,
    )
    report = driver.run(hosts)

    typer.echo(report.summary())
    if strict and report.failed:
        raise typer.Exit(code=1)


@status_app.command()
def show(
    hosts: Optional[List[str]] = typer.Argument(None, help="Hosts to show (default: all recorded)"),
    status_dir: Path = typer.Option(
        Path("status"), "--status-dir", help="Directory with per-host status records"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the full records"),
):
    """Print the stored status record of each host."""
    store = StatusStore(status_dir)
    missing = False

    for host in hosts or store.list_hosts():
        try:
            record = store.load(host)
        except StatusNotFound:
            typer.echo(f"{host}: no status recorded", err=True)
            missing = True
            continue
        except PersistenceError as exc:
            typer.echo(str(exc), err=True)
            missing = True
            continue

        if as_json:
            typer.echo(record.to_json().rstrip())
            continue
        line = f"{record.host}: {record.state.value} phase={record.current_phase} done={','.join(record.completed_phases) or '-'}"
        if record.error:
            line += f" error={record.error.splitlines()[0]}"
        typer.echo(line)

    if missing:
        raise typer.Exit(code=1)


def main() -> None:
    app()


def status_main() -> None:
    status_app()
