# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/execution/executor.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

import paramiko

from ..errors import SSHConnectionError
from ..utils.ssh_runner import SSHRunner
from .models import CommandResult, HostTarget

log = logging.getLogger("kubesetup")


class RemoteExecutor(Protocol):
    """
    Contract between the orchestrator and the remote transport.

    connect() raises SSHConnectionError; execute() and upload() never raise
    for remote failures, they report them in the CommandResult.
    """

    def connect(self, target: HostTarget) -> Any:
        ...

    def execute(self, connection: Any, command: str) -> CommandResult:
        ...

    def upload(self, connection: Any, local_path: Path, remote_path: str) -> CommandResult:
        ...

    def close(self, connection: Any) -> None:
        ...


def _load_private_key(key_file: str) -> paramiko.PKey:
    last_exc: Optional[Exception] = None
    for key_cls in (
        paramiko.RSAKey,
        paramiko.Ed25519Key,
        paramiko.ECDSAKey,
    ):
        try:
            return key_cls.from_private_key_file(key_file)
        except paramiko.PasswordRequiredException as exc:
            raise SSHConnectionError(
                f"private key {key_file} is encrypted; passphrase-protected keys are not supported"
            ) from exc
        except paramiko.SSHException as exc:
            last_exc = exc
            continue
    raise SSHConnectionError(f"unsupported private key format for {key_file}: {last_exc}")


class SSHExecutor:
    """RemoteExecutor backed by paramiko."""

    def __init__(
        self,
        *,
        client_factory: Callable[[], paramiko.SSHClient] | None = None,
    ) -> None:
        self._client_factory = client_factory or paramiko.SSHClient

    def connect(self, target: HostTarget) -> SSHRunner:
        pkey = None
        if target.key_file:
            try:
                pkey = _load_private_key(target.key_file)
            except OSError as exc:
                raise SSHConnectionError(f"failed to read key file: {exc}") from exc

        client = self._client_factory()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        try:
            client.connect(
                hostname=target.address,
                port=target.port,
                username=target.username,
                password=target.password if not pkey else None,
                pkey=pkey,
                timeout=target.timeout,
                allow_agent=False,
                look_for_keys=False,
            )
        except Exception as exc:
            client.close()
            raise SSHConnectionError(str(exc)) from exc

        log.debug(f"[{target.address}] connected as {target.username}@{target.address}:{target.port}")
        return SSHRunner(
            client,
            label=target.address,
            timeout=target.timeout,
            sudo=target.sudo,
            sudo_password=target.password,
        )

    def execute(self, connection: SSHRunner, command: str) -> CommandResult:
        try:
            rc, out, err = connection.run(command)
        except (OSError, paramiko.SSHException) as exc:
            return CommandResult(command=command, exit_status=-1, reason=f"transport error: {exc}")

        output = out + err
        if rc != 0:
            return CommandResult(command=command, output=output, exit_status=rc, reason=f"exit status {rc}")
        return CommandResult(command=command, output=output)

    def upload(self, connection: SSHRunner, local_path: Path, remote_path: str) -> CommandResult:
        label = f"upload {local_path} -> {remote_path}"
        try:
            connection.put_file(local_path, remote_path)
        except (OSError, paramiko.SSHException) as exc:
            return CommandResult(command=label, exit_status=-1, reason=str(exc))
        return CommandResult(command=label)

    def close(self, connection: SSHRunner) -> None:
        connection.close()
