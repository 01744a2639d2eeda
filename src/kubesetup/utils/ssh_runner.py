# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/utils/ssh_runner.py

from __future__ import annotations

from pathlib import Path
from typing import Optional

import paramiko


def shq(value: str) -> str:
    """
    Quote for bash -lc.
    """
    return "'" + value.replace("'", "'\"'\"'") + "'"


class SSHRunner:
    """
    One open SSH connection to a host. Every phase of a host's run goes
    through the same runner.
    """

    def __init__(
        self,
        client: paramiko.SSHClient,
        *,
        label: str,
        timeout: Optional[float] = None,
        sudo: bool = False,
        sudo_password: Optional[str] = None,
    ):
        self.client = client
        self.label = label
        self.timeout = timeout
        self.sudo = sudo
        self.sudo_password = sudo_password

    def run(
        self,
        cmd: str,
        *,
        sudo: Optional[bool] = None,
        timeout: Optional[float] = None,
    ) -> tuple[int, str, str]:
        if sudo is None:
            sudo = self.sudo
        if sudo:
            cmd = f"sudo -S bash -lc {shq(cmd)}"

        stdin, stdout, stderr = self.client.exec_command(
            cmd, timeout=timeout if timeout is not None else self.timeout
        )
        # stderr arrives on stdout; draining the two streams one after the
        # other can block on a full stderr window.
        stdout.channel.set_combine_stderr(True)
        if sudo and self.sudo_password:
            stdin.write(self.sudo_password + "\n")
            stdin.flush()

        out = stdout.read().decode("utf-8", errors="replace")
        err = stderr.read().decode("utf-8", errors="replace")
        rc = stdout.channel.recv_exit_status()
        return rc, out, err

    def put_file(self, local_path: str | Path, remote_path: str) -> None:
        sftp = self.client.open_sftp()
        try:
            sftp.put(str(local_path), str(remote_path))
        finally:
            sftp.close()

    def close(self) -> None:
        self.client.close()
