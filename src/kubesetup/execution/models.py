# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/execution/models.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..config.models import SSHSettings


@dataclass(frozen=True)
class HostTarget:
    """
    A machine to provision, reached over SSH.
    """
    address: str                  # IP or DNS to connect; also the status key
    username: str
    port: int = 22
    password: Optional[str] = None
    key_file: Optional[str] = None  # private key; takes precedence over password
    timeout: int = 30               # seconds
    sudo: bool = False

    @classmethod
    def from_settings(cls, address: str, ssh: SSHSettings) -> "HostTarget":
        return cls(
            address=address,
            username=ssh.username,
            port=ssh.port,
            password=ssh.password,
            key_file=ssh.key_file,
            timeout=ssh.timeout,
            sudo=ssh.sudo,
        )

    def __str__(self) -> str:
        return self.address


@dataclass(frozen=True)
class CommandResult:
    command: str
    output: str = ""
    exit_status: int = 0
    reason: str = ""              # why it failed; empty on success

    @property
    def ok(self) -> bool:
        return self.exit_status == 0
