# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/errors.py

from __future__ import annotations

from typing import Optional


class KubeSetupError(RuntimeError):
    """Base class for kubesetup failures."""


class ConfigError(KubeSetupError):
    """Raised when the configuration file cannot be read, parsed or validated."""


class SSHConnectionError(KubeSetupError):
    """Raised when an SSH session to a host cannot be established."""


class PhaseError(KubeSetupError):
    """
    A step inside a provisioning phase failed.

    Carries the failing command text and whatever output was captured so the
    operator can diagnose the host without re-running it.
    """

    def __init__(
        self,
        phase: str,
        reason: str,
        *,
        command: Optional[str] = None,
        output: str = "",
    ):
        self.phase = phase
        self.reason = reason
        self.command = command
        self.output = output
        super().__init__(self._format())

    def _format(self) -> str:
        if self.command is None:
            msg = self.reason
        else:
            msg = f"failed to execute command '{self.command}': {self.reason}"
        if self.output:
            msg += f"\nOutput: {self.output.rstrip()}"
        return msg


class PersistenceError(KubeSetupError):
    """Raised when a status record cannot be written or read."""


class StatusNotFound(PersistenceError):
    """No status record has been stored for the requested host."""
