# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/phases/requirements.py

from __future__ import annotations

from typing import List

from ..config.models import SetupConfig
from .base import CommandStep, Phase, Step

DIAGNOSTIC_COMMANDS = (
    "uname -a",
    "free -h",
    "df -h",
    "nproc",
    "cat /etc/os-release",
)


class RequirementCheck(Phase):
    """Read-only resource and OS introspection. Every output is kept."""

    name = "RequirementCheck"

    def steps(self, config: SetupConfig) -> List[Step]:
        return [CommandStep(cmd, capture=True) for cmd in DIAGNOSTIC_COMMANDS]
