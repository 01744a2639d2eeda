# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/phases/verify.py

from __future__ import annotations

from typing import List

from ..config.models import SetupConfig
from .base import CommandStep, Phase, Step

INTROSPECTION_COMMANDS = (
    "kubectl get nodes",
    "kubectl get pods -A",
    "kubectl get services -A",
    "kubectl get deployments -A",
)


class Verifier(Phase):
    name = "Verify"

    def steps(self, config: SetupConfig) -> List[Step]:
        return [CommandStep(cmd, capture=True) for cmd in INTROSPECTION_COMMANDS]
