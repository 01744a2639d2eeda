# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/phases/pipeline.py

from __future__ import annotations

from typing import List, Sequence

from .backup import BackupCreator
from .base import Phase
from .cluster import ClusterInstaller
from .monitoring import MonitoringInstaller
from .requirements import RequirementCheck
from .verify import Verifier


def default_phases() -> List[Phase]:
    """The provisioning pipeline, in execution order."""
    return [
        RequirementCheck(),
        ClusterInstaller(),
        MonitoringInstaller(),
        Verifier(),
        BackupCreator(),
    ]


def mandatory_phase_names(phases: Sequence[Phase]) -> List[str]:
    return [p.name for p in phases if p.fatal]
