# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/phases/backup.py

from __future__ import annotations

from typing import List

from ..config.models import SetupConfig
from .base import CommandStep, Phase, Step

BACKUP_DIR = "/root/k8s-backup"
EXPORTS = (
    ("all", "all-resources.yaml"),
    ("configmaps", "configmaps.yaml"),
    ("secrets", "secrets.yaml"),
)


class BackupCreator(Phase):
    """
    Export cluster resources and archive them on the host.

    Auxiliary: a failed backup is reported but does not fail the host.
    """

    name = "Backup"
    fatal = False

    def steps(self, config: SetupConfig) -> List[Step]:
        return [
            CommandStep(f"mkdir -p {BACKUP_DIR}"),
            *(
                CommandStep(f"kubectl get {kind} -A -o yaml > {BACKUP_DIR}/{filename}")
                for kind, filename in EXPORTS
            ),
            CommandStep(f"tar -czf {BACKUP_DIR}/k8s-backup.tar.gz {BACKUP_DIR}"),
        ]
