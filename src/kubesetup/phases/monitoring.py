# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/phases/monitoring.py

from __future__ import annotations

from pathlib import Path
from typing import List

from ..config.models import SetupConfig
from ..utils.template_renderer import TemplateRenderer
from .base import CommandStep, FileStep, Phase, Step

NAMESPACE = "monitoring"
RELEASE = "prometheus"
CHART = "prometheus-community/kube-prometheus-stack"
CHART_REPO = ("prometheus-community", "https://prometheus-community.github.io/helm-charts")
VALUES_FILE = "prometheus-values.yaml"
STORAGE_SIZE = "10Gi"
READY_TIMEOUT_S = 300
READY_WORKLOADS = ("prometheus", "grafana")

GRAFANA_SECRET = "grafana-admin"
GRAFANA_PATCH = (
    '[{"op": "add", "path": "/spec/template/spec/containers/0/env/0", '
    '"value": {"name": "GF_SECURITY_ADMIN_PASSWORD", '
    '"valueFrom": {"secretKeyRef": {"name": "grafana-admin", "key": "admin-password"}}}}]'
)


def render_values(config: SetupConfig, renderer: TemplateRenderer | None = None) -> str:
    prom = config.monitoring.prometheus
    renderer = renderer or TemplateRenderer()
    return renderer.render(
        f"{VALUES_FILE}.j2",
        {
            "retention_time": prom.retention_time,
            "storage_class": prom.storage_class,
            "storage_size": STORAGE_SIZE,
        },
    )


def wait_ready(workload: str, namespace: str = NAMESPACE, timeout_s: int = READY_TIMEOUT_S) -> CommandStep:
    return CommandStep(
        f"kubectl wait --for=condition=ready pod -l app.kubernetes.io/name={workload} "
        f"-n {namespace} --timeout={timeout_s}s",
        description=f"waiting for {workload} pods (up to {timeout_s}s)",
    )


class MonitoringInstaller(Phase):
    """
    kube-prometheus-stack via Helm, with the Grafana admin password taken
    from a secret.

    The values document is written to the working directory (and uploaded
    next to the remote login directory) before the chart is installed. It is
    left in place afterwards.
    """

    name = "MonitoringInstall"

    def steps(self, config: SetupConfig) -> List[Step]:
        password = config.monitoring.grafana.admin_password
        repo_name, repo_url = CHART_REPO
        return [
            CommandStep(f"kubectl create namespace {NAMESPACE}"),
            CommandStep(
                "curl https://raw.githubusercontent.com/helm/helm/master/scripts/get-helm-3 | bash",
                description="installing Helm",
            ),
            CommandStep(f"helm repo add {repo_name} {repo_url}"),
            CommandStep("helm repo update"),
            FileStep(
                local_path=Path(VALUES_FILE),
                remote_path=VALUES_FILE,
                content=render_values(config),
            ),
            CommandStep(
                f"helm install {RELEASE} {CHART} -f {VALUES_FILE} --namespace {NAMESPACE}",
                description=f"installing {CHART}",
            ),
            CommandStep(
                f"kubectl create secret generic {GRAFANA_SECRET} "
                f"--from-literal=admin-password={password} -n {NAMESPACE}",
                secret=password,
            ),
            CommandStep(
                f"kubectl patch deployment {RELEASE}-grafana -n {NAMESPACE} --type=json -p='{GRAFANA_PATCH}'"
            ),
            *(wait_ready(workload) for workload in READY_WORKLOADS),
        ]
