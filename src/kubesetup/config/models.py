# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/config/models.py

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _Section(BaseModel):
    # Keys in the config document keep the camelCase names of the original
    # k8s-setup JSON files; python attributes are snake_case.
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SSHSettings(_Section):
    username: str
    password: Optional[str] = None
    key_file: Optional[str] = Field(default=None, alias="keyFile")
    timeout: int = Field(default=30, gt=0)  # seconds, connect + per-command read
    port: int = 22
    sudo: bool = False


class KubernetesSettings(_Section):
    version: str                      # applied to kubelet, kubeadm and kubectl
    pod_cidr: str = Field(alias="podCIDR")
    service_cidr: str = Field(alias="serviceCIDR")


class PrometheusSettings(_Section):
    retention_time: str = Field(default="15d", alias="retentionTime")
    storage_class: str = Field(default="standard", alias="storageClass")


class GrafanaSettings(_Section):
    admin_password: str = Field(alias="adminPassword")
    domain: Optional[str] = None      # accepted, not used by any phase yet


class MonitoringSettings(_Section):
    prometheus: PrometheusSettings = Field(default_factory=PrometheusSettings)
    grafana: GrafanaSettings


class ResourceHints(_Section):
    """Advisory sizing hints. Not consumed by the orchestrator."""

    cpu: Optional[str] = None
    memory: Optional[str] = None


class SetupConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    ssh: SSHSettings
    kubernetes: KubernetesSettings
    monitoring: MonitoringSettings
    resources: ResourceHints = Field(default_factory=ResourceHints)
