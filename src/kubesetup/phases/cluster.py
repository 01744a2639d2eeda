# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/kubesetup/phases/cluster.py

from __future__ import annotations

from typing import List

from ..config.models import SetupConfig
from .base import CommandStep, Phase, Step

DOCKER_DAEMON_JSON = """\
cat > /etc/docker/daemon.json << EOF
{
  "exec-opts": ["native.cgroupdriver=systemd"],
  "log-driver": "json-file",
  "log-opts": {
    "max-size": "100m"
  },
  "storage-driver": "overlay2"
}
EOF"""


class ClusterInstaller(Phase):
    """
    Container runtime, Kubernetes packages and a single-node control plane.

    The commands are not idempotent and must run in this order; apt and
    systemd get a short pause between commands to settle.
    """

    name = "ClusterInstall"
    settle_seconds = 2.0

    def steps(self, config: SetupConfig) -> List[Step]:
        k8s = config.kubernetes
        version = k8s.version
        return [
            CommandStep("apt-get update && apt-get upgrade -y", description="updating system packages"),
            CommandStep(
                "apt-get install -y apt-transport-https ca-certificates curl software-properties-common"
            ),
            CommandStep("curl -fsSL https://download.docker.com/linux/ubuntu/gpg | apt-key add -"),
            CommandStep(
                'add-apt-repository "deb [arch=amd64] https://download.docker.com/linux/ubuntu '
                '$(lsb_release -cs) stable"'
            ),
            CommandStep(
                "apt-get update && apt-get install -y docker-ce docker-ce-cli containerd.io",
                description="installing container runtime",
            ),
            CommandStep("mkdir -p /etc/docker"),
            CommandStep(DOCKER_DAEMON_JSON),
            CommandStep("systemctl daemon-reload"),
            CommandStep("systemctl restart docker"),
            CommandStep("curl -s https://packages.cloud.google.com/apt/doc/apt-key.gpg | apt-key add -"),
            CommandStep(
                'echo "deb https://apt.kubernetes.io/ kubernetes-xenial main" '
                "> /etc/apt/sources.list.d/kubernetes.list"
            ),
            CommandStep(
                f"apt-get update && apt-get install -y "
                f"kubelet={version} kubeadm={version} kubectl={version}",
                description=f"installing Kubernetes {version}",
            ),
            CommandStep(
                f"kubeadm init --pod-network-cidr={k8s.pod_cidr} --service-cidr={k8s.service_cidr}",
                capture=True,
                description="initializing control plane",
            ),
            CommandStep(
                "mkdir -p $HOME/.kube && cp -i /etc/kubernetes/admin.conf $HOME/.kube/config "
                "&& chown $(id -u):$(id -g) $HOME/.kube/config"
            ),
            CommandStep(
                "kubectl apply -f https://docs.projectcalico.org/manifests/calico.yaml",
                description="installing Calico network plugin",
            ),
        ]
