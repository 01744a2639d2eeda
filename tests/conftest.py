from __future__ import annotations

import threading
from collections import defaultdict

import pytest

from kubesetup.config.models import SetupConfig
from kubesetup.errors import SSHConnectionError
from kubesetup.execution.models import CommandResult


CONFIG_DATA = {
    "ssh": {"username": "root", "password": "s3cret", "timeout": 10},
    "kubernetes": {
        "version": "1.28.2-00",
        "podCIDR": "192.168.0.0/16",
        "serviceCIDR": "10.96.0.0/12",
    },
    "monitoring": {
        "prometheus": {"retentionTime": "7d", "storageClass": "local-path"},
        "grafana": {"adminPassword": "grafana-pw", "domain": "grafana.example.test"},
    },
    "resources": {"cpu": "4", "memory": "8Gi"},
}


class FakeConnection:
    def __init__(self, host):
        self.host = host


class FakeExecutor:
    """
    Records every command per host. `fail(host, command)` decides which
    commands exit non-zero; hosts in `unreachable` refuse connections.
    """

    def __init__(self, *, unreachable=(), fail=None):
        self.unreachable = set(unreachable)
        self.fail = fail or (lambda host, command: False)
        self.commands = defaultdict(list)
        self.uploads = defaultdict(list)
        self.opened = []
        self.closed = []
        self._lock = threading.Lock()

    def connect(self, target):
        if target.address in self.unreachable:
            raise SSHConnectionError(f"dial tcp {target.address}:22: connection refused")
        with self._lock:
            self.opened.append(target.address)
        return FakeConnection(target.address)

    def execute(self, connection, command):
        with self._lock:
            self.commands[connection.host].append(command)
        if self.fail(connection.host, command):
            return CommandResult(command=command, output="E: boom", exit_status=1, reason="exit status 1")
        return CommandResult(command=command, output=f"ok: {command}")

    def upload(self, connection, local_path, remote_path):
        with self._lock:
            self.uploads[connection.host].append((str(local_path), remote_path))
        return CommandResult(command=f"upload {local_path} -> {remote_path}")

    def close(self, connection):
        with self._lock:
            self.closed.append(connection.host)


@pytest.fixture(autouse=True)
def _in_tmp_cwd(tmp_path, monkeypatch):
    # the monitoring phase writes its values file to the working directory
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def config_data():
    import copy
    return copy.deepcopy(CONFIG_DATA)


@pytest.fixture
def cfg(config_data):
    return SetupConfig.model_validate(config_data)


@pytest.fixture
def make_executor():
    return FakeExecutor


@pytest.fixture(autouse=True)
def _reset_kubesetup_logger():
    # init_logging() detaches the logger from the root handlers; undo that
    # so caplog keeps working across tests.
    yield
    import logging
    logger = logging.getLogger("kubesetup")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
