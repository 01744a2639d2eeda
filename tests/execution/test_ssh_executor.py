import dataclasses
import socket
from pathlib import Path

import paramiko
import pytest

from kubesetup.errors import SSHConnectionError
from kubesetup.execution.executor import SSHExecutor
from kubesetup.execution.models import HostTarget


# ---- Fakes for paramiko (same shape as the node bootstrap tests) ----

class _FakeChannel:
    def __init__(self, log, rc=0): self.log, self._rc = log, rc
    def set_combine_stderr(self, combine): self.log.append(("combine_stderr", combine))
    def recv_exit_status(self): return self._rc

class _Buf:
    def __init__(self, s=""): self._s = s
    def read(self): return self._s.encode()

class _Stdin:
    def __init__(self, log): self.log = log
    def write(self, data): self.log.append(("stdin", data))
    def flush(self): pass

class FakeSFTP:
    def __init__(self, log): self.log = log
    def put(self, local, remote): self.log.append(("sftp_put", local, remote))
    def close(self): self.log.append(("sftp_close",))

class FakeSSHClient:
    def __init__(self, log, responses=None, connect_error=None, exec_error=None):
        self.log = log
        self._responses = responses or {}
        self._connect_error = connect_error
        self._exec_error = exec_error
    def set_missing_host_key_policy(self, policy): pass
    def connect(self, **kw):
        self.log.append(("connect", kw))
        if self._connect_error:
            raise self._connect_error
    def exec_command(self, cmd, timeout=None):
        self.log.append(("exec", cmd, timeout))
        if self._exec_error:
            raise self._exec_error
        out, err, rc = self._responses.get(cmd, ("", "", 0))
        stdout = _Buf(out)
        stdout.channel = _FakeChannel(self.log, rc)
        return _Stdin(self.log), stdout, _Buf(err)
    def open_sftp(self):
        return FakeSFTP(self.log)
    def close(self):
        self.log.append(("close",))


def _target(**kw):
    base = dict(address="10.0.0.1", username="root", password="pw", timeout=12)
    base.update(kw)
    return HostTarget(**base)


def test_connect_with_password():
    ops = []
    ex = SSHExecutor(client_factory=lambda: FakeSSHClient(ops))

    conn = ex.connect(_target())

    _, kw = ops[0]
    assert kw["hostname"] == "10.0.0.1"
    assert kw["port"] == 22
    assert kw["username"] == "root"
    assert kw["password"] == "pw"
    assert kw["pkey"] is None
    assert kw["timeout"] == 12
    assert conn.label == "10.0.0.1"


def test_connect_with_key_file_overrides_password(monkeypatch):
    ops = []
    def not_rsa(path):
        raise paramiko.SSHException("not a valid RSA private key file")

    monkeypatch.setattr(paramiko.RSAKey, "from_private_key_file", staticmethod(not_rsa))
    monkeypatch.setattr(paramiko.Ed25519Key, "from_private_key_file", staticmethod(lambda path: "PKEY"))
    ex = SSHExecutor(client_factory=lambda: FakeSSHClient(ops))

    ex.connect(_target(key_file="/keys/id_ed25519"))

    _, kw = ops[0]
    assert kw["pkey"] == "PKEY"
    assert kw["password"] is None


def test_missing_key_file_is_connection_error(tmp_path: Path):
    ex = SSHExecutor(client_factory=lambda: FakeSSHClient([]))
    with pytest.raises(SSHConnectionError, match="key file"):
        ex.connect(_target(key_file=str(tmp_path / "absent")))


def test_connect_failure_closes_client_and_raises():
    ops = []
    ex = SSHExecutor(client_factory=lambda: FakeSSHClient(ops, connect_error=socket.timeout("timed out")))

    with pytest.raises(SSHConnectionError, match="timed out"):
        ex.connect(_target())
    assert ops[-1] == ("close",)


def test_execute_combines_output_and_reports_exit_status():
    ops = []
    responses = {
        "kubectl get nodes": ("NAME STATUS\n", "warning: x\n", 0),
        "false": ("", "nope\n", 1),
    }
    ex = SSHExecutor(client_factory=lambda: FakeSSHClient(ops, responses))
    conn = ex.connect(_target())

    ok = ex.execute(conn, "kubectl get nodes")
    bad = ex.execute(conn, "false")

    assert ok.ok and ok.output == "NAME STATUS\nwarning: x\n"
    assert not bad.ok
    assert bad.exit_status == 1
    assert bad.reason == "exit status 1"
    assert bad.output == "nope\n"
    # per-command timeout follows the connection timeout
    assert ("exec", "kubectl get nodes", 12) in ops


def test_execute_transport_error_is_failed_result():
    ex = SSHExecutor(client_factory=lambda: FakeSSHClient([], exec_error=paramiko.SSHException("channel closed")))
    conn = ex.connect(_target())

    result = ex.execute(conn, "uname -a")

    assert not result.ok
    assert "channel closed" in result.reason


def test_sudo_wraps_command_and_feeds_password():
    ops = []
    ex = SSHExecutor(client_factory=lambda: FakeSSHClient(ops))
    conn = ex.connect(_target(sudo=True))

    ex.execute(conn, "kubeadm init")

    assert ("exec", "sudo -S bash -lc 'kubeadm init'", 12) in ops
    assert ("stdin", "pw\n") in ops


def test_upload_and_close():
    ops = []
    ex = SSHExecutor(client_factory=lambda: FakeSSHClient(ops))
    conn = ex.connect(_target())

    result = ex.upload(conn, Path("prometheus-values.yaml"), "prometheus-values.yaml")
    ex.close(conn)

    assert result.ok
    assert ("sftp_put", "prometheus-values.yaml", "prometheus-values.yaml") in ops
    assert ops[-1] == ("close",)


def test_host_target_from_settings(cfg):
    target = HostTarget.from_settings("10.1.2.3", cfg.ssh)
    assert target.address == "10.1.2.3"
    assert target.username == "root"
    assert target.timeout == 10
    assert str(target) == "10.1.2.3"
    with pytest.raises(dataclasses.FrozenInstanceError):
        target.address = "other"


def test_execute_merges_stderr_on_the_channel():
    ops = []
    ex = SSHExecutor(client_factory=lambda: FakeSSHClient(ops))
    conn = ex.connect(_target())

    ex.execute(conn, "apt-get update")

    assert ("combine_stderr", True) in ops


def test_encrypted_key_file_is_reported_as_encrypted(monkeypatch):
    def encrypted(path):
        raise paramiko.PasswordRequiredException("private key file is encrypted")

    monkeypatch.setattr(paramiko.RSAKey, "from_private_key_file", staticmethod(encrypted))
    ex = SSHExecutor(client_factory=lambda: FakeSSHClient([]))

    with pytest.raises(SSHConnectionError, match="is encrypted"):
        ex.connect(_target(key_file="/keys/id_rsa"))
