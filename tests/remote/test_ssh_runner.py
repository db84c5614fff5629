# tests/remote/test_ssh_runner.py
from __future__ import annotations

import logging
import threading
import types

import paramiko
import pytest

import shepherd.remote.connect as connect_mod
from shepherd.errors import ApplyError
from shepherd.inventory.models import Host
from shepherd.remote.options import ExecutionOptions
from shepherd.remote.ssh_runner import SSHRunner
from shepherd.utils.retry import RetryError


# ---- Fakes for paramiko ----

class _FakeChannel:
    """
    Serves canned stdout/stderr in small chunks; rc=None never exits.
    """
    def __init__(self, out="", err="", rc=0):
        self._out, self._err, self._rc = out.encode(), err.encode(), rc
        self.status_event = threading.Event()
        self.reads = []
        self.closed = False
    def recv_ready(self): return bool(self._out)
    def recv_stderr_ready(self): return bool(self._err)
    def recv(self, n):
        chunk, self._out = self._out[:n], self._out[n:]
        self.reads.append("out")
        return chunk
    def recv_stderr(self, n):
        chunk, self._err = self._err[:n], self._err[n:]
        self.reads.append("err")
        return chunk
    def exit_status_ready(self): return self._rc is not None
    def recv_exit_status(self): return self._rc
    def close(self): self.closed = True

class _FakeFile:
    def __init__(self, log, path): self.log, self.path, self.data = log, path, b""
    def __enter__(self): return self
    def __exit__(self, *exc): self.log.append(("sftp_write", self.path, self.data))
    def write(self, data): self.data += data

class FakeSFTP:
    def __init__(self, log): self.log = log
    def file(self, path, mode): return _FakeFile(self.log, path)
    def put(self, local, remote): self.log.append(("sftp_put", local, remote))
    def close(self): self.log.append(("sftp_close",))

class FakeSSHClient:
    """
    Captures exec_command() calls and returns pre-canned outputs for some commands.
    """
    def __init__(self, log, responses=None):
        self.log = log
        self._responses = responses or {}
    def exec_command(self, cmd, timeout=None):
        self.log.append(("exec", cmd))
        self.channel = _FakeChannel(*self._responses.get(cmd, ("", "", 0)))
        stdout = types.SimpleNamespace(channel=self.channel)
        stderr = types.SimpleNamespace(channel=self.channel)
        return types.SimpleNamespace(write=lambda *a, **k: None), stdout, stderr
    def open_sftp(self):
        return FakeSFTP(self.log)
    def close(self):
        self.log.append(("close",))


HOST = Host(hostname="pi1", address="10.0.0.5")


def _runner(responses=None, **opts):
    ops = []
    return SSHRunner(FakeSSHClient(ops, responses), HOST, ExecutionOptions(**opts)), ops


def test_commands_run_through_bash():
    runner, ops = _runner()
    assert runner.execute("cd inadyn && make") == 0
    assert runner.execute("apt-get install joe", sudo=True) == 0
    assert ops == [
        ("exec", "bash -c 'cd inadyn && make'"),
        ("exec", "sudo bash -c 'apt-get install joe'"),
    ]


def test_nonzero_exit_raises_apply_error():
    runner, _ = _runner({"bash -c false": ("partial\n", "it broke\n", 3)})
    with pytest.raises(ApplyError) as ei:
        runner.execute("false")
    err = ei.value
    assert (err.host, err.command, err.exit_status) == ("pi1", "false", 3)
    assert err.stdout == "partial\n"
    assert "it broke" in str(err)


def test_unchecked_execute_returns_status():
    runner, _ = _runner({"bash -c false": ("", "", 3)})
    assert runner.execute("false", check=False) == 3


def test_test_maps_exit_status_to_bool():
    runner, _ = _runner({"bash -c '[ -f /etc/x ]'": ("", "", 1)})
    assert runner.test("[ -f /etc/x ]") is False
    assert runner.test("[ -f /etc/y ]") is True


def test_capture_strips_output():
    runner, _ = _runner({"bash -c 'systemctl is-enabled sdrip'": ("disabled\n", "", 1)})
    assert runner.capture("systemctl is-enabled sdrip", check=False) == "disabled"
    with pytest.raises(ApplyError):
        runner.capture("systemctl is-enabled sdrip")


def test_output_logged_at_configured_levels(caplog):
    runner, _ = _runner(
        {"bash -c make": ("compiling\n", "warning: unused\n", 0)},
        stdout_level=logging.INFO,
    )
    with caplog.at_level(logging.DEBUG, logger="shepherd"):
        runner.execute("make")
    levels = {r.getMessage(): r.levelno for r in caplog.records}
    assert levels["(pi1) compiling"] == logging.INFO
    assert levels["(pi1) warning: unused"] == logging.WARNING


def test_upload_bytes_and_paths(tmp_path):
    runner, ops = _runner()
    runner.upload(b"hello", "/home/pi/.shepherd-staging/a")
    local = tmp_path / "b"
    local.write_text("x")
    runner.upload(local, "/home/pi/.shepherd-staging/b")
    assert ops == [
        ("sftp_write", "/home/pi/.shepherd-staging/a", b"hello"),
        ("sftp_close",),
        ("sftp_put", str(local), "/home/pi/.shepherd-staging/b"),
        ("sftp_close",),
    ]


def test_custom_sudo_prefix():
    runner, ops = _runner(sudo_prefix="sudo -n")
    runner.execute("true", sudo=True)
    assert ops == [("exec", "sudo -n bash -c true")]


def test_large_stderr_is_read_alongside_stdout():
    big_out = "o" * 100_000 + "\n"
    big_err = "e" * 100_000 + "\n"
    runner, _ = _runner({"bash -c build": (big_out, big_err, 0)})
    rc, out, err = runner.run("build")
    assert (rc, out, err) == (0, big_out, big_err)
    reads = runner.client.channel.reads
    assert reads.index("err") < len(reads) - 1 - reads[::-1].index("out")


def test_command_without_exit_status_times_out():
    runner, _ = _runner({"bash -c 'sleep infinity'": ("started\n", "", None)}, cmd_timeout=0.1)
    with pytest.raises(ApplyError) as ei:
        runner.execute("sleep infinity")
    assert ei.value.exit_status == -1
    assert ei.value.stdout == "started\n"
    assert runner.client.channel.closed


# ---- connection setup ----

def test_open_ssh_connects_with_host_settings(monkeypatch):
    seen = {}

    def fake_connect(host, options):
        seen["host"], seen["options"] = host, options
        return FakeSSHClient([])

    monkeypatch.setattr(connect_mod, "_connect", fake_connect)
    runner = connect_mod.open_ssh(HOST, ExecutionOptions(connect_timeout=5))
    assert isinstance(runner, SSHRunner)
    assert runner.host is HOST
    assert seen["options"].connect_timeout == 5


def test_open_ssh_retries_then_gives_up(monkeypatch):
    attempts = []

    def fake_connect(host, options):
        attempts.append(host.hostname)
        raise paramiko.SSHException("Error reading SSH protocol banner")

    monkeypatch.setattr(connect_mod, "_connect", fake_connect)
    monkeypatch.setattr("shepherd.utils.retry.time.sleep", lambda s: None)

    with pytest.raises(RetryError):
        connect_mod.open_ssh(HOST, ExecutionOptions(connect_retries=3, connect_retry_delay=0))
    assert attempts == ["pi1"] * 3


def test_connect_uses_address_and_key(monkeypatch, tmp_path):
    calls = []

    class FakeClient:
        def set_missing_host_key_policy(self, policy): calls.append(("policy", type(policy).__name__))
        def connect(self, **kw): calls.append(("connect", kw))

    monkeypatch.setattr(connect_mod.paramiko, "SSHClient", FakeClient)
    monkeypatch.setattr(connect_mod, "_load_pkey", lambda path: "PKEY")

    host = Host(hostname="pi1", address="10.0.0.5", username="root", port=2222, pkey_path=tmp_path / "id")
    connect_mod._connect(host, ExecutionOptions())

    assert calls[0] == ("policy", "AutoAddPolicy")
    kw = calls[1][1]
    assert (kw["hostname"], kw["port"], kw["username"], kw["pkey"]) == ("10.0.0.5", 2222, "root", "PKEY")
    assert kw["password"] is None
