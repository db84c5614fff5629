# tests/conftest.py
from __future__ import annotations

import hashlib
import re
import shlex
from pathlib import Path

import pytest

from shepherd.engine.context import InstallContext
from shepherd.errors import ApplyError
from shepherd.inventory.models import Host, Inventory
from shepherd.observers.dispatcher import EventBus


# ---- Fake remote host ----

_TEST = re.compile(r"^\[ (-[fLd]) (.+) \]$")
_DPKG = re.compile(r"^dpkg --get-selections (\S+) \|")
_SYSTEMCTL = re.compile(r"^systemctl (?:--user )?(\S+)(?: (\S+))?$")


class FakeRemote:
    """
    In-memory stand-in for a host reached over SSH. Understands just the
    commands the resources send; everything else is recorded and succeeds.
    """

    def __init__(self, host: Host | None = None):
        self.host = host or Host(hostname="pi1", roles=["debian"], location="home")
        self.files: dict[str, bytes] = {}
        self.links: set[str] = set()
        self.dirs: set[str] = set()
        self.packages: set[str] = set()
        self.enabled: set[str] = set()
        self.calls: list[tuple[str, str, bool]] = []   # (kind, command, sudo)
        self.fail_on: list[str] = []
        self.closed = False

    # -- helpers for assertions --
    @property
    def commands(self) -> list[str]:
        return [c for k, c, _ in self.calls if k == "exec"]

    @property
    def uploads(self) -> list[str]:
        return [c for k, c, _ in self.calls if k == "upload"]

    def sudo_of(self, command: str) -> bool:
        for k, c, s in self.calls:
            if c == command:
                return s
        raise AssertionError(f"{command!r} was never sent")

    # -- RemoteExecutor --
    def _failing(self, command: str) -> bool:
        return any(f in command for f in self.fail_on)

    def test(self, expression: str, *, sudo: bool = False) -> bool:
        self.calls.append(("test", expression, sudo))
        if self._failing(expression):
            return False
        m = _TEST.match(expression)
        if m:
            op, path = m.group(1), shlex.split(m.group(2))[0]
            if op == "-f":
                return path in self.files
            if op == "-L":
                return path in self.links
            return path in self.dirs
        m = _DPKG.match(expression)
        if m:
            return m.group(1) in self.packages
        return False

    def capture(self, command: str, *, sudo: bool = False, check: bool = True) -> str:
        self.calls.append(("capture", command, sudo))
        if command.startswith("sha512sum "):
            path = shlex.split(command)[1]
            return f"{hashlib.sha512(self.files[path]).hexdigest()}  {path}"
        m = _SYSTEMCTL.match(command)
        if m and m.group(1) == "is-enabled":
            return "enabled" if m.group(2) in self.enabled else "disabled"
        return ""

    def execute(self, command: str, *, sudo: bool = False, check: bool = True) -> int:
        self.calls.append(("exec", command, sudo))
        if self._failing(command):
            if check:
                raise ApplyError(self.host.hostname, command, 1, "", "boom")
            return 1

        argv = shlex.split(command) if "|" not in command and "&&" not in command else []
        if argv[:1] == ["mv"]:
            self.files[argv[2]] = self.files.pop(argv[1])
        elif argv[:1] == ["touch"]:
            self.files.setdefault(argv[1], b"")
        elif argv[:2] == ["rm", "-f"]:
            self.files.pop(argv[2], None)
        elif "apt-get" in argv and "install" in argv:
            self.packages.add(argv[-1])
        else:
            m = _SYSTEMCTL.match(command)
            if m and m.group(1) == "enable":
                self.enabled.add(m.group(2))
        return 0

    def upload(self, source, remote_path: str) -> None:
        self.calls.append(("upload", remote_path, False))
        self.files[remote_path] = source if isinstance(source, bytes) else Path(source).read_bytes()

    def close(self) -> None:
        self.closed = True


class CaptureObserver:
    def __init__(self):
        self.events = []

    def notify(self, ev):
        self.events.append(ev)

    def kinds(self) -> list[str]:
        return [e.__class__.__name__ for e in self.events]

    def of(self, cls):
        return [e for e in self.events if isinstance(e, cls)]


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def capture() -> CaptureObserver:
    return CaptureObserver()


@pytest.fixture
def make_ctx(tmp_path, capture):
    """
    Build an InstallContext for a FakeRemote, with tmp_path as the workspace.
    """

    def _make(remote: FakeRemote, inventory: Inventory | None = None, **kw) -> InstallContext:
        return InstallContext(
            host=remote.host,
            remote=remote,
            inventory=inventory if inventory is not None else Inventory([remote.host]),
            workspace=tmp_path,
            bus=EventBus([capture]),
            run_id="run-1",
            **kw,
        )

    return _make


@pytest.fixture
def fake_remote():
    """Factory for extra FakeRemotes bound to given hosts."""
    return FakeRemote
