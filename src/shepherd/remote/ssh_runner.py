# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/remote/ssh_runner.py

from __future__ import annotations

import logging
import shlex
import time
from pathlib import Path
from typing import Optional

import paramiko

from ..errors import ApplyError
from ..inventory.models import Host
from .interface import UploadSource
from .options import ExecutionOptions

log = logging.getLogger("shepherd")

_CHUNK = 32768
_POLL = 0.05   # seconds between checks while the command is silent


class SSHRunner:
    """
    Paramiko-backed executor for one host. Every command runs through a
    non-login ``bash -c``: pipes, ``&&`` and ``cd`` work, and profile scripts
    never add to captured output.
    """

    def __init__(
        self,
        client: paramiko.SSHClient,
        host: Host,
        options: Optional[ExecutionOptions] = None,
    ):
        self.client = client
        self.host = host
        self.options = options or ExecutionOptions()

    def _wrap(self, cmd: str, sudo: bool) -> str:
        wrapped = f"bash -c {shlex.quote(cmd)}"
        if sudo:
            wrapped = f"{self.options.sudo_prefix} {wrapped}"
        return wrapped

    def _drain(self, chan: paramiko.Channel, cmd: str) -> tuple[int, bytes, bytes]:
        """Read stdout and stderr side by side until the command exits."""
        timeout = self.options.cmd_timeout
        deadline = None if timeout is None else time.monotonic() + timeout
        out, err = bytearray(), bytearray()
        while True:
            busy = False
            if chan.recv_ready():
                out += chan.recv(_CHUNK)
                busy = True
            if chan.recv_stderr_ready():
                err += chan.recv_stderr(_CHUNK)
                busy = True
            if chan.exit_status_ready() and not chan.recv_ready() and not chan.recv_stderr_ready():
                return chan.recv_exit_status(), bytes(out), bytes(err)
            if deadline is not None and time.monotonic() > deadline:
                chan.close()
                raise ApplyError(
                    self.host.hostname, cmd, -1,
                    out.decode("utf-8", errors="replace"),
                    f"no exit status after {timeout}s",
                )
            if not busy:
                chan.status_event.wait(_POLL)

    def run(self, cmd: str, *, sudo: bool = False) -> tuple[int, str, str]:
        final = self._wrap(cmd, sudo)
        log.debug("(%s) $ %s", self.host, final)

        _, stdout, _ = self.client.exec_command(final, timeout=self.options.cmd_timeout)
        rc, raw_out, raw_err = self._drain(stdout.channel, cmd)
        out = raw_out.decode("utf-8", errors="replace")
        err = raw_err.decode("utf-8", errors="replace")

        for line in out.splitlines():
            log.log(self.options.stdout_level, "(%s) %s", self.host, line)
        for line in err.splitlines():
            log.log(self.options.stderr_level, "(%s) %s", self.host, line)
        log.debug("(%s) [exit %d]", self.host, rc)
        return rc, out, err

    def execute(self, command: str, *, sudo: bool = False, check: bool = True) -> int:
        rc, out, err = self.run(command, sudo=sudo)
        if rc != 0 and check:
            raise ApplyError(self.host.hostname, command, rc, out, err)
        return rc

    def test(self, expression: str, *, sudo: bool = False) -> bool:
        rc, _, _ = self.run(expression, sudo=sudo)
        return rc == 0

    def capture(self, command: str, *, sudo: bool = False, check: bool = True) -> str:
        rc, out, err = self.run(command, sudo=sudo)
        if rc != 0 and check:
            raise ApplyError(self.host.hostname, command, rc, out, err)
        return out.strip()

    def upload(self, source: UploadSource, remote_path: str) -> None:
        sftp = self.client.open_sftp()
        try:
            if isinstance(source, bytes):
                log.debug("(%s) upload %d bytes -> %s", self.host, len(source), remote_path)
                with sftp.file(remote_path, "wb") as f:
                    f.write(source)
            else:
                log.debug("(%s) upload %s -> %s", self.host, source, remote_path)
                sftp.put(str(Path(source)), remote_path)
        finally:
            sftp.close()

    def close(self) -> None:
        self.client.close()
