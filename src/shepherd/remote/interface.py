# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pathlib import Path
from typing import Protocol, Union

from ..inventory.models import Host

UploadSource = Union[Path, str, bytes]


class RemoteExecutor(Protocol):
    """
    Contract for running commands and placing files on one host.
    """

    host: Host

    def execute(self, command: str, *, sudo: bool = False, check: bool = True) -> int:
        """Run *command*; raise ApplyError on non-zero exit unless check is False."""
        ...

    def test(self, expression: str, *, sudo: bool = False) -> bool:
        """Run a conditional expression. False is a normal answer, never an error."""
        ...

    def capture(self, command: str, *, sudo: bool = False, check: bool = True) -> str:
        """Run *command* and return its stripped stdout."""
        ...

    def upload(self, source: UploadSource, remote_path: str) -> None:
        """Copy a local file (path) or in-memory content (bytes) to remote_path."""
        ...
