# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/errors.py
from __future__ import annotations

from typing import Optional, Sequence


class ShepherdError(RuntimeError):
    """Base class for convergence failures."""


class ConfigurationError(ShepherdError):
    """Raised when the inventory or catalog is inconsistent."""


class DuplicateNameError(ShepherdError):
    """Raised when two resources are registered under the same name."""

    def __init__(self, name: str):
        super().__init__(f"Resource '{name}' already registered")
        self.name = name


class UnknownResourceError(ShepherdError):
    """Raised when a requested resource name is not in the registry."""

    def __init__(self, name: str, host: Optional[str] = None):
        where = f" (host {host})" if host else ""
        super().__init__(f"Cannot find resource '{name}'{where}")
        self.name = name
        self.host = host


class CyclicDependencyError(ShepherdError):
    def __init__(self, path: Sequence[str]):
        self.path = list(path)
        super().__init__("Cyclic dependency detected: " + " -> ".join(self.path))


class PreconditionError(ShepherdError):
    """A composite resource is missing something it needs locally."""

    def __init__(self, resource: str, message: str):
        super().__init__(f"[{resource}] {message}")
        self.resource = resource


class DecryptionError(ShepherdError):
    def __init__(self, path: str, exit_status: int, stderr: str = ""):
        detail = f": {stderr.strip()}" if stderr.strip() else ""
        super().__init__(f"Cannot decrypt {path} (gpg exit {exit_status}){detail}")
        self.path = path
        self.exit_status = exit_status
        self.stderr = stderr


class ApplyError(ShepherdError):
    """
    A remote command exited non-zero where success was required.
    Carries enough context to diagnose the failure by hand.
    """

    def __init__(
        self,
        host: str,
        command: str,
        exit_status: int,
        stdout: str = "",
        stderr: str = "",
    ):
        msg = f"({host}) command failed with exit {exit_status}: {command}"
        if stderr.strip():
            msg += f"\n{stderr.rstrip()}"
        super().__init__(msg)
        self.host = host
        self.command = command
        self.exit_status = exit_status
        self.stdout = stdout
        self.stderr = stderr
