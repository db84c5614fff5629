# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/engine/context.py

from __future__ import annotations

import posixpath
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..inventory.models import Host, Inventory
from ..observers.dispatcher import EventBus
from ..observers.events import new_ctx
from ..remote.interface import RemoteExecutor
from ..remote.options import ExecutionOptions
from .templating import expand


@dataclass
class InstallContext:
    """
    Everything a resource needs while converging one host.
    A fresh context is one install pass: the active stack and the
    converged set never leak between hosts.
    """

    host: Host
    remote: RemoteExecutor
    inventory: Inventory = field(default_factory=Inventory)
    workspace: Path = field(default_factory=Path.cwd)
    bus: EventBus = field(default_factory=EventBus)
    options: ExecutionOptions = field(default_factory=ExecutionOptions)
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    memoize: bool = True

    # per-pass state
    active: List[str] = field(default_factory=list)
    converged: Dict[str, bool] = field(default_factory=dict)
    changed: List[str] = field(default_factory=list)
    failed: Optional[str] = None    # top-level resource that aborted the pass

    @property
    def staging_dir(self) -> str:
        return posixpath.join(self.host.home, self.options.staging_dir)

    def params(self, **extra: str) -> Dict[str, str]:
        """
        Template parameters available to commands, paths and unit files.
        """
        params = {
            "hostname": self.host.hostname,
            "location": self.host.location,
            "user": self.host.username,
            "home": self.host.home,
        }
        params.update(extra)
        return params

    def expand(self, text: str, **extra: str) -> str:
        return expand(text, self.params(**extra))

    def local_path(self, relative: str) -> Path:
        """Resolve a workspace-relative source path, placeholders included."""
        p = Path(self.expand(relative))
        return p if p.is_absolute() else self.workspace / p

    def event_ctx(self) -> Dict[str, Any]:
        return new_ctx(self.host.hostname, self.run_id)

    def emit(self, event_cls, **data: Any) -> None:
        self.bus.emit(event_cls(**data, **self.event_ctx()))
