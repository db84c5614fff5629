# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
import uuid

_CONTEXT_FIELDS = ("ts", "run_id", "host")


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events in a single convergence run
    host: str         # host being converged

    def dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def record(self) -> Dict[str, Any]:
        """Flat JSON-ready mapping with ``type`` first."""
        return {"type": self.event_type, **self.dict()}

    def describe(self) -> str:
        """One line: event type, host and the event's own fields."""
        fields = " ".join(
            f"{k}={v}" for k, v in self.dict().items() if k not in _CONTEXT_FIELDS
        )
        return f"{self.event_type} host={self.host} {fields}".rstrip()


def new_ctx(host: str, run_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": run_id or str(uuid.uuid4()),
        "host": host,
    }


# ---------------------------------------------------------------------
# Host lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ConvergeStarted(BaseEvent):
    resources: List[str]

@dataclass(frozen=True)
class HostConverged(BaseEvent):
    changed: List[str]
    duration_ms: int

@dataclass(frozen=True)
class HostFailed(BaseEvent):
    error: str
    resource: Optional[str] = None


# ---------------------------------------------------------------------
# Resource lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ResourceStarted(BaseEvent):
    name: str
    kind: str
    depth: int

@dataclass(frozen=True)
class ResourceConverged(BaseEvent):
    name: str
    changed: bool
    duration_ms: int

@dataclass(frozen=True)
class ResourceSkipped(BaseEvent):
    name: str           # already converged earlier in this pass

@dataclass(frozen=True)
class ResourceFailed(BaseEvent):
    name: str
    error: str


# ---------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ConvergeSummary(BaseEvent):
    ok: int
    failed: int
    changed: int
