# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/engine/converge.py

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..inventory.models import Host, Inventory
from ..observers.dispatcher import EventBus
from ..observers.events import (
    ConvergeStarted,
    ConvergeSummary,
    HostConverged,
    HostFailed,
    new_ctx,
)
from ..registry import Registry
from ..remote.interface import RemoteExecutor
from ..remote.options import ExecutionOptions
from .context import InstallContext

log = logging.getLogger("shepherd")

Connector = Callable[[Host], RemoteExecutor]


@dataclass
class HostOutcome:
    hostname: str
    status: str                 # "OK" | "FAILED"
    changed: List[str] = field(default_factory=list)
    resource: Optional[str] = None
    error: Optional[str] = None


@dataclass
class ConvergeReport:
    outcomes: List[HostOutcome] = field(default_factory=list)

    def add(self, outcome: HostOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def failed(self) -> List[HostOutcome]:
        return [o for o in self.outcomes if o.status == "FAILED"]

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        ok = sum(1 for o in self.outcomes if o.status == "OK")
        changed = sum(1 for o in self.outcomes if o.changed)
        return f"OK={ok} FAILED={len(self.failed)} CHANGED={changed}"


def converge_host(
    registry: Registry,
    ctx: InstallContext,
    names: Optional[Sequence[str]] = None,
) -> List[str]:
    """
    Install each resource name in order on ctx.host. Stops at the first
    failure and re-raises it; nothing already applied is undone.
    Returns the names of resources that changed the host.
    """
    names = list(ctx.host.packages if names is None else names)
    ctx.emit(ConvergeStarted, resources=names)
    log.info("[%s] converging %d resource(s)", ctx.host, len(names))

    t0 = time.time()
    current: Optional[str] = None
    try:
        for current in names:
            registry.install(ctx, current)
    except Exception as e:
        ctx.failed = current
        log.error("[%s] failed on %s: %s", ctx.host, current, e)
        ctx.emit(HostFailed, error=str(e), resource=current)
        raise

    ctx.emit(HostConverged, changed=list(ctx.changed), duration_ms=int((time.time() - t0) * 1000))
    log.info("[%s] converged (%d changed)", ctx.host, len(ctx.changed))
    return list(ctx.changed)


def converge_hosts(
    registry: Registry,
    hosts: Sequence[Host],
    connect: Connector,
    *,
    inventory: Optional[Inventory] = None,
    workspace: Optional[Path] = None,
    observers: Optional[List] = None,
    options: Optional[ExecutionOptions] = None,
    only: Optional[Sequence[str]] = None,
    run_id: Optional[str] = None,
) -> ConvergeReport:
    """
    Converge hosts one after another. Each host gets its own connection and
    install pass; a failing host is recorded and the next one still runs.
    """
    inventory = inventory if inventory is not None else Inventory(hosts)
    bus = EventBus(observers or [])
    options = options or ExecutionOptions()
    run_id = run_id or str(uuid.uuid4())
    report = ConvergeReport()

    for i, host in enumerate(hosts, 1):
        log.info("[%s] Converging host (%d/%d)...", host.hostname, i, len(hosts))
        try:
            remote = connect(host)
        except Exception as e:
            log.error("[%s] cannot connect: %s", host.hostname, e)
            bus.emit(HostFailed(error=str(e), resource=None, **new_ctx(host.hostname, run_id)))
            report.add(HostOutcome(hostname=host.hostname, status="FAILED", error=str(e)))
            continue

        ctx = InstallContext(
            host=host,
            remote=remote,
            inventory=inventory,
            workspace=workspace or Path.cwd(),
            bus=bus,
            options=options,
            run_id=run_id,
        )
        try:
            changed = converge_host(registry, ctx, only)
            report.add(HostOutcome(hostname=host.hostname, status="OK", changed=changed))
        except Exception as e:
            report.add(
                HostOutcome(
                    hostname=host.hostname,
                    status="FAILED",
                    changed=list(ctx.changed),
                    resource=ctx.failed,
                    error=str(e),
                )
            )
        finally:
            close = getattr(remote, "close", None)
            if close is not None:
                close()

    bus.emit(
        ConvergeSummary(
            ok=len(report.outcomes) - len(report.failed),
            failed=len(report.failed),
            changed=sum(len(o.changed) for o in report.outcomes),
            **new_ctx("*", run_id),
        )
    )
    return report
