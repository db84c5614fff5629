# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/registry.py

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Dict, Iterator, List, Set

from .errors import CyclicDependencyError, DuplicateNameError, UnknownResourceError
from .observers.events import (
    ResourceConverged,
    ResourceFailed,
    ResourceSkipped,
    ResourceStarted,
)

if TYPE_CHECKING:
    from .engine.context import InstallContext
    from .resources.base import Resource

log = logging.getLogger("shepherd")


class Registry:
    """
    All known resources keyed by unique name. Built once at startup,
    read-only while hosts converge.
    """

    def __init__(self):
        self._resources: Dict[str, "Resource"] = {}

    def register(self, resource: "Resource") -> "Registry":
        if resource.name in self._resources:
            raise DuplicateNameError(resource.name)
        self._resources[resource.name] = resource
        return self

    def get(self, name: str) -> "Resource":
        try:
            return self._resources[name]
        except KeyError:
            raise UnknownResourceError(name) from None

    def names(self) -> List[str]:
        return list(self._resources)

    def __contains__(self, name: str) -> bool:
        return name in self._resources

    def __iter__(self) -> Iterator["Resource"]:
        return iter(self._resources.values())

    def __len__(self) -> int:
        return len(self._resources)

    def validate(self) -> None:
        """
        Check declared dependencies without touching any host: every name
        must resolve and the graph must be acyclic.
        """
        for r in self._resources.values():
            for d in r.dependencies:
                if d not in self._resources:
                    raise UnknownResourceError(d)

        done: Set[str] = set()

        def _walk(name: str, path: List[str]) -> None:
            if name in path:
                raise CyclicDependencyError(path[path.index(name):] + [name])
            if name in done:
                return
            for d in self._resources[name].dependencies:
                _walk(d, path + [name])
            done.add(name)

        for name in self._resources:
            _walk(name, [])

    def install(self, ctx: "InstallContext", name: str) -> bool:
        """
        Converge *name* on ctx.host. The resource installs its own
        dependencies through this same entry point.
        """
        resource = self._resources.get(name)
        if resource is None:
            raise UnknownResourceError(name, ctx.host.hostname)

        if name in ctx.active:
            raise CyclicDependencyError(ctx.active[ctx.active.index(name):] + [name])

        if ctx.memoize and name in ctx.converged:
            log.debug("(%s) %s already converged in this pass", ctx.host, name)
            ctx.emit(ResourceSkipped, name=name)
            return False

        log.info("(%s) install %s %s", ctx.host, resource.kind, name)
        ctx.emit(ResourceStarted, name=name, kind=resource.kind, depth=len(ctx.active))
        ctx.active.append(name)
        t0 = time.time()
        try:
            changed = resource.apply(self, ctx)
        except Exception as e:
            ctx.emit(ResourceFailed, name=name, error=str(e))
            raise
        finally:
            ctx.active.pop()

        ctx.converged[name] = changed
        if changed:
            ctx.changed.append(name)
        ctx.emit(
            ResourceConverged,
            name=name,
            changed=changed,
            duration_ms=int((time.time() - t0) * 1000),
        )
        return changed
