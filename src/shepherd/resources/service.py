# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/resources/service.py

from __future__ import annotations

import logging
import posixpath
import shlex
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

from ..errors import PreconditionError
from ..transfer.upload import Placement, upload_file, upload_template
from .base import Resource

log = logging.getLogger("shepherd")

SYSTEM_UNIT_DIR = "/etc/systemd/system"
USER_UNIT_DIR = ".config/systemd/user"   # relative to the user's home


class UnitScope(str, Enum):
    SYSTEM = "system"
    USER = "user"


@dataclass(frozen=True)
class ServiceUnit:
    """
    A systemd unit converged as: upload (checksum-gated) -> on change
    daemon-reload + restart -> enable if not already enabled.
    Units are never disabled or removed.
    """

    name: str                       # unit name as given to systemctl
    source: str                     # workspace-relative unit file
    scope: UnitScope = UnitScope.SYSTEM
    restart: bool = True
    enable: bool = True
    template: bool = False          # expand {param} placeholders in the unit file
    params: Mapping[str, str] = field(default_factory=dict)

    @property
    def system(self) -> bool:
        return self.scope is UnitScope.SYSTEM

    def destination(self, ctx) -> str:
        filename = posixpath.basename(self.source)
        if self.system:
            return posixpath.join(SYSTEM_UNIT_DIR, filename)
        return posixpath.join(ctx.host.home, USER_UNIT_DIR, filename)

    def placement(self, ctx) -> Placement:
        if self.system:
            return Placement(self.destination(ctx), "root", "root", "644", sudo=True)
        user = ctx.host.username
        return Placement(self.destination(ctx), user, user, "444", sudo=False)

    def systemctl(self, verb: str, unit: bool = True) -> str:
        parts = ["systemctl"]
        if not self.system:
            parts.append("--user")
        parts.append(verb)
        if unit:
            parts.append(shlex.quote(self.name))
        return " ".join(parts)

    def template_params(self, ctx) -> Dict[str, str]:
        return ctx.params(name=self.name, **dict(self.params))

    def local_source(self, ctx) -> Path:
        return ctx.local_path(self.source)

    def check_source(self, ctx, resource: Optional[str] = None) -> None:
        source = self.local_source(ctx)
        if not source.is_file():
            raise PreconditionError(resource or self.name, f"missing unit file {source}")

    def upload(self, ctx) -> bool:
        self.check_source(ctx)
        source = self.local_source(ctx)
        if self.template:
            return upload_template(
                ctx.remote, source, self.template_params(ctx), self.placement(ctx),
                staging_dir=ctx.staging_dir,
            )
        return upload_file(ctx.remote, source, self.placement(ctx), staging_dir=ctx.staging_dir)

    def is_enabled(self, ctx) -> bool:
        output = ctx.remote.capture(self.systemctl("is-enabled"), check=False)
        return output == "enabled"

    def ensure_enabled(self, ctx) -> bool:
        if self.is_enabled(ctx):
            log.info("(%s) unit %s is already enabled", ctx.host, self.name)
            return False
        ctx.remote.execute(self.systemctl("enable"), sudo=self.system)
        return True

    def converge(self, ctx) -> bool:
        changed = self.upload(ctx)
        if changed:
            ctx.remote.execute(self.systemctl("daemon-reload", unit=False), sudo=self.system)
            if self.restart:
                ctx.remote.execute(self.systemctl("restart"), sudo=self.system)
            else:
                log.info("(%s) unit %s changed, restart skipped", ctx.host, self.name)
        if self.enable:
            self.ensure_enabled(ctx)
        return changed


@dataclass(frozen=True)
class MountUnit(ServiceUnit):
    """
    A system mount unit whose ``{server}`` is the first host with *peer_role*
    in the converging host's location. *comment* is shown to the operator
    for the steps that cannot be automated (credentials).
    """

    peer_role: str = ""
    comment: Optional[str] = None
    template: bool = True

    def peer(self, ctx) -> str:
        peer = ctx.inventory.peer(self.peer_role, ctx.host.location)
        if peer is None:
            raise PreconditionError(
                self.name,
                f"no host with role '{self.peer_role}' in location '{ctx.host.location}'",
            )
        return peer.hostname

    def template_params(self, ctx) -> Dict[str, str]:
        params = super().template_params(ctx)
        params["server"] = self.peer(ctx)
        return params

    def converge(self, ctx) -> bool:
        changed = super().converge(ctx)
        if self.comment:
            log.warning("(%s) %s", ctx.host, ctx.expand(self.comment))
        return changed


class ManagedService(Resource):
    """
    A standalone resource wrapping one ServiceUnit.
    """

    kind = "service"

    def __init__(
        self,
        name: str,
        unit: ServiceUnit,
        *,
        dependencies: Sequence[str] = (),
        post_apply_commands: Sequence[str] = (),
    ):
        super().__init__(name, dependencies=dependencies, post_apply_commands=post_apply_commands)
        self.unit = unit

    def apply(self, registry, ctx) -> bool:
        self.install_dependencies(registry, ctx)
        changed = self.unit.converge(ctx)
        if changed:
            self.run_post_apply(ctx, sudo=self.unit.system, name=self.unit.name)
        return changed


class MountedService(ManagedService):
    kind = "mount"

    def __init__(self, name: str, unit: MountUnit, **kwargs):
        super().__init__(name, unit, **kwargs)
