# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/resources/bundle.py

from __future__ import annotations

import logging
import posixpath
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..errors import PreconditionError
from ..transfer.upload import Placement, upload_encrypted, upload_file
from .base import Resource
from .service import ServiceUnit

log = logging.getLogger("shepherd")


@dataclass(frozen=True)
class Precondition:
    """A local path that must exist before anything is uploaded."""
    path: str
    message: str


@dataclass(frozen=True)
class Artifact:
    """
    A local file (or every file matched by a glob) placed on the host.

    Paths and owner/group may use ``{hostname}``, ``{location}``, ``{user}``
    and ``{home}``. For glob artifacts *destination* is a directory.
    When *marker* is set, that remote file is touched whenever the
    artifact changes so tooling on the host can notice the update.
    """

    source: str
    destination: str
    owner: str = "{user}"
    group: str = "{user}"
    mode: str = "600"
    encrypted: bool = False
    glob: bool = False
    marker: Optional[str] = None
    sudo: bool = False

    def expand(self, ctx) -> List[Tuple[Path, str]]:
        destination = ctx.expand(self.destination)
        if not self.glob:
            return [(ctx.local_path(self.source), destination)]
        pattern = ctx.expand(self.source)
        return [
            (p, posixpath.join(destination, p.name))
            for p in sorted(ctx.workspace.glob(pattern))
            if p.is_file()
        ]

    def missing(self, ctx) -> List[Path]:
        """Local sources that should exist but do not. A glob matching nothing is not missing."""
        if self.glob:
            return []
        return [local for local, _ in self.expand(ctx) if not local.is_file()]

    def upload(self, ctx) -> bool:
        changed = False
        for local, remote_path in self.expand(ctx):
            placement = Placement(
                destination=remote_path,
                owner=ctx.expand(self.owner),
                group=ctx.expand(self.group),
                mode=self.mode,
                sudo=self.sudo,
            )
            if self.encrypted:
                changed |= upload_encrypted(ctx.remote, local, placement, staging_dir=ctx.staging_dir)
            else:
                changed |= upload_file(ctx.remote, local, placement, staging_dir=ctx.staging_dir)
        if changed and self.marker:
            ctx.remote.execute(f"touch {shlex.quote(ctx.expand(self.marker))}")
        return changed


class Bundle(Resource):
    """
    An application installed as one unit: dependencies, local preconditions,
    uploaded artifacts and the services that run it.
    """

    kind = "bundle"

    def __init__(
        self,
        name: str,
        *,
        dependencies: Sequence[str] = (),
        preconditions: Sequence[Precondition] = (),
        artifacts: Sequence[Artifact] = (),
        services: Sequence[ServiceUnit] = (),
        post_apply_commands: Sequence[str] = (),
    ):
        super().__init__(name, dependencies=dependencies, post_apply_commands=post_apply_commands)
        self.preconditions = tuple(preconditions)
        self.artifacts = tuple(artifacts)
        self.services = tuple(services)

    def check_preconditions(self, ctx) -> None:
        for pre in self.preconditions:
            if not ctx.local_path(pre.path).exists():
                raise PreconditionError(self.name, pre.message)
        for artifact in self.artifacts:
            missing = artifact.missing(ctx)
            if missing:
                raise PreconditionError(self.name, f"missing {missing[0]}")
        for unit in self.services:
            unit.check_source(ctx, self.name)

    def apply(self, registry, ctx) -> bool:
        self.install_dependencies(registry, ctx)
        self.check_preconditions(ctx)

        changed = False
        for artifact in self.artifacts:
            changed |= artifact.upload(ctx)
        for unit in self.services:
            changed |= unit.converge(ctx)

        if changed:
            self.run_post_apply(ctx, name=self.name)
        return changed
