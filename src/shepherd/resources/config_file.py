# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/resources/config_file.py

from __future__ import annotations

from typing import Sequence

from ..transfer.upload import Placement, upload_encrypted
from .base import Resource


class ConfigFile(Resource):
    """
    A gpg-encrypted local file placed on the host in plaintext.
    *source* is workspace-relative and may contain ``{location}``
    to pick a per-location variant.
    """

    kind = "config"

    def __init__(
        self,
        name: str,
        destination: str,
        source: str,
        *,
        dependencies: Sequence[str] = (),
        post_apply_commands: Sequence[str] = (),
        owner: str = "root",
        group: str = "root",
        mode: str = "400",
        sudo: bool = True,
    ):
        super().__init__(name, dependencies=dependencies, post_apply_commands=post_apply_commands)
        self.destination = destination
        self.source = source
        self.owner = owner
        self.group = group
        self.mode = mode
        self.sudo = sudo

    def apply(self, registry, ctx) -> bool:
        self.install_dependencies(registry, ctx)

        source = ctx.local_path(self.source)
        placement = Placement(
            destination=ctx.expand(self.destination),
            owner=ctx.expand(self.owner),
            group=ctx.expand(self.group),
            mode=self.mode,
            sudo=self.sudo,
        )
        changed = upload_encrypted(ctx.remote, source, placement, staging_dir=ctx.staging_dir)
        if changed:
            self.run_post_apply(ctx, sudo=self.sudo, file=placement.destination)
        return changed
