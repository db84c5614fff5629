# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import shlex
from typing import Sequence

from .base import Resource

log = logging.getLogger("shepherd")

APT_GET = "DEBIAN_FRONTEND=noninteractive apt-get --yes"


class Package(Resource):
    """
    An apt package. Installed when dpkg does not report it selected for install.
    """

    kind = "package"

    def __init__(
        self,
        name: str,
        *,
        dependencies: Sequence[str] = (),
        post_apply_commands: Sequence[str] = (),
        post_apply_sudo: bool = True,
    ):
        super().__init__(name, dependencies=dependencies, post_apply_commands=post_apply_commands)
        self.post_apply_sudo = post_apply_sudo

    def is_installed(self, ctx) -> bool:
        return ctx.remote.test(
            f"dpkg --get-selections {shlex.quote(self.name)} | grep -qE '[[:space:]]install$'"
        )

    def apply(self, registry, ctx) -> bool:
        self.install_dependencies(registry, ctx)

        if self.is_installed(ctx):
            log.info("(%s) package %s is already installed", ctx.host, self.name)
            return False

        ctx.remote.execute(f"{APT_GET} install {shlex.quote(self.name)}", sudo=True)
        self.run_post_apply(ctx, sudo=self.post_apply_sudo, name=self.name)
        return True


class AptDistUpgrade(Resource):
    """
    Recurring maintenance: update, dist-upgrade and autoremove on every run.
    """

    kind = "upgrade"

    def __init__(self, name: str = "apt-dist-upgrade"):
        super().__init__(name)

    def apply(self, registry, ctx) -> bool:
        log.info("(%s) updating packages", ctx.host)
        ctx.remote.execute(f"{APT_GET} update", sudo=True)
        ctx.remote.execute(f"{APT_GET} dist-upgrade", sudo=True)
        ctx.remote.execute(f"{APT_GET} autoremove", sudo=True)
        return True
