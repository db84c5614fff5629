# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import shlex
from typing import Optional, Sequence

from .base import Resource

log = logging.getLogger("shepherd")


class GitCheckout(Resource):
    """
    A git checkout in the login user's home, named after the resource.
    Skipped once *destination* (usually the built artifact) exists, unless forced.
    ``{file}`` in post-apply commands is the checkout directory.
    """

    kind = "git"

    def __init__(
        self,
        name: str,
        url: str,
        destination: str,
        *,
        dependencies: Sequence[str] = (),
        post_apply_commands: Sequence[str] = (),
        branch: Optional[str] = None,
    ):
        super().__init__(name, dependencies=dependencies, post_apply_commands=post_apply_commands)
        self.url = url
        self.destination = destination
        self.branch = branch
        self._force = False

    @property
    def forced(self) -> bool:
        return self._force

    def force(self) -> "GitCheckout":
        self._force = True
        return self

    def apply(self, registry, ctx) -> bool:
        self.install_dependencies(registry, ctx)

        destination = ctx.expand(self.destination)
        if not self._force and ctx.remote.test(f"[ -f {shlex.quote(destination)} ]"):
            log.info("(%s) %s already present at %s", ctx.host, self.name, destination)
            return False

        checkout = shlex.quote(self.name)
        upstream = f"origin/{self.branch}" if self.branch else "origin/HEAD"
        ctx.remote.execute(f"[ -d {checkout}/.git ] || git clone {shlex.quote(self.url)} {checkout}")
        ctx.remote.execute(f"cd {checkout} && git fetch origin && git rebase {upstream}")
        self.run_post_apply(ctx, file=self.name)
        return True
