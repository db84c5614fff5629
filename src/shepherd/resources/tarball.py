# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import posixpath
import shlex
import time
from typing import Sequence

from .base import Resource

log = logging.getLogger("shepherd")


class Tarball(Resource):
    """
    A downloaded archive, unpacked by its post-apply commands.
    ``{file}`` in those commands is the downloaded temp file.
    The destination test operator is ``-f`` unless the install leaves a symlink (``-L``).
    """

    kind = "tarball"

    def __init__(
        self,
        name: str,
        url: str,
        destination: str,
        *,
        dependencies: Sequence[str] = (),
        post_apply_commands: Sequence[str] = (),
        test: str = "-f",
    ):
        super().__init__(name, dependencies=dependencies, post_apply_commands=post_apply_commands)
        self.url = url
        self.destination = destination
        self.test = test

    def _temp_file(self, ctx) -> str:
        return posixpath.join(ctx.host.home, f"{self.name}-{int(time.time())}.download")

    def apply(self, registry, ctx) -> bool:
        self.install_dependencies(registry, ctx)

        destination = ctx.expand(self.destination)
        if ctx.remote.test(f"[ {self.test} {shlex.quote(destination)} ]"):
            log.info("(%s) %s already present at %s", ctx.host, self.name, destination)
            return False

        tmp_file = self._temp_file(ctx)
        ctx.remote.execute(
            f"curl --silent --show-error --fail --location --output {shlex.quote(tmp_file)} {shlex.quote(self.url)}"
        )
        try:
            self.run_post_apply(ctx, file=tmp_file)
        finally:
            ctx.remote.execute(f"rm -f {shlex.quote(tmp_file)}")
        return True
