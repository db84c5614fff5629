# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/resources/base.py

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar, Sequence

if TYPE_CHECKING:
    from ..engine.context import InstallContext
    from ..registry import Registry

log = logging.getLogger("shepherd")


class Resource(ABC):
    """
    A named unit of desired state. ``apply`` must be safe to run any number
    of times and reports whether it changed the host.
    """

    kind: ClassVar[str] = "resource"

    def __init__(
        self,
        name: str,
        *,
        dependencies: Sequence[str] = (),
        post_apply_commands: Sequence[str] = (),
    ):
        self.name = name
        self.dependencies = tuple(dependencies)
        self.post_apply_commands = tuple(post_apply_commands)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    def install_dependencies(self, registry: "Registry", ctx: "InstallContext") -> None:
        for dependency in self.dependencies:
            registry.install(ctx, dependency)

    def run_post_apply(self, ctx: "InstallContext", *, sudo: bool = False, **params: str) -> None:
        for command in self.post_apply_commands:
            ctx.remote.execute(ctx.expand(command, **params), sudo=sudo)

    @abstractmethod
    def apply(self, registry: "Registry", ctx: "InstallContext") -> bool:
        ...
