# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/observers/console.py
import typer

from .events import BaseEvent, HostFailed, ResourceFailed


class ConsoleObserver:
    def notify(self, event: BaseEvent) -> None:
        failed = isinstance(event, (HostFailed, ResourceFailed))
        typer.secho(
            f"[{event.ts}] {event.describe()}",
            fg=typer.colors.RED if failed else None,
        )
