# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/observers/interface.py
from __future__ import annotations

from typing import Protocol, runtime_checkable

from .events import BaseEvent


@runtime_checkable
class Observer(Protocol):
    """
    Receives every event of a run in emission order, inline with
    convergence. Exceptions are logged and dropped by the EventBus.
    """

    def notify(self, event: BaseEvent) -> None: ...
