# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/observers/logger.py
from __future__ import annotations

import logging

from .events import BaseEvent, ConvergeSummary


class LoggerObserver:
    """Mirrors events into the run log. The run summary goes out at INFO."""

    def __init__(self, logger: logging.Logger, level: int = logging.DEBUG):
        self.logger = logger
        self.level = level

    def notify(self, event: BaseEvent) -> None:
        level = logging.INFO if isinstance(event, ConvergeSummary) else self.level
        self.logger.log(level, "[event] %s", event.describe())
