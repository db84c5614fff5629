# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ExecutionOptions:
    """
    Controls how remote commands are executed and reported.
    Passed explicitly to each executor.
    """

    connect_timeout: float = 20.0
    cmd_timeout: Optional[float] = None   # None: wait for the command forever
    connect_retries: int = 1
    connect_retry_delay: int = 10
    sudo_prefix: str = "sudo"
    staging_dir: str = ".shepherd-staging"  # relative to the login user's home
    stdout_level: int = logging.DEBUG
    stderr_level: int = logging.WARNING
