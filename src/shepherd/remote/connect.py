# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from typing import Optional

import paramiko

from ..inventory.models import Host
from ..utils.retry import retry
from .options import ExecutionOptions
from .ssh_runner import SSHRunner

log = logging.getLogger("shepherd")


def _load_pkey(path: str) -> Optional[paramiko.PKey]:
    for key_cls in (
        paramiko.Ed25519Key,
        paramiko.RSAKey,
        paramiko.ECDSAKey,
    ):
        try:
            return key_cls.from_private_key_file(path)
        except paramiko.SSHException:
            continue
    raise RuntimeError(f"Unsupported private key format for {path}")


def _connect(host: Host, options: ExecutionOptions) -> paramiko.SSHClient:
    client = paramiko.SSHClient()
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    pkey = _load_pkey(str(host.pkey_path)) if host.pkey_path else None

    client.connect(
        hostname=host.connect_address,
        port=host.port,
        username=host.username,
        password=host.password if not pkey else None,
        pkey=pkey,
        timeout=options.connect_timeout,
        allow_agent=True,
        look_for_keys=pkey is None,
    )
    return client


def open_ssh(host: Host, options: Optional[ExecutionOptions] = None) -> SSHRunner:
    """
    Connect to *host* and return an executor bound to it.
    """
    options = options or ExecutionOptions()

    def _on_retry(attempt: int, exc: Exception) -> None:
        log.info(
            "[%s] SSH not ready (attempt %d/%d, %s: %s)",
            host.hostname, attempt, options.connect_retries, type(exc).__name__, exc,
        )

    connect = retry(
        attempts=options.connect_retries,
        delay=options.connect_retry_delay,
        retry_on=(paramiko.SSHException, OSError),
        on_retry=_on_retry,
    )(_connect)

    client = connect(host, options)
    log.debug("[%s] connected to %s:%d as %s", host.hostname, host.connect_address, host.port, host.username)
    return SSHRunner(client, host, options)
