# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/transfer/upload.py

from __future__ import annotations

import logging
import posixpath
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from ..engine.templating import expand
from ..remote.interface import RemoteExecutor, UploadSource
from .checksum import parse_sha512sum, sha512_bytes, sha512_file
from .secrets import decrypt

log = logging.getLogger("shepherd")


@dataclass(frozen=True)
class Placement:
    """
    Where an uploaded file ends up and who owns it.
    """
    destination: str
    owner: str
    group: str
    mode: str           # octal string as passed to chmod, e.g. "644"
    sudo: bool = False


def remote_checksum(remote: RemoteExecutor, path: str, *, sudo: bool = False) -> Optional[str]:
    """SHA-512 of a remote file, None when it does not exist."""
    if not remote.test(f"[ -f {shlex.quote(path)} ]", sudo=sudo):
        return None
    return parse_sha512sum(remote.capture(f"sha512sum {shlex.quote(path)}", sudo=sudo))


def _transfer(
    remote: RemoteExecutor,
    source: UploadSource,
    local_checksum: str,
    placement: Placement,
    staging_dir: str,
) -> bool:
    dest = placement.destination
    if remote_checksum(remote, dest, sudo=placement.sudo) == local_checksum:
        log.info("(%s) %s is already up to date", remote.host, dest)
        return False

    staged = posixpath.join(staging_dir, posixpath.basename(dest))
    q = shlex.quote
    remote.execute(f"mkdir -p {q(staging_dir)}")
    remote.upload(source, staged)
    remote.execute(f"mkdir -p {q(posixpath.dirname(dest) or '/')}", sudo=placement.sudo)
    remote.execute(f"mv {q(staged)} {q(dest)}", sudo=placement.sudo)
    remote.execute(f"chown {placement.owner}:{placement.group} {q(dest)}", sudo=placement.sudo)
    remote.execute(f"chmod {placement.mode} {q(dest)}", sudo=placement.sudo)
    log.info("(%s) updated %s", remote.host, dest)
    return True


def upload_bytes(
    remote: RemoteExecutor,
    content: bytes,
    placement: Placement,
    *,
    staging_dir: str,
) -> bool:
    """Checksum-gated upload of in-memory content. Returns True when the remote file changed."""
    return _transfer(remote, content, sha512_bytes(content), placement, staging_dir)


def upload_file(
    remote: RemoteExecutor,
    local_path: Path,
    placement: Placement,
    *,
    staging_dir: str,
) -> bool:
    return _transfer(remote, Path(local_path), sha512_file(Path(local_path)), placement, staging_dir)


def upload_template(
    remote: RemoteExecutor,
    local_path: Path,
    params: Mapping[str, str],
    placement: Placement,
    *,
    staging_dir: str,
) -> bool:
    """
    Expand ``{param}`` placeholders in a local text file, then upload the result.
    """
    content = expand(Path(local_path).read_text(encoding="utf-8"), params)
    return upload_bytes(remote, content.encode("utf-8"), placement, staging_dir=staging_dir)


def upload_encrypted(
    remote: RemoteExecutor,
    local_path: Path,
    placement: Placement,
    *,
    staging_dir: str,
) -> bool:
    """
    Decrypt locally and upload only the plaintext. Decryption happens before
    any remote command, so a failure leaves the host untouched.
    """
    plaintext = decrypt(Path(local_path))
    return upload_bytes(remote, plaintext, placement, staging_dir=staging_dir)
