# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from ..errors import DecryptionError

log = logging.getLogger("shepherd")


def decrypt(path: Path) -> bytes:
    """
    Decrypt a gpg-encrypted file locally and return the plaintext.
    """
    log.debug("decrypting %s", path)
    if not Path(path).is_file():
        raise DecryptionError(str(path), 2, "no such file")

    try:
        cp = subprocess.run(
            ["gpg", "--decrypt", "--quiet", str(path)],
            capture_output=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise DecryptionError(str(path), 127, "gpg not found") from e

    if cp.returncode != 0:
        raise DecryptionError(
            str(path),
            cp.returncode,
            cp.stderr.decode("utf-8", errors="replace"),
        )
    return cp.stdout
