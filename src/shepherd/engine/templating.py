# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import re
from typing import Mapping

PLACEHOLDER = re.compile(r"\{([a-z_]+)\}")


def expand(text: str, params: Mapping[str, str]) -> str:
    """
    Replace ``{key}`` placeholders whose key is in *params*.
    Anything else in braces (awk programs, shell ``${VAR}``) is left alone.
    """

    def _sub(m: re.Match) -> str:
        key = m.group(1)
        if key in params:
            return str(params[key])
        return m.group(0)

    return PLACEHOLDER.sub(_sub, text)
