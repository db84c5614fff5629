# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Sequence

log = logging.getLogger("shepherd")


def roles_to_packages(
    roles: Iterable[str],
    mapping: Mapping[str, Sequence[str]],
) -> List[str]:
    """
    Expand roles into resource names, in role order.
    Roles without a mapping contribute nothing. Repeated names keep
    their first position.
    """
    seen: set[str] = set()
    out: List[str] = []
    for role in roles:
        names = mapping.get(role)
        if names is None:
            log.debug("role %s has no packages", role)
            continue
        for name in names:
            if name in seen:
                continue
            seen.add(name)
            out.append(name)
    return out


def merge_role_mappings(
    base: Mapping[str, Sequence[str]],
    override: Mapping[str, Sequence[str]],
) -> Dict[str, List[str]]:
    merged = {k: list(v) for k, v in base.items()}
    for k, v in override.items():
        merged[k] = list(v)
    return merged
