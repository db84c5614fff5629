# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/inventory/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional


@dataclass
class Host:
    """
    Represents a server you will SSH into and converge.
    """
    hostname: str                 # inventory name, also used to pick per-host artifacts
    roles: List[str] = field(default_factory=list)
    location: str = ""            # selects location-specific config and mount peers
    address: Optional[str] = None # IP or DNS to connect, defaults to hostname
    username: str = "pi"
    port: int = 22
    password: Optional[str] = None
    pkey_path: Optional[Path] = None
    properties: Dict[str, Any] = field(default_factory=dict)
    packages: List[str] = field(default_factory=list)  # resolved resource names

    @property
    def connect_address(self) -> str:
        return self.address or self.hostname

    @property
    def home(self) -> str:
        if self.username == "root":
            return "/root"
        return f"/home/{self.username}"

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def __str__(self) -> str:
        return self.hostname


class Inventory:
    """
    Ordered collection of hosts with the role/location filters used
    for peer selection.
    """

    def __init__(self, hosts: Iterable[Host] = ()):
        self._hosts: List[Host] = list(hosts)

    def __iter__(self) -> Iterator[Host]:
        return iter(self._hosts)

    def __len__(self) -> int:
        return len(self._hosts)

    def hostnames(self) -> List[str]:
        return [h.hostname for h in self._hosts]

    def get(self, hostname: str) -> Optional[Host]:
        for h in self._hosts:
            if h.hostname == hostname:
                return h
        return None

    def with_role(self, role: str) -> "Inventory":
        return Inventory(h for h in self._hosts if h.has_role(role))

    def in_location(self, location: str) -> "Inventory":
        return Inventory(h for h in self._hosts if h.location and h.location == location)

    def first(self) -> Optional[Host]:
        return self._hosts[0] if self._hosts else None

    def peer(self, role: str, location: str) -> Optional[Host]:
        """
        First host carrying *role* in *location*, or None.
        """
        return self.with_role(role).in_location(location).first()
