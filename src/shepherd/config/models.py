# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/config/models.py

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, model_validator


class SshDefaults(BaseModel):
    username: str = "pi"
    port: int = 22
    password: Optional[str] = None
    pkey_path: Optional[str] = None
    connect_timeout: float = 20.0
    cmd_timeout: Optional[float] = None
    connect_retries: int = 1
    connect_retry_delay: int = 10


class HostSpec(BaseModel):
    hostname: str
    address: Optional[str] = None           # defaults to hostname
    roles: List[str] = Field(default_factory=list)
    location: str = ""
    username: Optional[str] = None          # falls back to ssh.username
    port: Optional[int] = None
    properties: Dict[str, Any] = Field(default_factory=dict)


class ShepherdConfig(BaseModel):
    workspace: Optional[str] = None         # local artifacts/secrets; default: inventory dir
    ssh: SshDefaults = SshDefaults()
    roles: Dict[str, List[str]] = Field(default_factory=dict)  # merged over the catalog defaults
    hosts: List[HostSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_hostnames(self):
        seen = set()
        for h in self.hosts:
            if h.hostname in seen:
                raise ValueError(f"duplicate host '{h.hostname}'")
            seen.add(h.hostname)
        return self

    def by_name(self) -> Dict[str, HostSpec]:
        return {h.hostname: h for h in self.hosts}
