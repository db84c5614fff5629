# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/config/loader.py

import logging
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationError
from ..inventory.models import Host, Inventory
from ..inventory.roles import merge_role_mappings, roles_to_packages
from ..remote.options import ExecutionOptions
from .models import ShepherdConfig

log = logging.getLogger("shepherd")


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Recursively merge *override* into *base* (mutates base).
    Only overwrites when the override value is non-empty.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            _deep_merge(base[key], value)
        else:
            if value not in (None, ""):
                base[key] = value
    return base


def _find_override_file(config_path: Path) -> Path | None:
    """
    Locate the local override file:

    1. SHEPHERD_OVERRIDES environment variable (explicit path)
    2. <inventory-stem>.local.yaml next to the inventory
    """
    env = os.environ.get("SHEPHERD_OVERRIDES")
    if env:
        p = Path(env)
        if p.is_file():
            return p
        log.warning("SHEPHERD_OVERRIDES=%s does not exist, skipping", env)
        return None

    p = config_path.with_name(f"{config_path.stem}.local.yaml")
    if p.is_file():
        return p
    return None


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text()
    expanded = os.path.expandvars(raw)
    return yaml.safe_load(expanded) or {}


def load_config(path: str | Path) -> ShepherdConfig:
    """
    Load and validate an inventory YAML file, deep-merging the local
    override file (if any) before validation.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"inventory {path} does not exist")

    try:
        data = _load_yaml(path)
        override = _find_override_file(path)
        if override:
            log.debug("Merging overrides from %s", override)
            _deep_merge(data, _load_yaml(override))
        return ShepherdConfig.model_validate(data)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"cannot parse {path}: {e}") from e
    except ValidationError as e:
        raise ConfigurationError(f"invalid inventory {path}:\n{e}") from e


def execution_options(cfg: ShepherdConfig) -> ExecutionOptions:
    return ExecutionOptions(
        connect_timeout=cfg.ssh.connect_timeout,
        cmd_timeout=cfg.ssh.cmd_timeout,
        connect_retries=cfg.ssh.connect_retries,
        connect_retry_delay=cfg.ssh.connect_retry_delay,
    )


def workspace_dir(cfg: ShepherdConfig, config_path: str | Path) -> Path:
    base = Path(config_path).resolve().parent
    if cfg.workspace is None:
        return base
    ws = Path(cfg.workspace).expanduser()
    return ws if ws.is_absolute() else base / ws


def build_inventory(
    cfg: ShepherdConfig,
    role_packages: Mapping[str, List[str]],
    *,
    pkey_path: Optional[Path] = None,
) -> Inventory:
    """
    Turn host specs into Hosts with their resource lists resolved.
    """
    roles: Dict[str, List[str]] = merge_role_mappings(role_packages, cfg.roles)
    key = pkey_path or (Path(cfg.ssh.pkey_path).expanduser() if cfg.ssh.pkey_path else None)

    hosts = []
    for spec in cfg.hosts:
        hosts.append(
            Host(
                hostname=spec.hostname,
                roles=list(spec.roles),
                location=spec.location,
                address=spec.address,
                username=spec.username or cfg.ssh.username,
                port=spec.port or cfg.ssh.port,
                password=cfg.ssh.password,
                pkey_path=key,
                properties=dict(spec.properties),
                packages=roles_to_packages(spec.roles, roles),
            )
        )
    return Inventory(hosts)
