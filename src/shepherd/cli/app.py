# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/cli/app.py
from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

import typer

from shepherd.catalog import DEFAULT_ROLE_PACKAGES, build_registry
from shepherd.config.loader import (
    build_inventory,
    execution_options,
    load_config,
    workspace_dir,
)
from shepherd.engine.converge import converge_hosts
from shepherd.errors import ShepherdError
from shepherd.inventory.models import Host, Inventory
from shepherd.logging.log import init_logging
from shepherd.observers.console import ConsoleObserver
from shepherd.observers.jsonfile import JsonFileObserver
from shepherd.observers.logger import LoggerObserver
from shepherd.remote.connect import open_ssh


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Shepherd host convergence CLI")

DEFAULT_INVENTORY = Path(os.environ.get("SHEPHERD_INVENTORY", "inventory.yaml"))

InventoryOption = typer.Option(
    DEFAULT_INVENTORY, "--inventory", "-i", help="Inventory YAML (hosts, roles, ssh defaults)"
)


def _load(inventory: Path, ssh_key: Optional[Path] = None):
    try:
        cfg = load_config(inventory)
        registry = build_registry()
    except ShepherdError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(2)
    inv = build_inventory(cfg, DEFAULT_ROLE_PACKAGES, pkey_path=ssh_key)
    return cfg, registry, inv


def select_hosts(inv: Inventory, names: List[str], all_hosts: bool) -> List[Host]:
    """
    Resolve the hosts named on the command line, in inventory order for --all.
    """
    if all_hosts:
        return list(inv)
    if not names:
        raise typer.BadParameter("Name at least one host or pass --all")

    unknown = [n for n in names if inv.get(n) is None]
    if unknown:
        raise typer.BadParameter(
            f"Unknown hosts: {', '.join(unknown)}\n"
            f"Valid hosts: {', '.join(inv.hostnames())}"
        )
    return [inv.get(n) for n in names]


# ------------------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------------------

@app.command()
def install(
    hosts: List[str] = typer.Argument(None, help="Hosts to converge"),
    all_hosts: bool = typer.Option(False, "--all", help="Converge every host in the inventory"),
    inventory: Path = InventoryOption,
    only: Optional[str] = typer.Option(
        None,
        "--only",
        help="Comma separated resource names to install instead of the host's role list",
    ),
    ssh_key: Optional[Path] = typer.Option(None, "--ssh-key"),
    debug: bool = typer.Option(False, "--debug"),
    events: bool = typer.Option(False, "--events", help="Echo lifecycle events to the console"),
):
    """Converge hosts to the resources their roles require."""
    logger, run_id, log_path = init_logging(verbose=debug)

    cfg, registry, inv = _load(inventory, ssh_key)
    targets = select_hosts(inv, hosts or [], all_hosts)
    only_names = [n.strip() for n in only.split(",") if n.strip()] if only else None

    typer.echo("")
    typer.secho("Shepherd Convergence Started", bold=True)
    typer.echo(f"  Run ID   : {run_id}")
    typer.echo(f"  Logs     : {log_path}")
    typer.echo(f"  Hosts    : {', '.join(h.hostname for h in targets)}")
    typer.echo("")

    observers = [
        LoggerObserver(logger),
        JsonFileObserver(log_path.with_suffix(".jsonl")),
    ]
    if events:
        observers.append(ConsoleObserver())

    options = execution_options(cfg)
    report = converge_hosts(
        registry,
        targets,
        lambda h: open_ssh(h, options),
        inventory=inv,
        workspace=workspace_dir(cfg, inventory),
        observers=observers,
        options=options,
        only=only_names,
        run_id=run_id,
    )

    for o in report.outcomes:
        if o.status == "OK":
            changed = ", ".join(o.changed) if o.changed else "nothing changed"
            typer.secho(f"  {o.hostname}: OK ({changed})", fg=typer.colors.GREEN)
        else:
            where = f" in {o.resource}" if o.resource else ""
            typer.secho(f"  {o.hostname}: FAILED{where}: {o.error}", fg=typer.colors.RED)
    typer.echo(report.summary())

    if not report.ok:
        raise typer.Exit(1)


@app.command()
def hosts(inventory: Path = InventoryOption):
    """List inventory hosts with roles and location."""
    _, _, inv = _load(inventory)
    for h in inv:
        typer.echo(f"{h.hostname:30} {h.location or '-':12} {','.join(h.roles)}")


@app.command()
def resources():
    """List the registered resources and their dependencies."""
    registry = build_registry()
    for r in registry:
        deps = f" <- {', '.join(r.dependencies)}" if r.dependencies else ""
        typer.echo(f"{r.kind:8} {r.name}{deps}")


@app.command()
def show(
    host: str = typer.Argument(..., help="Host to describe"),
    inventory: Path = InventoryOption,
):
    """Show the resolved resource list for one host."""
    _, registry, inv = _load(inventory)
    h = select_hosts(inv, [host], False)[0]
    typer.echo(f"{h.hostname} ({h.location or 'no location'}) roles={','.join(h.roles)}")
    for name in h.packages:
        marker = "" if name in registry else "  (unknown!)"
        typer.echo(f"  {name}{marker}")


if __name__ == "__main__":
    app()
