#!/usr/bin/env python3
"""
CLI tool for the Pet reconciler
Runs single reconciliation steps for a Pet manifest against a pet store
"""

import asyncio
import json
import logging

import click
import yaml
from tabulate import tabulate

from clients.pet import PetClient
from config import get_config
from errors import PetstoreError
from external import (
    ObservationState,
    connect,
    get_external_name,
    get_pet_parameters,
    set_external_name,
)


def load_manifest(filename):
    """Read a Pet manifest from a YAML/JSON file"""
    with open(filename, "r") as f:
        if filename.endswith(".yaml") or filename.endswith(".yml"):
            return yaml.safe_load(f) or {}
        return json.load(f)


def save_manifest(filename, data):
    """Write a Pet manifest back in the format it was read in"""
    with open(filename, "w") as f:
        if filename.endswith(".yaml") or filename.endswith(".yml"):
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        else:
            json.dump(data, f, indent=2)
            f.write("\n")


def _connect(ctx, resource):
    """Connect to the manifest's store, letting --server override it"""
    server = ctx.obj["server"]
    if server:
        resource = {**resource, "plugin_config": {"server_url": server}}
    return connect(resource, get_config().petstore)


def _run(coro):
    try:
        return asyncio.run(coro)
    except PetstoreError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


@click.group()
@click.option("--server", "-s", default=None, help="Pet store base URL")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, server, verbose):
    """Pet reconciler CLI - observe, apply and delete Pet manifests"""
    level = logging.DEBUG if verbose else get_config().log_level
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    ctx.ensure_object(dict)
    ctx.obj["server"] = server


@cli.command()
@click.argument("filename", type=click.Path(exists=True))
@click.pass_context
def observe(ctx, filename):
    """Show whether the manifest's pet exists and is up to date"""
    resource = load_manifest(filename)

    async def run():
        external = _connect(ctx, resource)
        params = get_pet_parameters(resource)
        return await external.observe(params, get_external_name(resource))

    observed = _run(run())
    observation = observed.observation

    headers = ["Name", "Exists", "Up To Date", "ID", "Status"]
    rows = [
        [
            resource.get("name", ""),
            "✓" if observed.exists else "✗",
            "✓" if observed.up_to_date else "✗",
            observation.id if observation else "",
            observation.status.value if observation and observation.status else "",
        ]
    ]
    click.echo(tabulate(rows, headers=headers, tablefmt="grid"))


@cli.command()
@click.argument("filename", type=click.Path(exists=True))
@click.pass_context
def apply(ctx, filename):
    """Create or update the manifest's pet"""
    resource = load_manifest(filename)
    external_name = get_external_name(resource)

    async def run():
        external = _connect(ctx, resource)
        params = get_pet_parameters(resource)
        observed = await external.observe(params, external_name)

        if observed.state in (ObservationState.NO_IDENTITY, ObservationState.ABSENT):
            return "created", await external.create(params)
        if observed.state is ObservationState.EXISTS_STALE:
            await external.update(external_name, params)
            return "updated", external_name
        return "unchanged", external_name

    action, name = _run(run())

    if action == "created":
        set_external_name(resource, name)
        save_manifest(filename, resource)

    click.echo(f"Pet {name} {action}")


@cli.command()
@click.argument("filename", type=click.Path(exists=True))
@click.pass_context
def delete(ctx, filename):
    """Delete the manifest's pet from the store"""
    resource = load_manifest(filename)
    external_name = get_external_name(resource)

    if not external_name:
        click.echo("No pet bound to this manifest")
        return

    async def run():
        external = _connect(ctx, resource)
        await external.delete(external_name)

    _run(run())
    click.echo(f"Pet {external_name} deleted")


@cli.command()
@click.argument("pet_id")
@click.option("--output", "-o", type=click.Choice(["json", "yaml"]), default="json")
@click.pass_context
def describe(ctx, pet_id, output):
    """Show a pet as stored"""
    server_url = ctx.obj["server"] or get_config().petstore.server_url
    pet = _run(PetClient(server_url).get_pet_by_id(pet_id))
    result = pet.model_dump(mode="json", by_alias=True, exclude_none=True)

    if output == "yaml":
        click.echo(yaml.dump(result, default_flow_style=False))
    else:
        click.echo(json.dumps(result, indent=2))


if __name__ == "__main__":
    cli()
