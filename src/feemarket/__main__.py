"""
Fee market command line.

Inspect and seed the fee market store of a node, and produce or check
genesis documents.

Usage::

    python -m feemarket genesis default --aimd > genesis.yaml
    python -m feemarket genesis validate genesis.yaml
    python -m feemarket --db feemarket.db init genesis.yaml
    python -m feemarket --db feemarket.db query base-fee --denom uatom
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from feemarket.components.admission import resolve_gas_price
from feemarket.components.chain.config import DEFAULT_FEE_DENOM
from feemarket.components.containers import State, default_aimd_params, default_params
from feemarket.components.genesis import GenesisState
from feemarket.components.storage import SQLiteDatabase
from feemarket.types import FeeMarketError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Send module logs to stderr."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root = logging.getLogger()
    root.setLevel(level)
    # Keep a logging configuration that is already in place.
    if not root.handlers:
        root.addHandler(handler)


def _load_genesis(path: Path) -> GenesisState:
    try:
        genesis = GenesisState.from_yaml_file(path)
        genesis.validate()
    except (FeeMarketError, ValueError) as e:
        raise click.ClickException(f"invalid genesis {path}: {e}") from e
    return genesis


def _open_store(ctx: click.Context) -> SQLiteDatabase:
    path: Path | None = ctx.obj["db"]
    if path is None:
        raise click.UsageError("--db is required for this command")
    return ctx.with_resource(SQLiteDatabase(path))


def _stored_genesis(ctx: click.Context) -> GenesisState:
    db = _open_store(ctx)
    params = db.get_params()
    state = db.get_state()
    if params is None or state is None:
        raise click.ClickException("fee market store has not been initialized")
    return GenesisState(params=params, state=state)


@click.group()
@click.option(
    "--db",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to the fee market SQLite store",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, db: Path | None, verbose: bool) -> None:
    """Adaptive EIP-1559 fee market tools."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["db"] = db


# -----------------------------------------------------------------------------
# Genesis documents
# -----------------------------------------------------------------------------


@cli.group()
def genesis() -> None:
    """Produce and check genesis documents."""


@genesis.command("default")
@click.option("--denom", default=DEFAULT_FEE_DENOM, show_default=True, help="Fee denomination")
@click.option("--aimd", is_flag=True, help="Use the adaptive calibration")
def genesis_default(denom: str, aimd: bool) -> None:
    """Print a default genesis document."""
    params = default_aimd_params(denom) if aimd else default_params(denom)
    document = GenesisState(params=params, state=State.generate_genesis(params))
    click.echo(document.to_yaml(), nl=False)


@genesis.command("validate")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def genesis_validate(path: Path) -> None:
    """Check a genesis document."""
    loaded = _load_genesis(path)
    click.echo(f"ok: window={loaded.params.window} base_fee={loaded.state.base_fee}")


# -----------------------------------------------------------------------------
# Store
# -----------------------------------------------------------------------------


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an initialized store")
@click.pass_context
def init(ctx: click.Context, path: Path, force: bool) -> None:
    """Seed the store from the genesis document at PATH."""
    loaded = _load_genesis(path)
    db = _open_store(ctx)
    if db.get_params() is not None and not force:
        raise click.ClickException("fee market store is already initialized, use --force")

    with db.transaction():
        db.put_params(loaded.params)
        db.put_state(loaded.state)
    logger.info("Seeded fee market store %s from %s", ctx.obj["db"], path)


@cli.command()
@click.pass_context
def export(ctx: click.Context) -> None:
    """Print the stored params and state as a genesis document."""
    click.echo(_stored_genesis(ctx).to_yaml(), nl=False)


@cli.group()
def query() -> None:
    """Query the stored fee market."""


@query.command("params")
@click.pass_context
def query_params(ctx: click.Context) -> None:
    """Print the parameters in force."""
    click.echo(_stored_genesis(ctx).params.model_dump_json(by_alias=True, indent=2))


@query.command("state")
@click.pass_context
def query_state(ctx: click.Context) -> None:
    """Print the controller state."""
    click.echo(_stored_genesis(ctx).state.model_dump_json(by_alias=True, indent=2))


@query.command("base-fee")
@click.option("--denom", default=None, help="Express the price in this denomination")
@click.pass_context
def query_base_fee(ctx: click.Context, denom: str | None) -> None:
    """Print the base fee per unit of gas."""
    stored = _stored_genesis(ctx)
    try:
        price = resolve_gas_price(stored.params, stored.state, denom or stored.params.fee_denom)
    except FeeMarketError as e:
        raise click.ClickException(e.message) from e
    click.echo(str(price))


def main() -> None:
    """CLI entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
