from __future__ import annotations

from pathlib import Path

import click
from pydantic import ValidationError as SettingsError

from fabricshop.infrastructure.bootstrap import build_context
from fabricshop.infrastructure.cli.fabric_commands import (
    fabric_add,
    fabric_check,
    fabric_list,
    fabric_reconcile,
    fabric_restock,
    fabric_update,
)
from fabricshop.infrastructure.cli.order_commands import (
    order_cancel,
    order_create,
    order_list,
    order_payment,
    order_show,
    order_stats,
    order_status,
)
from fabricshop.infrastructure.config import Settings
from fabricshop.infrastructure.logging_config import configure_logging


@click.group()
@click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Override FABRICSHOP_DATA_DIR.")
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None) -> None:
    """fabricshop: custom fabric orders with stock reservation"""
    overrides = {"data_dir": data_dir} if data_dir is not None else {}
    try:
        settings = Settings(**overrides)
    except SettingsError as exc:
        raise click.ClickException(f"Invalid configuration:\n{exc}")

    configure_logging(settings)
    ctx.obj = build_context(settings)


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def fabric() -> None:
    """Manage fabrics and stock."""


# Register subcommands
order.add_command(order_cancel)
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_payment)
order.add_command(order_show)
order.add_command(order_stats)
order.add_command(order_status)
fabric.add_command(fabric_add)
fabric.add_command(fabric_check)
fabric.add_command(fabric_list)
fabric.add_command(fabric_reconcile)
fabric.add_command(fabric_restock)
fabric.add_command(fabric_update)
