"""CLI commands for the fabric catalog and its stock."""

from __future__ import annotations

import click

from fabricshop.application.manage_fabric import (
    AddFabricHandler,
    RestockFabricHandler,
    UpdateFabricHandler,
)
from fabricshop.application.reconcile_stock import ReconcileStockHandler
from fabricshop.application.show_fabrics import CheckAvailabilityHandler, ListFabricsHandler
from fabricshop.domain.exceptions import DomainException
from fabricshop.infrastructure.bootstrap import AppContext
from fabricshop.infrastructure.cli.output import display_fabrics, failure


@click.command("add")
@click.option("--id", "fabric_id", required=True, help="Fabric ID, e.g. 'cotton'.")
@click.option("--name", required=True)
@click.option("--type", "fabric_type", required=True,
              help="cotton, polyester, silk, linen, blend or wool.")
@click.option("--price", required=True, help="Price per unit.")
@click.option("--available", required=True, type=int, help="Units on hand.")
@click.option("--reorder-point", default=0, type=int, show_default=True)
@click.option("--min-order", "min_order_quantity", default=50, type=int, show_default=True)
@click.option("--description", default="")
@click.pass_obj
def fabric_add(
    app: AppContext,
    fabric_id: str,
    name: str,
    fabric_type: str,
    price: str,
    available: int,
    reorder_point: int,
    min_order_quantity: int,
    description: str,
) -> None:
    """Add a fabric to the catalog."""
    try:
        dto = AddFabricHandler(app.fabric_repo).handle(
            fabric_id=fabric_id,
            name=name,
            fabric_type=fabric_type,
            price=price,
            available=available,
            reorder_point=reorder_point,
            min_order_quantity=min_order_quantity,
            description=description,
        )
    except DomainException as exc:
        raise failure(exc)

    click.echo(f"Fabric '{dto.id}' added ({dto.name}, {dto.price}, {dto.available} on hand)")


@click.command("update")
@click.option("--id", "fabric_id", required=True)
@click.option("--price", default=None, help="New price per unit.")
@click.option("--status", default=None, help="active, inactive or discontinued.")
@click.pass_obj
def fabric_update(app: AppContext, fabric_id: str, price: str | None, status: str | None) -> None:
    """Change a fabric's price or status."""
    if price is None and status is None:
        raise click.ClickException("Nothing to update: pass --price and/or --status")

    try:
        dto = UpdateFabricHandler(app.fabric_repo).handle(fabric_id, price=price, status=status)
    except DomainException as exc:
        raise failure(exc)

    click.echo(f"Fabric '{dto.id}' updated (price={dto.price}, status={dto.status})")


@click.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive fabrics.")
@click.pass_obj
def fabric_list(app: AppContext, include_inactive: bool) -> None:
    """Show fabrics and their stock levels."""
    fabrics = ListFabricsHandler(app.fabric_repo).handle(include_inactive=include_inactive)
    if not fabrics:
        click.echo("No fabrics found.")
        return
    display_fabrics(fabrics)


@click.command("check")
@click.option("--id", "fabric_id", required=True)
@click.option("--quantity", required=True, type=int)
@click.pass_obj
def fabric_check(app: AppContext, fabric_id: str, quantity: int) -> None:
    """Check whether QUANTITY units could be reserved now."""
    try:
        result = CheckAvailabilityHandler(app.fabric_repo).handle(fabric_id, quantity)
    except DomainException as exc:
        raise failure(exc)

    verdict = "available" if result.is_available else "NOT available"
    click.echo(
        f"{result.requested_quantity} x '{result.fabric_id}': {verdict} "
        f"({result.available_quantity} unreserved)"
    )


@click.command("restock")
@click.option("--id", "fabric_id", required=True)
@click.option("--available", required=True, type=int, help="New on-hand quantity.")
@click.pass_obj
def fabric_restock(app: AppContext, fabric_id: str, available: int) -> None:
    """Set a fabric's on-hand quantity."""
    try:
        dto = RestockFabricHandler(app.fabric_repo).handle(fabric_id, available)
    except DomainException as exc:
        raise failure(exc)

    click.echo(f"Fabric '{dto.id}' now has {dto.available} on hand ({dto.reserved} reserved)")


@click.command("reconcile")
@click.option("--repair", is_flag=True, help="Reset drifting ledgers to match orders.")
@click.pass_obj
def fabric_reconcile(app: AppContext, repair: bool) -> None:
    """Compare each fabric's reserved stock with its open orders."""
    drift = ReconcileStockHandler(app.fabric_repo, app.order_repo).handle(repair=repair)
    if not drift:
        click.echo("All fabric ledgers match their orders.")
        return

    click.echo(f"{'Fabric':<16} {'Ledger':>8} {'Orders':>8} {'Delta':>7}")
    click.echo("-" * 42)
    for entry in drift:
        click.echo(
            f"{entry.fabric_id:<16} {entry.ledger_reserved:>8} "
            f"{entry.expected_reserved:>8} {entry.delta:>+7}"
        )
    if repair:
        click.echo(f"Repaired {len(drift)} ledger(s).")
