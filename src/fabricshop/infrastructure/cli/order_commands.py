"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from fabricshop.application.cancel_order import CancelOrderHandler
from fabricshop.application.create_order import CreateOrderHandler
from fabricshop.application.dto import OrderItemSpec
from fabricshop.application.order_stats import OrderStatsHandler
from fabricshop.application.show_order import ListOrdersHandler, ShowOrderHandler
from fabricshop.application.update_payment_status import UpdatePaymentStatusHandler
from fabricshop.application.update_status import UpdateOrderStatusHandler
from fabricshop.domain.exceptions import DomainException
from fabricshop.infrastructure.bootstrap import AppContext
from fabricshop.infrastructure.cli.output import display_order, failure


def _parse_item(raw: str) -> OrderItemSpec:
    """Parse 'KIND:PRODUCT:QTY[@PRICE][;key=value...]'.

    e.g. 'fabric:cotton:60' or 'clothing:polo:10@19.99;size=L;logo_id=abc'
    """
    head, *attrs = [part.strip() for part in raw.split(";")]
    parts = head.split(":")
    if len(parts) != 3:
        raise click.BadParameter(
            f"Invalid item '{raw}'. Expected 'KIND:PRODUCT:QTY[@PRICE]'."
        )
    kind, product_id, qty_str = parts
    price = None
    if "@" in qty_str:
        qty_str, price = qty_str.split("@", 1)
    try:
        qty = int(qty_str)
    except ValueError:
        raise click.BadParameter(f"Invalid quantity '{qty_str}' for '{product_id}'.")

    customizations: dict[str, str] = {}
    for attr in attrs:
        if "=" not in attr:
            raise click.BadParameter(f"Invalid customization '{attr}'. Expected key=value.")
        key, value = attr.split("=", 1)
        customizations[key.strip()] = value.strip()

    return OrderItemSpec(
        kind=kind,
        product_id=product_id,
        quantity=qty,
        unit_price=price,
        customizations=customizations,
    )


@click.command("create")
@click.option("--user", "user_id", required=True, help="Authenticated user ID.")
@click.option("--item", "items", required=True, multiple=True,
              help="Line item as 'KIND:PRODUCT:QTY[@PRICE][;key=value]'. Repeatable.")
@click.option("--name", required=True, help="Ship-to name.")
@click.option("--company", required=True, help="Ship-to company.")
@click.option("--address", required=True, help="Street address.")
@click.option("--city", required=True)
@click.option("--state", required=True)
@click.option("--zip", "zip_code", required=True)
@click.option("--country", required=True)
@click.option("--phone", required=True)
@click.option("--payment-method", default=None, help="Payment method label.")
@click.option("--transaction-id", default=None, help="Processor transaction ID.")
@click.option("--notes", default=None)
@click.pass_obj
def order_create(
    app: AppContext,
    user_id: str,
    items: tuple[str, ...],
    name: str,
    company: str,
    address: str,
    city: str,
    state: str,
    zip_code: str,
    country: str,
    phone: str,
    payment_method: str | None,
    transaction_id: str | None,
    notes: str | None,
) -> None:
    """Create an order, reserving fabric stock."""
    specs = [_parse_item(raw) for raw in items]
    shipping_address = {
        "name": name,
        "company_name": company,
        "address": address,
        "city": city,
        "state": state,
        "zip_code": zip_code,
        "country": country,
        "phone_number": phone,
    }
    payment = None
    if payment_method or transaction_id:
        payment = {"method": payment_method, "transaction_id": transaction_id}

    handler = CreateOrderHandler(
        fabric_repo=app.fabric_repo,
        coordinator=app.coordinator,
        pricing=app.settings.order_pricing(),
    )

    try:
        dto = handler.handle(
            user_id=user_id,
            item_specs=specs,
            shipping_address=shipping_address,
            payment_details=payment,
            notes=notes,
        )
    except DomainException as exc:
        raise failure(exc)

    click.echo(f"Order #{dto.id} created.")
    display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.option("--user", "user_id", required=True, help="Authenticated user ID.")
@click.pass_obj
def order_show(app: AppContext, order_id: int, user_id: str) -> None:
    """Show one of the user's orders."""
    try:
        dto = ShowOrderHandler(app.order_repo).handle(order_id, user_id)
    except DomainException as exc:
        raise failure(exc)

    display_order(dto)


@click.command("list")
@click.option("--user", "user_id", required=True, help="Authenticated user ID.")
@click.pass_obj
def order_list(app: AppContext, user_id: str) -> None:
    """List the user's orders, newest first."""
    orders = ListOrdersHandler(app.order_repo).handle(user_id)
    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':>5} {'Created':<20} {'Status':<11} {'Payment':<9} {'Total':>12}")
    click.echo("-" * 61)
    for dto in orders:
        click.echo(
            f"{dto.id:>5} {dto.created_at:<20} {dto.status:<11} "
            f"{dto.payment_status:<9} {dto.total:>12}"
        )


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option("--user", "user_id", required=True, help="Authenticated user ID.")
@click.pass_obj
def order_cancel(app: AppContext, order_id: int, user_id: str) -> None:
    """Cancel an order (releases its fabric reservations)."""
    handler = CancelOrderHandler(order_repo=app.order_repo, coordinator=app.coordinator)

    try:
        handler.handle(order_id, user_id)
    except DomainException as exc:
        raise failure(exc)

    click.echo(f"Order #{order_id} cancelled.")


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.argument("status")
@click.pass_obj
def order_status(app: AppContext, order_id: int, status: str) -> None:
    """Move an order to STATUS (processing, shipped, delivered, cancelled)."""
    handler = UpdateOrderStatusHandler(order_repo=app.order_repo, coordinator=app.coordinator)

    try:
        dto = handler.handle(order_id, status)
    except DomainException as exc:
        raise failure(exc)

    click.echo(f"Order #{order_id} is now {dto.status}.")


@click.command("payment")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.argument("payment_status")
@click.pass_obj
def order_payment(app: AppContext, order_id: int, payment_status: str) -> None:
    """Record a payment status (pending, paid, failed, refunded)."""
    handler = UpdatePaymentStatusHandler(order_repo=app.order_repo, coordinator=app.coordinator)

    try:
        dto = handler.handle(order_id, payment_status)
    except DomainException as exc:
        raise failure(exc)

    click.echo(f"Order #{order_id} payment is now {dto.payment_status}.")


@click.command("stats")
@click.option("--user", "user_id", required=True, help="Authenticated user ID.")
@click.pass_obj
def order_stats(app: AppContext, user_id: str) -> None:
    """Show order statistics for a user."""
    stats = OrderStatsHandler(app.order_repo).handle(user_id)

    click.echo(f"Orders:        {stats.total_orders}")
    click.echo(f"Total spent:   {stats.total_spent}")
    click.echo(f"Average order: {stats.average_order_value}")
    for status, count in sorted(stats.status_counts.items()):
        click.echo(f"  {status:<12} {count:>4}")
