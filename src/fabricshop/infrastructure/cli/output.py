"""Shared formatting and error reporting for CLI commands."""

from __future__ import annotations

import click

from fabricshop.application.dto import FabricDTO, FailureDTO, OrderDTO
from fabricshop.domain.exceptions import DomainException


def failure(exc: DomainException) -> click.ClickException:
    """Turn a domain error into the structured ``[kind] message`` failure."""
    return click.ClickException(str(FailureDTO.from_exception(exc)))


def display_order(dto: OrderDTO) -> None:
    click.echo(f"Order #{dto.id}  (status={dto.status}, payment={dto.payment_status})")
    click.echo(f"User:     {dto.user_id}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.estimated_delivery:
        click.echo(f"Delivery: {dto.estimated_delivery} (estimated)")
    click.echo()
    click.echo(
        f"  {'Kind':<9} {'Product':<16} {'Qty':>5} {'Price':>10} {'Total':>11} {'Stock':>10}"
    )
    click.echo(f"  {'-'*66}")
    for item in dto.items:
        click.echo(
            f"  {item.kind:<9} {item.product_id:<16} {item.quantity:>5} "
            f"{item.unit_price:>10} {item.line_total:>11} {item.reservation:>10}"
        )
    click.echo(f"  {'-'*66}")
    click.echo(f"  {'Subtotal':<30} {dto.subtotal:>24}")
    click.echo(f"  {'Tax':<30} {dto.tax:>24}")
    click.echo(f"  {'Shipping':<30} {dto.shipping:>24}")
    click.echo(f"  {'Order Total':<30} {dto.total:>24}")


def display_fabrics(fabrics: list[FabricDTO]) -> None:
    click.echo(
        f"{'ID':<12} {'Name':<16} {'Price':>8} {'Avail':>7} {'Reserved':>9} {'Free':>7}"
    )
    click.echo("-" * 62)
    for f in fabrics:
        flag = "  reorder" if f.needs_reorder else ""
        click.echo(
            f"{f.id:<12} {f.name:<16} {f.price:>8} {f.available:>7} "
            f"{f.reserved:>9} {f.available_quantity:>7}{flag}"
        )
