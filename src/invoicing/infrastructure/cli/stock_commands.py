"""CLI commands for the stock ledger."""

from __future__ import annotations

import click

from invoicing.application.list_products import FindProductBySkuHandler
from invoicing.application.record_stock_movement import RecordStockMovementHandler
from invoicing.application.retry import run_with_retry
from invoicing.application.show_inventory import (
    RECENT_MOVEMENTS_LIMIT,
    ListStockMovementsHandler,
    ShowInventoryHandler,
)
from invoicing.domain.exceptions import DomainException
from invoicing.infrastructure.bootstrap import unit_of_work
from invoicing.infrastructure.config import Settings


@click.command("move")
@click.option("--sku", required=True, help="Product SKU.")
@click.option(
    "--type",
    "kind",
    required=True,
    type=click.Choice(["IN", "OUT", "ADJUSTMENT"], case_sensitive=False),
    help="IN adds, OUT removes, ADJUSTMENT applies the signed quantity.",
)
@click.option("--quantity", required=True, type=int)
@click.option("--reference", default=None, help="e.g. a purchase order number.")
@click.option("--note", default=None)
@click.pass_obj
def stock_move(
    settings: Settings,
    sku: str,
    kind: str,
    quantity: int,
    reference: str | None,
    note: str | None,
) -> None:
    """Record a stock movement."""
    try:
        product = FindProductBySkuHandler(unit_of_work(settings)).handle(sku)
        handler = RecordStockMovementHandler(unit_of_work(settings))
        movement = run_with_retry(
            lambda: handler.handle(product.id, kind, quantity, reference=reference, note=note)
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"{movement.type} {movement.quantity:+d} for {sku}; stock is now {movement.resulting_stock}"
    )


@click.command("show")
@click.option("--category", default=None, help="Only this category.")
@click.pass_obj
def stock_show(settings: Settings, category: str | None) -> None:
    """Show current stock levels."""
    summary = ShowInventoryHandler(unit_of_work(settings)).handle(category)

    if not summary.lines:
        click.echo("No products found.")
        return

    click.echo(f"{'SKU':<12} {'Name':<24} {'Stock':>7} {'Min':>5} {'Value':>12}  Status")
    click.echo("-" * 72)
    for line in summary.lines:
        status = "OUT" if line.out_of_stock else ("LOW" if line.low_stock else "")
        click.echo(
            f"{line.sku:<12} {line.name:<24} {line.stock:>7} {line.min_stock:>5} "
            f"{line.stock_value:>12}  {status}"
        )
    click.echo("-" * 72)
    click.echo(
        f"Total value {summary.total_value}; "
        f"{summary.low_stock_count} low, {summary.out_of_stock_count} out of stock"
    )


@click.command("history")
@click.option("--sku", default=None, help="Only this product.")
@click.option("--limit", default=RECENT_MOVEMENTS_LIMIT, show_default=True, type=int)
@click.pass_obj
def stock_history(settings: Settings, sku: str | None, limit: int) -> None:
    """Show recent stock movements, newest first."""
    try:
        product_id = (
            FindProductBySkuHandler(unit_of_work(settings)).handle(sku).id if sku else None
        )
        movements = ListStockMovementsHandler(unit_of_work(settings)).handle(product_id, limit)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not movements:
        click.echo("No stock movements found.")
        return

    for m in movements:
        click.echo(
            f"{m.created_at}  {m.type:<10} {m.quantity:>+6d}  "
            f"{m.reference or '-':<22} {m.note or ''}"
        )
