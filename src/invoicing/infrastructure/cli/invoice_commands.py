"""CLI commands for invoices."""

from __future__ import annotations

from decimal import Decimal

import click

from invoicing.application.cancel_invoice import CancelInvoiceHandler
from invoicing.application.dto import InvoiceDTO, InvoiceLineSpec, IssueInvoiceCommand
from invoicing.application.issue_invoice import IssueInvoiceHandler
from invoicing.application.list_products import FindProductBySkuHandler
from invoicing.application.retry import run_with_retry
from invoicing.application.show_invoice import ListInvoicesHandler, ShowInvoiceHandler
from invoicing.domain.exceptions import DomainException
from invoicing.infrastructure.bootstrap import unit_of_work
from invoicing.infrastructure.config import Settings


def _parse_items(raw: str) -> list[tuple[str, int, str | None, str]]:
    """Parse 'SKU1:3,SKU2:1:95.50:10' into (sku, qty, rate, discount) tuples."""
    parsed: list[tuple[str, int, str | None, str]] = []
    for entry in raw.split(","):
        parts = [p.strip() for p in entry.strip().split(":")]
        if len(parts) < 2 or len(parts) > 4 or not parts[0]:
            raise click.BadParameter(
                f"Invalid item format '{entry.strip()}'. Expected 'SKU:QTY[:RATE[:DISCOUNT]]'."
            )
        try:
            qty = int(parts[1])
        except ValueError:
            raise click.BadParameter(f"Invalid quantity '{parts[1]}' for product '{parts[0]}'.")
        rate = parts[2] if len(parts) > 2 and parts[2] else None
        discount = parts[3] if len(parts) > 3 and parts[3] else "0"
        parsed.append((parts[0], qty, rate, discount))
    return parsed


def _display_invoice(dto: InvoiceDTO) -> None:
    """Shared formatting for displaying an invoice."""
    click.echo(f"Invoice {dto.number}  (status={dto.status})")
    click.echo(f"Date:     {dto.invoice_date}")
    click.echo(f"Customer: {dto.customer_name} ({dto.customer_jurisdiction})")
    if dto.due_date:
        click.echo(f"Due:      {dto.due_date}")
    click.echo()
    click.echo(f"  {'Product':<22} {'Qty':>5} {'Rate':>10} {'Disc':>8} {'Tax %':>6} {'Amount':>12}")
    click.echo(f"  {'-'*68}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<22} {item.quantity:>5} {item.rate:>10} "
            f"{item.discount:>8} {item.tax_rate:>6} {item.amount:>12}"
        )
    click.echo(f"  {'-'*68}")
    click.echo(f"  {'Subtotal':<55} {dto.subtotal:>12}")
    if Decimal(dto.discount):
        click.echo(f"  {'Discount':<55} {'-' + dto.discount:>12}")
    if dto.tax.intra_jurisdiction:
        click.echo(f"  {'CGST':<55} {dto.tax.first_split:>12}")
        click.echo(f"  {'SGST':<55} {dto.tax.second_split:>12}")
    else:
        click.echo(f"  {'IGST':<55} {dto.tax.cross_border:>12}")
    click.echo(f"  {'Invoice Total':<55} {dto.total:>12}")
    click.echo(f"  {dto.total_in_words}")
    if dto.status == "CANCELLED":
        click.echo(f"Cancelled {dto.cancelled_at}: {dto.cancellation_reason or 'no reason given'}")


@click.command("issue")
@click.option("--customer-id", default=None, help="ID of a saved customer.")
@click.option("--customer", "customer_name", default=None, help="Name of an ad-hoc customer.")
@click.option("--jurisdiction", default=None, help="Ad-hoc customer's state.")
@click.option("--items", required=True, help="Items as 'SKU:QTY[:RATE[:DISCOUNT]],...'.")
@click.option("--discount", default="0", help="Invoice-level discount.")
@click.option("--notes", default=None)
@click.option("--due", "due_date", default=None, type=click.DateTime(), help="Due date.")
@click.pass_obj
def invoice_issue(
    settings: Settings,
    customer_id: str | None,
    customer_name: str | None,
    jurisdiction: str | None,
    items: str,
    discount: str,
    notes: str | None,
    due_date,
) -> None:
    """Issue a new invoice and deduct the sold stock."""
    parsed = _parse_items(items)

    def issue() -> InvoiceDTO:
        # Rates default to the catalog price read at the start of each attempt.
        lines = []
        for sku, qty, rate, line_discount in parsed:
            product = FindProductBySkuHandler(unit_of_work(settings)).handle(sku)
            lines.append(
                InvoiceLineSpec(
                    product_id=product.id,
                    quantity=qty,
                    rate=rate if rate is not None else product.price,
                    discount=line_discount,
                )
            )
        command = IssueInvoiceCommand(
            lines=lines,
            customer_id=customer_id,
            customer_name=customer_name,
            customer_jurisdiction=jurisdiction,
            discount=discount,
            notes=notes,
            due_date=due_date,
        )
        handler = IssueInvoiceHandler(unit_of_work(settings), settings.default_jurisdiction)
        return handler.handle(command)

    try:
        dto = run_with_retry(issue)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_invoice(dto)


@click.command("show")
@click.option("--number", required=True, help="Invoice number, e.g. INV/26-27/000001.")
@click.pass_obj
def invoice_show(settings: Settings, number: str) -> None:
    """Show details of an existing invoice."""
    try:
        dto = ShowInvoiceHandler(unit_of_work(settings)).handle(number)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_invoice(dto)


@click.command("list")
@click.pass_obj
def invoice_list(settings: Settings) -> None:
    """List invoices, newest first."""
    invoices = ListInvoicesHandler(unit_of_work(settings)).handle()

    if not invoices:
        click.echo("No invoices found.")
        return

    click.echo(f"{'Number':<22} {'Date':<12} {'Customer':<24} {'Total':>12}  Status")
    click.echo("-" * 82)
    for inv in invoices:
        click.echo(
            f"{inv.number:<22} {inv.invoice_date[:10]:<12} {inv.customer_name:<24} "
            f"{inv.total:>12}  {inv.status}"
        )


@click.command("cancel")
@click.option("--number", required=True, help="Invoice number to cancel.")
@click.option("--reason", default=None)
@click.pass_obj
def invoice_cancel(settings: Settings, number: str, reason: str | None) -> None:
    """Cancel an issued invoice and return its stock."""
    handler = CancelInvoiceHandler(unit_of_work(settings))

    try:
        run_with_retry(lambda: handler.handle(number, reason))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Invoice {number} cancelled; stock returned.")
