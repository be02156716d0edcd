"""CLI commands for customers."""

from __future__ import annotations

import click

from invoicing.application.manage_customers import (
    AddCustomerHandler,
    DeleteCustomerHandler,
    ListCustomersHandler,
    ShowCustomerHandler,
)
from invoicing.domain.exceptions import DomainException
from invoicing.infrastructure.bootstrap import unit_of_work
from invoicing.infrastructure.config import Settings


@click.command("add")
@click.option("--name", required=True, help="Customer name.")
@click.option(
    "--jurisdiction", default=None, help="Customer's state (derived from GSTIN if omitted)."
)
@click.option("--gstin", "tax_id", default=None, help="Tax registration number.")
@click.option("--address", default=None)
@click.option("--phone", default=None)
@click.option("--email", default=None)
@click.pass_obj
def customer_add(
    settings: Settings,
    name: str,
    jurisdiction: str | None,
    tax_id: str | None,
    address: str | None,
    phone: str | None,
    email: str | None,
) -> None:
    """Add a customer."""
    handler = AddCustomerHandler(unit_of_work(settings))

    try:
        dto = handler.handle(
            name=name,
            jurisdiction=jurisdiction,
            tax_id=tax_id,
            address=address,
            phone=phone,
            email=email,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Customer {dto.id} '{dto.name}' added ({dto.jurisdiction})")


@click.command("list")
@click.pass_obj
def customer_list(settings: Settings) -> None:
    """List all customers."""
    customers = ListCustomersHandler(unit_of_work(settings)).handle()

    if not customers:
        click.echo("No customers found.")
        return

    click.echo(f"{'ID':<34} {'Name':<24} {'Jurisdiction':<18} {'GSTIN':<15}")
    click.echo("-" * 94)
    for c in customers:
        click.echo(f"{c.id:<34} {c.name:<24} {c.jurisdiction:<18} {c.tax_id or '':<15}")


@click.command("show")
@click.option("--id", "customer_id", required=True, help="Customer ID.")
@click.pass_obj
def customer_show(settings: Settings, customer_id: str) -> None:
    """Show a customer and its recent invoices."""
    try:
        detail = ShowCustomerHandler(unit_of_work(settings)).handle(customer_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    c = detail.customer
    click.echo(f"{c.name} ({c.id})")
    click.echo(f"  Jurisdiction: {c.jurisdiction}")
    if c.tax_id:
        click.echo(f"  GSTIN:        {c.tax_id}")
    for label, value in (("Address", c.address), ("Phone", c.phone), ("Email", c.email)):
        if value:
            click.echo(f"  {label + ':':<13} {value}")

    if not detail.recent_invoices:
        click.echo("No invoices.")
        return
    click.echo("Recent invoices:")
    for inv in detail.recent_invoices:
        click.echo(
            f"  {inv.number:<22} {inv.invoice_date[:10]:<12} {inv.total:>12}  {inv.status}"
        )


@click.command("delete")
@click.option("--id", "customer_id", required=True, help="Customer ID.")
@click.pass_obj
def customer_delete(settings: Settings, customer_id: str) -> None:
    """Delete a customer that has no invoices."""
    try:
        DeleteCustomerHandler(unit_of_work(settings)).handle(customer_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Customer {customer_id} deleted")
