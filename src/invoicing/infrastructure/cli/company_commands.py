"""CLI commands for the company profile."""

from __future__ import annotations

import click

from invoicing.application.configure_company import (
    ConfigureCompanyHandler,
    ShowCompanyHandler,
)
from invoicing.domain.exceptions import DomainException
from invoicing.infrastructure.bootstrap import unit_of_work
from invoicing.infrastructure.config import Settings


@click.command("set")
@click.option("--name", required=True, help="Legal name of the seller.")
@click.option("--jurisdiction", required=True, help="Seller's state, e.g. Delhi.")
@click.option("--prefix", default="INV", show_default=True, help="Invoice number prefix.")
@click.option("--gstin", "tax_id", default=None, help="Tax registration number.")
@click.option("--address", default=None, help="Postal address.")
@click.pass_obj
def company_set(
    settings: Settings,
    name: str,
    jurisdiction: str,
    prefix: str,
    tax_id: str | None,
    address: str | None,
) -> None:
    """Create or replace the company profile."""
    handler = ConfigureCompanyHandler(unit_of_work(settings))

    try:
        dto = handler.handle(
            name=name,
            jurisdiction=jurisdiction,
            invoice_prefix=prefix,
            tax_id=tax_id,
            address=address,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Company '{dto.name}' ({dto.jurisdiction}) saved, "
        f"invoice prefix {dto.invoice_prefix}"
    )


@click.command("show")
@click.pass_obj
def company_show(settings: Settings) -> None:
    """Show the company profile."""
    handler = ShowCompanyHandler(unit_of_work(settings))

    try:
        dto = handler.handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Name:           {dto.name}")
    click.echo(f"Jurisdiction:   {dto.jurisdiction}")
    click.echo(f"Invoice prefix: {dto.invoice_prefix}")
    if dto.tax_id:
        click.echo(f"GSTIN:          {dto.tax_id}")
    if dto.address:
        click.echo(f"Address:        {dto.address}")
