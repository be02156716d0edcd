import click

from invoicing.infrastructure.cli.company_commands import company_set, company_show
from invoicing.infrastructure.cli.customer_commands import (
    customer_add,
    customer_delete,
    customer_list,
    customer_show,
)
from invoicing.infrastructure.cli.invoice_commands import (
    invoice_cancel,
    invoice_issue,
    invoice_list,
    invoice_show,
)
from invoicing.infrastructure.cli.product_commands import (
    product_add,
    product_delete,
    product_list,
    product_update,
)
from invoicing.infrastructure.cli.stock_commands import (
    stock_history,
    stock_move,
    stock_show,
)
from invoicing.infrastructure.config import Settings
from invoicing.infrastructure.logging_config import configure_logging


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Invoicing — tax invoices with stock tracking"""
    try:
        settings = Settings.from_env()
    except ValueError as exc:
        raise click.ClickException(str(exc))
    configure_logging(level=settings.log_level)
    ctx.obj = settings


@cli.group()
def company() -> None:
    """Manage the seller's company profile."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def customer() -> None:
    """Manage customers."""


@cli.group()
def stock() -> None:
    """Manage stock levels and the stock ledger."""


@cli.group()
def invoice() -> None:
    """Issue and manage invoices."""


# Register subcommands
company.add_command(company_set)
company.add_command(company_show)
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_update)
product.add_command(product_delete)
customer.add_command(customer_add)
customer.add_command(customer_list)
customer.add_command(customer_show)
customer.add_command(customer_delete)
stock.add_command(stock_move)
stock.add_command(stock_show)
stock.add_command(stock_history)
invoice.add_command(invoice_issue)
invoice.add_command(invoice_show)
invoice.add_command(invoice_list)
invoice.add_command(invoice_cancel)
