"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from invoicing.application.add_product import AddProductHandler
from invoicing.application.delete_product import DeleteProductHandler
from invoicing.application.list_products import FindProductBySkuHandler, ListProductsHandler
from invoicing.application.update_product import UpdateProductHandler
from invoicing.domain.exceptions import DomainException
from invoicing.infrastructure.bootstrap import unit_of_work
from invoicing.infrastructure.config import Settings


@click.command("add")
@click.option("--sku", required=True, help="Unique stock keeping unit.")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 100.00).")
@click.option("--tax-rate", default="18", show_default=True, help="Tax rate in percent.")
@click.option("--stock", "opening_stock", default=0, type=int, help="Opening stock.")
@click.option("--min-stock", default=0, type=int, help="Low-stock threshold.")
@click.option("--hsn", default=None, help="HSN code.")
@click.option("--unit", default="PCS", show_default=True)
@click.option("--category", default="General", show_default=True)
@click.pass_obj
def product_add(
    settings: Settings,
    sku: str,
    name: str,
    price: str,
    tax_rate: str,
    opening_stock: int,
    min_stock: int,
    hsn: str | None,
    unit: str,
    category: str,
) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(unit_of_work(settings))

    try:
        product = handler.handle(
            sku=sku,
            name=name,
            price=price,
            tax_rate=tax_rate,
            opening_stock=opening_stock,
            min_stock=min_stock,
            hsn=hsn,
            unit=unit,
            category=category,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product {product.sku} '{product.name}' added at {product.price} "
        f"({product.tax_rate}% tax), stock {product.stock}"
    )


@click.command("list")
@click.option("--category", default=None, help="Only this category.")
@click.pass_obj
def product_list(settings: Settings, category: str | None) -> None:
    """List all products in the catalog."""
    products = ListProductsHandler(unit_of_work(settings)).handle(category)

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'SKU':<12} {'Name':<24} {'Price':>10} {'Tax %':>6} {'Stock':>7}")
    click.echo("-" * 63)
    for p in products:
        click.echo(f"{p.sku:<12} {p.name:<24} {p.price:>10} {p.tax_rate:>6} {p.stock:>7}")


@click.command("update")
@click.option("--sku", required=True, help="SKU of the product to update.")
@click.option("--name", default=None)
@click.option("--price", default=None, help="New price (e.g. 29.99).")
@click.option("--tax-rate", default=None, help="New tax rate in percent.")
@click.option("--min-stock", default=None, type=int)
@click.option("--category", default=None)
@click.pass_obj
def product_update(
    settings: Settings,
    sku: str,
    name: str | None,
    price: str | None,
    tax_rate: str | None,
    min_stock: int | None,
    category: str | None,
) -> None:
    """Update a product's catalog data (never its stock)."""
    try:
        product = FindProductBySkuHandler(unit_of_work(settings)).handle(sku)
        updated = UpdateProductHandler(unit_of_work(settings)).handle(
            product.id,
            name=name,
            price=price,
            tax_rate=tax_rate,
            min_stock=min_stock,
            category=category,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {updated.sku} updated: price {updated.price}, tax {updated.tax_rate}%")


@click.command("delete")
@click.option("--sku", required=True, help="SKU of the product to delete.")
@click.pass_obj
def product_delete(settings: Settings, sku: str) -> None:
    """Delete a product that has no stock history and no invoice lines."""
    try:
        product = FindProductBySkuHandler(unit_of_work(settings)).handle(sku)
        DeleteProductHandler(unit_of_work(settings)).handle(product.id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {sku} deleted")
