"""Integration tests for products, customers and the company profile."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from invoicing.application.add_product import OPENING_STOCK_REFERENCE, AddProductHandler
from invoicing.application.configure_company import ConfigureCompanyHandler, ShowCompanyHandler
from invoicing.application.delete_product import DeleteProductHandler
from invoicing.application.dto import InvoiceLineSpec, IssueInvoiceCommand
from invoicing.application.issue_invoice import IssueInvoiceHandler
from invoicing.application.list_products import FindProductBySkuHandler, ListProductsHandler
from invoicing.application.manage_customers import (
    AddCustomerHandler,
    DeleteCustomerHandler,
    ListCustomersHandler,
    ShowCustomerHandler,
    UpdateCustomerHandler,
)
from invoicing.application.update_product import UpdateProductHandler
from invoicing.domain.exceptions import (
    CompanyNotConfiguredError,
    CustomerNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from invoicing.domain.model.invoice import Invoice, InvoiceLine
from invoicing.domain.model.party import Company
from invoicing.domain.model.product import Product
from invoicing.domain.model.value_objects import Money, TaxRate
from tests.fakes import FakeUnitOfWork


def _issue(uow: FakeUnitOfWork, customer_id: str, product_id: str) -> str:
    command = IssueInvoiceCommand(
        lines=[InvoiceLineSpec(product_id, 1, Decimal("100"))], customer_id=customer_id
    )
    return IssueInvoiceHandler(uow).handle(command).number


class TestAddProduct:

    def test_opening_stock_goes_through_the_ledger(self):
        uow = FakeUnitOfWork()
        dto = AddProductHandler(uow).handle(sku="WID", name="Widget", price="100", opening_stock=12)
        assert dto.stock == 12
        assert dto.tax_rate == "18"
        assert dto.unit == "PCS"
        assert dto.category == "General"
        [movement] = uow.movements.list_by_reference(OPENING_STOCK_REFERENCE)
        assert movement.product_id == dto.id
        assert movement.quantity == 12
        assert uow.products.get_by_id(dto.id).stock == 12

    def test_no_movement_without_opening_stock(self):
        uow = FakeUnitOfWork()
        AddProductHandler(uow).handle(sku="WID", name="Widget", price="100")
        assert uow.movements.list_recent() == []

    def test_duplicate_sku_rejected(self):
        uow = FakeUnitOfWork()
        AddProductHandler(uow).handle(sku="WID", name="Widget", price="100")
        with pytest.raises(ValidationError, match="already exists"):
            AddProductHandler(uow).handle(sku="WID", name="Other", price="5")

    @pytest.mark.parametrize("price", ["0", "-1"])
    def test_price_must_be_positive(self, price):
        with pytest.raises(ValidationError):
            AddProductHandler(FakeUnitOfWork()).handle(sku="X", name="X", price=price)

    def test_list_and_find(self):
        uow = FakeUnitOfWork()
        AddProductHandler(uow).handle(sku="A", name="Alpha", price="1", category="Tools")
        AddProductHandler(uow).handle(sku="B", name="Beta", price="2")
        assert [p.sku for p in ListProductsHandler(uow).handle("Tools")] == ["A"]
        assert FindProductBySkuHandler(uow).handle("B").name == "Beta"
        with pytest.raises(ProductNotFoundError):
            FindProductBySkuHandler(uow).handle("C")


class TestUpdateProduct:

    def test_updates_catalog_fields_but_not_stock(self):
        uow = FakeUnitOfWork()
        added = AddProductHandler(uow).handle(sku="WID", name="Widget", price="100", opening_stock=5)
        dto = UpdateProductHandler(uow).handle(
            added.id, name="Widget XL", price="120.50", tax_rate="12", min_stock=3
        )
        assert dto.name == "Widget XL"
        assert dto.price == "120.50"
        assert dto.tax_rate == "12"
        assert dto.min_stock == 3
        assert dto.stock == 5
        assert uow.products.get_by_id(added.id).price.amount == Decimal("120.50")

    def test_unknown_product(self):
        with pytest.raises(ProductNotFoundError):
            UpdateProductHandler(FakeUnitOfWork()).handle("ghost", price="1")

    def test_zero_price_rejected(self):
        uow = FakeUnitOfWork()
        added = AddProductHandler(uow).handle(sku="WID", name="Widget", price="100")
        with pytest.raises(ValidationError):
            UpdateProductHandler(uow).handle(added.id, price="0")


class TestDeleteProduct:

    def test_unreferenced_product_deleted(self):
        uow = FakeUnitOfWork()
        added = AddProductHandler(uow).handle(sku="WID", name="Widget", price="100")
        DeleteProductHandler(uow).handle(added.id)
        assert uow.products.get_by_id(added.id) is None
        assert uow.commits == 2

    def test_product_with_stock_history_kept(self):
        uow = FakeUnitOfWork()
        added = AddProductHandler(uow).handle(
            sku="WID", name="Widget", price="100", opening_stock=3
        )
        with pytest.raises(ValidationError, match="stock movements") as excinfo:
            DeleteProductHandler(uow).handle(added.id)
        assert excinfo.value.violations[0].field == "product_id"
        assert uow.products.get_by_id(added.id) is not None

    def test_product_on_an_invoice_kept(self):
        uow = FakeUnitOfWork(
            products=[Product(id="P", sku="WID", name="Widget", price=Money.of("100"),
                              tax_rate=TaxRate.of("18"))],
        )
        line = InvoiceLine.price(
            product_id="P",
            product_name="Widget",
            quantity=1,
            rate=Decimal("100"),
            discount=Decimal("0"),
            tax_rate=Decimal("18"),
            seller_jurisdiction="Delhi",
            buyer_jurisdiction="Delhi",
        )
        invoice = Invoice.draft(
            customer_id=None,
            customer_name="Walk-in",
            customer_jurisdiction="Delhi",
            seller_jurisdiction="Delhi",
            lines=[line],
            discount=Decimal("0"),
            invoice_date=datetime(2024, 6, 1, tzinfo=timezone.utc),
        )
        invoice.issue("INV/24-25/000001")
        uow.invoices.add(invoice)

        with pytest.raises(ValidationError, match="appears on invoices"):
            DeleteProductHandler(uow).handle("P")
        assert uow.products.get_by_id("P") is not None

    def test_unknown_product(self):
        with pytest.raises(ProductNotFoundError):
            DeleteProductHandler(FakeUnitOfWork()).handle("ghost")


class TestCustomers:

    def test_jurisdiction_derived_from_tax_id(self):
        dto = AddCustomerHandler(FakeUnitOfWork()).handle(name="Mumbai Stores", tax_id="27AAPFU0939F1ZV")
        assert dto.jurisdiction == "Maharashtra"

    def test_explicit_jurisdiction_wins(self):
        dto = AddCustomerHandler(FakeUnitOfWork()).handle(
            name="Branch", jurisdiction="Goa", tax_id="27AAPFU0939F1ZV"
        )
        assert dto.jurisdiction == "Goa"

    def test_jurisdiction_required_without_tax_id(self):
        with pytest.raises(ValidationError) as excinfo:
            AddCustomerHandler(FakeUnitOfWork()).handle(name="Nowhere")
        assert excinfo.value.violations[0].field == "jurisdiction"

    def test_update_and_list(self):
        uow = FakeUnitOfWork()
        added = AddCustomerHandler(uow).handle(name="Shop", jurisdiction="Delhi")
        updated = UpdateCustomerHandler(uow).handle(added.id, tax_id="29ABCDE1234F1Z5", phone="123")
        assert updated.jurisdiction == "Karnataka"
        assert updated.phone == "123"
        assert [c.name for c in ListCustomersHandler(uow).handle()] == ["Shop"]

    def test_update_unknown(self):
        with pytest.raises(CustomerNotFoundError):
            UpdateCustomerHandler(FakeUnitOfWork()).handle("ghost", name="X")

    def test_show_includes_recent_invoices(self):
        uow = FakeUnitOfWork(
            products=[Product(id="P", sku="WID", name="Widget", price=Money.of("100"),
                              tax_rate=TaxRate.of("18"), stock=20)],
            company=Company(name="Acme", jurisdiction="Delhi"),
        )
        shop = AddCustomerHandler(uow).handle(name="Shop", jurisdiction="Delhi")
        other = AddCustomerHandler(uow).handle(name="Other", jurisdiction="Goa")
        numbers = [_issue(uow, shop.id, "P") for _ in range(12)]
        _issue(uow, other.id, "P")

        detail = ShowCustomerHandler(uow).handle(shop.id)
        assert detail.customer.name == "Shop"
        assert [i.number for i in detail.recent_invoices] == numbers[::-1][:10]

    def test_show_without_invoices(self):
        uow = FakeUnitOfWork()
        added = AddCustomerHandler(uow).handle(name="Shop", jurisdiction="Delhi")
        assert ShowCustomerHandler(uow).handle(added.id).recent_invoices == []

    def test_show_unknown(self):
        with pytest.raises(CustomerNotFoundError):
            ShowCustomerHandler(FakeUnitOfWork()).handle("ghost")

    def test_delete_customer_without_invoices(self):
        uow = FakeUnitOfWork()
        added = AddCustomerHandler(uow).handle(name="Shop", jurisdiction="Delhi")
        DeleteCustomerHandler(uow).handle(added.id)
        assert ListCustomersHandler(uow).handle() == []

    def test_billed_customer_kept(self):
        uow = FakeUnitOfWork(
            products=[Product(id="P", sku="WID", name="Widget", price=Money.of("100"),
                              tax_rate=TaxRate.of("18"), stock=5)],
            company=Company(name="Acme", jurisdiction="Delhi"),
        )
        added = AddCustomerHandler(uow).handle(name="Shop", jurisdiction="Delhi")
        number = _issue(uow, added.id, "P")

        with pytest.raises(ValidationError, match="has invoices") as excinfo:
            DeleteCustomerHandler(uow).handle(added.id)
        assert excinfo.value.violations[0].field == "customer_id"
        assert uow.customers.get_by_id(added.id) is not None
        assert uow.invoices.get_by_number(number).customer_id == added.id

    def test_delete_unknown(self):
        with pytest.raises(CustomerNotFoundError):
            DeleteCustomerHandler(FakeUnitOfWork()).handle("ghost")


class TestCompany:

    def test_configure_and_show(self):
        uow = FakeUnitOfWork()
        ConfigureCompanyHandler(uow).handle(name="Acme", jurisdiction="Delhi", invoice_prefix="ACME")
        dto = ShowCompanyHandler(uow).handle()
        assert dto.jurisdiction == "Delhi"
        assert dto.invoice_prefix == "ACME"

    def test_prefix_with_slash_rejected(self):
        with pytest.raises(ValidationError):
            ConfigureCompanyHandler(FakeUnitOfWork()).handle(
                name="Acme", jurisdiction="Delhi", invoice_prefix="A/B"
            )

    def test_show_unconfigured(self):
        with pytest.raises(CompanyNotConfiguredError):
            ShowCompanyHandler(FakeUnitOfWork()).handle()
