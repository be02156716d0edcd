"""Integration tests for the IssueInvoice use case (the invoice assembler).

Uses the in-memory fake unit of work — no file I/O. Failure tests run
against both a transactional store (rollback) and a non-transactional
one (compensation).
"""

import logging
import threading
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from invoicing.application.dto import InvoiceLineSpec, IssueInvoiceCommand
from invoicing.application.issue_invoice import IssueInvoiceHandler
from invoicing.domain.exceptions import (
    CompanyNotConfiguredError,
    CustomerNotFoundError,
    InsufficientStockError,
    InvalidInvoiceInputError,
    ProductNotFoundError,
)
from invoicing.domain.model.party import Company, Customer
from invoicing.domain.model.product import Product
from invoicing.domain.model.value_objects import Money, TaxRate
from tests.fakes import FakeUnitOfWork, InjectedFailure

NOW = datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc)
FIRST_NUMBER = "INV/24-25/000001"


def _setup(
    transactional: bool = True,
    company: Company | None = Company(name="Acme Traders", jurisdiction="Delhi"),
    default_jurisdiction: str | None = None,
) -> tuple[IssueInvoiceHandler, FakeUnitOfWork]:
    uow = FakeUnitOfWork(
        products=[
            Product(id="P", sku="WID", name="Widget", price=Money.of("100.00"),
                    tax_rate=TaxRate.of("18"), stock=10),
            Product(id="Q", sku="GAD", name="Gadget", price=Money.of("50.00"),
                    tax_rate=TaxRate.of("12"), stock=2),
        ],
        customers=[
            Customer(id="c-del", name="Delhi Retail", jurisdiction="Delhi"),
            Customer(id="c-mh", name="Mumbai Stores", jurisdiction="Maharashtra"),
        ],
        company=company,
        transactional=transactional,
    )
    handler = IssueInvoiceHandler(uow, default_jurisdiction=default_jurisdiction, clock=lambda: NOW)
    return handler, uow


def _command(*lines: tuple[str, int, str], customer_id: str | None = "c-del", **kwargs):
    return IssueInvoiceCommand(
        lines=[InvoiceLineSpec(pid, qty, Decimal(rate)) for pid, qty, rate in lines],
        customer_id=customer_id,
        **kwargs,
    )


def _assert_untouched(uow: FakeUnitOfWork) -> None:
    assert uow.products.get_by_id("P").stock == 10
    assert uow.products.get_by_id("Q").stock == 2
    assert uow.invoices.count() == 0
    assert uow.movements.list_recent() == []
    assert uow.counters.current(2024, "INV") == 0


class TestIssueScenarios:

    def test_same_jurisdiction(self):
        handler, uow = _setup()
        dto = handler.handle(_command(("P", 3, "100.00")))

        assert dto.number == FIRST_NUMBER
        assert dto.status == "ISSUED"
        assert dto.subtotal == "300.00"
        assert dto.tax.first_split == "27.00"
        assert dto.tax.second_split == "27.00"
        assert dto.tax.cross_border == "0.00"
        assert dto.total == "354.00"
        assert dto.total_in_words == "Three Hundred Fifty Four Rupees Only"

        assert uow.products.get_by_id("P").stock == 7
        [movement] = uow.movements.list_by_reference(FIRST_NUMBER)
        assert movement.quantity == -3
        assert movement.kind.value == "OUT"

    def test_different_jurisdiction(self):
        handler, _ = _setup()
        dto = handler.handle(_command(("P", 3, "100.00"), customer_id="c-mh"))
        assert dto.tax.first_split == "0.00"
        assert dto.tax.second_split == "0.00"
        assert dto.tax.cross_border == "54.00"
        assert dto.total == "354.00"
        assert dto.customer_jurisdiction == "Maharashtra"
        assert dto.seller_jurisdiction == "Delhi"

    def test_persists_invoice_with_lines(self):
        handler, uow = _setup()
        handler.handle(_command(("P", 1, "100"), ("Q", 2, "50")))
        saved = uow.invoices.get_by_number(FIRST_NUMBER)
        assert saved is not None
        assert [line.product_id for line in saved.lines] == ["P", "Q"]
        assert saved.lines[1].tax_rate == Decimal("12")
        assert uow.commits == 1

    def test_numbers_increase(self):
        handler, _ = _setup()
        first = handler.handle(_command(("P", 1, "100")))
        second = handler.handle(_command(("P", 1, "100")))
        assert first.number == FIRST_NUMBER
        assert second.number == "INV/24-25/000002"

    def test_rate_may_differ_from_catalog_price(self):
        handler, _ = _setup()
        dto = handler.handle(_command(("P", 3, "90")))
        assert dto.items[0].amount == "270.00"
        assert dto.items[0].rate == "90"

    def test_invoice_discount_applied_after_tax(self):
        handler, _ = _setup()
        dto = handler.handle(_command(("P", 3, "100"), discount="50"))
        assert dto.subtotal == "300.00"
        assert dto.discount == "50.00"
        assert dto.taxable_value == "250.00"
        assert dto.tax.total == "54.00"
        assert dto.total == "304.00"

    def test_line_discount_reduces_line_tax(self):
        handler, _ = _setup()
        command = IssueInvoiceCommand(
            lines=[InvoiceLineSpec("P", 2, Decimal("100"), Decimal("20"))],
            customer_id="c-del",
        )
        dto = handler.handle(command)
        assert dto.items[0].amount == "180.00"
        assert dto.tax.total == "32.40"

    def test_product_name_snapshot(self):
        handler, uow = _setup()
        handler.handle(_command(("P", 1, "100")))
        product = uow.products.get_by_id("P")
        product.name = "Renamed"
        uow.products.save(product)
        assert uow.invoices.get_by_number(FIRST_NUMBER).lines[0].product_name == "Widget"

    def test_company_prefix_used(self):
        handler, _ = _setup(company=Company(name="Acme", jurisdiction="Delhi", invoice_prefix="ACME"))
        assert handler.handle(_command(("P", 1, "100"))).number == "ACME/24-25/000001"


class TestAdHocCustomers:

    def test_explicit_jurisdiction(self):
        handler, _ = _setup()
        dto = handler.handle(
            _command(("P", 1, "100"), customer_id=None, customer_name="Walk-in",
                     customer_jurisdiction="Karnataka")
        )
        assert dto.customer_id is None
        assert dto.customer_name == "Walk-in"
        assert dto.tax.cross_border == "18.00"

    def test_configured_default_jurisdiction(self):
        handler, _ = _setup(default_jurisdiction="Goa")
        dto = handler.handle(_command(("P", 1, "100"), customer_id=None, customer_name="Walk-in"))
        assert dto.customer_jurisdiction == "Goa"
        assert dto.tax.cross_border == "18.00"

    def test_falls_back_to_seller_with_warning(self, caplog):
        caplog.set_level(logging.WARNING, logger="invoicing")
        handler, _ = _setup()
        dto = handler.handle(_command(("P", 1, "100"), customer_id=None, customer_name="Walk-in"))
        assert dto.customer_jurisdiction == "Delhi"
        assert dto.tax.first_split == "9.00"
        assert "adhoc_customer_jurisdiction_assumed" in caplog.messages


class TestValidation:

    def test_no_items_rejected_without_side_effects(self):
        handler, uow = _setup()
        with pytest.raises(InvalidInvoiceInputError) as excinfo:
            handler.handle(IssueInvoiceCommand(lines=[], customer_id="c-del"))
        assert [v.field for v in excinfo.value.violations] == ["items"]
        _assert_untouched(uow)
        assert uow.commits == 0

    def test_needs_exactly_one_customer_reference(self):
        handler, _ = _setup()
        with pytest.raises(InvalidInvoiceInputError) as excinfo:
            handler.handle(_command(("P", 1, "100"), customer_name="Also named"))
        assert excinfo.value.violations[0].field == "customer_id"
        with pytest.raises(InvalidInvoiceInputError):
            handler.handle(_command(("P", 1, "100"), customer_id=None))

    def test_blank_customer_id_means_adhoc(self):
        handler, uow = _setup()
        dto = handler.handle(
            _command(("P", 1, "100"), customer_id="   ", customer_name="Walk-in")
        )
        assert dto.customer_id is None
        assert dto.customer_name == "Walk-in"
        assert uow.invoices.count() == 1

    def test_customer_id_is_trimmed(self):
        handler, _ = _setup()
        dto = handler.handle(_command(("P", 1, "100"), customer_id=" c-mh "))
        assert dto.customer_id == "c-mh"
        assert dto.tax.cross_border == "18.00"

    def test_jurisdiction_only_for_adhoc(self):
        handler, _ = _setup()
        with pytest.raises(InvalidInvoiceInputError) as excinfo:
            handler.handle(_command(("P", 1, "100"), customer_jurisdiction="Goa"))
        assert excinfo.value.violations[0].field == "customer_jurisdiction"

    def test_field_level_violations(self):
        handler, uow = _setup()
        command = IssueInvoiceCommand(
            lines=[
                InvoiceLineSpec("P", 0, Decimal("100")),
                InvoiceLineSpec("Q", 1, Decimal("-5")),
                InvoiceLineSpec("P", 1, Decimal("10"), Decimal("11")),
            ],
            customer_id="c-del",
            discount=Decimal("-1"),
        )
        with pytest.raises(InvalidInvoiceInputError) as excinfo:
            handler.handle(command)
        fields = [v.field for v in excinfo.value.violations]
        assert fields == ["items[0].quantity", "items[1].rate", "items[2].discount", "discount"]
        _assert_untouched(uow)

    def test_discount_above_subtotal_rejected(self):
        handler, uow = _setup()
        with pytest.raises(InvalidInvoiceInputError):
            handler.handle(_command(("P", 1, "100"), discount="100.01"))
        _assert_untouched(uow)

    def test_unknown_customer(self):
        handler, uow = _setup()
        with pytest.raises(CustomerNotFoundError):
            handler.handle(_command(("P", 1, "100"), customer_id="ghost"))
        _assert_untouched(uow)

    def test_unknown_product(self):
        handler, uow = _setup()
        with pytest.raises(ProductNotFoundError):
            handler.handle(_command(("P", 1, "100"), ("nope", 1, "10")))
        _assert_untouched(uow)

    def test_company_must_be_configured(self):
        handler, _ = _setup(company=None)
        with pytest.raises(CompanyNotConfiguredError):
            handler.handle(_command(("P", 1, "100")))


@pytest.mark.parametrize("transactional", [True, False], ids=["rollback", "compensation"])
class TestAtomicity:

    def test_insufficient_stock_leaves_no_trace(self, transactional):
        handler, uow = _setup(transactional=transactional)
        with pytest.raises(InsufficientStockError) as excinfo:
            handler.handle(_command(("Q", 5, "50")))
        assert excinfo.value.product_id == "Q"
        _assert_untouched(uow)

    def test_failure_on_line_k_undoes_earlier_lines(self, transactional):
        handler, uow = _setup(transactional=transactional)
        with pytest.raises(InsufficientStockError):
            handler.handle(_command(("P", 4, "100"), ("Q", 5, "50"), ("P", 1, "100")))
        _assert_untouched(uow)

    def test_storage_failure_mid_ledger(self, transactional):
        handler, uow = _setup(transactional=transactional)
        uow.movements.fail_on_add = 2
        with pytest.raises(InjectedFailure):
            handler.handle(_command(("P", 4, "100"), ("Q", 1, "50")))
        _assert_untouched(uow)

    def test_storage_failure_on_invoice_write(self, transactional):
        handler, uow = _setup(transactional=transactional)
        uow.invoices.fail_on_add = True
        with pytest.raises(InjectedFailure):
            handler.handle(_command(("P", 1, "100")))
        uow.invoices.fail_on_add = False
        _assert_untouched(uow)

    def test_number_not_consumed_by_failed_issue(self, transactional):
        handler, _ = _setup(transactional=transactional)
        with pytest.raises(InsufficientStockError):
            handler.handle(_command(("Q", 5, "50")))
        assert handler.handle(_command(("P", 1, "100"))).number == FIRST_NUMBER


class TestConcurrentIssuance:

    def test_threads_get_distinct_increasing_numbers(self):
        handler, uow = _setup()
        results: list[str] = []
        errors: list[Exception] = []

        def issue() -> None:
            try:
                results.append(handler.handle(_command(("P", 1, "100"))).number)
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=issue) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert sorted(results) == [f"INV/24-25/{n:06d}" for n in range(1, 9)]
        assert uow.products.get_by_id("P").stock == 2

    def test_oversold_product_rejects_extra_issuances(self):
        handler, uow = _setup()
        outcomes: list[str] = []

        def issue() -> None:
            try:
                handler.handle(_command(("Q", 1, "50")))
                outcomes.append("ok")
            except InsufficientStockError:
                outcomes.append("rejected")

        threads = [threading.Thread(target=issue) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count("ok") == 2
        assert outcomes.count("rejected") == 3
        assert uow.products.get_by_id("Q").stock == 0
