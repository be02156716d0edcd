"""Request boundary tests: schema validation, status codes and response bodies."""

from datetime import datetime, timezone
from http import HTTPStatus

import pytest

from invoicing.domain.exceptions import ConcurrencyConflictError
from invoicing.domain.model.party import Company, Customer
from invoicing.domain.model.product import Product
from invoicing.domain.model.value_objects import Money, TaxRate
from invoicing.infrastructure.api.invoicing_api import InvoicingApi
from tests.fakes import FakeUnitOfWork

NOW = datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def uow():
    return FakeUnitOfWork(
        products=[
            Product(id="P", sku="WID", name="Widget", price=Money.of("100.00"),
                    tax_rate=TaxRate.of("18"), stock=10),
        ],
        customers=[Customer(id="c-mh", name="Mumbai Stores", jurisdiction="Maharashtra")],
        company=Company(name="Acme Traders", jurisdiction="Delhi"),
    )


@pytest.fixture
def api(uow):
    return InvoicingApi(lambda: uow, clock=lambda: NOW)


def _payload(**overrides):
    payload = {
        "customerName": "Walk-in",
        "customerJurisdiction": "Delhi",
        "items": [{"productId": "P", "quantity": 3, "rate": "100.00"}],
    }
    payload.update(overrides)
    return payload


def _fields(response):
    return [d["field"] for d in response.body["details"]]


class TestCreateInvoice:

    def test_created_with_camel_case_body(self, api):
        response = api.create_invoice(_payload())

        assert response.status == HTTPStatus.CREATED
        assert response.body["number"] == "INV/24-25/000001"
        assert response.body["tax"]["firstSplit"] == "27.00"
        assert response.body["tax"]["secondSplit"] == "27.00"
        assert response.body["tax"]["intraJurisdiction"] is True
        assert response.body["total"] == "354.00"
        assert response.body["items"][0]["productName"] == "Widget"
        assert response.body["totalInWords"].startswith("Three Hundred Fifty Four")

    def test_registered_customer_in_other_jurisdiction(self, api):
        payload = _payload(customerId="c-mh")
        del payload["customerName"], payload["customerJurisdiction"]
        response = api.create_invoice(payload)
        assert response.body["tax"]["crossBorder"] == "54.00"
        assert response.body["tax"]["intraJurisdiction"] is False

    def test_snake_case_fields_accepted(self, api):
        response = api.create_invoice(
            {
                "customer_name": "Walk-in",
                "customer_jurisdiction": "Delhi",
                "items": [{"product_id": "P", "quantity": 1, "rate": "100"}],
            }
        )
        assert response.status == HTTPStatus.CREATED

    @pytest.mark.parametrize(
        "item, field",
        [
            ({"productId": "P", "quantity": "3", "rate": "100"}, "items[0].quantity"),
            ({"productId": "P", "quantity": 0, "rate": "100"}, "items[0].quantity"),
            ({"productId": "P", "quantity": 1, "rate": "0"}, "items[0].rate"),
            ({"productId": "P", "quantity": 1, "rate": "100", "discount": "-1"}, "items[0].discount"),
            ({"productId": "", "quantity": 1, "rate": "100"}, "items[0].productId"),
        ],
    )
    def test_schema_errors_name_the_field(self, api, uow, item, field):
        response = api.create_invoice(_payload(items=[item]))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body["error"] == "Validation failed"
        assert field in _fields(response)
        assert uow.commits == 0

    def test_empty_items_rejected(self, api):
        response = api.create_invoice(_payload(items=[]))
        assert response.status == HTTPStatus.BAD_REQUEST
        assert _fields(response) == ["items"]

    def test_unknown_field_rejected(self, api):
        response = api.create_invoice(_payload(paid=True))
        assert response.status == HTTPStatus.BAD_REQUEST
        assert _fields(response) == ["paid"]

    def test_both_customer_forms_rejected(self, api):
        response = api.create_invoice(_payload(customerId="c-mh"))
        assert response.status == HTTPStatus.BAD_REQUEST
        assert "customerId" in _fields(response)

    def test_discount_beyond_line_value(self, api):
        response = api.create_invoice(
            _payload(items=[{"productId": "P", "quantity": 1, "rate": "100", "discount": "150"}])
        )
        assert response.status == HTTPStatus.BAD_REQUEST
        assert _fields(response) == ["items[0].discount"]

    def test_unknown_product_is_not_found(self, api):
        response = api.create_invoice(
            _payload(items=[{"productId": "nope", "quantity": 1, "rate": "10"}])
        )
        assert response.status == HTTPStatus.NOT_FOUND

    def test_insufficient_stock_is_conflict(self, api, uow):
        response = api.create_invoice(
            _payload(items=[{"productId": "P", "quantity": 11, "rate": "100"}])
        )

        assert response.status == HTTPStatus.CONFLICT
        assert response.body["productId"] == "P"
        assert response.body["requested"] == 11
        assert response.body["available"] == 10
        assert uow.invoices.count() == 0

    def test_missing_company_is_conflict(self, uow):
        uow.company = FakeUnitOfWork().company
        response = InvoicingApi(lambda: uow).create_invoice(_payload())
        assert response.status == HTTPStatus.CONFLICT

    def test_unexpected_failure_is_opaque(self, api, uow, caplog):
        uow.invoices.fail_on_add = True
        response = api.create_invoice(_payload())

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.body == {"error": "Internal server error"}
        assert "request_failed" in caplog.text
        assert uow.products.get_by_id("P").stock == 10

    def test_conflict_is_retried(self, api, uow, monkeypatch):
        original = uow.company.get
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise ConcurrencyConflictError("busy")
            return original()

        monkeypatch.setattr(uow.company, "get", flaky)
        response = api.create_invoice(_payload())

        assert response.status == HTTPStatus.CREATED
        assert response.body["number"] == "INV/24-25/000001"
        assert len(calls) == 2


class TestInvoiceQueries:

    def test_get_and_list(self, api):
        api.create_invoice(_payload())
        api.create_invoice(_payload())

        assert api.get_invoice("INV/24-25/000001").status == HTTPStatus.OK
        listed = api.list_invoices()
        assert [i["number"] for i in listed.body] == ["INV/24-25/000002", "INV/24-25/000001"]

    def test_get_unknown(self, api):
        assert api.get_invoice("INV/24-25/999999").status == HTTPStatus.NOT_FOUND

    def test_cancel(self, api, uow):
        api.create_invoice(_payload())
        response = api.cancel_invoice("INV/24-25/000001", {"reason": "Wrong buyer"})

        assert response.status == HTTPStatus.OK
        assert response.body["status"] == "CANCELLED"
        assert response.body["cancellationReason"] == "Wrong buyer"
        assert uow.products.get_by_id("P").stock == 10


class TestStockMovements:

    def test_record_in(self, api):
        response = api.record_stock_movement(
            {"productId": "P", "type": "IN", "quantity": 5, "reference": "PO-1"}
        )
        assert response.status == HTTPStatus.CREATED
        assert response.body["resultingStock"] == 15
        assert response.body["type"] == "IN"

    def test_insufficient_stock_is_bad_request(self, api):
        response = api.record_stock_movement({"productId": "P", "type": "OUT", "quantity": 11})
        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body["requested"] == 11
        assert response.body["available"] == 10

    def test_unknown_type_rejected(self, api):
        response = api.record_stock_movement({"productId": "P", "type": "LOSS", "quantity": 1})
        assert response.status == HTTPStatus.BAD_REQUEST
        assert _fields(response) == ["type"]

    def test_list_newest_first(self, api):
        api.record_stock_movement({"productId": "P", "type": "IN", "quantity": 1, "reference": "A"})
        api.record_stock_movement({"productId": "P", "type": "IN", "quantity": 1, "reference": "B"})
        response = api.list_stock_movements(product_id="P")
        assert [m["reference"] for m in response.body] == ["B", "A"]
