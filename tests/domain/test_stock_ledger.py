"""Unit tests for the Stock Ledger."""

from datetime import datetime, timezone

import pytest

from invoicing.domain.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    ValidationError,
)
from invoicing.domain.model.product import Product
from invoicing.domain.model.stock_movement import MovementKind
from invoicing.domain.model.value_objects import Money, TaxRate
from invoicing.domain.service.stock_ledger import StockLedger
from tests.fakes import FakeProductRepository, FakeStockMovementRepository

NOW = datetime(2024, 6, 1, 10, 0, tzinfo=timezone.utc)


def _setup(stock: int = 10):
    products = FakeProductRepository([
        Product(
            id="p1",
            sku="WID-1",
            name="Widget",
            price=Money.of("100.00"),
            tax_rate=TaxRate.of("18"),
            stock=stock,
        ),
    ])
    movements = FakeStockMovementRepository()
    ledger = StockLedger(products, movements, clock=lambda: NOW)
    return ledger, products, movements


class TestApplyMovement:

    def test_in_adds_stock(self):
        ledger, products, movements = _setup(stock=10)
        result = ledger.apply_movement("p1", MovementKind.IN, 5, reference="PO-1")
        assert result.new_stock == 15
        assert products.get_by_id("p1").stock == 15
        assert result.movement.quantity == 5
        assert result.movement.reference == "PO-1"
        assert result.movement.created_at == NOW
        assert result.movement.id is not None

    def test_out_accepts_either_sign(self):
        ledger, products, _ = _setup(stock=10)
        ledger.apply_movement("p1", MovementKind.OUT, 3)
        result = ledger.apply_movement("p1", MovementKind.OUT, -2)
        assert result.new_stock == 5
        assert result.movement.quantity == -2

    def test_in_with_negative_quantity_still_adds(self):
        ledger, _, _ = _setup(stock=0)
        assert ledger.apply_movement("p1", "IN", -4).new_stock == 4

    def test_adjustment_applies_signed_quantity(self):
        ledger, _, _ = _setup(stock=10)
        assert ledger.apply_movement("p1", "ADJUSTMENT", -10).new_stock == 0
        assert ledger.apply_movement("p1", "adjustment", 7).new_stock == 7

    def test_movement_quantity_is_effective_delta(self):
        ledger, _, movements = _setup(stock=10)
        ledger.apply_movement("p1", MovementKind.OUT, 4)
        [movement] = movements.list_recent("p1")
        assert movement.kind is MovementKind.OUT
        assert movement.quantity == -4

    def test_stock_equals_sum_of_movements(self):
        ledger, products, movements = _setup(stock=0)
        for kind, qty in [("IN", 10), ("OUT", 3), ("ADJUSTMENT", -2), ("IN", 1)]:
            ledger.apply_movement("p1", kind, qty)
        assert products.get_by_id("p1").stock == sum(m.quantity for m in movements.list_recent())


class TestRejections:

    def test_insufficient_stock_changes_nothing(self):
        ledger, products, movements = _setup(stock=2)
        with pytest.raises(InsufficientStockError) as excinfo:
            ledger.apply_movement("p1", MovementKind.OUT, 5)
        assert excinfo.value.available == 2
        assert excinfo.value.requested == 5
        assert products.get_by_id("p1").stock == 2
        assert movements.list_recent() == []

    def test_adjustment_below_zero_rejected(self):
        ledger, _, _ = _setup(stock=1)
        with pytest.raises(InsufficientStockError):
            ledger.apply_movement("p1", MovementKind.ADJUSTMENT, -2)

    def test_unknown_product(self):
        ledger, _, movements = _setup()
        with pytest.raises(ProductNotFoundError):
            ledger.apply_movement("nope", MovementKind.IN, 1)
        assert movements.list_recent() == []

    def test_unknown_type(self):
        ledger, _, _ = _setup()
        with pytest.raises(ValidationError) as excinfo:
            ledger.apply_movement("p1", "TRANSFER", 1)
        assert excinfo.value.violations[0].field == "type"

    def test_non_integer_quantity(self):
        ledger, _, _ = _setup()
        with pytest.raises(ValidationError):
            ledger.apply_movement("p1", MovementKind.IN, 1.5)  # type: ignore[arg-type]


class TestRetract:

    def test_retract_restores_stock_and_removes_entry(self):
        ledger, products, movements = _setup(stock=10)
        result = ledger.apply_movement("p1", MovementKind.OUT, 4)
        ledger.retract(result)
        assert products.get_by_id("p1").stock == 10
        assert movements.list_recent() == []
