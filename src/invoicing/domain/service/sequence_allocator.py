"""Domain service: Sequence Allocator.

Issues invoice numbers that are unique and strictly increasing per
(year, prefix). The counter lives in a dedicated row that the store locks
for the rest of the unit of work, so the increment commits or rolls back
together with the invoice that uses it. MAX(number)+1 is never used.

Invoice numbers are printed on invoices and filed with tax returns; the
textual format ``PREFIX/YY-YY+1/NNNNNN`` must not change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from invoicing.domain.exceptions import ValidationError
from invoicing.domain.repository.sequence_counter_repository import (
    SequenceCounterRepository,
)

logger = logging.getLogger(__name__)

COUNTER_WIDTH = 6


@dataclass(frozen=True)
class InvoiceNumber:
    prefix: str
    year: int
    counter: int

    def __str__(self) -> str:
        return format_invoice_number(self.prefix, self.year, self.counter)


def format_invoice_number(prefix: str, year: int, counter: int) -> str:
    """Render ``PREFIX/YY-YY+1/NNNNNN`` (fiscal-year display convention)."""
    yy = year % 100
    next_yy = (year + 1) % 100
    return f"{prefix}/{yy:02d}-{next_yy:02d}/{counter:0{COUNTER_WIDTH}d}"


class SequenceAllocator:

    def __init__(self, counters: SequenceCounterRepository) -> None:
        self._counters = counters

    def allocate(self, year: int, prefix: str) -> InvoiceNumber:
        """Reserve the next number for (year, prefix) in the current unit of work."""
        if not prefix or "/" in prefix:
            raise ValidationError.for_field(
                "prefix", "Invoice prefix must be non-empty and must not contain '/'"
            )
        if not 1 <= year <= 9999:
            raise ValidationError.for_field("year", f"Invalid year {year}")

        counter = self._counters.increment(year, prefix)
        number = InvoiceNumber(prefix=prefix, year=year, counter=counter)
        logger.debug(
            "invoice_number_allocated",
            extra={"year": year, "prefix": prefix, "counter": counter},
        )
        return number

    def next_invoice_number(self, year: int, prefix: str) -> str:
        return str(self.allocate(year, prefix))

    def release(self, number: InvoiceNumber) -> None:
        """Hand back a number whose unit of work could not be rolled back."""
        if not self._counters.release(number.year, number.prefix, number.counter):
            logger.warning(
                "invoice_number_release_skipped",
                extra={"invoice_number": str(number)},
            )
