from decimal import Decimal

import pytest

from invoicing.domain.service.amount_in_words import amount_in_words


@pytest.mark.parametrize(
    "amount, words",
    [
        ("0", "Zero Rupees Only"),
        ("0.50", "Zero Rupees and Fifty Paise Only"),
        ("354.00", "Three Hundred Fifty Four Rupees Only"),
        ("1234.50", "One Thousand Two Hundred Thirty Four Rupees and Fifty Paise Only"),
        ("15", "Fifteen Rupees Only"),
        ("100000", "One Lakh Rupees Only"),
        (
            "12345678.90",
            "One Crore Twenty Three Lakh Forty Five Thousand Six Hundred Seventy Eight "
            "Rupees and Ninety Paise Only",
        ),
        ("10000000000", "One Thousand Crore Rupees Only"),
        ("0.005", "Zero Rupees and One Paise Only"),
    ],
)
def test_amount_in_words(amount, words):
    assert amount_in_words(Decimal(amount)) == words
