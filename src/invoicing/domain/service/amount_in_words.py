"""Spell out invoice totals in words using Indian numbering (lakh, crore)."""

from __future__ import annotations

from decimal import Decimal

from invoicing.domain.model.value_objects import round_half_up

_ONES = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine"]
_TEENS = [
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen",
    "Fifteen", "Sixteen", "Seventeen", "Eighteen", "Nineteen",
]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

_SCALES = [(10_000_000, "Crore"), (100_000, "Lakh"), (1_000, "Thousand")]


def _below_thousand(num: int) -> list[str]:
    words: list[str] = []
    if num >= 100:
        words += [_ONES[num // 100], "Hundred"]
        num %= 100
    if num >= 20:
        words.append(_TENS[num // 10])
        num %= 10
    elif num >= 10:
        words.append(_TEENS[num - 10])
        return words
    if num > 0:
        words.append(_ONES[num])
    return words


def _integer_words(num: int) -> list[str]:
    words: list[str] = []
    for size, name in _SCALES:
        if num >= size:
            count = num // size
            # Crores above 999 recurse so very large totals still read correctly.
            if count >= 1000:
                words += _integer_words(count)
            else:
                words += _below_thousand(count)
            words.append(name)
            num %= size
    words += _below_thousand(num)
    return words


def amount_in_words(amount: Decimal) -> str:
    """Spell out a rupee amount in Indian numbering.

    ``Decimal("1234.50")`` ->
    ``"One Thousand Two Hundred Thirty Four Rupees and Fifty Paise Only"``
    """
    amount = round_half_up(amount)
    if amount == 0:
        return "Zero Rupees Only"
    rupees = int(amount)
    paise = int((amount - rupees) * 100)

    words = _integer_words(rupees) or ["Zero"]
    words.append("Rupees")
    if paise > 0:
        words += ["and", *_below_thousand(paise), "Paise"]
    words.append("Only")
    return " ".join(words)
