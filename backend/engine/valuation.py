"""
Express offer price derived from the FIPE reference price.

Rule: offer = round_100(reference * 0.78 - 1000), then bumped by R$ 100 steps
until the first five digits of the integer value sum to 8.
"""
from __future__ import annotations

import math
import re
from typing import Optional

from reporting.format_utils import format_currency, format_km

DEALER_FACTOR = 0.78
QUICK_SALE_DISCOUNT = 1000.0
ROUNDING_STEP = 100
TARGET_DIGIT_SUM = 8
DIGIT_SUM_WIDTH = 5
DEFAULT_ODOMETER_KM = 80000
EXPRESS_TEXT_ODOMETER_KM = 85000

ZERO_PRICE = format_currency(0)

_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def parse_price(text: str) -> Optional[float]:
    """
    Parse a pt-BR currency string ("R$ 80.000,00") into a float.

    Everything except digits and commas is dropped, so '.' thousands
    separators disappear and the first ',' becomes the decimal point.
    Returns None when no number remains.
    """
    cleaned = re.sub(r"[^\d,]", "", str(text or "")).replace(",", ".", 1)
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return None
    return float(match.group(0))


def digit_sum(value: float) -> int:
    """Sum of the first five digits of the integer part (sign and other characters ignored)."""
    digits = re.sub(r"\D", "", str(int(value)))[:DIGIT_SUM_WIDTH]
    return sum(int(d) for d in digits)


def round_to_hundred(value: float) -> int:
    # Halves round up (toward +inf), including for negative values
    return int(math.floor(value / ROUNDING_STEP + 0.5)) * ROUNDING_STEP


def adjust_to_digit_sum(value: float, target: int = TARGET_DIGIT_SUM) -> int:
    """
    Round to the nearest hundred, then add 100 until digit_sum == target.

    Always terminates: each power-of-ten rollover yields a leading '1000…'
    prefix from which the target is reachable. Below R$ 800.000 the walk is
    at most 1000 steps.
    """
    adjusted = round_to_hundred(value)
    while digit_sum(adjusted) != target:
        adjusted += ROUNDING_STEP
    return adjusted


def compute_offer_value(reference_price: str) -> Optional[int]:
    reference = parse_price(reference_price)
    if reference is None:
        return None
    dealer_value = reference * DEALER_FACTOR
    quick_sale_value = dealer_value - QUICK_SALE_DISCOUNT
    return adjust_to_digit_sum(quick_sale_value)


def compute_offer_price(reference_price: str, odometer: int = DEFAULT_ODOMETER_KM) -> str:
    """
    Offer price string for a reference price, e.g. 'R$ 80.000,00' -> 'R$ 62.000,00'.

    Unparseable input yields 'R$ 0,00'. The odometer does not change the
    price under the current rule.
    """
    value = compute_offer_value(reference_price)
    if value is None:
        return ZERO_PRICE
    return format_currency(value)


def express_evaluation(
    model: str,
    year: Optional[int],
    reference_price: str,
    odometer: Optional[int] = None,
) -> str:
    """Plain-text express evaluation block shown next to the inspection report."""
    km = odometer if odometer is not None else EXPRESS_TEXT_ODOMETER_KM
    offer = compute_offer_price(reference_price, km)
    lines = [
        "EXPRESS EVALUATION",
        "",
        f"Vehicle: {model}",
        f"Year: {year if year is not None else '—'}",
        f"Mileage: {format_km(km)}",
        f"FIPE table: {reference_price}",
        f"Offer: {offer}",
    ]
    return "\n".join(lines)
