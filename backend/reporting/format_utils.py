"""Consistent pt-BR formatting for report numbers and dates. Never render raw floats."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any

_PT_BR_SEPARATORS = str.maketrans({",": ".", ".": ","})


def format_number(value: float, precision: int = 0) -> str:
    """Group thousands with '.' and use ',' for decimals: 1234.5 -> '1.234,50' (precision=2)."""
    return f"{value:,.{max(0, precision)}f}".translate(_PT_BR_SEPARATORS)


def format_currency(value: float, precision: int = 2) -> str:
    return f"R$ {format_number(value, precision)}"


def format_km(value: int) -> str:
    return f"{format_number(value)} km"


def format_date(d: Any) -> str:
    if d is None:
        return "—"
    if isinstance(d, (date, datetime)):
        return d.strftime("%d/%m/%Y")
    text = str(d).strip()
    if not text:
        return "—"
    for fmt in ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%d.%m.%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(text[:10], fmt).date().strftime("%d/%m/%Y")
        except ValueError:
            continue
    return text


def format_file_date(d: date) -> str:
    return d.strftime("%d-%m-%Y")
