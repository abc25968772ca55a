# dairy_ledger/ledger/validation.py
"""
Strict input checks for the ledger core.

Unlike utils.validators (which answers yes/no for the entry layer), these
raise LedgerValidationError naming the field. Strings are never parsed into
numbers here: deciding how to read user input belongs to the caller.
"""
from __future__ import annotations

import math
from numbers import Real

from ..utils.validators import is_date_bound, is_iso_date, is_month_prefix, non_empty
from .errors import LedgerValidationError


def require_number(
    value,
    field: str,
    *,
    allow_negative: bool = False,
    strictly_positive: bool = False,
    integral: bool = False,
):
    """
    Validate a numeric field. With integral=True the value must be a whole
    amount (100 or 100.0) and is returned as int.
    """
    if value is None:
        raise LedgerValidationError(field, "is required.")
    if isinstance(value, bool) or not isinstance(value, Real):
        raise LedgerValidationError(field, f"must be a number, got {value!r}.")
    if not math.isfinite(value):
        raise LedgerValidationError(field, f"must be a finite number, got {value!r}.")
    if strictly_positive and value <= 0:
        raise LedgerValidationError(field, "must be greater than zero.")
    if not allow_negative and value < 0:
        raise LedgerValidationError(field, "must not be negative.")
    if integral:
        if value != int(value):
            raise LedgerValidationError(field, f"must be a whole amount, got {value!r}.")
        return int(value)
    return value


def require_iso_date(value, field: str = "date") -> str:
    if not is_iso_date(value):
        raise LedgerValidationError(field, f"expected YYYY-MM-DD, got {value!r}.")
    return value


def require_date_bound(value, field: str = "as_of") -> str:
    """A 'YYYY-MM-DD' bound for comparisons; month ends like '2024-02-31' are allowed."""
    if not is_date_bound(value):
        raise LedgerValidationError(field, f"expected YYYY-MM-DD, got {value!r}.")
    return value


def require_month_prefix(value, field: str = "month") -> str:
    if not is_month_prefix(value):
        raise LedgerValidationError(field, f"expected YYYY-MM, got {value!r}.")
    return value


def require_text(value, field: str) -> str:
    if not non_empty(value):
        raise LedgerValidationError(field, "cannot be empty.")
    return str(value).strip()
