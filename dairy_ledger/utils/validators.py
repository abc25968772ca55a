# utils/validators.py
from __future__ import annotations

import math
import re
from datetime import datetime

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_PREFIX_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
# Comparison bound: any day 01..31 is allowed so '2024-02-31' works as a month end.
_DATE_BOUND_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$")


def non_empty(text: str) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


# ---- Numeric parsing & validators ----

def try_parse_float(x):
    """
    Best-effort parse to a finite float.

    Returns:
        (ok: bool, value: float|None)

    ok == False means parsing failed (or gave inf/NaN) and value is None.
    """
    try:
        val = float(x)
    except (TypeError, ValueError):
        return False, None
    if not math.isfinite(val):
        return False, None
    return True, val


def parse_quantity(x) -> float:
    """
    Lenient parse for user-typed liters: blank, unparsable or non-finite
    input counts as 0. Only meant for the entry boundary; the ledger core
    never coerces.
    """
    ok, val = try_parse_float(x)
    if not ok or val is None:
        return 0.0
    return val


def is_non_negative_number(x) -> bool:
    """
    True iff x parses to a finite float and value >= 0.
    """
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and val >= 0)


def is_strictly_positive_number(x) -> bool:
    """
    True iff x parses to a finite float and value > 0.
    """
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and val > 0)


def is_whole_number(x) -> bool:
    """True iff x parses to a finite float with no fractional part (money amounts)."""
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and val.is_integer())


# ---- Dates ----

def is_iso_date(text) -> bool:
    """True for a real calendar day written as zero-padded 'YYYY-MM-DD'."""
    if not isinstance(text, str) or not _ISO_DATE_RE.match(text):
        return False
    try:
        datetime.strptime(text, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def is_date_bound(text) -> bool:
    """
    True for a 'YYYY-MM-DD' comparison bound. Days up to 31 are accepted in
    every month, so a month-end bound like '2024-02-31' passes.
    """
    return isinstance(text, str) and bool(_DATE_BOUND_RE.match(text))


def is_month_prefix(text) -> bool:
    """True for a zero-padded 'YYYY-MM' key."""
    return isinstance(text, str) and bool(_MONTH_PREFIX_RE.match(text))
