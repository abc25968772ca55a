# utils/helpers.py
from datetime import date
import logging
import time
import uuid
from typing import Union, Optional

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)

_MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def today_str() -> str:
    """Return today's date as ISO string (YYYY-MM-DD)."""
    return date.today().isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


def now_ms() -> int:
    """Epoch milliseconds, used as the insertion timestamp of new rows."""
    return int(time.time() * 1000)


def month_label(prefix: str) -> str:
    """'2024-03' -> 'March 2024'."""
    year, month = prefix.split("-")
    return f"{_MONTH_NAMES[int(month) - 1]} {year}"


def fmt_money(
    v: NumberLike,
    places: int = 0,
    *,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators and a fixed number of decimals.

    Behavior on parse failure:
      - By default (strict=False, sentinel=None), returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError on parse failures.

    Amounts in this ledger are whole currency units, hence places=0 by default.
    """
    try:
        x = float(v)
    except (TypeError, ValueError) as e:
        _log.debug("fmt_money: failed to parse %r as float: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    return f"{x:,.{places}f}"
