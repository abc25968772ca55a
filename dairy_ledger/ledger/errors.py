# dairy_ledger/ledger/errors.py
from __future__ import annotations


class LedgerValidationError(ValueError):
    """
    Raised when input handed to the ledger core has the wrong shape.

    `field` names the offending attribute so callers can point the user at it.
    """

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
