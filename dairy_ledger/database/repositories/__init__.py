# database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from dairy_ledger.database.repositories import (
        ContactsRepo, MilkRecordsRepo, PaymentsRepo, FarmRecordsRepo, DomainError,
    )
"""

from .errors import DomainError

# ---------------- Contacts -----------------
from .contacts_repo import ContactsRepo

# ---------------- Milk records -------------
from .milk_records_repo import MilkRecordsRepo

# ---------------- Payments -----------------
from .payments_repo import PaymentsRepo

# ---------------- Farm ---------------------
from .farm_records_repo import FarmRecordsRepo

__all__ = [
    "DomainError",
    "ContactsRepo",
    "MilkRecordsRepo",
    "PaymentsRepo",
    "FarmRecordsRepo",
]
