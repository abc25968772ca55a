from __future__ import annotations


# Domain-level error the caller can surface directly (e.g., toast/snackbar)
class DomainError(Exception):
    pass
