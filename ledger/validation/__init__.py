"""Validation package."""

from ledger.validation.validator import LedgerValidator

__all__ = ["LedgerValidator"]
