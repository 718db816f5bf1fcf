"""Summary queries package."""

from ledger.queries.summary import LedgerQueries, format_amount, same_period

__all__ = ["LedgerQueries", "format_amount", "same_period"]
