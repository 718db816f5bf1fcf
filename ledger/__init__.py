"""
Pocket Ledger - Source Package

A personal expense ledger: records expenses, groups them into categories,
tracks budgets per period and converts amounts between currencies.

DESIGN PRINCIPLES:
1. One store object owns the data and is passed to whoever needs it
2. Every mutation is persisted before the call returns
3. Storage problems degrade to defaults, they never crash the app
4. Network problems are surfaced to the caller
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Pocket Ledger Team"
