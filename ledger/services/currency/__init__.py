"""Currency conversion package."""

from ledger.services.currency.exchange_rates import (
    CurrencyService,
    CurrencyServiceError,
    ExchangeRateResponse,
    InvalidRateResponseError,
    RateDecodeError,
    RateNetworkError,
)

__all__ = [
    "CurrencyService",
    "CurrencyServiceError",
    "ExchangeRateResponse",
    "InvalidRateResponseError",
    "RateDecodeError",
    "RateNetworkError",
]
