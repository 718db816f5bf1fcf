"""
Currency Conversion Service

DESIGN DECISION: Live rates come from exchangerate-api.com (v6), all
relative to one base currency (USD). When a currency is missing from the
live table we silently use a small static table instead, so conversion
never fails. It only gets less accurate.

This service handles:
1. Fetching the live rate table (the only network call in the app)
2. Converting amounts between currencies
3. Rewriting every stored amount when the user switches currency

ERROR POLICY: Unlike the store, this layer propagates failures. A failed
fetch leaves the cached table untouched and raises one of:
- RateNetworkError      (kind "network_error")
- RateDecodeError       (kind "decode_error")
- InvalidRateResponseError (kind "invalid_response")

Amounts are Decimal but the arithmetic is not ledger-grade: no rounding
is applied, and A -> B -> A is not guaranteed to give back the original.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Union

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, ValidationError

from ledger.config import ExchangeRateSettings, get_settings
from ledger.models.audit import AuditEventBuilder
from ledger.models.ledger import Currency

if TYPE_CHECKING:
    from ledger.store.expense_store import ExpenseStore


logger = structlog.get_logger(__name__)

CurrencyLike = Union[Currency, str]


class CurrencyServiceError(Exception):
    """Base exception for exchange rate errors."""

    kind: str = "currency_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidRateResponseError(CurrencyServiceError):
    """Provider answered, but not with a usable rate table."""

    kind = "invalid_response"

    def __init__(self, message: str = "Invalid response from the server"):
        super().__init__(message)


class RateDecodeError(CurrencyServiceError):
    """Provider body could not be decoded into a rate table."""

    kind = "decode_error"

    def __init__(self, message: str):
        super().__init__(f"Failed to decode response: {message}")


class RateNetworkError(CurrencyServiceError):
    """Transport failure, timeout or non-2xx status."""

    kind = "network_error"

    def __init__(self, message: str):
        super().__init__(f"Network error: {message}")


class ExchangeRateResponse(BaseModel):
    """Body of GET /v6/{key}/latest/{base}. conversion_rates must be present."""
    model_config = ConfigDict(extra="ignore")

    result: Optional[str] = None
    documentation: Optional[str] = None
    terms_of_use: Optional[str] = None
    time_last_update_unix: Optional[int] = None
    time_next_update_unix: Optional[int] = None
    base_code: Optional[str] = None
    conversion_rates: Optional[dict[str, Decimal]] = None


class CurrencyService:
    """
    Exchange rate cache plus conversion helpers.

    The cache lives as long as the object and never expires on its own;
    call fetch_latest_rates() to refresh it.
    """

    def __init__(
        self,
        store: Optional["ExpenseStore"] = None,
        settings: Optional[ExchangeRateSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            store: Store rewritten by apply_currency_change
            settings: Provider configuration (defaults to environment)
            transport: httpx transport override, used by tests
        """
        self._store = store
        self._settings = settings or get_settings().exchange_rate
        self._transport = transport
        self.rates: dict[str, Decimal] = {}
        self.last_updated: Optional[datetime] = None

    @property
    def base_currency(self) -> str:
        return self._settings.base_currency

    # =========================================================================
    # FETCHING
    # =========================================================================

    def _rates_url(self) -> str:
        return (
            f"{self._settings.base_url}/{self._settings.api_key}"
            f"/latest/{self._settings.base_currency}"
        )

    async def fetch_latest_rates(self) -> dict[str, Decimal]:
        """
        Replace the cached rate table with the provider's latest one.

        Returns the new table.

        Raises:
            CurrencyServiceError: One of its three subclasses; the cache is
                                  left exactly as it was
        """
        try:
            rates = await self._request_rates()
        except CurrencyServiceError as e:
            logger.error("rates_fetch_failed", kind=e.kind, error=e.message)
            if self._store is not None:
                self._store.publish(AuditEventBuilder.rates_refresh_failed(e.kind, e.message))
            raise

        self.rates = rates
        self.last_updated = datetime.now()
        logger.info(
            "rates_fetched",
            base_currency=self._settings.base_currency,
            rate_count=len(rates),
        )
        if self._store is not None:
            self._store.publish(
                AuditEventBuilder.rates_refreshed(self._settings.base_currency, len(rates))
            )
        return dict(rates)

    async def _request_rates(self) -> dict[str, Decimal]:
        if not self._settings.api_key:
            raise RateNetworkError("Exchange rate API key is not configured")

        logger.debug(
            "rates_fetch_started",
            base_url=self._settings.base_url,
            base_currency=self._settings.base_currency,
        )

        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.get(self._rates_url())
        except httpx.TimeoutException as e:
            raise RateNetworkError(f"Request timed out: {e}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise RateNetworkError(str(e)) from e

        if not response.is_success:
            raise RateNetworkError(f"HTTP Status: {response.status_code}")

        try:
            payload = ExchangeRateResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise RateDecodeError(str(e)) from e

        if payload.result is not None and payload.result != "success":
            raise InvalidRateResponseError(
                f"Provider reported result '{payload.result}'"
            )
        if payload.conversion_rates is None:
            raise RateDecodeError("response has no conversion_rates mapping")
        if not payload.conversion_rates:
            raise InvalidRateResponseError("Provider returned an empty rate table")

        return dict(payload.conversion_rates)

    # =========================================================================
    # CONVERSION
    # =========================================================================

    def rate_for(self, currency: CurrencyLike) -> tuple[Decimal, bool]:
        """
        Units of `currency` per one base unit.

        Returns (rate, is_live); is_live is False when the fallback is used.
        """
        currency = Currency(currency)
        live = self.rates.get(currency.value)
        if live:
            return live, True
        return currency.fallback_rate, False

    def describe_rate(self, currency: CurrencyLike) -> str:
        """Display text such as '1 USD = 31.0000 TWD (fallback)'."""
        currency = Currency(currency)
        rate, is_live = self.rate_for(currency)
        text = f"1 {self.base_currency} = {rate:.4f} {currency.value}"
        return text if is_live else f"{text} (fallback)"

    def convert(
        self,
        amount: Decimal,
        from_currency: CurrencyLike,
        to_currency: CurrencyLike,
    ) -> Decimal:
        """
        Convert an amount between two currencies.

        Same currency returns the amount untouched. With both currencies in
        the live table the amount goes through the base currency; otherwise
        the static fallback table is used. Codes outside Currency (e.g. a
        cached "CAD") work only while both sides are in the live table.

        Raises:
            ValueError: If neither table covers both currencies
        """
        from_code = _currency_code(from_currency)
        to_code = _currency_code(to_currency)
        amount = Decimal(amount)

        if from_code == to_code:
            return amount

        from_rate = self.rates.get(from_code)
        to_rate = self.rates.get(to_code)
        if from_rate and to_rate:
            return amount / from_rate * to_rate

        try:
            from_fallback = Currency(from_code).fallback_rate
            to_fallback = Currency(to_code).fallback_rate
        except ValueError as e:
            raise ValueError(
                f"No rate available to convert {from_code} to {to_code}"
            ) from e
        return amount * (to_fallback / from_fallback)

    # =========================================================================
    # CURRENCY CHANGE
    # =========================================================================

    def apply_currency_change(self, new_currency: CurrencyLike) -> bool:
        """
        Convert every expense and every set budget limit to new_currency.

        The rewrite is computed on copies and swapped in with one commit,
        so the in-memory state never holds a half-converted ledger. The
        three slots are still written one after another.

        Returns False if new_currency is already the profile currency.
        """
        if self._store is None:
            raise ValueError("CurrencyService has no store to apply the change to")

        new_currency = Currency(new_currency)
        store = self._store

        with store.lock:
            profile = store.profile
            old_currency = profile.currency
            if new_currency == old_currency:
                return False

            expenses = [
                expense.model_copy(update={
                    "amount": self.convert(expense.amount, old_currency, new_currency),
                })
                for expense in store.expenses
            ]

            budget = profile.budget_settings
            limits = {}
            for field_name in ("daily_limit", "monthly_limit", "yearly_limit"):
                limit = getattr(budget, field_name)
                if limit is not None:
                    limits[field_name] = self.convert(limit, old_currency, new_currency)
            profile.budget_settings = budget.model_copy(update=limits)
            profile.currency = new_currency

            store.commit_bulk_update(
                expenses,
                profile,
                AuditEventBuilder.currency_changed(
                    old_currency.value, new_currency.value, len(expenses)
                ),
            )

        logger.info(
            "currency_changed",
            from_currency=old_currency.value,
            to_currency=new_currency.value,
            live_rates=bool(self.rates),
        )
        return True


def _currency_code(currency: CurrencyLike) -> str:
    if isinstance(currency, Currency):
        return currency.value
    return str(currency).strip().upper()
