import asyncio
import logging
import math
from collections.abc import Awaitable
from typing import TypeVar

from application.services.usage_monitor import UsageMonitor
from domain.exceptions.currency import (
	InvalidCurrencyError,
	InvalidRequestError,
	ServiceError,
	ServiceUnavailableError,
)
from domain.models.currency import (
	ConversionRequest,
	ConversionResult,
	CountryInfo,
	Currency,
	ExchangeRateData,
)
from infrastructure.cache.memory_cache import MemoryCache
from infrastructure.providers.base import ProviderClient
from infrastructure.resilience.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_CALLER_ID = 'anonymous'


def normalize_country_name(name: str) -> str:
	return name.strip().lower()


class CurrencyService:
	"""Converts an amount between the currencies of two countries.

	Country lookups and rate tables are served from the injected caches when possible;
	every rate fetch from the provider is charged to the caller's daily budget first.
	The service keeps no per-request state of its own, so one instance is shared by
	all concurrent requests.
	"""

	def __init__(
		self,
		provider: ProviderClient,
		country_cache: MemoryCache[CountryInfo],
		rate_cache: MemoryCache[ExchangeRateData],
		rate_limiter: RateLimiter,
		provider_timeout: float = 15.0,
		usage_monitor: UsageMonitor | None = None,
	):
		self.provider = provider
		self.country_cache = country_cache
		self.rate_cache = rate_cache
		self.rate_limiter = rate_limiter
		self.provider_timeout = provider_timeout
		self.usage_monitor = usage_monitor

	async def convert(self, request: ConversionRequest, caller_id: str = DEFAULT_CALLER_ID) -> ConversionResult:
		if self.usage_monitor:
			self.usage_monitor.record_request()

		try:
			result = await self._convert(request, caller_id)
		except ServiceError as e:
			if self.usage_monitor:
				self.usage_monitor.record_error()
			logger.info(f'Conversion {request.from_country!r} -> {request.to_country!r} failed: {e.code} {e}')
			raise

		if self.usage_monitor:
			self.usage_monitor.record_success()
		return result

	async def _convert(self, request: ConversionRequest, caller_id: str) -> ConversionResult:
		preferred = self.validate_request(request)

		from_country, from_cached = await self.resolve_country(request.from_country)
		to_country, to_cached = await self.resolve_country(request.to_country)

		from_currency = self.select_currency(from_country, preferred)
		to_currency = self.select_currency(to_country, preferred)

		if from_currency.code == to_currency.code:
			logger.debug(f'Same currency conversion ({from_currency.code}), skipping rate lookup')
			if self.usage_monitor:
				self.usage_monitor.record_rate_lookup(cached=True)
			rate = 1.0
			rate_cached = False
			last_updated = None
			remaining = self.rate_limiter.remaining(caller_id)
			quota = None
		else:
			rates, rate_cached, remaining = await self.get_exchange_rates(from_currency.code, caller_id)
			rate = rates.rate_for(to_currency.code)
			if rate is None:
				raise InvalidCurrencyError(
					f'Exchange rate not found for {from_currency.code}->{to_currency.code}',
					currency=to_currency.code,
				)
			last_updated = rates.last_updated
			quota = rates.quota_remaining

		to_amount = request.amount * rate

		logger.info(
			f'Conversion successful: {request.amount} {from_currency.code} -> '
			f'{to_amount} {to_currency.code} (rate: {rate})',
			extra={'extra_data': {
				'caller_id': caller_id,
				'rate_cached': rate_cached,
				'rate_last_updated': last_updated,
				'rate_limit_remaining': remaining,
			}},
		)

		return ConversionResult(
			from_country=from_country.name,
			to_country=to_country.name,
			from_currency=from_currency.code,
			to_currency=to_currency.code,
			from_amount=request.amount,
			to_amount=to_amount,
			exchange_rate=rate,
			last_updated=last_updated,
			from_country_cached=from_cached,
			to_country_cached=to_cached,
			rate_cached=rate_cached,
			multiple_currencies_available=from_country.is_multi_currency,
			available_currencies=from_country.currencies if from_country.is_multi_currency else (),
			rate_limit_remaining=remaining,
			provider_quota_remaining=quota,
		)

	@staticmethod
	def validate_request(request: ConversionRequest) -> str | None:
		"""Reject malformed requests and return the normalized preferred currency, if any."""
		if not isinstance(request.from_country, str) or not request.from_country.strip():
			raise InvalidRequestError('Source country must not be empty')
		if not isinstance(request.to_country, str) or not request.to_country.strip():
			raise InvalidRequestError('Target country must not be empty')

		amount = request.amount
		if isinstance(amount, bool) or not isinstance(amount, (int, float)):
			raise InvalidRequestError('Amount must be a number')
		if not math.isfinite(amount) or amount <= 0:
			raise InvalidRequestError('Amount must be greater than 0')

		if request.preferred_currency is None:
			return None
		if not isinstance(request.preferred_currency, str):
			raise InvalidRequestError(f'Invalid currency code: {request.preferred_currency!r}')
		if not request.preferred_currency.strip():
			return None
		preferred = request.preferred_currency.strip().upper()
		if len(preferred) != 3 or not preferred.isalpha():
			raise InvalidRequestError(f'Invalid currency code: {request.preferred_currency}')
		return preferred

	async def resolve_country(self, name: str) -> tuple[CountryInfo, bool]:
		key = normalize_country_name(name)
		country = self.country_cache.get(key)
		if country is not None:
			return country, True

		country = await self._call_provider(self.provider.resolve_country(name.strip()), self._provider_name('countries'))
		self.country_cache.set(key, country)
		return country, False

	@staticmethod
	def select_currency(country: CountryInfo, preferred: str | None) -> Currency:
		if not country.currencies:
			raise InvalidCurrencyError(f'No currencies found for {country.name}')

		if not country.is_multi_currency:
			return country.currencies[0]

		if preferred:
			currency = country.get_currency(preferred)
			if currency is None:
				available = country.currency_codes
				raise InvalidCurrencyError(
					f'Preferred currency {preferred} not available for {country.name}. '
					f'Available currencies: {", ".join(available)}',
					currency=preferred,
					available=available,
				)
			return currency

		return country.primary_currency

	async def get_exchange_rates(self, base_code: str, caller_id: str) -> tuple[ExchangeRateData, bool, int]:
		"""Return ``(rates, served_from_cache, caller_requests_remaining)`` for ``base_code``."""
		rates = self.rate_cache.get(base_code)
		if rates is not None:
			if self.usage_monitor:
				self.usage_monitor.record_rate_lookup(cached=True)
			return rates, True, self.rate_limiter.remaining(caller_id)

		remaining = self.rate_limiter.check_and_increment(caller_id)
		if self.usage_monitor:
			self.usage_monitor.record_rate_lookup(cached=False)

		rates = await self._call_provider(self.provider.fetch_rate(base_code), self._provider_name('rates'))
		self.rate_cache.set(base_code, rates)
		return rates, False, remaining

	def purge_expired(self) -> int:
		return self.country_cache.clear_expired() + self.rate_cache.clear_expired()

	def _provider_name(self, role: str) -> str:
		# Composite clients expose their per-lookup adapters as attributes named after the role
		source = getattr(self.provider, role, self.provider)
		return getattr(source, 'name', type(source).__name__)

	async def _call_provider(self, call: Awaitable[T], provider_name: str) -> T:
		try:
			return await asyncio.wait_for(call, timeout=self.provider_timeout)
		except TimeoutError as e:
			logger.error(f'{provider_name} did not respond within {self.provider_timeout}s')
			raise ServiceUnavailableError(
				f'{provider_name} did not respond within {self.provider_timeout}s',
				provider=provider_name,
			) from e
