from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Generic, TypeVar

T = TypeVar('T')


@dataclass(frozen=True)
class ConversionRequest:
	from_country: str
	to_country: str
	amount: float
	preferred_currency: str | None = None


@dataclass(frozen=True)
class Currency:
	code: str
	name: str
	symbol: str
	is_primary: bool = False


@dataclass(frozen=True)
class CountryInfo:
	name: str
	currencies: tuple[Currency, ...]
	official_name: str | None = None

	@property
	def currency_codes(self) -> tuple[str, ...]:
		return tuple(c.code for c in self.currencies)

	@property
	def is_multi_currency(self) -> bool:
		return len(self.currencies) > 1

	@property
	def primary_currency(self) -> Currency | None:
		for currency in self.currencies:
			if currency.is_primary:
				return currency
		return self.currencies[0] if self.currencies else None

	def get_currency(self, code: str) -> Currency | None:
		code = code.upper()
		for currency in self.currencies:
			if currency.code == code:
				return currency
		return None


@dataclass(frozen=True)
class ExchangeRateData:
	base_code: str
	rates: Mapping[str, float]
	last_updated: datetime
	quota_remaining: int | None = None

	def __post_init__(self):
		# Freeze the rate table so cached instances can be shared between requests
		object.__setattr__(self, 'rates', MappingProxyType(dict(self.rates)))

	def rate_for(self, code: str) -> float | None:
		return self.rates.get(code)


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
	value: T
	inserted_at: float

	def is_expired(self, ttl: float, now: float) -> bool:
		return now - self.inserted_at > ttl


@dataclass(frozen=True)
class RateLimitInfo:
	count: int
	window_start: float


@dataclass(frozen=True)
class ConversionResult:
	from_country: str
	to_country: str
	from_currency: str
	to_currency: str
	from_amount: float
	to_amount: float
	exchange_rate: float
	last_updated: datetime | None
	from_country_cached: bool
	to_country_cached: bool
	rate_cached: bool
	multiple_currencies_available: bool
	available_currencies: tuple[Currency, ...] = field(default_factory=tuple)
	rate_limit_remaining: int | None = None
	provider_quota_remaining: int | None = None

	@property
	def fully_cached(self) -> bool:
		return self.from_country_cached and self.to_country_cached and self.rate_cached
