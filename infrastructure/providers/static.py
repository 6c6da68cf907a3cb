import asyncio
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime

from domain.exceptions.currency import CountryNotFoundError, ExternalAPIError
from domain.models.currency import CountryInfo, ExchangeRateData
from infrastructure.providers.base import build_currencies


def make_country(name: str, *currencies: tuple[str, str, str], official_name: str | None = None) -> CountryInfo:
	return CountryInfo(name=name, official_name=official_name, currencies=build_currencies(currencies))


DEFAULT_COUNTRIES = (
	make_country('United States', ('USD', 'United States dollar', '$'), official_name='United States of America'),
	make_country('France', ('EUR', 'Euro', '€'), official_name='French Republic'),
	make_country('Germany', ('EUR', 'Euro', '€'), official_name='Federal Republic of Germany'),
	make_country('Japan', ('JPY', 'Japanese yen', '¥')),
	make_country('United Kingdom', ('GBP', 'British pound', '£'), official_name='United Kingdom of Great Britain and Northern Ireland'),
	make_country('Panama', ('PAB', 'Panamanian balboa', 'B/.'), ('USD', 'United States dollar', '$'), official_name='Republic of Panama'),
	make_country('Zimbabwe', ('ZWL', 'Zimbabwean dollar', '$'), ('USD', 'United States dollar', '$'), official_name='Republic of Zimbabwe'),
	make_country('Nigeria', ('NGN', 'Nigerian naira', '₦'), official_name='Federal Republic of Nigeria'),
)

DEFAULT_RATES: dict[str, dict[str, float]] = {
	'USD': {'USD': 1.0, 'EUR': 0.9536, 'GBP': 0.7912, 'JPY': 149.52, 'PAB': 1.0, 'NGN': 1545.3, 'ZWL': 322.0},
	'EUR': {'EUR': 1.0, 'USD': 1.0487, 'GBP': 0.8297, 'JPY': 156.8, 'PAB': 1.0487, 'NGN': 1620.6},
	'PAB': {'PAB': 1.0, 'USD': 1.0, 'EUR': 0.9536, 'GBP': 0.7912, 'JPY': 149.52},
	'GBP': {'GBP': 1.0, 'USD': 1.2639, 'EUR': 1.2052, 'JPY': 188.98},
	'JPY': {'JPY': 1.0, 'USD': 0.006688, 'EUR': 0.006378, 'GBP': 0.005292},
}


class StaticProviderClient:
	"""Deterministic `ProviderClient` serving canned countries and rate tables.

	Records every lookup in ``country_calls`` / ``rate_calls`` so callers can assert
	whether a provider was consulted. ``delay`` makes each call sleep first.
	"""

	name = 'static'

	def __init__(
		self,
		countries: Iterable[CountryInfo] = DEFAULT_COUNTRIES,
		rates: Mapping[str, Mapping[str, float]] = DEFAULT_RATES,
		last_updated: datetime | None = None,
		delay: float = 0.0,
	):
		self._countries: dict[str, CountryInfo] = {}
		for country in countries:
			self._countries[country.name.lower()] = country
			if country.official_name:
				self._countries.setdefault(country.official_name.lower(), country)
		self._rates = {base.upper(): dict(table) for base, table in rates.items()}
		self.last_updated = last_updated or datetime(2025, 1, 1, tzinfo=UTC)
		self.delay = delay
		self.country_calls: list[str] = []
		self.rate_calls: list[str] = []

	@property
	def total_calls(self) -> int:
		return len(self.country_calls) + len(self.rate_calls)

	async def resolve_country(self, name: str) -> CountryInfo:
		self.country_calls.append(name)
		if self.delay:
			await asyncio.sleep(self.delay)

		country = self._countries.get(name.strip().lower())
		if country is None:
			raise CountryNotFoundError(name.strip())
		return country

	async def fetch_rate(self, base_currency: str) -> ExchangeRateData:
		self.rate_calls.append(base_currency)
		if self.delay:
			await asyncio.sleep(self.delay)

		table = self._rates.get(base_currency.upper())
		if table is None:
			raise ExternalAPIError(f'No rates available for {base_currency}', provider=self.name)
		return ExchangeRateData(base_code=base_currency.upper(), rates=table, last_updated=self.last_updated)

	async def close(self) -> None:
		return None
