from datetime import timedelta

import httpx

from domain.models.currency import CountryInfo, ExchangeRateData
from infrastructure.providers.exchangerate_api import ExchangeRateAPIProvider
from infrastructure.providers.restcountries import RestCountriesProvider


class HttpProviderClient:
	"""Live `ProviderClient`: REST Countries and ExchangeRate-API over one connection pool."""

	def __init__(
		self,
		api_key: str,
		countries_base_url: str = RestCountriesProvider.BASE_URL,
		rates_base_url: str = ExchangeRateAPIProvider.BASE_URL,
		timeout: float = 10,
		cooldown: timedelta = timedelta(minutes=20),
		client: httpx.AsyncClient | None = None,
	):
		self._client = client or httpx.AsyncClient(
			timeout=httpx.Timeout(timeout),
			limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
		)
		self.countries = RestCountriesProvider(client=self._client, base_url=countries_base_url)
		self.rates = ExchangeRateAPIProvider(
			api_key, client=self._client, base_url=rates_base_url, cooldown=cooldown
		)

	async def resolve_country(self, name: str) -> CountryInfo:
		return await self.countries.resolve_country(name)

	async def fetch_rate(self, base_currency: str) -> ExchangeRateData:
		return await self.rates.fetch_rate(base_currency)

	async def close(self) -> None:
		await self._client.aclose()
