import logging
from urllib.parse import quote

import httpx

from domain.exceptions.currency import CountryNotFoundError, ExternalAPIError, ServiceUnavailableError
from domain.models.currency import CountryInfo
from infrastructure.providers.base import build_currencies
from infrastructure.providers.schemas import RestCountriesResponse, RestCountry

logger = logging.getLogger(__name__)


class RestCountriesProvider:
	BASE_URL = 'https://restcountries.com/v3.1'

	def __init__(self, client: httpx.AsyncClient | None = None, base_url: str = BASE_URL, timeout: float = 10):
		self.base_url = base_url.rstrip('/')
		self._client = client or httpx.AsyncClient(timeout=timeout)

	@property
	def name(self) -> str:
		return 'restcountries'

	async def resolve_country(self, name: str) -> CountryInfo:
		query = name.strip()
		url = f'{self.base_url}/name/{quote(query, safe="")}'
		logger.debug(f'Fetching country info for: {query}')

		try:
			response = await self._client.get(url, params={'fields': 'name,currencies'})
		except httpx.TimeoutException as e:
			logger.error(f'REST Countries request timed out for {query}')
			raise ServiceUnavailableError('REST Countries request timed out', provider=self.name) from e
		except httpx.RequestError as e:
			logger.error(f'REST Countries request failed for {query}: {e}')
			raise ExternalAPIError(
				f'REST Countries request failed: {e.__class__.__name__}', provider=self.name
			) from e

		if response.status_code == 404:
			logger.debug(f'Country not found: {query}')
			raise CountryNotFoundError(query)

		try:
			response.raise_for_status()
		except httpx.HTTPStatusError as e:
			logger.error(f'REST Countries API error {e.response.status_code} for country: {query}')
			raise ExternalAPIError(
				f'REST Countries HTTP error {e.response.status_code}: {e.response.text[:200]}',
				provider=self.name,
			) from e

		try:
			countries = RestCountriesResponse.validate_python(response.json())
		except ValueError as e:
			logger.error(f'Failed to parse REST Countries response for {query}: {e}')
			raise ExternalAPIError(f'REST Countries response parsing error: {e}', provider=self.name) from e

		if not countries:
			raise CountryNotFoundError(query)

		return self._to_country_info(self._best_match(countries, query))

	@staticmethod
	def _best_match(countries: list[RestCountry], query: str) -> RestCountry:
		# /name/ does partial matching ("Niger" also returns Nigeria), so prefer exact names
		wanted = query.lower()
		for country in countries:
			names = {country.name.common.lower(), (country.name.official or '').lower()}
			if wanted in names:
				return country
		return countries[0]

	@staticmethod
	def _to_country_info(country: RestCountry) -> CountryInfo:
		currencies = build_currencies(
			(code, info.name, info.symbol) for code, info in (country.currencies or {}).items()
		)
		return CountryInfo(
			name=country.name.common,
			official_name=country.name.official,
			currencies=currencies,
		)

	async def close(self) -> None:
		await self._client.aclose()
