import contextlib
import logging
from datetime import UTC, datetime, timedelta

import httpx
from pydantic import ValidationError

from domain.exceptions.currency import (
	ExternalAPIError,
	RateLimitExceededError,
	ServiceUnavailableError,
)
from domain.models.currency import ExchangeRateData
from infrastructure.providers.schemas import ExchangeRateErrorPayload, ExchangeRatePayload

logger = logging.getLogger(__name__)

QUOTA_HEADER = 'X-RateLimit-Remaining'


class ExchangeRateAPIProvider:
	BASE_URL = 'https://v6.exchangerate-api.com/v6'

	def __init__(
		self,
		api_key: str,
		client: httpx.AsyncClient | None = None,
		base_url: str = BASE_URL,
		timeout: float = 10,
		cooldown: timedelta = timedelta(minutes=20),
	):
		self.api_key = api_key
		self.base_url = base_url.rstrip('/')
		self.cooldown = cooldown
		self._client = client or httpx.AsyncClient(timeout=timeout)

	@property
	def name(self) -> str:
		return 'exchangerate-api'

	async def fetch_rate(self, base_currency: str) -> ExchangeRateData:
		base_currency = base_currency.upper()
		url = f'{self.base_url}/{self.api_key}/latest/{base_currency}'
		logger.debug(f'Fetching exchange rates for currency: {base_currency}')

		try:
			response = await self._client.get(url)
		except httpx.TimeoutException as e:
			logger.error(f'ExchangeRate-API request timed out for {base_currency}')
			raise ServiceUnavailableError('ExchangeRate-API request timed out', provider=self.name) from e
		except httpx.RequestError as e:
			logger.error(f'ExchangeRate-API request failed for {base_currency}: {e}')
			raise ExternalAPIError(
				f'ExchangeRate-API request failed: {e.__class__.__name__}', provider=self.name
			) from e

		if response.status_code == 429:
			raise self._quota_exhausted('provider returned HTTP 429')

		data = None
		with contextlib.suppress(ValueError):
			data = response.json()

		if isinstance(data, dict) and data.get('result') == 'error':
			error_type = ExchangeRateErrorPayload.model_validate(data).error_type
			if error_type == 'quota-reached':
				raise self._quota_exhausted('monthly request quota reached')
			logger.error(f'ExchangeRate-API error {error_type} for {base_currency}')
			raise ExternalAPIError(f'ExchangeRate-API error: {error_type}', provider=self.name)

		if response.status_code >= 400:
			logger.error(f'ExchangeRate-API HTTP error {response.status_code} for {base_currency}')
			raise ExternalAPIError(
				f'ExchangeRate-API HTTP error {response.status_code}: {response.text[:200]}',
				provider=self.name,
			)

		try:
			payload = ExchangeRatePayload.model_validate(data)
		except ValidationError as e:
			logger.error(f'Failed to parse exchange rate data for {base_currency}: {e}')
			raise ExternalAPIError(f'ExchangeRate-API response parsing error: {e}', provider=self.name) from e

		if payload.time_last_update_unix is not None:
			last_updated = datetime.fromtimestamp(payload.time_last_update_unix, UTC)
		else:
			last_updated = datetime.now(UTC)

		logger.debug(f'Fetched {len(payload.conversion_rates)} rates for {base_currency}')
		return ExchangeRateData(
			base_code=payload.base_code.upper(),
			rates=payload.conversion_rates,
			last_updated=last_updated,
			quota_remaining=self._parse_quota(response),
		)

	def _quota_exhausted(self, reason: str) -> RateLimitExceededError:
		logger.error(f'ExchangeRate-API rate limit exceeded: {reason}')
		return RateLimitExceededError(
			reason, source=self.name, retry_after=self.cooldown.total_seconds()
		)

	@staticmethod
	def _parse_quota(response: httpx.Response) -> int | None:
		raw = response.headers.get(QUOTA_HEADER)
		if raw is None or not raw.strip().isdigit():
			return None
		return int(raw)

	async def close(self) -> None:
		await self._client.aclose()
