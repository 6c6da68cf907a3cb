class CurrencyException(Exception):
	pass


class ServiceError(CurrencyException):
	"""Base for every failure `CurrencyService.convert` can return to its caller."""

	code = 'INTERNAL_ERROR'

	def __init__(self, message: str):
		super().__init__(message)
		self.message = message


class InvalidRequestError(ServiceError):
	code = 'INVALID_REQUEST'


class CountryNotFoundError(ServiceError):
	code = 'COUNTRY_NOT_FOUND'

	def __init__(self, country: str):
		super().__init__(f'Country not found: {country}')
		self.country = country


class InvalidCurrencyError(ServiceError):
	code = 'INVALID_CURRENCY'

	def __init__(self, message: str, currency: str | None = None, available: tuple[str, ...] = ()):
		super().__init__(message)
		self.currency = currency
		self.available = available


class RateLimitExceededError(ServiceError):
	"""Raised for both the local daily budget and provider-side quota exhaustion.

	`source` is ``'local'`` for the in-process limiter, otherwise the provider name.
	"""

	code = 'RATE_LIMIT_EXCEEDED'

	def __init__(self, reason: str, source: str = 'local', retry_after: float | None = None):
		super().__init__(f'Rate limit exceeded ({source}): {reason}')
		self.reason = reason
		self.source = source
		self.retry_after = retry_after

	@property
	def is_local(self) -> bool:
		return self.source == 'local'


class ProviderError(ServiceError):
	def __init__(self, message: str, provider: str):
		super().__init__(message)
		self.provider = provider


class ExternalAPIError(ProviderError):
	code = 'EXTERNAL_API_ERROR'


class ServiceUnavailableError(ProviderError):
	code = 'SERVICE_UNAVAILABLE'


class CacheError(ServiceError):
	code = 'CACHE_ERROR'


class ConfigError(ServiceError):
	code = 'CONFIG_ERROR'
