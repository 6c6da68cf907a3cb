from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.exceptions.currency import ConfigError


class Settings(BaseSettings):
	EXCHANGE_RATE_API_KEY: str = ''

	RESTCOUNTRIES_BASE_URL: str = 'https://restcountries.com/v3.1'
	EXCHANGE_RATE_BASE_URL: str = 'https://v6.exchangerate-api.com/v6'

	# Providers
	PROVIDER_BACKEND: Literal['http', 'static'] = 'http'
	HTTP_TIMEOUT_SECONDS: float = 10.0
	PROVIDER_TIMEOUT_SECONDS: float = 15.0
	PROVIDER_COOLDOWN_MINUTES: int = 20

	# Caching
	COUNTRY_CACHE_TTL_MINUTES: int = 24 * 60
	COUNTRY_CACHE_MAX_SIZE: int = 500
	RATE_CACHE_TTL_MINUTES: int = 60
	RATE_CACHE_MAX_SIZE: int = 1000

	# Rate limiting (~30,000 requests per month on the free plan)
	RATE_LIMIT_DAILY: int = 1000
	RATE_LIMIT_CLEANUP_MINUTES: int = 5

	# Application
	APP_NAME: str = 'Country Currency Converter'
	DEBUG: bool = False
	LOG_LEVEL: str = 'INFO'
	LOG_JSON: bool = False
	LOG_FILE: str | None = None

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')

	def validate_for_backend(self) -> None:
		if self.PROVIDER_BACKEND == 'http' and not self.EXCHANGE_RATE_API_KEY:
			raise ConfigError('EXCHANGE_RATE_API_KEY not set')
		if self.PROVIDER_TIMEOUT_SECONDS <= 0 or self.HTTP_TIMEOUT_SECONDS <= 0:
			raise ConfigError('Provider timeouts must be positive')
		if self.RATE_LIMIT_DAILY <= 0:
			raise ConfigError('RATE_LIMIT_DAILY must be positive')


@lru_cache
def get_settings() -> Settings:
	return Settings()
