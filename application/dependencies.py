import logging
from datetime import timedelta

from application.services import CurrencyService, UsageMonitor
from config.settings import Settings, get_settings
from domain.exceptions.currency import ConfigError
from domain.models.currency import CountryInfo, ExchangeRateData
from infrastructure.cache.memory_cache import MemoryCache
from infrastructure.monitoring.logger import setup_logging
from infrastructure.providers import HttpProviderClient, ProviderClient, StaticProviderClient
from infrastructure.resilience.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	settings: Settings | None = None
	provider: ProviderClient | None = None
	country_cache: MemoryCache[CountryInfo] | None = None
	rate_cache: MemoryCache[ExchangeRateData] | None = None
	rate_limiter: RateLimiter | None = None
	usage_monitor: UsageMonitor | None = None
	currency_service: CurrencyService | None = None


deps = AppDependencies()


def build_provider(settings: Settings) -> ProviderClient:
	if settings.PROVIDER_BACKEND == 'static':
		return StaticProviderClient()
	return HttpProviderClient(
		api_key=settings.EXCHANGE_RATE_API_KEY,
		countries_base_url=settings.RESTCOUNTRIES_BASE_URL,
		rates_base_url=settings.EXCHANGE_RATE_BASE_URL,
		timeout=settings.HTTP_TIMEOUT_SECONDS,
		cooldown=timedelta(minutes=settings.PROVIDER_COOLDOWN_MINUTES),
	)


def init_dependencies(settings: Settings | None = None, configure_logging: bool = True) -> CurrencyService:
	"""Initialize all singleton dependencies. Called once at startup."""
	settings = settings or get_settings()
	settings.validate_for_backend()

	if configure_logging:
		setup_logging(
			level='DEBUG' if settings.DEBUG else settings.LOG_LEVEL,
			json_format=settings.LOG_JSON,
			log_file=settings.LOG_FILE,
		)
	logger.info(f'Initializing {settings.APP_NAME} ({settings.PROVIDER_BACKEND} providers)...')

	deps.settings = settings
	deps.provider = build_provider(settings)
	deps.country_cache = MemoryCache.for_countries(
		ttl=timedelta(minutes=settings.COUNTRY_CACHE_TTL_MINUTES),
		max_size=settings.COUNTRY_CACHE_MAX_SIZE,
	)
	deps.rate_cache = MemoryCache.for_rates(
		ttl=timedelta(minutes=settings.RATE_CACHE_TTL_MINUTES),
		max_size=settings.RATE_CACHE_MAX_SIZE,
	)
	deps.rate_limiter = RateLimiter(
		daily_limit=settings.RATE_LIMIT_DAILY,
		cleanup_interval=timedelta(minutes=settings.RATE_LIMIT_CLEANUP_MINUTES),
	)
	deps.usage_monitor = UsageMonitor()
	deps.currency_service = CurrencyService(
		provider=deps.provider,
		country_cache=deps.country_cache,
		rate_cache=deps.rate_cache,
		rate_limiter=deps.rate_limiter,
		provider_timeout=settings.PROVIDER_TIMEOUT_SECONDS,
		usage_monitor=deps.usage_monitor,
	)

	logger.info('Dependencies initialized')
	return deps.currency_service


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	close = getattr(deps.provider, 'close', None)
	if close is not None:
		await close()

	deps.settings = None
	deps.provider = None
	deps.country_cache = None
	deps.rate_cache = None
	deps.rate_limiter = None
	deps.usage_monitor = None
	deps.currency_service = None

	logger.info('Cleanup complete')


def get_currency_service() -> CurrencyService:
	if deps.currency_service is None:
		raise ConfigError('Currency service not initialized. Call init_dependencies() first.')
	return deps.currency_service


def get_usage_monitor() -> UsageMonitor:
	if deps.usage_monitor is None:
		raise ConfigError('Usage monitor not initialized. Call init_dependencies() first.')
	return deps.usage_monitor
