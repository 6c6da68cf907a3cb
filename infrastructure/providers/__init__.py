from .base import ProviderClient
from .exchangerate_api import ExchangeRateAPIProvider
from .http_client import HttpProviderClient
from .restcountries import RestCountriesProvider
from .static import StaticProviderClient

__all__ = [
	'ProviderClient',
	'ExchangeRateAPIProvider',
	'HttpProviderClient',
	'RestCountriesProvider',
	'StaticProviderClient',
]
