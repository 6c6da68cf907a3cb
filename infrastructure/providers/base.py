from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from domain.models.currency import CountryInfo, Currency, ExchangeRateData

# Multi-currency countries default to the first of these they issue, else the first listed
PRIMARY_CURRENCY_PRECEDENCE = ('USD', 'EUR')


@runtime_checkable
class ProviderClient(Protocol):
	"""Country and exchange-rate lookups used by `CurrencyService`.

	The live HTTP adapter and the static variant both satisfy this protocol and are
	chosen when the service is constructed.
	"""

	async def resolve_country(self, name: str) -> CountryInfo:
		...

	async def fetch_rate(self, base_currency: str) -> ExchangeRateData:
		...


def build_currencies(entries: Iterable[tuple[str, str, str]]) -> tuple[Currency, ...]:
	"""Turn ``(code, name, symbol)`` triples into `Currency` values with one primary flagged."""
	entries = [(code.upper(), name, symbol) for code, name, symbol in entries]
	if not entries:
		return ()

	codes = [code for code, _, _ in entries]
	primary = next((c for c in PRIMARY_CURRENCY_PRECEDENCE if c in codes), codes[0])

	return tuple(
		Currency(code=code, name=name, symbol=symbol, is_primary=code == primary)
		for code, name, symbol in entries
	)
