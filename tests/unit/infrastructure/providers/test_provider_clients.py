# nosec B101


from unittest.mock import AsyncMock

import httpx
import pytest

from domain.exceptions.currency import CountryNotFoundError, ExternalAPIError
from infrastructure.providers import HttpProviderClient, ProviderClient, StaticProviderClient
from infrastructure.providers.base import build_currencies
from infrastructure.providers.static import make_country


# ============================================================================
# TEST: build_currencies()
# ============================================================================

def test_single_currency_is_primary():
    currencies = build_currencies([('jpy', 'Japanese yen', '¥')])

    assert len(currencies) == 1
    assert currencies[0].code == 'JPY'
    assert currencies[0].is_primary


def test_usd_wins_over_local_currency():
    currencies = build_currencies([('ZWL', 'Zimbabwean dollar', '$'), ('USD', 'United States dollar', '$')])

    assert [c.code for c in currencies if c.is_primary] == ['USD']


def test_eur_wins_when_usd_absent():
    currencies = build_currencies([('XPF', 'CFP franc', '₣'), ('EUR', 'Euro', '€')])

    assert [c.code for c in currencies if c.is_primary] == ['EUR']


def test_first_listed_is_primary_without_usd_or_eur():
    currencies = build_currencies([('CHF', 'Swiss franc', 'Fr.'), ('LIE', 'Placeholder', 'L')])

    assert [c.is_primary for c in currencies] == [True, False]


def test_no_entries_gives_empty_tuple():
    assert build_currencies([]) == ()


# ============================================================================
# TEST: StaticProviderClient
# ============================================================================

def test_static_and_http_clients_satisfy_protocol():
    assert isinstance(StaticProviderClient(), ProviderClient)
    assert isinstance(HttpProviderClient(api_key='k', client=AsyncMock(spec=httpx.AsyncClient)), ProviderClient)


@pytest.mark.asyncio
async def test_static_resolves_common_and_official_names_case_insensitively():
    client = StaticProviderClient()

    by_common = await client.resolve_country('  fRaNcE ')
    by_official = await client.resolve_country('French Republic')

    assert by_common is by_official
    assert by_common.currency_codes == ('EUR',)
    assert client.country_calls == ['  fRaNcE ', 'French Republic']


@pytest.mark.asyncio
async def test_static_unknown_country_raises_country_not_found():
    client = StaticProviderClient()

    with pytest.raises(CountryNotFoundError) as exc_info:
        await client.resolve_country('Atlantis ')

    assert exc_info.value.country == 'Atlantis'


@pytest.mark.asyncio
async def test_static_fetch_rate_returns_table_for_base():
    client = StaticProviderClient()

    rates = await client.fetch_rate('usd')

    assert rates.base_code == 'USD'
    assert rates.rate_for('EUR') == 0.9536
    assert rates.last_updated.year == 2025
    assert client.rate_calls == ['usd']
    assert client.total_calls == 1


@pytest.mark.asyncio
async def test_static_unknown_base_raises_external_api_error():
    client = StaticProviderClient()

    with pytest.raises(ExternalAPIError):
        await client.fetch_rate('XYZ')


@pytest.mark.asyncio
async def test_static_accepts_custom_data():
    client = StaticProviderClient(
        countries=[make_country('Narnia', ('NRN', 'Narnian crown', 'N'))],
        rates={'nrn': {'USD': 2.5}},
    )

    country = await client.resolve_country('narnia')
    rates = await client.fetch_rate('NRN')

    assert country.primary_currency.code == 'NRN'
    assert rates.rate_for('USD') == 2.5


# ============================================================================
# TEST: HttpProviderClient
# ============================================================================

@pytest.mark.asyncio
async def test_http_client_shares_one_connection_pool():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    request = httpx.Request('GET', 'https://example.test')
    mock_client.get.side_effect = [
        httpx.Response(200, request=request, json=[{
            'name': {'common': 'Japan', 'official': 'Japan'},
            'currencies': {'JPY': {'name': 'Japanese yen', 'symbol': '¥'}},
        }]),
        httpx.Response(200, request=request, json={
            'result': 'success',
            'base_code': 'JPY',
            'conversion_rates': {'USD': 0.0067},
        }),
    ]
    client = HttpProviderClient(
        api_key='secret',
        countries_base_url='https://countries.test',
        rates_base_url='https://rates.test/v6/',
        client=mock_client,
    )

    country = await client.resolve_country('Japan')
    rates = await client.fetch_rate('JPY')
    await client.close()

    assert country.currency_codes == ('JPY',)
    assert rates.rate_for('USD') == 0.0067
    urls = [call[0][0] for call in mock_client.get.call_args_list]
    assert urls == ['https://countries.test/name/Japan', 'https://rates.test/v6/secret/latest/JPY']
    mock_client.aclose.assert_awaited_once()
