from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class RestCurrency(BaseModel):
	name: str = ''
	symbol: str = ''


class RestCountryName(BaseModel):
	common: str
	official: str | None = None


class RestCountry(BaseModel):
	name: RestCountryName
	currencies: dict[str, RestCurrency] | None = None


RestCountriesResponse = TypeAdapter(list[RestCountry])


class ExchangeRatePayload(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra='ignore')

	result: str
	base_code: str
	conversion_rates: dict[str, float] = Field(default_factory=dict)
	time_last_update_unix: int | None = None


class ExchangeRateErrorPayload(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra='ignore')

	result: str
	error_type: str = Field(default='unknown', alias='error-type')
