from pydantic import BaseModel, Field, field_validator


class CurrencyCreateRequest(BaseModel):
	code: str = Field(..., min_length=3, max_length=3, description='ISO 4217 currency code')
	name: str | None = Field(default=None, max_length=100, description='Display name')

	@field_validator('code')
	@classmethod
	def uppercase_code(cls, v: str):
		return v.strip().upper()

	class ConfigDict:
		json_schema_extra = {'example': {'code': 'NGN', 'name': 'Nigerian Naira'}}
