# config/settings.py

import os
from typing import Annotated, ClassVar

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_TUTOR_PERSONA = """你是一位專業且有耐心的國中全科老師。請詳細分析題目並提供以下資訊：
1.  **最終答案**：清楚標示最後的答案。
2.  **題目主旨**：這題在考什麼觀念？
3.  **解題步驟**：一步一步帶領學生解題，說明每一步的思考邏輯。
4.  **相關公式**：列出解這題會用到的所有公式，並簡單說明。

請用繁體中文、條列式回答。如果使用者有額外指定題目（例如：請解第三題），請優先處理。"""

class Settings(BaseSettings):
	"""Values read from the environment or the .env file. A malformed value fails naming its variable."""
	model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

	# Credential pool, read at call time by raw_api_keys()
	API_KEYS_ENV: ClassVar[str] = "GEMINI_API_KEYS"
	API_KEY_FALLBACK_ENV: ClassVar[str] = "GEMINI_API_KEY"

	# Provider settings
	GEMINI_MODEL: str = Field("gemini-2.5-flash", min_length=1, validation_alias="GEMINI_MODEL")
	MAX_OUTPUT_TOKENS: int = Field(12000, ge=1, validation_alias="GEMINI_MAX_OUTPUT_TOKENS")
	PROVIDER_TIMEOUT_SECONDS: float = Field(60, ge=1, validation_alias="GEMINI_TIMEOUT_SECONDS")
	SYSTEM_INSTRUCTION: str = Field(_TUTOR_PERSONA, validation_alias="TUTOR_SYSTEM_INSTRUCTION")

	# HTTP settings
	ALLOWED_ORIGINS: Annotated[list[str], NoDecode] = Field(["*"], validation_alias="ALLOWED_ORIGINS")

	@field_validator("ALLOWED_ORIGINS", mode="before")
	@classmethod
	def _split_origins(cls, value):
		if isinstance(value, str):
			origins = [o.strip() for o in value.split(",") if o.strip()]
			return origins or ["*"]
		return value

	def raw_api_keys(self) -> str | None:
		"""Returns the configured key string, checking the pool variable before the single-key one."""
		return os.getenv(self.API_KEYS_ENV) or os.getenv(self.API_KEY_FALLBACK_ENV) or None

# Create singleton instance
settings = Settings() # type: ignore
