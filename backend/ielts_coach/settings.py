from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Single credential gating every model-backed operation
	openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
	# Chat completion model used for question generation and evaluation
	openai_model: str = Field(default="gpt-4o-mini", validation_alias="OPENAI_MODEL")
	# Speech-to-text model used for the speaking transcription step
	openai_transcription_model: str = Field(default="whisper-1", validation_alias="OPENAI_TRANSCRIPTION_MODEL")
	openai_base_url: str = Field(default="https://api.openai.com/v1", validation_alias="OPENAI_BASE_URL")
	# Transport timeout for one round trip to the provider (no retries on top of it)
	openai_timeout_seconds: float = Field(default=60.0, validation_alias="OPENAI_TIMEOUT_SECONDS")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
