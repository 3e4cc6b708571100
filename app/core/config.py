from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file='.env', extra='allow', case_sensitive=False)

    log_level: str = 'INFO'

    logfire_token: Optional[str] = None

    # Sentry
    sentry_dsn: Optional[str] = None

    host: str = '0.0.0.0'
    port: int = 3000

    # Static key the frontend sends as `Authorization: Bearer <key>`
    api_key: str = ''

    # Bitrix24 inbound webhook, e.g. https://example.bitrix24.es/rest/1/abcdef123456/
    bitrix_webhook_base: str = ''
    bitrix_timeout: Optional[float] = None
    # Language used when Bitrix returns labels keyed by language code
    bitrix_label_lang: str = 'es'

    @field_validator('bitrix_webhook_base', mode='before')
    @classmethod
    def strip_webhook_base(cls, v) -> str:
        if isinstance(v, str):
            return v.strip()
        return v


settings = Settings()
