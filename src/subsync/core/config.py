from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

LookupMissPolicy = Literal["ack", "retry"]


class Settings(BaseSettings):
    env: str = "local"
    service_name: str = "subsync"

    # allow full URL override (sqlite for tests, managed postgres in prod)
    database_url_override: str | None = None

    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "subsync"
    db_user: str = "postgres"
    db_password: str | None = None

    stripe_api_key: SecretStr | None = None
    stripe_webhook_secret: SecretStr | None = None

    cors_allowed_origin: str | None = None
    port: int = 3000
    log_level: str = "INFO"

    # ack: log + 200 (stripe stops retrying), retry: 500 (stripe redelivers)
    lookup_miss_policy: LookupMissPolicy = "ack"
    # reuse an existing payment row with the same invoice id + status
    dedupe_payments: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def database_url(self) -> str:
        # 1) Prefer explicit URL
        if self.database_url_override:
            return self.database_url_override

        password = self.db_password or ""
        auth = f"{self.db_user}:{password}" if password else self.db_user

        # 2) Fallback to postgres assembled URL
        return (
            f"postgresql+psycopg://{auth}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}?connect_timeout=3"
        )

    @property
    def webhook_secret(self) -> str | None:
        secret = self.stripe_webhook_secret
        return secret.get_secret_value() if secret else None

    @property
    def cors_origins(self) -> list[str]:
        return [self.cors_allowed_origin] if self.cors_allowed_origin else ["*"]


settings = Settings()
