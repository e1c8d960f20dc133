import logging

import sentry_sdk
from pydantic_settings import BaseSettings
from sentry_sdk.integrations.logging import LoggingIntegration


class Settings(BaseSettings):
    KITE_API_KEY: str | None = None
    KITE_API_SECRET: str | None = None
    KITE_API_URL: str = "https://auth.kite.trade"
    KITE_LOGIN_URL: str = "https://kite.zerodha.com/connect/login"
    EXCHANGE_RETRIES: int = 2
    EXCHANGE_BACKOFF_BASE: float = 0.1
    EXCHANGE_BACKOFF_MAX: float = 10.0
    EXCHANGE_REQUEST_TIMEOUT: float = 20.0
    EXCHANGE_DEADLINE: float = 60.0  # whole exchange, retries included
    LOG_LEVEL: str = logging.getLevelName(logging.INFO)
    ENV: str | None = None
    SENTRY_DSN: str | None = None

    def init_sentry(self) -> None:
        if self.SENTRY_DSN and self.ENV:
            sentry_sdk.init(
                dsn=self.SENTRY_DSN,
                environment=self.ENV,
                traces_sample_rate=1.0,
                integrations=[
                    LoggingIntegration(level=logging.INFO, event_level=logging.WARNING),
                ],
            )


# noinspection PyArgumentList
settings = Settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s [%(levelname)8s] %(message)s (%(filename)s:%(lineno)s)',
    datefmt='%Y-%m-%d %H:%M:%S',
)
