from functools import lru_cache

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 3000

    chuck_norris_base_url: HttpUrl = Field("https://api.chucknorris.io/jokes")
    dad_joke_base_url: HttpUrl = Field("https://icanhazdadjoke.com")
    request_timeout: float = Field(10.0, gt=0)

    # Seconds between pushed events on /sse
    push_interval: float = Field(10.0, gt=0)
    enable_sse: bool = True

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> ServerSettings:
    return ServerSettings()
