"""Settings for talking to Confluence and Trello, loaded from the environment."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Confluence connection settings (``CONFLUENCE_*`` variables or ``.env``)."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CONFLUENCE_", extra="ignore")

    url: str = Field(
        default="https://your-domain.atlassian.net",
        description="Site root of the Confluence Cloud instance.",
    )
    cookies: str = Field(
        description=(
            "Raw Cookie header copied from an authenticated browser session,"
            " e.g. 'atl.xsrf.token=xxx; tenant.session.token=yyy; JSESSIONID=zzz'."
        ),
    )
    timeout: float = Field(default=30.0, description="HTTP timeout in seconds.")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings."""

    return Settings()


class TrelloSettings(BaseSettings):
    """Trello credentials (``TRELLO_*`` variables or ``.env``)."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="TRELLO_", extra="ignore")

    api_key: str = Field(description="Trello API key from https://trello.com/app-key.")
    token: str = Field(description="Trello user token authorised for the API key.")
    timeout: float = Field(default=30.0, description="HTTP timeout in seconds.")


@lru_cache
def get_trello_settings() -> TrelloSettings:
    """Return cached Trello settings."""

    return TrelloSettings()
