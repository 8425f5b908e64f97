from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

WIKIDATA_API_URL = "https://www.wikidata.org/w/api.php"


class WikifetchSettings(BaseSettings):
    """Runtime configuration for wikifetch.

    Environment variables are prefixed with WIKIFETCH_.
    """

    model_config = SettingsConfigDict(env_prefix="WIKIFETCH_", extra="ignore")

    # --- Core ---
    log_level: str = Field(default="INFO", description="Python logging level")

    # --- Wikibase API ---
    api_url: str = WIKIDATA_API_URL
    user_agent: str = "wikifetch/0.1 (https://www.wikidata.org/wiki/Wikidata:Data_access)"
    maxlag: int = Field(default=5, description="Seconds of replication lag the API may report before refusing")
    max_list_size: int = Field(default=50, description="Max ids/titles per wbgetentities request")
    retry_attempts: int = 5
    search_limit: int | None = Field(default=None, description="If unset, the API default page size is used")

    # --- Reports ---
    results_dir: str | None = Field(
        default=None,
        description="Directory for raw report files. If unset, reports go to the console only.",
    )


settings = WikifetchSettings()
