from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class HunterSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent / ".env",
        env_prefix="SLOT_HUNTER_",
        extra="ignore",
    )

    # The bearer token is issued to the browser session by the site itself;
    # we only read and validate it.
    access_token: str | None = Field(default=None)
    case_url: str | None = Field(default=None)
    api_base_url: str = "https://inpol.mazowieckie.pl/api/"
    queue_ids: list[str] = [
        "c93674d6-fb24-4a85-9dac-61897dc8f060",
        "f0992a78-802d-40e7-9bd0-c0d8d46a71fd",
        "3ab99932-8e53-4dff-9abf-45b8c6286a99",
    ]
    max_cycles: int = 60


class HunterConstants:
    """Centralized constants for hunting operations."""

    DEFAULT_TIMEOUT = 15

    # Retry / pacing (seconds)
    MAX_FETCH_RETRIES = 3
    RETRY_BASE_DELAY = 1.0
    QUEUE_PACING_DELAY = 1.5
    CYCLE_DELAY = 5.0
    TWO_FA_PROMPT_TIMEOUT = 10.0

    # HTTP Headers
    SITE_ORIGIN = "https://inpol.mazowieckie.pl"
    USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/18.3.1 Safari/605.1.15"
    ACCEPT_LANGUAGE = "en-US,en;q=0.9"
    ACCEPT = "application/json"


class ApiEndpoints(BaseModel):
    base_url: str = "https://inpol.mazowieckie.pl/api/"

    def proceedings_url(self, case_id: str) -> str:
        return self.base_url + f"proceedings/{case_id}"

    def slots_url(self, queue_id: str, date: str) -> str:
        return self.base_url + f"reservations/queue/{queue_id}/{date}/slots"

    def reserve_url(self, queue_id: str) -> str:
        return self.base_url + f"reservations/queue/{queue_id}/reserve"

    @property
    def two_fa_verify_url(self) -> str:
        return self.base_url + "auth/twoFA/verify"
