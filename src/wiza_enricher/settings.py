import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()

DEFAULT_POLL_SCHEDULE: tuple[float, ...] = (0.5, 1.0, 1.0, 1.5, 2.0, 3.0)
DEFAULT_TIMEOUT_SECONDS: float = 300.0


def _parse_schedule(raw: str | None) -> tuple[float, ...]:
    if not raw or not raw.strip():
        return DEFAULT_POLL_SCHEDULE
    return tuple(float(part) for part in raw.split(",") if part.strip())


class PollingConfig(BaseModel):
    schedule: tuple[float, ...] = DEFAULT_POLL_SCHEDULE
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)

    @field_validator("schedule")
    @classmethod
    def validate_schedule(cls, v):
        if not v:
            raise ValueError("Poll schedule must contain at least one interval.")
        if any(step <= 0 for step in v):
            raise ValueError("Poll intervals must be positive.")
        return v


class Settings(BaseModel):
    wiza_api_key: str | None = Field(default_factory=lambda: os.getenv("WIZA_API_KEY"))
    wiza_base_url: str = Field(default_factory=lambda: os.getenv("WIZA_BASE_URL", "https://wiza.co"))
    enrichment_provider: str = Field(default_factory=lambda: os.getenv("ENRICHMENT_PROVIDER", "wiza"))
    timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("ENRICHMENT_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))
    )
    poll_schedule: tuple[float, ...] = Field(
        default_factory=lambda: _parse_schedule(os.getenv("ENRICHMENT_POLL_SCHEDULE"))
    )
    http_timeout_seconds: float = Field(default_factory=lambda: float(os.getenv("HTTP_TIMEOUT_SECONDS", "30")))

    def polling(self) -> PollingConfig:
        return PollingConfig(schedule=self.poll_schedule, timeout_seconds=self.timeout_seconds)


def get_settings() -> Settings:
    # re-read env each time (good for tests)
    return Settings()
