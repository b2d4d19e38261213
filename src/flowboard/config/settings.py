"""Application settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    data_dir: Path = Field(
        default=Path(".flowboard"),
        description="Directory holding the local document store",
    )

    business_id: str | None = Field(
        default=None,
        description="Business whose boards the CLI operates on",
    )

    webhook_url: str | None = Field(
        default=None,
        description="Endpoint receiving task notifications (disabled when unset)",
    )

    webhook_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Webhook request timeout in seconds",
    )

    due_soon_hours: int = Field(
        default=24,
        ge=1,
        description="Window for dueDateApproaching automations",
    )

    verbose: int = Field(
        default=0,
        description="Verbosity level (0=off, 1=INFO, 2+=DEBUG)",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional path to write logs to file",
    )

    model_config = {
        "env_prefix": "FLOWBOARD_",
    }
