"""Configuration models for core domain components.

Pydantic-based configuration consolidating the polling settings, enabling
dependency injection and testability.
"""

from pydantic import BaseModel, Field


class PollerConfig(BaseModel):
    """Configuration for Orchestrator and Poller behavior.

    Attributes:
        poll_interval: Seconds between remote status checks (float for test flexibility)
        result_limit: Number of experts requested from the search API
    """

    # Older deployments documented a 60 second cadence; the service has
    # always polled every 30 seconds.
    poll_interval: float = Field(
        default=30.0,
        gt=0,
        description="Interval in seconds between remote job status checks"
    )

    result_limit: int = Field(
        default=30,
        ge=1,
        description="Maximum number of experts requested per search"
    )

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @classmethod
    def from_app_settings(cls, settings) -> "PollerConfig":
        """Factory method to construct config from an EssSettings instance."""
        return cls(
            poll_interval=settings.ESS_POLL_INTERVAL,
            result_limit=settings.ESS_RESULT_LIMIT,
        )
