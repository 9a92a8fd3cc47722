"""Prometheus HTTP service discovery schemas."""

from pydantic import BaseModel, Field


class StaticConfig(BaseModel):
    """One target group in the format expected by Prometheus http_sd_configs."""

    targets: list[str]
    labels: dict[str, str] = Field(default_factory=dict)
