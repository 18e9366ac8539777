"""Request schemas for usage metrics."""

from __future__ import annotations

from pydantic import Field

from mwb.schemas import CamelModel


class ProviderMetric(CamelModel):
    """Outcome of one scrape attempt against a source provider."""

    tmdb_id: str
    type: str
    title: str
    season_id: str | None = None
    episode_id: str | None = None
    status: str
    provider_id: str
    embed_id: str | None = None
    error_message: str | None = None
    full_error: str | None = None


class ProviderMetricsBatch(CamelModel):
    items: list[ProviderMetric] = Field(..., min_length=1, max_length=10)
    tool: str | None = None
    batch_id: str | None = None


class CaptchaMetric(CamelModel):
    success: bool
