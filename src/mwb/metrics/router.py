"""Usage metrics ingestion: /metrics/* endpoints. No session required."""

from __future__ import annotations

from fastapi import APIRouter, Request

from mwb.metrics.recorder import origin_hostname, record_captcha_metric, record_provider_metrics
from mwb.metrics.schemas import CaptchaMetric, ProviderMetricsBatch

router = APIRouter(prefix="/metrics", tags=["Metrics"])


@router.api_route("/providers", methods=["POST", "PUT"], response_model=bool)
async def report_providers(body: ProviderMetricsBatch, request: Request) -> bool:
    """Record a batch of one to ten scrape outcomes."""
    record_provider_metrics(body.items, origin_hostname(request.headers.get("origin")), body.tool)
    return True


@router.post("/captcha", response_model=bool)
async def report_captcha(body: CaptchaMetric) -> bool:
    record_captcha_metric(body.success)
    return True
