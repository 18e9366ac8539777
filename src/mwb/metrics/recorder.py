"""
Usage counters fed by the client.

Counters live in the process-wide ``prometheus_client`` registry. Label
values are bounded here; free-text fields such as titles and error messages
are logged, not used as labels.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from prometheus_client import Counter

if TYPE_CHECKING:
    from mwb.metrics.schemas import ProviderMetric

logger = structlog.get_logger()

UNKNOWN_HOST = "<UNKNOWN>"
MAX_LABEL_LENGTH = 255

provider_status_total = Counter(
    "mwb_provider_status",
    "Scrape attempts reported by clients, by provider and outcome",
    ["provider_id", "embed_id", "status", "type", "hostname", "tool"],
)
provider_episode_watch_total = Counter(
    "mwb_provider_episode_watch",
    "Successful scrapes of episodic titles, by provider",
    ["provider_id", "hostname"],
)
captcha_solves_total = Counter(
    "mwb_captcha_solves",
    "Captcha attempts reported by clients",
    ["success"],
)


def _label(value: str | None, default: str = "") -> str:
    return (value or default)[:MAX_LABEL_LENGTH]


def origin_hostname(origin: str | None) -> str:
    """The Origin header as a label value, truncated."""
    return _label(origin, UNKNOWN_HOST)


def record_provider_metrics(items: list[ProviderMetric], hostname: str, tool: str | None = None) -> None:
    for item in items:
        provider_status_total.labels(
            provider_id=_label(item.provider_id),
            embed_id=_label(item.embed_id),
            status=_label(item.status),
            type=_label(item.type),
            hostname=hostname,
            tool=_label(tool),
        ).inc()
        if item.status == "success" and item.type != "movie":
            provider_episode_watch_total.labels(provider_id=_label(item.provider_id), hostname=hostname).inc()
        if item.error_message:
            logger.info(
                "provider_failure_reported",
                provider_id=item.provider_id,
                embed_id=item.embed_id,
                tmdb_id=item.tmdb_id,
                error=item.error_message[:MAX_LABEL_LENGTH],
            )
    logger.debug("provider_metrics_recorded", items=len(items), hostname=hostname, tool=tool)


def record_captcha_metric(success: bool) -> None:
    captcha_solves_total.labels(success=str(success).lower()).inc()
