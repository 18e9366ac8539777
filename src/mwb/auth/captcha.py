"""Captcha token verification (reCAPTCHA-compatible siteverify endpoint)."""

from __future__ import annotations

import httpx
import structlog

from mwb.config import get_settings

logger = structlog.get_logger()


async def verify_captcha_token(token: str, remote_ip: str | None = None) -> bool:
    """
    Ask the captcha provider whether ``token`` is valid.

    Returns False on provider errors so a flaky provider never lets an
    unchecked registration through.
    """
    settings = get_settings()
    data = {"secret": settings.captcha_secret, "response": token}
    if remote_ip:
        data["remoteip"] = remote_ip

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(settings.captcha_verify_url, data=data, timeout=10.0)
            response.raise_for_status()
            payload = response.json()
    except (httpx.HTTPError, ValueError):
        logger.exception("captcha_verify_failed")
        return False

    success = bool(payload.get("success"))
    if not success:
        logger.info("captcha_rejected", errors=payload.get("error-codes"))
    return success
