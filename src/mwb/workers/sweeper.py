"""Periodic cleanup of expired sessions and spent challenge codes.

Runs as a background task inside the API process (started from the app
lifespan). Each pass opens its own database session.
"""

import asyncio

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mwb.auth.challenge import sweep_expired_challenges
from mwb.auth.sessions import sweep_expired_sessions

logger = structlog.get_logger()


async def sweep_once(session_factory: async_sessionmaker[AsyncSession]) -> dict[str, int]:
    """Run one sweep pass and commit it. Returns deleted row counts."""
    async with session_factory() as db:
        sessions = await sweep_expired_sessions(db)
        challenges = await sweep_expired_challenges(db)
        await db.commit()
    counts = {"sessions": sessions, "challenges": challenges}
    logger.info("expiry_sweep_completed", **counts)
    return counts


class ExpirySweeper:
    """Deletes expired rows every ``interval_seconds`` until stopped."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], interval_seconds: int) -> None:
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self._running = False

    async def start(self) -> None:
        self._running = True
        logger.info("expiry_sweeper_started", interval_seconds=self.interval_seconds)
        try:
            while self._running:
                try:
                    await sweep_once(self.session_factory)
                except Exception:
                    # A failed pass is retried on the next tick.
                    logger.exception("expiry_sweep_failed")
                await asyncio.sleep(self.interval_seconds)
        except asyncio.CancelledError:
            pass
        finally:
            logger.info("expiry_sweeper_stopped")

    async def stop(self) -> None:
        """Signal the sweeper to stop after the current pass."""
        self._running = False
