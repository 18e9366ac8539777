"""Season/episode identity encoding at the storage boundary.

Callers work with ``str | None``. The tables store "absent" as a sentinel so
the ``(user, title, season, episode)`` unique constraint holds on every
backend (NULLs never collide in a unique index).
"""

from __future__ import annotations

ABSENT = "\n"


def encode_part(value: str | None) -> str:
    """Map an optional season/episode id to its stored form."""
    return value if value else ABSENT


def decode_part(value: str | None) -> str | None:
    """Map a stored season/episode id back to ``str | None``."""
    if value is None or value == ABSENT:
        return None
    return value


def item_key(
    media_type: str,
    season_id: str | None,
    episode_id: str | None,
) -> tuple[str, str]:
    """Stored (season, episode) pair for an item. Movies never carry either."""
    if media_type == "movie":
        return ABSENT, ABSENT
    return encode_part(season_id), encode_part(episode_id)
