"""
Progress acceptability rules.

Pure functions, no I/O. Durations and positions are whole seconds.

    not started:  watched < 20
    completed:    duration - watched < 120
    acceptable:   neither of the above (worth resuming)
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Protocol

from mwb.db.identity import ABSENT

NOT_STARTED_THRESHOLD = 20
COMPLETED_THRESHOLD = 120

# 13 July 2021, the earliest timestamp the service accepts.
MIN_EPOCH = datetime(2021, 7, 13, tzinfo=timezone.utc)


class HasPosition(Protocol):
    duration: int
    watched: int


class StoredProgress(HasPosition, Protocol):
    id: str
    tmdb_id: str
    season_id: str
    episode_id: str


def is_not_started(duration: int, watched: int) -> bool:
    return watched < NOT_STARTED_THRESHOLD


def is_completed(duration: int, watched: int) -> bool:
    return duration - watched < COMPLETED_THRESHOLD


def is_acceptable(duration: int, watched: int) -> bool:
    return not is_not_started(duration, watched) and not is_completed(duration, watched)


def any_acceptable(items: Iterable[HasPosition]) -> bool:
    return any(is_acceptable(int(i.duration), int(i.watched)) for i in items)


def clamp_timestamp(value: datetime | None, now: datetime | None = None) -> datetime:
    """Clamp a client timestamp into ``[MIN_EPOCH, now]``; ``None`` means now.

    Naive datetimes are taken as UTC.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if value is None:
        return now
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return max(MIN_EPOCH, min(value, now))


def select_cleanup_ids(items: Iterable[StoredProgress]) -> list[str]:
    """
    Pick the rows a cleanup sweep removes.

    Movies go when not started or completed. Episodes are judged per season:
    a season with any acceptable episode loses only its noise rows, a season
    with none loses every row.
    """
    by_title: dict[str, list[StoredProgress]] = defaultdict(list)
    for item in items:
        by_title[item.tmdb_id].append(item)

    to_delete: list[str] = []
    for title_items in by_title.values():
        seasons: dict[str, list[StoredProgress]] = defaultdict(list)
        for item in title_items:
            if item.episode_id == ABSENT:
                if not is_acceptable(int(item.duration), int(item.watched)):
                    to_delete.append(item.id)
            else:
                seasons[item.season_id].append(item)

        for season_items in seasons.values():
            if any_acceptable(season_items):
                to_delete.extend(
                    i.id for i in season_items if not is_acceptable(int(i.duration), int(i.watched))
                )
            else:
                to_delete.extend(i.id for i in season_items)

    return to_delete
