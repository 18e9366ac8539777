"""Shared schema base: snake_case in Python, camelCase on the wire."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MediaMeta(CamelModel):
    """Title metadata attached to progress, history and bookmark rows."""

    title: str
    year: int | None = None
    poster: str | None = None
    type: Literal["movie", "show"]


class ProgressMeta(MediaMeta):
    """Progress samples also arrive tagged ``tv``; anything but ``movie`` is episodic."""

    type: Literal["movie", "show", "tv"]
