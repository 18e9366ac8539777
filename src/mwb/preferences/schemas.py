"""User application settings."""

from __future__ import annotations

from mwb.schemas import CamelModel


class UserSettingsSchema(CamelModel):
    """
    Client preferences stored as one JSON document per user.

    Every field has a default, so a user with no stored row still gets a
    complete document and a PUT may send only what it changes.
    """

    application_theme: str | None = None
    application_language: str = "en"
    default_subtitle_language: str | None = None
    proxy_urls: list[str] | None = None
    trakt_key: str | None = None
    febbox_key: str | None = None
    debrid_token: str | None = None
    debrid_service: str | None = None
    enable_thumbnails: bool = False
    enable_autoplay: bool = True
    enable_skip_credits: bool = True
    enable_discover: bool = True
    enable_featured: bool = False
    enable_details_modal: bool = False
    enable_image_logos: bool = True
    enable_carousel_view: bool = False
    force_compact_episode_view: bool = False
    source_order: list[str] = []
    enable_source_order: bool = False
    disabled_sources: list[str] = []
    embed_order: list[str] = []
    enable_embed_order: bool = False
    disabled_embeds: list[str] = []
    proxy_tmdb: bool = False
    enable_low_performance_mode: bool = False
    enable_native_subtitles: bool = False
    enable_hold_to_boost: bool = False
    home_section_order: list[str] = []
    manual_source_selection: bool = False
    enable_double_click_to_seek: bool = False


class UserSettingsResponse(UserSettingsSchema):
    id: str


class SettingsSavedResponse(CamelModel):
    success: bool = True
