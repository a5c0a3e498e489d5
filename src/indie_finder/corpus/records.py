"""
Conversion of raw Steam app details into search records.
"""

from __future__ import annotations

from typing import Any

from .base import DiscoverySource, GameRecord, StructuredMetadata


# Category substring -> normalized play mode.
_PLAY_MODE_MARKERS: tuple[tuple[str, str], ...] = (
    ("single-player", "single-player"),
    ("multi-player", "multi-player"),
    ("co-op", "co-op"),
    ("pvp", "pvp"),
    ("split screen", "split-screen"),
)

_MAX_SCREENSHOTS = 4


def extract_play_modes(steam_data: dict[str, Any]) -> list[str]:
    modes: list[str] = []
    for category in steam_data.get("categories") or []:
        desc = str(category.get("description", "")).lower()
        for marker, mode in _PLAY_MODE_MARKERS:
            if marker in desc and mode not in modes:
                modes.append(mode)
    return modes


def format_price(steam_data: dict[str, Any]) -> str:
    overview = steam_data.get("price_overview") or {}
    formatted = overview.get("final_formatted")
    if formatted:
        return str(formatted)
    return "Free" if steam_data.get("is_free") else "N/A"


def genre_tags(steam_data: dict[str, Any]) -> list[str]:
    return [str(g["description"]) for g in steam_data.get("genres") or [] if g.get("description")]


def extract_structured_metadata(steam_data: dict[str, Any]) -> StructuredMetadata:
    release = steam_data.get("release_date") or {}
    return StructuredMetadata(
        tags=genre_tags(steam_data),
        play_modes=extract_play_modes(steam_data),
        price=format_price(steam_data),
        is_free=bool(steam_data.get("is_free", False)),
        release_status="Upcoming" if release.get("coming_soon") else "Released",
    )


def game_from_steam(
    app_id: str | int,
    steam_data: dict[str, Any] | None,
    *,
    embedding: list[float] | None = None,
    semantic_description: str = "",
    source: DiscoverySource | None = None,
) -> GameRecord:
    """Build a GameRecord from a Steam appdetails payload.

    A missing or empty payload yields a record without structured metadata,
    which keeps it out of every filtered strategy.
    """
    data = steam_data or {}
    release = data.get("release_date") or {}
    screenshots = [s.get("path_full", "") for s in (data.get("screenshots") or [])[:_MAX_SCREENSHOTS]]
    images = [img for img in [data.get("header_image", ""), *screenshots] if img]
    developers = [str(d) for d in data.get("developers") or []]

    return GameRecord(
        app_id=str(app_id),
        title=str(data.get("name", "")),
        description=str(data.get("short_description", "")),
        price=format_price(data),
        tags=genre_tags(data),
        release_date=str(release.get("date", "")),
        developer=", ".join(developers),
        publisher=", ".join(str(p) for p in data.get("publishers") or []),
        images=images,
        metadata=extract_structured_metadata(data) if data else None,
        embedding=embedding,
        semantic_description=semantic_description,
        source=source,
    )
