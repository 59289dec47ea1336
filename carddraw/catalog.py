# carddraw/catalog.py
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from carddraw.models import (
    Catalog,
    CatalogMeta,
    ChartRecord,
    DifficultyDef,
    Level,
    Song,
)

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """The catalog document is missing required structure."""


def _parse_meta(raw: Dict[str, Any]) -> CatalogMeta:
    difficulties = []
    for d in raw.get("difficulties", []):
        if isinstance(d, str):
            difficulties.append(DifficultyDef(key=d))
        else:
            difficulties.append(DifficultyDef(key=str(d["key"]), color=str(d.get("color", ""))))

    resolution = raw.get("granularTierResolution")
    return CatalogMeta(
        lvl_max=int(raw["lvlMax"]),
        difficulties=tuple(difficulties),
        styles=tuple(str(s) for s in raw.get("styles", [])),
        flags=tuple(str(f) for f in raw.get("flags", [])),
        granular_tier_resolution=float(resolution) if resolution else None,
        uses_tiers=bool(raw.get("usesTiers", False)),
    )


def _parse_chart(raw: Dict[str, Any]) -> ChartRecord:
    tier = raw.get("tier", raw.get("sanbaiTier"))
    return ChartRecord(
        style=str(raw["style"]),
        difficulty_class=str(raw["diffClass"]),
        level=int(raw["lvl"]),
        tier=float(tier) if tier is not None else None,
        has_shock=bool(raw.get("shock", False)),
        flags=frozenset(raw.get("flags", [])),
    )


def _parse_song(raw: Dict[str, Any]) -> Song:
    charts: List[ChartRecord] = []
    for c in raw.get("charts", []):
        try:
            charts.append(_parse_chart(c))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed chart of %r: %s", raw.get("name"), e)
    return Song(
        name=str(raw["name"]),
        artist=str(raw.get("artist", "")),
        bpm=str(raw.get("bpm", "")),
        charts=tuple(charts),
        name_translation=str(raw.get("name_translation", "")),
        artist_translation=str(raw.get("artist_translation", "")),
        jacket=str(raw.get("jacket", "")),
        flags=frozenset(raw.get("flags", [])),
    )


def catalog_from_dict(raw: Dict[str, Any]) -> Catalog:
    try:
        meta = _parse_meta(raw["meta"])
        raw_songs = raw["songs"]
    except (KeyError, TypeError, ValueError) as e:
        raise CatalogError(f"Invalid catalog: {e}") from e

    songs: List[Song] = []
    for s in raw_songs:
        try:
            songs.append(_parse_song(s))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed song record: %s", e)
    return Catalog(meta=meta, songs=tuple(songs))


def load_catalog(path: str) -> Catalog:
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    catalog = catalog_from_dict(raw)
    logger.info("Loaded %d songs from %s", len(catalog.songs), path)
    return catalog


def chart_level(chart: ChartRecord, use_granular: bool = False) -> Level:
    """The level used for filtering and bucketing (sub-level tier when granular)."""
    if use_granular and chart.tier is not None:
        return chart.tier
    return chart.level


def available_levels(catalog: Optional[Catalog], use_granular: bool = False) -> List[Level]:
    """All distinct levels present in the catalog, ascending."""
    if catalog is None:
        return []
    levels = {
        chart_level(chart, use_granular)
        for song in catalog.songs
        for chart in song.charts
    }
    return sorted(levels)
