from __future__ import annotations

import json
from pathlib import Path

import pytest

from carddraw.catalog import (
    CatalogError,
    available_levels,
    catalog_from_dict,
    chart_level,
    load_catalog,
)
from carddraw.config import CATALOG_PATH

RAW = {
    "meta": {
        "lvlMax": 19,
        "styles": ["single"],
        "difficulties": [{"key": "expert", "color": "#32cd32"}, "challenge"],
        "flags": ["unlock"],
        "granularTierResolution": 0.1,
    },
    "songs": [
        {
            "name": "MAX 300",
            "artist": "Omega",
            "bpm": "300",
            "flags": ["unlock"],
            "charts": [
                {"style": "single", "diffClass": "expert", "lvl": 16, "sanbaiTier": 16.6, "shock": True},
                {"style": "single", "diffClass": "challenge"},
            ],
        },
        {"artist": "nameless"},
        {
            "name": "Butterfly",
            "artist": "SMiLE.dk",
            "bpm": 135,
            "charts": [{"style": "single", "diffClass": "expert", "lvl": 9, "flags": ["tempUnlock"]}],
        },
    ],
}


def test_catalog_from_dict_parses_and_skips_malformed() -> None:
    catalog = catalog_from_dict(RAW)
    assert catalog.meta.lvl_max == 19
    assert [d.key for d in catalog.meta.difficulties] == ["expert", "challenge"]
    assert catalog.meta.granular_tier_resolution == 0.1

    assert [s.name for s in catalog.songs] == ["MAX 300", "Butterfly"]
    max300 = catalog.songs[0]
    assert len(max300.charts) == 1
    assert max300.charts[0].has_shock
    assert max300.charts[0].tier == 16.6
    assert max300.flags == {"unlock"}
    assert catalog.songs[1].bpm == "135"
    assert catalog.songs[1].charts[0].flags == {"tempUnlock"}


def test_missing_structure_raises() -> None:
    with pytest.raises(CatalogError):
        catalog_from_dict({"songs": []})
    with pytest.raises(CatalogError):
        catalog_from_dict({"meta": RAW["meta"]})


def test_load_catalog_from_file(tmp_path: Path) -> None:
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(RAW), encoding="utf-8")
    catalog = load_catalog(str(path))
    assert len(catalog.songs) == 2


def test_bundled_catalog_loads() -> None:
    catalog = load_catalog(CATALOG_PATH)
    assert catalog.songs
    assert catalog.meta.styles == ("single", "double")


def test_levels() -> None:
    catalog = catalog_from_dict(RAW)
    chart = catalog.songs[0].charts[0]
    assert chart_level(chart) == 16
    assert chart_level(chart, use_granular=True) == 16.6
    # no tier -> whole level even in granular mode
    assert chart_level(catalog.songs[1].charts[0], use_granular=True) == 9
    assert available_levels(catalog) == [9, 16]
    assert available_levels(catalog, use_granular=True) == [9, 16.6]
    assert available_levels(None) == []
