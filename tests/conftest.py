from __future__ import annotations

import random
from typing import Callable

import pytest

from carddraw.models import Catalog, CatalogMeta, ChartRecord, DifficultyDef, DrawConfig, Song

META = CatalogMeta(
    lvl_max=10,
    difficulties=(DifficultyDef("basic", "#ffa500"), DifficultyDef("expert", "#32cd32")),
    styles=("single", "double"),
    flags=("unlock",),
    granular_tier_resolution=0.1,
)


def build_catalog(per_level: int = 4, levels=range(1, 11)) -> Catalog:
    """
    `per_level` songs at each level, each with a single and a double expert
    chart. Song n of a level has tier level + n/10; the last song of every
    level carries the "unlock" flag.
    """
    songs = []
    for level in levels:
        for n in range(per_level):
            tier = round(level + n / 10, 1) if n < 10 else None
            songs.append(Song(
                name=f"song {level}-{n}",
                artist=f"artist {n}",
                bpm=str(120 + 10 * n),
                charts=(
                    ChartRecord(style="single", difficulty_class="expert", level=level, tier=tier),
                    ChartRecord(style="double", difficulty_class="expert", level=level, tier=tier),
                ),
                flags=frozenset({"unlock"}) if n == per_level - 1 else frozenset(),
            ))
    return Catalog(meta=META, songs=tuple(songs))


@pytest.fixture
def catalog() -> Catalog:
    return build_catalog()


@pytest.fixture
def catalog_factory() -> Callable[..., Catalog]:
    return build_catalog


@pytest.fixture
def base_config() -> DrawConfig:
    return DrawConfig(
        chart_count=5,
        lower_bound=1,
        upper_bound=10,
        style="single",
        difficulties=frozenset({"expert"}),
    )


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)
