# carddraw/eligibility.py
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator

from carddraw.catalog import chart_level
from carddraw.models import Catalog, ChartRecord, DrawConfig, EligibleChart, Song


def chart_is_eligible(config: DrawConfig, song: Song, chart: ChartRecord) -> bool:
    if config.style and chart.style != config.style:
        return False
    # no difficulties selected -> nothing is eligible
    if chart.difficulty_class not in config.difficulties:
        return False
    level = chart_level(chart, config.use_granular_levels)
    if level < config.lower_bound or level > config.upper_bound:
        return False
    if config.flags and not (config.flags & (song.flags | chart.flags)):
        return False
    return True


def eligible_charts(config: DrawConfig, catalog: Catalog) -> Iterator[EligibleChart]:
    """Every chart passing the filters, in catalog order."""
    for song in catalog.songs:
        for chart in song.charts:
            if not chart_is_eligible(config, song, chart):
                continue
            yield EligibleChart(
                name=song.name,
                artist=song.artist,
                bpm=song.bpm,
                style=chart.style,
                difficulty_class=chart.difficulty_class,
                level=chart_level(chart, config.use_granular_levels),
                name_translation=song.name_translation,
                artist_translation=song.artist_translation,
                jacket=song.jacket,
                has_shock=chart.has_shock,
                flags=song.flags | chart.flags,
            )


@dataclass(frozen=True)
class PoolSummary:
    chart_count: int
    song_count: int
    flag_counts: Dict[str, int]


def pool_summary(charts: Iterable[EligibleChart]) -> PoolSummary:
    """Counts shown above the eligible pool: charts, distinct songs, charts per flag."""
    songs = set()
    flags: Counter = Counter()
    total = 0
    for chart in charts:
        total += 1
        songs.add(chart.song_key)
        flags.update(chart.flags)
    return PoolSummary(chart_count=total, song_count=len(songs), flag_counts=dict(flags))
