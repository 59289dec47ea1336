# carddraw/draw.py
from __future__ import annotations

import dataclasses
import logging
import random
from typing import Iterable, List, Optional, Sequence

from carddraw.buckets import bucket_index_for_level, get_buckets
from carddraw.catalog import available_levels
from carddraw.config import REDRAW_COUNT
from carddraw.distribution import bucket_weights, capped_quotas, compute_distribution
from carddraw.eligibility import eligible_charts
from carddraw.models import Bucket, Catalog, DrawConfig, Drawing, DrawnChart, EligibleChart

logger = logging.getLogger(__name__)


def assign_ids(charts: Iterable[EligibleChart]) -> List[DrawnChart]:
    return [DrawnChart(id=i, chart=chart) for i, chart in enumerate(charts)]


def _sample(rng: random.Random, pool: Sequence[EligibleChart], k: int) -> List[EligibleChart]:
    return rng.sample(list(pool), min(max(k, 0), len(pool)))


def _split_by_bucket(
    pool: Sequence[EligibleChart],
    buckets: Sequence[Bucket],
) -> List[List[EligibleChart]]:
    sub_pools: List[List[EligibleChart]] = [[] for _ in buckets]
    for chart in pool:
        idx = bucket_index_for_level(chart.level, buckets)
        if idx is not None:
            sub_pools[idx].append(chart)
    return sub_pools


def _draw_forced(
    rng: random.Random,
    sub_pools: List[List[EligibleChart]],
    quotas: Sequence[int],
    total: int,
) -> List[EligibleChart]:
    """Fill each bucket's quota in order; later buckets are shorted once total is hit."""
    picked: List[EligibleChart] = []
    for sub_pool, quota in zip(sub_pools, capped_quotas(quotas, total)):
        picked.extend(_sample(rng, sub_pool, quota))
    return picked


def _draw_weighted(
    rng: random.Random,
    sub_pools: List[List[EligibleChart]],
    bucket_ws: Sequence[int],
    total: int,
) -> List[EligibleChart]:
    """
    Pick a bucket by weight for every chart, then a random chart from it.
    Exhausted or unweighted buckets drop out. Results are grouped by bucket.
    """
    remaining = [list(sub) for sub in sub_pools]
    drawn: List[List[EligibleChart]] = [[] for _ in sub_pools]
    count = 0
    while count < total:
        candidates = [i for i, sub in enumerate(remaining) if sub and bucket_ws[i] > 0]
        if not candidates:
            break
        i = rng.choices(candidates, weights=[bucket_ws[c] for c in candidates])[0]
        drawn[i].append(remaining[i].pop(rng.randrange(len(remaining[i]))))
        count += 1
    return [chart for group in drawn for chart in group]


def draw(
    catalog: Catalog,
    config: DrawConfig,
    rng: Optional[random.Random] = None,
    drawing_id: int = 0,
    exclude: Iterable[EligibleChart] = (),
) -> Drawing:
    """
    Draw up to config.chart_count charts without replacement.

    The result may hold fewer charts than requested when the pool runs dry;
    callers compare len(drawing.charts) to chart_count.
    """
    rng = rng or random.Random()
    excluded = set(exclude)
    pool = [c for c in eligible_charts(config, catalog) if c not in excluded]
    total = max(0, config.chart_count)

    if not config.use_weights:
        picked = _sample(rng, pool, total)
    else:
        granular = config.use_granular_levels
        resolution = catalog.meta.granular_tier_resolution
        buckets = get_buckets(config, available_levels(catalog, granular), resolution)
        sub_pools = _split_by_bucket(pool, buckets)
        if config.force_distribution:
            quotas = compute_distribution(buckets, config.weights, total, True)
            logger.debug("Forced quotas %s over buckets %s", quotas, buckets)
            picked = _draw_forced(rng, sub_pools, quotas, total)
        else:
            bucket_ws = bucket_weights(buckets, config.weights)
            logger.debug("Bucket weights %s over buckets %s", bucket_ws, buckets)
            picked = _draw_weighted(rng, sub_pools, bucket_ws, total)

    if len(picked) < total:
        logger.warning(
            "Under-filled draw: %d of %d charts (pool of %d)", len(picked), total, len(pool))
    return Drawing(id=drawing_id, charts=assign_ids(picked))


def redraw_chart(
    drawing: Drawing,
    chart_id: int,
    catalog: Catalog,
    config: DrawConfig,
    rng: Optional[random.Random] = None,
) -> Drawing:
    """
    Swap one chart for a fresh draw, keeping its id and position. Charts already
    in the drawing are not drawn again. If nothing is left to draw the drawing
    comes back unchanged.
    """
    if drawing.chart_by_id(chart_id) is None:
        raise KeyError(f"Unknown chart id: {chart_id}")

    single = draw(
        catalog,
        dataclasses.replace(config, chart_count=REDRAW_COUNT),
        rng,
        exclude=[c.chart for c in drawing.charts],
    )
    if not single.charts:
        logger.info("No replacement available for chart %d of drawing %d", chart_id, drawing.id)
        return drawing

    fresh = DrawnChart(id=chart_id, chart=single.charts[0].chart)
    charts = [fresh if c.id == chart_id else c for c in drawing.charts]
    return dataclasses.replace(drawing, charts=charts)
