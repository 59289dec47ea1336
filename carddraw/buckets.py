# carddraw/buckets.py
from __future__ import annotations

from typing import List, Optional, Sequence

from carddraw.models import Bucket, DrawConfig, Level


def decimal_digits(resolution: Optional[float]) -> int:
    """0.1 -> 1, 0.01 -> 2, None/1 -> 0."""
    if not resolution or resolution >= 1:
        return 0
    return len(str(int(round(1 / resolution)))) - 1


def _as_level(value: float, digits: int) -> Level:
    return int(round(value)) if digits == 0 else round(value, digits)


def range_buckets(
    low: Level,
    high: Level,
    count: int,
    step: float = 1,
) -> List[Bucket]:
    """
    Split [low, high] into `count` equal-width contiguous ranges on a grid of
    `step`. The last range absorbs whatever does not divide evenly.
    """
    digits = decimal_digits(step)
    n_values = int(round((high - low) / step)) + 1
    if n_values <= 0 or count <= 0:
        return []
    count = min(count, n_values)
    per = n_values // count

    out: List[Bucket] = []
    for i in range(count):
        start = i * per
        end = n_values - 1 if i == count - 1 else (i + 1) * per - 1
        out.append((
            _as_level(low + start * step, digits),
            _as_level(low + end * step, digits),
        ))
    return out


def get_buckets(
    config: DrawConfig,
    levels: Sequence[Level],
    tier_resolution: Optional[float] = None,
) -> List[Bucket]:
    """
    Buckets addressed by the weights, ascending.

    With a bucket count (and weights on), [lower, upper] is cut into that many
    ranges; otherwise every available level inside the bounds is its own bucket.
    """
    lower, upper = config.lower_bound, config.upper_bound
    if config.use_weights and config.probability_bucket_count:
        step = tier_resolution if (config.use_granular_levels and tier_resolution) else 1
        return range_buckets(lower, upper, config.probability_bucket_count, step)
    return sorted(lvl for lvl in set(levels) if lower <= lvl <= upper)


def bucket_contains(bucket: Bucket, level: Level) -> bool:
    if isinstance(bucket, tuple):
        return bucket[0] <= level <= bucket[1]
    return bucket == level


def bucket_index_for_level(level: Level, buckets: Sequence[Bucket]) -> Optional[int]:
    for idx, bucket in enumerate(buckets):
        if bucket_contains(bucket, level):
            return idx
    return None


def format_tier(level: Level) -> str:
    return f"T{int(level):02d}"


def format_bucket(bucket: Bucket, resolution: Optional[float] = None) -> str:
    digits = decimal_digits(resolution)
    if not isinstance(bucket, tuple):
        return f"{bucket:.{digits}f}" if digits else str(bucket)
    low, high = bucket
    if low == high:
        return f"{low:.{digits}f}"
    return f"{low:.{digits}f}-{high:.{digits}f}"
