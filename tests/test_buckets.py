from __future__ import annotations

import dataclasses

from carddraw.buckets import (
    bucket_index_for_level,
    decimal_digits,
    format_bucket,
    format_tier,
    get_buckets,
    range_buckets,
)


def test_one_bucket_per_available_level_within_bounds(base_config) -> None:
    cfg = dataclasses.replace(base_config, lower_bound=4, upper_bound=6)
    assert get_buckets(cfg, list(range(1, 11))) == [4, 5, 6]


def test_levels_missing_from_catalog_get_no_bucket(base_config) -> None:
    cfg = dataclasses.replace(base_config, lower_bound=1, upper_bound=9)
    assert get_buckets(cfg, [9, 1, 5, 2, 5]) == [1, 2, 5, 9]


def test_bucket_count_splits_range_with_last_absorbing_remainder(base_config) -> None:
    cfg = dataclasses.replace(base_config, use_weights=True, probability_bucket_count=3)
    assert get_buckets(cfg, list(range(1, 11))) == [(1, 3), (4, 6), (7, 10)]


def test_bucket_count_ignored_without_weights(base_config) -> None:
    cfg = dataclasses.replace(
        base_config, use_weights=False, probability_bucket_count=3, lower_bound=1, upper_bound=3)
    assert get_buckets(cfg, [1, 2, 3]) == [1, 2, 3]


def test_more_buckets_than_levels_collapses_to_single_levels() -> None:
    assert range_buckets(4, 6, 20) == [(4, 4), (5, 5), (6, 6)]


def test_granular_ranges_use_tier_resolution(base_config) -> None:
    cfg = dataclasses.replace(
        base_config,
        use_weights=True,
        use_granular_levels=True,
        probability_bucket_count=2,
        lower_bound=12,
        upper_bound=13,
    )
    assert get_buckets(cfg, [], tier_resolution=0.1) == [(12.0, 12.4), (12.5, 13.0)]


def test_buckets_are_stable_for_same_config(base_config) -> None:
    cfg = dataclasses.replace(base_config, use_weights=True, probability_bucket_count=4)
    levels = list(range(1, 11))
    assert get_buckets(cfg, levels) == get_buckets(cfg, levels)


def test_bucket_index_for_level() -> None:
    buckets = [(1, 3), (4, 6), (7, 10)]
    assert bucket_index_for_level(1, buckets) == 0
    assert bucket_index_for_level(6, buckets) == 1
    assert bucket_index_for_level(10, buckets) == 2
    assert bucket_index_for_level(11, buckets) is None
    assert bucket_index_for_level(5, [4, 5, 6]) == 1


def test_formatting() -> None:
    assert decimal_digits(None) == 0
    assert decimal_digits(0.1) == 1
    assert decimal_digits(0.01) == 2
    assert format_bucket(7) == "7"
    assert format_bucket((4, 6)) == "4-6"
    assert format_bucket((5, 5)) == "5"
    assert format_bucket((12.0, 12.4), 0.1) == "12.0-12.4"
    assert format_bucket(12.3, 0.1) == "12.3"
    assert format_tier(3) == "T03"
