from __future__ import annotations

import random

import pytest

from carddraw.distribution import (
    bucket_weights,
    capped_quotas,
    compute_distribution,
    describe_distribution,
)

WEIGHTS = (3, 1, 0)
BUCKETS = [4, 5, 6]


def test_forced_quotas_round_up_and_cap_in_bucket_order() -> None:
    quotas = compute_distribution(BUCKETS, WEIGHTS, 10, True)
    assert quotas == [8, 3, 0]
    assert sum(quotas) >= 10
    assert capped_quotas(quotas, 10) == [8, 2, 0]


def test_weighted_probabilities() -> None:
    probs = compute_distribution(BUCKETS, WEIGHTS, 10, False)
    assert probs == pytest.approx([0.75, 0.25, 0.0])


def test_zero_total_weight_is_all_zero() -> None:
    assert compute_distribution(BUCKETS, (), 10, False) == [0.0, 0.0, 0.0]
    assert compute_distribution(BUCKETS, (), 10, True) == [0, 0, 0]
    assert describe_distribution(BUCKETS, (), 10, False) == ["0%", "0%", "0%"]
    assert describe_distribution(BUCKETS, (), 10, True) == ["0", "0", "0"]


def test_sole_weighted_bucket_takes_everything() -> None:
    weights = (0, 2)
    assert compute_distribution(BUCKETS, weights, 7, True) == [0, 7, 0]
    assert describe_distribution(BUCKETS, weights, 7, True) == ["0", "7", "0"]


def test_missing_and_none_weights_read_as_zero() -> None:
    assert bucket_weights([4, 5, 20], (None, 2)) == [0, 2, 0]


def test_range_buckets_use_positional_weights() -> None:
    assert bucket_weights([(1, 5), (6, 10)], (0, 4)) == [0, 4]


def test_describe_distribution_labels() -> None:
    assert describe_distribution(BUCKETS, WEIGHTS, 10, True) == ["7-8", "2-3", "0"]
    assert describe_distribution(BUCKETS, WEIGHTS, 10, False) == ["75%", "25%", "0%"]


def test_forced_quotas_never_fall_short_of_total() -> None:
    rng = random.Random(7)
    buckets = list(range(1, 9))
    for _ in range(200):
        weights = tuple(rng.choice([0, 0, 1, 2, 3, 7]) for _ in range(9))
        total = rng.randint(1, 20)
        quotas = compute_distribution(buckets, weights, total, True)
        if any(bucket_weights(buckets, weights)):
            assert sum(quotas) >= total
        assert sum(capped_quotas(quotas, total)) <= total


def test_whole_level_buckets_are_weighted_by_position() -> None:
    assert bucket_weights([4, 5, 6], (3, 1, 0)) == [3, 1, 0]
    assert bucket_weights([13], (5,)) == [5]
    # slots past the bucket count are never read
    assert compute_distribution(BUCKETS, (0, 0, 0, 3, 1, 0), 10, True) == [0, 0, 0]
