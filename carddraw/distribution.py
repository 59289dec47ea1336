# carddraw/distribution.py
from __future__ import annotations

from typing import List, Optional, Sequence, Union

from carddraw.models import Bucket


def bucket_weights(
    buckets: Sequence[Bucket],
    weights: Sequence[Optional[int]],
) -> List[int]:
    """
    Weight of each bucket, addressed by position: weights[i] is bucket i.
    Missing, None and negative entries read as 0.
    """
    out: List[int] = []
    for idx in range(len(buckets)):
        w = weights[idx] if idx < len(weights) else None
        out.append(max(0, int(w)) if w else 0)
    return out


def probabilities(bucket_ws: Sequence[int]) -> List[float]:
    total_weight = sum(bucket_ws)
    if total_weight <= 0:
        return [0.0 for _ in bucket_ws]
    return [w / total_weight for w in bucket_ws]


def forced_quotas(bucket_ws: Sequence[int], total_to_draw: int) -> List[int]:
    """
    ceil(total_to_draw * w / total_weight) per bucket, in exact integer math.
    The sum may exceed total_to_draw; see capped_quotas.
    """
    total_weight = sum(bucket_ws)
    if total_weight <= 0 or total_to_draw <= 0:
        return [0 for _ in bucket_ws]
    return [-(-total_to_draw * w // total_weight) for w in bucket_ws]


def compute_distribution(
    buckets: Sequence[Bucket],
    weights: Sequence[Optional[int]],
    total_to_draw: int,
    force_distribution: bool,
) -> Union[List[int], List[float]]:
    """
    Forced mode: integer quota per bucket (rounded up).
    Weighted mode: probability per bucket (all 0.0 when nothing is weighted).
    """
    bucket_ws = bucket_weights(buckets, weights)
    if force_distribution:
        return forced_quotas(bucket_ws, total_to_draw)
    return probabilities(bucket_ws)


def capped_quotas(quotas: Sequence[int], total_to_draw: int) -> List[int]:
    """Trim quotas in bucket order so they never sum past total_to_draw."""
    remaining = max(0, total_to_draw)
    out: List[int] = []
    for q in quotas:
        take = min(q, remaining)
        out.append(take)
        remaining -= take
    return out


def describe_distribution(
    buckets: Sequence[Bucket],
    weights: Sequence[Optional[int]],
    total_to_draw: int,
    force_distribution: bool,
) -> List[str]:
    """
    Label per bucket for the weights panel: "8" / "7-8" / "0" in forced mode,
    "75%" in weighted mode.
    """
    bucket_ws = bucket_weights(buckets, weights)
    probs = probabilities(bucket_ws)
    if not force_distribution:
        return [f"{p:.0%}" for p in probs]

    labels: List[str] = []
    for p, q in zip(probs, forced_quotas(bucket_ws, total_to_draw)):
        if p == 1:
            labels.append(str(total_to_draw))
        elif not q:
            labels.append("0")
        else:
            labels.append(f"{q - 1}-{q}")
    return labels
