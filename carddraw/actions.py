# carddraw/actions.py
from __future__ import annotations

import dataclasses
from typing import List, Optional, Sequence

from carddraw.config import PLAYERS
from carddraw.models import ActionKind, ChartAction, DrawConfig, Drawing, DrawnChart


def _index_of(charts: Sequence[DrawnChart], chart_id: int) -> int:
    for i, chart in enumerate(charts):
        if chart.id == chart_id:
            return i
    raise KeyError(f"Unknown chart id: {chart_id}")


def reorder(
    charts: Sequence[DrawnChart],
    kind: ActionKind,
    chart_id: int,
    kept_count: int,
) -> List[DrawnChart]:
    """
    New chart order after acting on `chart_id`:
      - ban: moved to the tail
      - protect / pocket pick: moved to index `kept_count` (the number of
        protects + pocket picks before this action), behind earlier keeps
    """
    out = list(charts)
    moved = out.pop(_index_of(out, chart_id))
    if kind is ActionKind.BAN:
        out.append(moved)
    else:
        out.insert(min(kept_count, len(out)), moved)
    return out


def chart_state(drawing: Drawing, chart_id: int) -> Optional[ChartAction]:
    """The action currently on a chart, or None when it is untouched."""
    return drawing.actions.get(chart_id)


def apply_action(
    drawing: Drawing,
    kind: ActionKind,
    chart_id: int,
    player: int,
    config: DrawConfig,
    pick: Optional[DrawnChart] = None,
) -> Drawing:
    """
    Toggle an action on a chart and return the updated drawing.

    Repeating the action a chart already has clears it. A different action
    replaces the current one, so a chart never carries two at once.
    """
    if player not in PLAYERS:
        raise ValueError(f"Unknown player: {player}")
    _index_of(drawing.charts, chart_id)

    charts = list(drawing.charts)
    if config.order_by_action:
        kept = len(drawing.protects) + len(drawing.pocket_picks)
        charts = reorder(charts, kind, chart_id, kept)

    actions = dict(drawing.actions)
    current = actions.pop(chart_id, None)
    if current is None or current.kind is not kind:
        if kind is ActionKind.POCKET_PICK and pick is None:
            raise ValueError("A pocket pick needs a replacement chart")
        actions[chart_id] = ChartAction(
            kind=kind,
            player=player,
            pick=pick if kind is ActionKind.POCKET_PICK else None,
        )
    return dataclasses.replace(drawing, charts=charts, actions=actions)


def ban(drawing: Drawing, chart_id: int, player: int, config: DrawConfig) -> Drawing:
    return apply_action(drawing, ActionKind.BAN, chart_id, player, config)


def protect(drawing: Drawing, chart_id: int, player: int, config: DrawConfig) -> Drawing:
    return apply_action(drawing, ActionKind.PROTECT, chart_id, player, config)


def pocket_pick(
    drawing: Drawing,
    chart_id: int,
    player: int,
    new_chart: DrawnChart,
    config: DrawConfig,
) -> Drawing:
    return apply_action(drawing, ActionKind.POCKET_PICK, chart_id, player, config, pick=new_chart)


def reset_chart(drawing: Drawing, chart_id: int) -> Drawing:
    """Clear whatever action is on the chart; no-op for an untouched chart."""
    if chart_id not in drawing.actions:
        return drawing
    actions = {cid: a for cid, a in drawing.actions.items() if cid != chart_id}
    return dataclasses.replace(drawing, actions=actions)
