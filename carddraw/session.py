# carddraw/session.py
from __future__ import annotations

import dataclasses
import logging
import math
import random
from typing import Any, Callable, List, Mapping, Optional, Union

from carddraw import actions
from carddraw.config import (
    CHART_COUNT,
    FORCE_DISTRIBUTION,
    LOWER_BOUND,
    MIN_BUCKET_COUNT,
    ORDER_BY_ACTION,
    UPPER_BOUND,
    USE_WEIGHTS,
    WEIGHTS,
)
from carddraw.draw import draw, redraw_chart
from carddraw.eligibility import eligible_charts
from carddraw.models import (
    ActionKind,
    Catalog,
    CatalogMeta,
    DrawConfig,
    Drawing,
    DrawnChart,
    EligibleChart,
)

logger = logging.getLogger(__name__)

ConfigChange = Union[
    DrawConfig,
    Mapping[str, Any],
    Callable[[DrawConfig], Union[DrawConfig, Mapping[str, Any]]],
]


def default_config(meta: Optional[CatalogMeta] = None) -> DrawConfig:
    upper = UPPER_BOUND
    if not upper:
        upper = meta.lvl_max if meta else LOWER_BOUND
    return DrawConfig(
        chart_count=CHART_COUNT,
        lower_bound=LOWER_BOUND,
        upper_bound=upper,
        use_weights=USE_WEIGHTS,
        weights=WEIGHTS,
        force_distribution=FORCE_DISTRIBUTION,
        style=meta.styles[0] if meta and meta.styles else "",
        difficulties=frozenset(d.key for d in meta.difficulties) if meta else frozenset(),
        order_by_action=ORDER_BY_ACTION,
    )


def _as_int(value: Any) -> Optional[int]:
    """Whole numbers only; anything else (NaN, 2.5, "abc", True) is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


class ConfigStore:
    """
    Holds the current DrawConfig snapshot. Edits coming from the settings form
    go through the set_*/toggle_* methods, which ignore invalid input.
    """

    def __init__(self, config: DrawConfig, meta: Optional[CatalogMeta] = None) -> None:
        self._config = config
        self._meta = meta
        self._subscribers: List[Callable[[DrawConfig], None]] = []

    def get(self) -> DrawConfig:
        return self._config

    def subscribe(self, callback: Callable[[DrawConfig], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def update(self, change: ConfigChange) -> DrawConfig:
        """Apply a full config, a mapping of changed fields, or a mutator."""
        if callable(change) and not isinstance(change, DrawConfig):
            change = change(self._config)
        if isinstance(change, DrawConfig):
            new = change
        else:
            new = dataclasses.replace(self._config, **dict(change))
        if new != self._config:
            self._config = new
            for callback in list(self._subscribers):
                callback(new)
        return self._config

    # --- validated edits ---

    def set_chart_count(self, value: Any) -> DrawConfig:
        n = _as_int(value)
        if n is None or n < 1:
            return self._config
        return self.update({"chart_count": n})

    def set_lower_bound(self, value: Any) -> DrawConfig:
        n = _as_int(value)
        if n is None or n < 1 or n > self._config.upper_bound:
            return self._config
        return self.update({"lower_bound": n})

    def set_upper_bound(self, value: Any) -> DrawConfig:
        n = _as_int(value)
        if n is None or n < self._config.lower_bound:
            return self._config
        if self._meta and n > max(self._config.lower_bound, self._meta.lvl_max):
            return self._config
        return self.update({"upper_bound": n})

    def set_weight(self, index: int, value: Any) -> DrawConfig:
        """None or "" clears the weight; non-integers and negatives are ignored."""
        if index < 0:
            return self._config
        if value is None or value == "":
            w: Optional[int] = None
        else:
            w = _as_int(value)
            if w is None or w < 0:
                return self._config
        weights = list(self._config.weights)
        if index >= len(weights):
            weights.extend([None] * (index + 1 - len(weights)))
        weights[index] = w
        return self.update({"weights": tuple(weights)})

    def toggle_bucket_count(self) -> DrawConfig:
        cfg = self._config
        if cfg.probability_bucket_count:
            return self.update({"probability_bucket_count": None})
        span = int(cfg.upper_bound - cfg.lower_bound + 1)
        return self.update({"probability_bucket_count": max(span, MIN_BUCKET_COUNT)})

    def set_bucket_count(self, value: Any) -> DrawConfig:
        n = _as_int(value)
        if n is None or n < MIN_BUCKET_COUNT or not self._config.probability_bucket_count:
            return self._config
        return self.update({"probability_bucket_count": n})

    def toggle_force_distribution(self) -> DrawConfig:
        return self.update({"force_distribution": not self._config.force_distribution})

    def set_style(self, style: str) -> DrawConfig:
        if self._meta and style and style not in self._meta.styles:
            return self._config
        return self.update({"style": style})

    def toggle_difficulty(self, key: str) -> DrawConfig:
        return self.update({"difficulties": self._config.difficulties ^ {key}})

    def toggle_flag(self, key: str) -> DrawConfig:
        return self.update({"flags": self._config.flags ^ {key}})


class DrawSession:
    """
    One user's drawings against a catalog. Drawings are kept newest first and
    live only as long as the session.
    """

    def __init__(
        self,
        catalog: Catalog,
        config: Optional[DrawConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.catalog = catalog
        self.store = ConfigStore(config or default_config(catalog.meta), catalog.meta)
        self.rng = rng or random.Random()
        self.drawings: List[Drawing] = []
        self.last_draw_failed = False
        self._next_id = 0
        # view state: pool listing instead of drawings
        self.show_pool = False

    @property
    def config(self) -> DrawConfig:
        return self.store.get()

    def eligible_pool(self) -> List[EligibleChart]:
        return list(eligible_charts(self.config, self.catalog))

    def draw(self) -> Drawing:
        cfg = self.config
        drawing = draw(self.catalog, cfg, self.rng, drawing_id=self._next_id)
        self._next_id += 1
        self.last_draw_failed = len(drawing.charts) < cfg.chart_count
        if drawing.charts:
            self.drawings.insert(0, drawing)
        else:
            logger.info("Draw %d produced no charts; not kept", drawing.id)
        return drawing

    def get_drawing(self, drawing_id: int) -> Drawing:
        for drawing in self.drawings:
            if drawing.id == drawing_id:
                return drawing
        raise KeyError(f"Unknown drawing id: {drawing_id}")

    def _store(self, drawing: Drawing) -> Drawing:
        self.drawings = [drawing if d.id == drawing.id else d for d in self.drawings]
        return drawing

    def act(
        self,
        drawing_id: int,
        kind: ActionKind,
        chart_id: int,
        player: int,
        pick: Optional[EligibleChart] = None,
    ) -> Drawing:
        drawing = self.get_drawing(drawing_id)
        # the replacement takes over the slot of the chart it replaces
        drawn_pick = DrawnChart(id=chart_id, chart=pick) if pick is not None else None
        return self._store(
            actions.apply_action(drawing, kind, chart_id, player, self.config, pick=drawn_pick))

    def reset_chart(self, drawing_id: int, chart_id: int) -> Drawing:
        return self._store(actions.reset_chart(self.get_drawing(drawing_id), chart_id))

    def redraw_chart(self, drawing_id: int, chart_id: int) -> Drawing:
        drawing = self.get_drawing(drawing_id)
        return self._store(redraw_chart(drawing, chart_id, self.catalog, self.config, self.rng))

    def clear_drawing(self, drawing_id: int) -> None:
        self.get_drawing(drawing_id)
        self.drawings = [d for d in self.drawings if d.id != drawing_id]

    def toggle_pool_view(self) -> bool:
        self.show_pool = not self.show_pool
        return self.show_pool

    def clear_all(self) -> None:
        self.drawings = []
        self.last_draw_failed = False
