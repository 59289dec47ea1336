# carddraw/models.py
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple, Union

# A bucket is either one level or an inclusive (low, high) range of levels.
Level = Union[int, float]
Bucket = Union[Level, Tuple[Level, Level]]


@dataclass(frozen=True)
class DifficultyDef:
    key: str
    color: str = ""


@dataclass(frozen=True)
class CatalogMeta:
    lvl_max: int
    difficulties: Tuple[DifficultyDef, ...]
    styles: Tuple[str, ...]
    flags: Tuple[str, ...] = ()
    # e.g. 0.1 when charts carry sub-level tiers like 12.4
    granular_tier_resolution: Optional[float] = None
    # levels are displayed as tiers (T01, T02, ...)
    uses_tiers: bool = False


@dataclass(frozen=True)
class ChartRecord:
    """One difficulty of a song, as stored in the catalog."""
    style: str
    difficulty_class: str
    level: int
    tier: Optional[float] = None
    has_shock: bool = False
    flags: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class Song:
    name: str
    artist: str
    bpm: str
    charts: Tuple[ChartRecord, ...]
    name_translation: str = ""
    artist_translation: str = ""
    jacket: str = ""
    flags: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class Catalog:
    meta: CatalogMeta
    songs: Tuple[Song, ...]


@dataclass(frozen=True)
class EligibleChart:
    """A song/difficulty pair that passed the filters, with its resolved level."""
    name: str
    artist: str
    bpm: str
    style: str
    difficulty_class: str
    level: Level
    name_translation: str = ""
    artist_translation: str = ""
    jacket: str = ""
    has_shock: bool = False
    flags: FrozenSet[str] = frozenset()

    @property
    def song_key(self) -> str:
        return f"{self.name}:{self.artist}"


@dataclass(frozen=True)
class DrawnChart:
    """An eligible chart placed in a drawing; `id` is the join key for actions."""
    id: int
    chart: EligibleChart


class ActionKind(str, enum.Enum):
    BAN = "ban"
    PROTECT = "protect"
    POCKET_PICK = "pocket"


@dataclass(frozen=True)
class ChartAction:
    kind: ActionKind
    player: int
    # replacement chart, only for pocket picks
    pick: Optional[DrawnChart] = None


@dataclass(frozen=True)
class PlayerAction:
    chart_id: int
    player: int
    pick: Optional[DrawnChart] = None


@dataclass
class Drawing:
    """
    One completed draw. Keep this as a 'data bag' — logic lives in actions.py.

    `actions` maps chart id -> the single action applied to it; insertion
    order is the order the actions were taken.
    """
    id: int
    charts: List[DrawnChart] = field(default_factory=list)
    actions: Dict[int, ChartAction] = field(default_factory=dict)

    def _of_kind(self, kind: ActionKind) -> List[PlayerAction]:
        return [
            PlayerAction(chart_id=cid, player=a.player, pick=a.pick)
            for cid, a in self.actions.items()
            if a.kind is kind
        ]

    @property
    def bans(self) -> List[PlayerAction]:
        return self._of_kind(ActionKind.BAN)

    @property
    def protects(self) -> List[PlayerAction]:
        return self._of_kind(ActionKind.PROTECT)

    @property
    def pocket_picks(self) -> List[PlayerAction]:
        return self._of_kind(ActionKind.POCKET_PICK)

    def chart_by_id(self, chart_id: int) -> Optional[DrawnChart]:
        for chart in self.charts:
            if chart.id == chart_id:
                return chart
        return None


@dataclass(frozen=True)
class DrawConfig:
    """Read-only snapshot of the draw settings handed to every core operation."""
    chart_count: int = 5
    lower_bound: Level = 1
    upper_bound: Level = 1
    use_weights: bool = False
    # None entries mean "no weight entered" and read as 0
    weights: Tuple[Optional[int], ...] = ()
    force_distribution: bool = True
    probability_bucket_count: Optional[int] = None
    use_granular_levels: bool = False
    # empty string = any style
    style: str = ""
    difficulties: FrozenSet[str] = frozenset()
    flags: FrozenSet[str] = frozenset()
    order_by_action: bool = True
