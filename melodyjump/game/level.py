# melodyjump/game/level.py
from __future__ import annotations
import logging
import math
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .config import GameConfig, NOTE_LETTERS

logger = logging.getLogger(__name__)


@dataclass
class Platform:
    x: float
    y: float
    w: float
    h: float
    is_moving: bool = False
    move_speed: float = 0.0   # radians per second
    move_range: float = 0.0   # pixels left/right from initial_x
    initial_x: float = 0.0    # oscillation anchor
    important: bool = False
    is_ground: bool = False
    dx: float = 0.0           # displacement of the last movement step

    def __post_init__(self):
        if not self.initial_x:
            self.initial_x = self.x

    @property
    def rect(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.w, self.h)

    @property
    def center_x(self) -> float:
        return self.x + self.w / 2

    def update_movement(self, t: float):
        """Place a moving platform on its sine path at elapsed time t (seconds)."""
        if not self.is_moving:
            self.dx = 0.0
            return
        new_x = self.initial_x + math.sin(t * self.move_speed) * self.move_range
        self.dx = new_x - self.x
        self.x = new_x


@dataclass
class Note:
    x: float              # top-left of a note_size square
    y: float
    size: float
    platform_index: int   # owning platform in the level's platform list
    letter: str = "C"
    collected: bool = False

    @property
    def rect(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.size, self.size)

    def anchor_to(self, platform: Platform, gap: float):
        """Sit the note centred just above the platform's top."""
        self.x = platform.initial_x + platform.w / 2 - self.size / 2
        self.y = platform.y - gap - self.size


def _clamp(v: float, lo: float, hi: float) -> float:
    return lo if v < lo else (hi if v > hi else v)


def _free_spans(lo: float, hi: float, blocked: List[Tuple[float, float]]) -> List[Tuple[float, float]]:
    """Subtract blocked intervals from [lo, hi]."""
    spans = []
    cursor = lo
    for b_lo, b_hi in sorted(blocked):
        if b_lo > cursor:
            spans.append((cursor, min(b_lo, hi)))
        cursor = max(cursor, b_hi)
        if cursor >= hi:
            break
    if cursor < hi:
        spans.append((cursor, hi))
    return [(a, b) for a, b in spans if b > a]


class LevelGen:
    """
    Builds one level: a full-width ground, a stack of static platforms whose
    horizontal steps never exceed the player's jump reach, optional moving
    platforms between statics, and notes above every Nth static platform.
    The same generator also re-places platforms recycled during scrolling.
    """
    def __init__(self, config: GameConfig, seed: int | None = None):
        if seed is None:
            seed = random.randrange(0, 2**32 - 1)
        self.config = config
        self.seed = seed
        self.rng = random.Random(seed)

    # -------------------- Generation --------------------

    def generate(self, level: int, width: Optional[float] = None,
                 height: Optional[float] = None) -> Tuple[List[Platform], List[Note]]:
        cfg = self.config
        width = cfg.canvas_width if width is None else width
        height = cfg.canvas_height if height is None else height

        ground = Platform(x=0.0, y=height - cfg.ground_height, w=float(width),
                          h=cfg.ground_height, is_ground=True)

        count = cfg.base_platforms + level * cfg.platforms_per_level
        statics: List[Platform] = []
        prev_x = cfg.spawn_x
        y = ground.y
        for i in range(count):
            y -= cfg.platform_spacing
            important = (i % cfg.important_every) == cfg.important_every - 1
            w = self._rand_w(important)
            x = self.pick_x(prev_x, w, cfg.platform_spacing, width)
            statics.append(Platform(x=x, y=y, w=w, h=cfg.platform_height, important=important))
            prev_x = x

        # Interleave moving platforms between consecutive statics (never after the ground)
        platforms: List[Platform] = [ground]
        static_index: List[int] = []
        for i, plat in enumerate(statics):
            static_index.append(len(platforms))
            platforms.append(plat)
            if i + 1 < len(statics):
                moving = self._maybe_moving_between(plat, statics[i + 1], width)
                if moving is not None:
                    platforms.append(moving)

        notes: List[Note] = []
        for i, plat in enumerate(statics):
            if i % cfg.note_every != 0:
                continue
            note = Note(x=0.0, y=0.0, size=cfg.note_size, platform_index=static_index[i],
                        letter=self.rng.choice(NOTE_LETTERS))
            note.anchor_to(plat, cfg.note_gap)
            notes.append(note)

        logger.debug("level %d (seed %s): %d platforms (%d moving), %d notes",
                     level, self.seed, len(platforms),
                     sum(1 for p in platforms if p.is_moving), len(notes))
        return platforms, notes

    def _rand_w(self, important: bool) -> float:
        lo, hi = self.config.important_width if important else self.config.normal_width
        return float(int(self.rng.uniform(lo, hi)))

    def pick_x(self, prev_x: float, w: float, rise: float, width: Optional[float] = None) -> float:
        """
        Left edge for a platform of width w placed `rise` px above a platform
        whose left edge is prev_x. The step is capped by the jump reach for
        that rise and the result stays inside the edge margins.
        """
        cfg = self.config
        width = cfg.canvas_width if width is None else width
        lo = cfg.edge_margin
        hi = max(lo, width - w - cfg.edge_margin)

        reach = cfg.jump_reach(rise) * cfg.reach_safety
        max_d = min(cfg.max_jump, reach)
        min_d = min(cfg.min_jump, max_d)
        d = self.rng.uniform(min_d, max_d)
        direction = self.rng.choice((-1, 1))

        x = prev_x + direction * d
        if not lo <= x <= hi:
            # reflect to the other side before falling back to the edge
            x = prev_x - direction * d
        x = _clamp(x, lo, hi)
        x = _clamp(x, prev_x - reach, prev_x + reach)
        return _clamp(x, lo, hi)

    def _maybe_moving_between(self, lower: Platform, upper: Platform, width: float) -> Optional[Platform]:
        cfg = self.config
        if self.rng.random() > cfg.moving_chance:
            return None
        w = self._rand_w(False)
        # keep the oscillation band (plus a player width) clear of both neighbours
        pad = cfg.player_w
        blocked = [(p.x - pad, p.x + p.w + pad) for p in (lower, upper)]
        spans = _free_spans(cfg.edge_margin, width - cfg.edge_margin, blocked)
        if not spans:
            return None
        lo, hi = max(spans, key=lambda s: s[1] - s[0])
        slack = (hi - lo - w) / 2
        if slack < cfg.min_move_range:
            return None
        anchor = lo + slack
        plat = Platform(x=anchor, y=lower.y - cfg.platform_spacing / 2, w=w,
                        h=cfg.platform_height, is_moving=True,
                        move_speed=cfg.move_speed,
                        move_range=min(cfg.move_range, slack),
                        initial_x=anchor)
        return plat

    # -------------------- Recycling --------------------

    def place_recycled(self, plat: Platform, platforms: List[Platform]):
        """
        Move an off-screen platform one spacing above the current top of the
        stack, with a fresh width and an x reachable from the highest static
        platform.
        """
        cfg = self.config
        others = [p for p in platforms if p is not plat]
        top = min(others, key=lambda p: p.y)
        statics = [p for p in others if not p.is_moving]
        ref = min(statics, key=lambda p: p.y) if statics else top

        new_y = top.y - cfg.platform_spacing
        if plat.is_moving and top.is_moving:
            plat.is_moving = False   # never stack two moving platforms
        if plat.is_ground:
            plat.is_ground = False
            plat.h = cfg.platform_height

        plat.w = self._rand_w(plat.important)
        plat.y = new_y
        plat.x = self.pick_x(ref.initial_x if ref.is_moving else ref.x, plat.w, ref.y - new_y)
        plat.initial_x = plat.x
        plat.dx = 0.0

        if plat.is_moving:
            room = min(plat.x - cfg.edge_margin,
                       cfg.canvas_width - cfg.edge_margin - plat.w - plat.x)
            plat.move_range = min(cfg.move_range, room)
            if plat.move_range < cfg.min_move_range:
                plat.is_moving = False
        if not plat.is_moving:
            plat.move_range = 0.0
            plat.move_speed = 0.0
        return plat
