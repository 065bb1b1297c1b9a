# melodyjump/game/player.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .config import GameConfig, FrictionMode, VX_EPSILON
from .level import Platform


@dataclass
class InputState:
    """Latest input between ticks: horizontal intent and a jump edge."""
    horizontal: int = 0     # -1 left, 0 none, +1 right
    jump: bool = False      # true only on the frame the jump key goes down


def overlaps(a: Sequence[float], b: Sequence[float]) -> bool:
    """Strict AABB overlap of (x, y, w, h) rects; touching edges do not count."""
    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    return ax < bx + bw and ax + aw > bx and ay < by + bh and ay + ah > by


@dataclass
class Player:
    x: float
    y: float
    w: float
    h: float
    vx: float = 0.0
    vy: float = 0.0
    is_jumping: bool = False
    support: Optional[int] = None   # index of the platform stood on last tick

    @property
    def rect(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.w, self.h)

    def respawn(self, x: float, y: float):
        self.x, self.y = x, y
        self.vx = self.vy = 0.0
        self.is_jumping = False
        self.support = None

    def apply_input(self, inp: InputState, cfg: GameConfig) -> bool:
        """Turn input into velocity. Returns True if a jump started."""
        if inp.horizontal:
            self.vx = cfg.player_speed * (1 if inp.horizontal > 0 else -1)
        elif cfg.friction_mode is FrictionMode.HARD_STOP:
            self.vx = 0.0
        else:
            self.vx *= cfg.friction
            if abs(self.vx) < VX_EPSILON:
                self.vx = 0.0

        if inp.jump and not self.is_jumping:
            self.vy = cfg.jump_force
            self.is_jumping = True
            self.support = None
            return True
        return False

    def update_physics(self, cfg: GameConfig):
        """Integrate one tick: gravity into vy, then velocity into position."""
        self.vy += cfg.gravity
        if cfg.max_fall_speed is not None and self.vy > cfg.max_fall_speed:
            self.vy = cfg.max_fall_speed
        self.x += self.vx
        self.y += self.vy

    def carry(self, platforms: List[Platform]):
        """Move with the platform stood on last tick (moving platforms only)."""
        if self.support is None or self.support >= len(platforms):
            return
        plat = platforms[self.support]
        if plat.is_moving:
            self.x += plat.dx

    def resolve_platform_collisions(self, platforms: List[Platform]) -> bool:
        """
        One-way landing: only a falling player (vy > 0) overlapping a platform
        is snapped onto its top. Side and head contacts are ignored.
        Returns True when the player landed this tick.
        """
        if self.vy <= 0:
            if self.vy < 0:
                self.support = None
            return False
        me = self.rect
        for i, plat in enumerate(platforms):
            if overlaps(me, plat.rect):
                self.y = plat.y - self.h
                self.vy = 0.0
                self.is_jumping = False
                self.support = i
                return True
        self.support = None
        return False

    def clamp_to_screen(self, width: float) -> bool:
        """Keep x inside [0, width - w]; zero vx on contact."""
        hi = width - self.w
        if self.x < 0:
            self.x = 0.0
        elif self.x > hi:
            self.x = hi
        else:
            return False
        self.vx = 0.0
        return True
