# melodyjump/game/config.py
from __future__ import annotations
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

# --- Display ---
WIDTH = 800
HEIGHT = 600
FPS = 60

# --- World / Physics (per-tick units) ---
GRAVITY = 0.4               # px/tick^2, downward
JUMP_FORCE = -12.0          # vy set on jump (px/tick, negative = up)
PLAYER_SPEED = 6.0          # vx while left/right is held (px/tick)
FRICTION = 0.8              # vx multiplier per tick with no input (decay mode)
VX_EPSILON = 0.05           # |vx| below this snaps to 0 in decay mode
MAX_FALL_SPEED = None       # None = uncapped

# --- Player ---
PLAYER_W = 40
PLAYER_H = 40

# --- Level generation ---
TOTAL_LEVELS = 5
BASE_PLATFORMS = 5
PLATFORMS_PER_LEVEL = 2
PLATFORM_SPACING = 70       # vertical gap between consecutive static platforms
PLATFORM_HEIGHT = 20
GROUND_HEIGHT = 30
PLATFORM_MIN_W = 70
PLATFORM_MAX_W = 110
IMPORTANT_MIN_W = 120
IMPORTANT_MAX_W = 160
IMPORTANT_EVERY = 4         # every Nth static platform is an "important" wide one
JUMP_MIN = 40
JUMP_MAX = 200
EDGE_MARGIN = 20
REACH_SAFETY = 0.85         # fraction of the computed jump reach the generator may use
SEED_DEFAULT = 12345

# --- Moving Platform Parameters ---
MOVING_PLATFORM_CHANCE = 0.35
MOVING_PLATFORM_SPEED = 1.2     # radians per second
MOVING_PLATFORM_RANGE = 100.0   # pixels left/right from the anchor
MOVING_PLATFORM_MIN_RANGE = 30.0

# --- Notes ---
NOTE_EVERY = 2              # a note above every Nth static platform
NOTE_SIZE = 30
NOTE_GAP = 10               # px between note bottom and platform top
PICKUP_TOLERANCE = 25
NOTE_LETTERS = "CDEFGAB"
NOTE_FREQUENCIES = {
    "C": (261.63, 523.25, 1046.50),
    "D": (293.66, 587.33, 1174.66),
    "E": (329.63, 659.25, 1318.51),
    "F": (349.23, 698.46, 1396.91),
    "G": (392.00, 783.99, 1567.98),
    "A": (440.00, 880.00, 1760.00),
    "B": (493.88, 987.77, 1975.53),
}

# --- Scrolling ---
SCROLL_THRESHOLD = 200      # player top above this y scrolls the world
RECYCLE_MARGIN = 50         # below HEIGHT + margin a platform/note is recycled
FALL_MARGIN = 0             # player top below HEIGHT + margin is a fall

# --- Colors (RGB) ---
COLOR_BG = (26, 26, 46)
COLOR_FG = (220, 232, 255)
COLOR_PLAYER = (74, 144, 226)
COLOR_PLAT = (76, 175, 80)
COLOR_PLAT_MOVING = (96, 200, 120)
COLOR_NOTE = (255, 215, 0)
COLOR_NOTE_TEXT = (0, 0, 0)


class FrictionMode(str, Enum):
    """What happens to vx on a tick without horizontal input."""
    DECAY = "decay"           # exponential damping by FRICTION
    HARD_STOP = "hard_stop"   # vx zeroed immediately


@dataclass(frozen=True)
class GameConfig:
    canvas_width: float = WIDTH
    canvas_height: float = HEIGHT

    gravity: float = GRAVITY
    jump_force: float = JUMP_FORCE
    player_speed: float = PLAYER_SPEED
    friction: float = FRICTION
    friction_mode: FrictionMode = FrictionMode.DECAY
    max_fall_speed: Optional[float] = MAX_FALL_SPEED
    player_w: float = PLAYER_W
    player_h: float = PLAYER_H

    total_levels: int = TOTAL_LEVELS
    base_platforms: int = BASE_PLATFORMS
    platforms_per_level: int = PLATFORMS_PER_LEVEL
    platform_spacing: float = PLATFORM_SPACING
    platform_height: float = PLATFORM_HEIGHT
    ground_height: float = GROUND_HEIGHT
    normal_width: Tuple[float, float] = (PLATFORM_MIN_W, PLATFORM_MAX_W)
    important_width: Tuple[float, float] = (IMPORTANT_MIN_W, IMPORTANT_MAX_W)
    important_every: int = IMPORTANT_EVERY
    min_jump: float = JUMP_MIN
    max_jump: float = JUMP_MAX
    edge_margin: float = EDGE_MARGIN
    reach_safety: float = REACH_SAFETY

    moving_chance: float = MOVING_PLATFORM_CHANCE
    move_speed: float = MOVING_PLATFORM_SPEED
    move_range: float = MOVING_PLATFORM_RANGE
    min_move_range: float = MOVING_PLATFORM_MIN_RANGE

    note_every: int = NOTE_EVERY
    note_size: float = NOTE_SIZE
    note_gap: float = NOTE_GAP
    pickup_tolerance: float = PICKUP_TOLERANCE

    scroll_threshold: float = SCROLL_THRESHOLD
    recycle_margin: float = RECYCLE_MARGIN
    fall_margin: float = FALL_MARGIN

    reset_score_each_level: bool = False

    @property
    def spawn_x(self) -> float:
        return self.canvas_width / 2 - self.player_w / 2

    @property
    def ground_y(self) -> float:
        return self.canvas_height - self.ground_height

    def max_jump_height(self) -> float:
        """Highest rise of the player's bottom edge over one jump.

        Integration is semi-implicit (vy += g, then y += vy), so after n ticks
        the rise is v0*n - g*n*(n+1)/2 with v0 = -jump_force.
        """
        v0, g = -self.jump_force, self.gravity
        n = v0 / g - 0.5
        return max(self._rise_after(math.floor(n)), self._rise_after(math.ceil(n)))

    def _rise_after(self, n: int) -> float:
        v0, g = -self.jump_force, self.gravity
        n = max(0, n)
        return v0 * n - g * n * (n + 1) / 2

    def jump_reach(self, rise: float) -> float:
        """Horizontal distance coverable while landing on a surface `rise` px up.

        Returns 0.0 when the rise is out of reach.
        """
        v0, g = -self.jump_force, self.gravity
        b = v0 - g / 2
        disc = b * b - 2 * g * rise
        if disc < 0:
            return 0.0
        n = math.floor((b + math.sqrt(disc)) / g + 1e-9)
        # guard against float rounding on the root
        while n > 0 and self._rise_after(n) < rise - 1e-9:
            n -= 1
        if n <= 0:
            return 0.0
        return self.player_speed * n

    def validate(self) -> "GameConfig":
        if self.total_levels < 1:
            raise ValueError(f"total_levels must be >= 1, got {self.total_levels}")
        if self.gravity <= 0:
            raise ValueError("gravity must be positive (downward)")
        if self.jump_force >= 0:
            raise ValueError("jump_force must be negative (upward)")
        if self.important_every < 1 or self.note_every < 1:
            raise ValueError("important_every and note_every must be >= 1")
        for name in ("normal_width", "important_width"):
            lo, hi = getattr(self, name)
            if not 0 < lo <= hi:
                raise ValueError(f"{name} must satisfy 0 < min <= max, got {(lo, hi)}")
            if hi + 2 * self.edge_margin > self.canvas_width:
                raise ValueError(f"{name} does not fit inside the canvas margins")
        if not 0 <= self.min_jump <= self.max_jump:
            raise ValueError("jump range must satisfy 0 <= min_jump <= max_jump")
        if self.platform_height <= self.gravity:
            raise ValueError("platform_height too thin for the gravity step")
        # recycling can stack a platform two spacings above the highest static one
        if self.jump_reach(2 * self.platform_spacing) <= 0:
            raise ValueError(
                f"jump (max height {self.max_jump_height():.1f}px) cannot clear "
                f"two platform spacings ({2 * self.platform_spacing}px)")
        return self
