# melodyjump/game/scroll.py
from __future__ import annotations
import logging
from typing import List

from .config import GameConfig
from .level import LevelGen, Note, Platform
from .player import Player

logger = logging.getLogger(__name__)


class ScrollManager:
    """
    Keeps the player below the scroll threshold by shifting the world down,
    and recycles platforms and notes that leave the bottom of the screen.
    """
    def __init__(self, config: GameConfig, level_gen: LevelGen):
        self.config = config
        self.level_gen = level_gen
        self.offset = 0.0   # total distance scrolled since the level started

    def reset(self):
        self.offset = 0.0

    def apply(self, player: Player, platforms: List[Platform], notes: List[Note]) -> float:
        """Returns the shift applied this tick (0.0 if none)."""
        threshold = self.config.scroll_threshold
        if player.y >= threshold:
            return 0.0
        delta = threshold - player.y
        player.y = threshold
        shift_world(platforms, notes, delta)
        self.offset += delta
        return delta

    @property
    def recycle_line(self) -> float:
        return self.config.canvas_height + self.config.recycle_margin

    def recycle(self, platforms: List[Platform], notes: List[Note]) -> int:
        """Re-place everything below the recycle line. Returns how many moved."""
        return self.recycle_platforms(platforms) + self.recycle_notes(platforms, notes)

    def recycle_platforms(self, platforms: List[Platform]) -> int:
        line = self.recycle_line
        moved = 0
        for plat in platforms:
            if plat.y > line:
                self.level_gen.place_recycled(plat, platforms)
                moved += 1
        return moved

    def recycle_notes(self, platforms: List[Platform], notes: List[Note]) -> int:
        line = self.recycle_line
        moved = 0
        for note in notes:
            if note.y <= line:
                continue
            owner = platforms[note.platform_index]
            if owner.y > line:
                # owner not re-placed yet; try again next pass
                logger.debug("note over platform %d deferred", note.platform_index)
                continue
            note.anchor_to(owner, self.config.note_gap)
            note.collected = False
            moved += 1
        return moved


def shift_world(platforms: List[Platform], notes: List[Note], delta: float):
    for plat in platforms:
        plat.y += delta
    for note in notes:
        note.y += delta
