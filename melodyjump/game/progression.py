# melodyjump/game/progression.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, List, Tuple

from .config import NOTE_FREQUENCIES

logger = logging.getLogger(__name__)


class Outcome(Enum):
    RUNNING = auto()
    LEVEL_COMPLETE = auto()
    GAME_COMPLETE = auto()


@dataclass
class Progression:
    total_levels: int
    current_level: int = 1
    score: int = 0
    collected_count: int = 0
    total_count: int = 0
    reset_score_each_level: bool = False

    def start_level(self, total_notes: int):
        """Called after every (re)generation of the current level."""
        self.collected_count = 0
        self.total_count = total_notes
        if self.reset_score_each_level:
            self.score = 0

    def on_note_collected(self) -> Outcome:
        """Count one pickup and report whether the level or game just ended."""
        self.collected_count += 1
        self.score += 1
        if self.collected_count < self.total_count:
            return Outcome.RUNNING
        if self.current_level < self.total_levels:
            self.current_level += 1
            logger.info("level %d complete, advancing to %d",
                        self.current_level - 1, self.current_level)
            return Outcome.LEVEL_COMPLETE
        logger.info("game complete (score %d), looping to level 1", self.score)
        self.current_level = 1
        return Outcome.GAME_COMPLETE

    def restart(self):
        self.current_level = 1
        self.score = 0
        self.collected_count = 0


def octave_for_level(level: int) -> int:
    return min(level // 4, 2)


def melody(letters: Iterable[str], level: int) -> List[Tuple[str, float]]:
    """Collected note letters as (letter, frequency Hz) for the level's octave."""
    octave = octave_for_level(level)
    return [(ch, NOTE_FREQUENCIES[ch][octave]) for ch in letters]
