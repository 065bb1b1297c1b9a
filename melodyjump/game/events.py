# melodyjump/game/events.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple


class EventKind(Enum):
    NOTE_COLLECTED = auto()
    LEVEL_COMPLETE = auto()
    GAME_COMPLETE = auto()
    PLAYER_FELL = auto()


@dataclass(frozen=True)
class GameEvent:
    """Fire-and-forget notification for the render/audio/UI side."""
    kind: EventKind
    level: int                     # level the event happened on
    letter: Optional[str] = None   # NOTE_COLLECTED only
    next_level: Optional[int] = None
    melody: Tuple[Tuple[str, float], ...] = ()   # LEVEL_COMPLETE / GAME_COMPLETE
