# melodyjump/game/world.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .config import GameConfig, FPS
from .events import EventKind, GameEvent
from .level import LevelGen, Note, Platform
from .player import InputState, Player, overlaps
from .progression import Outcome, Progression, melody
from .scroll import ScrollManager

logger = logging.getLogger(__name__)

Rect = Tuple[float, float, float, float]
Listener = Callable[[GameEvent], None]


@dataclass(frozen=True)
class PlatformView:
    rect: Rect
    is_moving: bool


@dataclass(frozen=True)
class NoteView:
    rect: Rect
    collected: bool
    letter: str


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the world after a tick."""
    player: Rect
    player_velocity: Tuple[float, float]
    is_jumping: bool
    platforms: Tuple[PlatformView, ...]
    notes: Tuple[NoteView, ...]
    score: int
    current_level: int
    total_levels: int
    collected_count: int
    total_count: int
    scroll_offset: float
    seed: int
    canvas: Tuple[float, float]


def update_moving_platforms(platforms: List[Platform], t: float):
    for plat in platforms:
        plat.update_movement(t)


def find_note_pickup(player: Player, notes: List[Note], tolerance: float) -> Optional[int]:
    """Index of the first uncollected note within reach of the player, if any."""
    me = player.rect
    for i, note in enumerate(notes):
        if note.collected:
            continue
        x, y, w, h = note.rect
        if overlaps(me, (x - tolerance, y - tolerance, w + 2 * tolerance, h + 2 * tolerance)):
            return i
    return None


class World:
    """
    The simulation context: player, level layout, scroll state and
    progression, advanced one tick at a time by `tick`.
    """
    def __init__(self, config: Optional[GameConfig] = None, seed: Optional[int] = None):
        self.config = (config or GameConfig()).validate()
        self.level_gen = LevelGen(self.config, seed)
        self.seed = self.level_gen.seed
        self.player = Player(x=self.config.spawn_x,
                             y=self.config.ground_y - self.config.player_h,
                             w=self.config.player_w, h=self.config.player_h)
        self.progression = Progression(total_levels=self.config.total_levels,
                                       reset_score_each_level=self.config.reset_score_each_level)
        self.scroll = ScrollManager(self.config, self.level_gen)
        self.platforms: List[Platform] = []
        self.notes: List[Note] = []
        self.level_time = 0.0     # seconds since the level was built (moving platform phase)
        self.ticks = 0
        self.running = True
        self._listeners: List[Listener] = []
        self._collected_letters: List[str] = []
        self.build_level()

    # -------------------- Lifecycle --------------------

    def build_level(self):
        """(Re)generate the current level in place and respawn the player."""
        cfg = self.config
        platforms, notes = self.level_gen.generate(
            self.progression.current_level, cfg.canvas_width, cfg.canvas_height)
        self.platforms[:] = platforms
        self.notes[:] = notes
        self.scroll.reset()
        self.level_time = 0.0
        self._collected_letters.clear()
        self.player.respawn(cfg.spawn_x, cfg.ground_y - cfg.player_h)
        self.progression.start_level(len(self.notes))
        logger.info("level %d/%d built: %d platforms, %d notes",
                    self.progression.current_level, cfg.total_levels,
                    len(self.platforms), len(self.notes))

    def reset(self, seed: Optional[int] = None):
        """Restart from level 1; a new seed reseeds the generator."""
        if seed is not None:
            self.level_gen = LevelGen(self.config, seed)
            self.scroll.level_gen = self.level_gen
            self.seed = seed
        self.progression.restart()
        self.running = True
        self.build_level()

    def stop(self):
        self.running = False

    def add_listener(self, listener: Listener):
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener):
        self._listeners.remove(listener)

    # -------------------- Tick --------------------

    def tick(self, inp: Optional[InputState] = None, dt: float = 1.0 / FPS) -> List[GameEvent]:
        if not self.running:
            return []
        cfg = self.config
        inp = inp or InputState()
        player = self.player
        events: List[GameEvent] = []

        self.ticks += 1
        self.level_time += dt

        player.apply_input(inp, cfg)
        player.update_physics(cfg)

        self.scroll.apply(player, self.platforms, self.notes)
        self.scroll.recycle(self.platforms, self.notes)

        update_moving_platforms(self.platforms, self.level_time)
        player.carry(self.platforms)
        player.resolve_platform_collisions(self.platforms)
        player.clamp_to_screen(cfg.canvas_width)

        if player.y > cfg.canvas_height + cfg.fall_margin:
            level = self.progression.current_level
            logger.info("player fell on level %d, regenerating", level)
            self.build_level()
            events.append(GameEvent(EventKind.PLAYER_FELL, level=level))
        else:
            idx = find_note_pickup(player, self.notes, cfg.pickup_tolerance)
            if idx is not None:
                events.extend(self._collect(idx))

        for event in events:
            self._dispatch(event)
        return events

    def _collect(self, idx: int) -> List[GameEvent]:
        note = self.notes[idx]
        note.collected = True
        self._collected_letters.append(note.letter)
        level = self.progression.current_level
        events = [GameEvent(EventKind.NOTE_COLLECTED, level=level, letter=note.letter)]

        outcome = self.progression.on_note_collected()
        if outcome is Outcome.RUNNING:
            return events
        tune = tuple(melody(self._collected_letters, level))
        if outcome is Outcome.LEVEL_COMPLETE:
            events.append(GameEvent(EventKind.LEVEL_COMPLETE, level=level,
                                    next_level=self.progression.current_level, melody=tune))
        else:
            events.append(GameEvent(EventKind.GAME_COMPLETE, level=level,
                                    next_level=self.progression.current_level, melody=tune))
        self.build_level()
        return events

    def _dispatch(self, event: GameEvent):
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("listener failed on %s", event.kind.name)

    # -------------------- Views --------------------

    def snapshot(self) -> Snapshot:
        prog = self.progression
        return Snapshot(
            player=self.player.rect,
            player_velocity=(self.player.vx, self.player.vy),
            is_jumping=self.player.is_jumping,
            platforms=tuple(PlatformView(p.rect, p.is_moving) for p in self.platforms),
            notes=tuple(NoteView(n.rect, n.collected, n.letter) for n in self.notes),
            score=prog.score,
            current_level=prog.current_level,
            total_levels=prog.total_levels,
            collected_count=prog.collected_count,
            total_count=prog.total_count,
            scroll_offset=self.scroll.offset,
            seed=self.seed,
            canvas=(self.config.canvas_width, self.config.canvas_height),
        )
