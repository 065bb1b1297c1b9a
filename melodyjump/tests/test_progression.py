# melodyjump/tests/test_progression.py
"""Note pickup, level/game completion, falls and listeners."""
from __future__ import annotations
import random
from dataclasses import replace

from melodyjump.game.config import GameConfig, NOTE_FREQUENCIES
from melodyjump.game.events import EventKind
from melodyjump.game.player import InputState
from melodyjump.game.progression import Outcome, Progression, melody, octave_for_level
from melodyjump.game.world import World

CFG = GameConfig()


def collect(world: World, idx: int):
    """Drop the player onto note idx and run one tick."""
    note = world.notes[idx]
    p = world.player
    p.x, p.y = note.x, note.y
    p.vx = p.vy = 0.0
    p.support = None
    return world.tick()


def kinds(events):
    return [e.kind for e in events]


def test_progression_counts_and_outcomes():
    prog = Progression(total_levels=2)
    prog.start_level(2)
    assert prog.on_note_collected() is Outcome.RUNNING
    assert prog.on_note_collected() is Outcome.LEVEL_COMPLETE
    assert prog.current_level == 2 and prog.score == 2

    prog.start_level(1)
    assert prog.collected_count == 0 and prog.score == 2
    assert prog.on_note_collected() is Outcome.GAME_COMPLETE
    assert prog.current_level == 1 and prog.score == 3


def test_score_reset_flag():
    prog = Progression(total_levels=3, reset_score_each_level=True)
    prog.start_level(1)
    prog.on_note_collected()
    prog.start_level(4)
    assert prog.score == 0


def test_collecting_a_note():
    world = World(CFG, seed=4)
    events = collect(world, 0)
    assert kinds(events) == [EventKind.NOTE_COLLECTED]
    assert events[0].letter == world.notes[0].letter
    assert world.notes[0].collected
    assert world.progression.collected_count == 1
    assert world.progression.score == 1


def test_collected_note_is_not_counted_again():
    world = World(CFG, seed=4)
    collect(world, 0)
    for _ in range(5):
        events = collect(world, 0)
        assert events == []
    assert world.progression.collected_count == 1
    assert world.progression.score == 1


def test_last_note_advances_level_once():
    world = World(CFG, seed=4)
    seen = []
    world.add_listener(seen.append)
    total = len(world.notes)
    for i in range(total - 1):
        assert kinds(collect(world, i)) == [EventKind.NOTE_COLLECTED]

    events = collect(world, total - 1)

    assert kinds(events) == [EventKind.NOTE_COLLECTED, EventKind.LEVEL_COMPLETE]
    done = events[1]
    assert done.level == 1 and done.next_level == 2
    assert [letter for letter, _ in done.melody] == [
        e.letter for e in seen if e.kind is EventKind.NOTE_COLLECTED]
    assert world.progression.current_level == 2
    assert world.progression.collected_count == 0
    assert world.progression.total_count == len(world.notes)
    assert world.progression.score == total
    assert sum(1 for e in seen if e.kind is EventKind.LEVEL_COMPLETE) == 1
    # fresh level, player back on the ground
    assert world.player.rect[:2] == (CFG.spawn_x, CFG.ground_y - CFG.player_h)
    assert not any(n.collected for n in world.notes)


def test_last_level_loops_to_first():
    world = World(replace(CFG, total_levels=1), seed=4)
    total = len(world.notes)
    events = []
    for i in range(total):
        events = collect(world, i)
    assert kinds(events) == [EventKind.NOTE_COLLECTED, EventKind.GAME_COMPLETE]
    assert events[1].next_level == 1
    assert world.progression.current_level == 1
    assert world.progression.score == total


def test_fall_regenerates_level_and_keeps_score():
    world = World(CFG, seed=6)
    collect(world, 0)
    world.player.y = CFG.canvas_height + 5
    world.player.vy = 3.0
    events = world.tick()
    assert kinds(events) == [EventKind.PLAYER_FELL]
    assert world.player.rect[:2] == (CFG.spawn_x, CFG.ground_y - CFG.player_h)
    assert world.progression.collected_count == 0
    assert world.progression.score == 1
    assert world.progression.current_level == 1
    assert world.scroll.offset == 0.0


def test_failing_listener_does_not_break_the_tick():
    world = World(CFG, seed=6)
    calls = []

    def broken(ev):
        raise RuntimeError("audio device missing")

    world.add_listener(broken)
    world.add_listener(calls.append)
    events = collect(world, 0)
    assert kinds(events) == [EventKind.NOTE_COLLECTED]
    assert kinds(calls) == [EventKind.NOTE_COLLECTED]
    world.remove_listener(broken)


def test_stopped_world_does_not_advance():
    world = World(CFG, seed=6)
    world.stop()
    before = world.snapshot()
    assert world.tick() == []
    assert world.snapshot() == before
    world.reset()
    assert world.running


def test_reset_with_seed_is_reproducible():
    a = World(CFG, seed=1)
    b = World(CFG, seed=2)
    b.reset(seed=1)
    assert a.snapshot() == b.snapshot()


def test_snapshot_reflects_state():
    world = World(CFG, seed=9)
    snap = world.snapshot()
    assert snap.player == world.player.rect
    assert len(snap.platforms) == len(world.platforms)
    assert [n.collected for n in snap.notes] == [False] * len(world.notes)
    assert (snap.current_level, snap.total_levels) == (1, CFG.total_levels)
    assert snap.total_count == len(world.notes)
    assert snap.seed == 9


def test_melody_octaves():
    assert octave_for_level(1) == 0
    assert octave_for_level(4) == 1
    assert octave_for_level(12) == 2
    assert melody("CA", 5) == [("C", NOTE_FREQUENCIES["C"][1]), ("A", NOTE_FREQUENCIES["A"][1])]


def test_progression_invariant_over_random_play():
    world = World(CFG, seed=13)
    rng = random.Random(0)
    for _ in range(3000):
        world.tick(InputState(horizontal=rng.choice((-1, 0, 1)), jump=rng.random() < 0.1))
        prog = world.progression
        assert 0 <= prog.collected_count <= prog.total_count
        assert 1 <= prog.current_level <= prog.total_levels
        assert 0 <= world.player.x <= CFG.canvas_width - CFG.player_w
