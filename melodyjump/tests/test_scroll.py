# melodyjump/tests/test_scroll.py
"""World shift on ascent and recycling of platforms/notes."""
from __future__ import annotations
from dataclasses import replace

import pytest

from melodyjump.game.config import GameConfig
from melodyjump.game.level import LevelGen
from melodyjump.game.player import InputState, Player
from melodyjump.game.scroll import ScrollManager
from melodyjump.game.world import World

CFG = GameConfig()


def setup(seed=11, level=2):
    gen = LevelGen(CFG, seed)
    platforms, notes = gen.generate(level)
    return ScrollManager(CFG, gen), platforms, notes


def test_no_scroll_below_threshold():
    scroll, platforms, notes = setup()
    ys = [p.y for p in platforms]
    player = Player(x=100, y=CFG.scroll_threshold + 1, w=40, h=40)
    assert scroll.apply(player, platforms, notes) == 0.0
    assert [p.y for p in platforms] == ys
    assert scroll.offset == 0.0


def test_scroll_shifts_everything_by_delta():
    scroll, platforms, notes = setup()
    plat_ys = [p.y for p in platforms]
    note_ys = [n.y for n in notes]
    player = Player(x=100, y=CFG.scroll_threshold - 37.5, w=40, h=40)

    d = scroll.apply(player, platforms, notes)

    assert d == 37.5
    assert player.y == CFG.scroll_threshold
    assert [p.y for p in platforms] == [y + d for y in plat_ys]
    assert [n.y for n in notes] == [y + d for y in note_ys]
    assert scroll.offset == 37.5


def test_recycle_keeps_counts_and_moves_platforms_to_the_top():
    scroll, platforms, notes = setup()
    n_plat, n_notes = len(platforms), len(notes)
    for p in platforms[:3]:
        p.y += CFG.canvas_height
    top = min(p.y for p in platforms[3:])

    moved = scroll.recycle_platforms(platforms)

    assert moved == 3
    assert len(platforms) == n_plat and len(notes) == n_notes
    assert all(p.y <= scroll.recycle_line for p in platforms)
    assert min(p.y for p in platforms) == top - 3 * CFG.platform_spacing


def test_note_recycle_waits_for_its_platform():
    scroll, platforms, notes = setup()
    note = notes[0]
    owner = platforms[note.platform_index]
    note.collected = True
    owner.y += CFG.canvas_height
    note.y += CFG.canvas_height

    # platform still below the line: the note is deferred, untouched
    assert scroll.recycle_notes(platforms, notes) == 0
    assert note.collected
    assert note.y > scroll.recycle_line

    scroll.recycle_platforms(platforms)
    assert scroll.recycle_notes(platforms, notes) == 1
    assert not note.collected
    assert note.y + note.size + CFG.note_gap == pytest.approx(owner.y)
    assert note.x + note.size / 2 == pytest.approx(owner.center_x)


def climb(world, ticks, lift=5.0):
    """Hold the player just above the scroll line at the left wall."""
    for _ in range(ticks):
        world.player.x = 0.0
        world.player.y = world.config.scroll_threshold - lift
        world.player.vx = world.player.vy = 0.0
        world.player.support = None
        world.tick(InputState())


def test_climbing_world_recycles_without_losing_anything():
    # no pickup slack and the player pinned at x=0 keeps every note out of reach
    world = World(replace(CFG, pickup_tolerance=0), seed=21)
    n_plat, n_notes = len(world.platforms), len(world.notes)
    plats, notes = list(world.platforms), list(world.notes)

    climb(world, 400)

    assert world.progression.current_level == 1
    assert world.progression.collected_count == 0
    assert world.scroll.offset > CFG.canvas_height
    assert len(world.platforms) == n_plat and len(world.notes) == n_notes
    # recycled in place, never recreated
    assert all(a is b for a, b in zip(plats, world.platforms))
    assert all(a is b for a, b in zip(notes, world.notes))
    assert all(p.y <= world.scroll.recycle_line for p in world.platforms)
    assert not any(p.is_ground for p in world.platforms)


def test_recycled_static_platforms_stay_reachable():
    world = World(replace(CFG, pickup_tolerance=0), seed=8)
    climb(world, 300, lift=3.0)
    statics = sorted((p for p in world.platforms if not p.is_moving and not p.is_ground),
                     key=lambda p: -p.y)
    for lower, upper in zip(statics, statics[1:]):
        rise = lower.y - upper.y
        assert 0 < rise <= 2 * CFG.platform_spacing + 1e-6
        assert abs(upper.x - lower.x) <= CFG.jump_reach(rise) + 1e-6
