# melodyjump/tests/test_frontend.py
"""pygame front end: input mapping, off-screen drawing, CLI config."""
from __future__ import annotations
import os
from collections import defaultdict

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import pygame
import pytest

from melodyjump.game.config import (
    GameConfig, FrictionMode, COLOR_BG, COLOR_PLAYER, COLOR_PLAT, COLOR_NOTE,
)
from melodyjump.game.game import build_config, draw_world, input_from_keys, parse_args
from melodyjump.game.world import World


def keys(*down):
    pressed = defaultdict(bool)
    for k in down:
        pressed[k] = True
    return pressed


def test_input_from_keys():
    assert input_from_keys(keys(), False).horizontal == 0
    assert input_from_keys(keys(pygame.K_LEFT), False).horizontal == -1
    assert input_from_keys(keys(pygame.K_d), True).horizontal == 1
    assert input_from_keys(keys(pygame.K_d), True).jump
    # both directions cancel out
    assert input_from_keys(keys(pygame.K_LEFT, pygame.K_RIGHT), False).horizontal == 0


def test_draw_world_offscreen():
    world = World(GameConfig(), seed=2)
    snap = world.snapshot()
    surf = pygame.Surface((int(snap.canvas[0]), int(snap.canvas[1])))
    draw_world(surf, snap)

    px, py, pw, ph = snap.player
    assert tuple(surf.get_at((int(px + pw / 2), int(py + ph / 2))))[:3] == COLOR_PLAYER
    gx, gy, _, gh = snap.platforms[0].rect
    assert tuple(surf.get_at((5, int(gy + gh / 2))))[:3] == COLOR_PLAT
    nx, ny, ns, _ = snap.notes[0].rect
    assert tuple(surf.get_at((int(nx + ns / 2), int(ny + ns / 2))))[:3] == COLOR_NOTE
    assert tuple(surf.get_at((2, 2)))[:3] == COLOR_BG


def test_collected_notes_are_not_drawn():
    world = World(GameConfig(), seed=2)
    world.notes[0].collected = True
    snap = world.snapshot()
    surf = pygame.Surface((int(snap.canvas[0]), int(snap.canvas[1])))
    draw_world(surf, snap)
    nx, ny, ns, _ = snap.notes[0].rect
    assert tuple(surf.get_at((int(nx + ns / 2), int(ny + ns / 2))))[:3] != COLOR_NOTE


def test_cli_flags_map_onto_config():
    cfg = build_config(parse_args(["--friction", "hard_stop", "--levels", "2", "--reset-score"]))
    assert cfg.friction_mode is FrictionMode.HARD_STOP
    assert cfg.total_levels == 2
    assert cfg.reset_score_each_level

    cfg = build_config(parse_args([]))
    assert cfg == GameConfig()


def test_cli_rejects_bad_level_count():
    with pytest.raises(ValueError):
        build_config(parse_args(["--levels", "0"]))
