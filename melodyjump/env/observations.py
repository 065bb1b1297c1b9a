# melodyjump/env/observations.py
"""
Fixed-size vector observation built from a world Snapshot.

Layout (18,) float32:
  [x_norm, y_norm, vx_norm, vy_norm, jumping, progress,
   (dx, dy, moving) x 3 nearest platforms above the player's feet,
   note_dx, note_dy, note_present]
"""
from __future__ import annotations
from typing import List, Tuple
import numpy as np

from melodyjump.game.config import GameConfig

N_PLATFORMS = 3
OBS_SIZE = 6 + 3 * N_PLATFORMS + 3

# "no platform" sentinel: centred, a full screen above, static
_NO_PLATFORM = (0.0, 1.0, 0.0)


def _clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else (hi if x > hi else x)


def observation_bounds() -> Tuple[np.ndarray, np.ndarray]:
    low = np.array([0.0, 0.0, -1.0, -1.0, 0.0, 0.0]
                   + [-1.0, 0.0, 0.0] * N_PLATFORMS
                   + [-1.0, -1.0, 0.0], dtype=np.float32)
    high = np.ones(OBS_SIZE, dtype=np.float32)
    return low, high


def build_observation(snap, config: GameConfig) -> np.ndarray:
    W, H = snap.canvas
    px, py, pw, ph = snap.player
    vx, vy = snap.player_velocity
    cx, bottom = px + pw / 2, py + ph

    feats: List[float] = [
        _clamp(px / max(1.0, W - pw), 0.0, 1.0),
        _clamp(py / max(1.0, H - ph), 0.0, 1.0),
        _clamp(vx / config.player_speed, -1.0, 1.0),
        _clamp(vy / abs(config.jump_force), -1.0, 1.0),
        1.0 if snap.is_jumping else 0.0,
        snap.collected_count / snap.total_count if snap.total_count else 0.0,
    ]

    # platforms whose top is above the feet, closest first
    above = sorted((p for p in snap.platforms if p.rect[1] < bottom),
                   key=lambda p: bottom - p.rect[1])
    for i in range(N_PLATFORMS):
        if i < len(above):
            x, y, w, _ = above[i].rect
            feats.extend([
                _clamp((x + w / 2 - cx) / W, -1.0, 1.0),
                _clamp((bottom - y) / H, 0.0, 1.0),
                1.0 if above[i].is_moving else 0.0,
            ])
        else:
            feats.extend(_NO_PLATFORM)

    best = None
    for note in snap.notes:
        if note.collected:
            continue
        x, y, w, h = note.rect
        dx, dy = x + w / 2 - cx, y + h / 2 - (py + ph / 2)
        d2 = dx * dx + dy * dy
        if best is None or d2 < best[0]:
            best = (d2, dx, dy)
    if best is None:
        feats.extend([0.0, 0.0, 0.0])
    else:
        feats.extend([_clamp(best[1] / W, -1.0, 1.0), _clamp(best[2] / H, -1.0, 1.0), 1.0])

    return np.asarray(feats, dtype=np.float32)
