# melodyjump/env/note_env.py
from __future__ import annotations
from typing import Optional, Dict, Any
import numpy as np
import gymnasium as gym
import pygame

from melodyjump.game.config import GameConfig
from melodyjump.game.events import EventKind
from melodyjump.game.game import draw_world
from melodyjump.game.player import InputState
from melodyjump.game.world import World
from melodyjump.env.observations import OBS_SIZE, build_observation, observation_bounds

# action -> (horizontal, jump)
ACTIONS = (
    (-1, False), (0, False), (1, False),
    (-1, True),  (0, True),  (1, True),
)

REWARDS = {
    EventKind.NOTE_COLLECTED: 1.0,
    EventKind.LEVEL_COMPLETE: 5.0,
    EventKind.GAME_COMPLETE: 10.0,
    EventKind.PLAYER_FELL: -1.0,
}


class NoteJumpEnv(gym.Env):
    """
    Melody Jump Gymnasium environment (vector observations).
    - Simulation at 60 Hz (internal).
    - Agent acts every `frame_skip` frames (default 4) -> 15 decisions/sec.
    - Actions: 6 = {left, none, right} x {no jump, jump}; the jump is an edge,
      applied on the first sub-step only.
    - Episode terminates when the last level is completed.
    """
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 60}

    def __init__(self,
                 render_mode: Optional[str] = None,
                 frame_skip: int = 4,
                 time_limit_seconds: Optional[float] = 60.0,
                 config: Optional[GameConfig] = None):
        super().__init__()
        assert frame_skip >= 1, "frame_skip must be >= 1"
        assert render_mode is None or render_mode in self.metadata["render_modes"], render_mode
        self.render_mode = render_mode
        self.frame_skip = int(frame_skip)
        self.config = (config or GameConfig()).validate()

        self.sim_fps = 60
        self.dt = 1.0 / self.sim_fps

        self.time_limit_decisions = None
        if time_limit_seconds is not None:
            self.time_limit_decisions = int(self.sim_fps * time_limit_seconds / self.frame_skip)

        self.action_space = gym.spaces.Discrete(len(ACTIONS))
        low, high = observation_bounds()
        self.observation_space = gym.spaces.Box(low=low, high=high, shape=(OBS_SIZE,), dtype=np.float32)

        self.world: Optional[World] = None
        self.timestep: int = 0
        self.current_seed: Optional[int] = None

        self.screen = None
        self.clock = None

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)  # initializes self.np_random

        # level layout is drawn from np_random so reset(seed=...) is reproducible
        level_seed = int(self.np_random.integers(0, 2**31 - 1))
        self.world = World(self.config, level_seed)
        self.timestep = 0
        self.current_seed = level_seed

        obs = self._get_obs()
        info = self._info(grounded=False, events=())
        if self.render_mode == "human":
            self.render()
        return obs, info

    def step(self, action):
        assert self.action_space.contains(action), f"Invalid action {action}"
        assert self.world is not None, "call reset() first"

        horizontal, jump = ACTIONS[int(action)]
        reward = 0.0
        terminated = False
        events = []

        for i in range(self.frame_skip):
            tick_events = self.world.tick(InputState(horizontal, jump and i == 0), self.dt)
            for ev in tick_events:
                reward += REWARDS[ev.kind]
                if ev.kind is EventKind.GAME_COMPLETE:
                    terminated = True
            events.extend(tick_events)
            if terminated:
                break

        self.timestep += 1
        truncated = bool(self.time_limit_decisions is not None
                         and self.timestep >= self.time_limit_decisions and not terminated)

        obs = self._get_obs()
        info = self._info(grounded=not self.world.player.is_jumping, events=events)

        if self.render_mode == "human":
            self.render()

        return obs, float(reward), terminated, truncated, info

    # -------------------- Helpers --------------------

    def _get_obs(self) -> np.ndarray:
        assert self.world is not None
        obs = build_observation(self.world.snapshot(), self.config)
        return np.clip(obs, self.observation_space.low, self.observation_space.high)

    def _info(self, grounded: bool, events) -> Dict[str, Any]:
        prog = self.world.progression
        return {
            "seed": self.current_seed,
            "timestep": self.timestep,
            "level": prog.current_level,
            "score": prog.score,
            "notes": (prog.collected_count, prog.total_count),
            "scroll_offset": self.world.scroll.offset,
            "grounded": grounded,
            "events": [ev.kind.name for ev in events],
        }

    # -------------------- Rendering --------------------

    def render(self):
        if self.render_mode is None or self.world is None:
            return None

        size = (int(self.config.canvas_width), int(self.config.canvas_height))
        if self.render_mode == "rgb_array":
            surf = pygame.Surface(size)
            draw_world(surf, self.world.snapshot())
            arr = pygame.surfarray.array3d(surf)  # (W, H, 3)
            return np.transpose(arr, (1, 0, 2))

        if self.screen is None:
            pygame.init()
            self.screen = pygame.display.set_mode(size)
            pygame.display.set_caption("Melody Jump - Gym Env")
            self.clock = pygame.time.Clock()

        # Pump minimal event queue so the OS doesn't think we're hung
        pygame.event.pump()

        draw_world(self.screen, self.world.snapshot())
        pygame.display.flip()
        if self.clock is not None:
            self.clock.tick(self.metadata.get("render_fps", 60))
        return None

    def close(self):
        if self.screen is not None:
            pygame.display.quit()
            pygame.quit()
            self.screen = None
            self.clock = None
