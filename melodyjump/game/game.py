# melodyjump/game/game.py
import sys, argparse, logging
from dataclasses import replace
import pygame
from pygame import K_LEFT, K_RIGHT, K_a, K_d, K_UP, K_SPACE, K_w, K_ESCAPE, K_p, K_r

from .config import (
    FPS, SEED_DEFAULT, GameConfig, FrictionMode,
    COLOR_BG, COLOR_FG, COLOR_PLAYER, COLOR_PLAT, COLOR_PLAT_MOVING,
    COLOR_NOTE, COLOR_NOTE_TEXT,
)
from .events import EventKind, GameEvent
from .player import InputState
from .world import Snapshot, World

logger = logging.getLogger(__name__)

JUMP_KEYS = (K_UP, K_SPACE, K_w)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Melody Jump")
    p.add_argument("--seed", type=int, default=None,
                   help="Level seed. Omit for SEED_DEFAULT, use -1 for random each launch.")
    p.add_argument("--friction", choices=[m.value for m in FrictionMode],
                   default=FrictionMode.DECAY.value,
                   help="decay: vx damps when keys are released; hard_stop: vx zeroes")
    p.add_argument("--levels", type=int, default=None, help="Number of levels before looping")
    p.add_argument("--reset-score", action="store_true", help="Reset score at each level start")
    p.add_argument("--log-level", default="INFO")
    return p.parse_args(argv)


def build_config(args) -> GameConfig:
    cfg = replace(GameConfig(), friction_mode=FrictionMode(args.friction),
                  reset_score_each_level=args.reset_score)
    if args.levels is not None:
        cfg = replace(cfg, total_levels=args.levels)
    return cfg.validate()


def input_from_keys(pressed, jump_pressed: bool) -> InputState:
    """Map held keys plus this frame's jump edge to an InputState."""
    left = pressed[K_LEFT] or pressed[K_a]
    right = pressed[K_RIGHT] or pressed[K_d]
    return InputState(horizontal=int(bool(right)) - int(bool(left)), jump=jump_pressed)


def _to_rect(r) -> pygame.Rect:
    x, y, w, h = r
    return pygame.Rect(int(round(x)), int(round(y)), int(round(w)), int(round(h)))


def draw_world(surf: pygame.Surface, snap: Snapshot, font=None):
    """Draw platforms, notes, player and (if a font is given) the HUD."""
    surf.fill(COLOR_BG)
    for plat in snap.platforms:
        pygame.draw.rect(surf, COLOR_PLAT_MOVING if plat.is_moving else COLOR_PLAT, _to_rect(plat.rect))

    for note in snap.notes:
        if note.collected:
            continue
        r = _to_rect(note.rect)
        pygame.draw.circle(surf, COLOR_NOTE, r.center, r.width // 2)
        if font is not None:
            txt = font.render(note.letter, True, COLOR_NOTE_TEXT)
            surf.blit(txt, txt.get_rect(center=r.center))

    pygame.draw.rect(surf, COLOR_PLAYER, _to_rect(snap.player))

    if font is not None:
        hud = (f"Level {snap.current_level}/{snap.total_levels}   Score: {snap.score}   "
               f"Notes: {snap.collected_count}/{snap.total_count}   Seed: {snap.seed}")
        surf.blit(font.render(hud, True, COLOR_FG), (12, 10))
        surf.blit(font.render("ARROWS move | SPACE jump | P pause | R restart | ESC quit",
                              True, (160, 180, 210)), (12, 32))


def run(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # Resolve seed: None -> use SEED_DEFAULT; -1 -> random
    if args.seed is None:
        launch_seed = SEED_DEFAULT
    elif args.seed == -1:
        launch_seed = None
    else:
        launch_seed = args.seed

    cfg = build_config(args)
    world = World(cfg, launch_seed)

    pygame.init()
    pygame.display.set_caption("Melody Jump")
    screen = pygame.display.set_mode((int(cfg.canvas_width), int(cfg.canvas_height)))
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("jetbrainsmono", 18)

    banner = ""
    banner_timer = 0.0

    def on_event(ev: GameEvent):
        nonlocal banner, banner_timer
        if ev.kind is EventKind.LEVEL_COMPLETE:
            banner, banner_timer = f"Level {ev.level} complete!", 2.0
        elif ev.kind is EventKind.GAME_COMPLETE:
            banner, banner_timer = "All levels complete! Back to level 1", 3.0

    world.add_listener(on_event)
    paused = False

    while True:
        dt = clock.tick(FPS) / 1000.0
        jump_pressed = False

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                pygame.quit(); sys.exit()
            if event.type == pygame.KEYDOWN:
                if event.key == K_ESCAPE:
                    pygame.quit(); sys.exit()
                if event.key == K_p:
                    paused = not paused
                if event.key == K_r:
                    world.reset()
                if event.key in JUMP_KEYS:
                    jump_pressed = True

        if not paused:
            world.tick(input_from_keys(pygame.key.get_pressed(), jump_pressed), 1.0 / FPS)

        draw_world(screen, world.snapshot(), font)
        if banner_timer > 0.0:
            banner_timer -= dt
            txt = font.render(banner, True, COLOR_FG)
            screen.blit(txt, txt.get_rect(center=screen.get_rect().center))
        if paused:
            txt = font.render("PAUSED", True, COLOR_FG)
            screen.blit(txt, txt.get_rect(center=(screen.get_width() // 2, 80)))

        pygame.display.flip()


if __name__ == "__main__":
    run()
