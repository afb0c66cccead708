# __main__.py - entry point
import logging
import os

import pygame

from klondike import settings
from klondike import ui as U
from klondike.engine import GameEngine
from klondike.scene import KlondikeScene

logger = logging.getLogger("klondike")

DEFAULT_WINDOW_POS = (100, 100)


def _configure_logging():
    level = os.environ.get("KLONDIKE_LOG_LEVEL", "WARNING").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _initial_window_size():
    info = pygame.display.Info()
    # Keep a safety margin so the window never hides under taskbar
    margin_w, margin_h = 120, 140
    w = min(U.SCREEN_W, max(640, info.current_w - margin_w))
    h = min(U.SCREEN_H, max(480, info.current_h - margin_h))
    return w, h


def _persist(config):
    if not settings.save_config(config):
        logger.info("settings not saved; continuing")


def main():
    _configure_logging()
    config = settings.load_config()

    if config.window_bounds is not None:
        x, y, _, _ = config.window_bounds
        os.environ.setdefault("SDL_VIDEO_WINDOW_POS", f"{x},{y}")
    else:
        os.environ.setdefault("SDL_VIDEO_CENTERED", "1")
    pygame.init()

    if config.window_bounds is not None:
        w, h = config.window_bounds[2], config.window_bounds[3]
    else:
        w, h = _initial_window_size()
    U.SCREEN_W, U.SCREEN_H = w, h
    screen = pygame.display.set_mode((w, h), pygame.RESIZABLE)
    pygame.display.set_caption("Klondike Solitaire")
    U.setup_fonts()
    clock = pygame.time.Clock()

    engine = GameEngine(stats=config.stats())
    scene = KlondikeScene(app=None, engine=engine, config=config, on_config_changed=_persist)

    running = True
    while running:
        dt = clock.tick(60)
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                running = False
            elif e.type == pygame.VIDEORESIZE:
                U.SCREEN_W, U.SCREEN_H = e.size
                screen = pygame.display.set_mode((U.SCREEN_W, U.SCREEN_H), pygame.RESIZABLE)
                x, y = config.window_bounds[:2] if config.window_bounds else DEFAULT_WINDOW_POS
                config.window_bounds = (x, y, U.SCREEN_W, U.SCREEN_H)
                scene.layout_buttons()
            elif e.type == pygame.WINDOWMOVED:
                config.window_bounds = (e.x, e.y, U.SCREEN_W, U.SCREEN_H)
            else:
                scene.handle_event(e)
        if scene.quit_requested:
            running = False
        if scene.next_scene is not None:
            scene = scene.next_scene
        scene.update(dt)
        scene.draw(screen)
        pygame.display.flip()

    _persist(config)
    pygame.quit()


if __name__ == "__main__":
    main()
