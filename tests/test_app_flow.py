import importlib
import random
import time
import types

import pytest

from klondike.common import Card
from klondike.engine import GameEngine, GameStatus
from klondike.piles import STOCK, WASTE, Table, foundation, tableau
from klondike.settings import Config


class DummyFont:
    def __init__(self, size):
        self._size = max(1, int(size) if size else 1)

    def render(self, text, *_, **__):
        pygame = importlib.import_module("pygame")
        width = max(1, len(str(text)) * max(self._size // 2, 1))
        return pygame.Surface((width, self._size), pygame.SRCALPHA)

    def size(self, text):
        return max(1, len(str(text)) * max(self._size // 2, 1)), self._size

    def get_height(self):
        return self._size


@pytest.fixture
def pygame_headless(monkeypatch):
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")
    pygame = importlib.import_module("pygame")

    def _make_font(*args, size=None, **kwargs):
        return DummyFont(size if size is not None else (args[1] if len(args) > 1 else 24))

    monkeypatch.setattr(pygame.font, "SysFont", _make_font, raising=False)
    monkeypatch.setattr(pygame.font, "Font", _make_font, raising=False)
    monkeypatch.setattr(pygame.font, "get_default_font", lambda: "dummy", raising=False)
    ui = importlib.import_module("klondike.ui")
    ui.setup_fonts()
    return pygame


def _arranged_table():
    table = Table()
    table.tableau[0].load([Card(1, 6, True)])   # 6♥
    table.tableau[1].load([Card(0, 7, True)])   # 7♠
    table.tableau[2].load([Card(2, 1, True)])   # A♦
    placed = {c.key() for c in table.all_cards()}
    table.stock.load([Card(s, r, False) for s in range(4) for r in range(1, 14) if (s, r) not in placed])
    return table


def _click(pygame, pos, kind):
    return pygame.event.Event(kind, {"pos": pos, "button": 1})


def test_scene_translates_input_into_engine_calls(pygame_headless):
    pygame = pygame_headless
    from klondike.scene import KlondikeScene

    saved = []
    config = Config()
    scene = KlondikeScene(app=None, engine=GameEngine(rng=random.Random(2)), config=config,
                          on_config_changed=lambda cfg: saved.append(cfg.games_played))
    assert scene.engine.status is GameStatus.IN_PROGRESS
    assert config.games_played == 1

    stock_pos = scene.rect_for_index(STOCK, 0).center
    scene.handle_event(_click(pygame, stock_pos, pygame.MOUSEBUTTONDOWN))
    assert len(scene.engine.table.waste) == 3
    assert len(scene.engine.table.stock) == 21

    scene.engine.load_position(_arranged_table())

    # drag 6♥ onto 7♠
    src = scene.rect_for_index(tableau(0), 0).center
    dst = scene.rect_for_index(tableau(1), 0).center
    scene.handle_event(_click(pygame, src, pygame.MOUSEBUTTONDOWN))
    assert scene.drag == (tableau(0), 0)
    scene.handle_event(_click(pygame, dst, pygame.MOUSEBUTTONUP))
    assert scene.drag is None
    assert [str(c) for c in scene.engine.pile(tableau(1)).cards] == ["7♠", "6♥"]

    # double-click sends A♦ up
    ace = scene.rect_for_index(tableau(2), 0).center
    for _ in range(2):
        scene.handle_event(_click(pygame, ace, pygame.MOUSEBUTTONDOWN))
        scene.handle_event(_click(pygame, ace, pygame.MOUSEBUTTONUP))
    assert [str(c) for c in scene.engine.pile(foundation(0)).cards] == ["A♦"]
    assert scene.engine.score == 10

    scene.handle_event(pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_h, "mod": 0}))
    assert scene.message.startswith("No obvious moves") or scene.message.startswith("Hint:")

    scene.handle_event(pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_u, "mod": 0}))
    assert scene.message == "Move undone."
    assert scene.engine.pile(foundation(0)).is_empty()

    scene.update(0)
    saved.clear()
    scene.handle_event(pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_m, "mod": 0}))
    assert config.night_mode
    assert scene.theme.name == "night"
    assert saved == []
    scene.update(0)
    assert saved == [1]

    screen = pygame.Surface((1024, 720))
    scene.mouse_pos = src
    scene.draw(screen)

    scene.handle_event(pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_ESCAPE, "mod": 0}))
    assert scene.quit_requested


def test_auto_complete_steps_on_update(pygame_headless):
    pygame = pygame_headless
    from klondike.scene import KlondikeScene

    table = Table()
    for suit in range(4):
        table.foundations[suit].load([Card(suit, r, True) for r in range(1, 13)])
        table.tableau[suit].load([Card(suit, 13, True)])
    scene = KlondikeScene(app=None, engine=GameEngine(), config=Config())
    scene.engine.load_position(table)

    scene.handle_event(pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_a, "mod": 0}))
    assert scene.auto_steps is not None
    scene.update(scene.auto_interval_ms - 1)
    assert len(scene.engine.pile(foundation(0))) == 12
    scene.update(1)
    assert len(scene.engine.pile(foundation(0))) == 13
    for _ in range(10):
        scene.update(scene.auto_interval_ms)
    assert scene.auto_steps is None
    assert scene.engine.status is GameStatus.WON
    assert scene.message.startswith("Congratulations")


def test_engine_calls_do_not_wait_for_slow_saves(pygame_headless):
    from klondike.scene import KlondikeScene

    saved = []

    def slow_save(cfg):
        time.sleep(0.3)
        saved.append(cfg.games_played)

    config = Config()
    scene = KlondikeScene(app=None, engine=GameEngine(rng=random.Random(3)), config=config,
                          on_config_changed=slow_save)
    scene.update(0)
    saved.clear()

    # abandons the running game, so two stats events fire
    started = time.monotonic()
    scene.engine.new_game()
    assert time.monotonic() - started < 0.3
    assert saved == []
    assert config.games_played == 2

    scene.update(16)
    assert saved == [2]
    scene.update(16)
    assert saved == [2]


def test_failing_save_is_swallowed(pygame_headless):
    from klondike.scene import KlondikeScene

    def broken_save(cfg):
        raise OSError("disk full")

    scene = KlondikeScene(app=None, engine=GameEngine(), config=Config(), on_config_changed=broken_save)
    scene.update(0)
    assert not scene.config_dirty


def test_reset_statistics_from_key_and_button(pygame_headless):
    pygame = pygame_headless
    from klondike.scene import KlondikeScene

    config = Config(games_played=9, games_won=4)
    scene = KlondikeScene(app=None, engine=GameEngine(stats=config.stats()), config=config)
    assert config.games_played == 10

    scene.handle_event(pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_r, "mod": 0}))
    assert scene.message == "Statistics reset successfully!"
    assert (config.games_played, config.games_won) == (0, 0)

    scene.new_game()
    assert config.games_played == 1
    reset_pos = scene.buttons["reset"].rect.center
    scene.handle_event(_click(pygame, reset_pos, pygame.MOUSEBUTTONDOWN))
    assert scene.message == "Statistics reset successfully!"
    assert scene.engine.stats.games_played == 0
    assert config.games_played == 0


def test_click_after_a_move_is_not_a_double_click(pygame_headless):
    pygame = pygame_headless
    from klondike.scene import KlondikeScene

    table = Table()
    table.tableau[0].load([Card(0, 7, True)])   # 7♠
    table.waste.load([Card(1, 6, True)])        # 6♥
    table.stock.load([Card(3, 1, False)])       # A♣
    scene = KlondikeScene(app=None, engine=GameEngine(debug_checks=False), config=Config())
    scene.engine.load_position(table)

    waste_pos = scene.rect_for_index(WASTE, 0).center
    scene.handle_event(_click(pygame, waste_pos, pygame.MOUSEBUTTONDOWN))
    scene.handle_event(_click(pygame, scene.rect_for_index(tableau(0), 0).center, pygame.MOUSEBUTTONUP))
    assert [str(c) for c in scene.engine.pile(tableau(0)).cards] == ["7♠", "6♥"]

    # the draw refills the same waste slot with A♣
    scene.handle_event(_click(pygame, scene.rect_for_index(STOCK, 0).center, pygame.MOUSEBUTTONDOWN))
    assert [str(c) for c in scene.engine.pile(WASTE).cards] == ["A♣"]

    scene.handle_event(_click(pygame, waste_pos, pygame.MOUSEBUTTONDOWN))
    assert scene.drag == (WASTE, 0)
    assert all(f.is_empty() for f in scene.engine.table.foundations)


def test_buttons_follow_window_width(monkeypatch, pygame_headless):
    from klondike import ui as U
    from klondike.scene import KlondikeScene

    scene = KlondikeScene(app=None, engine=GameEngine(), config=Config())
    monkeypatch.setattr(U, "SCREEN_W", 1400)
    scene.layout_buttons()
    rights = [b.rect.right for b in scene.buttons.values()]
    assert max(rights) <= 1400
    assert max(rights) > 1300
    assert rights == sorted(rights)


def test_application_flow(monkeypatch, tmp_path, pygame_headless):
    pygame = pygame_headless
    conf = tmp_path / "solitaire.conf"
    monkeypatch.setenv("KLONDIKE_CONFIG", str(conf))
    monkeypatch.setenv("SDL_VIDEO_CENTERED", "1")

    entry = importlib.import_module("klondike.__main__")

    class DummyClock:
        def tick(self, _fps):
            return 16

    monkeypatch.setattr(pygame.time, "Clock", lambda: DummyClock())
    monkeypatch.setattr(pygame.display, "Info", lambda: types.SimpleNamespace(current_w=1600, current_h=900))
    monkeypatch.setattr(pygame.display, "set_mode", lambda size, flags=0: pygame.Surface(size))
    monkeypatch.setattr(pygame.display, "flip", lambda: None)
    monkeypatch.setattr(pygame.display, "set_caption", lambda _title: None)
    monkeypatch.setattr(entry, "_initial_window_size", lambda: (1024, 720))
    monkeypatch.setattr(entry.U, "SCREEN_W", entry.U.SCREEN_W)
    monkeypatch.setattr(entry.U, "SCREEN_H", entry.U.SCREEN_H)

    event_steps = [
        [pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_n, "mod": 0})],
        [pygame.event.Event(pygame.WINDOWMOVED, {"x": 30, "y": 40})],
        [pygame.event.Event(pygame.VIDEORESIZE, {"size": (1200, 800), "w": 1200, "h": 800})],
        [pygame.event.Event(pygame.QUIT, {})],
    ]
    index = {"value": 0}

    def scripted_events():
        step = index["value"]
        index["value"] += 1
        return event_steps[step] if step < len(event_steps) else []

    monkeypatch.setattr(pygame.event, "get", scripted_events)

    quit_calls = []
    real_quit = pygame.quit

    def tracked_quit():
        quit_calls.append(True)
        real_quit()

    monkeypatch.setattr(pygame, "quit", tracked_quit)

    entry.main()

    assert quit_calls, "pygame.quit() should be called"
    lines = conf.read_text(encoding="utf-8").splitlines()
    assert "gamesPlayed=2" in lines
    assert "gamesWon=0" in lines
    assert "windowBounds=30,40,1200,800" in lines
