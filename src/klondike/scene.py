# scene.py - pygame front end: turns clicks and drags into engine calls
import logging
from typing import Callable, Iterator, List, Optional, Tuple

import pygame

from klondike import ui as U
from klondike.engine import DrawKind, GameEngine, GameStatus
from klondike.piles import (
    FOUNDATION_COUNT,
    STOCK,
    TABLEAU_COUNT,
    TABLEAU_KIND,
    WASTE,
    WASTE_KIND,
    PileId,
    foundation,
    tableau,
)
from klondike.settings import Config
from klondike.solver import MoveDescription

logger = logging.getLogger(__name__)

DOUBLE_CLICK_MS = 400
WASTE_FAN_X = 22
VISIBLE_WASTE = 3


class Scene:
    def __init__(self, app):
        self.app = app
        self.next_scene = None
        self.quit_requested = False
    def handle_event(self, e): pass
    def update(self, dt): pass
    def draw(self, screen): pass


class KlondikeScene(Scene):
    def __init__(
        self,
        app,
        engine: Optional[GameEngine] = None,
        config: Optional[Config] = None,
        on_config_changed: Optional[Callable[[Config], None]] = None,
    ):
        super().__init__(app)
        self.config = config if config is not None else Config()
        self.on_config_changed = on_config_changed
        self.engine = engine if engine is not None else GameEngine(stats=self.config.stats())
        self.engine.on_event = self._on_engine_event
        self.theme = U.theme_for(self.config.night_mode)
        self.renderer = U.CardRenderer(self.theme)
        self.message = ""
        # Set by engine events, saved from update() so engine calls never wait on disk
        self.config_dirty = False

        # (source pile, index of the grabbed card) while a drag is active
        self.drag: Optional[Tuple[PileId, int]] = None
        self.mouse_pos = (0, 0)
        self._now_ms = 0
        self._last_click: Optional[Tuple[PileId, int, int]] = None

        # Auto-complete runs one engine step per interval so each move is drawn
        self.auto_steps: Optional[Iterator[MoveDescription]] = None
        self.auto_interval_ms = 120
        self._auto_elapsed = 0

        self.buttons = {
            "new": U.Button("New", 0, 14, w=110),
            "undo": U.Button("Undo", 0, 14, w=110),
            "hint": U.Button("Hint", 0, 14, w=110),
            "auto": U.Button("Auto", 0, 14, w=110),
            "reset": U.Button("Reset", 0, 14, w=110),
        }
        self.layout_buttons()

        if self.engine.status is GameStatus.NOT_STARTED:
            self.engine.new_game()
            self.message = "Game started. Good luck!"

    # ---------- Layout ----------
    def layout_buttons(self):
        """Right-align the toolbar against the current window width."""
        bx = U.SCREEN_W - len(self.buttons) * 120 - 10
        for i, button in enumerate(self.buttons.values()):
            button.rect.x = bx + i * 120

    def pile_origin(self, pile_id: PileId) -> Tuple[int, int]:
        top_y = U.TOP_BAR_H + 30
        step = U.CARD_W + U.CARD_GAP_X
        if pile_id == STOCK:
            return 40, top_y
        if pile_id == WASTE:
            return 40 + step, top_y
        if pile_id.kind == TABLEAU_KIND:
            return 40 + pile_id.index * step, top_y + U.CARD_H + 40
        return 40 + (3 + pile_id.index) * step, top_y

    def rect_for_index(self, pile_id: PileId, idx: int) -> pygame.Rect:
        x, y = self.pile_origin(pile_id)
        cards = self.engine.pile(pile_id).cards
        if pile_id.kind == TABLEAU_KIND:
            for c in cards[:idx]:
                y += U.FAN_UP if c.face_up else U.FAN_DOWN
        elif pile_id.kind == WASTE_KIND:
            first = max(0, len(cards) - VISIBLE_WASTE)
            x += max(0, idx - first) * WASTE_FAN_X
        return pygame.Rect(x, y, U.CARD_W, U.CARD_H)

    def all_pile_ids(self) -> List[PileId]:
        ids = [STOCK, WASTE]
        ids.extend(foundation(i) for i in range(FOUNDATION_COUNT))
        ids.extend(tableau(i) for i in range(TABLEAU_COUNT))
        return ids

    def hit(self, pos) -> Optional[Tuple[PileId, int]]:
        """(pile, card index) under ``pos``; index -1 means an empty pile slot."""
        for pid in self.all_pile_ids():
            cards = self.engine.pile(pid).cards
            if not cards:
                x, y = self.pile_origin(pid)
                if pygame.Rect(x, y, U.CARD_W, U.CARD_H).collidepoint(pos):
                    return pid, -1
                continue
            for i in reversed(range(len(cards))):
                if self.rect_for_index(pid, i).collidepoint(pos):
                    return pid, i
        return None

    def drop_target(self, pos) -> Optional[PileId]:
        found = self.hit(pos)
        if found is None:
            return None
        return found[0]

    # ---------- Engine callbacks ----------
    def _on_engine_event(self, name, engine):
        if name == "won":
            self.message = f"Congratulations! You won! Score: {engine.score}"
        elif name == "stalled":
            self.message = "Game Over - No more moves available!"
        elif name == "stats":
            self.config.update_stats(engine.stats)
            self.config_dirty = True

    def flush_config(self):
        if not self.config_dirty:
            return
        self.config_dirty = False
        if self.on_config_changed is None:
            return
        try:
            self.on_config_changed(self.config)
        except Exception:
            logger.debug("config callback failed", exc_info=True)

    # ---------- Actions ----------
    def new_game(self):
        self.drag = None
        self.auto_steps = None
        self.engine.new_game()
        self.message = "Game started. Good luck!"

    def undo(self):
        self.auto_steps = None
        self.message = "Move undone." if self.engine.undo() else "Nothing to undo."

    def show_hint(self):
        move = self.engine.hint()
        if move is not None:
            self.message = f"Hint: {move.describe()}"
        else:
            self.message = "No obvious moves available. Try drawing from stock."

    def start_auto_complete(self):
        if not self.engine.can_auto_complete():
            self.message = "Auto-complete not available yet."
            return
        self.auto_steps = self.engine.auto_complete()
        self._auto_elapsed = 0

    def toggle_night_mode(self):
        self.config.night_mode = not self.config.night_mode
        self.theme = U.theme_for(self.config.night_mode)
        self.renderer = U.CardRenderer(self.theme)
        self.config_dirty = True

    def reset_statistics(self):
        self.engine.reset_statistics()
        self.message = "Statistics reset successfully!"

    def click_stock(self):
        result = self.engine.draw_from_stock()
        if result.kind is DrawKind.RECYCLED:
            self.message = "Waste recycled into stock."
        elif result.kind is DrawKind.DRAWN and self.engine.in_progress:
            self.message = ""

    def _is_double_click(self, pid: PileId, idx: int) -> bool:
        last = self._last_click
        self._last_click = (pid, idx, self._now_ms)
        if last is None:
            return False
        return last[0] == pid and last[1] == idx and self._now_ms - last[2] <= DOUBLE_CLICK_MS

    def _report_move(self, result):
        if not result.applied:
            self.message = f"Invalid move: {result.reason}"
            return
        # the clicked slot now holds a different card
        self._last_click = None
        if self.engine.in_progress:
            self.message = ""

    # ---------- Event handling ----------
    def handle_event(self, e):
        if e.type == pygame.MOUSEMOTION:
            self.mouse_pos = e.pos

        elif e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
            self.mouse_pos = e.pos
            for key, button in self.buttons.items():
                if button.hovered(e.pos):
                    self._press_button(key)
                    return
            if self.auto_steps is not None:
                return
            found = self.hit(e.pos)
            if found is None:
                return
            pid, idx = found
            if pid == STOCK:
                self.click_stock()
                return
            if idx < 0 or pid.kind not in (WASTE_KIND, TABLEAU_KIND):
                return
            cards = self.engine.pile(pid).cards
            if pid == WASTE:
                idx = len(cards) - 1
            if self._is_double_click(pid, idx):
                self.drag = None
                self._report_move(self.engine.move_to_foundation(pid, idx))
                return
            if cards[idx].face_up:
                self.drag = (pid, idx)

        elif e.type == pygame.MOUSEBUTTONUP and e.button == 1:
            if not self.drag:
                return
            source, idx = self.drag
            self.drag = None
            target = self.drop_target(e.pos)
            if target is None or target == source:
                return
            self._report_move(self.engine.attempt_move(source, idx, target))

        elif e.type == pygame.KEYDOWN:
            if e.key == pygame.K_n:
                self.new_game()
            elif e.key == pygame.K_u:
                self.undo()
            elif e.key == pygame.K_h:
                self.show_hint()
            elif e.key == pygame.K_a:
                self.start_auto_complete()
            elif e.key == pygame.K_m:
                self.toggle_night_mode()
            elif e.key == pygame.K_r:
                self.reset_statistics()
            elif e.key == pygame.K_ESCAPE:
                self.quit_requested = True

    def _press_button(self, key):
        if key == "new":
            self.new_game()
        elif key == "undo":
            self.undo()
        elif key == "hint":
            self.show_hint()
        elif key == "auto":
            self.start_auto_complete()
        elif key == "reset":
            self.reset_statistics()

    def update(self, dt):
        self._now_ms += dt
        self.flush_config()
        if self.auto_steps is None:
            return
        self._auto_elapsed += dt
        if self._auto_elapsed < self.auto_interval_ms:
            return
        self._auto_elapsed = 0
        if next(self.auto_steps, None) is None:
            self.auto_steps = None

    # ---------- Drawing ----------
    def _dragged(self, pid: PileId, idx: int) -> bool:
        return self.drag is not None and self.drag[0] == pid and idx >= self.drag[1]

    def draw_pile(self, screen, pid: PileId):
        cards = self.engine.pile(pid).cards
        x, y = self.pile_origin(pid)
        pygame.draw.rect(screen, self.theme.slot, (x, y, U.CARD_W, U.CARD_H), width=2, border_radius=U.CARD_RADIUS)
        first = 0
        if pid == WASTE:
            first = max(0, len(cards) - VISIBLE_WASTE)
        elif pid == STOCK or pid.kind != TABLEAU_KIND:
            first = max(0, len(cards) - 1)
        for i in range(first, len(cards)):
            if self._dragged(pid, i):
                break
            r = self.rect_for_index(pid, i)
            screen.blit(self.renderer.surface_for(cards[i]), r.topleft)

    def draw(self, screen):
        t = self.theme
        screen.fill(t.table_bg)

        engine = self.engine
        elapsed = engine.elapsed_seconds()
        hud = f"Score: {engine.score}   Time: {elapsed // 60:02d}:{elapsed % 60:02d}"
        screen.blit(U.FONT_UI.render(hud, True, t.text), (20, 10))
        stats = engine.stats
        line = f"Games: {stats.games_played}  Won: {stats.games_won}  Win Rate: {stats.win_rate}%"
        screen.blit(U.FONT_SMALL.render(line, True, t.text), (20, 38))

        for key, button in self.buttons.items():
            enabled = key != "auto" or engine.can_auto_complete()
            if key == "undo":
                enabled = engine.can_undo()
            button.draw(screen, t, hover=button.hovered(self.mouse_pos), enabled=enabled)

        for pid in self.all_pile_ids():
            self.draw_pile(screen, pid)

        if self.drag:
            pid, idx = self.drag
            mx, my = self.mouse_pos
            for i, c in enumerate(engine.pile(pid).cards[idx:]):
                screen.blit(self.renderer.surface_for(c), (mx - U.CARD_W // 2, my - U.CARD_H // 2 + i * U.FAN_UP))

        if self.message:
            msg = U.FONT_UI.render(self.message, True, (255, 255, 180))
            screen.blit(msg, (U.SCREEN_W // 2 - msg.get_width() // 2, U.SCREEN_H - 40))
