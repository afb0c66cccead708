# ui.py - pygame drawing helpers: themes, fonts, card surfaces, buttons
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import pygame

from klondike.common import RANK_TO_TEXT, SUITS, Card, is_red

Color = Tuple[int, int, int]

SCREEN_W, SCREEN_H = 1024, 720
CARD_W, CARD_H = 90, 126
CARD_RADIUS = 10
CARD_GAP_X = 18
FAN_DOWN = 12
FAN_UP = 28
TOP_BAR_H = 60


@dataclass(frozen=True)
class Theme:
    """Colors for one look of the table. Passed to the scene explicitly."""

    name: str
    table_bg: Color
    text: Color
    card_face: Color
    card_edge: Color
    red: Color
    black: Color
    back_fill: Color
    back_lines: Color
    slot: Color
    button: Color
    button_hover: Color


DAY_THEME = Theme(
    name="day",
    table_bg=(2, 100, 40),
    text=(245, 245, 245),
    card_face=(245, 245, 245),
    card_edge=(20, 20, 20),
    red=(200, 20, 20),
    black=(20, 20, 20),
    back_fill=(34, 96, 200),
    back_lines=(220, 220, 220),
    slot=(255, 255, 255),
    button=(200, 200, 200),
    button_hover=(230, 190, 80),
)

NIGHT_THEME = Theme(
    name="night",
    table_bg=(18, 28, 36),
    text=(200, 205, 210),
    card_face=(190, 190, 185),
    card_edge=(60, 60, 60),
    red=(170, 40, 40),
    black=(30, 30, 30),
    back_fill=(0, 50, 150),
    back_lines=(100, 150, 255),
    slot=(120, 130, 140),
    button=(90, 95, 100),
    button_hover=(160, 130, 60),
)


def theme_for(night_mode: bool) -> Theme:
    return NIGHT_THEME if night_mode else DAY_THEME


# Fonts are initialized via setup_fonts() AFTER pygame.init()
FONT_SMALL = None
FONT_UI = None
FONT_CORNER_RANK = None
FONT_CORNER_SUIT = None


def setup_fonts():
    global FONT_SMALL, FONT_UI, FONT_CORNER_RANK, FONT_CORNER_SUIT
    name = pygame.font.get_default_font()
    FONT_SMALL = pygame.font.SysFont(name, 20, bold=True)
    FONT_UI = pygame.font.SysFont(name, 26, bold=True)
    FONT_CORNER_RANK = pygame.font.SysFont(name, 28, bold=True)
    # Suit glyphs need a Unicode-capable font
    try:
        FONT_CORNER_SUIT = pygame.font.SysFont("Segoe UI Symbol", 26, bold=True)
    except Exception:
        FONT_CORNER_SUIT = pygame.font.SysFont(name, 26, bold=True)


def draw_suit_shape(surface, center, suit_index, color, size=42):
    x, y = center
    if suit_index == 2:  # ♦ diamond
        half = size // 2
        points = [(x, y - half), (x + half, y), (x, y + half), (x - half, y)]
        pygame.draw.polygon(surface, color, points)
    elif suit_index == 1:  # ♥ heart
        r = size // 3
        pygame.draw.circle(surface, color, (x - r, y - r), r)
        pygame.draw.circle(surface, color, (x + r, y - r), r)
        pygame.draw.polygon(surface, color, [(x - 2 * r, y - r), (x + 2 * r, y - r), (x, y + 2 * r)])
    elif suit_index == 0:  # ♠ spade
        r = size // 3
        pygame.draw.circle(surface, color, (x - r, y), r)
        pygame.draw.circle(surface, color, (x + r, y), r)
        pygame.draw.polygon(surface, color, [(x - 2 * r, y), (x + 2 * r, y), (x, y - 2 * r)])
        stem_w = max(6, size // 6)
        pygame.draw.rect(surface, color, (x - stem_w // 2, y + r, stem_w, size // 2))
    else:  # ♣ club
        r = size // 3
        pygame.draw.circle(surface, color, (x, y - r), r)
        pygame.draw.circle(surface, color, (x - r, y + r // 3), r)
        pygame.draw.circle(surface, color, (x + r, y + r // 3), r)
        stem_w = max(6, size // 6)
        pygame.draw.rect(surface, color, (x - stem_w // 2, y + r, stem_w, size // 2))


class CardRenderer:
    """Builds and caches card surfaces for one theme."""

    def __init__(self, theme: Theme):
        self.theme = theme
        self._faces: Dict[Tuple[int, int], pygame.Surface] = {}
        self._back: Optional[pygame.Surface] = None

    def surface_for(self, card: Card) -> pygame.Surface:
        if not card.face_up:
            return self.back()
        key = card.key()
        if key in self._faces:
            return self._faces[key]
        t = self.theme
        surf = pygame.Surface((CARD_W, CARD_H), pygame.SRCALPHA)
        pygame.draw.rect(surf, t.card_face, (0, 0, CARD_W, CARD_H), border_radius=CARD_RADIUS)
        pygame.draw.rect(surf, t.card_edge, (0, 0, CARD_W, CARD_H), width=3, border_radius=CARD_RADIUS)
        color = t.red if is_red(card.suit) else t.black
        margin = 8
        rtxt = FONT_CORNER_RANK.render(RANK_TO_TEXT[card.rank], True, color)
        stxt = FONT_CORNER_SUIT.render(SUITS[card.suit], True, color)
        surf.blit(rtxt, (margin, margin))
        surf.blit(stxt, (margin, margin + rtxt.get_height() - 2))
        draw_suit_shape(surf, (CARD_W // 2, CARD_H // 2 + 10), card.suit, color, size=40)
        self._faces[key] = surf
        return surf

    def back(self) -> pygame.Surface:
        if self._back is not None:
            return self._back
        t = self.theme
        surf = pygame.Surface((CARD_W, CARD_H), pygame.SRCALPHA)
        pygame.draw.rect(surf, t.card_face, (0, 0, CARD_W, CARD_H), border_radius=CARD_RADIUS)
        pygame.draw.rect(surf, t.card_edge, (0, 0, CARD_W, CARD_H), width=3, border_radius=CARD_RADIUS)
        inset = 8
        pygame.draw.rect(surf, t.back_fill, (inset, inset, CARD_W - 2 * inset, CARD_H - 2 * inset), border_radius=8)
        for i in range(-CARD_H, CARD_W, 12):
            pygame.draw.line(surf, t.back_lines, (i, 8), (i + CARD_H, CARD_H - 8), 1)
        self._back = surf
        return surf


class Button:
    def __init__(self, text, x, y, w=170, h=32):
        self.text = text
        self.rect = pygame.Rect(x, y, w, h)

    def draw(self, screen, theme: Theme, hover=False, enabled=True):
        col = theme.button_hover if hover and enabled else theme.button
        pygame.draw.rect(screen, col, self.rect, border_radius=10)
        pygame.draw.rect(screen, theme.black, self.rect, 2, border_radius=10)
        t = FONT_SMALL.render(self.text, True, theme.black if enabled else theme.slot)
        screen.blit(t, (self.rect.centerx - t.get_width() // 2, self.rect.centery - t.get_height() // 2))

    def hovered(self, mouse_pos):
        return self.rect.collidepoint(mouse_pos)
