# common.py - pygame drawing helpers shared by the Klondike front end
import os
import pygame
from typing import Optional

from solitaire import settings as S
from solitaire.engine.cards import RANK_TO_TEXT, Card, Suit
from solitaire.engine.stacks import Stack


def _size_to_dims(size_name: str):
    size_name = (size_name or "Medium").capitalize()
    if size_name == "Small":
        return 75, 105
    if size_name == "Large":
        return 150, 210
    return 100, 140


# ---------- Configuration ----------
SCREEN_W, SCREEN_H = 1280, 800
GREEN_TABLE = (2, 100, 40)
TABLE_BG = GREEN_TABLE

CARD_W, CARD_H = _size_to_dims(S.get_current_settings().get("card_size", "Medium"))
CARD_RADIUS = 10
CARD_GAP_X = 18
CARD_FAN_Y = 28

# Fonts are initialized via setup_fonts() AFTER pygame.init() in __main__.py
FONT_NAME = None
FONT_SMALL = None
FONT_UI = None
FONT_TITLE = None
FONT_CORNER_RANK = None
FONT_CORNER_SUIT = None


def setup_fonts():
    global FONT_NAME, FONT_SMALL, FONT_UI, FONT_TITLE, FONT_CORNER_RANK, FONT_CORNER_SUIT
    FONT_NAME = pygame.font.get_default_font()
    FONT_SMALL = pygame.font.SysFont(FONT_NAME, 20, bold=True)
    FONT_UI = pygame.font.SysFont(FONT_NAME, 26, bold=True)
    FONT_TITLE = pygame.font.SysFont(FONT_NAME, 44, bold=True)
    FONT_CORNER_RANK = pygame.font.SysFont(FONT_NAME, 28, bold=True)
    # Suit glyphs need a Unicode-capable font
    FONT_CORNER_SUIT = pygame.font.SysFont("Segoe UI Symbol", 26, bold=True)


# Colors
BLACK = (20, 20, 20)
WHITE = (245, 245, 245)
RED = (200, 20, 20)
GOLD = (230, 190, 80)
LIGHT = (220, 220, 220)
HINT = (255, 230, 90)


def apply_card_size(size_name: str):
    global CARD_W, CARD_H
    CARD_W, CARD_H = _size_to_dims(size_name)
    invalidate_card_caches()


# ---------- Card surfaces ----------
_card_face_cache = {}
_card_back_cache = None


def invalidate_card_caches():
    global _card_face_cache, _card_back_cache
    _card_face_cache = {}
    _card_back_cache = None


def draw_suit_shape(surface, center, suit: Suit, color, size=42):
    x, y = center
    if suit == Suit.DIAMONDS:
        half = size//2
        points = [(x, y - half), (x + half, y), (x, y + half), (x - half, y)]
        pygame.draw.polygon(surface, color, points)
    elif suit == Suit.HEARTS:
        r = size//3
        pygame.draw.circle(surface, color, (x - r, y - r), r)
        pygame.draw.circle(surface, color, (x + r, y - r), r)
        tri = [(x - 2*r, y - r), (x + 2*r, y - r), (x, y + 2*r)]
        pygame.draw.polygon(surface, color, tri)
    elif suit == Suit.SPADES:
        r = size//3
        pygame.draw.circle(surface, color, (x - r, y), r)
        pygame.draw.circle(surface, color, (x + r, y), r)
        tri = [(x - 2*r, y), (x + 2*r, y), (x, y - 2*r)]
        pygame.draw.polygon(surface, color, tri)
        stem_w = max(6, size//6)
        pygame.draw.rect(surface, color, (x - stem_w//2, y + r, stem_w, size//2))
    else:  # clubs
        r = size//3
        pygame.draw.circle(surface, color, (x, y - r), r)
        pygame.draw.circle(surface, color, (x - r, y + r//3), r)
        pygame.draw.circle(surface, color, (x + r, y + r//3), r)
        stem_w = max(6, size//6)
        pygame.draw.rect(surface, color, (x - stem_w//2, y + r, stem_w, size//2))


def get_card_surface(card: Card):
    if not card.face_up:
        return get_back_surface()
    key = card.key
    if key in _card_face_cache:
        return _card_face_cache[key]
    surf = pygame.Surface((CARD_W, CARD_H), pygame.SRCALPHA)
    pygame.draw.rect(surf, WHITE, (0, 0, CARD_W, CARD_H), border_radius=CARD_RADIUS)
    pygame.draw.rect(surf, BLACK, (0, 0, CARD_W, CARD_H), width=3, border_radius=CARD_RADIUS)
    color = RED if card.is_red else BLACK
    margin = 10
    rtxt = FONT_CORNER_RANK.render(RANK_TO_TEXT[card.rank], True, color)
    stxt = FONT_CORNER_SUIT.render(card.suit.symbol, True, color)
    surf.blit(rtxt, (margin, margin))
    surf.blit(stxt, (margin, margin + rtxt.get_height() - 2))
    draw_suit_shape(surf, (CARD_W//2, CARD_H//2), card.suit, color, size=min(56, CARD_W//2))
    _card_face_cache[key] = surf
    return surf


def get_back_surface():
    global _card_back_cache
    if _card_back_cache is not None:
        return _card_back_cache
    surf = pygame.Surface((CARD_W, CARD_H), pygame.SRCALPHA)
    pygame.draw.rect(surf, WHITE, (0, 0, CARD_W, CARD_H), border_radius=CARD_RADIUS)
    pygame.draw.rect(surf, BLACK, (0, 0, CARD_W, CARD_H), width=3, border_radius=CARD_RADIUS)
    inset = 8
    inner_rect = pygame.Rect(inset, inset, CARD_W-2*inset, CARD_H-2*inset)
    pygame.draw.rect(surf, (34, 96, 200), inner_rect, border_radius=8)
    for i in range(-CARD_H, CARD_W, 12):
        pygame.draw.line(surf, LIGHT, (i, 8), (i+CARD_H, CARD_H-8), 1)
    _card_back_cache = surf
    return surf


# ---------- Piles ----------
class Pile:
    """Screen placement of one engine Stack. Holds no cards of its own."""

    def __init__(self, stack: Stack, x, y, fan_y=0):
        self.stack = stack
        self.x, self.y = x, y
        self.fan_y = fan_y

    @property
    def cards(self):
        return self.stack.cards

    def rect_for_index(self, idx):
        return pygame.Rect(self.x, self.y + idx * self.fan_y, CARD_W, CARD_H)

    def top_rect(self):
        if not self.cards:
            return pygame.Rect(self.x, self.y, CARD_W, CARD_H)
        return self.rect_for_index(len(self.cards)-1)

    def draw(self, screen, skip_from: Optional[int] = None, highlight: Optional[Card] = None):
        if not self.cards:
            pygame.draw.rect(screen, (255, 255, 255), (self.x, self.y, CARD_W, CARD_H),
                             border_radius=CARD_RADIUS, width=2)
        for i, c in enumerate(self.cards):
            if skip_from is not None and i >= skip_from:
                break
            r = self.rect_for_index(i)
            screen.blit(get_card_surface(c), r.topleft)
            if c is highlight:
                pygame.draw.rect(screen, HINT, r, width=4, border_radius=CARD_RADIUS)

    def hit(self, pos):
        """Index of the card under `pos`, -1 for an empty pile's outline, else None."""
        if not self.cards:
            r = pygame.Rect(self.x, self.y, CARD_W, CARD_H)
            return -1 if r.collidepoint(pos) else None
        for i in reversed(range(len(self.cards))):
            if self.rect_for_index(i).collidepoint(pos):
                return i
        return None


# ---------- UI ----------
class Button:
    def __init__(self, text, x, y, w=280, h=48, center=False):
        self.text = text
        self.rect = pygame.Rect(0, 0, w, h)
        if center:
            self.rect.center = (x, y)
        else:
            self.rect.topleft = (x, y)

    def draw(self, screen, hover=False):
        col = GOLD if hover else (200, 200, 200)
        pygame.draw.rect(screen, col, self.rect, border_radius=12)
        pygame.draw.rect(screen, BLACK, self.rect, 2, border_radius=12)
        t = FONT_UI.render(self.text, True, BLACK)
        screen.blit(t, (self.rect.centerx - t.get_width() // 2,
                        self.rect.centery - t.get_height() // 2))

    def hovered(self, mouse_pos):
        return self.rect.collidepoint(mouse_pos)


# ---------- Base Scene ----------
class Scene:
    def __init__(self, app):
        self.app = app
        self.next_scene = None
        self.quit_requested = False

    def handle_event(self, e): pass
    def update(self, dt): pass
    def draw(self, screen): pass


def card_size_from_env() -> Optional[str]:
    name = os.environ.get("SOLI_CARD_SIZE", "").strip().capitalize()
    return name if name in S.CARD_SIZES else None
