# __main__.py - entry point
import os
import logging
import pygame
from solitaire import common as C
from solitaire import saves
from solitaire import settings as S
from solitaire.modes.klondike import KlondikeGameScene

logger = logging.getLogger(__name__)


def _configure_logging():
    level_name = os.environ.get("SOLI_LOG_LEVEL", "WARNING").strip().upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _seed_from_env():
    raw = os.environ.get("SOLI_SEED", "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("ignoring SOLI_SEED=%r, not an integer", raw)
        return None


def _initial_window_size():
    info = pygame.display.Info()
    # Keep a safety margin so the window never hides under taskbar
    margin_w, margin_h = 120, 140
    w = min(C.SCREEN_W, max(640, info.current_w - margin_w))
    h = min(C.SCREEN_H, max(480, info.current_h - margin_h))
    return w, h


def _allowed_keys_set():
    keys = [
        "K_ESCAPE", "K_RETURN", "K_KP_ENTER", "K_y",
        "K_n", "K_r", "K_u", "K_h", "K_a", "K_p", "K_s", "K_l",
    ]
    out = set()
    for n in keys:
        v = getattr(pygame, n, None)
        if isinstance(v, int):
            out.add(v)
    return out


def _confirm_modal_rects():
    mw, mh = 460, 180
    modal = pygame.Rect(0, 0, mw, mh)
    modal.center = (C.SCREEN_W // 2, C.SCREEN_H // 2)
    bw, bh = 120, 44
    gap = 30
    yes = pygame.Rect(0, 0, bw, bh)
    no = pygame.Rect(0, 0, bw, bh)
    yes.centerx = modal.centerx - (bw // 2 + gap)
    no.centerx = modal.centerx + (bw // 2 + gap)
    yes.bottom = modal.bottom - 20
    no.bottom = modal.bottom - 20
    return modal, yes, no


def _draw_confirm(screen):
    overlay = pygame.Surface((C.SCREEN_W, C.SCREEN_H), pygame.SRCALPHA)
    overlay.fill((0, 0, 0, 160))
    screen.blit(overlay, (0, 0))
    modal, yes_r, no_r = _confirm_modal_rects()
    pygame.draw.rect(screen, (240, 240, 240), modal, border_radius=16)
    pygame.draw.rect(screen, (80, 80, 80), modal, width=2, border_radius=16)
    title = C.FONT_TITLE.render("Quit Game?", True, (20, 20, 20))
    screen.blit(title, (modal.centerx - title.get_width() // 2, modal.y + 20))
    msg = C.FONT_UI.render("Press S first to keep this game.", True, (30, 30, 30))
    screen.blit(msg, (modal.centerx - msg.get_width() // 2, modal.y + 20 + title.get_height() + 8))
    for rect, label in ((yes_r, "Yes"), (no_r, "No")):
        pygame.draw.rect(screen, (230, 230, 235), rect, border_radius=10)
        pygame.draw.rect(screen, (100, 100, 110), rect, 1, border_radius=10)
        t = C.FONT_UI.render(label, True, (20, 20, 25))
        screen.blit(t, (rect.centerx - t.get_width() // 2, rect.centery - t.get_height() // 2))


def main():
    _configure_logging()
    S.load_settings()

    # Center window and init
    os.environ.setdefault("SDL_VIDEO_CENTERED", "1")
    pygame.init()

    w, h = _initial_window_size()
    C.SCREEN_W, C.SCREEN_H = w, h
    screen = pygame.display.set_mode((w, h), pygame.RESIZABLE)
    pygame.display.set_caption("Klondike")
    C.setup_fonts()
    C.apply_card_size(C.card_size_from_env() or S.get_current_settings()["card_size"])
    clock = pygame.time.Clock()

    seed = _seed_from_env()
    saved = saves.load_game() if seed is None else None
    scene = KlondikeGameScene(app=None, settings=S.game_settings(), seed=seed, load_state=saved)

    allowed_keys = _allowed_keys_set()
    running = True
    confirm_quit = False

    while running:
        clock.tick(60)
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                confirm_quit = True
                continue
            if e.type == pygame.VIDEORESIZE:
                C.SCREEN_W, C.SCREEN_H = e.size
                screen = pygame.display.set_mode((C.SCREEN_W, C.SCREEN_H), pygame.RESIZABLE)
                continue
            if confirm_quit:
                # Handle confirm dialog input only
                if e.type == pygame.KEYDOWN:
                    if e.key in (pygame.K_ESCAPE, pygame.K_n):
                        confirm_quit = False
                    elif e.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_y):
                        running = False
                elif e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
                    _, yes_r, no_r = _confirm_modal_rects()
                    if yes_r.collidepoint(e.pos):
                        running = False
                    elif no_r.collidepoint(e.pos):
                        confirm_quit = False
                continue
            if e.type == pygame.KEYDOWN and getattr(e, "key", None) not in allowed_keys:
                continue
            scene.handle_event(e)
        if scene.quit_requested:
            scene.quit_requested = False
            confirm_quit = True
        if scene.next_scene is not None:
            scene = scene.next_scene
        scene.draw(screen)
        if confirm_quit:
            _draw_confirm(screen)
        pygame.display.flip()
    saves.save_stats(scene.game.stats)
    pygame.quit()


if __name__ == "__main__":
    main()
