# klondike.py - Klondike scene: mouse/keyboard input -> KlondikeGame commands
import logging
import pygame

from solitaire import common as C
from solitaire import saves
from solitaire.engine.errors import InvalidDeckError
from solitaire.engine.game import KlondikeGame
from solitaire.engine.hints import BestMoveType, plan_auto_complete_sweep
from solitaire.engine.stacks import StackKind
from solitaire.engine.state import format_time

logger = logging.getLogger(__name__)


class KlondikeGameScene(C.Scene):
    def __init__(self, app, settings=None, seed=None, load_state=None):
        super().__init__(app)
        self.game = KlondikeGame(settings=settings, stats=saves.load_stats())
        self.message = ""
        self.hint = None
        # (cards, from_stack) while the mouse button is held
        self.drag_stack = None

        # Auto-finish animation
        self.b_autofinish = C.Button("Auto Finish", C.SCREEN_W//2 - 85, 46, w=170, h=28)
        self.auto_play_active = False
        self.auto_last_time = 0
        self.auto_interval_ms = 180

        if load_state is not None:
            self._load(load_state)
        else:
            self.game.new_game(seed=seed)
        self._build_piles()

    @property
    def engine(self):
        return self.game.engine

    def _build_piles(self):
        e = self.engine
        self.foundations = [C.Pile(f, 40 + i*(C.CARD_W+20), 90) for i, f in enumerate(e.foundations)]
        self.stock_pile = C.Pile(e.stock, 40, 260)
        self.waste_pile = C.Pile(e.waste, 40 + (C.CARD_W+20), 260)
        self.tableau = [C.Pile(t, 300 + i*(C.CARD_W+C.CARD_GAP_X), 260, fan_y=C.CARD_FAN_Y)
                        for i, t in enumerate(e.tableau)]

    def all_piles(self):
        return [self.stock_pile, self.waste_pile, *self.foundations, *self.tableau]

    # ---------- Commands ----------
    def deal_new(self, seed=None):
        self.game.new_game(seed=seed)
        saves.save_stats(self.game.stats)
        self._build_piles()
        self._reset_ui()

    def restart(self):
        if self.game.restart():
            self._reset_ui()

    def _reset_ui(self):
        self.drag_stack = None
        self.hint = None
        self.message = ""
        self.auto_play_active = False

    def undo(self):
        if self.game.undo() is None:
            self.message = "Nothing to undo"
        else:
            self.message = ""
        self.auto_play_active = False
        self.hint = None

    def show_hint(self):
        best = self.game.request_hint()
        self.hint = best
        if best is None:
            self.message = "No moves available"
        else:
            self.message = best.describe()

    def save(self):
        if self.game.state.is_completed:
            self.message = "Game is over, nothing to save"
            return
        self.message = "Game saved" if saves.save_game(self.game.snapshot()) else "Save failed"

    def _load(self, data):
        try:
            self.game = KlondikeGame.from_snapshot(data, stats=self.game.stats)
        except (InvalidDeckError, KeyError) as e:
            logger.warning("saved game could not be loaded: %s", e)
            saves.clear_saved_game()
            self.game.new_game()
            self.message = "Saved game was damaged, dealt a new one"
            return False
        return True

    def load(self):
        data = saves.load_game()
        if data is None:
            self.message = "No saved game"
            return
        if self._load(data):
            self.message = "Game loaded"
        self._build_piles()
        self.drag_stack = None
        self.hint = None

    def _after_move(self):
        self.hint = None
        if self.game.state.is_completed:
            saves.save_stats(self.game.stats)
            saves.clear_saved_game()
            self.message = "Congratulations! You won! Press N for a new game."
        elif self.game.is_blocked():
            self.message = "No moves left. Press N for a new game or U to undo."
        else:
            self.message = ""

    def start_auto_finish(self):
        if not self.game.can_auto_finish():
            return
        self.auto_play_active = True
        self.auto_last_time = pygame.time.get_ticks()

    def step_auto_finish(self):
        """Move one card per tick; stop when nothing more fits."""
        plan = plan_auto_complete_sweep(self.engine.all_stacks())
        if not plan or not self.game.move(plan[0].card, plan[0].from_stack, plan[0].to_stack):
            self.auto_play_active = False
        self._after_move()

    # ---------- Event handling ----------
    def handle_event(self, e):
        if e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
            self._on_left_down(e.pos)
        elif e.type == pygame.MOUSEBUTTONDOWN and e.button == 3:
            self._on_right_click(e.pos)
        elif e.type == pygame.MOUSEBUTTONUP and e.button == 1:
            self._on_left_up(e.pos)
        elif e.type == pygame.KEYDOWN:
            self._on_key(e.key)

    def _on_left_down(self, pos):
        if self.b_autofinish.hovered(pos) and self.game.can_auto_finish():
            self.start_auto_finish()
            return

        if pygame.Rect(self.stock_pile.x, self.stock_pile.y, C.CARD_W, C.CARD_H).collidepoint(pos):
            self.game.draw_from_stock()
            self._after_move()
            return

        for pile in [self.waste_pile, *self.foundations]:
            hi = pile.hit(pos)
            if hi is not None and hi >= 0 and hi == len(pile.cards) - 1:
                self.drag_stack = ([pile.cards[hi]], pile.stack)
                return

        for t in self.tableau:
            hi = t.hit(pos)
            if hi is None or hi == -1:
                continue
            card = t.cards[hi]
            if hi == len(t.cards) - 1 and not card.face_up:
                self.game.flip(card)
                self._after_move()
                return
            if card.face_up:
                run = self.engine.cards_from(card)
                if len(run) == len(t.cards) - hi:
                    self.drag_stack = (run, t.stack)
                return

    def _on_left_up(self, pos):
        if not self.drag_stack:
            return
        cards, source = self.drag_stack
        self.drag_stack = None
        for pile in [*self.foundations, *self.tableau]:
            if pile.stack is source or not pile.top_rect().collidepoint(pos):
                continue
            if len(cards) == 1:
                ok = self.game.move(cards[0], source, pile.stack)
            else:
                ok = self.game.move_run(cards, source, pile.stack)
            if ok:
                self._after_move()
                if self.game.settings.auto_complete and self.game.can_auto_finish():
                    self.start_auto_finish()
                return
        # dropped nowhere legal: the cards never left their stack

    def _on_right_click(self, pos):
        for pile in [self.waste_pile, *self.tableau]:
            hi = pile.hit(pos)
            if hi is not None and hi >= 0 and hi == len(pile.cards) - 1:
                if self.game.send_to_foundation(pile.cards[hi]):
                    self._after_move()
                return

    def _on_key(self, key):
        if key == pygame.K_n:
            self.deal_new()
        elif key == pygame.K_r:
            self.restart()
        elif key == pygame.K_u:
            self.undo()
        elif key == pygame.K_h:
            self.show_hint()
        elif key == pygame.K_a:
            self.start_auto_finish()
        elif key == pygame.K_p:
            paused = self.game.toggle_pause()
            self.message = "Paused" if paused else ""
        elif key == pygame.K_s:
            self.save()
        elif key == pygame.K_l:
            self.load()
        elif key == pygame.K_ESCAPE:
            self.quit_requested = True

    # ---------- Drawing ----------
    def _hint_card(self):
        if self.hint is None or self.hint.type in (BestMoveType.DRAW_STOCK, BestMoveType.RECYCLE_WASTE):
            return None
        return self.hint.card

    def draw(self, screen):
        screen.fill(C.TABLE_BG)

        if self.auto_play_active:
            now = pygame.time.get_ticks()
            if now - self.auto_last_time >= self.auto_interval_ms:
                self.step_auto_finish()
                self.auto_last_time = now

        # HUD
        keys = "ESC: Quit  N: New  R: Restart  U: Undo  H: Hint  A: Auto  P: Pause  S/L: Save/Load"
        h = C.FONT_UI.render(keys, True, C.WHITE)
        screen.blit(h, (C.SCREEN_W - h.get_width() - 20, 10))
        info = self.game.game_info()
        status = f"Score {info.score}   Moves {info.moves}"
        if self.game.settings.show_timer:
            status += f"   Time {format_time(info.time)}"
        st = C.FONT_UI.render(status, True, C.WHITE)
        screen.blit(st, (20, 10))

        mp = pygame.mouse.get_pos()
        self.b_autofinish.draw(screen, hover=self.b_autofinish.hovered(mp) and self.game.can_auto_finish())

        dragging = self.drag_stack[0] if self.drag_stack else []
        hint_card = self._hint_card()
        for pile in self.all_piles():
            skip = None
            if dragging and pile.stack is dragging[0].stack:
                skip = dragging[0].index
            pile.draw(screen, skip_from=skip, highlight=hint_card)
            if pile.stack.kind in (StackKind.STOCK, StackKind.WASTE, StackKind.FOUNDATION):
                lab = C.FONT_SMALL.render(pile.stack.kind.value.capitalize(), True, C.WHITE)
                screen.blit(lab, (pile.x + (C.CARD_W - lab.get_width())//2, pile.y - 22))

        if dragging:
            mx, my = mp
            for i, c in enumerate(dragging):
                screen.blit(C.get_card_surface(c), (mx - C.CARD_W//2, my - C.CARD_H//2 + i*C.CARD_FAN_Y))

        if self.message:
            msg = C.FONT_UI.render(self.message, True, (255, 255, 180))
            screen.blit(msg, (C.SCREEN_W//2 - msg.get_width()//2, C.SCREEN_H - 40))
