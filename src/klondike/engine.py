"""Klondike game engine.

The engine owns the table, score, clock and undo history. Collaborators
(the pygame scene, tests) call intent-level operations such as
:meth:`GameEngine.attempt_move` and render whatever state results.
Illegal moves come back as :class:`MoveResult` values; only internal
corruption raises.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple

from klondike import rules as R
from klondike import solver as S
from klondike.common import Card, Deck
from klondike.errors import InvariantError, RejectReason
from klondike.history import MAX_UNDO, GameStateSnapshot, UndoManager
from klondike.piles import (
    DRAW_COUNT,
    FOUNDATION_KIND,
    TABLEAU_KIND,
    WASTE_KIND,
    Pile,
    PileId,
    Table,
)
from klondike.solver import MoveDescription

logger = logging.getLogger(__name__)

FLIP_POINTS = 5
FOUNDATION_POINTS = 10
UNDO_PENALTY = 15
WIN_BONUS_BASE = 10000
WIN_BONUS_PER_SECOND = 2


class GameStatus(Enum):
    NOT_STARTED = "not_started"
    DEALING = "dealing"
    IN_PROGRESS = "in_progress"
    WON = "won"
    STALLED = "stalled"


class DrawKind(Enum):
    DRAWN = "drawn"
    RECYCLED = "recycled"
    EMPTY = "empty"


@dataclass(frozen=True)
class DrawResult:
    kind: DrawKind
    cards: Tuple[Card, ...] = ()

    @property
    def recycled(self) -> bool:
        return self.kind is DrawKind.RECYCLED


@dataclass(frozen=True)
class MoveResult:
    applied: bool
    reason: Optional[RejectReason] = None
    cards: Tuple[Card, ...] = ()
    flipped: bool = False
    points: int = 0

    def __bool__(self) -> bool:
        return self.applied

    @classmethod
    def rejected(cls, reason: RejectReason) -> "MoveResult":
        return cls(applied=False, reason=reason)


@dataclass
class GameStats:
    games_played: int = 0
    games_won: int = 0

    @property
    def win_rate(self) -> int:
        """Whole-number win percentage."""
        return self.games_won * 100 // self.games_played if self.games_played > 0 else 0


EventHook = Callable[[str, "GameEngine"], None]


@dataclass
class _Clock:
    now: Callable[[], float] = time.monotonic
    started: Optional[float] = None
    stopped: Optional[float] = None

    def start(self):
        self.started = self.now()
        self.stopped = None

    def stop(self):
        if self.started is not None and self.stopped is None:
            self.stopped = self.now()

    def elapsed(self) -> float:
        if self.started is None:
            return 0.0
        end = self.stopped if self.stopped is not None else self.now()
        return max(0.0, end - self.started)


class GameEngine:
    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
        stats: Optional[GameStats] = None,
        on_event: Optional[EventHook] = None,
        undo_limit: int = MAX_UNDO,
        debug_checks: bool = True,
    ):
        self.table = Table()
        self.score = 0
        self.status = GameStatus.NOT_STARTED
        self.stats = stats if stats is not None else GameStats()
        self.history = UndoManager(undo_limit)
        self.on_event = on_event
        self.debug_checks = debug_checks
        self._rng = rng
        self._clock = _Clock(now=clock)

    # ---------- Queries ----------
    @property
    def in_progress(self) -> bool:
        return self.status is GameStatus.IN_PROGRESS

    @property
    def start_time(self) -> Optional[float]:
        return self._clock.started

    def pile(self, pile_id: PileId) -> Pile:
        return self.table.get(pile_id)

    def piles(self) -> List[Tuple[PileId, List[Card]]]:
        """Every pile as (id, bottom-to-top cards)."""
        return [(pid, list(p.cards)) for pid, p in self.table.ordered()]

    def elapsed_seconds(self) -> int:
        return int(self._clock.elapsed())

    def can_undo(self) -> bool:
        return self.history.can_undo() and self.status in (GameStatus.IN_PROGRESS, GameStatus.STALLED)

    def can_auto_complete(self) -> bool:
        return self.in_progress and S.can_auto_complete(self.table)

    def has_available_move(self) -> bool:
        return S.has_available_move(self.table)

    # ---------- Lifecycle ----------
    def new_game(self):
        if self.in_progress:
            self._end_game(won=False)

        self.status = GameStatus.DEALING
        self.table.clear()
        deck = Deck()
        deck.shuffle(self._rng)

        for col in range(len(self.table.tableau)):
            for r in range(col + 1):
                c = deck.deal()
                c.face_up = (r == col)
                self.table.tableau[col].cards.append(c)

        # Remaining cards go to stock, face down
        while not deck.is_empty():
            self.table.stock.push(deck.deal())

        self.score = 0
        self.history.clear()
        self._clock.start()
        self.status = GameStatus.IN_PROGRESS
        self.stats.games_played += 1
        self._check()
        logger.debug("new game dealt, %d cards in stock", len(self.table.stock))
        self._emit("new_game")
        self._emit("stats")

    def load_position(self, table: Table, score: int = 0):
        """Start a game from an arranged table instead of a shuffled deal."""
        self.table = table
        self.score = score
        self.history.clear()
        self._clock.start()
        self.status = GameStatus.IN_PROGRESS
        self._check()

    def reset_statistics(self):
        self.stats.games_played = 0
        self.stats.games_won = 0
        self._emit("stats")

    # ---------- Stock ----------
    def draw_from_stock(self) -> DrawResult:
        if not self.in_progress:
            return DrawResult(DrawKind.EMPTY)
        stock, waste = self.table.stock, self.table.waste

        if not stock.cards and not waste.cards:
            self.check_game_over()
            return DrawResult(DrawKind.EMPTY)

        before = self._snapshot()
        if not stock.cards:
            # Recycle waste back to stock; unlimited passes, no penalty
            # waste top becomes the stock bottom
            stock.extend(reversed(waste.drain()))
            self._commit(before)
            logger.debug("recycled %d cards into stock", len(stock))
            self._emit("recycle")
            self.check_game_over()
            return DrawResult(DrawKind.RECYCLED)

        drawn = stock.draw(DRAW_COUNT)
        waste.receive(drawn)
        self._commit(before)
        self._emit("draw")
        if not stock.cards:
            # every card has now been seen this pass
            self.check_game_over()
        return DrawResult(DrawKind.DRAWN, tuple(drawn))

    # ---------- Moves ----------
    def _resolve_run(self, source: PileId, card_index: int) -> Tuple[Optional[List[Card]], Optional[RejectReason]]:
        if source.kind not in (WASTE_KIND, TABLEAU_KIND):
            return None, RejectReason.INVALID_SOURCE
        pile = self.table.get(source)
        if not pile.cards:
            return None, RejectReason.EMPTY_SELECTION
        if card_index < 0:
            card_index += len(pile)
        if not 0 <= card_index < len(pile):
            return None, RejectReason.EMPTY_SELECTION

        if source.kind == WASTE_KIND:
            if card_index != len(pile) - 1:
                return None, RejectReason.NOT_TOP_CARD
            return [pile.cards[-1]], None

        run = pile.movable_run(card_index)
        if run is None:
            return None, RejectReason.FACE_DOWN_CARD
        return run, None

    def validate_move(self, source: PileId, card_index: int, target: PileId) -> Optional[RejectReason]:
        """Reason the move would be rejected, or None if it is legal."""
        if not self.in_progress:
            return RejectReason.GAME_NOT_IN_PROGRESS
        if source == target:
            return RejectReason.SAME_PILE
        run, reason = self._resolve_run(source, card_index)
        if reason is not None:
            return reason
        if target.kind == FOUNDATION_KIND:
            return R.foundation_rejection(run, self.table.foundations[target.index])
        if target.kind == TABLEAU_KIND:
            return R.tableau_rejection(run, self.table.tableau[target.index])
        return RejectReason.INVALID_TARGET

    def attempt_move(self, source: PileId, card_index: int, target: PileId) -> MoveResult:
        reason = self.validate_move(source, card_index, target)
        if reason is not None:
            logger.debug("move %s[%d] -> %s rejected: %s", source, card_index, target, reason)
            return MoveResult.rejected(reason)

        src = self.table.get(source)
        dst = self.table.get(target)
        if card_index < 0:
            card_index += len(src)

        before = self._snapshot()
        moved = src.take_from(card_index)
        dst.extend(moved)

        points = 0
        flipped = False
        if source.kind == TABLEAU_KIND and self.table.tableau[source.index].flip_top():
            flipped = True
            points += FLIP_POINTS
        if target.kind == FOUNDATION_KIND:
            points += FOUNDATION_POINTS
        self.score += points
        self._commit(before)

        logger.debug("moved %s from %s to %s (+%d)", moved, source, target, points)
        self._emit("move")
        self.check_win()
        self.check_game_over()
        return MoveResult(applied=True, cards=tuple(moved), flipped=flipped, points=points)

    def move_to_foundation(self, source: PileId, card_index: int = -1) -> MoveResult:
        """Send a single card to whichever foundation accepts it."""
        result = MoveResult.rejected(RejectReason.INVALID_TARGET)
        for fi in range(len(self.table.foundations)):
            result = self.attempt_move(source, card_index, PileId(FOUNDATION_KIND, fi))
            if result.applied:
                return result
        return result

    # ---------- Undo ----------
    def undo(self) -> bool:
        if not self.can_undo():
            return False
        snap = self.history.pop()
        # The penalty lands on top of the score the snapshot carried.
        self.score = snap.restore_into(self.table) - UNDO_PENALTY
        if self.status is GameStatus.STALLED:
            self.status = GameStatus.IN_PROGRESS
            self._clock.stopped = None
        self._check()
        logger.debug("undo, score now %d", self.score)
        self._emit("undo")
        return True

    # ---------- Aids ----------
    def hint(self) -> Optional[MoveDescription]:
        if not self.in_progress:
            return None
        return S.find_hint(self.table)

    def auto_complete(self) -> Iterator[MoveDescription]:
        """Drain cards to the foundations, one move per ``next()``.

        Returns an empty iterator when the stock still has cards or any
        tableau card is face-down.
        """
        if not self.can_auto_complete():
            return iter(())
        return self._auto_complete_steps()

    def _auto_complete_steps(self) -> Iterator[MoveDescription]:
        snapshotted = False
        moved = True
        while moved and self.in_progress:
            moved = False
            for source in S.auto_complete_sources(self.table):
                move = S.foundation_move_from(self.table, source)
                if move is None:
                    continue
                if not snapshotted:
                    self.history.push(self._snapshot())
                    snapshotted = True
                card = self.table.get(source).pop()
                self.table.get(move.target).push(card)
                self.score += FOUNDATION_POINTS
                moved = True
                self._check()
                self._emit("move")
                yield move
        self.check_win()

    # ---------- Terminal states ----------
    def check_win(self) -> bool:
        if not all(f.is_complete() for f in self.table.foundations):
            return False
        if self.in_progress:
            self._end_game(won=True)
        return True

    def check_game_over(self) -> bool:
        if not self.in_progress:
            return self.status is GameStatus.STALLED
        if self.table.stock.cards:
            # more stock may still reveal a move
            return False
        if S.has_available_move(self.table):
            return False
        self._end_game(won=False)
        logger.debug("no moves left, game stalled")
        self._emit("stalled")
        return True

    def _end_game(self, won: bool):
        self._clock.stop()
        if won:
            self.status = GameStatus.WON
            self.stats.games_won += 1
            bonus = max(0, WIN_BONUS_BASE - self.elapsed_seconds() * WIN_BONUS_PER_SECOND)
            self.score += bonus
            logger.debug("game won, time bonus %d, score %d", bonus, self.score)
            self._emit("won")
        else:
            self.status = GameStatus.STALLED
        self._emit("stats")

    # ---------- Internals ----------
    def _snapshot(self) -> GameStateSnapshot:
        return GameStateSnapshot.capture(self.table, self.score)

    def _commit(self, before: GameStateSnapshot):
        """Record ``before`` for undo once the mutation checks out."""
        try:
            self._check()
        except InvariantError:
            self.score = before.restore_into(self.table)
            raise
        self.history.push(before)

    def _check(self):
        if self.debug_checks:
            self.check_invariants()

    def check_invariants(self):
        cards = self.table.all_cards()
        keys = [c.key() for c in cards]
        unique = set(keys)
        if len(unique) != len(keys):
            dupes = sorted({k for k in keys if keys.count(k) > 1})
            raise InvariantError(f"duplicate cards on the table: {dupes}")
        if len(keys) != 52:
            raise InvariantError(f"expected 52 cards on the table, found {len(keys)}")

    def _emit(self, name: str):
        if self.on_event is None:
            return
        try:
            self.on_event(name, self)
        except Exception:
            logger.debug("event hook failed for %r", name, exc_info=True)
