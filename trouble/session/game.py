"""
Trouble - Game Session

Stateful owner of one local game: players, pegs, the current turn and the die.
The pure engine decides what is legal; this class sequences rolls and moves,
runs the deferred steps (die settling, turn timeout, Roll-of-1 chain, auto-end
when no move exists) through a Scheduler, persists every committed state and
publishes events for the presentation layer.

Every mutation replaces the whole SessionState under a re-entrant lock, so
scheduled callbacks from timer threads never interleave with a caller's
read-decide-commit step. Callbacks carry the turn token (and timer epoch) they
were scheduled for and do nothing once that turn is gone.
"""

from __future__ import annotations

import logging
import math
import threading
from collections import deque
from dataclasses import replace
from functools import partial
from typing import Callable, Sequence

from trouble.config.settings import Settings, get_settings
from trouble.database.models import GameSnapshot
from trouble.database.snapshot import SnapshotStore, create_snapshot_store
from trouble.engine.base import (
    PEGS_PER_PLAYER,
    DieRoll,
    DieState,
    GamePhase,
    Peg,
    Player,
    SessionState,
    Turn,
    ValidationResult,
)
from trouble.engine.board import BoardTopology
from trouble.engine.dice import DiceEngine
from trouble.engine.moves import (
    REASON_UNKNOWN_PEG,
    REASON_UNKNOWN_PLAYER,
    MoveValidator,
)
from trouble.engine.roster import MIN_PLAYERS, active_players
from trouble.engine.turns import RollNotAllowed, TurnRules
from trouble.engine.validators import validate_die_value, validate_roster
from trouble.session.events import EventPayload, GameEvent, classify_turn_change
from trouble.session.scheduler import Scheduler, ThreadingScheduler, TimerHandle

logger = logging.getLogger(__name__)

Listener = Callable[[EventPayload], None]
DieCallback = Callable[[int], None]


class GameSession:
    """A single-device game of Trouble.

    Args:
        settings: Timing and rule settings (defaults to ``get_settings()``)
        scheduler: Source of time and delayed callbacks
        store: Optional snapshot storage written after every commit
    """

    def __init__(
        self,
        settings: Settings | None = None,
        scheduler: Scheduler | None = None,
        store: SnapshotStore | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._scheduler = scheduler or ThreadingScheduler()
        self._store = store
        self._state = SessionState()
        self._lock = threading.RLock()

        self._turn_token = 0
        self._timer_epoch = 0
        self._turn_timers: list[TimerHandle] = []
        self._pending: list[TimerHandle] = []
        self._forced_queue: deque[str] = deque()

        self._listeners: list[Listener] = []
        self._die_callbacks: list[DieCallback] = []

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        scheduler: Scheduler | None = None,
    ) -> "GameSession":
        """Build a session with the configured storage and reload its snapshot."""
        settings = settings or get_settings()
        session = cls(settings, scheduler, create_snapshot_store(settings))
        session.restore()
        return session

    # -- Read access ------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def phase(self) -> GamePhase:
        return self._state.phase

    @property
    def players(self) -> tuple[Player, ...]:
        return self._state.players

    @property
    def pegs(self) -> tuple[Peg, ...]:
        return self._state.pegs

    @property
    def current_turn(self) -> Turn | None:
        return self._state.turn

    @property
    def winner(self) -> str | None:
        return self._state.winner

    @property
    def die_state(self) -> DieState:
        return self._state.die_state

    def get_current_player(self) -> Player | None:
        state = self._state
        if state.turn is None:
            return None
        return state.get_player(state.turn.player_id)

    def get_player_pegs(self, player_id: str) -> tuple[Peg, ...]:
        return self._state.pegs_for(player_id)

    # -- Subscriptions ----------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Receive every EventPayload; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def register_die_callback(self, callback: DieCallback) -> Callable[[], None]:
        """Receive each settled die value; returns an unsubscribe function."""
        self._die_callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._die_callbacks:
                self._die_callbacks.remove(callback)

        return unsubscribe

    # -- Lifecycle --------------------------------------------------------

    def initialize_game(self, players: Sequence[Player]) -> None:
        """
        Start a new game with the active players, all pegs in HOME.

        Does nothing if fewer than two players are active.

        Raises:
            ValueError: If more than four players are active or ids/colors repeat
        """
        with self._lock:
            active = active_players(players)
            if len(active) < MIN_PLAYERS:
                logger.warning("Not enough players to start game (%d active)", len(active))
                return
            roster = validate_roster(active)

            self._cancel_all()
            self._turn_token += 1
            pegs = tuple(
                Peg(id=f"{player.id}-peg-{i}", player_id=player.id)
                for player in roster
                for i in range(PEGS_PER_PLAYER)
            )
            self._commit(SessionState(
                phase=GamePhase.PLAYING,
                players=roster,
                pegs=pegs,
                turn=Turn.begin(roster[0].id),
                winner=None,
                die_state=replace(self._state.die_state, is_rolling=False),
            ))
            logger.info("Game started with %s", ", ".join(p.id for p in roster))
            self._emit(
                GameEvent.GAME_STARTED,
                roster[0].id,
                players=[p.id for p in roster],
            )

    def reset_game(self) -> None:
        """Cancel every timer and return to an empty setup state."""
        with self._lock:
            self._cancel_all()
            self._turn_token += 1
            self._commit(SessionState(), persist=False)
            if self._store is not None:
                self._store.clear()
            logger.info("Game reset")
            self._emit(GameEvent.GAME_RESET)

    def restore(self) -> bool:
        """
        Reload the stored snapshot.

        Timer and rolling flags are cleared since their callbacks did not
        survive; a turn stuck waiting on one of them is resumed.

        Returns:
            True if a snapshot was loaded
        """
        if self._store is None:
            return False
        snapshot = self._store.load()
        if snapshot is None:
            return False
        try:
            state = snapshot.to_state()
        except ValueError:
            logger.exception("Stored snapshot does not describe a valid game")
            return False

        turn = state.turn
        if turn is not None:
            turn = replace(turn, start_time=0.0, timeout_warning=False)
        with self._lock:
            self._cancel_all()
            self._turn_token += 1
            self._commit(replace(
                state,
                turn=turn,
                die_state=replace(state.die_state, is_rolling=False),
            ))
            logger.info("Restored %s game", state.phase.value)
            if state.phase is GamePhase.PLAYING:
                self._resume_pending_turn()
        return True

    # -- Rolling ----------------------------------------------------------

    def roll_die(self, roll: int | None = None) -> int:
        """
        Roll the die for the current player.

        The value is returned at once; the turn only changes once the die
        settles after ``die_roll_delay``.

        Args:
            roll: Optional pre-determined value (for testing)

        Returns:
            The die value (1-6)

        Raises:
            RollNotAllowed: No game in progress, or the turn forbids a roll
                (AlreadyRolling, MoveRequiredFirst, MaxRollsReached)
        """
        with self._lock:
            state = self._state
            if state.phase is not GamePhase.PLAYING or state.turn is None:
                raise RollNotAllowed("No game in progress.")
            TurnRules.ensure_can_roll(state.turn, state.die_state)
            if roll is not None:
                validate_die_value(roll)

            self._clear_turn_timer()
            streak = DiceEngine.roll(state.die_state, roll)
            value = streak.result
            self._commit(replace(
                state,
                turn=replace(state.turn, start_time=0.0, timeout_warning=False),
                die_state=DieState(
                    last_roll=value,
                    consecutive_repeats=streak.consecutive_repeats,
                    is_rolling=True,
                ),
            ))
            logger.debug("Player %s rolled %d", state.turn.player_id, value)
            self._schedule(
                self._settings.die_roll_delay,
                partial(self._resolve_roll, self._turn_token, value),
            )
            return value

    def _resolve_roll(self, token: int, value: int) -> None:
        with self._lock:
            if token != self._turn_token or self._state.phase is not GamePhase.PLAYING:
                logger.warning("Ignoring stale roll resolution (%d)", value)
                return
            state = self._state
            turn = TurnRules.apply_roll(
                state.turn,
                DieRoll(value=value, timestamp=self._scheduler.now()),
                six_grants_extra_turn=self._settings.six_grants_extra_turn,
            )
            self._commit(replace(
                state,
                turn=turn,
                die_state=replace(state.die_state, is_rolling=False),
            ))
            self._notify_die_callbacks(value)
            self._emit(
                GameEvent.DIE_ROLLED,
                turn.player_id,
                value=value,
                rolls_this_turn=turn.rolls_this_turn,
                extra_turns_remaining=turn.extra_turns_remaining,
            )

            if value == TurnRules.ROLL_OF_ONE:
                self._start_roll_of_one(token, turn.player_id)
                return

            player = state.get_player(turn.player_id)
            if not MoveValidator.has_valid_moves(player.id, value, state.pegs, player.color):
                logger.info("Player %s has no valid move for %d", player.id, value)
                self._schedule(
                    self._settings.no_moves_delay,
                    partial(self._auto_end_turn, token),
                )
                return

            self._start_turn_timer()

    def _auto_end_turn(self, token: int) -> None:
        with self._lock:
            if token != self._turn_token:
                return
            self.end_turn()

    # -- Roll-of-1 --------------------------------------------------------

    def _start_roll_of_one(self, token: int, roller_id: str) -> None:
        self._forced_queue = deque(
            p.id for p in self._state.players if p.id != roller_id
        )
        logger.info("Player %s rolled 1; opponents may leave HOME", roller_id)
        self._forced_move_step(token)

    def _forced_move_step(self, token: int) -> None:
        with self._lock:
            if token != self._turn_token:
                return
            state = self._state
            while self._forced_queue:
                player = state.get_player(self._forced_queue.popleft())
                if player is None:
                    continue
                home_exit = MoveValidator.can_move_from_home_to_start(
                    player.id, player.color, state.pegs
                )
                if home_exit.can_move:
                    self._schedule(
                        self._settings.forced_move_delay,
                        partial(self._apply_forced_move, token, player.id, home_exit.peg_id),
                    )
                    return
            self._advance_to_next_player()

    def _apply_forced_move(self, token: int, player_id: str, peg_id: str) -> None:
        with self._lock:
            if token != self._turn_token:
                return
            state = self._state
            peg = state.get_peg(peg_id)
            player = state.get_player(player_id)
            if peg is not None and player is not None and peg.is_in_home:
                result = MoveValidator.validate_move(
                    peg, 6, player.color, state.pegs
                )
                if result.is_valid:
                    self._commit(self._move_peg(state, peg, result))
                    self._emit_move_events(peg, result, forced=True)
                    self._emit(
                        GameEvent.FORCED_MOVE,
                        player_id,
                        peg_id=peg_id,
                        to_position=result.final_position,
                    )
            self._forced_move_step(token)

    # -- Moving -----------------------------------------------------------

    def get_selectable_pegs(self, player_id: str, die_roll: int) -> list[Peg]:
        """Pegs of ``player_id`` that have a legal move for ``die_roll``."""
        state = self._state
        player = state.get_player(player_id)
        if player is None:
            return []
        movable = {
            move.peg_id
            for move in MoveValidator.get_valid_moves(player_id, die_roll, state.pegs, player.color)
        }
        return [peg for peg in state.pegs if peg.id in movable]

    def get_move_validation(self, peg_id: str, die_roll: int) -> ValidationResult:
        """Validate a move by peg id; unknown ids are rejected, not raised."""
        state = self._state
        peg = state.get_peg(peg_id)
        if peg is None:
            return ValidationResult.rejected(REASON_UNKNOWN_PEG)
        player = state.get_player(peg.player_id)
        if player is None:
            return ValidationResult.rejected(REASON_UNKNOWN_PLAYER)
        return MoveValidator.validate_move(peg, die_roll, player.color, state.pegs)

    def is_valid_move(self, peg_id: str, die_roll: int) -> bool:
        return self.get_move_validation(peg_id, die_roll).is_valid

    def has_valid_moves(self, player_id: str, die_roll: int) -> bool:
        return len(self.get_selectable_pegs(player_id, die_roll)) > 0

    def select_peg(self, peg_id: str | None) -> bool:
        """Highlight one of the current player's pegs (None clears)."""
        with self._lock:
            state = self._state
            if state.phase is not GamePhase.PLAYING or state.turn is None:
                return False
            if peg_id is not None:
                peg = state.get_peg(peg_id)
                if peg is None or peg.player_id != state.turn.player_id:
                    return False
            self._commit(replace(state, turn=replace(state.turn, selected_peg_id=peg_id)))
            return True

    def execute_peg_move(self, peg_id: str, target_position: int) -> bool:
        """
        Move one of the current player's pegs with the committed die roll.

        Args:
            peg_id: Peg to move
            target_position: Destination reported by ``get_move_validation``
                (the landing space or, for a warp, its paired endpoint)

        Returns:
            False if there is no pending roll or the move is not legal
        """
        with self._lock:
            state = self._state
            turn = state.turn
            if state.phase is not GamePhase.PLAYING or turn is None or turn.die_roll is None:
                return False
            if state.die_state.is_rolling or turn.moves_available <= 0:
                return False
            peg = state.get_peg(peg_id)
            if peg is None or peg.player_id != turn.player_id:
                return False

            result = self.get_move_validation(peg_id, turn.die_roll.value)
            if not result.is_valid:
                logger.debug("Rejected move of %s: %s", peg_id, result.reason)
                return False
            if target_position not in (result.new_position, result.final_position):
                logger.debug(
                    "Rejected move of %s: target %d, expected %d",
                    peg_id, target_position, result.final_position,
                )
                return False

            self._clear_turn_timer()
            landed_on_double_trouble = BoardTopology.is_double_trouble(result.final_position)
            moved = self._move_peg(state, peg, result)
            self._commit(replace(
                moved,
                turn=TurnRules.apply_move(turn, landed_on_double_trouble),
            ))
            self._emit_move_events(peg, result, forced=False)
            if landed_on_double_trouble:
                self._emit(
                    GameEvent.DOUBLE_TROUBLE,
                    turn.player_id,
                    peg_id=peg_id,
                    position=result.final_position,
                )

            if result.enters_finish and self.check_victory_condition(turn.player_id):
                return True
            if self.check_turn_end():
                self.end_turn()
            return True

    def _move_peg(self, state: SessionState, peg: Peg, result: ValidationResult) -> SessionState:
        updated = {
            captured_id: state.get_peg(captured_id).sent_home()
            for captured_id in result.captured_peg_ids
        }
        updated[peg.id] = peg.moved_to(result.final_position)
        return state.with_pegs(updated)

    def _emit_move_events(self, peg: Peg, result: ValidationResult, *, forced: bool) -> None:
        self._emit(
            GameEvent.PEG_MOVED,
            peg.player_id,
            peg_id=peg.id,
            from_position=peg.position,
            to_position=result.new_position,
            final_position=result.final_position,
            enters_finish=result.enters_finish,
            forced=forced,
        )
        if result.warp_destination is not None:
            self._emit(
                GameEvent.WARP_USED,
                peg.player_id,
                peg_id=peg.id,
                from_position=result.new_position,
                to_position=result.warp_destination,
            )
        for captured_id in result.captured_peg_ids:
            self._emit(
                GameEvent.PEG_CAPTURED,
                peg.player_id,
                peg_id=captured_id,
                by_peg_id=peg.id,
            )

    # -- Turn progression -------------------------------------------------

    def check_turn_end(self) -> bool:
        """Whether the current roll sequence is over."""
        state = self._state
        turn = state.turn
        if turn is None:
            return False
        has_moves = False
        if turn.moves_available > 0:
            has_moves = self.has_valid_moves(turn.player_id, turn.moves_available)
        return TurnRules.check_turn_end(turn, has_moves)

    def end_turn(self) -> None:
        """
        Finish the current roll sequence.

        The same player keeps control while a banked extra turn can still be
        rolled; otherwise the next active player begins a clean turn.
        """
        with self._lock:
            state = self._state
            if state.phase is not GamePhase.PLAYING or state.turn is None:
                return
            if TurnRules.can_continue(state.turn):
                self._replace_turn(TurnRules.continue_turn(state.turn))
                logger.debug("Player %s continues with an extra turn", state.turn.player_id)
            else:
                self._advance_to_next_player()

    def _advance_to_next_player(self) -> None:
        state = self._state
        next_id = TurnRules.next_player_id(state.players, state.turn.player_id)
        self._replace_turn(Turn.begin(next_id))
        logger.info("Turn passes to %s", next_id)

    def _replace_turn(self, turn: Turn) -> None:
        self._cancel_all()
        self._turn_token += 1
        state = self._state
        self._commit(replace(
            state,
            turn=turn,
            die_state=replace(state.die_state, is_rolling=False),
        ))

    def _resume_pending_turn(self) -> None:
        turn = self._state.turn
        if turn is None or turn.die_roll is None or turn.has_moved_since_roll:
            return
        if turn.die_roll.value == TurnRules.ROLL_OF_ONE:
            self._advance_to_next_player()
        elif not self.has_valid_moves(turn.player_id, turn.die_roll.value):
            self.end_turn()
        else:
            self._start_turn_timer()

    # -- Turn timer -------------------------------------------------------

    def _start_turn_timer(self) -> None:
        self._clear_turn_timer()
        state = self._state
        self._commit(replace(
            state,
            turn=replace(state.turn, start_time=self._scheduler.now(), timeout_warning=False),
        ))
        epoch = self._timer_epoch
        timeout = self._settings.turn_timeout
        self._turn_timers = [
            self._scheduler.call_later(
                timeout - self._settings.timeout_warning_threshold,
                partial(self._handle_timeout_warning, epoch),
            ),
            self._scheduler.call_later(timeout, partial(self._handle_turn_timeout, epoch)),
        ]

    def _clear_turn_timer(self) -> None:
        self._timer_epoch += 1
        for handle in self._turn_timers:
            handle.cancel()
        self._turn_timers = []

    def _handle_timeout_warning(self, epoch: int) -> None:
        with self._lock:
            state = self._state
            if epoch != self._timer_epoch or state.turn is None:
                return
            self._commit(replace(state, turn=replace(state.turn, timeout_warning=True)))
            self._emit(GameEvent.TIMEOUT_WARNING, state.turn.player_id)

    def _handle_turn_timeout(self, epoch: int) -> None:
        with self._lock:
            state = self._state
            if epoch != self._timer_epoch or state.turn is None:
                return
            logger.info("Player %s timed out", state.turn.player_id)
            self._emit(GameEvent.TURN_TIMED_OUT, state.turn.player_id)
            self.end_turn()

    def get_remaining_turn_time(self) -> int:
        """Whole seconds left to pick a move; the full timeout if no timer runs."""
        turn = self._state.turn
        timeout = self._settings.turn_timeout
        if turn is None or turn.start_time == 0:
            return timeout
        elapsed = self._scheduler.now() - turn.start_time
        return max(0, math.ceil(timeout - elapsed))

    def should_show_timeout_warning(self) -> bool:
        turn = self._state.turn
        if turn is None or turn.start_time == 0:
            return False
        return (
            turn.timeout_warning
            or self.get_remaining_turn_time() <= self._settings.timeout_warning_threshold
        )

    # -- Victory ----------------------------------------------------------

    def check_victory_condition(self, player_id: str) -> bool:
        """
        True iff all four of the player's pegs are in FINISH.

        The first time this holds during play the game is finished with
        this player as the winner.
        """
        with self._lock:
            state = self._state
            pegs = state.pegs_for(player_id)
            if len(pegs) != PEGS_PER_PLAYER or not all(p.is_in_finish for p in pegs):
                return False
            if state.phase is GamePhase.PLAYING:
                self._cancel_all()
                self._turn_token += 1
                self._commit(replace(
                    state,
                    phase=GamePhase.FINISHED,
                    winner=player_id,
                    die_state=replace(state.die_state, is_rolling=False),
                ))
                logger.info("Player %s wins", player_id)
                self._emit(GameEvent.GAME_WON, player_id)
            return True

    # -- Internals --------------------------------------------------------

    def _commit(self, state: SessionState, persist: bool = True) -> None:
        before = self._state
        self._state = state
        if persist and self._store is not None:
            try:
                self._store.save(GameSnapshot.from_state(state))
            except Exception:
                logger.exception("Failed to persist session snapshot")
        event = classify_turn_change(before.turn, state.turn)
        if event is not None:
            self._emit(
                event,
                state.turn.player_id,
                extra_turns_remaining=state.turn.extra_turns_remaining,
            )

    def _schedule(self, delay: float, callback: Callable[[], None]) -> None:
        self._pending.append(self._scheduler.call_later(delay, callback))

    def _cancel_all(self) -> None:
        self._clear_turn_timer()
        for handle in self._pending:
            handle.cancel()
        self._pending = []
        self._forced_queue.clear()

    def _emit(self, event: GameEvent, player_id: str | None = None, **data) -> None:
        payload = EventPayload(event=event, player_id=player_id, data=data)
        for listener in list(self._listeners):
            try:
                listener(payload)
            except Exception:
                logger.exception("Error in listener for %s", event.name)

    def _notify_die_callbacks(self, value: int) -> None:
        for callback in list(self._die_callbacks):
            try:
                callback(value)
            except Exception:
                logger.exception("Error in die callback")
