from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from bowlsim.config import FullConfig
from bowlsim.constants import MAX_BALLS, TENTH_FRAME
from bowlsim.messages import Category, StatusMessage, make_message
from bowlsim.physics.settlement import OutcomeKind, ThrowOutcome
from bowlsim.rules.scoring import (ball_delta, frame_marks, is_spare,
                                   is_strike, rack_state, recalculate_total, record_ball)
from bowlsim.state import EMPTY_FRAMES, GameState, Phase

logger = logging.getLogger(__name__)

class IllegalThrow(Exception):
    """A throw was requested while the lane is not awaiting one."""

class RackAction(str, Enum):
    FULL_RESET = "full_reset"       # restore all ten pins
    SWEEP_FALLEN = "sweep_fallen"   # clear fallen pins, keep standing ones
    NONE = "none"

@dataclass(frozen=True, slots=True)
class Transition:
    state: GameState
    rack: RackAction = RackAction.NONE
    messages: tuple[StatusMessage, ...] = ()

class FrameStateMachine:
    def __init__(self, cfg: Optional[FullConfig] = None):
        self.cfg = cfg if cfg is not None else FullConfig()

    def new_game(self) -> GameState:
        return GameState(frame=0, ball=1, frames=EMPTY_FRAMES, total=0)

    def begin_throw(self, s: GameState) -> GameState:
        if s.game_over or s.phase is not Phase.AWAITING_THROW:
            raise IllegalThrow(f"cannot throw in phase {s.phase.value}")
        return replace(s, phase=Phase.BALL_SETTLING, thrown=True, settled=False)

    def reached_deck(self, outcome: ThrowOutcome) -> bool:
        z = outcome.position[2]
        return z >= self.cfg.lane.length - self.cfg.settlement.scoring_margin_z

    def resolve_ball(self, s: GameState, outcome: ThrowOutcome) -> Transition:
        if s.phase is not Phase.BALL_SETTLING:
            raise ValueError(f"no ball in flight (phase {s.phase.value})")
        # baseline is the pinfall credited on this rack, not the physical count
        delta = ball_delta(outcome.pins_down, s.rack_pins_down)
        stopped_short = outcome.kind is OutcomeKind.SETTLED and not self.reached_deck(outcome)
        credited = 0 if stopped_short else delta
        _, fresh_rack = rack_state(s.entries)

        frames = record_ball(s.frames, s.frame, s.ball, credited)
        ns = replace(
            s,
            frames=frames,
            total=recalculate_total(frames),
            phase=Phase.BALL_RESOLVED,
            thrown=False,
            settled=True,
            rack_pins_down=rack_state(frames[s.frame])[0],
            last_pins=credited,
        )
        logger.debug("frame %d ball %d: %s pins_down=%d credited=%d total=%d",
                     s.frame + 1, s.ball, outcome.kind.value, outcome.pins_down,
                     credited, ns.total)
        msgs = self._ball_messages(frames[s.frame], credited, fresh_rack)
        msgs += self._outcome_messages(outcome.kind, credited, stopped_short)
        return Transition(ns, RackAction.NONE, tuple(msgs))

    def advance(self, s: GameState) -> Transition:
        """Decide what follows a resolved ball: same frame, next frame, or game over."""
        if s.phase is not Phase.BALL_RESOLVED:
            raise ValueError(f"no resolved ball to advance from (phase {s.phase.value})")
        entries = s.entries
        if s.frame < TENTH_FRAME:
            if is_strike(entries) or len(entries) == MAX_BALLS:
                done = replace(s, phase=Phase.FRAME_COMPLETE)
                return Transition(self.next_frame(done), RackAction.FULL_RESET)
            return Transition(replace(s, phase=Phase.AWAITING_THROW, ball=s.ball + 1),
                              RackAction.SWEEP_FALLEN)

        next_ball, fresh = self._tenth_next(entries)
        if next_ball is None:
            logger.info("game over: total=%d", s.total)
            over = replace(s, phase=Phase.GAME_OVER, game_over=True)
            return Transition(over, RackAction.NONE,
                              (make_message("Game Over!", Category.GAME_OVER, self.cfg.messages),))
        if fresh:
            ns = replace(s, phase=Phase.AWAITING_THROW, ball=next_ball, rack_pins_down=0)
            return Transition(ns, RackAction.FULL_RESET)
        return Transition(replace(s, phase=Phase.AWAITING_THROW, ball=next_ball),
                          RackAction.SWEEP_FALLEN)

    def next_frame(self, s: GameState) -> GameState:
        if s.phase is not Phase.FRAME_COMPLETE:
            raise ValueError(f"frame {s.frame + 1} is not complete")
        logger.info("frame %d complete: %s, total=%d", s.frame + 1, list(s.entries), s.total)
        return replace(s, phase=Phase.AWAITING_THROW, frame=s.frame + 1, ball=1,
                       rack_pins_down=0)

    @staticmethod
    def _tenth_next(entries) -> tuple[Optional[int], bool]:
        # bonus eligibility comes from the recorded balls only
        if len(entries) == 1:
            return 2, is_strike(entries)
        if len(entries) == 2 and (is_strike(entries) or is_spare(entries)):
            return 3, rack_state(entries)[1]
        return None, False

    def _ball_messages(self, entries, credited: int, fresh_rack: bool) -> list[StatusMessage]:
        mark = frame_marks(entries)[-1]
        cfg = self.cfg.messages
        if fresh_rack:
            if mark == "X":
                return [make_message("STRIKE!", Category.STRIKE, cfg)]
            if credited > 0:
                return [make_message(f"{credited} Pins Down!", Category.PINS, cfg)]
            return []
        if mark == "/":
            return [make_message("SPARE!", Category.SPARE, cfg)]
        if credited > 0:
            return [make_message(f"+{credited} More Pins!", Category.PINS, cfg)]
        return [make_message("No Additional Pins", Category.MISS, cfg)]

    def _outcome_messages(self, kind: OutcomeKind, credited: int,
                          stopped_short: bool) -> list[StatusMessage]:
        cfg = self.cfg.messages
        if stopped_short:
            return [make_message("Ball stopped before pins!", Category.INFO, cfg)]
        if kind is OutcomeKind.GUTTER:
            return [make_message("Gutter Ball!", Category.GUTTER, cfg)]
        if kind is OutcomeKind.FELL_OFF:
            if credited > 0:
                return [make_message(f"Ball fell off! But {credited} pins counted!", Category.PINS, cfg)]
            return [make_message("Ball fell off the map!", Category.MISS, cfg)]
        if kind is OutcomeKind.OUT_OF_BOUNDS:
            if credited > 0:
                return [make_message(f"Out of bounds! But {credited} pins counted!", Category.PINS, cfg)]
            return [make_message("Ball went out of bounds!", Category.MISS, cfg)]
        return []
