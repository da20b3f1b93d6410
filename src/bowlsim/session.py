"""
One lane, one game. Owns the GameState value and drives it through the
FrameStateMachine; samples the physics collaborator on a tick-driven
settlement poll and issues ball/pin placements at ball and frame boundaries.
"""
from __future__ import annotations
import logging
from typing import Callable, Optional

import numpy as np

from bowlsim.config import FullConfig
from bowlsim.constants import REMOVED_POSITION
from bowlsim.messages import ScoreboardSnapshot, StatusMessage, snapshot
from bowlsim.physics.pins import count_fallen, is_fallen, rack_positions
from bowlsim.physics.port import IDENTITY_QUAT, PhysicsPort
from bowlsim.physics.settlement import SettlementDetector, SettlementPoll, ThrowOutcome
from bowlsim.rules.fsm import FrameStateMachine, IllegalThrow, RackAction
from bowlsim.state import GameState

logger = logging.getLogger(__name__)

UpdateHook = Callable[[ScoreboardSnapshot], None]
MessageHook = Callable[[StatusMessage], None]
BallHook = Callable[[GameState, ThrowOutcome], None]


class BowlingSession:
    def __init__(self, physics: PhysicsPort, cfg: Optional[FullConfig] = None, *,
                 on_update: Optional[UpdateHook] = None,
                 on_message: Optional[MessageHook] = None,
                 on_ball: Optional[BallHook] = None):
        self.physics = physics
        self.cfg = cfg = cfg if cfg is not None else FullConfig()
        self.fsm = FrameStateMachine(cfg)
        self.on_update = on_update
        self.on_message = on_message
        self.on_ball = on_ball
        self.state: GameState = self.fsm.new_game()
        self.poll: Optional[SettlementPoll] = None
        self.message: Optional[StatusMessage] = None
        self.message_until = 0
        self.now_ms = 0
        self._rack = rack_positions(cfg.lane)

    # ---------------- commands ----------------
    def throw(self, power: float, angle: float) -> bool:
        """Launch the ball; False (and no state change) unless a throw is awaited."""
        try:
            s = self.fsm.begin_throw(self.state)
        except IllegalThrow as e:
            logger.debug("throw rejected: %s", e)
            return False
        t = self.cfg.throw
        power = float(np.clip(power, 0.0, 1.0))
        force = t.min_force + power * (t.max_force - t.min_force)
        linear = (np.sin(angle) * force * t.lateral_gain, 0.0, force)
        angular = (-angle * force * t.side_spin_gain, 0.0, -force * t.roll_gain)

        self.physics.place_ball(self._ball_home())
        self.physics.apply_impulse(linear, angular)
        self.state = s
        self.poll = SettlementPoll(SettlementDetector(self.cfg.lane, self.cfg.settlement),
                                   started_ms=self.now_ms)
        logger.debug("throw frame=%d ball=%d power=%.2f angle=%.3f force=%.1f",
                     s.frame + 1, s.ball, power, angle, force)
        self._notify()
        return True

    def reset(self) -> None:
        if self.poll is not None:
            self.poll.cancel()
            self.poll = None
        self.state = self.fsm.new_game()
        self._apply_rack(RackAction.FULL_RESET)
        self.physics.place_ball(self._ball_home())
        self.message = None
        logger.info("game reset")
        self._notify()

    # ---------------- host loop ----------------
    def tick(self, now_ms: int) -> Optional[ThrowOutcome]:
        """Advance session time; runs a due settlement sample. Returns the outcome if one fired."""
        self.now_ms = now_ms
        if self.message is not None and now_ms >= self.message_until:
            self.message = None
        poll = self.poll
        if poll is None or not poll.due(now_ms):
            return None
        pins_down = count_fallen(self.physics.pins(), self.cfg.pins)
        outcome = poll.sample(now_ms, self.physics.ball(), pins_down)
        if outcome is not None:
            self.poll = None
            self._resolve(outcome)
        return outcome

    def snapshot(self) -> ScoreboardSnapshot:
        return snapshot(self.state)

    # ---------------- internals ----------------
    def _resolve(self, outcome: ThrowOutcome) -> None:
        if outcome.kind.is_anomaly:
            logger.warning("ball left the playfield (%s) at %s; %d pins down",
                           outcome.kind.value, outcome.position, outcome.pins_down)
            self.physics.place_ball(self._ball_home())
        else:
            self.physics.place_ball(outcome.position)   # stop in place

        resolved = self.fsm.resolve_ball(self.state, outcome)
        for m in resolved.messages:
            self._emit(m)
        if self.on_ball is not None:
            self.on_ball(resolved.state, outcome)

        nxt = self.fsm.advance(resolved.state)
        self._apply_rack(nxt.rack)
        if nxt.rack is RackAction.FULL_RESET:
            self.physics.place_ball(self._ball_home())
        for m in nxt.messages:
            self._emit(m)
        self.state = nxt.state
        self._notify()

    def _apply_rack(self, action: RackAction) -> None:
        if action is RackAction.FULL_RESET:
            for i, pos in enumerate(self._rack):
                self.physics.place_pin(i, pos, IDENTITY_QUAT)
        elif action is RackAction.SWEEP_FALLEN:
            for i, pin in enumerate(self.physics.pins()):
                if is_fallen(pin, self.cfg.pins) and pin.position[0] <= self.cfg.pins.removed_x:
                    self.physics.place_pin(i, REMOVED_POSITION, IDENTITY_QUAT)

    def _ball_home(self) -> tuple[float, float, float]:
        return (0.0, self.cfg.lane.ball_radius, 0.0)

    def _emit(self, msg: StatusMessage) -> None:
        self.message = msg
        self.message_until = self.now_ms + msg.duration_ms
        if self.on_message is not None:
            self.on_message(msg)

    def _notify(self) -> None:
        if self.on_update is not None:
            self.on_update(self.snapshot())
