"""
Throw settlement: decides from sampled ball state when a throw is over and how.

`classify_sample` is the single place where the terminal conditions are
ranked. `SettlementDetector` carries the at-rest debounce across samples, and
`SettlementPoll` turns it into a cancellable schedule driven by the host tick.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from bowlsim.config import LaneCfg, SettleCfg
from bowlsim.physics.port import BodyState

logger = logging.getLogger(__name__)


class OutcomeKind(str, Enum):
    SETTLED = "settled"
    GUTTER = "gutter"
    RETURNED = "returned"
    FELL_OFF = "fell_off"
    OUT_OF_BOUNDS = "out_of_bounds"

    @property
    def is_anomaly(self) -> bool:
        return self in (OutcomeKind.FELL_OFF, OutcomeKind.OUT_OF_BOUNDS)


@dataclass(frozen=True, slots=True)
class ThrowOutcome:
    kind: OutcomeKind
    pins_down: int                          # fallen pins on the deck at classification
    position: tuple[float, float, float]    # ball position at classification


def classify_sample(ball: BodyState, *, pins_newly_fallen: bool, rest_streak: int,
                    lane: LaneCfg, cfg: SettleCfg) -> Optional[OutcomeKind]:
    """Rank the terminal conditions for one sample; None means keep polling."""
    x, y, z = (float(c) for c in ball.position)
    if y < cfg.floor_y:
        return OutcomeKind.FELL_OFF
    if abs(x) > cfg.bounds_x or z < -cfg.bounds_margin_z or z > lane.length + cfg.bounds_margin_z:
        return OutcomeKind.OUT_OF_BOUNDS
    # a ball that caroms into the gutter after pin contact is not a gutter ball
    if abs(x) > lane.width / 2 and z < lane.length - cfg.gutter_margin_z and not pins_newly_fallen:
        return OutcomeKind.GUTTER
    if z > lane.length + cfg.return_margin_z:
        return OutcomeKind.RETURNED
    if rest_streak >= cfg.rest_samples:
        return OutcomeKind.SETTLED
    return None


class SettlementDetector:
    """Emits exactly one ThrowOutcome per throw."""

    def __init__(self, lane: Optional[LaneCfg] = None, cfg: Optional[SettleCfg] = None,
                 pins_down_at_frame_start: int = 0):
        self.lane = lane if lane is not None else LaneCfg()
        self.cfg = cfg if cfg is not None else SettleCfg()
        self.pins_down_at_frame_start = pins_down_at_frame_start
        self.rest_streak = 0
        self.outcome: Optional[ThrowOutcome] = None

    def is_resting(self, ball: BodyState) -> bool:
        return ball.speed < self.cfg.rest_speed and ball.spin < self.cfg.rest_speed

    def observe(self, ball: BodyState, pins_down: int) -> Optional[ThrowOutcome]:
        if self.outcome is not None:
            raise RuntimeError("throw already settled")
        self.rest_streak = self.rest_streak + 1 if self.is_resting(ball) else 0
        kind = classify_sample(
            ball,
            pins_newly_fallen=pins_down > self.pins_down_at_frame_start,
            rest_streak=self.rest_streak,
            lane=self.lane,
            cfg=self.cfg,
        )
        logger.debug("sample pos=%s speed=%.3f spin=%.3f streak=%d -> %s",
                     ball.position.round(3).tolist(), ball.speed, ball.spin,
                     self.rest_streak, kind)
        if kind is None:
            return None
        self.outcome = ThrowOutcome(kind, int(pins_down),
                                    tuple(float(c) for c in ball.position))
        return self.outcome

    def next_delay_ms(self, ball: BodyState) -> int:
        # sample densely near rest so quick stops are not missed
        return self.cfg.fast_poll_ms if ball.speed < self.cfg.slow_speed else self.cfg.slow_poll_ms


class SettlementPoll:
    """
    Tick-driven schedule around a SettlementDetector. The host calls `due`
    and `sample` from its single control loop; `cancel` is final.
    """

    def __init__(self, detector: SettlementDetector, started_ms: int):
        self.detector = detector
        self.next_at = started_ms + detector.cfg.start_delay_ms
        self.cancelled = False

    @property
    def done(self) -> bool:
        return self.cancelled or self.detector.outcome is not None

    def due(self, now_ms: int) -> bool:
        return not self.done and now_ms >= self.next_at

    def sample(self, now_ms: int, ball: BodyState, pins_down: int) -> Optional[ThrowOutcome]:
        outcome = self.detector.observe(ball, pins_down)
        if outcome is None and not self.cancelled:
            self.next_at = now_ms + self.detector.next_delay_ms(ball)
        return outcome

    def cancel(self) -> None:
        self.cancelled = True
