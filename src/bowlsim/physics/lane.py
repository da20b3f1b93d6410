from __future__ import annotations
from dataclasses import replace
from typing import List, Optional

import numpy as np

from bowlsim.config import LaneCfg
from bowlsim.constants import BALL_MASS
from bowlsim.physics.pins import is_fallen, rack_positions
from bowlsim.physics.port import BodyState, IDENTITY_QUAT

TIPPED = (np.sqrt(0.5), 0.0, 0.0, np.sqrt(0.5))  # 90 deg about x

class KinematicLane:
    """
    Stand-in for the rigid-body engine: the ball rolls in a straight line under
    constant deceleration, drops into a gutter channel past the lane edge, and
    knocks pins over by chance when it reaches the deck. Angular velocity is
    set (not integrated) by `apply_impulse` and decays with the ball's speed.
    """

    def __init__(self, lane: Optional[LaneCfg] = None, rng: Optional[np.random.Generator] = None,
                 decel: float = 0.35, mass: float = BALL_MASS):
        self.lane = lane = lane if lane is not None else LaneCfg()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.decel = decel
        self.mass = mass
        self._ball = BodyState.at((0.0, lane.ball_radius, 0.0))
        self._pins: List[BodyState] = [BodyState.at(p) for p in rack_positions(lane)]
        self._deck_reached = False

    # PhysicsPort
    def ball(self) -> BodyState:
        return self._ball

    def pins(self) -> List[BodyState]:
        return list(self._pins)

    def place_ball(self, position) -> None:
        self._ball = BodyState.at(position)
        self._deck_reached = False

    def place_pin(self, index: int, position, quaternion=IDENTITY_QUAT) -> None:
        self._pins[index] = BodyState.at(position, quaternion)

    def apply_impulse(self, linear, angular) -> None:
        v = self._ball.velocity + np.asarray(linear, dtype=np.float64) / self.mass
        self._ball = replace(self._ball, velocity=v,
                             angular_velocity=np.asarray(angular, dtype=np.float64))

    # stepping
    def step(self, dt: float) -> None:
        b = self._ball
        speed = b.speed
        if speed == 0.0:
            return
        pos = b.position + b.velocity * dt
        scale = max(0.0, speed - self.decel * dt) / speed
        vel = b.velocity * scale
        spin = b.angular_velocity * scale

        edge = self.lane.width / 2
        if abs(pos[0]) > edge and pos[2] < self.lane.length:
            pos[0] = np.sign(pos[0]) * (edge + self.lane.ball_radius)   # gutter channel
            vel[0] = 0.0
        self._ball = replace(b, position=pos, velocity=vel, angular_velocity=spin)

        if not self._deck_reached and pos[2] >= self.lane.deck_z - self.lane.ball_radius:
            self._deck_reached = True
            if abs(pos[0]) <= edge:
                self._knock(float(pos[0]), float(np.linalg.norm(vel)))

    def _knock(self, x: float, speed: float) -> None:
        energy = min(1.0, speed / 3.0)
        for i, pin in enumerate(self._pins):
            if is_fallen(pin):
                continue
            p = float(np.clip(energy * (1.15 - 1.4 * abs(pin.position[0] - x)), 0.0, 0.97))
            if self.rng.random() < p:
                fallen = pin.position.copy()
                fallen[1] = self.lane.pin_height / 4
                self._pins[i] = BodyState.at(fallen, TIPPED)
