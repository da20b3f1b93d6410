"""
Boundary to the rigid-body engine. The core only reads `BodyState` samples
and issues placement / impulse commands; it never steps the simulation.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Protocol, Sequence
import numpy as np

IDENTITY_QUAT = (0.0, 0.0, 0.0, 1.0)  # x, y, z, w

def _vec(v) -> np.ndarray:
    return np.asarray(v, dtype=np.float64).reshape(3)

@dataclass(frozen=True, slots=True)
class BodyState:
    position: np.ndarray
    quaternion: np.ndarray = field(default_factory=lambda: np.array(IDENTITY_QUAT))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    angular_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))

    @classmethod
    def at(cls, position, quaternion=IDENTITY_QUAT, velocity=(0, 0, 0),
           angular_velocity=(0, 0, 0)) -> "BodyState":
        return cls(_vec(position), np.asarray(quaternion, dtype=np.float64).reshape(4),
                   _vec(velocity), _vec(angular_velocity))

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    @property
    def spin(self) -> float:
        return float(np.linalg.norm(self.angular_velocity))

class PhysicsPort(Protocol):
    def ball(self) -> BodyState: ...
    def pins(self) -> Sequence[BodyState]: ...
    def place_ball(self, position) -> None:
        """Teleport the ball and zero its velocities."""
    def place_pin(self, index: int, position, quaternion=IDENTITY_QUAT) -> None:
        """Teleport one pin and zero its velocities."""
    def apply_impulse(self, linear, angular) -> None: ...
