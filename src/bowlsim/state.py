from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from bowlsim.constants import FRAME_COUNT

Frames = tuple[tuple[int, ...], ...]

EMPTY_FRAMES: Frames = tuple(() for _ in range(FRAME_COUNT))

class Phase(str, Enum):
    AWAITING_THROW = "awaiting_throw"
    BALL_SETTLING = "ball_settling"
    BALL_RESOLVED = "ball_resolved"
    FRAME_COMPLETE = "frame_complete"
    GAME_OVER = "game_over"

@dataclass(frozen=True, slots=True)
class GameState:
    frame: int                  # 0..9
    ball: int                   # 1..2, 3 only in the tenth
    frames: Frames              # per-frame ball pinfalls
    total: int
    phase: Phase = Phase.AWAITING_THROW
    game_over: bool = False
    thrown: bool = False
    settled: bool = True
    rack_pins_down: int = 0     # pins credited on the current rack
    last_pins: int = 0          # pins credited to the most recent ball

    @property
    def entries(self) -> tuple[int, ...]:
        return self.frames[self.frame]
