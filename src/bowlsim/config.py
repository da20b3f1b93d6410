from __future__ import annotations
from pydantic import BaseModel
import yaml

from bowlsim import constants as C

class LaneCfg(BaseModel):
    length: float = C.LANE_LENGTH
    width: float = C.LANE_WIDTH
    pin_height: float = C.PIN_HEIGHT
    pin_spacing: float = C.PIN_SPACING
    ball_radius: float = C.BALL_RADIUS

    @property
    def deck_z(self) -> float:
        """z of the head pin."""
        return self.length - 0.5

class PinCfg(BaseModel):
    fallen_up_y: float = C.FALLEN_UP_Y
    fallen_height: float = C.FALLEN_HEIGHT
    removed_x: float = C.REMOVED_X

class SettleCfg(BaseModel):
    start_delay_ms: int = C.SETTLE_START_DELAY_MS
    fast_poll_ms: int = C.FAST_POLL_MS
    slow_poll_ms: int = C.SLOW_POLL_MS
    slow_speed: float = C.SLOW_SPEED
    rest_speed: float = C.REST_SPEED
    rest_samples: int = C.REST_SAMPLES
    floor_y: float = C.FLOOR_Y
    bounds_x: float = C.BOUNDS_X
    bounds_margin_z: float = C.BOUNDS_MARGIN_Z
    gutter_margin_z: float = C.GUTTER_MARGIN_Z
    return_margin_z: float = C.RETURN_MARGIN_Z
    scoring_margin_z: float = C.SCORING_MARGIN_Z

class ThrowCfg(BaseModel):
    min_force: float = C.MIN_FORCE
    max_force: float = C.MAX_FORCE
    lateral_gain: float = C.LATERAL_GAIN
    side_spin_gain: float = C.SIDE_SPIN_GAIN
    roll_gain: float = C.ROLL_GAIN

class MessageCfg(BaseModel):
    highlight_ms: int = C.HIGHLIGHT_MS
    default_ms: int = C.DEFAULT_MS

class FullConfig(BaseModel):
    seed: int = 42
    lane: LaneCfg = LaneCfg()
    pins: PinCfg = PinCfg()
    settlement: SettleCfg = SettleCfg()
    throw: ThrowCfg = ThrowCfg()
    messages: MessageCfg = MessageCfg()

def load_config(path: str) -> FullConfig:
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    return FullConfig.model_validate(raw)
