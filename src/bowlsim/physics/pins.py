from __future__ import annotations
from typing import Optional, Sequence
import numpy as np

from bowlsim.config import LaneCfg, PinCfg
from bowlsim.physics.port import BodyState

UP = np.array([0.0, 1.0, 0.0])

def rotate(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Rotate vector v by unit quaternion q = (x, y, z, w)."""
    u, w = q[:3], q[3]
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)

def is_fallen(pin: BodyState, cfg: Optional[PinCfg] = None) -> bool:
    cfg = cfg if cfg is not None else PinCfg()
    up = rotate(pin.quaternion, UP)
    return bool(
        up[1] < cfg.fallen_up_y
        or pin.position[1] < cfg.fallen_height
        or pin.position[0] > cfg.removed_x   # swept off the deck between balls
    )

def count_fallen(pins: Sequence[BodyState], cfg: Optional[PinCfg] = None) -> int:
    return sum(1 for p in pins if is_fallen(p, cfg))

def rack_positions(lane: Optional[LaneCfg] = None) -> list[tuple[float, float, float]]:
    """Standing positions of the ten pins, back row first, head pin last."""
    lane = lane if lane is not None else LaneCfg()
    s = lane.pin_spacing
    z0 = lane.deck_z
    row = s * np.sin(np.pi / 3)
    y = lane.pin_height / 2
    xs_by_row = [
        (3, (-1.5 * s, -0.5 * s, 0.5 * s, 1.5 * s)),
        (2, (-s, 0.0, s)),
        (1, (-s / 2, s / 2)),
        (0, (0.0,)),
    ]
    return [(float(x), y, float(z0 + r * row)) for r, xs in xs_by_row for x in xs]
