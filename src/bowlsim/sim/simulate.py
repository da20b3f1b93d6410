from __future__ import annotations

import argparse
import logging
from pathlib import Path

import numpy as np
import pandas as pd

from bowlsim.config import FullConfig, load_config
from bowlsim.physics.lane import KinematicLane
from bowlsim.physics.settlement import ThrowOutcome
from bowlsim.rules.scoring import frame_marks
from bowlsim.session import BowlingSession
from bowlsim.state import GameState, Phase

logger = logging.getLogger(__name__)

TICK_MS = 16
MAX_BALL_MS = 60_000


def draw_throw(rng: np.random.Generator, power_lo: float = 0.3, aim_sd: float = 0.03):
    power = float(rng.uniform(power_lo, 1.0))
    angle = float(rng.normal(0.0, aim_sd))
    return power, angle


def play_game(cfg: FullConfig, rng: np.random.Generator, game: int = 0,
              power_lo: float = 0.3, aim_sd: float = 0.03) -> list[dict]:
    """Bowl one full game against a KinematicLane; one row per resolved ball."""
    rows: list[dict] = []

    def record(s: GameState, outcome: ThrowOutcome):
        rows.append(
            {
                "game": game,
                "frame": s.frame + 1,
                "ball": s.ball,
                "outcome": outcome.kind.value,
                "pins": s.last_pins,
                "mark": frame_marks(s.entries)[-1],
                "total": s.total,
            }
        )

    lane = KinematicLane(cfg.lane, rng)
    session = BowlingSession(lane, cfg, on_ball=record)
    session.reset()
    now = started = 0
    while not session.state.game_over:
        if session.state.phase is Phase.AWAITING_THROW:
            session.throw(*draw_throw(rng, power_lo, aim_sd))
            started = now
        if now - started > MAX_BALL_MS:
            raise RuntimeError(f"game {game}: ball never settled")
        lane.step(TICK_MS / 1000.0)
        now += TICK_MS
        session.tick(now)
    logger.info("game %d final=%d balls=%d", game, session.state.total, len(rows))
    return rows


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--n_games", type=int, default=200)
    ap.add_argument("--config", type=str, default="")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--power_lo", type=float, default=0.3)
    ap.add_argument("--aim_sd", type=float, default=0.03)
    ap.add_argument("--out", type=str, default="runs/sim_games.parquet")
    ap.add_argument("--log_level", type=str, default="INFO")
    args = ap.parse_args()

    logging.basicConfig(level=args.log_level.upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    cfg = load_config(args.config) if args.config else FullConfig()
    seed = cfg.seed if args.seed is None else args.seed
    rng = np.random.default_rng(seed)

    rows = []
    for g in range(args.n_games):
        rows.extend(play_game(cfg, rng, g, args.power_lo, args.aim_sd))

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(rows)
    if out.suffix == ".csv":
        df.to_csv(out, index=False)
    else:
        df.to_parquet(out, index=False)
    print("Saved", out)


if __name__ == "__main__":
    main()
