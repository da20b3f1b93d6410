"""Display values handed to the UI collaborator."""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from bowlsim.config import MessageCfg
from bowlsim.rules.scoring import running_totals, scoreboard_tokens
from bowlsim.state import GameState


class Category(str, Enum):
    STRIKE = "strike"
    SPARE = "spare"
    PINS = "pins"
    MISS = "miss"
    GUTTER = "gutter"
    INFO = "info"
    GAME_OVER = "game_over"


@dataclass(frozen=True, slots=True)
class StatusMessage:
    text: str
    category: Category
    duration_ms: int


def make_message(text: str, category: Category, cfg: Optional[MessageCfg] = None) -> StatusMessage:
    cfg = cfg if cfg is not None else MessageCfg()
    highlight = category in (Category.STRIKE, Category.SPARE)
    return StatusMessage(text, category, cfg.highlight_ms if highlight else cfg.default_ms)


@dataclass(frozen=True, slots=True)
class ScoreboardSnapshot:
    frame: int                          # 1-based for display
    ball: int
    pins_down: int                      # credited to the last ball
    total: int
    tokens: tuple[str, ...]
    running: tuple[Optional[int], ...]
    game_over: bool


def snapshot(s: GameState) -> ScoreboardSnapshot:
    return ScoreboardSnapshot(
        frame=s.frame + 1,
        ball=s.ball,
        pins_down=s.last_pins,
        total=s.total,
        tokens=tuple(scoreboard_tokens(s.frames)),
        running=tuple(running_totals(s.frames)),
        game_over=s.game_over,
    )
