"""
Ten-pin scoring.

Totals are always recomputed from frame 0: a strike's value is not known
until later balls are bowled, so a running total is never patched in place.
"""
from __future__ import annotations
import logging
from typing import List, Optional

from bowlsim.constants import FRAME_COUNT, MAX_BALLS, MAX_BALLS_TENTH, PIN_COUNT, TENTH_FRAME
from bowlsim.state import Frames

logger = logging.getLogger(__name__)


def is_strike(entries) -> bool:
    return len(entries) > 0 and entries[0] == PIN_COUNT

def is_spare(entries) -> bool:
    return len(entries) >= 2 and entries[0] != PIN_COUNT and entries[0] + entries[1] == PIN_COUNT

def max_balls(frame_index: int) -> int:
    return MAX_BALLS_TENTH if frame_index == TENTH_FRAME else MAX_BALLS


def ball_delta(pins_down_now: int, pins_down_before: int) -> int:
    """Pins credited to a ball, given the rack's fallen count before and after it."""
    raw = pins_down_now - pins_down_before
    delta = max(0, min(raw, PIN_COUNT - pins_down_before))
    if delta != raw:
        logger.debug("clamped ball delta %d -> %d (now=%d before=%d)",
                     raw, delta, pins_down_now, pins_down_before)
    return delta


def record_ball(frames: Frames, frame_index: int, ball: int, delta: int) -> Frames:
    """Return frames with `delta` stored as ball `ball` (1-based) of `frame_index`."""
    if not 0 <= frame_index < FRAME_COUNT:
        raise ValueError(f"frame index out of range: {frame_index}")
    if not 1 <= ball <= max_balls(frame_index):
        raise ValueError(f"ball {ball} not allowed in frame {frame_index}")
    if not 0 <= delta <= PIN_COUNT:
        raise ValueError(f"pins out of range: {delta}")
    entries = list(frames[frame_index])
    if ball - 1 > len(entries):
        raise ValueError(f"ball {ball} recorded before ball {len(entries) + 1}")
    if ball - 1 == len(entries):
        entries.append(delta)
    else:
        entries[ball - 1] = delta
    if frame_index < TENTH_FRAME:
        if is_strike(entries) and len(entries) > 1:
            raise ValueError(f"frame {frame_index} already closed by a strike")
        if not is_strike(entries) and sum(entries) > PIN_COUNT:
            raise ValueError(f"frame {frame_index} pinfall exceeds {PIN_COUNT}: {entries}")
    out = list(frames)
    out[frame_index] = tuple(entries)
    return tuple(out)


def _bonus_balls(frames: Frames, i: int, n: int) -> List[int]:
    # next n balls bowled, looking at most two frames ahead
    following = [b for f in frames[i + 1:i + 3] for b in f]
    return following[:n]

def frame_score(frames: Frames, i: int) -> int:
    entries = frames[i]
    if i == TENTH_FRAME:
        return sum(entries)
    if is_strike(entries):
        return PIN_COUNT + sum(_bonus_balls(frames, i, 2))
    if is_spare(entries):
        return PIN_COUNT + sum(_bonus_balls(frames, i, 1))
    return sum(entries)

def frame_scores(frames: Frames) -> List[int]:
    return [frame_score(frames, i) for i in range(len(frames))]

def recalculate_total(frames: Frames) -> int:
    return sum(frame_scores(frames))

def running_totals(frames: Frames) -> List[Optional[int]]:
    """Cumulative score under each frame bowled so far; None for unplayed frames."""
    out: List[Optional[int]] = []
    acc = 0
    for i, f in enumerate(frames):
        if not f:
            out.append(None)
            continue
        acc += frame_score(frames, i)
        out.append(acc)
    return out


def _walk_racks(entries):
    """Yield (pins, mark, rack_down_after, fresh_rack_after) for each ball."""
    rack_down, fresh_rack = 0, True
    for n in entries:
        if fresh_rack and n == PIN_COUNT:
            mark = "X"
        elif not fresh_rack and rack_down + n == PIN_COUNT:
            mark = "/"
            rack_down, fresh_rack = 0, True
        else:
            mark = "-" if n == 0 else str(n)
            rack_down, fresh_rack = (0, True) if not fresh_rack else (n, False)
        yield n, mark, rack_down, fresh_rack

def rack_state(entries) -> tuple[int, bool]:
    """(pins down on the current rack, whether the next ball meets a fresh rack)."""
    rack_down, fresh_rack = 0, True
    for _, _, rack_down, fresh_rack in _walk_racks(entries):
        pass
    return rack_down, fresh_rack


# ---------------- notation ----------------
def frame_marks(entries) -> List[str]:
    """Per-ball marks: X strike, / spare, - zero, digits otherwise."""
    return [mark for _, mark, _, _ in _walk_racks(entries)]

def format_frame(entries) -> str:
    out = ""
    for m in frame_marks(entries):
        out += m if (m == "/" or not out) else " " + m
    return out

def scoreboard_tokens(frames: Frames) -> List[str]:
    return [format_frame(f) for f in frames]
