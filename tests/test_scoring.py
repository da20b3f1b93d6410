import pytest

from bowlsim.rules.scoring import (ball_delta, format_frame, frame_scores, rack_state,
                                   recalculate_total, record_ball, running_totals,
                                   scoreboard_tokens)
from bowlsim.state import EMPTY_FRAMES


def frames_of(*fs):
    return tuple(fs) + ((),) * (10 - len(fs))


def test_perfect_game_is_300():
    frames = ((10,),) * 9 + ((10, 10, 10),)
    assert recalculate_total(frames) == 300


def test_all_spares_with_five_bonus_is_150():
    frames = ((5, 5),) * 9 + ((5, 5, 5),)
    assert recalculate_total(frames) == 150


def test_gutter_game_is_zero():
    assert recalculate_total(((0, 0),) * 10) == 0


def test_recalculate_total_is_idempotent():
    frames = frames_of((10,), (7, 3), (4, 2), (10,))
    assert recalculate_total(frames) == recalculate_total(frames) == 20 + 14 + 6 + 10


def test_double_strike_lookahead():
    frames = frames_of((10,), (10,), (3, 4))
    assert frame_scores(frames)[:3] == [23, 17, 7]
    assert running_totals(frames)[:4] == [23, 40, 47, None]


def test_pending_strike_counts_known_balls_only():
    assert frame_scores(frames_of((10,), (3,)))[0] == 13
    assert frame_scores(frames_of((10,)))[0] == 10


def test_ninth_frame_strike_reads_tenth_frame_balls():
    frames = ((0, 0),) * 8 + ((10,), (10, 10, 10))
    assert frame_scores(frames)[8] == 30
    assert recalculate_total(frames) == 60


def test_ball_delta_is_clamped():
    assert ball_delta(7, 0) == 7
    assert ball_delta(9, 7) == 2
    assert ball_delta(5, 6) == 0
    assert ball_delta(12, 4) == 6


def test_record_ball_appends_and_overwrites():
    f = record_ball(EMPTY_FRAMES, 0, 1, 7)
    f = record_ball(f, 0, 2, 2)
    assert f[0] == (7, 2)
    f = record_ball(f, 0, 2, 3)
    assert f[0] == (7, 3)
    assert EMPTY_FRAMES[0] == ()


@pytest.mark.parametrize("frame,ball,pins", [(10, 1, 3), (0, 3, 1), (9, 4, 1), (0, 1, 11), (0, 1, -1)])
def test_record_ball_rejects_out_of_range(frame, ball, pins):
    with pytest.raises(ValueError):
        record_ball(EMPTY_FRAMES, frame, ball, pins)


def test_record_ball_rejects_impossible_frames():
    with pytest.raises(ValueError):
        record_ball(frames_of((10,)), 0, 2, 0)
    with pytest.raises(ValueError):
        record_ball(frames_of((8,)), 0, 2, 3)
    with pytest.raises(ValueError):
        record_ball(EMPTY_FRAMES, 0, 2, 3)


def test_tenth_frame_may_exceed_ten():
    f = EMPTY_FRAMES
    for ball, pins in enumerate((10, 10, 8), start=1):
        f = record_ball(f, 9, ball, pins)
    assert f[9] == (10, 10, 8)


def test_rack_state():
    assert rack_state(()) == (0, True)
    assert rack_state((7,)) == (7, False)
    assert rack_state((10, 7)) == (7, False)
    assert rack_state((10, 10)) == (0, True)
    assert rack_state((6, 4)) == (0, True)


def test_notation():
    assert format_frame((10,)) == "X"
    assert format_frame((7, 3)) == "7/"
    assert format_frame((0, 10)) == "-/"
    assert format_frame((7, 0)) == "7 -"
    assert format_frame((7,)) == "7"
    assert format_frame((10, 10, 10)) == "X X X"
    assert format_frame((10, 7, 3)) == "X 7/"
    assert format_frame((7, 3, 10)) == "7/ X"
    assert format_frame((10, 0, 0)) == "X - -"
    assert scoreboard_tokens(frames_of((10,), (4, 5)))[:3] == ["X", "4 5", ""]
