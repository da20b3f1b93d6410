from dataclasses import fields

import numpy as np

from bowlsim.config import FullConfig
from bowlsim.physics.lane import TIPPED
from bowlsim.physics.pins import rack_positions
from bowlsim.physics.port import IDENTITY_QUAT, BodyState
from bowlsim.physics.settlement import OutcomeKind
from bowlsim.session import BowlingSession
from bowlsim.state import Phase


class FakePhysics:
    def __init__(self):
        self.ball_state = BodyState.at((0.0, 0.1085, 0.0))
        self.pin_states = [BodyState.at(p) for p in rack_positions()]
        self.impulses = []

    def ball(self):
        return self.ball_state

    def pins(self):
        return list(self.pin_states)

    def place_ball(self, position):
        self.ball_state = BodyState.at(position)

    def place_pin(self, index, position, quaternion=IDENTITY_QUAT):
        self.pin_states[index] = BodyState.at(position, quaternion)

    def apply_impulse(self, linear, angular):
        self.impulses.append((np.asarray(linear), np.asarray(angular)))

    def knock(self, *idx):
        for i in idx:
            self.pin_states[i] = BodyState.at(self.pin_states[i].position, TIPPED)

    def move_ball(self, pos, v=(0.0, 0.0, 4.0)):
        self.ball_state = BodyState.at(pos, velocity=v)


def make_session():
    phys = FakePhysics()
    msgs, updates = [], []
    s = BowlingSession(phys, FullConfig(), on_message=msgs.append, on_update=updates.append)
    return s, phys, msgs, updates


def test_throw_maps_power_and_angle_to_impulse():
    s, phys, _, _ = make_session()
    assert s.throw(1.0, 0.0)
    linear, angular = phys.impulses[-1]
    assert np.allclose(linear, [0.0, 0.0, 70.0])
    assert np.allclose(angular, [0.0, 0.0, -10.5])
    assert s.state.phase is Phase.BALL_SETTLING


def test_power_is_clamped_and_min_force_applies():
    s, phys, _, _ = make_session()
    s.throw(-1.0, 0.0)
    assert np.allclose(phys.impulses[-1][0], [0.0, 0.0, 5.0])
    s.reset()
    s.throw(3.0, 0.1)
    linear, angular = phys.impulses[-1]
    assert np.isclose(linear[2], 70.0)
    assert np.isclose(linear[0], np.sin(0.1) * 70.0 * 0.4)
    assert np.isclose(angular[0], -0.1 * 70.0 * 0.2)


def test_throw_while_in_flight_is_ignored():
    s, phys, _, _ = make_session()
    assert s.throw(0.5, 0.0)
    before = s.state
    assert not s.throw(0.9, 0.0)
    assert s.state is before
    assert len(phys.impulses) == 1


def test_no_sampling_before_start_delay():
    s, phys, _, _ = make_session()
    s.throw(0.5, 0.0)
    phys.move_ball((6.0, 0.11, 3.0))
    assert s.tick(1000) is None
    assert s.tick(1500).kind is OutcomeKind.OUT_OF_BOUNDS


def test_out_of_bounds_after_four_pins_credits_four_and_sweeps():
    s, phys, msgs, _ = make_session()
    s.throw(0.8, 0.3)
    phys.knock(9, 7, 8, 5)
    phys.move_ball((6.0, 0.11, 11.0))
    out = s.tick(1500)
    assert out.kind is OutcomeKind.OUT_OF_BOUNDS
    assert s.state.frames[0] == (4,)
    assert (s.state.frame, s.state.ball, s.state.phase) == (0, 2, Phase.AWAITING_THROW)
    assert msgs[-1].text == "Out of bounds! But 4 pins counted!"
    assert tuple(phys.ball_state.position) == (0.0, 0.1085, 0.0)
    swept = [i for i, p in enumerate(phys.pin_states) if p.position[0] == 100.0]
    assert swept == [5, 7, 8, 9]


def test_spare_resets_rack_for_next_frame():
    s, phys, msgs, updates = make_session()
    s.throw(0.8, 0.0)
    phys.knock(0, 1, 2, 3)
    phys.move_ball((0.0, 0.11, 13.0))
    assert s.tick(1500).kind is OutcomeKind.RETURNED
    s.throw(0.8, 0.0)
    phys.knock(4, 5, 6, 7, 8, 9)
    phys.move_ball((0.0, 0.11, 13.0))
    s.tick(3000)
    assert s.state.frames[0] == (4, 6)
    assert msgs[-1].text == "SPARE!"
    assert (s.state.frame, s.state.ball) == (1, 1)
    assert all(np.allclose(p.quaternion, IDENTITY_QUAT) for p in phys.pin_states)
    assert [tuple(p.position) for p in phys.pin_states] == rack_positions()
    assert updates[-1].frame == 2
    assert updates[-1].tokens[0] == "4/"


def test_ball_stopped_short_still_gets_second_ball():
    s, phys, msgs, _ = make_session()
    s.throw(0.1, 0.0)
    phys.knock(0, 1, 2)
    phys.move_ball((0.0, 0.11, 4.0), v=(0.0, 0.0, 0.0))
    s.tick(1500)
    s.tick(1650)
    assert s.tick(1800).kind is OutcomeKind.SETTLED
    assert s.state.frames[0] == (0,)
    assert msgs[-1].text == "Ball stopped before pins!"
    assert (s.state.frame, s.state.ball) == (0, 2)
    assert [i for i, p in enumerate(phys.pin_states) if p.position[0] == 100.0] == [0, 1, 2]
    s.throw(0.8, 0.0)
    phys.knock(*range(3, 10))
    phys.move_ball((0.0, 0.11, 13.0))
    assert s.tick(3300).kind is OutcomeKind.RETURNED
    assert s.state.frames[0] == (0, 10)
    assert (s.state.frame, s.state.ball) == (1, 1)


def test_settlement_is_debounced_across_ticks():
    s, phys, _, _ = make_session()
    s.throw(0.3, 0.0)
    phys.knock(0, 1)
    phys.move_ball((0.0, 0.11, 11.0), v=(0.0, 0.0, 0.0))
    assert s.tick(1500) is None
    assert s.tick(1600) is None        # not due yet
    assert s.tick(1650) is None
    assert s.tick(1800).kind is OutcomeKind.SETTLED
    assert s.state.frames[0] == (2,)


def test_reset_cancels_pending_settlement():
    s, phys, _, _ = make_session()
    s.throw(0.5, 0.0)
    phys.knock(0, 1, 2)
    phys.move_ball((6.0, 0.11, 3.0))
    s.reset()
    assert s.poll is None
    assert s.tick(5000) is None
    assert s.state.frames == ((),) * 10
    assert s.state.phase is Phase.AWAITING_THROW
    assert all(p.position[1] > 0.1 for p in phys.pin_states)
    assert s.throw(0.5, 0.0)


def test_message_expires():
    s, phys, msgs, _ = make_session()
    s.tick(100)
    s.throw(1.0, 0.0)
    phys.knock(*range(10))
    phys.move_ball((0.0, 0.11, 13.0))
    s.tick(1600)
    assert s.message.text == "STRIKE!"
    s.tick(1600 + 2999)
    assert s.message is not None
    s.tick(1600 + 3000)
    assert s.message is None


def test_snapshot():
    s, phys, _, _ = make_session()
    s.throw(1.0, 0.0)
    phys.knock(0, 1, 2)
    phys.move_ball((0.0, 0.11, 13.0))
    s.tick(1500)
    snap = s.snapshot()
    assert (snap.frame, snap.ball, snap.pins_down, snap.total) == (1, 2, 3, 3)
    assert snap.tokens[0] == "3"
    assert snap.running[0] == 3 and snap.running[1] is None
    assert not snap.game_over
    assert [f.name for f in fields(snap)] == ["frame", "ball", "pins_down", "total",
                                             "tokens", "running", "game_over"]
