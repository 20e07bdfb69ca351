"""
Tests for the transition graph and timers.
"""

from enum import Enum, auto
import unittest

from ambusim.errors import InvalidTransition
from ambusim.state import Action, StateMachine
from ambusim.timer import Timer
from ambusim.unit import ClockTime, Second


class Light(Enum):
    RED = auto()
    GREEN = auto()
    YELLOW = auto()


def build_machine():
    return StateMachine(
        {
            Light.RED: (Action(Light.GREEN, lambda n: n + 1, Second(30)),),
            Light.GREEN: (Action(Light.YELLOW, delay=Second(25)), Action(Light.RED)),
            Light.YELLOW: (Action(Light.RED, delay=Second(5)),),
        }
    )


class TestStateMachine(unittest.TestCase):
    """Test StateMachine."""

    def test_allowed_transition_runs_effect(self):
        """Test the effect result is returned."""
        machine = build_machine()
        self.assertEqual(machine.request_transition(Light.RED, Light.GREEN, 41), 42)

    def test_transition_without_effect_returns_none(self):
        """Test actions without an effect."""
        machine = build_machine()
        self.assertIsNone(machine.request_transition(Light.GREEN, Light.RED))

    def test_illegal_transition_raises(self):
        """Test transitions missing from the graph are rejected."""
        machine = build_machine()
        with self.assertRaises(InvalidTransition):
            machine.request_transition(Light.RED, Light.YELLOW)

    def test_timed_action(self):
        """Test the timed action is found among several."""
        machine = build_machine()
        action = machine.timed_action(Light.GREEN)
        self.assertIs(action.state, Light.YELLOW)
        self.assertEqual(action.delay, Second(25))
        self.assertTrue(action.timed)

    def test_state_list(self):
        """Test all states are listed."""
        self.assertEqual(build_machine().state_list(), [Light.RED, Light.GREEN, Light.YELLOW])

    def test_unknown_state_has_no_actions(self):
        """Test states without outgoing edges."""
        machine = StateMachine({Light.RED: (Action(Light.GREEN),)})
        self.assertEqual(machine.actions_from(Light.GREEN), ())
        self.assertIsNone(machine.timed_action(Light.RED))


class TestTimer(unittest.TestCase):
    """Test Timer handles."""

    def test_one_shot_lifecycle(self):
        """Test a one-shot timer is done after firing."""
        calls = []
        timer = Timer(ClockTime(10), calls.append, name="t")
        self.assertTrue(timer.pending)
        timer._fire(ClockTime(10))
        self.assertEqual(calls, [ClockTime(10)])
        self.assertTrue(timer.done)

    def test_periodic_rearm(self):
        """Test a periodic timer moves its deadline forward."""
        timer = Timer(ClockTime(3), lambda now: None, interval=Second(3))
        timer._fire(ClockTime(3))
        timer._rearm()
        self.assertEqual(timer.deadline, ClockTime(6))
        self.assertTrue(timer.pending)

    def test_cancel(self):
        """Test cancelling is idempotent."""
        timer = Timer(ClockTime(3), lambda now: None)
        timer.cancel()
        timer.cancel()
        self.assertTrue(timer.cancelled)
        self.assertTrue(timer.done)

    def test_remaining_never_negative(self):
        """Test remaining time after the deadline."""
        timer = Timer(ClockTime(3), lambda now: None)
        self.assertEqual(timer.remaining(ClockTime(1)), Second(2))
        self.assertEqual(timer.remaining(ClockTime(5)), Second(0))

    def test_non_positive_interval_rejected(self):
        """Test periodic timers need a positive interval."""
        with self.assertRaises(ValueError):
            Timer(ClockTime(3), lambda now: None, interval=Second(0))


if __name__ == "__main__":
    unittest.main()
