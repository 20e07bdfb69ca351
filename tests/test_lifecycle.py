"""
Tests for time-driven unit lifecycles and the motion tick.
"""

from datetime import datetime
import unittest
from unittest import mock

import numpy as np

from ambusim.config import EngineConfig
from ambusim.engine import TrackingEngine
from ambusim.events import STAGE_CHANGED, TRANSITION_DROPPED
from ambusim.fleet import UnitRegistry, UnitStatus, default_fleet
from ambusim.geo import GeoPoint
from ambusim.scheduler import LifecycleScheduler, TimerScheduler
from ambusim.unit import Second
from ambusim.vitals import BASELINE_VITALS

EPOCH = datetime(2024, 1, 1, 12, 0, 0)
PICKUP = GeoPoint.from_deg(40.7130, -74.0050)


class TestLifecycle(unittest.TestCase):
    """Test stage timers with default delays."""

    def setUp(self):
        self.engine = TrackingEngine(EngineConfig(seed=7), epoch=EPOCH)
        self.stages = []
        self.engine.subscribe(STAGE_CHANGED, lambda name, unit: self.stages.append(unit.status))

    def tearDown(self):
        self.engine.stop()

    def assert_fleet_consistent(self):
        for unit in self.engine.list_units():
            self.assertTrue(unit.consistent(), unit)

    def test_step_by_step(self):
        """Test each stage, its ETA and the invariant."""
        unit = self.engine.dispatch("patient-1", PICKUP)
        self.assertEqual(unit.id, "amb-1")
        self.assertIs(unit.status, UnitStatus.DISPATCHED)
        self.assertEqual(unit.assigned_patient_id, "patient-1")
        self.assertEqual(unit.vitals, BASELINE_VITALS)
        self.assertEqual(unit.eta_display, "12:10:00")
        self.assert_fleet_consistent()

        self.engine.advance(Second(9.9))
        self.assertIs(self.engine.get_unit("amb-1").status, UnitStatus.DISPATCHED)

        self.engine.advance(Second(0.1))
        unit = self.engine.get_unit("amb-1")
        self.assertIs(unit.status, UnitStatus.ARRIVED_PICKUP)
        self.assertEqual(unit.eta_display, "12:10:00")
        self.assert_fleet_consistent()

        self.engine.advance(Second(10))
        unit = self.engine.get_unit("amb-1")
        self.assertIs(unit.status, UnitStatus.TRANSPORTING)
        self.assertEqual(unit.eta_display, "12:15:20")
        self.assert_fleet_consistent()

        self.engine.advance(Second(15))
        unit = self.engine.get_unit("amb-1")
        self.assertIs(unit.status, UnitStatus.ARRIVED_DESTINATION)
        self.assertIsNone(unit.assigned_patient_id)
        self.assertIsNone(unit.vitals)
        self.assert_fleet_consistent()

        self.engine.advance(Second(10))
        unit = self.engine.get_unit("amb-1")
        self.assertIs(unit.status, UnitStatus.AVAILABLE)
        self.assertIsNone(unit.eta_display)
        self.assert_fleet_consistent()

    def test_full_cycle_in_one_step(self):
        """Test D1+D2+D3+D4 returns the unit, passing each state once."""
        self.engine.dispatch("patient-1", PICKUP)
        self.engine.advance(Second(45))
        self.assertIs(self.engine.get_unit("amb-1").status, UnitStatus.AVAILABLE)
        self.assertEqual(
            self.stages,
            [
                UnitStatus.ARRIVED_PICKUP,
                UnitStatus.TRANSPORTING,
                UnitStatus.ARRIVED_DESTINATION,
                UnitStatus.AVAILABLE,
            ],
        )
        self.assertIsNone(self.engine.lifecycle.pending_stage("amb-1"))
        self.assertEqual(self.engine.scheduler.pending(), [])

    def test_one_stage_timer_per_active_unit(self):
        """Test each active unit has exactly one pending stage timer."""
        self.engine.dispatch("patient-1", PICKUP)
        self.engine.advance(Second(5))
        self.engine.dispatch("patient-2", PICKUP)
        for _ in range(10):
            self.engine.advance(Second(2.5))
            pending = self.engine.scheduler.pending()
            active = [u for u in self.engine.list_units() if not u.is_available]
            self.assertEqual(len(pending), len(active))
            self.assert_fleet_consistent()

    def test_concurrent_journeys_are_independent(self):
        """Test two units on staggered schedules."""
        self.engine.dispatch("patient-1", PICKUP)
        self.engine.advance(Second(5))
        self.engine.dispatch("patient-2", PICKUP)
        self.engine.advance(Second(40))
        self.assertIs(self.engine.get_unit("amb-1").status, UnitStatus.AVAILABLE)
        self.assertIs(self.engine.get_unit("amb-2").status, UnitStatus.ARRIVED_DESTINATION)
        self.engine.advance(Second(5))
        self.assertIs(self.engine.get_unit("amb-2").status, UnitStatus.AVAILABLE)

    def test_stale_transition_is_dropped(self):
        """Test a stage timer finding an unexpected state does nothing."""
        dropped = []
        self.engine.subscribe(TRANSITION_DROPPED, lambda name, data: dropped.append(data))
        self.engine.dispatch("patient-1", PICKUP)

        reset = self.engine.get_unit("amb-1").evolve(
            status=UnitStatus.AVAILABLE, assigned_patient_id=None, vitals=None, eta_display=None
        )
        self.engine.registry.replace("amb-1", reset)
        self.engine.advance(Second(45))

        self.assertEqual(self.engine.get_unit("amb-1"), reset)
        self.assertEqual(len(dropped), 1)
        self.assertEqual(dropped[0]["unit_id"], "amb-1")
        self.assertIs(dropped[0]["target"], UnitStatus.ARRIVED_PICKUP)
        self.assertEqual(self.stages, [])

    def test_failing_transition_ends_chain(self):
        """Test an unexpected error leaves the unit in its current state."""
        self.engine.stop()
        with mock.patch.object(
            LifecycleScheduler, "_arrive_pickup", side_effect=RuntimeError("stuck")
        ):
            self.engine = TrackingEngine(EngineConfig(seed=7), epoch=EPOCH)
            self.engine.dispatch("patient-1", PICKUP)
            self.engine.advance(Second(60))

        unit = self.engine.get_unit("amb-1")
        self.assertIs(unit.status, UnitStatus.DISPATCHED)
        self.assertIsNone(self.engine.lifecycle.pending_stage("amb-1"))
        self.assertEqual(self.engine.scheduler.pending(), [])


class TestMotionTick(unittest.TestCase):
    """Test the fleet motion tick."""

    def setUp(self):
        self.engine = TrackingEngine(EngineConfig(seed=11), epoch=EPOCH)
        self.engine.start(realtime=False)

    def tearDown(self):
        self.engine.stop()

    def test_moves_only_units_in_motion(self):
        """Test idle units stay put and moving units drift within bounds."""
        before = {u.id: u for u in self.engine.list_units()}
        self.engine.dispatch("patient-1", PICKUP)
        self.engine.advance(Second(3))

        moved = self.engine.get_unit("amb-1")
        self.assertNotEqual(moved.location, before["amb-1"].location)
        self.assertLessEqual(abs(moved.location.lat_deg - before["amb-1"].location.lat_deg), 0.0005 + 1e-9)
        self.assertLessEqual(abs(moved.location.lon_deg - before["amb-1"].location.lon_deg), 0.0005 + 1e-9)
        self.assertEqual(self.engine.get_unit("amb-2"), before["amb-2"])
        self.assertEqual(self.engine.get_unit("amb-3"), before["amb-3"])

    def test_walks_vitals_in_transit(self):
        """Test vitals drift in band while moving."""
        self.engine.dispatch("patient-1", PICKUP)
        for _ in range(3):
            self.engine.advance(Second(3))
            vitals = self.engine.get_unit("amb-1").vitals
            self.assertTrue(60 <= vitals.heart_rate <= 100)
            self.assertTrue(94 <= vitals.oxygen_saturation <= 100)
        self.assertEqual(vitals.glucose, BASELINE_VITALS.glucose)

    def test_arrived_pickup_does_not_move(self):
        """Test a unit loading a patient keeps its position and vitals."""
        self.engine.dispatch("patient-1", PICKUP)
        self.engine.advance(Second(10))
        loading = self.engine.get_unit("amb-1")
        self.assertIs(loading.status, UnitStatus.ARRIVED_PICKUP)
        self.engine.advance(Second(9))
        self.assertEqual(self.engine.get_unit("amb-1"), loading)

    def test_stop_motion_keeps_stage_timers(self):
        """Test the motion tick stops independently of stage timers."""
        self.engine.dispatch("patient-1", PICKUP)
        self.assertTrue(self.engine.lifecycle.stop_motion())
        self.assertFalse(self.engine.lifecycle.stop_motion())
        start = self.engine.get_unit("amb-1").location
        self.engine.advance(Second(9))
        self.assertEqual(self.engine.get_unit("amb-1").location, start)
        self.engine.advance(Second(36))
        self.assertIs(self.engine.get_unit("amb-1").status, UnitStatus.AVAILABLE)

    def test_start_motion_twice(self):
        """Test the motion tick is started only once."""
        self.assertTrue(self.engine.lifecycle.motion_running)
        self.assertFalse(self.engine.lifecycle.start_motion())


class TestStandaloneLifecycle(unittest.TestCase):
    """Test a LifecycleScheduler built without an engine."""

    def setUp(self):
        self.scheduler = TimerScheduler(epoch=EPOCH)
        self.lifecycle = LifecycleScheduler(
            UnitRegistry(default_fleet()), self.scheduler, config=EngineConfig(seed=5)
        )

    def tearDown(self):
        self.lifecycle.shutdown()
        self.scheduler.shutdown()

    def test_motion_and_vitals_streams_are_independent(self):
        """Test the motion offsets and the vitals walk draw from different streams."""
        motion = self.lifecycle._rng.random(8)
        walk = self.lifecycle._generator._rng.random(8)
        self.assertFalse(np.allclose(motion, walk))

    def test_streams_match_an_engine_with_the_same_seed(self):
        """Test a standalone scheduler reproduces an engine's fleet streams."""
        with TrackingEngine(EngineConfig(seed=5), epoch=EPOCH) as engine:
            np.testing.assert_array_equal(
                self.lifecycle._rng.random(8), engine.lifecycle._rng.random(8)
            )
            np.testing.assert_array_equal(
                self.lifecycle._generator._rng.random(8),
                engine.lifecycle._generator._rng.random(8),
            )


if __name__ == "__main__":
    unittest.main()
