"""
Tests for vitals snapshots and random walks.
"""

import unittest

import numpy as np

from ambusim.vitals import (
    BASELINE_VITALS,
    FLEET_DRIFTS,
    METRICS,
    Drift,
    LiveVitalsWalk,
    VitalsGenerator,
    VitalsSnapshot,
    parse_blood_pressure,
)


class TestVitalsSnapshot(unittest.TestCase):
    """Test VitalsSnapshot."""

    def test_baseline(self):
        """Test the baseline assigned at dispatch."""
        v = BASELINE_VITALS
        self.assertEqual(v.heart_rate, 85)
        self.assertEqual(v.blood_pressure, "120/80")
        self.assertEqual(v.oxygen_saturation, 98.0)
        self.assertEqual(v.temperature, 37.2)
        self.assertEqual(v.respiratory_rate, 16)
        self.assertEqual(v.glucose, 90)
        self.assertEqual(v.consciousness, "Alert")

    def test_merge_is_partial_and_immutable(self):
        """Test merge keeps untouched metrics and the original."""
        merged = BASELINE_VITALS.merge(heart_rate="110", blood_pressure="130/85")
        self.assertEqual(merged.heart_rate, 110)
        self.assertEqual((merged.systolic, merged.diastolic), (130, 85))
        self.assertEqual(merged.glucose, 90)
        self.assertEqual(BASELINE_VITALS.heart_rate, 85)

    def test_merge_coerces_types(self):
        """Test form strings are converted to field types."""
        merged = BASELINE_VITALS.merge(oxygen_saturation="96.44", respiratory_rate=18.6)
        self.assertEqual(merged.oxygen_saturation, 96.4)
        self.assertEqual(merged.respiratory_rate, 19)
        self.assertIsInstance(merged.respiratory_rate, int)

    def test_merge_rejects_unknown_and_invalid(self):
        """Test invalid updates raise ValueError."""
        with self.assertRaises(ValueError):
            BASELINE_VITALS.merge(pulse=80)
        with self.assertRaises(ValueError):
            BASELINE_VITALS.merge(heart_rate="fast")
        with self.assertRaises(ValueError):
            BASELINE_VITALS.merge(consciousness="   ")
        for text in ("nan", "inf", "-inf"):
            for name in ("heart_rate", "oxygen_saturation", "temperature"):
                with self.subTest(name=name, value=text):
                    with self.assertRaises(ValueError):
                        BASELINE_VITALS.merge(**{name: text})
            with self.subTest(name="blood_pressure", value=text):
                with self.assertRaises(ValueError):
                    BASELINE_VITALS.merge(blood_pressure=f"{text}/80")
        with self.assertRaises(ValueError):
            VitalsSnapshot.from_mapping({"oxygenLevel": float("nan")})

    def test_from_mapping_accepts_form_keys(self):
        """Test camelCase form keys and empty fields."""
        data = {
            "heartRate": "92",
            "bloodPressure": "118/76",
            "oxygenLevel": "97",
            "temperature": "",
            "glucoseLevel": "105",
            "consciousness": "Voice",
        }
        v = VitalsSnapshot.from_mapping(data)
        self.assertEqual(v.heart_rate, 92)
        self.assertEqual(v.blood_pressure, "118/76")
        self.assertEqual(v.oxygen_saturation, 97.0)
        self.assertEqual(v.temperature, 37.2)
        self.assertEqual(v.glucose, 105)
        self.assertEqual(v.consciousness, "Voice")

    def test_parse_blood_pressure(self):
        """Test systolic/diastolic parsing."""
        self.assertEqual(parse_blood_pressure("140/90"), (140, 90))
        with self.assertRaises(ValueError):
            parse_blood_pressure("140")

    def test_as_dict(self):
        """Test the dict form carries the combined pressure."""
        data = BASELINE_VITALS.as_dict()
        self.assertEqual(data["blood_pressure"], "120/80")
        self.assertEqual(set(VitalsSnapshot.field_names()) - set(data), set())

    def test_every_field_has_metric_metadata(self):
        """Test METRICS covers every field."""
        self.assertEqual(set(METRICS), set(VitalsSnapshot.field_names()))


class TestVitalsGenerator(unittest.TestCase):
    """Test the fleet random walk."""

    TRIALS = 10_000

    def random_snapshot(self, rng):
        return VitalsSnapshot(
            heart_rate=int(rng.integers(0, 250)),
            systolic=int(rng.integers(50, 220)),
            diastolic=int(rng.integers(20, 150)),
            oxygen_saturation=float(rng.uniform(70, 100)),
            temperature=float(rng.uniform(34, 42)),
            respiratory_rate=int(rng.integers(0, 40)),
            glucose=int(rng.integers(40, 400)),
            consciousness="Pain",
        )

    def test_bands_hold_for_any_input(self):
        """Test every clamped metric stays in band after one step."""
        gen = VitalsGenerator(seed=2024)
        rng = np.random.default_rng(7)
        bands = {name: (d.low, d.high) for name, d in FLEET_DRIFTS.items() if d.low is not None}

        for _ in range(self.TRIALS):
            previous = self.random_snapshot(rng)
            nxt = gen.next(previous)
            for name, (low, high) in bands.items():
                value = getattr(nxt, name)
                self.assertTrue(low <= value <= high, f"{name}={value}")
            self.assertEqual(nxt.glucose, previous.glucose)
            self.assertEqual(nxt.consciousness, previous.consciousness)
            self.assertLessEqual(abs(nxt.temperature - previous.temperature), 0.1501)

    def test_bands_hold_over_long_walk(self):
        """Test a long walk from the baseline never leaves the bands."""
        gen = VitalsGenerator(seed=1)
        v = BASELINE_VITALS
        for _ in range(self.TRIALS):
            v = gen.next(v)
            self.assertTrue(60 <= v.heart_rate <= 100)
            self.assertTrue(100 <= v.systolic <= 140)
            self.assertTrue(60 <= v.diastolic <= 90)
            self.assertTrue(94 <= v.oxygen_saturation <= 100)
            self.assertTrue(12 <= v.respiratory_rate <= 20)

    def test_rounding(self):
        """Test integer metrics are ints and decimals keep one place."""
        gen = VitalsGenerator(seed=5)
        v = gen.next(BASELINE_VITALS)
        for name in ("heart_rate", "systolic", "diastolic", "respiratory_rate"):
            self.assertIsInstance(getattr(v, name), int)
        self.assertEqual(v.oxygen_saturation, round(v.oxygen_saturation, 1))
        self.assertEqual(v.temperature, round(v.temperature, 1))

    def test_step_size(self):
        """Test a step never moves further than its delta."""
        gen = VitalsGenerator(seed=9)
        for _ in range(1000):
            v = gen.next(BASELINE_VITALS)
            self.assertLessEqual(abs(v.heart_rate - 85), 3)
            self.assertLessEqual(abs(v.diastolic - 80), 2)
            self.assertLessEqual(abs(v.respiratory_rate - 16), 1)

    def test_seed_is_reproducible(self):
        """Test two generators with the same seed agree."""
        a, b = VitalsGenerator(seed=42), VitalsGenerator(seed=42)
        va = vb = BASELINE_VITALS
        for _ in range(50):
            va, vb = a.next(va), b.next(vb)
        self.assertEqual(va, vb)


class TestLiveVitalsWalk(unittest.TestCase):
    """Test the live-monitoring walk."""

    def test_bands(self):
        """Test heart rate and SpO2 stay in their live bands."""
        walk = LiveVitalsWalk(seed=11)
        hr, spo2 = 85, 98.0
        for _ in range(10_000):
            hr, spo2 = walk.next(hr, spo2)
            self.assertTrue(40 <= hr <= 180)
            self.assertTrue(92 <= spo2 <= 100)
            self.assertIsInstance(hr, int)

    def test_spike(self):
        """Test a spike moves heart rate by the spike size."""
        walk = LiveVitalsWalk(seed=3, heart_rate=Drift(0, 40, 180), spike_chance=1.0)
        values = {walk.next(100, 98.0)[0] for _ in range(50)}
        self.assertEqual(values, {85, 115})

    def test_spike_is_clamped(self):
        """Test spikes respect the clamp."""
        walk = LiveVitalsWalk(seed=3, heart_rate=Drift(0, 40, 180), spike_chance=1.0)
        for _ in range(50):
            hr, _ = walk.next(178, 98.0)
            self.assertLessEqual(hr, 180)


class TestDrift(unittest.TestCase):
    """Test Drift rules."""

    def test_unbounded_settle(self):
        """Test a drift without bounds only rounds."""
        self.assertEqual(Drift(0.1, digits=1).settle(41.26), 41.3)

    def test_clamped_settle(self):
        """Test clamping happens before rounding."""
        self.assertEqual(Drift(3, 60, 100).settle(100.7), 100)
        self.assertEqual(Drift(3, 60, 100).settle(12), 60)


if __name__ == "__main__":
    unittest.main()
