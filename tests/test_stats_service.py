import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import (
    ProgramRepository,
    WorkoutRepository,
    WorkoutRowRepository,
    LogRepository,
    SettingsRepository,
)
from stats_service import StatisticsService


class StatisticsServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_stats.db"
        self.yaml_path = "test_stats.yaml"
        for p in [self.db_path, self.yaml_path]:
            if os.path.exists(p):
                os.remove(p)
        self.settings = SettingsRepository(self.db_path, self.yaml_path)
        self.logs = LogRepository(self.db_path)
        rows = WorkoutRowRepository(self.db_path)
        pid = ProgramRepository(self.db_path).create("Program")
        wid = WorkoutRepository(self.db_path).create(pid, "Day", 1)
        self.bench_anchor = rows.add(wid, "1a", "Bench", "1", "5", is_anchor=True, movement_family="Bench")
        self.bench_backoff = rows.add(wid, "1b", "Larsen Press", "4", "6", movement_family="Bench")
        self.service = StatisticsService(self.logs, self.settings)

    def tearDown(self) -> None:
        for p in [self.db_path, self.yaml_path]:
            if os.path.exists(p):
                os.remove(p)

    def test_series_filters_and_sorts(self) -> None:
        self.logs.add("u1", self.bench_anchor, 225, 5, 7, date="2024-03-03T10:00:00Z")
        self.logs.add("u1", self.bench_anchor, 215, 5, 7, date="2024-02-25T10:00:00Z")
        self.logs.add("u1", self.bench_backoff, 185, 6, None, date="2024-03-03T10:20:00Z")

        series = self.service.e1rm_series("u1", "Bench")
        self.assertEqual([p["weight"] for p in series], [215.0, 225.0, 185.0])
        self.assertEqual(series[1]["e1rm"], 285)
        self.assertIsNone(series[2]["rpe"])

        anchors = self.service.e1rm_series("u1", "Bench", True)
        self.assertEqual([p["weight"] for p in anchors], [215.0, 225.0])
        self.assertEqual(
            anchors[1],
            {
                "date": "2024-03-03T10:00:00+00:00",
                "e1rm": 285,
                "weight": 225.0,
                "reps": 5,
                "rpe": 7.0,
            },
        )
        self.assertEqual(len(self.service.e1rm_series("u1", "Bench", False)), 1)

    def test_series_reflects_current_state(self) -> None:
        lid = self.logs.add("u1", self.bench_anchor, 225, 5, 7)
        self.assertEqual(len(self.service.e1rm_series("u1", "Bench")), 1)
        self.logs.remove(lid)
        self.assertEqual(self.service.e1rm_series("u1", "Bench"), [])

    def test_unknown_family(self) -> None:
        with self.assertRaises(ValueError):
            self.service.e1rm_series("u1", "Arms")
        with self.assertRaises(ValueError):
            self.service.suggestions("u1", "bench")

    def test_suggestions_without_history(self) -> None:
        rec = self.service.suggestions("u1", "Bench", 5, 8)
        self.assertEqual(
            rec,
            {
                "suggestion1x3": None,
                "suggestion1x5": None,
                "recommendedWeight": None,
                "recommendedRaw": None,
                "e1rmUsed": None,
                "basedOn": None,
            },
        )

    def test_suggestions_use_latest_anchor(self) -> None:
        self.logs.add("u1", self.bench_anchor, 250, 1, 9, date="2024-02-01T10:00:00Z")
        self.logs.add("u1", self.bench_anchor, 285, 1, 10, date="2024-03-03T10:00:00Z")
        self.logs.add("u1", self.bench_backoff, 300, 1, 10, date="2024-03-04T10:00:00Z")
        rec = self.service.suggestions("u1", "Bench")
        self.assertEqual(rec["suggestion1x3"], 238.8)
        self.assertEqual(rec["suggestion1x5"], 226.6)
        self.assertIsNone(rec["recommendedWeight"])
        self.assertEqual(
            rec["basedOn"],
            {"date": "2024-03-03T10:00:00+00:00", "weight": 285.0, "reps": 1, "rpe": 10.0},
        )

    def test_suggestions_with_target(self) -> None:
        self.logs.add("u1", self.bench_anchor, 300, 0, 10, date="2024-03-03T10:00:00Z")
        rec = self.service.suggestions("u1", "Bench", "5", "8")
        self.assertEqual(rec["recommendedWeight"], 245)
        self.assertAlmostEqual(rec["recommendedRaw"], 243.29, places=2)
        self.assertEqual(rec["e1rmUsed"], 300.0)

    def test_malformed_target_keeps_fixed_suggestions(self) -> None:
        self.logs.add("u1", self.bench_anchor, 300, 0, 10, date="2024-03-03T10:00:00Z")
        rec = self.service.suggestions("u1", "Bench", "five", "8")
        self.assertIsNone(rec["recommendedWeight"])
        self.assertIsNone(rec["recommendedRaw"])
        self.assertIsNone(rec["e1rmUsed"])
        self.assertEqual(rec["suggestion1x3"], 243.3)

    def test_target_needs_both_reps_and_rpe(self) -> None:
        self.logs.add("u1", self.bench_anchor, 300, 0, 10, date="2024-03-03T10:00:00Z")
        for reps, rpe in [("5", None), (None, "8")]:
            rec = self.service.suggestions("u1", "Bench", reps, rpe)
            self.assertIsNone(rec["recommendedWeight"])
            self.assertIsNone(rec["recommendedRaw"])
            self.assertIsNone(rec["e1rmUsed"])
            self.assertEqual(rec["suggestion1x3"], 243.3)
            self.assertEqual(rec["suggestion1x5"], 230.8)

    def test_load_increment_setting(self) -> None:
        self.settings.set_float("load_increment", 2.5)
        self.logs.add("u1", self.bench_anchor, 300, 0, 10, date="2024-03-03T10:00:00Z")
        rec = self.service.suggestions("u1", "Bench", 5, 8)
        self.assertEqual(rec["recommendedWeight"], 242.5)


if __name__ == "__main__":
    unittest.main()
