from __future__ import annotations

import unittest
from datetime import datetime, timedelta

from fittrack.models import ChartPoint
from fittrack.trends import Direction, direction_for, is_favorable, summarize

NOW = datetime(2026, 10, 14, 12, 0).astimezone()


def _points(values: list[float]) -> list[ChartPoint]:
    n = len(values)
    return [
        ChartPoint(x=i * 40 + 20, y=100, value=v, timestamp=NOW - timedelta(days=n - i), label="")
        for i, v in enumerate(values)
    ]


class SummarizeTests(unittest.TestCase):
    def test_weight_best_is_minimum(self) -> None:
        s = summarize(_points([80, 78, 79]), "weight")
        self.assertEqual(s.latest, 79)
        self.assertEqual(s.change_since_start, -1)
        self.assertEqual(s.best, 78)
        self.assertTrue(s.favorable)

    def test_height_best_is_maximum(self) -> None:
        s = summarize(_points([170, 172]), "height")
        self.assertEqual(s.best, 172)
        self.assertEqual(s.change_since_start, 2)
        self.assertTrue(s.favorable)

    def test_empty_points_summarize_to_zero(self) -> None:
        s = summarize([], "weight")
        self.assertEqual((s.latest, s.change_since_start, s.best), (0, 0, 0))

    def test_custom_direction_table(self) -> None:
        table = {"resting_heart_rate": Direction.LOWER_IS_BETTER}
        s = summarize(_points([62, 58, 60]), "resting_heart_rate", table)
        self.assertEqual(s.best, 58)
        # The caller's table replaces the default one entirely.
        self.assertEqual(direction_for("weight", table), Direction.HIGHER_IS_BETTER)

    def test_unknown_metrics_default_to_higher_is_better(self) -> None:
        self.assertEqual(direction_for("bench_press"), Direction.HIGHER_IS_BETTER)
        self.assertEqual(direction_for("weight"), Direction.LOWER_IS_BETTER)


class FavorableTests(unittest.TestCase):
    def test_weight_gain_is_unfavorable(self) -> None:
        self.assertFalse(is_favorable(0.5, "weight"))
        self.assertTrue(is_favorable(0, "weight"))
        self.assertTrue(is_favorable(-1.2, "weight"))

    def test_other_metrics_favor_growth(self) -> None:
        self.assertTrue(is_favorable(0, "steps"))
        self.assertFalse(is_favorable(-300, "steps"))


if __name__ == "__main__":
    unittest.main()
