from __future__ import annotations

import importlib
import os
import tempfile
import unittest
from datetime import timedelta

from fastapi.testclient import TestClient


class MainEndpointsTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self._tmp.name, "test_main_endpoints.db")
        self._old_db_path = os.environ.get("DB_PATH")
        self._old_api_key = os.environ.get("API_KEY")
        os.environ["DB_PATH"] = self.db_path
        os.environ["API_KEY"] = "test-api-key"

        import fittrack.db as db_mod
        importlib.reload(db_mod)
        db_mod.init_db()
        import fittrack.store as store_mod
        importlib.reload(store_mod)
        import fittrack.main as main_mod
        importlib.reload(main_mod)

        from fittrack.timeutil import local_now

        self.now = local_now()
        self.client_ctx = TestClient(main_mod.app)
        self.client = self.client_ctx.__enter__()
        self.headers = {"X-Api-Key": "test-api-key"}

    def tearDown(self) -> None:
        self.client_ctx.__exit__(None, None, None)
        if self._old_db_path is None:
            os.environ.pop("DB_PATH", None)
        else:
            os.environ["DB_PATH"] = self._old_db_path

        if self._old_api_key is None:
            os.environ.pop("API_KEY", None)
        else:
            os.environ["API_KEY"] = self._old_api_key

        self._tmp.cleanup()

    def _post_sample(self, metric: str, value: float, hours_ago: float) -> None:
        ts = (self.now - timedelta(hours=hours_ago)).isoformat()
        r = self.client.post(
            "/api/samples",
            headers=self.headers,
            json={"metric_type": metric, "value": value, "timestamp": ts},
        )
        self.assertEqual(r.status_code, 201)

    def test_requires_api_key(self) -> None:
        r = self.client.get("/api/status")
        self.assertEqual(r.status_code, 401)
        r2 = self.client.get("/api/status", headers={"X-Api-Key": "wrong"})
        self.assertEqual(r2.status_code, 401)

    def test_chart_projects_snapshot_when_no_history(self) -> None:
        put = self.client.put("/api/snapshot", headers=self.headers, json={"metric_type": "weight", "value": 75})
        self.assertEqual(put.status_code, 200)

        r = self.client.get("/api/chart/weight?range=W", headers=self.headers)
        self.assertEqual(r.status_code, 200)
        body = r.json()
        points = body["projection"]["points"]
        self.assertEqual(len(points), 1)
        self.assertEqual(points[0]["value"], 75.0)
        self.assertTrue(points[0]["projected"])
        self.assertEqual(body["areaPath"], "")
        self.assertTrue(body["linePath"].startswith("M "))
        self.assertEqual(body["reading"]["caption"], "Latest Reading")

    def test_chart_with_history_and_selection(self) -> None:
        self._post_sample("weight", 80, hours_ago=72)
        self._post_sample("weight", 78, hours_ago=48)
        self._post_sample("weight", 79, hours_ago=2)

        r = self.client.get("/api/chart/weight?range=M", headers=self.headers)
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual([p["value"] for p in body["projection"]["points"]], [80.0, 78.0, 79.0])
        self.assertEqual(body["summary"]["latest"], 79.0)
        self.assertEqual(body["summary"]["change_since_start"], -1.0)
        self.assertEqual(body["summary"]["best"], 78.0)
        self.assertTrue(body["areaPath"].endswith("Z"))

        picked = self.client.get("/api/chart/weight?range=M&selected=0", headers=self.headers)
        self.assertEqual(picked.status_code, 200)
        self.assertEqual(picked.json()["reading"]["caption"], "Recorded on")
        self.assertEqual(picked.json()["reading"]["value"], 80.0)

        out_of_range = self.client.get("/api/chart/weight?range=M&selected=9", headers=self.headers)
        self.assertEqual(out_of_range.status_code, 400)

    def test_chart_range_defaults_to_six_months(self) -> None:
        self._post_sample("weight", 80, hours_ago=2)
        default = self.client.get("/api/chart/weight", headers=self.headers)
        self.assertEqual(default.status_code, 200)
        self.assertEqual(default.json()["projection"]["range_filter"], "6M")

        week = self.client.get("/api/chart/weight?range=W", headers=self.headers)
        self.assertEqual(week.json()["projection"]["range_filter"], "W")

    def test_chart_rejects_unknown_range(self) -> None:
        r = self.client.get("/api/chart/weight?range=D", headers=self.headers)
        self.assertEqual(r.status_code, 400)

    def test_week_buckets_today(self) -> None:
        self._post_sample("calories", 450, hours_ago=0)
        r = self.client.get("/api/week?field=calories", headers=self.headers)
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(len(body["buckets"]), 7)
        today = [b for b in body["buckets"] if b["is_today"]]
        self.assertEqual(len(today), 1)
        self.assertEqual(today[0]["total_value"], 450.0)
        self.assertEqual(max(body["heights"]), 100.0)

    def test_schedule_today(self) -> None:
        date_key = self.now.date().isoformat()
        payload = {
            "date_key": date_key,
            "segments": [
                {
                    "start": (self.now - timedelta(hours=1)).isoformat(),
                    "end": (self.now + timedelta(hours=1)).isoformat(),
                    "title": "Free window",
                    "kind": "gap",
                    "date_key": date_key,
                    "duration": "2h",
                },
            ],
        }
        put = self.client.put("/api/schedule", headers=self.headers, json=payload)
        self.assertEqual(put.status_code, 200)
        self.assertEqual(put.json()["count"], 1)

        r = self.client.get("/api/schedule/today", headers=self.headers)
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["status"], "gap")
        self.assertEqual(body["activeGap"]["title"], "Free window")
        self.assertEqual(len(body["agenda"]), 1)

    def test_schedule_rejects_mismatched_date_key(self) -> None:
        payload = {
            "date_key": "2026-10-14",
            "segments": [
                {
                    "start": "2026-10-15T10:00:00",
                    "end": "2026-10-15T11:00:00",
                    "title": "x",
                    "kind": "busy",
                    "date_key": "2026-10-15",
                },
            ],
        }
        r = self.client.put("/api/schedule", headers=self.headers, json=payload)
        self.assertEqual(r.status_code, 400)

    def test_goals_and_status(self) -> None:
        self._post_sample("hydration", 1250, hours_ago=0)
        r = self.client.get("/api/goals", headers=self.headers)
        self.assertEqual(r.status_code, 200)
        goals = r.json()["goals"]
        self.assertEqual(goals["hydration"]["ratio"], 0.5)
        self.assertEqual(goals["steps"]["value"], 0.0)

        status = self.client.get("/api/status", headers=self.headers)
        self.assertEqual(status.status_code, 200)
        self.assertEqual(status.json()["byMetric"], {"hydration": 1})


if __name__ == "__main__":
    unittest.main()
