import os
import tempfile
import unittest

from sqlalchemy import create_engine, func, inspect, select
from sqlalchemy.orm import Session

from pws_history.errors import StoreError
from pws_history.ingestion.models import WeatherData, create_tables
from pws_history.ingestion.storage import (
    extract_observations,
    normalize_observation,
    read_recent_observations,
    save_observations,
)
from pws_history.tests.fakes import wu_payload

METRIC_COLUMNS = [
    "temp",
    "dewpt",
    "humidity",
    "pressure",
    "wind_speed",
    "wind_gust",
    "wind_dir",
    "precip_rate",
    "precip_total",
    "solar_radiation",
    "uv",
    "obs_time_utc",
    "obs_time_local",
]


class TestNormalize(unittest.TestCase):
    def test_full_observation(self) -> None:
        obs = wu_payload("20240115", n=1)["observations"][0]
        row = normalize_observation(obs)
        self.assertEqual(row["temp"], 10.0)
        self.assertEqual(row["dewpt"], 7.0)
        self.assertEqual(row["humidity"], 80)
        self.assertEqual(row["pressure"], 1015.2)
        self.assertEqual(row["wind_speed"], 5.4)
        self.assertEqual(row["wind_gust"], 9.0)
        self.assertEqual(row["wind_dir"], 180)
        self.assertEqual(row["precip_rate"], 0.0)
        self.assertEqual(row["precip_total"], 0.0)
        self.assertEqual(row["obs_time_utc"], "2024-01-15T00:00:00Z")
        self.assertEqual(row["obs_time_local"], "2024-01-15 00:00:00")

    def test_missing_fields_are_none(self) -> None:
        row = normalize_observation({"stationID": "IALFAR32"})
        self.assertEqual(sorted(row), sorted(METRIC_COLUMNS))
        self.assertTrue(all(v is None for v in row.values()))

    def test_zero_is_kept(self) -> None:
        row = normalize_observation({"uv": 0, "metric": {"precipTotal": 0.0}})
        self.assertEqual(row["uv"], 0)
        self.assertEqual(row["precip_total"], 0.0)

    def test_non_mapping_metric_and_observation(self) -> None:
        self.assertIsNone(normalize_observation({"metric": "n/a", "humidity": 50})["temp"])
        self.assertTrue(all(v is None for v in normalize_observation(None).values()))

    def test_extract_observations(self) -> None:
        self.assertEqual(extract_observations({}), [])
        self.assertEqual(extract_observations({"observations": None}), [])
        self.assertEqual(extract_observations({"observations": {"a": 1}}), [])
        self.assertEqual(extract_observations([1, 2]), [])
        self.assertEqual(extract_observations({"observations": [{"uv": 1}]}), [{"uv": 1}])


class TestStorage(unittest.TestCase):
    def setUp(self) -> None:
        # Use a temporary sqlite file to avoid in-memory connection scoping issues
        self._tmpdir = tempfile.TemporaryDirectory()
        db_path = os.path.join(self._tmpdir.name, "test.db")
        self.engine = create_engine(f"sqlite:///{db_path}", future=True)
        create_tables(self.engine)

    def tearDown(self) -> None:
        self.engine.dispose()
        self._tmpdir.cleanup()

    def _rows(self):
        with Session(self.engine) as session:
            return session.execute(select(WeatherData).order_by(WeatherData.id)).scalars().all()

    def test_create_tables_is_idempotent(self) -> None:
        create_tables(self.engine)
        insp = inspect(self.engine)
        self.assertIn("weather_data", insp.get_table_names())
        names = {ix["name"] for ix in insp.get_indexes("weather_data")}
        self.assertTrue({"idx_weather_date", "idx_weather_station", "idx_weather_obs_local"} <= names)

    def test_save_in_upstream_order(self) -> None:
        payload = wu_payload("20240115", n=3)
        n = save_observations(self.engine, "IALFAR32", "20240115", payload)
        self.assertEqual(n, 3)

        rows = self._rows()
        self.assertEqual([r.obs_time_local for r in rows], [o["obsTimeLocal"] for o in payload["observations"]])
        self.assertTrue(all(r.station_id == "IALFAR32" and r.date == "20240115" for r in rows))
        self.assertIsNotNone(rows[0].created_at)
        self.assertAlmostEqual(rows[2].temp, 12.0)

    def test_requested_date_is_stored_not_observation_date(self) -> None:
        save_observations(self.engine, "IALFAR32", "20240116", wu_payload("20240115", n=1))
        self.assertEqual(self._rows()[0].date, "20240116")

    def test_empty_observation_stores_nulls(self) -> None:
        n = save_observations(self.engine, "IALFAR32", "20240115", {"observations": [{}]})
        self.assertEqual(n, 1)
        row = self._rows()[0]
        for col in METRIC_COLUMNS:
            self.assertIsNone(getattr(row, col), col)

    def test_absent_or_invalid_observations_write_nothing(self) -> None:
        for payload in [{}, {"observations": None}, {"observations": "x"}, {"observations": []}]:
            self.assertEqual(save_observations(self.engine, "IALFAR32", "20240115", payload), 0)
        self.assertEqual(self._rows(), [])

    def test_refetch_duplicates_rows(self) -> None:
        payload = wu_payload("20240115", n=2)
        save_observations(self.engine, "IALFAR32", "20240115", payload)
        save_observations(self.engine, "IALFAR32", "20240115", payload)
        with Session(self.engine) as session:
            self.assertEqual(session.execute(select(func.count()).select_from(WeatherData)).scalar_one(), 4)

    def test_read_recent_orders_by_local_time(self) -> None:
        obs = [
            {"obsTimeLocal": "2024-01-15 02:00:00"},
            {"obsTimeLocal": "2024-01-15 03:00:00"},
            {"obsTimeLocal": "2024-01-15 01:00:00"},
        ]
        save_observations(self.engine, "IALFAR32", "20240115", {"observations": obs})

        rows = read_recent_observations(self.engine, limit=2)
        self.assertEqual([r.obs_time_local for r in rows], ["2024-01-15 03:00:00", "2024-01-15 02:00:00"])

    def test_store_error_omits_statement(self) -> None:
        with self.assertRaises(StoreError) as ctx:
            save_observations(self.engine, "IALFAR32", "20240115", {"observations": [{"metric": {"temp": "n/a"}}]})
        message = str(ctx.exception)
        self.assertIn("could not convert", message)
        self.assertNotIn("INSERT INTO", message)
        self.assertEqual(self._rows(), [])

    def test_store_failure_raises_store_error(self) -> None:
        engine = create_engine(f"sqlite:///{os.path.join(self._tmpdir.name, 'empty.db')}", future=True)
        try:
            with self.assertRaises(StoreError):
                read_recent_observations(engine, limit=10)
            with self.assertRaises(StoreError):
                save_observations(engine, "IALFAR32", "20240115", wu_payload("20240115", n=1))
        finally:
            engine.dispose()


if __name__ == "__main__":
    unittest.main()
