"""Testes do ReportingDao."""

from __future__ import annotations

from pathlib import Path

from app.domain.user import UserKey
from app.infra.reporting import AggregationKey, ReportingDao
from config.settings import ServerProperties

KEY = UserKey("a@example.com", "iot_hub")


class TestReportingDao:
    """Médias por minuto gravadas em CSV."""

    def test_aggregates_average_per_minute(self, tmp_path: Path) -> None:
        dao = ReportingDao(tmp_path, ServerProperties())
        dao.process(KEY, 1, "virtual", 5, 10.0, ts_ms=60_000)
        dao.process(KEY, 1, "virtual", 5, 20.0, ts_ms=90_000)
        dao.process(KEY, 1, "virtual", 5, 30.0, ts_ms=120_000)

        assert dao.pending_count() == 2
        assert dao.flush() == 2

        path = dao.csv_path(AggregationKey("a@example.com", "iot_hub", 1, "virtual", 5, 60_000))
        assert path.read_text(encoding="utf-8").splitlines() == ["60000,15.0", "120000,30.0"]
        assert dao.pending_count() == 0

    def test_close_flushes_once_and_ignores_new_values(self, tmp_path: Path) -> None:
        dao = ReportingDao(tmp_path, ServerProperties())
        dao.process(KEY, 1, "digital", 2, 1.0, ts_ms=0)

        dao.close()
        dao.close()
        dao.process(KEY, 1, "digital", 2, 1.0, ts_ms=0)

        assert dao.pending_count() == 0
        files = list(tmp_path.rglob("*.csv"))
        assert len(files) == 1
        assert files[0].read_text(encoding="utf-8") == "0,1.0\n"

    def test_disabled_reporting_ignores_values(self, tmp_path: Path) -> None:
        dao = ReportingDao(tmp_path / "reports", ServerProperties.from_mapping({"enable.reporting": "false"}))
        dao.process(KEY, 1, "virtual", 1, 1.0)
        dao.close()

        assert dao.pending_count() == 0
        assert not (tmp_path / "reports").exists()
