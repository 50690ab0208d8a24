"""Testes de GlobalStats e correlation_id."""

from __future__ import annotations

import threading

from app.observability import GlobalStats, get_correlation_id, reset_correlation_id, set_correlation_id


class TestGlobalStats:
    def test_mark_and_snapshot(self) -> None:
        stats = GlobalStats()
        stats.mark("hardware")
        stats.mark("hardware", 2)

        assert stats.get("hardware") == 3
        assert stats.get("unknown") == 0
        assert stats.snapshot() == {"hardware": 3}

    def test_report_resets(self) -> None:
        stats = GlobalStats()
        stats.mark("app")

        assert stats.report() == {"app": 1}
        assert stats.snapshot() == {}

    def test_thread_safety(self) -> None:
        stats = GlobalStats()
        threads = [threading.Thread(target=lambda: [stats.mark("x") for _ in range(1000)]) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert stats.get("x") == 4000


class TestCorrelationId:
    def test_set_and_reset(self) -> None:
        token = set_correlation_id("boot-1")
        try:
            assert get_correlation_id() == "boot-1"
        finally:
            reset_correlation_id(token)
        assert get_correlation_id() == ""

    def test_generates_uuid(self) -> None:
        token = set_correlation_id()
        try:
            assert len(get_correlation_id()) == 36
        finally:
            reset_correlation_id(token)
