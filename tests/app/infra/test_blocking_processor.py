"""Testes do BlockingIOProcessor."""

from __future__ import annotations

import threading
import time

import pytest

from app.infra.blocking import BlockingIOProcessor
from utils.errors import QueueFullError


class TestBlockingIOProcessor:
    """Pool com fila limitada."""

    def test_execute_returns_future(self) -> None:
        processor = BlockingIOProcessor(pool_size=2, queue_limit=4)
        try:
            assert processor.execute(sum, [1, 2, 3]).result(timeout=2) == 6
        finally:
            processor.close()

    def test_queue_full_raises(self) -> None:
        processor = BlockingIOProcessor(pool_size=1, queue_limit=1)
        release = threading.Event()
        try:
            processor.execute(release.wait, 2)
            with pytest.raises(QueueFullError):
                processor.execute(lambda: None)
        finally:
            release.set()
            processor.close()

    def test_slot_is_released_after_completion(self) -> None:
        processor = BlockingIOProcessor(pool_size=1, queue_limit=1)
        try:
            processor.execute(lambda: 1).result(timeout=2)
            assert processor.execute(lambda: 2).result(timeout=2) == 2
        finally:
            processor.close()

    def test_close_is_idempotent_and_rejects_new_work(self) -> None:
        processor = BlockingIOProcessor()
        processor.close()
        processor.close()
        assert processor.is_closed
        with pytest.raises(RuntimeError):
            processor.execute(lambda: None)

    def test_close_without_wait_returns_while_task_runs(self) -> None:
        processor = BlockingIOProcessor(pool_size=1, queue_limit=4)
        started_task = threading.Event()
        release = threading.Event()

        def _hang() -> None:
            started_task.set()
            release.wait(5)

        try:
            running = processor.execute(_hang)
            assert started_task.wait(2)
            pending = processor.execute(lambda: "nunca")

            started = time.monotonic()
            processor.close(wait=False)

            assert time.monotonic() - started < 1.0
            assert pending.cancelled()
            assert not running.done()
        finally:
            release.set()

    @pytest.mark.parametrize(("pool_size", "queue_limit"), [(0, 1), (1, 0)])
    def test_invalid_sizes(self, pool_size: int, queue_limit: int) -> None:
        with pytest.raises(ValueError):
            BlockingIOProcessor(pool_size=pool_size, queue_limit=queue_limit)
