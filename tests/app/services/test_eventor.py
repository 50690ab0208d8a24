"""Testes do EventorProcessor."""

from __future__ import annotations

import logging
import smtplib
from concurrent.futures import Future
from unittest.mock import MagicMock

import pytest

from app.domain.user import Dashboard, EventorRule, Profile, User
from app.infra.blocking import BlockingIOProcessor
from app.infra.http import HttpError
from app.infra.notifications import GCMWrapper, MailWrapper
from app.observability import GlobalStats
from app.services import EventorProcessor
from utils.errors import QueueFullError


def _user(*rules: EventorRule, push_tokens: list[str] | None = None, twitter_token: str | None = None) -> User:
    return User(
        email="a@example.com",
        push_tokens=push_tokens or [],
        twitter_token=twitter_token,
        profile=Profile(dashboards=[Dashboard(id=1, rules=list(rules))]),
    )


@pytest.fixture
def blocking() -> MagicMock:
    return MagicMock(spec=BlockingIOProcessor)


@pytest.fixture
def processor(blocking: MagicMock) -> EventorProcessor:
    return EventorProcessor(MagicMock(), MagicMock(), MagicMock(), blocking, GlobalStats())


class TestEventorProcessor:
    """Regras por pino."""

    def test_notify_sends_push_to_every_token(self, processor: EventorProcessor) -> None:
        rule = EventorRule(pin=5, condition=">", threshold=30, action="notify", message="quente")
        user = _user(rule, push_tokens=["t1", "t2"])

        assert processor.process(user, 1, 0, "virtual", 5, "31") == 1

        assert processor.gcm_wrapper.send.call_count == 2
        assert processor.gcm_wrapper.send.call_args[0][2] == "quente"

    def test_mail_runs_on_blocking_pool(self, processor: EventorProcessor, blocking: MagicMock) -> None:
        rule = EventorRule(pin=5, condition="<", threshold=0, action="mail")
        user = _user(rule)

        processor.process(user, 1, 0, "virtual", 5, "-1")

        fn, to = blocking.execute.call_args[0][:2]
        assert fn == processor.mail_wrapper.send
        assert to == "a@example.com"

    def test_twitter_requires_user_token(self, processor: EventorProcessor, blocking: MagicMock) -> None:
        rule = EventorRule(pin=5, condition="==", threshold=1, action="twitter")

        assert processor.process(_user(rule), 1, 0, "digital", 5, "1") == 0
        assert processor.process(_user(rule, twitter_token="tw"), 1, 0, "digital", 5, "1") == 1
        assert blocking.execute.call_args[0][1] == "tw"

    def test_non_matching_values_are_ignored(self, processor: EventorProcessor) -> None:
        rule = EventorRule(pin=5, condition=">", threshold=30, action="notify")
        user = _user(rule, push_tokens=["t1"])

        assert processor.process(user, 1, 0, "virtual", 5, "10") == 0
        assert processor.process(user, 1, 0, "virtual", 6, "99") == 0
        assert processor.process(user, 1, 0, "virtual", 5, "not-a-number") == 0
        assert processor.process(user, 2, 0, "virtual", 5, "99") == 0
        processor.gcm_wrapper.send.assert_not_called()

    def test_action_failure_is_isolated(self, processor: EventorProcessor, blocking: MagicMock) -> None:
        blocking.execute.side_effect = QueueFullError("cheia")
        rules = (
            EventorRule(pin=5, condition=">", threshold=0, action="mail"),
            EventorRule(pin=5, condition=">", threshold=0, action="notify"),
        )
        user = _user(*rules, push_tokens=["t1"])

        assert processor.process(user, 1, 0, "virtual", 5, "1") == 1

    def test_action_counter_waits_for_completion(self) -> None:
        stats = GlobalStats()
        pool = BlockingIOProcessor(pool_size=1, queue_limit=4)
        processor = EventorProcessor(MagicMock(), MagicMock(spec=MailWrapper), MagicMock(), pool, stats)
        rule = EventorRule(pin=5, condition=">", threshold=0, action="mail")

        processor.process(_user(rule), 1, 0, "virtual", 5, "1")
        pool.close()

        assert stats.get("eventor") == 1
        assert stats.get("eventor_mail") == 1


class TestEventorSendFailures:
    """Falhas assíncronas dos envios."""

    def test_failed_mail_is_logged_and_not_counted(self, caplog: pytest.LogCaptureFixture) -> None:
        stats = GlobalStats()
        pool = BlockingIOProcessor(pool_size=1, queue_limit=4)
        mail = MagicMock(spec=MailWrapper)
        mail.send.side_effect = smtplib.SMTPException("relay recusou")
        processor = EventorProcessor(MagicMock(), mail, MagicMock(), pool, stats)
        rule = EventorRule(pin=5, condition=">", threshold=0, action="mail")

        with caplog.at_level(logging.WARNING, logger="app.services.eventor"):
            assert processor.process(_user(rule), 1, 0, "virtual", 5, "1") == 1
            pool.close()

        mail.send.assert_called_once()
        assert stats.get("eventor_mail") == 0
        failures = [r for r in caplog.records if r.getMessage() == "eventor_action_failed"]
        assert len(failures) == 1
        assert failures[0].error_type == "SMTPException"
        assert failures[0].action == "mail"

    def test_failed_push_future_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        stats = GlobalStats()
        gcm = MagicMock(spec=GCMWrapper)
        failed: Future[object] = Future()
        failed.set_exception(HttpError("http_retryable_status", status_code=503, is_retryable=True))
        gcm.send.return_value = failed
        processor = EventorProcessor(gcm, MagicMock(), MagicMock(), MagicMock(spec=BlockingIOProcessor), stats)
        rule = EventorRule(pin=5, condition=">", threshold=0, action="notify")

        with caplog.at_level(logging.WARNING, logger="app.services.eventor"):
            processor.process(_user(rule, push_tokens=["t1"]), 1, 0, "virtual", 5, "1")

        assert stats.get("eventor_notify") == 0
        assert [r.error_type for r in caplog.records if r.getMessage() == "eventor_action_failed"] == ["HttpError"]
