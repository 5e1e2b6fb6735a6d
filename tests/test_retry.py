"""Tests for the retry decorator."""

import pytest

from utils.retry import backoff_delay, retry_on_transient_error, is_transient_network_error


class Flaky:
    def __init__(self, failures, exc_type=ConnectionError):
        self.failures = failures
        self.exc_type = exc_type
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc_type("temporary")
        return "ok"


def no_sleep(delays):
    return delays.append


def test_retries_until_success():
    delays = []
    func = Flaky(failures=2)
    wrapped = retry_on_transient_error(is_transient_network_error, sleep=no_sleep(delays))(func)

    assert wrapped() == "ok"
    assert func.calls == 3
    assert len(delays) == 2


def test_backoff_grows_and_is_capped():
    delays = []
    func = Flaky(failures=5)
    wrapped = retry_on_transient_error(
        is_transient_network_error, max_retries=5, base_delay=1.0, max_delay=4.0,
        sleep=no_sleep(delays),
    )(func)

    wrapped()

    # Jitter keeps each delay within [0.5, 1.5) of the capped base
    for attempt, delay in enumerate(delays):
        base = min(2 ** attempt, 4.0)
        assert 0.5 * base <= delay < 1.5 * base


def test_gives_up_after_max_retries():
    func = Flaky(failures=10)
    wrapped = retry_on_transient_error(is_transient_network_error, max_retries=2,
                                       sleep=lambda d: None)(func)
    with pytest.raises(ConnectionError):
        wrapped()
    assert func.calls == 3


def test_non_retryable_raised_immediately():
    func = Flaky(failures=1, exc_type=ValueError)
    wrapped = retry_on_transient_error(is_transient_network_error, sleep=lambda d: None)(func)
    with pytest.raises(ValueError):
        wrapped()
    assert func.calls == 1


def test_on_retry_callback():
    seen = []
    func = Flaky(failures=1)
    wrapped = retry_on_transient_error(
        is_transient_network_error,
        on_retry=lambda exc, attempt, delay: seen.append((type(exc), attempt)),
        sleep=lambda d: None,
    )(func)

    wrapped()

    assert seen == [(ConnectionError, 1)]


def test_backoff_delay_without_jitter():
    assert backoff_delay(0, 1.0, 60.0, rand=lambda: 0.5) == 1.0
    assert backoff_delay(3, 1.0, 60.0, rand=lambda: 0.5) == 8.0
    assert backoff_delay(10, 1.0, 60.0, rand=lambda: 0.5) == 60.0
