import math

from conftest import FakeClock

from devduel.services.rate_limiter import RateLimiter


def test_admits_until_quota_is_used():
    limiter = RateLimiter(max_requests=3, window_seconds=60, clock=FakeClock())

    results = [limiter.admit("1.2.3.4") for _ in range(3)]

    assert all(r.allowed for r in results)
    assert [r.remaining for r in results] == [2, 1, 0]


def test_denies_with_retry_after_once_quota_exceeded():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=2, window_seconds=60, clock=clock)
    limiter.admit("ip")
    clock.advance(10)
    limiter.admit("ip")
    clock.advance(5)

    denied = limiter.admit("ip")

    assert denied.allowed is False
    assert denied.remaining == 0
    # the oldest hit leaves the window 45s from now
    assert math.isclose(denied.retry_after, 45)


def test_window_slides_and_frees_capacity():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=clock)
    assert limiter.admit("ip").allowed
    assert not limiter.admit("ip").allowed

    clock.advance(60)

    assert limiter.admit("ip").allowed


def test_denied_requests_do_not_consume_quota():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=1, window_seconds=10, clock=clock)
    limiter.admit("ip")
    for _ in range(5):
        clock.advance(1)
        limiter.admit("ip")

    clock.advance(5)

    assert limiter.admit("ip").allowed


def test_clients_are_tracked_independently():
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    assert limiter.admit("a").allowed

    assert limiter.admit("b").allowed
    assert not limiter.admit("a").allowed


def test_reset_forgets_all_clients():
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    limiter.admit("a")
    limiter.reset()

    assert limiter.admit("a").allowed


def test_zero_quota_denies_with_full_window_wait():
    limiter = RateLimiter(max_requests=0, window_seconds=60, clock=FakeClock())

    denied = limiter.admit("ip")

    assert denied.allowed is False
    assert denied.remaining == 0
    assert denied.retry_after == 60
