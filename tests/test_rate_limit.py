from starlette.requests import Request

from app.core.rate_limit import SlidingWindowRateLimiter, client_ip
from app.core.settings import settings


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _request(headers=None, host="10.0.0.1"):
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": (host, 1234),
    }
    return Request(scope)


def test_limit_then_window_slides():
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(clock=clock)
    for _ in range(5):
        assert limiter.check("suggestions", "1.2.3.4", 5, 600).allowed

    blocked = limiter.check("suggestions", "1.2.3.4", 5, 600)
    assert not blocked.allowed
    assert 0 < blocked.retry_after <= 601

    clock.now += 601
    assert limiter.check("suggestions", "1.2.3.4", 5, 600).allowed


def test_buckets_and_identifiers_are_independent():
    limiter = SlidingWindowRateLimiter(clock=FakeClock())
    assert limiter.check("a", "ip", 1, 60).allowed
    assert not limiter.check("a", "ip", 1, 60).allowed
    assert limiter.check("b", "ip", 1, 60).allowed
    assert limiter.check("a", "other-ip", 1, 60).allowed


def test_reset_single_bucket():
    limiter = SlidingWindowRateLimiter(clock=FakeClock())
    limiter.check("a", "ip", 1, 60)
    limiter.check("b", "ip", 1, 60)
    limiter.reset("a")
    assert limiter.check("a", "ip", 1, 60).allowed
    assert not limiter.check("b", "ip", 1, 60).allowed


def test_client_ip_ignores_forwarding_headers_without_trusted_proxy(monkeypatch):
    monkeypatch.setattr(settings, "trusted_proxy_count", 0)
    assert client_ip(_request({"X-Forwarded-For": "203.0.113.5"})) == "10.0.0.1"
    assert client_ip(_request({"X-Real-IP": "198.51.100.7"})) == "10.0.0.1"
    assert client_ip(_request()) == "10.0.0.1"


def test_client_ip_takes_hop_appended_by_trusted_proxy(monkeypatch):
    monkeypatch.setattr(settings, "trusted_proxy_count", 1)
    # leftmost entry is whatever the client sent
    assert client_ip(_request({"X-Forwarded-For": "1.1.1.1, 203.0.113.5"})) == "203.0.113.5"
    assert client_ip(_request({"X-Real-IP": "198.51.100.7"})) == "198.51.100.7"

    monkeypatch.setattr(settings, "trusted_proxy_count", 2)
    assert client_ip(_request({"X-Forwarded-For": "1.1.1.1, 203.0.113.5, 10.0.0.9"})) == "203.0.113.5"
    assert client_ip(_request({"X-Forwarded-For": "203.0.113.5"})) == "203.0.113.5"
