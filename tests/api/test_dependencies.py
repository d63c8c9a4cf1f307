import pytest
from starlette.requests import Request
from api.dependencies import get_client_ip


def make_request(forwarded=None, client=("198.51.100.7", 443)):
    headers = [(b"x-forwarded-for", forwarded.encode())] if forwarded else []
    return Request({"type": "http", "method": "POST", "path": "/", "headers": headers, "client": client})


def test_client_ip_ignores_forwarded_for_by_default(monkeypatch):
    monkeypatch.delenv("SIMPAY_TRUSTED_PROXIES", raising=False)
    assert get_client_ip(make_request("203.0.113.1")) == "198.51.100.7"


@pytest.mark.parametrize("trusted,forwarded,expected", [
    ("1", "203.0.113.1", "203.0.113.1"),
    ("1", "10.9.9.9, 203.0.113.1", "203.0.113.1"),
    ("2", "10.9.9.9, 203.0.113.1, 192.0.2.4", "203.0.113.1"),
    ("3", "203.0.113.1", "203.0.113.1"),
])
def test_client_ip_behind_trusted_proxies(monkeypatch, trusted, forwarded, expected):
    monkeypatch.setenv("SIMPAY_TRUSTED_PROXIES", trusted)
    assert get_client_ip(make_request(forwarded)) == expected


def test_client_ip_without_client(monkeypatch):
    monkeypatch.delenv("SIMPAY_TRUSTED_PROXIES", raising=False)
    assert get_client_ip(make_request(client=None)) == "unknown"
