import requests

from integration.connectivity import ConnectivityChecker


class _Response:
    def __init__(self, status_code):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_without_url_uses_assumption():
    assert ConnectivityChecker().is_online()
    assert not ConnectivityChecker(assume_online=False).is_online()


def test_check_success(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return _Response(200)

    monkeypatch.setattr(requests, "get", fake_get)
    assert ConnectivityChecker(check_url="http://connectivity.local/health", timeout_s=0.5).is_online()
    assert calls == [("http://connectivity.local/health", 0.5)]


def test_check_http_error_means_offline(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda url, timeout: _Response(503))
    assert not ConnectivityChecker(check_url="http://connectivity.local/health").is_online()


def test_check_timeout_means_offline(monkeypatch):
    def fake_get(url, timeout):
        raise requests.Timeout("slow")

    monkeypatch.setattr(requests, "get", fake_get)
    assert not ConnectivityChecker(check_url="http://connectivity.local/health").is_online()
