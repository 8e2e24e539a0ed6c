"""external モジュールのテスト（ネットワークなし）。"""

import requests

from kensa.external import ExternalLinkChecker


class _Resp:
    def __init__(self, status_code: int) -> None:
        self.status_code = status_code

    def close(self) -> None:
        pass


class _Session:
    def __init__(self, head: dict[str, object], get: dict[str, int] | None = None) -> None:
        self.headers: dict[str, str] = {}
        self._head = head
        self._get = get or {}
        self.calls: list[tuple[str, str]] = []

    def head(self, url: str, **kwargs) -> _Resp:
        self.calls.append(("HEAD", url))
        v = self._head[url]
        if isinstance(v, Exception):
            raise v
        return _Resp(int(v))  # type: ignore[arg-type]

    def get(self, url: str, **kwargs) -> _Resp:
        self.calls.append(("GET", url))
        return _Resp(self._get[url])


def test_ok_and_not_found() -> None:
    s = _Session({"https://a.dev": 200, "https://b.dev": 404})
    c = ExternalLinkChecker(session=s)  # type: ignore[arg-type]
    assert c.check("https://a.dev") == ""
    assert c.check("https://b.dev") == "HTTP 404"
    assert s.headers["User-Agent"].startswith("kensa")


def test_head_not_allowed_falls_back_to_get() -> None:
    s = _Session({"https://a.dev": 405}, get={"https://a.dev": 200})
    c = ExternalLinkChecker(session=s)  # type: ignore[arg-type]
    assert c.check("https://a.dev") == ""
    assert s.calls == [("HEAD", "https://a.dev"), ("GET", "https://a.dev")]


def test_connection_error_and_cache() -> None:
    s = _Session({"https://down.dev": requests.ConnectionError("refused")})
    c = ExternalLinkChecker(session=s)  # type: ignore[arg-type]
    assert c.check("https://down.dev") == "ConnectionError"
    assert c.check("https://down.dev") == "ConnectionError"
    assert len(s.calls) == 1
