"""外部リンク (http/https) の到達確認。

設定 `links.check_external = true` のときだけ使う。
同じ URL は1回の実行で1度だけ問い合わせる。
"""

from __future__ import annotations

import logging

import requests

log = logging.getLogger(__name__)

USER_AGENT = "kensa-linkcheck/0.1"

# HEAD を受け付けないサーバが返しがちなステータス
_RETRY_WITH_GET = {403, 405, 501}


class ExternalLinkChecker:
    def __init__(self, *, timeout: float = 5.0, session: requests.Session | None = None) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        self._cache: dict[str, str] = {}

    def check(self, url: str) -> str:
        """問題なければ空文字、到達できなければ理由を返す。"""
        if url in self._cache:
            return self._cache[url]
        reason = self._check(url)
        self._cache[url] = reason
        return reason

    def _check(self, url: str) -> str:
        try:
            r = self.session.head(url, timeout=self.timeout, allow_redirects=True)
            if r.status_code in _RETRY_WITH_GET:
                r = self.session.get(url, timeout=self.timeout, allow_redirects=True, stream=True)
                r.close()
        except requests.RequestException as e:
            log.info("external link failed url=%s error=%s", url, type(e).__name__)
            return f"{type(e).__name__}"

        if r.status_code >= 400:
            log.info("external link status url=%s status=%d", url, r.status_code)
            return f"HTTP {r.status_code}"
        return ""
