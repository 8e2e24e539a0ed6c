"""コーパス自体に秘密情報が紛れ込んでいないかの簡易スキャン。

ドキュメントには説明用のダミー値が大量に含まれるので、
プレースホルダらしい値は除外する。検出値はログ/レポートに全文を出さない。
"""

from __future__ import annotations

import math
import re
from collections import Counter
from dataclasses import dataclass

# (名前, パターン) 既知形式のトークン
KNOWN_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("AWS access key id", re.compile(r"\b(?:AKIA|ASIA)[0-9A-Z]{16}\b")),
    ("GitHub token", re.compile(r"\bgh[pousr]_[A-Za-z0-9]{36,}\b")),
    ("GitHub fine-grained token", re.compile(r"\bgithub_pat_[A-Za-z0-9_]{22,}\b")),
    ("Slack token", re.compile(r"\bxox[abprs]-[A-Za-z0-9-]{10,}\b")),
    ("private key", re.compile(r"-----BEGIN (?:RSA |EC |DSA |OPENSSH |PGP |ENCRYPTED )?PRIVATE KEY(?: BLOCK)?-----")),
    ("API key (sk-)", re.compile(r"\bsk-(?:ant-|proj-)?[A-Za-z0-9_\-]{32,}")),
    ("Google API key", re.compile(r"\bAIza[0-9A-Za-z_\-]{35}\b")),
    ("Stripe live key", re.compile(r"\b[rs]k_live_[0-9A-Za-z]{24,}\b")),
    ("JSON Web Token", re.compile(r"\beyJ[A-Za-z0-9_\-]{10,}\.eyJ[A-Za-z0-9_\-]{10,}\.[A-Za-z0-9_\-]{10,}")),
]

_ASSIGN_RE = re.compile(
    r"(?i)\b(?P<key>[a-z0-9_\-]*(?:api[_\-]?key|secret|password|passwd|token|access[_\-]?key|private[_\-]?key))"
    r"[\"']?\s*[:=]\s*[\"'](?P<value>[^\"'\s]{12,})[\"']"
)

PLACEHOLDER_MARKERS = (
    "example",
    "your",
    "xxx",
    "placeholder",
    "changeme",
    "change-me",
    "dummy",
    "redacted",
    "sample",
    "***",
    "...",
    "<",
    "${",
    "{{",
    "process.env",
    "os.environ",
)

MIN_ENTROPY = 3.5


@dataclass(frozen=True)
class SecretHit:
    line: int
    kind: str
    value: str
    known: bool  # True: 既知形式 (SEC001) / False: 代入らしき値 (SEC002)

    @property
    def redacted(self) -> str:
        return redact(self.value)


def redact(value: str) -> str:
    return value[:4] + "…" if len(value) > 4 else "…"


def shannon_entropy(value: str) -> float:
    if not value:
        return 0.0
    counts = Counter(value)
    n = len(value)
    return -sum((c / n) * math.log2(c / n) for c in counts.values())


def looks_like_placeholder(value: str) -> bool:
    v = value.lower()
    if any(m in v for m in PLACEHOLDER_MARKERS):
        return True
    # 同じ文字の繰り返し (AAAA..., 0000...)
    return len(set(v)) <= 2


class SecretScanner:
    def __init__(self, allow: list[str] | None = None) -> None:
        self._allow = [re.compile(p) for p in (allow or [])]

    def _allowed(self, value: str) -> bool:
        return any(p.search(value) for p in self._allow)

    def scan(self, lines: list[str], *, offset: int = 1) -> list[SecretHit]:
        hits: list[SecretHit] = []
        for i, line in enumerate(lines):
            lineno = i + offset
            known_spans: list[tuple[int, int]] = []
            for kind, pat in KNOWN_PATTERNS:
                for m in pat.finditer(line):
                    value = m.group(0)
                    if self._allowed(value) or (kind != "private key" and looks_like_placeholder(value)):
                        continue
                    known_spans.append(m.span())
                    hits.append(SecretHit(line=lineno, kind=kind, value=value, known=True))

            for m in _ASSIGN_RE.finditer(line):
                value = m.group("value")
                start, end = m.span("value")
                if any(s < end and start < e for s, e in known_spans):
                    continue
                if self._allowed(value) or looks_like_placeholder(value):
                    continue
                if shannon_entropy(value) < MIN_ENTROPY:
                    continue
                hits.append(SecretHit(line=lineno, kind=m.group("key"), value=value, known=False))
        return hits
