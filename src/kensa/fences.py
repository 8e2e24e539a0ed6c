"""フェンス付きコードブロック (``` / ~~~) の対応チェック。

リスト内でインデントされたフェンスも多いので、インデント量は問わない。
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_OPEN_RE = re.compile(r"^\s*(?P<fence>`{3,}|~{3,})(?P<info>.*)$")


@dataclass(frozen=True)
class FenceBlock:
    start_line: int  # 1始まり（渡された lines 上の位置 + offset）
    end_line: int | None  # 閉じがなければ None
    marker: str
    info: str

    @property
    def closed(self) -> bool:
        return self.end_line is not None


def _opener(line: str) -> tuple[str, str] | None:
    m = _OPEN_RE.match(line)
    if not m:
        return None
    fence = m.group("fence")
    info = m.group("info").strip()
    if fence[0] == "`" and "`" in info:
        # ```foo``` のようなインラインコードはフェンスではない
        return None
    return fence, info


def _is_closer(line: str, marker: str) -> bool:
    s = line.strip()
    if not s or s[0] != marker[0]:
        return False
    return len(s) >= len(marker) and set(s) == {marker[0]}


def scan_fences(lines: list[str], *, offset: int = 1) -> list[FenceBlock]:
    """lines を走査してフェンスブロックを返す。offset は lines[0] の行番号。"""
    blocks: list[FenceBlock] = []
    current: tuple[int, str, str] | None = None

    for i, line in enumerate(lines):
        if current is None:
            op = _opener(line)
            if op is not None:
                current = (i, op[0], op[1])
            continue
        start, marker, info = current
        if _is_closer(line, marker):
            blocks.append(FenceBlock(start + offset, i + offset, marker, info))
            current = None

    if current is not None:
        start, marker, info = current
        blocks.append(FenceBlock(start + offset, None, marker, info))
    return blocks


def code_line_mask(lines: list[str]) -> list[bool]:
    """各行がフェンス内（フェンス行自体を含む）かどうか。"""
    mask = [False] * len(lines)
    for b in scan_fences(lines, offset=0):
        end = b.end_line if b.end_line is not None else len(lines) - 1
        for i in range(b.start_line, end + 1):
            mask[i] = True
    return mask


def unclosed_fences(lines: list[str], *, offset: int = 1) -> list[FenceBlock]:
    return [b for b in scan_fences(lines, offset=offset) if not b.closed]
