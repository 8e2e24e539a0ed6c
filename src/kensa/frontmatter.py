"""Markdown先頭の YAML frontmatter を取り出す。

- 先頭の空行は許容する（最初の非空行が `---` なら frontmatter あり）
- 次に現れる `---` 行までを YAML として読む
- BOM / CRLF はここで吸収する
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import yaml

DELIMITER = "---"


@dataclass
class FrontMatter:
    present: bool = False
    terminated: bool = False
    raw: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    error: str = ""
    start_line: int | None = None  # 開始 `---` の行番号(1始まり)
    end_line: int | None = None  # 終了 `---` の行番号(1始まり)

    @property
    def ok(self) -> bool:
        return self.present and self.terminated and not self.error

    def get_str(self, key: str) -> str:
        """文字列値を strip して返す。文字列でなければ空文字。"""
        v = self.data.get(key)
        if isinstance(v, str):
            return v.strip()
        return ""


def normalize_text(text: str) -> str:
    return (text or "").removeprefix("\ufeff").replace("\r\n", "\n").replace("\r", "\n")


def split_frontmatter(text: str) -> tuple[FrontMatter, str, int]:
    """(frontmatter, body, body_start_line) を返す。

    body_start_line は本文1行目のファイル上の行番号。
    """
    lines = normalize_text(text).split("\n")

    first = None
    for i, line in enumerate(lines):
        if line.strip():
            first = i
            break

    if first is None or lines[first].rstrip() != DELIMITER:
        return FrontMatter(), "\n".join(lines), 1

    fm = FrontMatter(present=True, start_line=first + 1)
    close = None
    for i in range(first + 1, len(lines)):
        if lines[i].rstrip() == DELIMITER:
            close = i
            break

    if close is None:
        # 閉じがないときは本文扱いにせず、残り全部を frontmatter とみなす
        fm.raw = "\n".join(lines[first + 1 :])
        fm.error = "frontmatter の終了 `---` がありません"
        return fm, "", len(lines) + 1

    fm.terminated = True
    fm.end_line = close + 1
    fm.raw = "\n".join(lines[first + 1 : close])
    _load_yaml(fm)
    return fm, "\n".join(lines[close + 1 :]), close + 2


def extract_frontmatter(text: str) -> FrontMatter:
    fm, _body, _start = split_frontmatter(text)
    return fm


def _load_yaml(fm: FrontMatter) -> None:
    if not fm.raw.strip():
        fm.data = {}
        return
    try:
        loaded = yaml.safe_load(fm.raw)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        if mark is not None and fm.start_line is not None:
            line = fm.start_line + 1 + mark.line
            fm.error = f"YAML を解釈できません ({line}行目付近): {getattr(e, 'problem', '') or e}"
        else:
            fm.error = f"YAML を解釈できません: {e}"
        return

    if loaded is None:
        fm.data = {}
    elif isinstance(loaded, dict):
        fm.data = {str(k): v for k, v in loaded.items()}
    else:
        fm.error = f"frontmatter はマッピングである必要があります (実際: {type(loaded).__name__})"
