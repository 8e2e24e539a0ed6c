"""Markdown 本文からリンクを抽出し、ローカルのリンク先を解決する。

対象:
- インラインリンク / 画像 `[text](target "title")`, `![alt](<path with space>)`
- 自動リンク `<https://...>`
- 参照定義 `[id]: target`

フェンス内とインラインコード内は無視する。
"""

from __future__ import annotations

import fnmatch
import re
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote

from kensa.fences import code_line_mask

_INLINE_RE = re.compile(r"!?\[(?:[^\[\]]|\[[^\[\]]*\])*\]\(\s*(<[^>\n]*>|[^\s()]*(?:\([^\s()]*\)[^\s()]*)*)")
_AUTOLINK_RE = re.compile(r"<((?:https?|ftp)://[^\s<>]+)>")
_REFDEF_RE = re.compile(r"^\s{0,3}\[[^\]]+\]:\s*(<[^>\n]*>|\S+)")
_CODE_SPAN_RE = re.compile(r"(`+)(?:.+?)\1")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_HEADING_RE = re.compile(r"^\s{0,3}(#{1,6})\s+(.*?)\s*#*\s*$")
_SETEXT_RE = re.compile(r"^\s{0,3}(?:=+|-+)\s*$")
_FENCE_LIKE_RE = re.compile(r"^\s*(?:`{3,}|~{3,})")


@dataclass(frozen=True)
class Link:
    target: str
    line: int  # ファイル上の行番号(1始まり)

    @property
    def is_external(self) -> bool:
        return self.target.lower().startswith(("http://", "https://"))

    @property
    def has_scheme(self) -> bool:
        return bool(_SCHEME_RE.match(self.target))

    @property
    def is_templated(self) -> bool:
        return "{{" in self.target or "${" in self.target


@dataclass(frozen=True)
class LocalTarget:
    path: str  # パーセントデコード済み、クエリ/アンカー除去済み
    fragment: str


def _strip_code_spans(line: str) -> str:
    return _CODE_SPAN_RE.sub(lambda m: " " * len(m.group(0)), line)


def _clean_target(raw: str) -> str:
    t = raw.strip()
    if t.startswith("<") and t.endswith(">"):
        t = t[1:-1].strip()
    return t


def extract_links(lines: list[str], *, offset: int = 1) -> list[Link]:
    """lines[0] の行番号を offset としてリンクを抽出する。"""
    mask = code_line_mask(lines)
    out: list[Link] = []
    for i, line in enumerate(lines):
        if mask[i]:
            continue
        text = _strip_code_spans(line)
        lineno = i + offset

        m = _REFDEF_RE.match(text)
        if m:
            target = _clean_target(m.group(1))
            if target:
                out.append(Link(target=target, line=lineno))
            continue

        for m in _INLINE_RE.finditer(text):
            target = _clean_target(m.group(1))
            if target:
                out.append(Link(target=target, line=lineno))
        for m in _AUTOLINK_RE.finditer(text):
            out.append(Link(target=m.group(1), line=lineno))
    return out


def is_ignored(target: str, patterns: list[str]) -> bool:
    return any(fnmatch.fnmatch(target, pat) for pat in patterns)


def split_local(target: str) -> LocalTarget:
    path, _sep, fragment = target.partition("#")
    path = path.split("?", 1)[0]
    return LocalTarget(path=unquote(path), fragment=unquote(fragment))


def resolve_local(root: Path, doc_path: Path, target_path: str) -> Path:
    """`/` 始まりはコーパスルート基準、それ以外はファイルのディレクトリ基準。"""
    if target_path.startswith("/"):
        return root / target_path.lstrip("/")
    return doc_path.parent / target_path


def slugify(heading: str) -> str:
    """GitHub 風の見出しアンカー。"""
    text = re.sub(r"`([^`]*)`", r"\1", heading)
    text = re.sub(r"!?\[([^\]]*)\]\([^)]*\)", r"\1", text)
    text = re.sub(r"<[^>]+>", "", text)
    text = unicodedata.normalize("NFC", text).strip().lower()
    out = []
    for ch in text:
        if ch in " -":
            out.append("-" if ch == " " else ch)
        elif ch == "_" or ch.isalnum():
            out.append(ch)
        elif unicodedata.category(ch).startswith(("L", "N", "M")):
            out.append(ch)
    return "".join(out)


def _is_setext_title(lines: list[str], mask: list[bool], i: int) -> bool:
    """次の行が `===` / `---` の下線なら setext 見出し。"""
    if i + 1 >= len(lines) or mask[i + 1]:
        return False
    line = lines[i]
    if not line.strip() or len(line) - len(line.lstrip(" ")) > 3:
        return False
    # リストや引用の行は見出しにならない
    if re.match(r"^\s*(?:[-*+>]|\d+[.)])(?:\s|$)", line) or _HEADING_RE.match(line):
        return False
    if _FENCE_LIKE_RE.match(line) or _SETEXT_RE.match(line):
        return False
    return bool(_SETEXT_RE.match(lines[i + 1]))


def heading_anchors(lines: list[str]) -> set[str]:
    """見出しから生成されるアンカー一覧。重複見出しは `-1`, `-2` が付く。"""
    mask = code_line_mask(lines)
    seen: dict[str, int] = {}
    anchors: set[str] = set()
    for i, line in enumerate(lines):
        if mask[i]:
            continue
        m = _HEADING_RE.match(line)
        if m:
            title = m.group(2)
        elif _is_setext_title(lines, mask, i):
            title = line.strip()
        else:
            continue
        base = slugify(title)
        n = seen.get(base, 0)
        seen[base] = n + 1
        anchors.add(base if n == 0 else f"{base}-{n}")
    # 明示アンカー <a name="x"> / <a id="x">
    for line in lines:
        for m in re.finditer(r"<a\s+(?:name|id)=[\"']([^\"']+)[\"']", line):
            anchors.add(m.group(1))
    return anchors
