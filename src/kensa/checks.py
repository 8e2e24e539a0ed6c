"""各ルールの検査本体。

ここでは既定の重大度で Finding を作るだけ。
無効化や重大度の上書きは lint 側で適用する。
"""

from __future__ import annotations

import re
from collections import defaultdict
from pathlib import Path

from kensa.config import KensaConfig
from kensa.document import Document
from kensa.external import ExternalLinkChecker
from kensa.fences import unclosed_fences
from kensa.frontmatter import split_frontmatter
from kensa.layout import (
    FRONTMATTER_KINDS,
    KIND_AGENT,
    KIND_SKILL,
    PLUGINS_DIR,
    list_plugins,
)
from kensa.links import extract_links, heading_anchors, is_ignored, resolve_local, split_local
from kensa.rules import RULES, Finding
from kensa.secret_scan import SecretScanner

NAME_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def _finding(doc_or_path: Document | str, line: int | None, code: str, message: str) -> Finding:
    path = doc_or_path.rel_path if isinstance(doc_or_path, Document) else doc_or_path
    return Finding(path=path, line=line, code=code, severity=RULES[code].severity, message=message)


def _first_nonblank_line(doc: Document) -> int:
    for i, line in enumerate(doc.lines):
        if line.strip():
            return i + 1
    return 1


def check_frontmatter(doc: Document, cfg: KensaConfig) -> list[Finding]:
    if doc.kind not in FRONTMATTER_KINDS:
        return []

    fm = doc.frontmatter
    if not fm.present:
        return [_finding(doc, _first_nonblank_line(doc), "FM001", "ファイルが `---` で始まる frontmatter を持っていません。")]
    if not fm.terminated:
        return [_finding(doc, fm.start_line, "FM002", "frontmatter の終了 `---` が見つかりません。")]
    if fm.error:
        return [_finding(doc, fm.start_line, "FM003", fm.error)]

    out: list[Finding] = []
    line = fm.start_line

    description = fm.data.get("description")
    if not isinstance(description, str) or not description.strip():
        out.append(_finding(doc, line, "FM004", "description が空です。"))
    elif len(description.strip()) > cfg.frontmatter.description_max_length:
        out.append(
            _finding(
                doc,
                line,
                "FM008",
                f"description が長すぎます ({len(description.strip())} > {cfg.frontmatter.description_max_length} 文字)。",
            )
        )

    if doc.kind in (KIND_SKILL, KIND_AGENT):
        name = fm.get_str("name")
        if not name:
            out.append(_finding(doc, line, "FM005", "name が空です。"))
        else:
            if doc.kind == KIND_SKILL and name != doc.expected_name:
                out.append(
                    _finding(
                        doc,
                        line,
                        "FM006",
                        f"name `{name}` がディレクトリ名 `{doc.expected_name}` と一致しません。",
                    )
                )
            if not NAME_RE.match(name):
                out.append(_finding(doc, line, "FM007", f"name `{name}` は小文字英数字とハイフンのみで書いてください。"))
            elif len(name) > cfg.frontmatter.name_max_length:
                out.append(
                    _finding(
                        doc,
                        line,
                        "FM007",
                        f"name が長すぎます ({len(name)} > {cfg.frontmatter.name_max_length} 文字)。",
                    )
                )
    return out


def check_fences(doc: Document) -> list[Finding]:
    out: list[Finding] = []
    for b in unclosed_fences(doc.body_lines, offset=doc.body_start_line):
        out.append(
            _finding(
                doc,
                b.start_line,
                "MD001",
                f"{b.start_line}行目で開いたコードブロック `{b.marker}` が閉じられていません。",
            )
        )
    return out


def _exists(path: Path) -> bool:
    # ENAMETOOLONG などは「存在しない」扱い
    try:
        return path.exists()
    except OSError:
        return False


def _has_anchor(fragment: str, anchors: set[str]) -> bool:
    return fragment in anchors or fragment.lower() in anchors


class AnchorIndex:
    """リンク先 Markdown の見出しアンカーをキャッシュする。"""

    def __init__(self) -> None:
        self._cache: dict[Path, set[str]] = {}

    def anchors(self, path: Path) -> set[str] | None:
        key = path.resolve()
        if key not in self._cache:
            try:
                text = key.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                return None
            _fm, body, _start = split_frontmatter(text)
            self._cache[key] = heading_anchors(body.split("\n"))
        return self._cache[key]


def check_links(
    doc: Document,
    *,
    root: Path,
    cfg: KensaConfig,
    anchors: AnchorIndex,
    external: ExternalLinkChecker | None = None,
) -> list[Finding]:
    out: list[Finding] = []
    own: set[str] | None = None
    for link in extract_links(doc.body_lines, offset=doc.body_start_line):
        if link.is_templated or is_ignored(link.target, cfg.links.ignore):
            continue

        if link.is_external:
            if external is not None:
                reason = external.check(link.target)
                if reason:
                    out.append(_finding(doc, link.line, "LNK003", f"外部リンクに到達できません: {link.target} ({reason})"))
            continue
        if link.has_scheme:
            # mailto: など
            continue

        local = split_local(link.target)
        if not local.path:
            # 同一ファイル内のアンカー
            if local.fragment and cfg.links.check_anchors:
                if own is None:
                    own = heading_anchors(doc.body_lines)
                if not _has_anchor(local.fragment, own):
                    out.append(_finding(doc, link.line, "LNK002", f"アンカー `#{local.fragment}` に対応する見出しがありません。"))
            continue

        target = resolve_local(root, doc.path, local.path)
        if not _exists(target):
            out.append(_finding(doc, link.line, "LNK001", f"リンク先が存在しません: {link.target}"))
            continue

        if local.fragment and cfg.links.check_anchors and target.is_file() and target.suffix.lower() == ".md":
            found = anchors.anchors(target)
            if found is not None and not _has_anchor(local.fragment, found):
                out.append(
                    _finding(
                        doc,
                        link.line,
                        "LNK002",
                        f"{local.path} にアンカー `#{local.fragment}` に対応する見出しがありません。",
                    )
                )
    return out


def check_secrets(doc: Document, scanner: SecretScanner) -> list[Finding]:
    out: list[Finding] = []
    for hit in scanner.scan(doc.lines):
        if hit.known:
            out.append(_finding(doc, hit.line, "SEC001", f"{hit.kind} らしき文字列があります: {hit.redacted}"))
        else:
            out.append(_finding(doc, hit.line, "SEC002", f"`{hit.kind}` にハードコードされた値があります: {hit.redacted}"))
    return out


def check_duplicate_names(docs: list[Document]) -> list[Finding]:
    """同じプラグイン内（またはトップレベル同士）で skill 名が重複していないか。"""
    groups: dict[tuple[str | None, str], list[Document]] = defaultdict(list)
    for d in docs:
        if d.kind != KIND_SKILL or not d.frontmatter.ok:
            continue
        name = d.frontmatter.get_str("name")
        if name:
            groups[(d.plugin, name)].append(d)

    out: list[Finding] = []
    for (_plugin, name), items in groups.items():
        if len(items) < 2:
            continue
        for d in items:
            others = ", ".join(o.rel_path for o in items if o is not d)
            out.append(
                _finding(d, d.frontmatter.start_line, "DUP001", f"skill 名 `{name}` が重複しています: {others}")
            )
    return out


def check_plugins(root: Path) -> list[Finding]:
    """README の有無はディスク上で確認する（除外設定や IO001 の影響を受けない）。"""
    out: list[Finding] = []
    for plugin in list_plugins(root):
        if not (root / PLUGINS_DIR / plugin / "README.md").is_file():
            out.append(
                _finding(f"{PLUGINS_DIR}/{plugin}", None, "PLG001", f"プラグイン `{plugin}` に README.md がありません。")
            )
    return out
