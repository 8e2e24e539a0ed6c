"""コーパス内の1ファイル分のモデル。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from kensa.frontmatter import FrontMatter, normalize_text, split_frontmatter
from kensa.layout import KIND_COMMAND, KIND_SKILL, classify, expected_skill_name, rel_posix


@dataclass
class Document:
    path: Path
    rel_path: str
    kind: str
    plugin: str | None = None
    text: str = ""
    frontmatter: FrontMatter = field(default_factory=FrontMatter)
    body: str = ""
    body_start_line: int = 1

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n")

    @property
    def body_lines(self) -> list[str]:
        return self.body.split("\n")

    @property
    def name(self) -> str:
        n = self.frontmatter.get_str("name")
        if n:
            return n
        if self.kind == KIND_COMMAND:
            # slash command はファイル名がコマンド名
            return PurePosixPath(self.rel_path).stem
        return ""

    @property
    def description(self) -> str:
        return self.frontmatter.get_str("description")

    @property
    def expected_name(self) -> str:
        if self.kind == KIND_SKILL:
            return expected_skill_name(self.rel_path)
        return ""


def parse_document(rel_path: str, text: str, *, path: Path | None = None) -> Document:
    kind, plugin = classify(rel_path)
    normalized = normalize_text(text)
    fm, body, body_start = split_frontmatter(normalized)
    return Document(
        path=path or Path(rel_path),
        rel_path=rel_path,
        kind=kind,
        plugin=plugin,
        text=normalized,
        frontmatter=fm,
        body=body,
        body_start_line=body_start,
    )


def load_document(root: Path, path: Path) -> Document:
    """UTF-8 で読み込む。デコードできなければ UnicodeDecodeError。"""
    text = path.read_bytes().decode("utf-8")
    return parse_document(rel_posix(root, path), text, path=path)
