"""コーパスのディレクトリ規約。

- `plugins/<plugin>/README.md`
- `plugins/<plugin>/commands/*.md`
- `plugins/<plugin>/agents/*.md`
- `plugins/<plugin>/skills/<category>/<skill>/SKILL.md`
- `skills/<category>/<skill>/SKILL.md`（トップレベル）

上記以外の .md は一般の Markdown として扱う。
"""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path, PurePosixPath

SKILL_MARKDOWN_FILENAME = "SKILL.md"
PLUGINS_DIR = "plugins"

KIND_SKILL = "skill"
KIND_COMMAND = "command"
KIND_AGENT = "agent"
KIND_PLUGIN_README = "plugin_readme"
KIND_MARKDOWN = "markdown"

# frontmatter 必須の種別
FRONTMATTER_KINDS = frozenset({KIND_SKILL, KIND_COMMAND, KIND_AGENT})

DEFAULT_EXCLUDE = (".git/**", "node_modules/**", ".venv/**", ".kensa/**")


def _abspath(path: Path) -> Path:
    # シンボリックリンクは辿らない（見つけた場所のパスで扱う）
    return Path(os.path.abspath(path))


def rel_posix(root: Path, path: Path) -> str:
    return _abspath(path).relative_to(_abspath(root)).as_posix()


def is_within(root: Path, path: Path) -> bool:
    return _abspath(path).is_relative_to(_abspath(root))


def is_excluded(rel: str, patterns: list[str] | tuple[str, ...]) -> bool:
    for pat in patterns:
        if fnmatch.fnmatch(rel, pat):
            return True
        # "dir/**" はディレクトリ自体の直下にもマッチさせる
        if pat.endswith("/**") and (rel == pat[:-3] or rel.startswith(pat[:-2])):
            return True
    return False


def discover(root: Path, *, exclude: list[str] | tuple[str, ...] = ()) -> list[Path]:
    """root 配下の Markdown を相対パス順で返す。"""
    patterns = [*DEFAULT_EXCLUDE, *exclude]
    found: list[tuple[str, Path]] = []
    for p in root.rglob("*.md"):
        if not p.is_file():
            continue
        rel = rel_posix(root, p)
        if is_excluded(rel, patterns):
            continue
        found.append((rel, p))
    found.sort(key=lambda t: t[0])
    return [p for _rel, p in found]


def classify(rel: str) -> tuple[str, str | None]:
    """相対パスから (kind, plugin) を決める。"""
    parts = PurePosixPath(rel).parts
    name = parts[-1] if parts else ""

    if len(parts) >= 3 and parts[0] == PLUGINS_DIR:
        plugin = parts[1]
        section = parts[2]
        if len(parts) == 3 and name == "README.md":
            return KIND_PLUGIN_README, plugin
        if section == "skills" and name == SKILL_MARKDOWN_FILENAME:
            return KIND_SKILL, plugin
        if section == "commands" and len(parts) >= 4:
            return KIND_COMMAND, plugin
        if section == "agents" and len(parts) == 4:
            return KIND_AGENT, plugin
        if name == SKILL_MARKDOWN_FILENAME:
            return KIND_SKILL, plugin
        return KIND_MARKDOWN, plugin

    if name == SKILL_MARKDOWN_FILENAME:
        return KIND_SKILL, None
    if len(parts) >= 2 and parts[0] == "commands":
        return KIND_COMMAND, None
    return KIND_MARKDOWN, None


def expected_skill_name(rel: str) -> str:
    """SKILL.md を置いているディレクトリ名。"""
    parts = PurePosixPath(rel).parts
    return parts[-2] if len(parts) >= 2 else ""


def list_plugins(root: Path) -> list[str]:
    d = root / PLUGINS_DIR
    if not d.is_dir():
        return []
    return sorted(p.name for p in d.iterdir() if p.is_dir() and not p.name.startswith("."))
