"""ルール定義と検出結果 (Finding)。"""

from __future__ import annotations

from dataclasses import dataclass

ERROR = "error"
WARNING = "warning"
SEVERITIES = (ERROR, WARNING)


@dataclass(frozen=True)
class Rule:
    code: str
    slug: str
    severity: str
    summary: str


@dataclass(frozen=True)
class Finding:
    path: str  # コーパスルートからの相対パス (POSIX)
    line: int | None
    code: str
    severity: str
    message: str

    def sort_key(self) -> tuple[str, int, str]:
        return (self.path, self.line or 0, self.code)

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "line": self.line,
            "code": self.code,
            "rule": RULES[self.code].slug if self.code in RULES else "",
            "severity": self.severity,
            "message": self.message,
        }


_RULE_LIST = [
    Rule("FM001", "missing-frontmatter", ERROR, "skill/command/agent が `---` で始まっていない"),
    Rule("FM002", "unterminated-frontmatter", ERROR, "frontmatter の終了 `---` がない"),
    Rule("FM003", "invalid-frontmatter", ERROR, "frontmatter の YAML が不正、またはマッピングでない"),
    Rule("FM004", "missing-description", ERROR, "description が空または未定義"),
    Rule("FM005", "missing-name", ERROR, "name が空または未定義 (skill/agent)"),
    Rule("FM006", "name-mismatch", ERROR, "skill の name がディレクトリ名と一致しない"),
    Rule("FM007", "name-format", WARNING, "name が小文字ハイフン区切りでない、または長すぎる"),
    Rule("FM008", "description-too-long", WARNING, "description が長すぎる"),
    Rule("MD001", "unclosed-fence", ERROR, "コードブロックのフェンスが閉じていない"),
    Rule("LNK001", "broken-link", ERROR, "相対リンク先が存在しない"),
    Rule("LNK002", "broken-anchor", WARNING, "リンクのアンカーに対応する見出しがない"),
    Rule("LNK003", "external-link-unreachable", WARNING, "外部リンクに到達できない (有効時のみ)"),
    Rule("SEC001", "secret", ERROR, "既知形式のシークレットらしき文字列"),
    Rule("SEC002", "possible-credential", WARNING, "ハードコードされた認証情報の可能性"),
    Rule("DUP001", "duplicate-skill-name", ERROR, "同じスコープ内で skill 名が重複"),
    Rule("PLG001", "plugin-readme-missing", WARNING, "プラグインに README.md がない"),
    Rule("IO001", "unreadable-file", ERROR, "UTF-8 として読み込めない"),
]

RULES: dict[str, Rule] = {r.code: r for r in _RULE_LIST}
