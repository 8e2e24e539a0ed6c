"""レポート生成モジュール。検査結果を Markdown / JSON に整形。"""

from __future__ import annotations

import json

from kensa.lint import LintResult
from kensa.rules import ERROR, RULES, Finding

SEVERITY_EMOJI = {
    "error": "❌",
    "warning": "⚠️",
}


def summary_dict(result: LintResult) -> dict:
    return {
        "documents": len(result.documents),
        "errors": result.errors,
        "warnings": result.warnings,
    }


def render_markdown(result: LintResult, *, strict: bool = False) -> str:
    ok = result.ok(strict=strict)
    lines: list[str] = [
        "# kensa レポート",
        "",
        f"- root: `{result.root}`",
        f"- 対象ファイル数: {len(result.documents)}",
        f"- error: {result.errors}",
        f"- warning: {result.warnings}",
        f"- 判定: {'OK' if ok else 'NG'}",
        "",
        "---",
        "",
        "## 検出結果",
        "",
    ]

    grouped = result.by_path()
    for path, findings in grouped.items():
        lines.append(f"### `{path}`")
        lines.append("")
        for f in findings:
            emoji = SEVERITY_EMOJI.get(f.severity, "-")
            loc = f"L{f.line}" if f.line else "-"
            lines.append(f"- {emoji} **{f.code}** ({loc}) {f.message}")
        lines.append("")
    if not grouped:
        lines.append("(なし)")
        lines.append("")

    used = sorted({f.code for f in result.findings})
    if used:
        lines.append("## ルール")
        lines.append("")
        lines.append("| code | rule | severity | 内容 |")
        lines.append("|---|---|---|---|")
        for code in used:
            r = RULES[code]
            sev = next(f.severity for f in result.findings if f.code == code)
            lines.append(f"| {code} | {r.slug} | {sev} | {r.summary} |")
        lines.append("")

    return "\n".join(lines) + "\n"


def render_json(result: LintResult, *, strict: bool = False) -> str:
    raw = {
        "root": str(result.root),
        "ok": result.ok(strict=strict),
        "summary": summary_dict(result),
        "findings": [f.to_dict() for f in result.findings],
    }
    return json.dumps(raw, ensure_ascii=False, indent=2) + "\n"


def format_finding(f: Finding) -> str:
    """`path:line: CODE message` 形式（エディタ/CI 向け）。"""
    loc = f"{f.path}:{f.line}" if f.line else f.path
    tag = "E" if f.severity == ERROR else "W"
    return f"{loc}: {tag} {f.code} {f.message}"
