"""report モジュールのテスト。"""

import json
from pathlib import Path

from kensa.lint import LintResult
from kensa.report import format_finding, render_json, render_markdown
from kensa.rules import Finding


def _result() -> LintResult:
    return LintResult(
        root=Path("/tmp/corpus"),
        findings=[
            Finding("plugins/p/README.md", 3, "LNK001", "error", "リンク先が存在しません: x.md"),
            Finding("plugins/q", None, "PLG001", "warning", "プラグイン `q` に README.md がありません。"),
        ],
    )


def test_render_markdown_basic() -> None:
    report = render_markdown(_result())
    assert "# kensa レポート" in report
    assert "### `plugins/p/README.md`" in report
    assert "**LNK001** (L3)" in report
    assert "**PLG001** (-)" in report
    assert "| LNK001 | broken-link | error |" in report
    assert "判定: NG" in report


def test_render_markdown_empty() -> None:
    report = render_markdown(LintResult(root=Path("/tmp")))
    assert "(なし)" in report
    assert "判定: OK" in report


def test_render_json() -> None:
    raw = json.loads(render_json(_result()))
    assert raw["ok"] is False
    assert raw["summary"] == {"documents": 0, "errors": 1, "warnings": 1}
    assert raw["findings"][0]["rule"] == "broken-link"
    assert raw["findings"][1]["line"] is None


def test_render_json_strict() -> None:
    only_warning = LintResult(root=Path("/tmp"), findings=[_result().findings[1]])
    assert json.loads(render_json(only_warning))["ok"] is True
    assert json.loads(render_json(only_warning, strict=True))["ok"] is False


def test_format_finding() -> None:
    a, b = _result().findings
    assert format_finding(a) == "plugins/p/README.md:3: E LNK001 リンク先が存在しません: x.md"
    assert format_finding(b).startswith("plugins/q: W PLG001")
