"""CLI のテスト。"""

import json
from pathlib import Path

from conftest import write
from typer.testing import CliRunner

from kensa.cli import app

runner = CliRunner()


def test_check_clean_corpus(corpus: Path) -> None:
    r = runner.invoke(app, ["check", "--root", str(corpus)])
    assert r.exit_code == 0, r.output
    assert "8 files, 0 error(s), 0 warning(s)" in r.output


def test_check_reports_findings(corpus: Path) -> None:
    write(corpus, "plugins/agent-architect/commands/broken.md", "# no frontmatter\n")
    r = runner.invoke(app, ["check", "--root", str(corpus)])
    assert r.exit_code == 1
    assert "plugins/agent-architect/commands/broken.md:1: E FM001" in r.output


def test_check_json_output(corpus: Path) -> None:
    write(corpus, "docs/notes.md", "```\n")
    r = runner.invoke(app, ["check", "--root", str(corpus), "--format", "json"])
    assert r.exit_code == 1
    raw = json.loads(r.output)
    assert raw["summary"]["errors"] == 1
    assert raw["findings"][0]["code"] == "MD001"


def test_check_markdown_to_file(corpus: Path, tmp_path: Path) -> None:
    out = tmp_path / "reports" / "kensa.md"
    r = runner.invoke(app, ["check", "--root", str(corpus), "--format", "markdown", "--out", str(out)])
    assert r.exit_code == 0
    assert "(なし)" in out.read_text(encoding="utf-8")


def test_check_strict(corpus: Path) -> None:
    write(corpus, "plugins/no-readme/commands/x.md", "---\ndescription: x\n---\n")
    assert runner.invoke(app, ["check", "--root", str(corpus)]).exit_code == 0
    assert runner.invoke(app, ["check", "--root", str(corpus), "--strict"]).exit_code == 1


def test_check_single_file(corpus: Path) -> None:
    bad = write(corpus, "docs/notes.md", "```\n")
    r = runner.invoke(app, ["check", str(bad), "--root", str(corpus)])
    assert r.exit_code == 1
    assert "1 files" in r.output


def test_check_config_error(corpus: Path) -> None:
    (corpus / "kensa.toml").write_text('[rules.severity]\nFM001 = "fatal"\n', encoding="utf-8")
    r = runner.invoke(app, ["check", "--root", str(corpus)])
    assert r.exit_code == 2


def test_check_missing_root(tmp_path: Path) -> None:
    r = runner.invoke(app, ["check", "--root", str(tmp_path / "nope")])
    assert r.exit_code == 2


def test_check_unknown_format(corpus: Path) -> None:
    r = runner.invoke(app, ["check", "--root", str(corpus), "--format", "xml"])
    assert r.exit_code == 2


def test_list_json(corpus: Path) -> None:
    r = runner.invoke(app, ["list", "--root", str(corpus), "--json"])
    assert r.exit_code == 0
    raw = json.loads(r.output)
    assert sorted(raw["plugins"]) == ["agent-architect", "rag-architect"]


def test_list_table(corpus: Path) -> None:
    r = runner.invoke(app, ["list", "--root", str(corpus)])
    assert r.exit_code == 0
    assert "a2a-protocols" in r.output


def test_show(corpus: Path) -> None:
    r = runner.invoke(app, ["show", "hybrid-search", "--root", str(corpus)])
    assert r.exit_code == 0
    assert "plugins/rag-architect/skills/retrieval/hybrid-search/SKILL.md" in r.output
    assert "name: hybrid-search" in r.output

    missing = runner.invoke(app, ["show", "nope", "--root", str(corpus)])
    assert missing.exit_code == 1


def test_rules() -> None:
    r = runner.invoke(app, ["rules"])
    assert r.exit_code == 0
    assert "FM001" in r.output
    assert "SEC001" in r.output


def test_check_missing_file_argument(corpus: Path) -> None:
    r = runner.invoke(app, ["check", str(corpus / "docs" / "typo.md"), "--root", str(corpus)])
    assert r.exit_code == 2
    assert "見つかりません" in r.output


def test_check_file_outside_root(corpus: Path, tmp_path: Path) -> None:
    outside = write(tmp_path, "elsewhere/notes.md", "# Notes\n")
    r = runner.invoke(app, ["check", str(outside), "--root", str(corpus)])
    assert r.exit_code == 2
    assert "root" in r.output


def test_check_with_symlinked_skill(corpus: Path, tmp_path: Path) -> None:
    target = write(tmp_path, "shared/SKILL.md", "---\nname: shared\ndescription: Shared skill\n---\n")
    link = corpus / "skills" / "misc" / "shared" / "SKILL.md"
    link.parent.mkdir(parents=True)
    link.symlink_to(target)

    r = runner.invoke(app, ["check", "--root", str(corpus)])
    assert r.exit_code == 0, r.output

    single = runner.invoke(app, ["check", str(link), "--root", str(corpus)])
    assert single.exit_code == 0, single.output


def test_check_non_utf8_config(corpus: Path) -> None:
    (corpus / "kensa.toml").write_bytes(b'[links]\nignore = ["caf\xe9"]\n')
    r = runner.invoke(app, ["check", "--root", str(corpus)])
    assert r.exit_code == 2
