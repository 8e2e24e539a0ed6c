"""catalog モジュールのテスト。"""

from pathlib import Path

from conftest import write

from kensa.catalog import build_catalog
from kensa.layout import list_plugins
from kensa.lint import load_corpus


def test_build_catalog(corpus: Path) -> None:
    write(corpus, "plugins/agent-architect/agents/reviewer.md", "---\nname: reviewer\ndescription: Reviews\n---\n")
    (corpus / "plugins" / "bare").mkdir()

    cat = build_catalog(load_corpus(corpus), plugins=list_plugins(corpus))

    assert list(cat.plugins) == ["agent-architect", "bare", "rag-architect"]
    aa = cat.plugins["agent-architect"]
    assert aa.has_readme
    assert [e.name for e in aa.skills] == ["a2a-protocols"]
    assert [e.name for e in aa.commands] == ["design-agent"]
    assert [e.name for e in aa.agents] == ["reviewer"]
    assert not cat.plugins["bare"].has_readme
    assert [e.name for e in cat.skills] == ["runbook-writer"]


def test_find(corpus: Path) -> None:
    write(corpus, "plugins/rag-architect/commands/a2a-protocols.md", "---\ndescription: same name\n---\n")
    cat = build_catalog(load_corpus(corpus))

    both = cat.find("a2a-protocols")
    assert sorted(e.kind for e in both) == ["command", "skill"]

    only = cat.find("rag-architect:a2a-protocols")
    assert [e.kind for e in only] == ["command"]
    assert cat.find("nope") == []


def test_to_dict(corpus: Path) -> None:
    raw = build_catalog(load_corpus(corpus)).to_dict()
    assert raw["skills"][0]["name"] == "runbook-writer"
    assert raw["plugins"]["rag-architect"]["skills"][0]["path"].endswith("hybrid-search/SKILL.md")
