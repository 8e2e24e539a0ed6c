"""kensa CLI エントリポイント。"""

from __future__ import annotations

import json
from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.table import Table

from kensa.catalog import build_catalog
from kensa.config import ConfigError, KensaConfig, load_config
from kensa.layout import is_within, list_plugins
from kensa.lint import LintResult, Linter, load_corpus
from kensa.logging_setup import log_path_for, setup_logging
from kensa.report import format_finding, render_json, render_markdown
from kensa.rules import ERROR, RULES
from kensa.watch import WatchJob, watch_corpus

APP_HELP = "🔎 kensa: skill / slash command Markdown コーパスの構造チェッカー"

FORMATS = ("text", "markdown", "json")

app = typer.Typer(add_completion=False, help=APP_HELP)
console = Console()


def _load_config_or_exit(root: Path, config: Path | None) -> KensaConfig:
    if not root.is_dir():
        console.print(f"❌ ルートディレクトリが見つかりません: {root}", style="red")
        raise typer.Exit(code=2)
    if config is not None and not config.exists():
        console.print(f"❌ 設定ファイルが見つかりません: {config}", style="red")
        raise typer.Exit(code=2)
    try:
        return load_config(config, root=root)
    except ConfigError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(code=2) from e


def _print_text(result: LintResult, *, strict: bool) -> None:
    for f in result.findings:
        style = "red" if f.severity == ERROR else "yellow"
        console.print(format_finding(f), style=style, markup=False, highlight=False, soft_wrap=True)

    summary = f"{len(result.documents)} files, {result.errors} error(s), {result.warnings} warning(s)"
    if result.ok(strict=strict):
        console.print(f"  ✅ {summary}", style="green")
    else:
        console.print(f"  ❌ {summary}", style="red")


@app.command()
def check(
    paths: list[Path] | None = typer.Argument(
        None,
        help="検査するファイル（省略時はコーパス全体）",
    ),
    root: Path = typer.Option(Path("."), "--root", help="コーパスのルート"),
    config: Path | None = typer.Option(None, "--config", help="設定ファイル (既定: <root>/kensa.toml)"),
    fmt: str = typer.Option("text", "--format", help="出力形式: text | markdown | json"),
    out: Path | None = typer.Option(None, "--out", help="markdown / json レポートの出力先（省略時は標準出力）"),
    strict: bool = typer.Option(False, "--strict", help="warning も失敗扱いにする"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="詳細ログを stderr に出す"),
) -> None:
    """コーパスを検査して問題点を表示する。"""
    if fmt not in FORMATS:
        console.print(f"❌ 未知の出力形式です: {fmt} ({' | '.join(FORMATS)})", style="red")
        raise typer.Exit(code=2)
    if verbose:
        setup_logging(level="DEBUG")

    cfg = _load_config_or_exit(root, config)
    strict = strict or cfg.strict
    linter = Linter(root, cfg)

    if paths:
        for p in paths:
            if not is_within(root, p):
                console.print(f"❌ 指定ファイルが root ({root}) の外にあります: {p}", style="red")
                raise typer.Exit(code=2)
            if not p.is_file():
                console.print(f"❌ 指定ファイルが見つかりません: {p}", style="red")
                raise typer.Exit(code=2)
        result = linter.lint_paths(paths)
    else:
        result = linter.lint_corpus()

    if fmt == "text":
        _print_text(result, strict=strict)
    else:
        text = render_json(result, strict=strict) if fmt == "json" else render_markdown(result, strict=strict)
        if out is not None:
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_text(text, encoding="utf-8")
            console.print(f"🔎 レポートを書き出しました: {out.resolve()}", style="bold green")
        else:
            typer.echo(text, nl=False)

    if not result.ok(strict=strict):
        raise typer.Exit(code=1)


@app.command("list")
def list_(
    root: Path = typer.Option(Path("."), "--root", help="コーパスのルート"),
    config: Path | None = typer.Option(None, "--config", help="設定ファイル"),
    as_json: bool = typer.Option(False, "--json", help="JSON で出力"),
) -> None:
    """プラグイン / skill / command / agent の一覧を表示する。"""
    cfg = _load_config_or_exit(root, config)
    catalog = build_catalog(load_corpus(root, cfg), plugins=list_plugins(root))

    if as_json:
        typer.echo(json.dumps(catalog.to_dict(), ensure_ascii=False, indent=2))
        return

    entries = catalog.entries()
    if not entries:
        console.print("(no skills / commands)")
        return

    table = Table(show_lines=False)
    table.add_column("plugin", style="cyan", no_wrap=True)
    table.add_column("kind", no_wrap=True)
    table.add_column("name", style="bold", no_wrap=True)
    table.add_column("description", overflow="fold")
    for e in entries:
        table.add_row(e.plugin or "-", e.kind, e.name or "(無名)", e.description or "(なし)")
    console.print(table)


@app.command()
def show(
    name: str = typer.Argument(..., help="skill / command / agent 名（`plugin:name` も可）"),
    root: Path = typer.Option(Path("."), "--root", help="コーパスのルート"),
    config: Path | None = typer.Option(None, "--config", help="設定ファイル"),
) -> None:
    """名前で skill / command / agent を探して frontmatter を表示する。"""
    cfg = _load_config_or_exit(root, config)
    docs = load_corpus(root, cfg)
    catalog = build_catalog(docs, plugins=list_plugins(root))
    matches = catalog.find(name)
    if not matches:
        console.print(f"❌ 見つかりません: {name}", style="red")
        raise typer.Exit(code=1)

    by_path = {d.rel_path: d for d in docs}
    for e in matches:
        console.print(f"\n{'=' * 60}", style="cyan")
        console.print(f"  {e.kind}: {e.name}", style="bold cyan")
        console.print(f"{'=' * 60}", style="cyan")
        console.print(f"  path: {e.path}", markup=False)
        console.print(f"  plugin: {e.plugin or '-'}", markup=False)
        doc = by_path.get(e.path)
        if doc is None:
            continue
        if doc.frontmatter.ok:
            dumped = yaml.safe_dump(doc.frontmatter.data, allow_unicode=True, sort_keys=False).rstrip()
            console.print("  frontmatter:", style="dim")
            for line in dumped.splitlines():
                console.print(f"    {line}", markup=False, highlight=False)
        else:
            console.print("  ⚠️  frontmatter を解釈できません（kensa check で詳細を確認）", style="yellow")


@app.command()
def rules() -> None:
    """ルール一覧を表示する。"""
    table = Table()
    table.add_column("code", style="bold", no_wrap=True)
    table.add_column("rule")
    table.add_column("severity")
    table.add_column("内容")
    for r in RULES.values():
        table.add_row(r.code, r.slug, r.severity, r.summary)
    console.print(table)


@app.command()
def watch(
    root: Path = typer.Option(Path("."), "--root", help="監視するコーパスのルート"),
    config: Path | None = typer.Option(None, "--config", help="設定ファイル"),
    debounce: float = typer.Option(0.25, "--debounce", help="デバウンス秒"),
    strict: bool = typer.Option(False, "--strict", help="warning も失敗扱いにする"),
    log_level: str = typer.Option("INFO", "--log-level", help="ログレベル"),
) -> None:
    """コーパスを監視して変更のたびに再検査する。"""
    cfg = _load_config_or_exit(root, config)
    strict = strict or cfg.strict
    setup_logging(root=root, level=log_level)
    console.print(f"watching: {root.resolve()} (log: {log_path_for(root)})", style="cyan")

    def on_result(result: LintResult, job: WatchJob) -> None:
        changed = ", ".join(p.name for p in job.paths) or job.reason
        console.rule(f"[dim]{changed}[/dim]")
        _print_text(result, strict=strict)

    def on_error(message: str) -> None:
        console.print(f"❌ {message}", style="red")

    watch_corpus(
        root=root,
        on_result=on_result,
        config_path=config,
        on_error=on_error,
        debounce_seconds=debounce,
        stop_file=root / ".kensa" / "STOP",
    )
