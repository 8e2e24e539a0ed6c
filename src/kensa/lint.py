"""コーパス全体の検査。

discover → load → ファイル単位のルール → コーパス単位のルール の順に実行し、
設定（無効化・重大度上書き）を適用した Finding を返す。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path

from kensa.checks import (
    AnchorIndex,
    check_duplicate_names,
    check_fences,
    check_frontmatter,
    check_links,
    check_plugins,
    check_secrets,
)
from kensa.config import KensaConfig
from kensa.document import Document, load_document
from kensa.external import ExternalLinkChecker
from kensa.layout import discover, rel_posix
from kensa.rules import ERROR, RULES, WARNING, Finding
from kensa.secret_scan import SecretScanner

log = logging.getLogger(__name__)


@dataclass
class LintResult:
    root: Path
    documents: list[Document] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)

    @property
    def errors(self) -> int:
        return sum(1 for f in self.findings if f.severity == ERROR)

    @property
    def warnings(self) -> int:
        return sum(1 for f in self.findings if f.severity == WARNING)

    def ok(self, *, strict: bool = False) -> bool:
        """strict=True なら warning も失敗扱い。"""
        if strict:
            return not self.findings
        return self.errors == 0

    def by_path(self) -> dict[str, list[Finding]]:
        out: dict[str, list[Finding]] = {}
        for f in self.findings:
            out.setdefault(f.path, []).append(f)
        return out


class Linter:
    def __init__(self, root: Path, cfg: KensaConfig | None = None) -> None:
        self.root = root
        self.cfg = cfg or KensaConfig()
        self.anchors = AnchorIndex()
        self.scanner = SecretScanner(self.cfg.secrets.allow)
        self.external = (
            ExternalLinkChecker(timeout=self.cfg.links.timeout) if self.cfg.links.check_external else None
        )

    def load_documents(self, paths: list[Path]) -> tuple[list[Document], list[Finding]]:
        docs: list[Document] = []
        findings: list[Finding] = []
        for p in paths:
            try:
                docs.append(load_document(self.root, p))
            except UnicodeDecodeError as e:
                rel = rel_posix(self.root, p)
                log.warning("decode failed path=%s", rel)
                findings.append(
                    Finding(
                        path=rel,
                        line=None,
                        code="IO001",
                        severity=RULES["IO001"].severity,
                        message=f"UTF-8 として読み込めません (byte {e.start})。",
                    )
                )
        return docs, findings

    def check_document(self, doc: Document) -> list[Finding]:
        out: list[Finding] = []
        out.extend(check_frontmatter(doc, self.cfg))
        out.extend(check_fences(doc))
        out.extend(check_links(doc, root=self.root, cfg=self.cfg, anchors=self.anchors, external=self.external))
        out.extend(check_secrets(doc, self.scanner))
        return out

    def _finish(self, docs: list[Document], findings: list[Finding]) -> LintResult:
        applied: list[Finding] = []
        for f in findings:
            if not self.cfg.enabled(f.code):
                continue
            sev = self.cfg.severity_of(f.code)
            applied.append(f if sev == f.severity else replace(f, severity=sev))
        applied.sort(key=Finding.sort_key)
        result = LintResult(root=self.root, documents=docs, findings=applied)
        log.info(
            "lint done root=%s documents=%d errors=%d warnings=%d",
            self.root,
            len(docs),
            result.errors,
            result.warnings,
        )
        return result

    def lint_corpus(self) -> LintResult:
        paths = discover(self.root, exclude=self.cfg.exclude)
        docs, findings = self.load_documents(paths)
        for doc in docs:
            findings.extend(self.check_document(doc))
        findings.extend(check_duplicate_names(docs))
        findings.extend(check_plugins(self.root))
        return self._finish(docs, findings)

    def lint_paths(self, paths: list[Path]) -> LintResult:
        """指定ファイルだけ検査する（コーパス単位のルールは実行しない）。"""
        targets = [p for p in paths if p.suffix.lower() == ".md" and p.is_file()]
        docs, findings = self.load_documents(targets)
        for doc in docs:
            findings.extend(self.check_document(doc))
        return self._finish(docs, findings)


def lint_corpus(root: Path, cfg: KensaConfig | None = None) -> LintResult:
    return Linter(root, cfg).lint_corpus()


def lint_paths(root: Path, paths: list[Path], cfg: KensaConfig | None = None) -> LintResult:
    return Linter(root, cfg).lint_paths(paths)


def load_corpus(root: Path, cfg: KensaConfig | None = None) -> list[Document]:
    """検査せずにドキュメントだけ読む（読めないファイルは除く）。"""
    linter = Linter(root, cfg)
    docs, _findings = linter.load_documents(discover(root, exclude=linter.cfg.exclude))
    return docs
