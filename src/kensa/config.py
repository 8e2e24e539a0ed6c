"""kensa の設定ファイル(`kensa.toml`)のロード。

コーパスのルートに `kensa.toml` を置くと、除外パスやルールの有効/無効、
重大度の上書き、リンク/秘密情報チェックの挙動を変更できる。
ファイルがなければ全てデフォルト。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib  # type: ignore[no-redef]

from kensa.rules import RULES, SEVERITIES

CONFIG_FILENAME = "kensa.toml"


class ConfigError(ValueError):
    """設定ファイルの内容が不正。"""


@dataclass
class FrontMatterConfig:
    name_max_length: int = 64
    description_max_length: int = 1024


@dataclass
class LinksConfig:
    check_anchors: bool = True
    check_external: bool = False
    timeout: float = 5.0
    ignore: list[str] = field(default_factory=list)


@dataclass
class SecretsConfig:
    allow: list[str] = field(default_factory=list)


@dataclass
class KensaConfig:
    exclude: list[str] = field(default_factory=list)
    strict: bool = False
    disable: list[str] = field(default_factory=list)
    severity: dict[str, str] = field(default_factory=dict)
    frontmatter: FrontMatterConfig = field(default_factory=FrontMatterConfig)
    links: LinksConfig = field(default_factory=LinksConfig)
    secrets: SecretsConfig = field(default_factory=SecretsConfig)

    def enabled(self, code: str) -> bool:
        return code not in self.disable

    def severity_of(self, code: str) -> str:
        return self.severity.get(code, RULES[code].severity)


def load_config(path: Path | None = None, *, root: Path | None = None) -> KensaConfig:
    """設定を読み込む。path 未指定なら `<root>/kensa.toml`、なければデフォルト。"""
    if path is None:
        path = (root or Path(".")) / CONFIG_FILENAME
    if not path.exists():
        return KensaConfig()

    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise ConfigError(f"{path}: UTF-8 として読み込めません: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: TOML を解釈できません: {e}") from e

    return parse_config(raw, source=str(path))


def _table(raw: dict, key: str, source: str) -> dict:
    v = raw.get(key) or {}
    if not isinstance(v, dict):
        raise ConfigError(f"{source}: [{key}] はテーブルで書いてください。")
    return v


def parse_config(raw: dict, *, source: str = CONFIG_FILENAME) -> KensaConfig:
    kensa = _table(raw, "kensa", source)
    rules = _table(raw, "rules", source)
    fm = _table(raw, "frontmatter", source)
    links = _table(raw, "links", source)
    secrets = _table(raw, "secrets", source)

    disable = [str(c).upper() for c in (rules.get("disable", []) or [])]
    severity = {str(k).upper(): str(v).lower() for k, v in _table(rules, "severity", source).items()}

    for code in [*disable, *severity]:
        if code not in RULES:
            raise ConfigError(f"{source}: 未知のルールコードです: {code}")
    for code, sev in severity.items():
        if sev not in SEVERITIES:
            raise ConfigError(f"{source}: {code} の重大度が不正です: {sev} ({' | '.join(SEVERITIES)})")

    allow = [str(p) for p in (secrets.get("allow", []) or [])]
    for pat in allow:
        try:
            re.compile(pat)
        except re.error as e:
            raise ConfigError(f"{source}: secrets.allow の正規表現が不正です: {pat!r} ({e})") from e

    try:
        cfg = KensaConfig(
            exclude=[str(p) for p in (kensa.get("exclude", []) or [])],
            strict=bool(kensa.get("strict", False)),
            disable=disable,
            severity=severity,
            frontmatter=FrontMatterConfig(
                name_max_length=int(fm.get("name_max_length", 64)),
                description_max_length=int(fm.get("description_max_length", 1024)),
            ),
            links=LinksConfig(
                check_anchors=bool(links.get("check_anchors", True)),
                check_external=bool(links.get("check_external", False)),
                timeout=float(links.get("timeout", 5.0)),
                ignore=[str(p) for p in (links.get("ignore", []) or [])],
            ),
            secrets=SecretsConfig(allow=allow),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{source}: 設定値の型が不正です: {e}") from e
    return cfg
