"""プラグイン / skill / command / agent の一覧。"""

from __future__ import annotations

from dataclasses import dataclass, field

from kensa.document import Document
from kensa.layout import KIND_AGENT, KIND_COMMAND, KIND_PLUGIN_README, KIND_SKILL


@dataclass(frozen=True)
class Entry:
    kind: str
    name: str
    description: str
    path: str
    plugin: str | None = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "name": self.name,
            "description": self.description,
            "path": self.path,
            "plugin": self.plugin,
        }


@dataclass
class PluginEntry:
    name: str
    has_readme: bool = False
    skills: list[Entry] = field(default_factory=list)
    commands: list[Entry] = field(default_factory=list)
    agents: list[Entry] = field(default_factory=list)

    def entries(self) -> list[Entry]:
        return [*self.skills, *self.commands, *self.agents]


@dataclass
class Catalog:
    plugins: dict[str, PluginEntry] = field(default_factory=dict)
    skills: list[Entry] = field(default_factory=list)  # トップレベル
    commands: list[Entry] = field(default_factory=list)  # トップレベル

    def entries(self) -> list[Entry]:
        out = [*self.skills, *self.commands]
        for p in self.plugins.values():
            out.extend(p.entries())
        return out

    def find(self, name: str) -> list[Entry]:
        """name 一致のエントリ。`plugin:name` 形式ならプラグインで絞る。"""
        plugin = None
        if ":" in name:
            plugin, name = name.split(":", 1)
        return [e for e in self.entries() if e.name == name and (plugin is None or e.plugin == plugin)]

    def to_dict(self) -> dict:
        return {
            "plugins": {
                p.name: {
                    "has_readme": p.has_readme,
                    "skills": [e.to_dict() for e in p.skills],
                    "commands": [e.to_dict() for e in p.commands],
                    "agents": [e.to_dict() for e in p.agents],
                }
                for p in self.plugins.values()
            },
            "skills": [e.to_dict() for e in self.skills],
            "commands": [e.to_dict() for e in self.commands],
        }


def build_catalog(documents: list[Document], plugins: list[str] | None = None) -> Catalog:
    cat = Catalog()
    for name in plugins or []:
        cat.plugins[name] = PluginEntry(name=name)

    for d in documents:
        if d.plugin is not None and d.plugin not in cat.plugins:
            cat.plugins[d.plugin] = PluginEntry(name=d.plugin)
        owner = cat.plugins.get(d.plugin) if d.plugin is not None else None

        if d.kind == KIND_PLUGIN_README and owner is not None:
            owner.has_readme = True
            continue
        if d.kind not in (KIND_SKILL, KIND_COMMAND, KIND_AGENT):
            continue

        entry = Entry(
            kind=d.kind,
            name=d.name or d.expected_name,
            description=d.description,
            path=d.rel_path,
            plugin=d.plugin,
        )
        if owner is None:
            if d.kind == KIND_SKILL:
                cat.skills.append(entry)
            elif d.kind == KIND_COMMAND:
                cat.commands.append(entry)
        elif d.kind == KIND_SKILL:
            owner.skills.append(entry)
        elif d.kind == KIND_COMMAND:
            owner.commands.append(entry)
        else:
            owner.agents.append(entry)

    cat.plugins = dict(sorted(cat.plugins.items()))
    return cat
