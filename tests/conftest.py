from __future__ import annotations

from pathlib import Path

import pytest


def write(root: Path, rel: str, text: str) -> Path:
    p = root / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    return p


@pytest.fixture()
def corpus(tmp_path: Path) -> Path:
    """問題のない最小限のコーパスを作る。"""
    root = tmp_path / "corpus"
    root.mkdir()

    write(root, "CLAUDE.md", "# Project notes\n\nShared guidance.\n")
    write(
        root,
        "README.md",
        "# Skills corpus\n\n- [RAG architect](plugins/rag-architect/README.md)\n"
        "- [Agent architect](plugins/agent-architect/README.md#commands)\n",
    )

    write(
        root,
        "plugins/agent-architect/README.md",
        "# Agent Architect\n\n## Commands\n\n- `/design-agent` ([source](commands/design-agent.md))\n",
    )
    write(
        root,
        "plugins/agent-architect/commands/design-agent.md",
        """---
description: Design a multi-agent system from a short brief
---

# /design-agent

Ask for the goal, then propose agents.

```python
agents = ["planner", "coder", "reviewer"]
```
""",
    )
    write(
        root,
        "plugins/agent-architect/skills/patterns/a2a-protocols/SKILL.md",
        """---
name: a2a-protocols
description: Agent-to-agent protocol patterns (handoff, delegation, MCP tool calls)
---

# A2A Protocols

## Handoff

```ts
await Promise.all(tasks.map(run));
```
""",
    )

    write(
        root,
        "plugins/rag-architect/README.md",
        """# RAG Architect

See [CLAUDE.md](../../CLAUDE.md) and the
[hybrid search skill](skills/retrieval/hybrid-search/SKILL.md).

Jump to [usage](#usage).

## Usage

Run `/rag-review` on a design doc. ![diagram](docs/diagram.png)

[ref]: ../agent-architect/README.md
""",
    )
    (root / "plugins/rag-architect/docs").mkdir(parents=True)
    (root / "plugins/rag-architect/docs/diagram.png").write_bytes(b"\x89PNG")
    write(
        root,
        "plugins/rag-architect/skills/retrieval/hybrid-search/SKILL.md",
        """---
name: hybrid-search
description: Combine BM25 and vector retrieval with reciprocal rank fusion
---

# Hybrid search

~~~sql
SELECT id FROM docs ORDER BY score DESC LIMIT 10;
~~~
""",
    )

    write(
        root,
        "skills/devops/runbook-writer/SKILL.md",
        """---
name: runbook-writer
description: Write incident runbooks with rollback steps
---

# Runbook writer

1. Describe the symptom.

   ```bash
   kubectl rollout undo deploy/api
   ```

2. Record the 5 Whys.
""",
    )
    return root
