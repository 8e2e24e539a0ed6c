"""コーパス監視。

- root 配下の .md / kensa.toml が追加/更新/削除されたら再検査
- デバウンスで保存連打を1回の再検査にまとめる
- 再検査は常にコーパス全体（重複名などファイル横断のルールがあるため）

CIではinotify実機がない想定なので、Observer起動部分は薄くし、
ロジック（デバウンス/フィルタ/再検査）はユニットテストで担保する。
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from kensa.config import CONFIG_FILENAME, ConfigError, load_config
from kensa.lint import LintResult, lint_corpus

log = logging.getLogger(__name__)

_IGNORED_DIRS = {".git", ".kensa", "node_modules", ".venv"}


@dataclass
class WatchJob:
    paths: list[Path] = field(default_factory=list)
    reason: str = "update"


def is_relevant(p: Path) -> bool:
    if any(part in _IGNORED_DIRS for part in p.parts):
        return False
    return p.suffix.lower() == ".md" or p.name == CONFIG_FILENAME


class DebouncedEnqueuer:
    """短時間に続いた変更を1つの WatchJob にまとめる。"""

    def __init__(self, q: queue.Queue[WatchJob], debounce_seconds: float) -> None:
        self.q = q
        self.debounce_seconds = debounce_seconds
        self._lock = threading.Lock()
        self._pending: dict[str, Path] = {}
        self._reason = "update"
        self._timer: threading.Timer | None = None

    def enqueue(self, p: Path, reason: str = "update") -> None:
        with self._lock:
            self._pending[str(p)] = p
            self._reason = reason
            if self._timer is not None:
                self._timer.cancel()
            t = threading.Timer(self.debounce_seconds, self._fire)
            t.daemon = True
            self._timer = t
            t.start()

    def _fire(self) -> None:
        with self._lock:
            paths = [self._pending[k] for k in sorted(self._pending)]
            reason = self._reason
            self._pending.clear()
            self._timer = None
        if paths:
            self.q.put(WatchJob(paths=paths, reason=reason))

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending.clear()


class _Handler(FileSystemEventHandler):
    def __init__(self, enq: DebouncedEnqueuer) -> None:
        self.enq = enq

    def _maybe(self, path: str, reason: str) -> None:
        p = Path(path)
        if is_relevant(p):
            self.enq.enqueue(p, reason=reason)

    def on_created(self, event):  # type: ignore[override]
        if not event.is_directory:
            self._maybe(event.src_path, "created")

    def on_modified(self, event):  # type: ignore[override]
        if not event.is_directory:
            self._maybe(event.src_path, "modified")

    def on_deleted(self, event):  # type: ignore[override]
        if not event.is_directory:
            self._maybe(event.src_path, "deleted")

    def on_moved(self, event):  # type: ignore[override]
        if not event.is_directory:
            self._maybe(event.dest_path, "moved")


class WatchRunner:
    """WatchJob を受けてコーパス全体を再検査する。"""

    def __init__(
        self,
        root: Path,
        *,
        on_result: Callable[[LintResult, WatchJob], None],
        config_path: Path | None = None,
        on_error: Callable[[str], None] | None = None,
    ) -> None:
        self.root = root
        self.on_result = on_result
        self.config_path = config_path
        self.on_error = on_error

    def process(self, job: WatchJob) -> LintResult | None:
        # 設定ファイルの変更も拾えるよう毎回読み直す
        try:
            cfg = load_config(self.config_path, root=self.root)
        except ConfigError as e:
            log.error("config error: %s", e)
            if self.on_error is not None:
                self.on_error(str(e))
            return None

        started = time.monotonic()
        result = lint_corpus(self.root, cfg)
        log.info(
            "relint reason=%s changed=%d elapsed=%.3fs",
            job.reason,
            len(job.paths),
            time.monotonic() - started,
        )
        self.on_result(result, job)
        return result


def watch_corpus(
    *,
    root: Path,
    on_result: Callable[[LintResult, WatchJob], None],
    config_path: Path | None = None,
    on_error: Callable[[str], None] | None = None,
    debounce_seconds: float = 0.25,
    stop_file: Path | None = None,
) -> None:
    q: queue.Queue[WatchJob] = queue.Queue()
    enq = DebouncedEnqueuer(q, debounce_seconds=debounce_seconds)
    runner = WatchRunner(root, on_result=on_result, config_path=config_path, on_error=on_error)

    # 起動直後に1回
    q.put(WatchJob(reason="startup"))

    obs = Observer()
    obs.schedule(_Handler(enq), str(root), recursive=True)
    obs.start()
    log.info("watch start root=%s", root)

    try:
        while True:
            if stop_file is not None and stop_file.exists():
                break
            try:
                job = q.get(timeout=0.2)
            except queue.Empty:
                continue
            try:
                runner.process(job)
            except OSError:
                # 保存途中のファイル消失などで落ちても監視は継続する
                log.error("relint failed", exc_info=True)
            finally:
                q.task_done()
    except KeyboardInterrupt:
        pass
    finally:
        enq.cancel()
        obs.stop()
        obs.join()
        log.info("watch stop root=%s", root)
