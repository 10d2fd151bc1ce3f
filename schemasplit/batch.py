"""Batch driver: split every consolidated schema document under a tree."""

from __future__ import annotations

import threading
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from .splitter import SplitResult, process
from .utils.logging import get_logger, log_run_complete, log_run_start
from .walker import DEFAULT_EXCLUDED, iter_json_files

logger = get_logger(__name__)


class SchemaSplitter:
    """Walks a tree and splits each consolidated schema document in it.

    Read and parse problems skip the file.  A :class:`SplitWriteError`
    from any file stops the run and propagates; files already split stay
    split.
    """

    MAX_WORKERS = 32

    def __init__(
        self,
        workers: int = 1,
        excluded: Iterable[str] = DEFAULT_EXCLUDED,
        dry_run: bool = False,
    ) -> None:
        self.workers = min(max(1, workers), self.MAX_WORKERS)
        self.excluded = tuple(excluded)
        self.dry_run = dry_run
        self._lock = threading.Lock()
        self._seen: set[Path] = set()
        self._collisions = 0

    def run(
        self,
        root_dir: Path,
        on_emit: Optional[Callable[[Path], None]] = None,
        on_progress: Optional[Callable[[Path, bool], None]] = None,
    ) -> dict[str, Any]:
        """Split every consolidated schema document under *root_dir*.

        Args:
            root_dir: Tree to walk.
            on_emit: Callback(path) for each split file written.
            on_progress: Callback(path, split) after each ``.json`` file.

        Returns:
            Summary dict with keys: scanned, split, skipped, written,
            collisions, files.
        """
        root_dir = Path(root_dir)
        self._seen = set()
        self._collisions = 0
        log_run_start(logger, root_dir, self.excluded, self.workers, self.dry_run)
        started = time.monotonic()

        results: list[Optional[SplitResult]] = []

        def _record(path: Path, result: Optional[SplitResult]) -> None:
            results.append(result)
            if on_progress:
                on_progress(path, result is not None)

        def _emitted(out_path: Path) -> None:
            with self._lock:
                if out_path in self._seen:
                    self._collisions += 1
                    logger.warning(f"{out_path} was already written in this run; overwriting")
                self._seen.add(out_path)
                if on_emit:
                    on_emit(out_path)

        paths = iter_json_files(root_dir, self.excluded)
        if self.workers == 1:
            for path in paths:
                _record(path, process(path, on_emit=_emitted, dry_run=self.dry_run))
        else:
            self._run_parallel(paths, _emitted, _record)

        split = [r for r in results if r is not None]
        files = [p for r in split for p in r.written]
        summary = {
            "scanned": len(results),
            "split": len(split),
            "skipped": len(results) - len(split),
            "written": len(files),
            "collisions": self._collisions,
            "files": files,
        }
        log_run_complete(logger, summary, time.monotonic() - started)
        return summary

    def _run_parallel(
        self,
        paths: Iterable[Path],
        on_emit: Callable[[Path], None],
        record: Callable[[Path, Optional[SplitResult]], None],
    ) -> None:
        # One future per file: its writes and delete run together on one worker.
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            futures = {
                pool.submit(process, p, on_emit, self.dry_run): p for p in paths
            }
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for future in pending:
                future.cancel()
            for future in done:
                exc = future.exception()
                if exc is not None:
                    logger.error(f"Aborting run: {exc}")
                    raise exc
            for future, path in futures.items():
                if future in done:
                    record(path, future.result())


def split_tree(
    root_dir: Optional[Path] = None,
    workers: Optional[int] = None,
    excluded: Optional[Iterable[str]] = None,
    dry_run: bool = False,
    on_emit: Optional[Callable[[Path], None]] = None,
) -> dict[str, Any]:
    """Run a split with configuration defaults for anything not given."""
    from .config import get_config

    cfg = get_config()
    splitter = SchemaSplitter(
        workers=workers if workers is not None else cfg.workers,
        excluded=excluded if excluded is not None else cfg.excluded_dirs,
        dry_run=dry_run,
    )
    return splitter.run(
        root_dir if root_dir is not None else cfg.effective_root,
        on_emit=on_emit,
    )
