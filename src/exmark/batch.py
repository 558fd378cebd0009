"""Batch driver — discover source files and highlight them one file per task.

Every file is scanned, rendered and written independently of the others, so
the sequential and the parallel strategy write byte-identical documents and
differ only in wall-clock time. A failure in any file aborts the run.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from exmark.errors import SourceDecodeError
from exmark.lexer import tokenize
from exmark.render import write_document

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".ex"
DEFAULT_SUFFIX = ".html"


def discover(root: Path, extension: str = DEFAULT_EXTENSION) -> list[Path]:
    """Return every file under *root* (recursively) ending in *extension*, sorted."""
    return sorted(p for p in root.rglob(f"*{extension}") if p.is_file())


def output_path(source: Path, out_dir: Path, suffix: str = DEFAULT_SUFFIX) -> Path:
    """Return where the document for *source* is written: base name plus *suffix*."""
    return out_dir / f"{source.name}{suffix}"


def read_source(path: Path) -> str:
    """Read *path* as UTF-8, raising SourceDecodeError on undecodable bytes."""
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise SourceDecodeError(path, exc) from exc


def highlight_file(source: Path, out_dir: Path, suffix: str = DEFAULT_SUFFIX) -> Path:
    """Scan, render and write one source file. Returns the written path.

    The document goes to a writer-private temporary file that is then renamed
    over the target, so concurrent writers of the same target never leave a
    mixed file behind: the target always holds one complete document.
    """
    logger.debug("highlighting %s", source)
    tokens = tokenize(read_source(source), source.name)

    target = output_path(source, out_dir, suffix)
    target.parent.mkdir(parents=True, exist_ok=True)
    scratch = target.with_name(f".{target.name}.{os.getpid()}.{threading.get_ident()}.tmp")
    try:
        with open(scratch, "w", encoding="utf-8") as f:
            write_document(tokens, f, source.name, str(source))
        os.replace(scratch, target)
    finally:
        scratch.unlink(missing_ok=True)

    logger.debug("wrote %s", target)
    return target


def run_sequential(
    paths: Sequence[Path], out_dir: Path, suffix: str = DEFAULT_SUFFIX
) -> list[Path]:
    """Highlight *paths* one at a time."""
    return [highlight_file(p, out_dir, suffix) for p in paths]


def run_parallel(
    paths: Sequence[Path],
    out_dir: Path,
    suffix: str = DEFAULT_SUFFIX,
    max_workers: int | None = None,
) -> list[Path]:
    """Highlight *paths* with one task per file and wait for all of them.

    Unless *max_workers* caps it, the pool gets one thread per file so every
    task starts at once. The tasks are threads: file reads and writes overlap,
    but scanning and rendering hold the GIL, so on CPU-bound batches the
    parallel strategy is not expected to beat the sequential one.

    Results come back in input order. The first failing task's exception is
    re-raised once every task has been submitted.
    """
    if max_workers is None:
        max_workers = max(1, len(paths))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(highlight_file, p, out_dir, suffix) for p in paths]
        return [future.result() for future in futures]


@dataclass(frozen=True, slots=True)
class BenchmarkResult:
    """Wall-clock timings of one strategy over a number of rounds."""

    strategy: str
    files: int
    timings: tuple[float, ...]

    @property
    def best(self) -> float:
        return min(self.timings)

    @property
    def mean(self) -> float:
        return sum(self.timings) / len(self.timings)


def benchmark(
    paths: Sequence[Path],
    out_dir: Path,
    suffix: str = DEFAULT_SUFFIX,
    rounds: int = 3,
    max_workers: int | None = None,
) -> list[BenchmarkResult]:
    """Time the sequential and the parallel strategy over the same files.

    Both runs do the same work; see run_parallel for why the thread pool
    mostly wins on I/O rather than on scanning.
    """
    if rounds < 1:
        raise ValueError(f"rounds must be at least 1, got {rounds}")

    results: list[BenchmarkResult] = []
    for name in ("sequential", "parallel"):
        timings: list[float] = []
        for _ in range(rounds):
            start = time.perf_counter()
            if name == "parallel":
                run_parallel(paths, out_dir, suffix, max_workers)
            else:
                run_sequential(paths, out_dir, suffix)
            timings.append(time.perf_counter() - start)
        result = BenchmarkResult(name, len(paths), tuple(timings))
        logger.debug("%s: best %.4fs over %d rounds", name, result.best, rounds)
        results.append(result)
    return results
