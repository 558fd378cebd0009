"""Tests for file discovery and the sequential / parallel batch strategies."""

from __future__ import annotations

from pathlib import Path

import pytest

from exmark import batch, highlight
from exmark.batch import (
    benchmark,
    discover,
    highlight_file,
    output_path,
    read_source,
    run_parallel,
    run_sequential,
)
from exmark.errors import SourceDecodeError, UnscannableCharacter

SOURCES = {
    "partner1/file.ex": "defmodule File do\n  def read(path), do: path\nend\n",
    "partner1/ict.ex": "# ict\n@doc false\ndef ok?, do: true\n",
    "partner2/taxi.ex": "def fare(km) do\n  km * 12 |> round()\nend\n",
    "partner2/subfolder/alienware.ex": "x = ~D[2021-03-04]\ny = :ok\n",
    "partner2/notes.txt": "not elixir \x01",
}


class TestDiscover:
    def test_recursive_and_filtered(self, write_sources) -> None:
        root = write_sources(SOURCES)
        found = discover(root)
        assert [p.relative_to(root).as_posix() for p in found] == [
            "partner1/file.ex",
            "partner1/ict.ex",
            "partner2/subfolder/alienware.ex",
            "partner2/taxi.ex",
        ]

    def test_other_extension(self, write_sources) -> None:
        root = write_sources(SOURCES)
        assert [p.name for p in discover(root, ".txt")] == ["notes.txt"]

    def test_empty_root(self, tmp_path: Path) -> None:
        assert discover(tmp_path) == []


class TestHighlightFile:
    def test_output_path(self) -> None:
        assert output_path(Path("media/a/taxi.ex"), Path("out")) == Path("out/taxi.ex.html")
        assert output_path(Path("taxi.ex"), Path("out"), ".htm") == Path("out/taxi.ex.htm")

    def test_writes_document(self, write_sources, tmp_path: Path) -> None:
        root = write_sources(SOURCES)
        source = root / "partner2" / "taxi.ex"
        out_dir = tmp_path / "out"

        written = highlight_file(source, out_dir)

        assert written == out_dir / "taxi.ex.html"
        text = written.read_text(encoding="utf-8")
        assert text == highlight(source.read_text(encoding="utf-8"), "taxi.ex", str(source))
        assert f"ubicacion='{source}'" in text

    def test_creates_output_directory(self, write_sources, tmp_path: Path) -> None:
        root = write_sources(SOURCES)
        out_dir = tmp_path / "deep" / "er"
        highlight_file(root / "partner1" / "ict.ex", out_dir)
        assert (out_dir / "ict.ex.html").is_file()

    def test_missing_input_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            highlight_file(tmp_path / "missing.ex", tmp_path / "out")

    def test_undecodable_input_raises(self, tmp_path: Path) -> None:
        source = tmp_path / "latin1.ex"
        source.write_bytes(b"# se\xf1al\n")
        with pytest.raises(SourceDecodeError) as exc_info:
            read_source(source)
        assert exc_info.value.path == source
        assert "0xf1 at offset 4" in str(exc_info.value)

    def test_replaces_existing_output_without_leftovers(self, write_sources, tmp_path: Path) -> None:
        root = write_sources(SOURCES)
        out_dir = tmp_path / "out"
        out_dir.mkdir()
        (out_dir / "taxi.ex.html").write_text("stale", encoding="utf-8")

        written = highlight_file(root / "partner2" / "taxi.ex", out_dir)

        assert written.read_text(encoding="utf-8").startswith("<style>")
        assert [p.name for p in out_dir.iterdir()] == ["taxi.ex.html"]


class TestStrategies:
    def test_parallel_matches_sequential(self, write_sources, tmp_path: Path) -> None:
        root = write_sources(SOURCES)
        paths = discover(root)

        seq = run_sequential(paths, tmp_path / "seq")
        par = run_parallel(paths, tmp_path / "par", max_workers=4)

        assert [p.name for p in seq] == [p.name for p in par]
        for a, b in zip(seq, par):
            assert a.read_bytes() == b.read_bytes()

    def test_results_follow_input_order(self, write_sources, tmp_path: Path) -> None:
        root = write_sources(SOURCES)
        paths = list(reversed(discover(root)))
        written = run_parallel(paths, tmp_path / "out")
        assert [p.name for p in written] == [f"{p.name}.html" for p in paths]

    def test_same_base_name_leaves_one_complete_document(
        self, write_sources, tmp_path: Path
    ) -> None:
        root = write_sources(
            {f"p{i}/main.ex": f"def f{i}, do: {i}\n" * 200 for i in range(8)}
        )
        paths = discover(root)
        expected = {
            highlight(p.read_text(encoding="utf-8"), p.name, str(p)) for p in paths
        }
        out_dir = tmp_path / "out"

        run_parallel(paths, out_dir)

        assert [p.name for p in out_dir.iterdir()] == ["main.ex.html"]
        assert (out_dir / "main.ex.html").read_text(encoding="utf-8") in expected

    def test_one_worker_per_file_by_default(
        self, write_sources, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        sizes: list[int | None] = []

        class RecordingPool(batch.ThreadPoolExecutor):
            def __init__(self, max_workers=None, *args, **kwargs):
                sizes.append(max_workers)
                super().__init__(max_workers, *args, **kwargs)

        monkeypatch.setattr(batch, "ThreadPoolExecutor", RecordingPool)
        paths = discover(write_sources(SOURCES))

        run_parallel(paths, tmp_path / "a")
        run_parallel(paths, tmp_path / "b", max_workers=2)
        run_parallel([], tmp_path / "c")

        assert sizes == [4, 2, 1]

    def test_empty_batch(self, tmp_path: Path) -> None:
        assert run_sequential([], tmp_path) == []
        assert run_parallel([], tmp_path) == []

    @pytest.mark.parametrize("strategy", [run_sequential, run_parallel])
    def test_scan_failure_aborts(self, strategy, write_sources, tmp_path: Path) -> None:
        root = write_sources({**SOURCES, "bad.ex": "def x\x01"})
        with pytest.raises(UnscannableCharacter):
            strategy(discover(root), tmp_path / "out")


class TestBenchmark:
    def test_times_both_strategies(self, write_sources, tmp_path: Path) -> None:
        root = write_sources(SOURCES)
        results = benchmark(discover(root), tmp_path / "out", rounds=2)
        assert [r.strategy for r in results] == ["sequential", "parallel"]
        for r in results:
            assert r.files == 4
            assert len(r.timings) == 2
            assert 0 <= r.best <= r.mean
        assert len(list((tmp_path / "out").iterdir())) == 4

    def test_rounds_must_be_positive(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            benchmark([], tmp_path, rounds=0)
