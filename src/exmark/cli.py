"""Command-line interface for exmark."""

from __future__ import annotations

import argparse
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from exmark.batch import (
    DEFAULT_EXTENSION,
    DEFAULT_SUFFIX,
    benchmark,
    discover,
    read_source,
    run_parallel,
    run_sequential,
)
from exmark.errors import ConfigError, ScanError, SourceDecodeError

CONFIG_NAME = "exmark.toml"
STRATEGY_CHOICES = ("sequential", "parallel", "benchmark")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    root: Path
    input_file: Path | None
    output: Path | None
    out_dir: Path
    extension: str
    suffix: str
    strategy: str
    workers: int | None
    rounds: int
    debug: bool
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="exmark",
        description="Render Elixir sources to syntax-highlighted HTML",
    )
    p.add_argument("root", nargs="?", help="Directory searched for sources (default: media)")
    p.add_argument("--file", metavar="PATH", help="Render a single file instead of a directory")
    p.add_argument(
        "-o",
        "--output",
        help="Output directory (default: web/codigos); with --file, output file (default: stdout)",
    )
    p.add_argument("--ext", metavar="EXT", help="Source file extension (default: .ex)")
    p.add_argument("--suffix", metavar="SUFFIX", help="Suffix for rendered files (default: .html)")
    p.add_argument(
        "--strategy",
        choices=STRATEGY_CHOICES,
        default=None,
        help="How to process the batch (default: parallel)",
    )
    p.add_argument("--workers", type=int, default=None, metavar="N", help="Parallel worker count")
    p.add_argument(
        "--rounds", type=int, default=None, metavar="N", help="Benchmark rounds (default: 3)"
    )
    p.add_argument("--config", metavar="FILE", help=f"Config file (default: ./{CONFIG_NAME})")
    p.add_argument("--debug", action="store_true", help="Dump token streams to stderr")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p


def load_config(config_path: Path | None, base_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else base_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: {exc}") from exc


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    value = config.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"[{name}] must be a table")
    return value


def resolve_options(args: argparse.Namespace, base_dir: Path | None = None) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: defaults < config file < CLI flags.
    """
    base_dir = base_dir if base_dir is not None else Path(".")
    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, base_dir)

    paths = _section(config, "paths")
    run = _section(config, "run")

    root = Path(args.root or str(paths.get("root", "media")))
    out_dir = Path(str(paths.get("output", "web/codigos")))
    extension = args.ext or str(paths.get("extension", DEFAULT_EXTENSION))
    suffix = args.suffix or str(paths.get("suffix", DEFAULT_SUFFIX))

    strategy = args.strategy or str(run.get("strategy", "parallel"))
    if strategy not in STRATEGY_CHOICES:
        raise ConfigError(
            f"unknown strategy {strategy!r} (expected one of: {', '.join(STRATEGY_CHOICES)})"
        )

    workers: int | None = None
    cfg_workers = run.get("workers")
    if isinstance(cfg_workers, int):
        workers = cfg_workers
    if args.workers is not None:
        workers = args.workers
    if workers is not None and workers < 1:
        raise ConfigError(f"workers must be at least 1, got {workers}")

    rounds = 3
    cfg_rounds = run.get("rounds")
    if isinstance(cfg_rounds, int):
        rounds = cfg_rounds
    if args.rounds is not None:
        rounds = args.rounds
    if rounds < 1:
        raise ConfigError(f"rounds must be at least 1, got {rounds}")

    input_file = Path(args.file) if args.file else None
    output = Path(args.output) if args.output else None
    if output is not None and input_file is None:
        out_dir = output

    return CliOptions(
        root=root,
        input_file=input_file,
        output=output if input_file is not None else None,
        out_dir=out_dir,
        extension=extension,
        suffix=suffix,
        strategy=strategy,
        workers=workers,
        rounds=rounds,
        debug=args.debug,
        verbose=args.verbose,
    )


def compile_file(path: Path, debug: bool = False) -> str:
    """Read, scan and render one source file to an HTML document."""
    from exmark.debug import dump_tokens
    from exmark.lexer import tokenize
    from exmark.render import render

    tokens = tokenize(read_source(path), path.name)

    if debug:
        dump_tokens(tokens, name=str(path))

    return render(tokens, path.name, str(path))


def run_batch(options: CliOptions) -> int:
    """Discover sources under the root and highlight them with the chosen strategy."""
    from exmark.debug import dump_tokens
    from exmark.lexer import tokenize

    if not options.root.is_dir():
        print(f"error: source directory not found: {options.root}", file=sys.stderr)
        return 2

    paths = discover(options.root, options.extension)

    if options.debug:
        for path in paths:
            dump_tokens(tokenize(read_source(path), path.name), name=str(path))

    if options.strategy == "benchmark":
        for result in benchmark(
            paths, options.out_dir, options.suffix, options.rounds, options.workers
        ):
            print(
                f"{result.strategy:<12} {result.files} files  "
                f"best {result.best:.4f}s  mean {result.mean:.4f}s",
                file=sys.stderr,
            )
        return 0

    if options.strategy == "parallel":
        written = run_parallel(paths, options.out_dir, options.suffix, options.workers)
    else:
        written = run_sequential(paths, options.out_dir, options.suffix)
    print(f"Rendered {len(written)} file(s) to {options.out_dir}", file=sys.stderr)
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    try:
        if options.input_file is None:
            return run_batch(options)
        html = compile_file(options.input_file, options.debug)
        if options.output:
            options.output.write_text(html, encoding="utf-8")
        else:
            sys.stdout.write(html)
    except ScanError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except (OSError, SourceDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    return 0
