"""Command-line front end.

Usage:
    halide-build build OUTPUT_DIR k.cpp [more.cpp ...] [-- generator params]
    halide-build run OUTPUT_DIR k.cpp --self-test "./test {artifact}"
    halide-build src
    halide-build new my_filter.cpp
"""

from __future__ import annotations

import argparse
import os
import shlex
import sys
from collections.abc import Sequence
from pathlib import Path

from .artifacts import shared_library_path
from .builders import compile_shared_library
from .checkout import DEFAULT_BRANCH, DEFAULT_REPOSITORY, HalideSource
from .config import BuildConfig
from .context import BuildContext
from .errors import HalideBuildError, ProcessError
from .fingerprint import FingerprintStore
from .observability import StructuredLogger
from .scaffold import write_generator_template


def default_halide_path() -> Path:
    return Path(os.environ.get("HALIDE_PATH") or Path.home() / "halide")


def _add_build_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("output_dir", type=Path, help="Directory receiving the generator and artifact")
    parser.add_argument("inputs", nargs="+", type=Path, help="Generator source files")
    parser.add_argument("--kernel", default=None, help="Kernel name (default: first source stem)")
    parser.add_argument("--target", default=None, help="Halide target, e.g. host or x86-64-linux")
    parser.add_argument(
        "--feature", dest="features", action="append", default=None, help="Target feature flag"
    )
    parser.add_argument("--cxx", default=None, help="C++ compiler (env: CXX)")
    parser.add_argument("--cxxflags", default=None, help="C++ compile flags (env: CXXFLAGS)")
    parser.add_argument("--ldflags", default=None, help="C++ link flags (env: LDFLAGS)")
    parser.add_argument("--emit", default=None, help="Comma-separated emit kinds")
    parser.add_argument("--generator-name", default=None, help="Registered generator name")
    parser.add_argument("--function-name", default=None, help="Emitted function name")
    parser.add_argument(
        "--build-arg", dest="build_args", action="append", default=[], help="Extra compiler argument"
    )
    parser.add_argument(
        "--no-generator",
        dest="use_harness",
        action="store_false",
        help="Do not link GenGen.cpp; the sources provide main()",
    )
    parser.add_argument(
        "--no-keep", dest="keep", action="store_false", help="Delete the generator after running"
    )
    parser.add_argument("--force", action="store_true", help="Ignore the recorded fingerprint")
    parser.add_argument("--shared", action="store_true", help="Also link lib<kernel>.so")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="halide-build",
        description="Compile Halide generators and emit kernel libraries.",
        epilog="Arguments after `--` are passed to the generator.",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Disable logging to stderr")
    parser.add_argument(
        "-p",
        "--halide-path",
        type=Path,
        default=None,
        help="Path to the Halide toolchain (env: HALIDE_PATH, default: ~/halide)",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Write JSON-lines build log")
    sub = parser.add_subparsers(dest="command", required=True)

    build_p = sub.add_parser("build", help="Build the kernel artifact if it is stale")
    _add_build_arguments(build_p)

    run_p = sub.add_parser("run", help="Build, then verify and self-test the artifact")
    _add_build_arguments(run_p)
    run_p.add_argument("--self-test", default=None, help="Command run against {artifact}")

    src_p = sub.add_parser("src", help="Download, update, and build Halide source")
    src_p.add_argument("-m", "--make", default="make", help="Make executable")
    src_p.add_argument("--url", default=DEFAULT_REPOSITORY, help="Halide repository")
    src_p.add_argument("--branch", default=DEFAULT_BRANCH, help="Halide source branch")
    src_p.add_argument(
        "--make-flag", dest="make_flags", action="append", default=[], help="Extra make argument"
    )

    new_p = sub.add_parser("new", help="Create a new Halide generator source")
    new_p.add_argument("path", type=Path)
    new_p.add_argument("--name", default=None, help="Registered generator name")
    return parser


def config_from_args(args: argparse.Namespace, run_args: Sequence[str]) -> BuildConfig:
    overrides: dict[str, object] = {
        "build_args": tuple(args.build_args),
        "run_args": tuple(run_args),
        "use_harness": args.use_harness,
        "keep_generator": args.keep,
        "generator_name": args.generator_name,
        "function_name": args.function_name,
    }
    if args.cxx:
        overrides["cxx"] = args.cxx
    if args.cxxflags is not None:
        overrides["cxxflags"] = tuple(shlex.split(args.cxxflags))
    if args.ldflags is not None:
        overrides["ldflags"] = tuple(shlex.split(args.ldflags))
    if args.target:
        overrides["target"] = args.target
    if args.features:
        overrides["features"] = tuple(args.features)
    if args.emit:
        overrides["emit"] = tuple(kind.strip() for kind in args.emit.split(",") if kind.strip())
    if getattr(args, "self_test", None):
        overrides["self_test"] = tuple(shlex.split(args.self_test))
    return BuildConfig.from_env(**overrides)


def cmd_build(args: argparse.Namespace, run_args: Sequence[str], logger: StructuredLogger) -> int:
    context = BuildContext(
        args.halide_path,
        args.output_dir,
        kernel=args.kernel,
        config=config_from_args(args, run_args),
        logger=logger,
    )
    context.source_files(*args.inputs)
    if args.force:
        FingerprintStore(context.output_dir).clear()
    context.build()

    if args.shared:
        artifact = context.artifact_path()
        output = shared_library_path(artifact)
        _echo(logger, f"Building shared library: {artifact} -> {output}")
        inputs: list[str | Path] = [artifact]
        if artifact.suffix == ".a" and sys.platform != "darwin":
            inputs = ["-Wl,--whole-archive", artifact, "-Wl,--no-whole-archive"]
        compile_shared_library(output, inputs, compiler=context.config.cxx)

    if args.command == "run":
        if not context.run():
            _echo(logger, f"Self-test failed for {context.artifact_path()}")
            return 1
    print(context.artifact_path())
    return 0


def cmd_src(args: argparse.Namespace, logger: StructuredLogger) -> int:
    source = HalideSource(
        path=args.halide_path,
        repository=args.url,
        branch=args.branch,
        make=args.make,
        make_flags=tuple(args.make_flags),
    )
    if source.exists:
        _echo(logger, f"Updating Halide source in {source.path}")
        source.update()
    else:
        _echo(logger, f"Downloading Halide source to {source.path}")
        source.download()
    source.build()
    _echo(logger, f"Halide built successfully in {source.path}")
    return 0


def cmd_new(args: argparse.Namespace, logger: StructuredLogger) -> int:
    path = write_generator_template(args.path, name=args.name)
    _echo(logger, f"Created {path}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    raw = list(sys.argv[1:] if argv is None else argv)
    run_args: list[str] = []
    if "--" in raw:
        split = raw.index("--")
        raw, run_args = raw[:split], raw[split + 1 :]

    parser = build_parser()
    args = parser.parse_args(raw)
    if args.halide_path is None:
        args.halide_path = default_halide_path()

    logger = StructuredLogger() if args.quiet else StructuredLogger.to_stderr()
    try:
        if args.command in ("build", "run"):
            return cmd_build(args, run_args, logger)
        if args.command == "src":
            return cmd_src(args, logger)
        return cmd_new(args, logger)
    except HalideBuildError as exc:
        print(f"error: {exc}", file=sys.stderr)
        if isinstance(exc, ProcessError) and exc.diagnostics:
            sys.stderr.write(exc.diagnostics)
        return 1
    finally:
        if args.log_file is not None:
            logger.to_json_lines(args.log_file)


def _echo(logger: StructuredLogger, message: str) -> None:
    logger.log(operation="cli", kernel=None, stage=None, message=message)


if __name__ == "__main__":
    raise SystemExit(main())
