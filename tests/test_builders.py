from pathlib import Path

import pytest

from halide_build.builders import (
    GeneratorSpec,
    compile_command,
    compile_generator,
    compile_shared_library,
    generator_command,
    run_generator,
)
from halide_build.config import BuildConfig
from halide_build.errors import (
    ArtifactNotProduced,
    CompilationFailed,
    CompilerInvocationFailed,
    GeneratorExecutionFailed,
)
from halide_build.models import GeneratorExecutable
from halide_build.toolchain import locate_toolchain

from conftest import FakeTools, write_script


def _spec(tmp_path: Path, toolchain_root: Path, sources: tuple[Path, ...], config: BuildConfig) -> GeneratorSpec:
    return GeneratorSpec(
        kernel="k",
        sources=sources,
        toolchain=locate_toolchain(toolchain_root, require_harness=config.use_harness),
        output_dir=tmp_path / "out",
        config=config,
    )


def test_compile_command_layout(tmp_path: Path, toolchain_root: Path) -> None:
    config = BuildConfig(
        cxx="clang++",
        cxxflags=("-O2", "-fno-rtti"),
        ldflags=("-Wl,-rpath,/opt/halide/lib",),
        build_args=("-DKERNEL=1",),
    )
    sources = (tmp_path / "b.cpp", tmp_path / "a.cpp")
    spec = _spec(tmp_path, toolchain_root, sources, config)
    root = toolchain_root.resolve()

    command = compile_command(spec)

    assert command == (
        "clang++",
        "-std=c++17",
        "-I",
        str(root / "include"),
        "-I",
        str(root / "tools"),
        "-O2",
        "-fno-rtti",
        str(root / "tools" / "GenGen.cpp"),
        "-DKERNEL=1",
        str(tmp_path / "b.cpp"),
        str(tmp_path / "a.cpp"),
        "-o",
        str(tmp_path / "out" / "k.generator"),
        "-L",
        str(root / "lib"),
        "-lHalide",
        "-lpthread",
        "-ldl",
        "-lz",
        "-Wl,-rpath,/opt/halide/lib",
    )
    assert compile_command(spec) == command


def test_compile_command_without_harness(tmp_path: Path, toolchain_root: Path) -> None:
    spec = _spec(tmp_path, toolchain_root, (tmp_path / "k.cpp",), BuildConfig(use_harness=False))
    assert not any(arg.endswith("GenGen.cpp") for arg in compile_command(spec))


def test_generator_command_layout(tmp_path: Path, toolchain_root: Path) -> None:
    config = BuildConfig(
        target="x86-64-linux",
        features=("avx2",),
        generator_name="blur",
        run_args=("input.type=float32",),
    )
    spec = _spec(tmp_path, toolchain_root, (tmp_path / "k.cpp",), config)
    executable = GeneratorExecutable(kernel="k", path=spec.generator_path, command=())

    assert generator_command(executable, spec) == (
        str(spec.generator_path),
        "-g",
        "blur",
        "-f",
        "k",
        "-n",
        "libk",
        "-o",
        str(tmp_path / "out"),
        "-e",
        "static_library,h",
        "target=x86-64-linux-avx2",
        "input.type=float32",
    )


def test_generator_command_without_harness_passes_only_run_args(
    tmp_path: Path, toolchain_root: Path
) -> None:
    config = BuildConfig(use_harness=False, run_args=("--out", "libk.a"))
    spec = _spec(tmp_path, toolchain_root, (tmp_path / "k.cpp",), config)
    executable = GeneratorExecutable(kernel="k", path=spec.generator_path, command=())

    assert generator_command(executable, spec) == (str(spec.generator_path), "--out", "libk.a")


def test_missing_compiler_raises_invocation_failed(
    tmp_path: Path, toolchain_root: Path, source: Path
) -> None:
    config = BuildConfig(cxx=str(tmp_path / "no-such-c++"))
    spec = _spec(tmp_path, toolchain_root, (source,), config)

    with pytest.raises(CompilerInvocationFailed) as excinfo:
        compile_generator(spec)
    assert excinfo.value.returncode is None
    assert excinfo.value.command[0] == str(tmp_path / "no-such-c++")


def test_non_executable_compiler_raises_invocation_failed(
    tmp_path: Path, toolchain_root: Path, source: Path
) -> None:
    compiler = tmp_path / "c++"
    compiler.write_text("#!/bin/sh\n", encoding="utf-8")
    compiler.chmod(0o644)
    spec = _spec(tmp_path, toolchain_root, (source,), BuildConfig(cxx=str(compiler)))

    with pytest.raises(CompilerInvocationFailed):
        compile_generator(spec)


def test_compilation_failure_surfaces_output(
    tmp_path: Path, toolchain_root: Path, fake_tools: FakeTools, source: Path
) -> None:
    source.write_text("#error nope\n", encoding="utf-8")
    spec = _spec(tmp_path, toolchain_root, (source,), BuildConfig(cxx=str(fake_tools.cxx)))

    with pytest.raises(CompilationFailed) as excinfo:
        compile_generator(spec)
    assert excinfo.value.returncode == 1
    assert "error: boom" in excinfo.value.stderr


def test_compile_then_run_produces_artifact(
    tmp_path: Path, toolchain_root: Path, fake_tools: FakeTools, source: Path
) -> None:
    spec = _spec(tmp_path, toolchain_root, (source,), BuildConfig(cxx=str(fake_tools.cxx)))

    executable = compile_generator(spec)
    artifact = run_generator(executable, spec)

    assert executable.path == tmp_path / "out" / "k.generator"
    assert artifact.path == tmp_path / "out" / "libk.a"
    assert artifact.header_path is not None and artifact.header_path.is_file()
    assert artifact.target == "host"
    assert artifact.path.read_text(encoding="utf-8").startswith("target=host\n")


def test_generator_exit_code_raises_execution_failed(
    tmp_path: Path, toolchain_root: Path, fake_tools: FakeTools, source: Path
) -> None:
    source.write_text("FAIL_RUN\n", encoding="utf-8")
    spec = _spec(tmp_path, toolchain_root, (source,), BuildConfig(cxx=str(fake_tools.cxx)))
    executable = compile_generator(spec)

    with pytest.raises(GeneratorExecutionFailed) as excinfo:
        run_generator(executable, spec)
    assert excinfo.value.returncode == 3
    assert excinfo.value.stderr == "generator: unknown parameter\n"


def test_generator_without_output_raises_artifact_not_produced(
    tmp_path: Path, toolchain_root: Path, fake_tools: FakeTools, source: Path
) -> None:
    spec = _spec(tmp_path, toolchain_root, (source,), BuildConfig(cxx=str(fake_tools.cxx)))
    executable = compile_generator(spec)
    run_generator(executable, spec)

    source.write_text("NO_OUTPUT\n", encoding="utf-8")
    executable = compile_generator(spec)
    with pytest.raises(ArtifactNotProduced) as excinfo:
        run_generator(executable, spec)
    assert excinfo.value.context["expected"] == str(tmp_path / "out" / "libk.a")
    assert not (tmp_path / "out" / "libk.a").exists()


def test_missing_generator_raises_execution_failed(tmp_path: Path, toolchain_root: Path) -> None:
    spec = _spec(tmp_path, toolchain_root, (tmp_path / "k.cpp",), BuildConfig())
    executable = GeneratorExecutable(kernel="k", path=tmp_path / "out" / "k.generator", command=())

    with pytest.raises(GeneratorExecutionFailed) as excinfo:
        run_generator(executable, spec)
    assert excinfo.value.returncode is None


def test_compile_shared_library_invokes_compiler(tmp_path: Path) -> None:
    log = tmp_path / "shared.log"
    compiler = write_script(
        tmp_path / "bin" / "c++",
        f'#!/bin/sh\necho "$@" > "{log}"\n',
    )

    output = compile_shared_library(tmp_path / "out" / "libk.so", [tmp_path / "k.o"], compiler=str(compiler))

    assert output == tmp_path / "out" / "libk.so"
    assert log.read_text(encoding="utf-8").split() == [
        "-std=c++17",
        "-shared",
        "-o",
        str(tmp_path / "out" / "libk.so"),
        str(tmp_path / "k.o"),
    ]


def test_compile_shared_library_failure(tmp_path: Path) -> None:
    compiler = write_script(tmp_path / "bin" / "c++", "#!/bin/sh\necho 'ld: bad' >&2\nexit 1\n")

    with pytest.raises(CompilationFailed) as excinfo:
        compile_shared_library(tmp_path / "libk.so", ["k.o"], compiler=str(compiler))
    assert excinfo.value.stderr == "ld: bad\n"
