"""Shared test fixtures: a fake Halide toolchain and fake compiler/generator tools."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

from halide_build import BuildConfig, BuildContext

FAKE_CXX = """\
#!__PYTHON__
import shutil
import sys
from pathlib import Path

LOG = Path(__LOG__)
TEMPLATE = Path(__TEMPLATE__)
argv = sys.argv[1:]
with LOG.open("a", encoding="utf-8") as handle:
    handle.write("compile " + " ".join(argv) + "\\n")
output = Path(argv[argv.index("-o") + 1])
sources = [Path(a) for a in argv if a.endswith(".cpp") and Path(a).name != "GenGen.cpp"]
body = "".join(source.read_text(encoding="utf-8") for source in sources)
if "#error" in body:
    print("compiling " + " ".join(str(s) for s in sources))
    print("k.cpp:1:2: error: boom", file=sys.stderr)
    sys.exit(1)
shutil.copyfile(TEMPLATE, output)
output.chmod(0o755)
Path(str(output) + ".body").write_text(body, encoding="utf-8")
"""

FAKE_GENERATOR = """\
#!__PYTHON__
import os
import sys
from pathlib import Path

LOG = Path(__LOG__)
argv = sys.argv[1:]
with LOG.open("a", encoding="utf-8") as handle:
    handle.write("generate " + " ".join(argv) + "\\n")
    handle.write("libpath " + os.environ.get("LD_LIBRARY_PATH", "") + "\\n")
body = Path(sys.argv[0] + ".body").read_text(encoding="utf-8")
if "FAIL_RUN" in body:
    print("generator: unknown parameter", file=sys.stderr)
    sys.exit(3)
if "NO_OUTPUT" in body:
    sys.exit(0)
out = Path(argv[argv.index("-o") + 1])
name = argv[argv.index("-n") + 1]
emit = argv[argv.index("-e") + 1].split(",")
target = next(a for a in argv if a.startswith("target="))
for kind, suffix in (("static_library", ".a"), ("object", ".o")):
    if kind in emit:
        (out / (name + suffix)).write_text(target + "\\n" + body, encoding="utf-8")
if "h" in emit:
    (out / (name + ".h")).write_text("// generated header\\n", encoding="utf-8")
"""


@dataclass(frozen=True)
class FakeTools:
    cxx: Path
    log: Path

    def calls(self, kind: str) -> list[str]:
        if not self.log.exists():
            return []
        prefix = f"{kind} "
        return [
            line[len(prefix) :]
            for line in self.log.read_text(encoding="utf-8").splitlines()
            if line.startswith(prefix)
        ]


def write_script(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    path.chmod(0o755)
    return path


@pytest.fixture
def toolchain_root(tmp_path: Path) -> Path:
    root = tmp_path / "halide"
    (root / "include").mkdir(parents=True)
    (root / "include" / "Halide.h").write_text("// Halide\n", encoding="utf-8")
    (root / "lib").mkdir()
    (root / "lib" / "libHalide.a").write_bytes(b"!<arch>\n")
    (root / "tools").mkdir()
    (root / "tools" / "GenGen.cpp").write_text("// harness\n", encoding="utf-8")
    return root


@pytest.fixture
def fake_tools(tmp_path: Path) -> FakeTools:
    bin_dir = tmp_path / "bin"
    log = tmp_path / "tools.log"
    generator = write_script(
        bin_dir / "generator-template",
        FAKE_GENERATOR.replace("__PYTHON__", sys.executable).replace("__LOG__", repr(str(log))),
    )
    cxx = write_script(
        bin_dir / "fake-c++",
        FAKE_CXX.replace("__PYTHON__", sys.executable)
        .replace("__LOG__", repr(str(log)))
        .replace("__TEMPLATE__", repr(str(generator))),
    )
    return FakeTools(cxx=cxx, log=log)


@pytest.fixture
def source(tmp_path: Path) -> Path:
    path = tmp_path / "src" / "k.cpp"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("// kernel k v1\n", encoding="utf-8")
    return path


@pytest.fixture
def context(tmp_path: Path, toolchain_root: Path, fake_tools: FakeTools, source: Path) -> BuildContext:
    ctx = BuildContext(
        toolchain_root,
        tmp_path / "out",
        config=BuildConfig(cxx=str(fake_tools.cxx)),
    )
    ctx.source_file(source)
    return ctx
