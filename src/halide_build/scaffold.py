"""Starter generator sources."""

from __future__ import annotations

import re
from pathlib import Path

from halide_build.errors import ValidationError

GENERATOR_TEMPLATE = """\
#include <Halide.h>
using namespace Halide;

class {class_name} : public Generator<{class_name}> {{
public:
    Var x, y, c;
    Input<Buffer<float, 3>> input{{"input"}};
    Output<Buffer<float, 3>> output{{"output"}};

    void generate() {{
        output(x, y, c) = input(x, y, c);
    }}

    void schedule() {{
    }}
}};

HALIDE_REGISTER_GENERATOR({class_name}, {name})
"""


def render_generator(name: str) -> str:
    if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", name):
        raise ValidationError("Generator names must be valid C identifiers.", context={"name": name})
    class_name = "".join(part.capitalize() for part in name.split("_") if part) or "Filter"
    return GENERATOR_TEMPLATE.format(class_name=class_name, name=name)


def write_generator_template(path: str | Path, *, name: str | None = None) -> Path:
    destination = Path(path)
    if destination.exists():
        raise ValidationError(
            "Refusing to overwrite an existing file.",
            context={"path": str(destination)},
        )
    generator_name = name or re.sub(r"[^A-Za-z0-9_]", "_", destination.stem)
    content = render_generator(generator_name)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(content, encoding="utf-8")
    return destination
