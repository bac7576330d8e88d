from pathlib import Path

import pytest

from halide_build import ValidationError, write_generator_template
from halide_build.scaffold import render_generator


def test_render_generator_registers_named_class() -> None:
    content = render_generator("box_blur")

    assert "class BoxBlur : public Generator<BoxBlur>" in content
    assert "HALIDE_REGISTER_GENERATOR(BoxBlur, box_blur)" in content
    assert "#include <Halide.h>" in content


def test_write_generator_template_derives_name_from_path(tmp_path: Path) -> None:
    path = write_generator_template(tmp_path / "gen" / "my-filter.cpp")

    assert path.is_file()
    assert "HALIDE_REGISTER_GENERATOR(MyFilter, my_filter)" in path.read_text(encoding="utf-8")


def test_write_generator_template_refuses_overwrite(tmp_path: Path) -> None:
    existing = tmp_path / "k.cpp"
    existing.write_text("// mine\n", encoding="utf-8")

    with pytest.raises(ValidationError):
        write_generator_template(existing)
    assert existing.read_text(encoding="utf-8") == "// mine\n"


def test_invalid_generator_name(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        write_generator_template(tmp_path / "k.cpp", name="9lives")
