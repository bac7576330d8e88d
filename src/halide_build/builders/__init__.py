"""Generator pipeline stages."""

from .base import GeneratorSpec
from .compile import compile_command, compile_generator
from .run import generator_command, run_generator
from .shared import compile_shared_library

__all__ = [
    "GeneratorSpec",
    "compile_command",
    "compile_generator",
    "compile_shared_library",
    "generator_command",
    "run_generator",
]
