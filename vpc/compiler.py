"""Top-level compile entry point: source text in, assembly text out."""
from dataclasses import dataclass, field
from typing import List

from . import ast, codegen, parser, validator


@dataclass
class CompileResult:
    asm: str
    variables: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def compile_source(text: str, entry_symbol: str = "_start", div_zero_guard: bool = True,
                   validate: bool = True) -> CompileResult:
    """Compile Viper source to NASM text.

    Raises a CompileError subclass from whichever stage fails; nothing is
    returned unless every stage succeeded.
    """
    program = parser.parse(text)

    warnings = []
    if validate:
        warnings = validator.Validator(program, entry_symbol=entry_symbol).validate()

    variables = ast.collect_variables(program)
    cg = codegen.CodeGen(entry_symbol=entry_symbol, div_zero_guard=div_zero_guard)
    asm = cg.gen(program, variables)
    return CompileResult(asm=asm, variables=variables, warnings=warnings)
