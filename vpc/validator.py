"""Semantic validation for Viper programs."""
import re

from . import ast
from .codegen import INT64_MAX, INT64_MIN, RUNTIME_SYMBOLS, to_int64
from .errors import CompileError


class ValidationError(CompileError):
    """Exception raised for validation errors."""
    stage = "validate"


# Variable slots are emitted as $name, which NASM never reads as a register
# or mnemonic, but $buffer is still the same symbol as buffer.
GENERATED_LABEL = re.compile(r"^(else|end_if)\d+$")


class Validator:
    """Validates a parsed program before code generation."""

    def __init__(self, program, entry_symbol="_start"):
        self.program = program
        self.entry_symbol = entry_symbol
        self.errors = []
        self.warnings = []
        self.assigned = ast.collect_variables(program)

    def validate(self):
        """Run all validation checks on the program."""
        for name in self.assigned:
            self._check_name(name)

        reported = set()
        for stmt in self.program:
            for expr in ast.iter_expressions(stmt):
                if isinstance(expr, ast.Variable):
                    if expr.name not in self.assigned and expr.name not in reported:
                        reported.add(expr.name)
                        self.errors.append(f"Variable '{expr.name}' is used but never assigned")
                elif isinstance(expr, ast.Number):
                    if not INT64_MIN <= expr.value <= INT64_MAX:
                        self.warnings.append(
                            f"Numeric literal {expr.value} out of 64-bit range, saturated to {to_int64(expr.value)}"
                        )
                    elif expr.value != int(expr.value):
                        self.warnings.append(
                            f"Numeric literal {expr.value} truncated to {to_int64(expr.value)}"
                        )
                elif isinstance(expr, ast.BinaryOp):
                    if expr.operator == '/' and isinstance(expr.right, ast.Number) \
                            and to_int64(expr.right.value) == 0:
                        self.warnings.append("Division by constant zero will fail at run time")

        if self.errors:
            error_msg = "\n".join(self.errors)
            raise ValidationError(f"Validation failed:\n{error_msg}")

        return self.warnings

    def _check_name(self, name):
        if name in RUNTIME_SYMBOLS or name == self.entry_symbol:
            self.errors.append(f"Variable '{name}' clashes with a runtime symbol")
        elif GENERATED_LABEL.match(name):
            self.errors.append(f"Variable '{name}' clashes with a generated label")
