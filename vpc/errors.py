"""Compile-time error taxonomy for the Viper compiler."""


class CompileError(Exception):
    """Base class for every error that aborts a compilation."""
    stage = "compile"


def _where(line, column):
    if line is None:
        return ""
    return f" at line {line}, column {column}"


class LexError(CompileError):
    stage = "lex"


class UnexpectedCharacter(LexError):
    def __init__(self, char: str, line=None, column=None):
        self.char = char
        self.line = line
        self.column = column
        super().__init__(f"Unexpected character '{char}'{_where(line, column)}")


class MalformedNumber(LexError):
    def __init__(self, text: str, line=None, column=None):
        self.text = text
        self.line = line
        self.column = column
        super().__init__(f"Malformed number '{text}'{_where(line, column)}")


class ParseError(CompileError):
    stage = "parse"


class UnexpectedToken(ParseError):
    """Raised when the current token does not match what the grammar requires.

    ``expected`` is a single token kind or a tuple of acceptable kinds.
    """

    def __init__(self, found, expected):
        self.found = found
        self.expected = expected
        if isinstance(expected, tuple):
            wanted = " or ".join(expected)
        else:
            wanted = expected
        super().__init__(
            f"Unexpected token {found!r}, expected {wanted}{_where(found.line, found.column)}"
        )


class UnexpectedStatement(ParseError):
    def __init__(self, found):
        self.found = found
        super().__init__(
            f"Unexpected token {found!r} at start of statement{_where(found.line, found.column)}"
        )


class CodegenError(CompileError):
    """Internal consistency failure in the code generator."""
    stage = "codegen"


class UnsupportedOperator(CodegenError):
    def __init__(self, op):
        self.op = op
        super().__init__(f"Unsupported operator {op!r}")
