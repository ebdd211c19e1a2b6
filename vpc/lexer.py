from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import MalformedNumber, UnexpectedCharacter


# Token kinds
IDENTIFIER = "IDENTIFIER"
NUMBER = "NUMBER"
PLUS = "PLUS"
MINUS = "MINUS"
MULTIPLY = "MULTIPLY"
DIVIDE = "DIVIDE"
ASSIGN = "ASSIGN"
PRINT = "PRINT"
IF = "IF"
ELSE = "ELSE"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
LBRACE = "LBRACE"
RBRACE = "RBRACE"
SEMICOLON = "SEMICOLON"
EOF = "EOF"

KEYWORDS = {
    "print": PRINT,
    "if": IF,
    "else": ELSE,
}


# Terminals only; the grammar itself is parsed by hand in parser.py.
# Identifiers are letters followed by letters/digits (no underscore), numerals
# are a digit followed by digits and dots. Keywords are matched as IDENTIFIER
# and retyped in Lexer._convert.
TERMINALS = r"""
start: (IDENTIFIER | NUMBER | PLUS | MINUS | MULTIPLY | DIVIDE | ASSIGN
       | LPAREN | RPAREN | LBRACE | RBRACE | SEMICOLON)*

IDENTIFIER: /[^\W\d_][^\W_]*/
NUMBER: /\d[\d.]*/
PLUS: "+"
MINUS: "-"
MULTIPLY: "*"
DIVIDE: "/"
ASSIGN: "="
LPAREN: "("
RPAREN: ")"
LBRACE: "{"
RBRACE: "}"
SEMICOLON: ";"

WS: /\s+/
%ignore WS
"""

_lark = Lark(TERMINALS, parser=None, lexer="basic")


@dataclass(frozen=True)
class Token:
    kind: str
    value: Any = None
    # Source position (1-based), diagnostics only
    line: Optional[int] = field(default=None, compare=False)
    column: Optional[int] = field(default=None, compare=False)

    def __repr__(self):
        if self.value is not None:
            return f"{self.kind}({self.value!r})"
        return self.kind


class Lexer:
    """Lazy tokenizer over a source string.

    ``next_token()`` returns one token per call and keeps returning ``EOF``
    once the input is exhausted.
    """

    def __init__(self, text: str):
        self.text = text
        self._stream = _lark.lex(text)
        self._exhausted = False

    def next_token(self) -> Token:
        if self._exhausted:
            return self._eof()
        try:
            tok = next(self._stream)
        except StopIteration:
            self._exhausted = True
            return self._eof()
        except UnexpectedCharacters as e:
            raise UnexpectedCharacter(e.char, e.line, e.column) from e
        return self._convert(tok)

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            yield tok
            if tok.kind == EOF:
                return

    def _convert(self, tok) -> Token:
        text = str(tok)
        if tok.type == IDENTIFIER:
            kind = KEYWORDS.get(text)
            if kind is not None:
                return Token(kind, line=tok.line, column=tok.column)
            return Token(IDENTIFIER, text, tok.line, tok.column)
        if tok.type == NUMBER:
            try:
                value = float(text)
            except ValueError:
                raise MalformedNumber(text, tok.line, tok.column) from None
            return Token(NUMBER, value, tok.line, tok.column)
        return Token(tok.type, line=tok.line, column=tok.column)

    def _eof(self) -> Token:
        line = self.text.count("\n") + 1
        column = len(self.text) - (self.text.rfind("\n") + 1) + 1
        return Token(EOF, line=line, column=column)


def tokenize(text: str):
    """Return the full token list for ``text``, ending with a single EOF."""
    return list(Lexer(text))
