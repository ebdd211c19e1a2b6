"""Recursive-descent parser for Viper source.

Grammar (one token of lookahead):

    program     := statement*
    statement   := (if_stmt | print_stmt | assignment) ';'?
    if_stmt     := 'if' '(' comparison ')' '{' block '}' ('else' '{' block '}')?
    block       := statement*
    print_stmt  := 'print' '(' comparison ')'
    assignment  := IDENTIFIER '=' expression
    comparison  := expression ('=' '=' expression)?
    expression  := term (('+' | '-' | '*' | '/') term)*
    term        := NUMBER | IDENTIFIER

The four arithmetic operators share one precedence level and associate
left to right, so ``2 + 3 * 4`` is ``(2 + 3) * 4``. The lexer has no ``==``
token; equality is two ASSIGN tokens in a row.
"""
from typing import List, Any

from . import ast
from . import lexer as lx
from .errors import UnexpectedStatement, UnexpectedToken
from .lexer import Lexer, Token


ARITH_TOKENS = {
    lx.PLUS: '+',
    lx.MINUS: '-',
    lx.MULTIPLY: '*',
    lx.DIVIDE: '/',
}


class Parser:
    def __init__(self, lexer: Lexer):
        self.lexer = lexer
        self.current_token: Token = lexer.next_token()

    def eat(self, kind: str) -> Token:
        """Consume the current token if it is of ``kind``, else raise UnexpectedToken."""
        tok = self.current_token
        if tok.kind != kind:
            raise UnexpectedToken(tok, kind)
        self.current_token = self.lexer.next_token()
        return tok

    def parse(self) -> List[Any]:
        statements = []
        while self.current_token.kind != lx.EOF:
            statements.append(self.parse_statement())
        return statements

    def parse_statement(self):
        kind = self.current_token.kind
        if kind == lx.IF:
            stmt = self.parse_if()
        elif kind == lx.PRINT:
            stmt = self.parse_print()
        elif kind == lx.IDENTIFIER:
            stmt = self.parse_assignment()
        else:
            raise UnexpectedStatement(self.current_token)
        if self.current_token.kind == lx.SEMICOLON:
            self.eat(lx.SEMICOLON)
        return stmt

    def parse_block(self) -> List[Any]:
        """Statements up to and including the closing brace."""
        self.eat(lx.LBRACE)
        body = []
        while self.current_token.kind not in (lx.RBRACE, lx.EOF):
            body.append(self.parse_statement())
        self.eat(lx.RBRACE)
        return body

    def parse_if(self) -> ast.If:
        self.eat(lx.IF)
        self.eat(lx.LPAREN)
        condition = self.parse_comparison()
        self.eat(lx.RPAREN)
        then_branch = self.parse_block()
        else_branch = []
        if self.current_token.kind == lx.ELSE:
            self.eat(lx.ELSE)
            else_branch = self.parse_block()
        return ast.If(condition=condition, then_branch=then_branch, else_branch=else_branch)

    def parse_print(self) -> ast.Print:
        self.eat(lx.PRINT)
        self.eat(lx.LPAREN)
        expression = self.parse_comparison()
        self.eat(lx.RPAREN)
        return ast.Print(expression=expression)

    def parse_assignment(self) -> ast.Assignment:
        name = self.eat(lx.IDENTIFIER).value
        self.eat(lx.ASSIGN)
        value = self.parse_expression()
        return ast.Assignment(variable=name, value=value)

    def parse_comparison(self):
        left = self.parse_expression()
        if self.current_token.kind == lx.ASSIGN:
            self.eat(lx.ASSIGN)
            self.eat(lx.ASSIGN)
            right = self.parse_expression()
            return ast.BinaryOp(left=left, operator='==', right=right)
        return left

    def parse_expression(self):
        left = self.parse_term()
        while self.current_token.kind in ARITH_TOKENS:
            op = ARITH_TOKENS[self.current_token.kind]
            self.eat(self.current_token.kind)
            right = self.parse_term()
            left = ast.BinaryOp(left=left, operator=op, right=right)
        return left

    def parse_term(self):
        tok = self.current_token
        if tok.kind == lx.NUMBER:
            self.eat(lx.NUMBER)
            return ast.Number(tok.value)
        if tok.kind == lx.IDENTIFIER:
            self.eat(lx.IDENTIFIER)
            return ast.Variable(tok.value)
        raise UnexpectedToken(tok, (lx.NUMBER, lx.IDENTIFIER))


def parse(text: str) -> List[Any]:
    """Parse Viper source text into a list of top-level statements."""
    return Parser(Lexer(text)).parse()
