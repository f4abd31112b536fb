"""Parser for the expression syntax used in declaration manifests.

Grammar::

    expr := term ("+" expr)?
    term := STRING | NAME | "@" NAME | "(" expr ")"
    clause := NAME "(" [expr ("," expr)*] ")" ["as" NAME]

``+`` is right-associative string concatenation. Strings use single or
double quotes with backslash escapes.
"""

from __future__ import annotations

import re

from autobox.errors import ExpressionSyntaxError
from autobox.ir.expressions import Concat, EffectOutput, Expression, Literal, Variable

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
  | (?P<output>@[A-Za-z_][A-Za-z0-9_]*)
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<plus>\+)
  | (?P<lparen>\()
  | (?P<rparen>\))
  | (?P<comma>,)
  | (?P<operator>[-*/%<>=!&|^~.:;?])
    """,
    re.VERBOSE,
)

_ESCAPE_RE = re.compile(r"\\(.)")

# (kind, text, position)
Token = tuple[str, str, int]


def tokenize(text: str) -> list[Token]:
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise ExpressionSyntaxError(text, pos, f"unexpected character {text[pos]!r}")
        kind = m.lastgroup or ""
        if kind == "operator":
            raise ExpressionSyntaxError(
                text, pos, f"unsupported operator {m.group()!r} (only '+' is supported)",
            )
        if kind != "ws":
            tokens.append((kind, m.group(), pos))
        pos = m.end()
    return tokens


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0

    def peek(self) -> Token | None:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def take(self) -> Token:
        tok = self.peek()
        if tok is None:
            raise ExpressionSyntaxError(self.text, len(self.text), "unexpected end of expression")
        self.index += 1
        return tok

    def parse(self) -> Expression:
        expr = self.expr()
        tok = self.peek()
        if tok is not None:
            raise ExpressionSyntaxError(self.text, tok[2], f"unexpected {tok[1]!r}")
        return expr

    def expr(self) -> Expression:
        left = self.term()
        tok = self.peek()
        if tok is not None and tok[0] == "plus":
            self.index += 1
            return Concat(left, self.expr())
        return left

    def term(self) -> Expression:
        kind, value, pos = self.take()
        if kind == "string":
            return Literal(_ESCAPE_RE.sub(r"\1", value[1:-1]))
        if kind == "name":
            return Variable(value)
        if kind == "output":
            return EffectOutput(value[1:])
        if kind == "lparen":
            inner = self.expr()
            closing = self.take()
            if closing[0] != "rparen":
                raise ExpressionSyntaxError(self.text, closing[2], "expected ')'")
            return inner
        raise ExpressionSyntaxError(self.text, pos, f"unexpected {value!r}")


def parse_expression(text: str) -> Expression:
    """Parse an expression string into an Expression tree.

    Raises:
        ExpressionSyntaxError: on malformed input or unsupported operators.
    """
    return _Parser(text).parse()


def parse_effect_clause(text: str) -> tuple[str, tuple[Expression, ...], str | None]:
    """Parse ``label(arg, ...) [as binding]`` into its three parts.

    Example: ``read_file(F + '/' + T) as O``.
    """
    parser = _Parser(text)
    kind, label, pos = parser.take()
    if kind != "name":
        raise ExpressionSyntaxError(text, pos, "expected effect label")
    kind, value, pos = parser.take()
    if kind != "lparen":
        raise ExpressionSyntaxError(text, pos, "expected '(' after effect label")

    arguments: list[Expression] = []
    tok = parser.peek()
    if tok is not None and tok[0] == "rparen":
        parser.index += 1
    else:
        while True:
            arguments.append(parser.expr())
            kind, value, pos = parser.take()
            if kind == "rparen":
                break
            if kind != "comma":
                raise ExpressionSyntaxError(text, pos, "expected ',' or ')'")

    binding = None
    tok = parser.peek()
    if tok is not None:
        if tok[0] != "name" or tok[1] != "as":
            raise ExpressionSyntaxError(text, tok[2], f"unexpected {tok[1]!r}")
        parser.index += 1
        kind, binding, pos = parser.take()
        if kind != "name":
            raise ExpressionSyntaxError(text, pos, "expected binding name after 'as'")
        tok = parser.peek()
        if tok is not None:
            raise ExpressionSyntaxError(text, tok[2], f"unexpected {tok[1]!r}")
    return label, tuple(arguments), binding
