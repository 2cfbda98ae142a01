"""
Parser for the reference term language.

    term     := unary (binop unary)*          precedence climbing
    unary    := "!" unary | primary
    primary  := number | "@" label | ident [ "(" term ("," term)* ")" ] | "(" term ")"

Identifiers must be declared in the namespace. ``@label`` resolves to the
term the proof's abbreviation map binds to ``label``.
"""
import re
from dataclasses import dataclass
from typing import List, Optional

from core.abbrev.exceptions import ParseError

from .syntax import ABBREV_PREFIX, BINARY_OPERATORS, UNARY_OPERATORS
from .terms import Namespace, Term

TOKEN_PATTERN = re.compile(r"""
    (?P<space>\s+)
  | (?P<number>\d+)
  | (?P<abbrev>@\w+)
  | (?P<ident>[A-Za-z_][\w.]*)
  | (?P<op>->|<=|>=|[|&=<>+\-*!])
  | (?P<punct>[(),])
""", re.VERBOSE)


@dataclass
class Token:
    kind: str
    text: str
    position: int


def tokenize(text: str) -> List[Token]:
    tokens = []
    pos = 0
    while pos < len(text):
        match = TOKEN_PATTERN.match(text, pos)
        if not match:
            raise ParseError(f"Unexpected character {text[pos]!r}", text, pos)
        kind = match.lastgroup
        if kind != "space":
            tokens.append(Token(kind, match.group(), pos))
        pos = match.end()
    return tokens


class TermParser:
    """Parses term text under one namespace.

    Args:
        namespace: Symbols the text may use
        abbreviations: Optional map resolving ``@label`` references
    """

    def __init__(self, namespace: Namespace, abbreviations=None):
        self.namespace = namespace
        self.abbreviations = abbreviations
        self._text = ""
        self._tokens: List[Token] = []
        self._index = 0

    def parse(self, text: str) -> Term:
        self._text = text
        self._tokens = tokenize(text)
        self._index = 0
        if not self._tokens:
            raise ParseError("Empty term", text, 0)
        try:
            term = self._parse_expression(0)
        except RecursionError:
            failed_at = self._tokens[min(self._index, len(self._tokens) - 1)]
            raise ParseError("Term nested too deeply", text, failed_at.position) from None
        leftover = self._peek()
        if leftover is not None:
            raise ParseError(f"Unexpected {leftover.text!r}", text, leftover.position)
        return term

    # --- Token stream ---

    def _peek(self) -> Optional[Token]:
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

    def _advance(self) -> Token:
        token = self._peek()
        if token is None:
            raise ParseError("Unexpected end of input", self._text, len(self._text))
        self._index += 1
        return token

    def _expect(self, text: str) -> Token:
        token = self._advance()
        if token.text != text:
            raise ParseError(f"Expected {text!r}, got {token.text!r}", self._text, token.position)
        return token

    # --- Grammar ---

    def _parse_expression(self, min_prec: int) -> Term:
        left = self._parse_unary()
        while True:
            token = self._peek()
            if token is None or token.kind != "op" or token.text not in BINARY_OPERATORS:
                return left
            name, prec, assoc = BINARY_OPERATORS[token.text]
            if prec < min_prec:
                return left
            self._advance()
            right = self._parse_expression(prec if assoc == "right" else prec + 1)
            left = self._apply(name, (left, right), token)
            if assoc == "none":
                following = self._peek()
                if (following is not None and following.text in BINARY_OPERATORS
                        and BINARY_OPERATORS[following.text][1] == prec):
                    raise ParseError(
                        f"Operator {following.text!r} is not associative",
                        self._text, following.position,
                    )

    def _parse_unary(self) -> Term:
        token = self._peek()
        if token is not None and token.kind == "op" and token.text in UNARY_OPERATORS:
            self._advance()
            name, _ = UNARY_OPERATORS[token.text]
            return self._apply(name, (self._parse_unary(),), token)
        return self._parse_primary()

    def _parse_primary(self) -> Term:
        token = self._advance()

        if token.kind == "number":
            return Term(self.namespace.number(token.text))

        if token.kind == "abbrev":
            return self._resolve_abbreviation(token)

        if token.kind == "ident":
            return self._parse_application(token)

        if token.text == "(":
            term = self._parse_expression(0)
            self._expect(")")
            return term

        raise ParseError(f"Unexpected {token.text!r}", self._text, token.position)

    def _parse_application(self, token: Token) -> Term:
        symbol = self.namespace.lookup(token.text)
        if symbol is None:
            raise ParseError(f"Unknown symbol {token.text!r}", self._text, token.position)

        args = []
        following = self._peek()
        if following is not None and following.text == "(":
            self._advance()
            args.append(self._parse_expression(0))
            while self._peek() is not None and self._peek().text == ",":
                self._advance()
                args.append(self._parse_expression(0))
            self._expect(")")

        if len(args) != symbol.arity:
            raise ParseError(
                f"{symbol.name} expects {symbol.arity} arguments, got {len(args)}",
                self._text, token.position,
            )
        return Term(symbol, tuple(args))

    def _resolve_abbreviation(self, token: Token) -> Term:
        label = token.text[len(ABBREV_PREFIX):]
        term = self.abbreviations.get_term(label) if self.abbreviations is not None else None
        if term is None:
            raise ParseError(f"Unknown abbreviation {token.text!r}", self._text, token.position)
        return term

    def _apply(self, name: str, args, token: Token) -> Term:
        symbol = self.namespace.lookup(name)
        if symbol is None or symbol.arity != len(args):
            raise ParseError(
                f"Operator {token.text!r} is not available in namespace {self.namespace.name!r}",
                self._text, token.position,
            )
        return Term(symbol, tuple(args))


def parse_term(text: str, namespace: Namespace, abbreviations=None) -> Term:
    """Parse ``text`` under ``namespace`` (convenience function)"""
    return TermParser(namespace, abbreviations).parse(text)
