"""
Reference term language used by proof sessions.

Terms are applications of namespace symbols; concrete syntax supports
function application ``f(a, b)``, infix logical/arithmetic operators,
integer literals and ``@label`` abbreviation references.

Usage:
    from core.logic import Namespace, LogicCodec

    ns = Namespace.standard("proof-1", {"x": 0, "f": 1})
    codec = LogicCodec(ns)
    term = codec.parse("f(x) + 1 > 0")
    codec.print(term)  # "f(x) + 1 > 0"
"""

from .terms import Namespace, Symbol, Term
from .parser import TermParser, parse_term
from .printer import TermPrinter, print_term
from .codec import LogicCodec

__all__ = [
    "Namespace",
    "Symbol",
    "Term",
    "TermParser",
    "TermPrinter",
    "parse_term",
    "print_term",
    "LogicCodec",
]
