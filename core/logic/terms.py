"""
Terms and namespaces of the reference term language.

A Symbol belongs to exactly one Namespace and compares by identity, so two
proofs that both declare ``f`` still hold different ``f`` symbols. Terms
built from them are therefore not interchangeable, which is why abbreviation
transfer goes through print and reparse.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from .syntax import BINARY_OPERATORS, UNARY_OPERATORS


@dataclass(frozen=True, eq=False)
class Symbol:
    """Function or constant symbol (constant when arity is 0)."""

    name: str
    arity: int = 0
    namespace: str = ""

    def __repr__(self):
        return f"<Symbol {self.name}/{self.arity} in {self.namespace!r}>"


@dataclass(frozen=True)
class Term:
    """Application of ``op`` to ``args``."""

    op: Symbol
    args: Tuple["Term", ...] = ()

    def __post_init__(self):
        if len(self.args) != self.op.arity:
            raise ValueError(
                f"{self.op.name} expects {self.op.arity} arguments, got {len(self.args)}"
            )

    def __repr__(self):
        if not self.args:
            return f"Term({self.op.name})"
        inner = ", ".join(repr(a) for a in self.args)
        return f"Term({self.op.name}: {inner})"


class Namespace:
    """Symbol table of one proof.

    Usage::

        ns = Namespace.standard("proof-1", {"x": 0, "f": 1})
        f = ns.lookup("f")
    """

    def __init__(self, name: str = "default", declarations: Optional[Mapping[str, int]] = None):
        self.name = name
        self._symbols: Dict[str, Symbol] = {}
        for symbol_name, arity in (declarations or {}).items():
            self.declare(symbol_name, arity)

    @classmethod
    def standard(cls, name: str = "default", declarations: Optional[Mapping[str, int]] = None) -> "Namespace":
        """Namespace with the logical and arithmetic operators predeclared."""
        ns = cls(name)
        ns.declare("true", 0)
        ns.declare("false", 0)
        for op_name, _, _ in BINARY_OPERATORS.values():
            ns.declare(op_name, 2)
        for op_name, _ in UNARY_OPERATORS.values():
            ns.declare(op_name, 1)
        for symbol_name, arity in (declarations or {}).items():
            ns.declare(symbol_name, arity)
        return ns

    def declare(self, name: str, arity: int = 0) -> Symbol:
        """Declare ``name``; redeclaring with the same arity returns the existing symbol."""
        if arity < 0:
            raise ValueError(f"Negative arity for {name}")
        existing = self._symbols.get(name)
        if existing is not None:
            if existing.arity != arity:
                raise ValueError(
                    f"{name} is already declared with arity {existing.arity}"
                )
            return existing
        symbol = Symbol(name=name, arity=arity, namespace=self.name)
        self._symbols[name] = symbol
        return symbol

    def lookup(self, name: str) -> Optional[Symbol]:
        return self._symbols.get(name)

    def number(self, digits: str) -> Symbol:
        """Integer literals are constants declared on first use."""
        return self.declare(digits, 0)

    def __contains__(self, name: str) -> bool:
        return name in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def __repr__(self):
        return f"<Namespace {self.name} ({len(self)} symbols)>"
