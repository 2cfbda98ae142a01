"""
TermCodec implementation for the reference term language.
"""
from core.abbrev.codec import TermCodec

from .parser import TermParser
from .printer import TermPrinter
from .terms import Namespace, Term


class LogicCodec(TermCodec):
    """Printer and parser bound to one proof's namespace and abbreviations.

    ``print`` never substitutes abbreviations, so its output is independent of
    the map and safe to store or transfer. ``render`` is the display form.
    """

    def __init__(self, namespace: Namespace, abbreviations=None):
        self.namespace = namespace
        self.abbreviations = abbreviations

    def parse(self, text: str) -> Term:
        return TermParser(self.namespace, self.abbreviations).parse(text)

    def print(self, term: Term) -> str:
        return TermPrinter().print(term)

    def render(self, term: Term, abbreviate_root: bool = False) -> str:
        """Print with enabled abbreviations of subterms shown as ``@label``."""
        printer = TermPrinter(
            self.abbreviations, use_abbreviations=True, abbreviate_root=abbreviate_root,
        )
        return printer.print(term)

    def __repr__(self):
        return f"<LogicCodec {self.namespace.name}>"
