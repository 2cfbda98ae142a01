"""
Pretty printer for the reference term language.

Output always parses back to an equal term under the same namespace. With
``use_abbreviations`` enabled abbreviated subterms are printed as
``@label`` (only enabled abbreviations), which is what list views display.
"""
from .syntax import ABBREV_PREFIX, ATOM_PRECEDENCE, BINARY_BY_NAME, UNARY_BY_NAME
from .terms import Term


class TermPrinter:

    def __init__(self, abbreviations=None, use_abbreviations: bool = False,
                 abbreviate_root: bool = True):
        self.abbreviations = abbreviations
        self.use_abbreviations = use_abbreviations and abbreviations is not None
        self.abbreviate_root = abbreviate_root

    def print(self, term: Term) -> str:
        text, _ = self._print(term, root=True)
        return text

    def _print(self, term: Term, root: bool = False):
        """Returns (text, precedence of the outermost construct)."""
        if (self.use_abbreviations and (self.abbreviate_root or not root)
                and self.abbreviations.is_enabled(term)):
            return ABBREV_PREFIX + self.abbreviations.get_label(term), ATOM_PRECEDENCE

        name = term.op.name
        if len(term.args) == 2 and name in BINARY_BY_NAME:
            token, prec, assoc = BINARY_BY_NAME[name]
            left = self._operand(term.args[0], prec, parens_on_tie=assoc != "left")
            right = self._operand(term.args[1], prec, parens_on_tie=assoc != "right")
            return f"{left} {token} {right}", prec

        if len(term.args) == 1 and name in UNARY_BY_NAME:
            token, prec = UNARY_BY_NAME[name]
            return token + self._operand(term.args[0], prec, parens_on_tie=False), prec

        if not term.args:
            return name, ATOM_PRECEDENCE

        args = ", ".join(self._print(arg)[0] for arg in term.args)
        return f"{name}({args})", ATOM_PRECEDENCE

    def _operand(self, term: Term, prec: int, parens_on_tie: bool) -> str:
        text, inner = self._print(term)
        if inner < prec or (inner == prec and parens_on_tie):
            return f"({text})"
        return text


def print_term(term: Term, abbreviations=None, use_abbreviations: bool = False) -> str:
    """Print ``term`` (convenience function)"""
    return TermPrinter(abbreviations, use_abbreviations).print(term)
