"""
Concrete syntax of the reference term language.

Binary operators map to (symbol name, precedence, associativity). Higher
precedence binds tighter. Function application and atoms bind tightest.
"""

BINARY_OPERATORS = {
    "->": ("imp", 1, "right"),
    "|": ("or", 2, "left"),
    "&": ("and", 3, "left"),
    "=": ("equals", 4, "none"),
    "<": ("lt", 4, "none"),
    "<=": ("leq", 4, "none"),
    ">": ("gt", 4, "none"),
    ">=": ("geq", 4, "none"),
    "+": ("add", 5, "left"),
    "-": ("sub", 5, "left"),
    "*": ("mul", 6, "left"),
}

UNARY_OPERATORS = {
    "!": ("not", 7),
}

ATOM_PRECEDENCE = 8

# symbol name -> operator token
BINARY_BY_NAME = {name: (token, prec, assoc) for token, (name, prec, assoc) in BINARY_OPERATORS.items()}
UNARY_BY_NAME = {name: (token, prec) for token, (name, prec) in UNARY_OPERATORS.items()}

ABBREV_PREFIX = "@"
