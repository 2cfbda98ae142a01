"""
Abbreviation Manager Custom Exceptions
"""
from typing import Optional


class AbbrevError(Exception):
    """Base exception for the abbreviation manager"""
    pass


class DuplicateLabel(AbbrevError):
    """Label is already bound to another term"""
    def __init__(self, label: str, term=None):
        self.label = label
        self.term = term
        super().__init__(f"The abbreviation {label!r} is already in use")


class DuplicateTerm(AbbrevError):
    """Term already carries an abbreviation"""
    def __init__(self, term, label: Optional[str] = None):
        self.term = term
        self.label = label
        super().__init__(f"Term is already abbreviated as {label!r}")


class UnknownTerm(AbbrevError, KeyError):
    """Term has no abbreviation"""
    def __init__(self, term):
        self.term = term
        super().__init__(f"No abbreviation for term {term!r}")

    def __str__(self):
        return self.args[0]


class UnknownLabel(AbbrevError, KeyError):
    """Label is not bound"""
    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Unknown abbreviation {label!r}")

    def __str__(self):
        return self.args[0]


class InvalidLabel(AbbrevError, ValueError):
    """Label is empty or not a word token"""
    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Invalid abbreviation label {label!r}")


class ParseError(AbbrevError, ValueError):
    """Term text could not be parsed under the given context"""
    def __init__(self, message: str, text: str = "", position: Optional[int] = None):
        self.text = text
        self.position = position
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)


class AbbrevFileError(AbbrevError):
    """Abbreviation file could not be read or written"""
    def __init__(self, path, message: str):
        self.path = path
        super().__init__(f"I/O error on {path}: {message}")


class UnknownProof(AbbrevError, KeyError):
    """No proof session with this id"""
    def __init__(self, proof_id: str):
        self.proof_id = proof_id
        super().__init__(f"Proof not found: {proof_id}")

    def __str__(self):
        return self.args[0]
