"""Exception types raised by the Smoke toolchain.

Every failure the tokenizer, parser or interpreter can report derives
from :class:`SmokeError`. Each class carries a ``kind`` naming the error
category as it is shown to users, plus the structured fields callers can
inspect (expected/found descriptions, the offending name, a location).
"""

from typing import Any, Optional


class SmokeError(Exception):
    """Base class for all errors reported by Smoke."""
    kind = 'Error'

    def __init__(self, message: str, location: Optional[Any] = None):
        self.message = message
        self.location = location
        super().__init__(self.describe())

    def describe(self) -> str:
        if self.location is not None:
            return f"{self.kind} at {self.location}: {self.message}"
        return f"{self.kind}: {self.message}"


###############################################################################
# Lexical errors
###############################################################################


class LexError(SmokeError):
    kind = 'LexError'


class UnrecognizedCharacter(LexError):
    """No token recognizer accepted the input at ``location``."""
    kind = 'UnrecognizedCharacter'

    def __init__(self, character: str, location: Any):
        self.character = character
        super().__init__(f"unrecognized character {character!r}", location)


class UnterminatedString(LexError):
    kind = 'UnterminatedString'

    def __init__(self, location: Any):
        super().__init__('string literal is missing its closing \'"\'', location)


###############################################################################
# Parse errors
###############################################################################


class ParseError(SmokeError):
    kind = 'ParseError'


class UnexpectedToken(ParseError):
    """The parser expected one thing and found another.

    ``found`` is either the quoted lexeme of the offending token or the
    phrase ``end of source``.
    """
    kind = 'UnexpectedToken'

    def __init__(self, expected: str, found: str, location: Optional[Any] = None):
        self.expected = expected
        self.found = found
        super().__init__(f"expected {expected} but found {found}", location)


class InternalError(SmokeError):
    """A state that correct token classification should make unreachable.

    This signals a defect in Smoke itself rather than in the program being
    run, and is never reported as an ordinary diagnostic.
    """
    kind = 'InternalError'


###############################################################################
# Evaluation errors
###############################################################################


class EvaluationError(SmokeError):
    kind = 'RuntimeError'


class TypeMismatchError(EvaluationError):
    """A value of the wrong kind was given to an operator or call."""
    kind = 'TypeError'

    def __init__(self, expected: str, found: str):
        self.expected = expected
        self.found = found
        super().__init__(f"expected value of type {expected} but found {found}")


class ReferenceUndefinedError(EvaluationError):
    kind = 'ReferenceUndefinedError'

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"reference by name {name} was not in scope")


class ArityError(EvaluationError):
    kind = 'ArityError'

    def __init__(self, expected: int, found: int):
        self.expected = expected
        self.found = found
        plural = '' if expected == 1 else 's'
        super().__init__(f"function expects {expected} argument{plural} but was given {found}")


class DivisionByZeroError(EvaluationError):
    kind = 'DivisionByZeroError'

    def __init__(self):
        super().__init__('integer division by zero')


class IntegerOverflowError(EvaluationError):
    kind = 'IntegerOverflowError'

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"integer overflow in {operation}")


class RecursionDepthError(SmokeError):
    """Nesting or call depth exhausted the available stack."""
    kind = 'RecursionDepthError'

    def __init__(self, stage: str, limit: Optional[int] = None):
        self.stage = stage
        self.limit = limit
        if limit is not None:
            message = f"{stage} exceeded the maximum depth of {limit}"
        else:
            message = f"{stage} exhausted the host call stack"
        super().__init__(message)
