"""
Barebones Error Definitions

Error codes are plain string constants so callers can branch on them
without importing the exception classes. Every exception carries its
code, a message and, where one exists, the instruction position and the
1-based source line it came from.
"""

from typing import List, Optional


E_ARITY = "E_ARITY"
E_BLOCK_MISMATCH = "E_BLOCK_MISMATCH"
E_OPERAND = "E_OPERAND"
E_UNKNOWN_COMMAND = "E_UNKNOWN_COMMAND"
E_INTERNAL = "E_INTERNAL"
E_UNKNOWN = "E_UNKNOWN"


class BarebonesError(Exception):
    """Base exception for Barebones runtime errors"""
    def __init__(self, code: str, message: str, position: Optional[int] = None, line: Optional[int] = None):
        self.code = code
        self.message = message
        self.position = position
        self.line = line
        super().__init__(f"[{code}] {self.describe()}")

    def describe(self) -> str:
        """Message prefixed with the source line, when known"""
        if self.line is not None:
            return f"Error on line: {self.line}: {self.message}"
        return self.message


class StructuralError(BarebonesError):
    """Load-time failure; holds every arity and block error found"""
    def __init__(self, errors: List[BarebonesError]):
        self.errors = list(errors)
        first = self.errors[0] if self.errors else None
        summary = f"{len(self.errors)} structural error(s)"
        if first is not None:
            summary += f", first: {first.describe()}"
        super().__init__(
            first.code if first is not None else E_BLOCK_MISMATCH,
            summary,
            position=first.position if first is not None else None,
            line=None,
        )


class OperandError(BarebonesError):
    """Comparison operand or operator could not be used"""
    def __init__(self, message: str, position: Optional[int] = None, line: Optional[int] = None):
        super().__init__(E_OPERAND, message, position=position, line=line)


class InternalError(BarebonesError):
    """Resolver and engine disagree; indicates a defect, never user input"""
    def __init__(self, message: str, position: Optional[int] = None, line: Optional[int] = None):
        super().__init__(E_INTERNAL, message, position=position, line=line)


__all__ = [
    'E_ARITY', 'E_BLOCK_MISMATCH', 'E_OPERAND', 'E_UNKNOWN_COMMAND',
    'E_INTERNAL', 'E_UNKNOWN',
    'BarebonesError', 'StructuralError', 'OperandError', 'InternalError',
]
