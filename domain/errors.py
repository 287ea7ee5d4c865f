from __future__ import annotations


class PlanVizError(ValueError):
    """Base error for plan conversion failures."""


class ChildCardinalityError(PlanVizError):
    def __init__(self, operator: str, expected: int, actual: int) -> None:
        self.operator = operator
        self.expected = expected
        self.actual = actual
        super().__init__(f"{operator} requires exactly {expected} child(ren), got {actual}")


class ArrowCountMismatchError(PlanVizError):
    def __init__(self, operator: str, message: str) -> None:
        self.operator = operator
        super().__init__(f"{operator}: {message}")


class PlanParseError(PlanVizError):
    def __init__(self, message: str, line_number: int | None = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
