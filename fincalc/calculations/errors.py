"""
Calculation Errors

Typed failures raised by calculators. The dispatcher turns these into the
``error`` field of the response envelope.
"""

from typing import Optional


class CalculationError(ValueError):
    """Base class for every failure a calculator can report."""

    code = "CALCULATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        error = {"code": self.code, "message": self.message}
        if self.field is not None:
            error["field"] = self.field
        return error


class ValidationError(CalculationError):
    """Missing, mistyped or out-of-range input."""

    code = "VALIDATION_ERROR"


class DomainError(CalculationError):
    """Well-formed input the model cannot resolve (e.g. no IRR exists)."""

    code = "DOMAIN_ERROR"


class ConvergenceError(CalculationError):
    """Root-finder ran out of iterations before meeting tolerance."""

    code = "CONVERGENCE_ERROR"


class UnknownCalculatorError(LookupError):
    """Request named a calculator kind that does not exist."""

    def __init__(self, kind: str):
        super().__init__(f"Unknown calculator kind: {kind!r}")
        self.kind = kind
