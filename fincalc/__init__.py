"""
Financial Calculation Engine

Pure numeric calculators for personal finance: savings schemes, loans,
returns, income tax and trading charges.
"""

from fincalc.calculations.dispatcher import calculate, CalculatorKind

__all__ = ["calculate", "CalculatorKind"]
