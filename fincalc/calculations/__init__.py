"""
Financial Calculation Engine

Pure calculation modules: compounding primitives, amortization, rate
solving, and the scheme, tax and trading calculators built on them.
"""

from fincalc.calculations import (
    amortization,
    compounding,
    investments,
    irr,
    loans,
    planning,
    savings,
    tax,
    trading,
)

__all__ = [
    "amortization",
    "compounding",
    "investments",
    "irr",
    "loans",
    "planning",
    "savings",
    "tax",
    "trading",
]
