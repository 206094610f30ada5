"""
Compounding Primitives

Compound growth, annuity future/present value, rate conversion and the
step-up accumulation shared by SIP, NPS and EPF style schemes.

Rates passed to these helpers are periodic fractions (0.01 for 1% per
period) unless the parameter name says ``_pct``.
"""

from dataclasses import dataclass
from typing import Iterator

from fincalc.calculations.errors import DomainError


def periodic_rate(annual_rate_pct: float, frequency: int) -> float:
    """Convert an annual percentage into a per-period fraction."""
    if frequency <= 0:
        raise DomainError("Compounding frequency must be positive", "compoundingFrequency")
    return annual_rate_pct / (100 * frequency)


def compound_growth(principal: float, rate: float, periods: float) -> float:
    """principal × (1 + rate)^periods. Fractional periods are allowed."""
    return principal * (1 + rate) ** periods


def annuity_future_value(
    payment: float, rate: float, periods: float, due_at_start: bool = False
) -> float:
    """
    Future value of a level payment series.

    Args:
        payment: Amount paid each period
        rate: Periodic rate as a fraction
        periods: Number of payments
        due_at_start: True for an annuity-due (payment at start of period)

    Returns:
        Accumulated value at the end of the last period
    """
    if rate == 0:
        return payment * periods
    value = payment * (((1 + rate) ** periods - 1) / rate)
    if due_at_start:
        value *= 1 + rate
    return value


def annuity_present_value(
    payment: float, rate: float, periods: float, due_at_start: bool = False
) -> float:
    """Present value of a level payment series."""
    if rate == 0:
        return payment * periods
    value = payment * ((1 - (1 + rate) ** -periods) / rate)
    if due_at_start:
        value *= 1 + rate
    return value


def required_payment(
    target: float, rate: float, periods: float, due_at_start: bool = False
) -> float:
    """Level payment whose annuity future value reaches ``target``."""
    if periods <= 0:
        raise DomainError("Number of payments must be positive")
    factor = annuity_future_value(1.0, rate, periods, due_at_start)
    return target / factor


def effective_annual_rate(nominal_rate: float, frequency: int) -> float:
    """(1 + nominal/frequency)^frequency - 1, with both rates as fractions."""
    if frequency <= 0:
        raise DomainError("Compounding frequency must be positive", "compoundingFrequency")
    return (1 + nominal_rate / frequency) ** frequency - 1


def equivalent_periodic_rate(rate: float, from_frequency: int, to_frequency: int) -> float:
    """Periodic rate at ``to_frequency`` that compounds to the same annual yield."""
    return (1 + rate) ** (from_frequency / to_frequency) - 1


def cagr(initial: float, final: float, years: float) -> float:
    """Compound annual growth rate as a fraction."""
    if initial <= 0 or years <= 0:
        raise DomainError("CAGR needs a positive initial value and duration")
    if final < 0:
        raise DomainError("CAGR is undefined for a negative final value")
    try:
        return (final / initial) ** (1 / years) - 1
    except OverflowError:
        raise DomainError("CAGR is out of range", "years") from None


def real_rate(nominal: float, inflation: float) -> float:
    """Inflation-adjusted rate (Fisher), both as fractions."""
    return (1 + nominal) / (1 + inflation) - 1


@dataclass(frozen=True)
class YearAccumulation:
    year: int
    payment: float
    contribution: float
    interest: float
    balance: float


def step_up_accumulation(
    payment: float,
    rate: float,
    years: int,
    step_up_pct: float = 0.0,
    periods_per_year: int = 12,
    due_at_start: bool = True,
    opening_balance: float = 0.0,
) -> Iterator[YearAccumulation]:
    """
    Accumulate a payment series that rises by a fixed percentage each year.

    Each year the carried balance compounds for ``periods_per_year`` periods
    and that year's payments are added as an annuity. The payment is raised
    by ``step_up_pct`` at every anniversary. With ``step_up_pct == 0`` the
    final balance equals a plain annuity future value.

    Yields:
        One YearAccumulation per year
    """
    balance = opening_balance
    for year in range(1, years + 1):
        contribution = payment * periods_per_year
        grown = compound_growth(balance, rate, periods_per_year)
        closing = grown + annuity_future_value(payment, rate, periods_per_year, due_at_start)
        interest = closing - balance - contribution
        yield YearAccumulation(
            year=year,
            payment=payment,
            contribution=contribution,
            interest=interest,
            balance=closing,
        )
        balance = closing
        payment *= 1 + step_up_pct / 100
