"""
IRR and NPV Calculations

Solves for the discount rate that zeroes a cash-flow series. Newton-Raphson
runs first from a fixed seed; when it diverges the solver falls back to
bisection over a bracket found by a fixed sign-change scan, so identical
input always gives an identical rate.
"""

import logging
import math
from datetime import date
from typing import Callable, List, Optional, Sequence, Tuple

from fincalc.calculations.errors import ConvergenceError, DomainError, ValidationError

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 100
TOLERANCE = 1e-6
DEFAULT_GUESS = 0.1
LOWER_BOUND = -0.99
UPPER_BOUND = 10.0
MIN_DERIVATIVE = 1e-12

# Scan points for the sign-change search, lowest first.
BRACKET_GRID = (-0.99, -0.9, -0.75, -0.5, -0.25, 0.0, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0)


def _evaluate(f: Callable[[float], float], rate: float) -> Optional[float]:
    """Evaluate f, returning None when the value is not a finite real."""
    try:
        value = f(rate)
    except (OverflowError, ZeroDivisionError):
        return None
    if isinstance(value, complex) or not math.isfinite(value):
        return None
    return value


def _newton(
    f: Callable[[float], float],
    df: Callable[[float], float],
    guess: float,
    low: float,
    high: float,
    tolerance: float,
    max_iterations: int,
) -> Optional[float]:
    rate = guess
    for _ in range(max_iterations):
        value = _evaluate(f, rate)
        if value is None:
            return None
        if abs(value) < tolerance:
            return rate

        slope = _evaluate(df, rate)
        if slope is None or abs(slope) < MIN_DERIVATIVE:
            return None

        new_rate = rate - value / slope
        if not low <= new_rate <= high:
            return None
        if abs(new_rate - rate) < tolerance:
            return new_rate
        rate = new_rate
    return None


def _find_bracket(
    f: Callable[[float], float], low: float, high: float
) -> Optional[Tuple[float, float]]:
    points = [low] + [p for p in BRACKET_GRID if low < p < high] + [high]
    previous = None
    for rate in points:
        value = _evaluate(f, rate)
        if value is None:
            previous = None
            continue
        if value == 0:
            return rate, rate
        if previous is not None and (previous[1] < 0) != (value < 0):
            return previous[0], rate
        previous = (rate, value)
    return None


def _bisect(
    f: Callable[[float], float],
    a: float,
    b: float,
    tolerance: float,
    max_iterations: int,
) -> float:
    if a == b:
        return a
    fa = f(a)
    for _ in range(max_iterations):
        mid = (a + b) / 2
        fm = f(mid)
        if abs(fm) < tolerance or (b - a) / 2 < tolerance:
            return mid
        if (fa < 0) == (fm < 0):
            a, fa = mid, fm
        else:
            b = mid
    raise ConvergenceError(
        f"Rate did not converge within {max_iterations} iterations"
    )


def find_root(
    f: Callable[[float], float],
    df: Callable[[float], float],
    guess: float = DEFAULT_GUESS,
    low: float = LOWER_BOUND,
    high: float = UPPER_BOUND,
    tolerance: float = TOLERANCE,
    max_iterations: int = MAX_ITERATIONS,
) -> float:
    """
    Find a rate where f(rate) == 0.

    Args:
        f: Objective function of the rate
        df: Analytic derivative of f
        guess: Newton-Raphson seed
        low: Lowest admissible rate
        high: Highest admissible rate
        tolerance: Convergence tolerance on |f| and on the step size
        max_iterations: Budget for each of the two phases

    Returns:
        The rate as a fraction

    Raises:
        DomainError: If f has no sign change in [low, high]
        ConvergenceError: If bisection exhausts its budget
    """
    rate = _newton(f, df, guess, low, high, tolerance, max_iterations)
    if rate is not None:
        return rate

    logger.debug(f"Newton-Raphson diverged from guess {guess}, falling back to bisection")
    bracket = _find_bracket(f, low, high)
    if bracket is None:
        raise DomainError(f"No solution: the value never changes sign between {low} and {high}")
    return _bisect(f, bracket[0], bracket[1], tolerance, max_iterations)


def _check_signs(cash_flows: Sequence[float]) -> None:
    has_positive = any(cf > 0 for cf in cash_flows)
    has_negative = any(cf < 0 for cf in cash_flows)

    if not has_positive or not has_negative:
        raise DomainError(
            "Cash flows must contain both positive and negative values", "cashFlows"
        )


def calculate_npv(cash_flows: Sequence[float], discount_rate: float) -> float:
    """
    Calculate NPV (Net Present Value) of periodic cash flows.

    Args:
        cash_flows: Cash flows, first one at period 0 (negative = outflow)
        discount_rate: Periodic discount rate (e.g., 0.01 for 1%)

    Returns:
        NPV value
    """
    npv = 0.0
    for period, cf in enumerate(cash_flows):
        npv += cf / ((1 + discount_rate) ** period)
    return npv


def _npv_derivative(cash_flows: Sequence[float], rate: float) -> float:
    dnpv = 0.0
    for period, cf in enumerate(cash_flows):
        dnpv -= (period * cf) / ((1 + rate) ** (period + 1))
    return dnpv


def calculate_irr(
    cash_flows: Sequence[float],
    guess: float = DEFAULT_GUESS,
    tolerance: float = TOLERANCE,
    max_iterations: int = MAX_ITERATIONS,
) -> float:
    """Periodic IRR of evenly spaced cash flows, as a fraction per period."""
    if len(cash_flows) < 2:
        raise ValidationError("At least 2 cash flows required", "cashFlows")
    _check_signs(cash_flows)

    return find_root(
        lambda r: calculate_npv(cash_flows, r),
        lambda r: _npv_derivative(cash_flows, r),
        guess=guess,
        tolerance=tolerance,
        max_iterations=max_iterations,
    )


def _year_fractions(dates: Sequence[date]) -> List[float]:
    base_date = dates[0]
    return [(d - base_date).days / 365.0 for d in dates]


def calculate_xnpv(
    cash_flows: Sequence[float], dates: Sequence[date], discount_rate: float
) -> float:
    """Calculate XNPV (NPV with specific dates, exponent days/365)."""
    if len(cash_flows) != len(dates):
        raise ValidationError("Cash flows and dates must have the same length", "cashFlows")

    xnpv = 0.0
    for cf, years in zip(cash_flows, _year_fractions(dates)):
        xnpv += cf / ((1 + discount_rate) ** years)
    return xnpv


def _xnpv_derivative(
    cash_flows: Sequence[float], years: Sequence[float], rate: float
) -> float:
    dxnpv = 0.0
    for cf, t in zip(cash_flows, years):
        dxnpv -= (t * cf) / ((1 + rate) ** (t + 1))
    return dxnpv


def calculate_xirr(
    cash_flows: Sequence[float],
    dates: Sequence[date],
    guess: float = DEFAULT_GUESS,
    tolerance: float = TOLERANCE,
    max_iterations: int = MAX_ITERATIONS,
) -> float:
    """
    Calculate XIRR (IRR with specific dates).

    Flows are sorted by date before solving; the earliest date is day 0.

    Args:
        cash_flows: Signed amounts
        dates: Date of each amount
        guess: Initial guess for rate (default 0.1 = 10%)

    Returns:
        Annual rate as decimal

    Raises:
        ValidationError: If the inputs are malformed
        DomainError: If no rate exists for the series
        ConvergenceError: If the solver runs out of iterations
    """
    if len(cash_flows) != len(dates):
        raise ValidationError("Cash flows and dates must have the same length", "cashFlows")
    if len(cash_flows) < 2:
        raise ValidationError("At least 2 cash flows required", "cashFlows")
    _check_signs(cash_flows)
    if len(set(dates)) < 2:
        raise DomainError("Cash flows need at least two distinct dates", "cashFlows")

    ordered = sorted(zip(dates, cash_flows), key=lambda pair: pair[0])
    amounts = [cf for _, cf in ordered]
    ordered_dates = [d for d, _ in ordered]
    years = _year_fractions(ordered_dates)

    return find_root(
        lambda r: calculate_xnpv(amounts, ordered_dates, r),
        lambda r: _xnpv_derivative(amounts, years, r),
        guess=guess,
        tolerance=tolerance,
        max_iterations=max_iterations,
    )


def calculate_multiple(cash_flows: Sequence[float]) -> float:
    """
    Calculate the money multiple.

    Args:
        cash_flows: Array of cash flows (investments are negative)

    Returns:
        Multiple (e.g., 2.0 = 2.0x return)
    """
    total_inflows = sum(cf for cf in cash_flows if cf > 0)
    total_outflows = abs(sum(cf for cf in cash_flows if cf < 0))

    if total_outflows == 0:
        raise DomainError("No investment (outflows) found", "cashFlows")

    return total_inflows / total_outflows
