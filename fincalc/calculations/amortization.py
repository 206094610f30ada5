"""
Loan Amortization Calculations

EMI, reducing-balance schedules with yearly aggregation, and the flat-rate
comparison used to show the true cost of flat-interest loans.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from fincalc.calculations import irr
from fincalc.calculations.errors import DomainError
from fincalc.calculations.results import BreakdownRow


@dataclass(frozen=True)
class ScheduleRow:
    period: int
    opening_balance: float
    payment: float
    interest: float
    principal: float
    closing_balance: float
    due_date: Optional[date] = None


def monthly_rate(annual_rate: float) -> float:
    """Monthly rate as a fraction from an annual percentage."""
    return annual_rate / 1200


def calculate_payment(principal: float, annual_rate: float, months: int) -> float:
    """
    Calculate the equated monthly installment.

    Args:
        principal: Loan principal amount
        annual_rate: Annual interest rate as a percentage (e.g., 9 for 9%)
        months: Tenure in months

    Returns:
        Monthly payment amount

    Raises:
        DomainError: If the tenure is zero months
    """
    if months <= 0:
        raise DomainError("Loan tenure must be at least one month", "months")

    rate = monthly_rate(annual_rate)
    if rate == 0:
        return principal / months

    growth = (1 + rate) ** months
    return principal * rate * growth / (growth - 1)


def calculate_remaining_balance(
    principal: float, annual_rate: float, months: int, payments_completed: int
) -> float:
    """Outstanding balance after N installments."""
    rate = monthly_rate(annual_rate)
    payment = calculate_payment(principal, annual_rate, months)

    if rate == 0:
        return max(0.0, principal - payment * payments_completed)

    balance = principal * ((1 + rate) ** payments_completed) - payment * (
        ((1 + rate) ** payments_completed - 1) / rate
    )
    return max(0.0, balance)


def generate_amortization_schedule(
    principal: float,
    annual_rate: float,
    months: int,
    start_date: Optional[date] = None,
) -> List[ScheduleRow]:
    """
    Generate a month-by-month reducing-balance schedule.

    Values are kept unrounded; the last period absorbs the rounding drift so
    the closing balance is exactly zero.

    Args:
        principal: Loan principal amount
        annual_rate: Annual interest rate as a percentage
        months: Tenure in months
        start_date: Due date of the first installment, if dates are wanted

    Returns:
        List of ScheduleRow, one per month
    """
    emi = calculate_payment(principal, annual_rate, months)
    rate = monthly_rate(annual_rate)
    balance = principal
    schedule = []

    for period in range(1, months + 1):
        interest = balance * rate
        principal_paid = emi - interest
        closing = balance - principal_paid
        payment = emi

        if period == months:
            principal_paid = balance
            payment = principal_paid + interest
            closing = 0.0

        due_date = None
        if start_date is not None:
            due_date = start_date + relativedelta(months=period - 1)

        schedule.append(
            ScheduleRow(
                period=period,
                opening_balance=balance,
                payment=payment,
                interest=interest,
                principal=principal_paid,
                closing_balance=max(0.0, closing),
                due_date=due_date,
            )
        )
        balance = max(0.0, closing)

    return schedule


def annualize_schedule(schedule: List[ScheduleRow]) -> List[BreakdownRow]:
    """Aggregate monthly rows into loan years (12-month blocks)."""
    years = []
    for start in range(0, len(schedule), 12):
        block = schedule[start:start + 12]
        years.append(
            BreakdownRow(
                period=start // 12 + 1,
                contribution=sum(row.principal for row in block),
                interest=sum(row.interest for row in block),
                balance=block[-1].closing_balance,
                due_date=block[-1].due_date,
            )
        )
    return years


@dataclass(frozen=True)
class FlatRateComparison:
    flat_emi: float
    flat_total_interest: float
    reducing_emi: float
    reducing_total_interest: float
    effective_reducing_rate: float


def compare_flat_and_reducing(
    principal: float,
    annual_rate: float,
    months: int,
    tolerance: float = irr.TOLERANCE,
    max_iterations: int = irr.MAX_ITERATIONS,
) -> FlatRateComparison:
    """
    Compare a flat-rate loan with a reducing-balance loan at the same stated rate.

    The effective reducing rate is the annual rate (percentage) at which a
    reducing-balance loan would charge the flat loan's installment.
    """
    if months <= 0:
        raise DomainError("Loan tenure must be at least one month", "months")

    flat_interest = principal * annual_rate / 100 * (months / 12)
    flat_emi = (principal + flat_interest) / months

    reducing_emi = calculate_payment(principal, annual_rate, months)
    reducing_interest = reducing_emi * months - principal

    if flat_interest == 0:
        effective = 0.0
    else:
        periodic = irr.calculate_irr(
            [-principal] + [flat_emi] * months,
            guess=monthly_rate(annual_rate),
            tolerance=tolerance,
            max_iterations=max_iterations,
        )
        effective = periodic * 1200

    return FlatRateComparison(
        flat_emi=flat_emi,
        flat_total_interest=flat_interest,
        reducing_emi=reducing_emi,
        reducing_total_interest=reducing_interest,
        effective_reducing_rate=effective,
    )
