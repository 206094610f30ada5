"""
Loan and interest calculators.
"""

from fincalc.calculations import amortization, compounding
from fincalc.calculations.errors import ValidationError
from fincalc.calculations.rates import RateTable
from fincalc.calculations.schemas import (
    CompoundInterestInput,
    EmiInput,
    FlatVsReducingInput,
    SimpleInterestInput,
)
from fincalc.calculations.results import (
    BreakdownRow,
    CalculationOutcome,
    money,
    outcome,
    percent,
)
from fincalc.config import get_settings


def emi(inputs: EmiInput, rates: RateTable) -> CalculationOutcome:
    """
    Reducing-balance EMI with a yearly principal/interest breakdown.

    Breakdown rows report principal repaid as ``contribution`` and the
    outstanding loan as ``balance``. With ``balanceAfterMonths`` set, the
    result also carries the balance left after that many installments.
    """
    payment = amortization.calculate_payment(inputs.principal, inputs.annual_rate, inputs.months)
    schedule = amortization.generate_amortization_schedule(
        inputs.principal, inputs.annual_rate, inputs.months, start_date=inputs.start_date
    )
    total_payment = payment * inputs.months
    result = {
        "emi": money(payment),
        "principal": money(inputs.principal),
        "totalInterest": money(total_payment - inputs.principal),
        "totalPayment": money(total_payment),
    }

    paid = inputs.balance_after_months
    if paid is not None:
        if paid > inputs.months:
            raise ValidationError(
                "balanceAfterMonths cannot exceed the loan tenure", "balanceAfterMonths"
            )
        result["outstandingBalance"] = money(
            amortization.calculate_remaining_balance(
                inputs.principal, inputs.annual_rate, inputs.months, paid
            )
        )

    return outcome(
        result,
        amortization.annualize_schedule(schedule),
        method="reducing balance",
        breakdownBasis="loan year",
    )


def flat_vs_reducing(inputs: FlatVsReducingInput, rates: RateTable) -> CalculationOutcome:
    settings = get_settings()
    comparison = amortization.compare_flat_and_reducing(
        inputs.principal,
        inputs.annual_rate,
        inputs.months,
        tolerance=settings.root_tolerance,
        max_iterations=settings.root_max_iterations,
    )
    flat_total = inputs.principal + comparison.flat_total_interest
    reducing_total = inputs.principal + comparison.reducing_total_interest

    return outcome(
        {
            "flatEmi": money(comparison.flat_emi),
            "flatTotalInterest": money(comparison.flat_total_interest),
            "flatTotalPayment": money(flat_total),
            "reducingEmi": money(comparison.reducing_emi),
            "reducingTotalInterest": money(comparison.reducing_total_interest),
            "reducingTotalPayment": money(reducing_total),
            "savings": money(flat_total - reducing_total),
            "reducingIsBetter": reducing_total < flat_total,
            "effectiveReducingRate": percent(comparison.effective_reducing_rate),
        }
    )


def compound_interest(inputs: CompoundInterestInput, rates: RateTable) -> CalculationOutcome:
    frequency = inputs.compounding_frequency
    rate = compounding.periodic_rate(inputs.annual_rate, frequency)

    rows = []
    balance = inputs.principal
    for year in range(1, inputs.years + 1):
        closing = compounding.compound_growth(balance, rate, frequency)
        rows.append(BreakdownRow(period=year, contribution=0.0, interest=closing - balance, balance=closing))
        balance = closing

    effective = compounding.effective_annual_rate(inputs.annual_rate / 100, frequency)
    return outcome(
        {
            "principal": money(inputs.principal),
            "maturityAmount": money(balance),
            "totalInterest": money(balance - inputs.principal),
            "effectiveRate": percent(effective * 100),
        },
        rows,
        compoundingFrequency=frequency,
    )


def simple_interest(inputs: SimpleInterestInput, rates: RateTable) -> CalculationOutcome:
    interest = inputs.principal * inputs.annual_rate / 100 * inputs.years
    return outcome(
        {
            "principal": money(inputs.principal),
            "totalInterest": money(interest),
            "maturityAmount": money(inputs.principal + interest),
        }
    )
