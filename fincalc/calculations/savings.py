"""
Savings Scheme Calculators

Small savings and retirement schemes: PPF, NSC, SSY, EPF, NPS, FD, RD, MIS,
SCSS and APY. Statutory rates, lock-ins and deposit limits are read from
the rate table; an optional ``interestRate`` input overrides the notified
rate where the scheme allows it.
"""

import math
from typing import List, Optional

from fincalc.calculations import compounding
from fincalc.calculations.errors import ValidationError
from fincalc.calculations.rates import RateTable
from fincalc.calculations.schemas import (
    ApyInput,
    EpfInput,
    FdInput,
    MisInput,
    NpsInput,
    NscInput,
    PpfInput,
    RdInput,
    ScssInput,
    SsyInput,
)
from fincalc.calculations.results import (
    BreakdownRow,
    CalculationOutcome,
    money,
    outcome,
    percent,
)


def _rate(override: Optional[float], notified: float) -> float:
    return notified if override is None else override


def _check_deposit(amount: float, low: float, high: float, field: str) -> None:
    if amount < low or amount > high:
        raise ValidationError(
            f"Deposit must be between {low:,.0f} and {high:,.0f}", field
        )


def _yearly_deposit_schedule(deposits: List[float], rate: float, first_age: Optional[int] = None):
    """Deposit at the start of each year, interest credited at year end."""
    rows = []
    balance = 0.0
    for year, deposit in enumerate(deposits, start=1):
        balance += deposit
        interest = balance * rate
        balance += interest
        rows.append(
            BreakdownRow(
                period=year,
                contribution=deposit,
                interest=interest,
                balance=balance,
                age=None if first_age is None else first_age + year,
            )
        )
    return rows


def _deposit_result(rows: List[BreakdownRow], rate_pct: float) -> dict:
    invested = sum(row.contribution for row in rows)
    maturity = rows[-1].balance
    return {
        "totalInvestment": money(invested),
        "totalInterest": money(maturity - invested),
        "maturityAmount": money(maturity),
        "interestRate": rate_pct,
    }


def ppf(inputs: PpfInput, rates: RateTable) -> CalculationOutcome:
    table = rates.schemes.ppf
    if inputs.years < table.lock_in_years or inputs.years > table.max_years:
        raise ValidationError(
            f"PPF tenure must be between {table.lock_in_years} and {table.max_years} years",
            "years",
        )
    _check_deposit(inputs.yearly_investment, table.min_deposit, table.max_deposit, "yearlyInvestment")

    rate_pct = _rate(inputs.interest_rate, table.rate)
    rows = _yearly_deposit_schedule([inputs.yearly_investment] * inputs.years, rate_pct / 100)
    return outcome(_deposit_result(rows, rate_pct), rows, compounding="yearly")


def nsc(inputs: NscInput, rates: RateTable) -> CalculationOutcome:
    table = rates.schemes.nsc
    years = inputs.years if inputs.years is not None else table.lock_in_years
    if years < table.lock_in_years:
        raise ValidationError(f"NSC has a lock-in of {table.lock_in_years} years", "years")

    rate_pct = _rate(inputs.interest_rate, table.rate)
    rows = []
    balance = inputs.principal
    for year in range(1, years + 1):
        interest = balance * rate_pct / 100
        balance += interest
        rows.append(
            BreakdownRow(
                period=year,
                contribution=inputs.principal if year == 1 else 0.0,
                interest=interest,
                balance=balance,
            )
        )
    return outcome(_deposit_result(rows, rate_pct), rows, compounding="yearly")


def ssy(inputs: SsyInput, rates: RateTable) -> CalculationOutcome:
    """
    Sukanya Samriddhi: deposits for at most 15 years, maturity 21 years after
    opening. A longer requested deposit window is truncated and flagged.
    """
    table = rates.schemes.ssy
    if inputs.girl_age > table.max_opening_age:
        raise ValidationError(
            f"Account can only be opened before the girl turns {table.max_opening_age + 1}",
            "girlAge",
        )
    _check_deposit(inputs.yearly_investment, table.min_deposit, table.max_deposit, "yearlyInvestment")

    requested = inputs.deposit_years if inputs.deposit_years is not None else table.deposit_years
    deposit_years = min(requested, table.deposit_years)
    truncated = requested > table.deposit_years

    rate_pct = _rate(inputs.interest_rate, table.rate)
    deposits = [
        inputs.yearly_investment if year <= deposit_years else 0.0
        for year in range(1, table.maturity_years + 1)
    ]
    rows = _yearly_deposit_schedule(deposits, rate_pct / 100, first_age=inputs.girl_age)

    result = _deposit_result(rows, rate_pct)
    result.update(
        {
            "depositYears": deposit_years,
            "depositYearsTruncated": truncated,
            "maturityAge": inputs.girl_age + table.maturity_years,
        }
    )
    return outcome(
        result,
        rows,
        maturityYears=table.maturity_years,
        depositYearsTruncated=truncated,
    )


def epf(inputs: EpfInput, rates: RateTable) -> CalculationOutcome:
    """
    EPF corpus at retirement.

    Employee share and the employer's EPF share compound monthly; the
    employer's pension (EPS) share is reported but never compounds. Basic
    salary rises once a year by ``annualSalaryIncrease``.
    """
    table = rates.schemes.epf
    retirement_age = inputs.retirement_age or table.retirement_age
    if retirement_age <= inputs.current_age:
        raise ValidationError("retirementAge must be greater than currentAge", "retirementAge")
    years = retirement_age - inputs.current_age

    employee_pct = _rate(inputs.employee_contribution_percent, table.employee_percent)
    employer_pct = _rate(inputs.employer_contribution_percent, table.employer_epf_percent)
    rate_pct = _rate(inputs.interest_rate, table.rate)

    monthly = inputs.monthly_basic_salary * (employee_pct + employer_pct) / 100
    years_run = list(
        compounding.step_up_accumulation(
            monthly,
            compounding.periodic_rate(rate_pct, 12),
            years,
            step_up_pct=inputs.annual_salary_increase,
            due_at_start=False,
            opening_balance=inputs.current_epf_balance,
        )
    )
    rows = [
        BreakdownRow(
            period=y.year,
            contribution=y.contribution,
            interest=y.interest,
            balance=y.balance,
            age=inputs.current_age + y.year,
        )
        for y in years_run
    ]

    contributed = sum(y.contribution for y in years_run)
    share = employee_pct / (employee_pct + employer_pct) if employee_pct + employer_pct else 0.0
    basic_paid = contributed * 100 / (employee_pct + employer_pct) if employee_pct + employer_pct else 0.0
    corpus = years_run[-1].balance

    return outcome(
        {
            "maturityAmount": money(corpus),
            "totalEmployeeContribution": money(contributed * share),
            "totalEmployerContribution": money(contributed * (1 - share)),
            "totalInterest": money(corpus - contributed - inputs.current_epf_balance),
            "pensionContribution": money(basic_paid * table.employer_eps_percent / 100),
            "yearsToRetirement": years,
            "interestRate": rate_pct,
        },
        rows,
        compounding="monthly",
    )


def nps(inputs: NpsInput, rates: RateTable) -> CalculationOutcome:
    table = rates.schemes.nps
    retirement_age = inputs.retirement_age or table.retirement_age
    if retirement_age <= inputs.current_age:
        raise ValidationError("retirementAge must be greater than currentAge", "retirementAge")
    if inputs.annuity_percentage < table.min_annuity_percent:
        raise ValidationError(
            f"At least {table.min_annuity_percent:g}% of the corpus must buy an annuity",
            "annuityPercentage",
        )
    years = retirement_age - inputs.current_age

    years_run = list(
        compounding.step_up_accumulation(
            inputs.monthly_contribution,
            compounding.periodic_rate(inputs.expected_return, 12),
            years,
        )
    )
    rows = [
        BreakdownRow(
            period=y.year,
            contribution=y.contribution,
            interest=y.interest,
            balance=y.balance,
            age=inputs.current_age + y.year,
        )
        for y in years_run
    ]

    corpus = years_run[-1].balance
    invested = inputs.monthly_contribution * 12 * years
    annuity = corpus * inputs.annuity_percentage / 100
    annuity_rate = _rate(inputs.annuity_rate, table.default_annuity_rate)

    return outcome(
        {
            "totalInvestment": money(invested),
            "totalCorpus": money(corpus),
            "totalInterest": money(corpus - invested),
            "annuityAmount": money(annuity),
            "lumpSumAmount": money(corpus - annuity),
            "estimatedPension": money(annuity * annuity_rate / 100 / 12),
        },
        rows,
        annuityRate=annuity_rate,
    )


def fd(inputs: FdInput, rates: RateTable) -> CalculationOutcome:
    """Fixed deposit; tenure in days is converted to compounding periods."""
    bonus = rates.schemes.fd.senior_citizen_bonus if inputs.is_senior_citizen else 0.0
    rate_pct = inputs.interest_rate + bonus
    frequency = inputs.compounding_frequency
    rate = compounding.periodic_rate(rate_pct, frequency)

    rows = []
    balance = inputs.principal
    for year in range(1, math.ceil(inputs.tenure_days / 365) + 1):
        days = min(year * 365, inputs.tenure_days)
        closing = compounding.compound_growth(inputs.principal, rate, days / 365 * frequency)
        rows.append(
            BreakdownRow(
                period=year,
                contribution=inputs.principal if year == 1 else 0.0,
                interest=closing - balance,
                balance=closing,
            )
        )
        balance = closing

    effective = compounding.effective_annual_rate(rate_pct / 100, frequency)
    return outcome(
        {
            "principal": money(inputs.principal),
            "maturityAmount": money(balance),
            "totalInterest": money(balance - inputs.principal),
            "interestRate": rate_pct,
            "effectiveYield": percent(effective * 100),
        },
        rows,
        compoundingFrequency=frequency,
        dayCount="days/365",
    )


def rd(inputs: RdInput, rates: RateTable) -> CalculationOutcome:
    """
    Recurring deposit with quarterly compounding.

    Each monthly deposit is made at the start of the month and grows at the
    monthly rate equivalent to the quarterly one.
    """
    bonus = rates.schemes.fd.senior_citizen_bonus if inputs.is_senior_citizen else 0.0
    rate_pct = inputs.interest_rate + bonus
    frequency = rates.schemes.rd.compounding_frequency
    monthly = compounding.equivalent_periodic_rate(
        compounding.periodic_rate(rate_pct, frequency), frequency, 12
    )
    maturity = compounding.annuity_future_value(
        inputs.monthly_deposit, monthly, inputs.tenure_months, due_at_start=True
    )

    rows = []
    balance = 0.0
    for start in range(0, inputs.tenure_months, 12):
        months = min(12, inputs.tenure_months - start)
        opening = balance
        balance = compounding.compound_growth(balance, monthly, months) + compounding.annuity_future_value(
            inputs.monthly_deposit, monthly, months, due_at_start=True
        )
        contribution = inputs.monthly_deposit * months
        rows.append(
            BreakdownRow(
                period=start // 12 + 1,
                contribution=contribution,
                interest=balance - opening - contribution,
                balance=balance,
            )
        )

    invested = inputs.monthly_deposit * inputs.tenure_months
    return outcome(
        {
            "totalInvestment": money(invested),
            "maturityAmount": money(maturity),
            "totalInterest": money(maturity - invested),
            "interestRate": rate_pct,
        },
        rows,
        compoundingFrequency=frequency,
    )


def _payout_schedule(principal: float, annual_payout: float, years: int) -> List[BreakdownRow]:
    return [
        BreakdownRow(
            period=year,
            contribution=principal if year == 1 else 0.0,
            interest=annual_payout,
            balance=principal,
            withdrawal=annual_payout,
        )
        for year in range(1, years + 1)
    ]


def mis(inputs: MisInput, rates: RateTable) -> CalculationOutcome:
    """Post Office Monthly Income Scheme: principal is returned, never compounded."""
    table = rates.schemes.mis
    limit = table.max_joint if inputs.is_joint_account else table.max_single
    if inputs.investment_amount > limit:
        raise ValidationError(f"MIS deposit cannot exceed {limit:,.0f}", "investmentAmount")

    rate_pct = _rate(inputs.interest_rate, table.rate)
    annual = inputs.investment_amount * rate_pct / 100
    total = annual * table.tenure_years

    return outcome(
        {
            "monthlyIncome": money(annual / table.payments_per_year),
            "annualIncome": money(annual),
            "totalPayout": money(total),
            "maturityAmount": money(inputs.investment_amount),
            "totalReturns": money(inputs.investment_amount + total),
            "interestRate": rate_pct,
        },
        _payout_schedule(inputs.investment_amount, annual, table.tenure_years),
        tenureYears=table.tenure_years,
    )


def scss(inputs: ScssInput, rates: RateTable) -> CalculationOutcome:
    """Senior Citizens Savings Scheme: quarterly payout, principal returned."""
    table = rates.schemes.scss
    _check_deposit(inputs.investment_amount, table.min_deposit, table.max_deposit, "investmentAmount")

    rate_pct = _rate(inputs.interest_rate, table.rate)
    annual = inputs.investment_amount * rate_pct / 100
    total = annual * table.tenure_years

    return outcome(
        {
            "quarterlyIncome": money(annual / table.payments_per_year),
            "annualIncome": money(annual),
            "totalPayout": money(total),
            "maturityAmount": money(inputs.investment_amount),
            "totalReturns": money(inputs.investment_amount + total),
            "interestRate": rate_pct,
        },
        _payout_schedule(inputs.investment_amount, annual, table.tenure_years),
        tenureYears=table.tenure_years,
    )


def apy(inputs: ApyInput, rates: RateTable) -> CalculationOutcome:
    """Atal Pension Yojana contribution from the government chart."""
    chart = rates.schemes.apy
    contribution, corpus = chart.contribution(inputs.desired_pension, inputs.current_age)
    years = chart.vesting_age - inputs.current_age

    rows = []
    paid = 0.0
    for year in range(1, years + 1):
        paid += contribution * 12
        rows.append(
            BreakdownRow(
                period=year,
                contribution=contribution * 12,
                interest=0.0,
                balance=paid,
                age=inputs.current_age + year,
            )
        )

    return outcome(
        {
            "monthlyContribution": money(contribution),
            "contributionYears": years,
            "totalContribution": money(contribution * 12 * years),
            "monthlyPension": inputs.desired_pension,
            "corpusAmount": money(corpus),
        },
        rows,
        pensionStartAge=chart.vesting_age,
        breakdownBasis="cumulative contributions",
    )
