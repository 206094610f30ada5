"""
Retirement planning calculator.
"""

from fincalc.calculations import compounding
from fincalc.calculations.rates import RateTable
from fincalc.calculations.schemas import RetirementInput
from fincalc.calculations.results import (
    BreakdownRow,
    CalculationOutcome,
    money,
    outcome,
    percent,
)
from fincalc.config import get_settings


def retirement(inputs: RetirementInput, rates: RateTable) -> CalculationOutcome:
    """
    Corpus needed at retirement and the monthly SIP that builds it.

    Today's expense is inflated to the retirement date, and the corpus is the
    present value of that (inflation-indexed) expense over the retirement
    horizon at the real post-retirement return, plus a longevity buffer.
    Current savings grow at the pre-retirement return; the remaining gap is
    covered by a monthly SIP.

    The breakdown projects both phases year by year: accumulation rows carry
    contributions, withdrawal rows carry the year's expense drawn at its
    start. Balances never go below zero.
    """
    buffer_pct = get_settings().longevity_buffer_percent
    years_to_retire = inputs.retirement_age - inputs.current_age
    retirement_years = inputs.life_expectancy - inputs.retirement_age

    inflation = inputs.expected_inflation / 100
    pre_return = inputs.pre_retirement_return / 100
    post_return = inputs.post_retirement_return / 100

    expense_at_retirement = compounding.compound_growth(
        inputs.current_monthly_expense, inflation, years_to_retire
    )
    real_annual = compounding.real_rate(post_return, inflation)
    real_monthly = compounding.equivalent_periodic_rate(real_annual, 1, 12)

    base_corpus = compounding.annuity_present_value(
        expense_at_retirement, real_monthly, retirement_years * 12, due_at_start=True
    )
    corpus = base_corpus * (1 + buffer_pct / 100)

    savings_value = compounding.compound_growth(inputs.current_savings, pre_return, years_to_retire)
    gap = max(0.0, corpus - savings_value)

    pre_monthly = compounding.equivalent_periodic_rate(pre_return, 1, 12)
    sip = 0.0
    if gap > 0:
        # The SIP only covers what current savings will not.
        sip = compounding.required_payment(gap, pre_monthly, years_to_retire * 12, due_at_start=True)

    rows = []
    for year in compounding.step_up_accumulation(
        sip, pre_monthly, years_to_retire, opening_balance=inputs.current_savings
    ):
        rows.append(
            BreakdownRow(
                period=year.year,
                contribution=year.contribution,
                interest=year.interest,
                balance=year.balance,
                age=inputs.current_age + year.year,
            )
        )

    balance = rows[-1].balance
    withdrawal = expense_at_retirement * 12
    for year in range(1, retirement_years + 1):
        drawn = min(balance, withdrawal)
        remaining = balance - drawn
        interest = remaining * post_return
        balance = remaining + interest
        rows.append(
            BreakdownRow(
                period=years_to_retire + year,
                contribution=0.0,
                interest=interest,
                balance=balance,
                age=inputs.retirement_age + year,
                withdrawal=drawn,
            )
        )
        withdrawal *= 1 + inflation

    return outcome(
        {
            "yearsToRetirement": years_to_retire,
            "retirementYears": retirement_years,
            "monthlyExpenseAtRetirement": money(expense_at_retirement),
            "baseCorpus": money(base_corpus),
            "corpusRequired": money(corpus),
            "futureValueOfSavings": money(savings_value),
            "corpusGap": money(gap),
            "requiredMonthlySip": money(sip),
            "realReturn": percent(real_annual * 100),
        },
        rows,
        longevityBufferPercent=buffer_pct,
        withdrawalTiming="start of year",
    )
