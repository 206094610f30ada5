"""
Investment Calculators

SIP, step-up SIP, lumpsum, CAGR, XIRR, inflation and stock averaging.
"""

from fincalc.calculations import compounding, irr
from fincalc.calculations.rates import RateTable
from fincalc.calculations.schemas import (
    CagrInput,
    InflationInput,
    LumpsumInput,
    SipInput,
    StepUpSipInput,
    StockAverageInput,
    XirrInput,
)
from fincalc.calculations.results import (
    BreakdownRow,
    CalculationOutcome,
    money,
    outcome,
    percent,
)
from fincalc.config import get_settings


def _returns(invested: float, value: float, years: float) -> dict:
    gains = value - invested
    absolute = gains / invested * 100 if invested else 0.0
    growth = compounding.cagr(invested, value, years) * 100 if invested else 0.0
    return {
        "totalInvestment": money(invested),
        "futureValue": money(value),
        "totalGains": money(gains),
        "absoluteReturns": percent(absolute),
        "cagr": percent(growth),
    }


def _accumulate(monthly: float, annual_return: float, years: int, step_up: float):
    rate = compounding.periodic_rate(annual_return, 12)
    years_run = list(
        compounding.step_up_accumulation(monthly, rate, years, step_up_pct=step_up)
    )
    rows = [
        BreakdownRow(
            period=y.year, contribution=y.contribution, interest=y.interest, balance=y.balance
        )
        for y in years_run
    ]
    return years_run, rows


def sip(inputs: SipInput, rates: RateTable) -> CalculationOutcome:
    """Monthly SIP, invested at the start of each month."""
    rate = compounding.periodic_rate(inputs.expected_return, 12)
    months = inputs.years * 12
    future_value = compounding.annuity_future_value(
        inputs.monthly_investment, rate, months, due_at_start=True
    )
    invested = inputs.monthly_investment * months
    _, rows = _accumulate(inputs.monthly_investment, inputs.expected_return, inputs.years, 0.0)

    return outcome(
        _returns(invested, future_value, inputs.years),
        rows,
        compounding="monthly",
        paymentTiming="start of month",
    )


def step_up_sip(inputs: StepUpSipInput, rates: RateTable) -> CalculationOutcome:
    """SIP whose monthly amount rises by a fixed percentage every year."""
    years_run, rows = _accumulate(
        inputs.monthly_investment, inputs.expected_return, inputs.years, inputs.step_up_percent
    )
    invested = sum(y.contribution for y in years_run)
    result = _returns(invested, years_run[-1].balance, inputs.years)
    result["finalMonthlyInvestment"] = money(years_run[-1].payment)

    return outcome(result, rows, compounding="monthly", stepUp="yearly")


def lumpsum(inputs: LumpsumInput, rates: RateTable) -> CalculationOutcome:
    rate = inputs.expected_return / 100
    rows = []
    balance = inputs.principal
    for year in range(1, inputs.years + 1):
        closing = compounding.compound_growth(balance, rate, 1)
        rows.append(
            BreakdownRow(
                period=year,
                contribution=inputs.principal if year == 1 else 0.0,
                interest=closing - balance,
                balance=closing,
            )
        )
        balance = closing

    return outcome(_returns(inputs.principal, balance, inputs.years), rows, compounding="yearly")


def cagr(inputs: CagrInput, rates: RateTable) -> CalculationOutcome:
    growth = compounding.cagr(inputs.initial_value, inputs.final_value, inputs.years)
    gain = inputs.final_value - inputs.initial_value
    return outcome(
        {
            "cagr": percent(growth * 100),
            "absoluteReturn": percent(gain / inputs.initial_value * 100),
            "totalGain": money(gain),
        }
    )


def xirr(inputs: XirrInput, rates: RateTable) -> CalculationOutcome:
    """Annualised return of dated cash flows (investments negative)."""
    settings = get_settings()
    amounts = [flow.amount for flow in inputs.cash_flows]
    dates = [flow.date for flow in inputs.cash_flows]

    rate = irr.calculate_xirr(
        amounts,
        dates,
        tolerance=settings.root_tolerance,
        max_iterations=settings.root_max_iterations,
    )

    invested = abs(sum(a for a in amounts if a < 0))
    received = sum(a for a in amounts if a > 0)
    return outcome(
        {
            "xirr": percent(rate * 100),
            "totalInvested": money(invested),
            "totalReceived": money(received),
            "netGain": money(received - invested),
            "absoluteReturn": percent((received - invested) / invested * 100),
            "multiple": round(irr.calculate_multiple(amounts), 4),
        },
        dayCount="actual/365",
    )


def inflation(inputs: InflationInput, rates: RateTable) -> CalculationOutcome:
    rate = inputs.inflation_rate / 100
    future_value = compounding.compound_growth(inputs.present_value, rate, inputs.years)
    real_value = inputs.present_value / (1 + rate) ** inputs.years
    loss = (future_value - inputs.present_value) / future_value * 100

    return outcome(
        {
            "presentValue": money(inputs.present_value),
            "futureValue": money(future_value),
            "realValue": money(real_value),
            "purchasingPowerLoss": percent(loss),
        }
    )


def stock_average(inputs: StockAverageInput, rates: RateTable) -> CalculationOutcome:
    quantity = inputs.existing_quantity + inputs.new_quantity
    invested = (
        inputs.existing_quantity * inputs.existing_price
        + inputs.new_quantity * inputs.new_price
    )
    return outcome(
        {
            "averagePrice": money(invested / quantity),
            "totalQuantity": quantity,
            "totalInvestment": money(invested),
        }
    )
