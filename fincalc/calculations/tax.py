"""
Tax Calculators

Income tax under both regimes, HRA exemption, GST, TDS, salary take-home
and gratuity. Slabs, deduction caps and section rates come from the rate
table for the requested financial year.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from fincalc.calculations.rates import RateTable, RegimeTable, TaxSlab
from fincalc.calculations.schemas import (
    GratuityInput,
    GstInput,
    HraInput,
    IncomeTaxInput,
    SalaryInput,
    TaxRegime,
    TdsInput,
)
from fincalc.calculations.results import CalculationOutcome, money, outcome
from fincalc.config import get_settings

logger = logging.getLogger(__name__)

OLD_REGIME = "OLD_REGIME"
NEW_REGIME = "NEW_REGIME"
EITHER = "EITHER"


@dataclass(frozen=True)
class RegimeTax:
    taxable_income: float
    slab_tax: float
    rebate: float
    cess: float
    slabs: Tuple[Dict, ...]

    @property
    def total_tax(self) -> float:
        return self.slab_tax - self.rebate + self.cess


def apply_slabs(taxable_income: float, slabs: Sequence[TaxSlab]) -> Tuple[float, List[Dict]]:
    """
    Progressive tax on ``taxable_income``.

    Returns:
        Total tax and one breakdown entry per slab the income reaches
    """
    total = 0.0
    breakdown = []
    for slab in slabs:
        if taxable_income <= slab.lower_bound:
            break
        upper = taxable_income if slab.upper_bound is None else min(taxable_income, slab.upper_bound)
        amount = upper - slab.lower_bound
        tax = amount * slab.rate / 100
        total += tax
        breakdown.append(
            {
                "lowerBound": slab.lower_bound,
                "upperBound": slab.upper_bound,
                "rate": slab.rate,
                "taxableAmount": money(amount),
                "tax": money(tax),
            }
        )
    return total, breakdown


def regime_tax(
    taxable_income: float,
    regime: RegimeTable,
    cess_percent: float,
    apply_rebate: bool = False,
) -> RegimeTax:
    """Slab tax plus cess; the section 87A rebate only when ``apply_rebate``."""
    tax, breakdown = apply_slabs(taxable_income, regime.slabs)
    rebate = 0.0
    if apply_rebate and taxable_income <= regime.rebate_limit:
        rebate = min(tax, regime.max_rebate)
    cess = (tax - rebate) * cess_percent / 100
    return RegimeTax(
        taxable_income=taxable_income,
        slab_tax=tax,
        rebate=rebate,
        cess=cess,
        slabs=tuple(breakdown),
    )


def old_regime_deductions(inputs: IncomeTaxInput, regime: RegimeTable, rates: RateTable) -> float:
    limits = rates.income_tax
    return (
        regime.standard_deduction
        + min(inputs.section_80c_deductions, limits.section_80c_limit)
        + min(inputs.section_80d_deductions, limits.section_80d_limit)
        + min(inputs.home_loan_interest, limits.section_24_limit)
        + inputs.other_deductions
        + inputs.hra_exemption
    )


def _financial_year(requested: Optional[str]) -> str:
    return requested or get_settings().default_financial_year


def income_tax(inputs: IncomeTaxInput, rates: RateTable) -> CalculationOutcome:
    """
    Compare Old and New regime liability for one financial year.

    Old regime taxable income is gross minus every eligible deduction (80C
    and 80D capped); the New regime allows only its standard deduction. Each
    regime's liability is slab tax plus 4% health and education cess. The
    section 87A rebate is deducted before cess only when ``applyRebate`` is set.
    """
    financial_year = _financial_year(inputs.financial_year)
    year = rates.tax_year(financial_year)
    cess_percent = rates.income_tax.cess_percent

    deductions_old = old_regime_deductions(inputs, year.old, rates)
    old = regime_tax(
        max(0.0, inputs.gross_income - deductions_old),
        year.old,
        cess_percent,
        apply_rebate=inputs.apply_rebate,
    )
    new = regime_tax(
        max(0.0, inputs.gross_income - year.new.standard_deduction),
        year.new,
        cess_percent,
        apply_rebate=inputs.apply_rebate,
    )

    total_old = money(old.total_tax)
    total_new = money(new.total_tax)
    if total_old < total_new:
        recommended = OLD_REGIME
    elif total_new < total_old:
        recommended = NEW_REGIME
    else:
        recommended = EITHER
    logger.debug(f"FY {financial_year}: old={total_old} new={total_new} -> {recommended}")

    return outcome(
        {
            "grossIncome": money(inputs.gross_income),
            "totalDeductionsOldRegime": money(deductions_old),
            "taxableIncomeOldRegime": money(old.taxable_income),
            "taxableIncomeNewRegime": money(new.taxable_income),
            "taxOldRegime": money(old.slab_tax),
            "taxNewRegime": money(new.slab_tax),
            "rebateOldRegime": money(old.rebate),
            "rebateNewRegime": money(new.rebate),
            "cessOldRegime": money(old.cess),
            "cessNewRegime": money(new.cess),
            "totalTaxOldRegime": total_old,
            "totalTaxNewRegime": total_new,
            "recommendedRegime": recommended,
            "taxSavings": money(abs(total_old - total_new)),
            "slabsOldRegime": old.slabs,
            "slabsNewRegime": new.slabs,
        },
        financialYear=financial_year,
        cessPercent=cess_percent,
        standardDeduction={"old": year.old.standard_deduction, "new": year.new.standard_deduction},
        rebateApplied=inputs.apply_rebate,
        excludes=["surcharge", "marginal relief", "capital gains"],
    )


def hra(inputs: HraInput, rates: RateTable) -> CalculationOutcome:
    """HRA exemption: least of actual HRA, 50%/40% of salary, rent over 10% of salary."""
    salary = inputs.basic_salary + inputs.dearness_allowance
    percentage = 50 if inputs.is_metro_city else 40

    actual = inputs.hra_received
    salary_share = salary * percentage / 100
    rent_excess = max(0.0, inputs.rent_paid - salary * 10 / 100)
    exemption = max(0.0, min(actual, salary_share, rent_excess))

    if exemption == actual:
        applied = "Actual HRA received"
    elif exemption == salary_share:
        applied = f"{percentage}% of basic + DA"
    else:
        applied = "Rent paid minus 10% of basic + DA"

    return outcome(
        {
            "hraReceived": money(actual),
            "hraExemption": money(exemption),
            "taxableHra": money(actual - exemption),
            "actualHra": money(actual),
            "salaryPercentLimit": money(salary_share),
            "rentExcessOverTenPercent": money(rent_excess),
            "appliedRule": applied,
        },
        salaryDefinition="basic + DA",
    )


def gst(inputs: GstInput, rates: RateTable) -> CalculationOutcome:
    if inputs.is_inclusive:
        base = inputs.amount / (1 + inputs.gst_rate / 100)
        tax = inputs.amount - base
    else:
        base = inputs.amount
        tax = base * inputs.gst_rate / 100

    if inputs.is_inter_state:
        cgst = sgst = 0.0
        igst = tax
    else:
        cgst = sgst = tax / 2
        igst = 0.0

    return outcome(
        {
            "baseAmount": money(base),
            "gstAmount": money(tax),
            "totalAmount": money(base + tax),
            "cgst": money(cgst),
            "sgst": money(sgst),
            "igst": money(igst),
            "gstRate": inputs.gst_rate,
            "isInclusive": inputs.is_inclusive,
        }
    )


def tds(inputs: TdsInput, rates: RateTable) -> CalculationOutcome:
    section = rates.tds.sections[inputs.payment_type.value]
    rate = section.rate if inputs.pan_available else max(section.rate, rates.tds.no_pan_rate)
    below_threshold = inputs.amount < section.threshold
    amount = 0.0 if below_threshold else inputs.amount * rate / 100

    return outcome(
        {
            "grossAmount": money(inputs.amount),
            "tdsAmount": money(amount),
            "netPayment": money(inputs.amount - amount),
            "tdsRate": rate,
            "section": section.section,
            "threshold": section.threshold,
            "belowThreshold": below_threshold,
        }
    )


def salary(inputs: SalaryInput, rates: RateTable) -> CalculationOutcome:
    """
    Monthly take-home and CTC.

    Income tax for the chosen regime is computed on yearly gross (bonus
    included) with no deductions beyond the standard deduction and spread
    evenly over twelve months.
    """
    table = rates.salary
    financial_year = _financial_year(inputs.financial_year)
    year = rates.tax_year(financial_year)
    regime = year.new if inputs.regime == TaxRegime.NEW else year.old

    gross_monthly = (
        inputs.basic_salary + inputs.hra + inputs.special_allowance + inputs.other_allowances
    )
    gross_yearly = gross_monthly * 12 + inputs.performance_bonus

    taxable = max(0.0, gross_yearly - regime.standard_deduction)
    yearly_tax = regime_tax(
        taxable, regime, rates.income_tax.cess_percent, apply_rebate=inputs.apply_rebate
    ).total_tax
    monthly_tax = yearly_tax / 12

    pf = inputs.epf_contribution
    if pf is None:
        pf = inputs.basic_salary * table.employee_pf_percent / 100
    professional_tax = inputs.professional_tax
    if professional_tax is None:
        professional_tax = table.professional_tax_monthly

    deductions = pf + professional_tax + inputs.other_deductions + monthly_tax
    net_monthly = gross_monthly - deductions
    employer_pf = inputs.basic_salary * table.employer_pf_percent / 100

    return outcome(
        {
            "grossMonthlySalary": money(gross_monthly),
            "grossSalary": money(gross_yearly),
            "pfDeduction": money(pf),
            "professionalTax": money(professional_tax),
            "tds": money(monthly_tax),
            "yearlyTax": money(yearly_tax),
            "totalMonthlyDeductions": money(deductions),
            "netMonthlySalary": money(net_monthly),
            "annualNetSalary": money(net_monthly * 12 + inputs.performance_bonus),
            "annualCTC": money(gross_yearly + employer_pf * 12),
        },
        regime=inputs.regime.value,
        financialYear=financial_year,
        bonusPaid="once a year, outside monthly take-home",
    )


def gratuity(inputs: GratuityInput, rates: RateTable) -> CalculationOutcome:
    """Gratuity = last salary × 15 × years / 26, payable after 5 years of service."""
    table = rates.schemes.gratuity
    eligible = inputs.years_of_service >= table.min_service_years
    amount = 0.0
    if eligible:
        amount = (
            inputs.last_drawn_salary
            * table.days_wages_per_year
            * inputs.years_of_service
            / table.days_per_month
        )
    exempt = min(amount, table.exemption_limit)

    return outcome(
        {
            "isEligible": eligible,
            "gratuityAmount": money(amount),
            "exemptAmount": money(exempt),
            "taxableAmount": money(amount - exempt),
            "isFullyExempt": amount <= table.exemption_limit,
            "yearsOfService": inputs.years_of_service,
        },
        exemptionLimit=table.exemption_limit,
        minimumServiceYears=table.min_service_years,
    )
