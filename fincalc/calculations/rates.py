"""
Rate Tables

Statutory rates, tax slabs, TDS sections, brokerage charges and margin rules
as versioned configuration data. The packaged ``data/rate_table.json`` is
loaded once and validated; a different file can be supplied through the
``FINCALC_RATE_TABLE_PATH`` setting.
"""

import json
import logging
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from fincalc.calculations.errors import ValidationError
from fincalc.config import get_settings

logger = logging.getLogger(__name__)

DEFAULT_RATE_TABLE = Path(__file__).resolve().parent.parent / "data" / "rate_table.json"


class RateModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="forbid"
    )


# Schemes


class PpfRates(RateModel):
    rate: float
    lock_in_years: int
    max_years: int
    min_deposit: float
    max_deposit: float


class NscRates(RateModel):
    rate: float
    lock_in_years: int


class SsyRates(RateModel):
    rate: float
    deposit_years: int
    maturity_years: int
    max_opening_age: int
    min_deposit: float
    max_deposit: float


class EpfRates(RateModel):
    rate: float
    employee_percent: float
    employer_epf_percent: float
    employer_eps_percent: float
    retirement_age: int


class NpsRates(RateModel):
    min_annuity_percent: float
    default_annuity_rate: float
    retirement_age: int


class FdRates(RateModel):
    senior_citizen_bonus: float


class RdRates(RateModel):
    compounding_frequency: int


class MisRates(RateModel):
    rate: float
    tenure_years: int
    max_single: float
    max_joint: float
    payments_per_year: int


class ScssRates(RateModel):
    rate: float
    tenure_years: int
    min_deposit: float
    max_deposit: float
    payments_per_year: int


class GratuityRates(RateModel):
    exemption_limit: float
    min_service_years: int
    days_per_month: int
    days_wages_per_year: int


class ApyChart(RateModel):
    vesting_age: int
    pensions: Tuple[int, ...]
    corpus: Tuple[float, ...]
    contributions: Dict[int, Tuple[float, ...]]

    @model_validator(mode="after")
    def check_columns(self):
        if len(self.corpus) != len(self.pensions):
            raise ValueError("APY corpus must have one entry per pension band")
        for age, row in self.contributions.items():
            if len(row) != len(self.pensions):
                raise ValueError(f"APY contributions for age {age} do not match pension bands")
        return self

    def contribution(self, pension: int, age: int) -> Tuple[float, float]:
        """Monthly contribution and corpus for a pension band and entry age."""
        if pension not in self.pensions:
            raise ValidationError(
                f"Monthly pension must be one of {list(self.pensions)}", "desiredPension"
            )
        if age not in self.contributions:
            raise ValidationError(
                f"Entry age must be between {min(self.contributions)} and {max(self.contributions)}",
                "currentAge",
            )
        column = self.pensions.index(pension)
        return self.contributions[age][column], self.corpus[column]


class SchemeRates(RateModel):
    ppf: PpfRates
    nsc: NscRates
    ssy: SsyRates
    epf: EpfRates
    nps: NpsRates
    fd: FdRates
    rd: RdRates
    mis: MisRates
    scss: ScssRates
    gratuity: GratuityRates
    apy: ApyChart


# Income tax


class TaxSlab(RateModel):
    lower_bound: float
    upper_bound: Optional[float] = None
    rate: float


class RegimeTable(RateModel):
    standard_deduction: float
    rebate_limit: float
    max_rebate: float
    slabs: Tuple[TaxSlab, ...]

    @model_validator(mode="after")
    def check_slabs(self):
        if not self.slabs:
            raise ValueError("A regime needs at least one slab")
        if self.slabs[0].lower_bound != 0:
            raise ValueError("The first slab must start at zero")
        for previous, current in zip(self.slabs, self.slabs[1:]):
            if previous.upper_bound is None:
                raise ValueError("Only the last slab may be open-ended")
            if current.lower_bound != previous.upper_bound:
                raise ValueError("Slabs must be contiguous and non-overlapping")
            if current.rate < previous.rate:
                raise ValueError("Slab rates must be non-decreasing")
        for slab in self.slabs:
            if slab.upper_bound is not None and slab.upper_bound <= slab.lower_bound:
                raise ValueError("Slab upper bound must exceed its lower bound")
        if self.slabs[-1].upper_bound is not None:
            raise ValueError("The last slab must be open-ended")
        return self


class TaxYear(RateModel):
    old: RegimeTable
    new: RegimeTable


class IncomeTaxRates(RateModel):
    cess_percent: float
    section_80c_limit: float = Field(alias="section80CLimit")
    section_80d_limit: float = Field(alias="section80DLimit")
    section_24_limit: float = Field(alias="section24Limit")
    years: Dict[str, TaxYear]


class SalaryRates(RateModel):
    employee_pf_percent: float
    employer_pf_percent: float
    professional_tax_monthly: float


class TdsSection(RateModel):
    section: str
    rate: float
    threshold: float


class TdsRates(RateModel):
    no_pan_rate: float
    sections: Dict[str, TdsSection]


# Trading


class SegmentCharges(RateModel):
    brokerage_percent: float = 0.0
    brokerage_cap: Optional[float] = None
    brokerage_flat: Optional[float] = None
    stt_buy_percent: float
    stt_sell_percent: float
    stamp_duty_percent: float
    exchange_percent: Dict[str, float]


class ChargeTable(RateModel):
    effective_from: date
    gst_percent: float
    sebi_fee_percent: float
    segments: Dict[str, SegmentCharges]


class MarginRule(RateModel):
    span_percent: float = 0.0
    exposure_percent: float = 0.0
    upfront_percent: float = 0.0

    @model_validator(mode="after")
    def check_total(self):
        if self.total_percent <= 0:
            raise ValueError("A margin rule must require some margin")
        return self

    @property
    def total_percent(self) -> float:
        return self.span_percent + self.exposure_percent + self.upfront_percent


class RateTable(RateModel):
    """Every statutory constant the calculators read."""

    version: str
    schemes: SchemeRates
    income_tax: IncomeTaxRates
    salary: SalaryRates
    tds: TdsRates
    charges: Tuple[ChargeTable, ...]
    margin: Dict[str, MarginRule]

    @field_validator("charges")
    @classmethod
    def order_charges(cls, charges):
        if not charges:
            raise ValueError("At least one charge table is required")
        return tuple(sorted(charges, key=lambda table: table.effective_from))

    def tax_year(self, financial_year: str) -> TaxYear:
        try:
            return self.income_tax.years[financial_year]
        except KeyError:
            raise ValidationError(
                f"No tax slabs for financial year {financial_year}; "
                f"available: {', '.join(sorted(self.income_tax.years))}",
                "financialYear",
            ) from None

    def charges_on(self, trade_date: Optional[date] = None) -> ChargeTable:
        """Charge table in force on ``trade_date`` (latest when omitted)."""
        if trade_date is None:
            return self.charges[-1]
        in_force = [t for t in self.charges if t.effective_from <= trade_date]
        if not in_force:
            raise ValidationError(
                f"No charge table in force on {trade_date.isoformat()}", "tradeDate"
            )
        return in_force[-1]


def load_rate_table(path: Optional[str] = None) -> RateTable:
    """Read and validate a rate table file."""
    source = Path(path) if path else DEFAULT_RATE_TABLE
    with open(source, encoding="utf-8") as fh:
        data = json.load(fh)
    table = RateTable.model_validate(data)
    logger.info(f"Loaded rate table version {table.version} from {source}")
    return table


@lru_cache()
def get_rate_table() -> RateTable:
    """Get the cached rate table configured in settings."""
    return load_rate_table(get_settings().rate_table_path)
