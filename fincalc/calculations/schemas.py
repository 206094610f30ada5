"""
Calculator input models.

One frozen model per calculator. Keys arrive in camelCase; unknown keys are
rejected. Schema bounds live here; statutory bounds (lock-ins, deposit caps)
come from the rate table and are checked by the calculators.
"""

import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

MAX_PRINCIPAL = 1_000_000_000
MAX_MONTHLY = 10_000_000


class CalculatorInput(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="forbid"
    )


class TaxRegime(str, Enum):
    OLD = "OLD"
    NEW = "NEW"


class TdsPaymentType(str, Enum):
    INTEREST = "INTEREST"
    DIVIDEND = "DIVIDEND"
    CONTRACTOR = "CONTRACTOR"
    PROFESSIONAL = "PROFESSIONAL"
    RENT = "RENT"
    COMMISSION = "COMMISSION"
    PROPERTY_SALE = "PROPERTY_SALE"


class TradeSegment(str, Enum):
    DELIVERY = "DELIVERY"
    INTRADAY = "INTRADAY"
    FUTURES = "FUTURES"
    OPTIONS = "OPTIONS"


class Exchange(str, Enum):
    NSE = "NSE"
    BSE = "BSE"


class MarginSegment(str, Enum):
    EQUITY_DELIVERY = "EQUITY_DELIVERY"
    EQUITY_INTRADAY = "EQUITY_INTRADAY"
    FUTURES = "FUTURES"
    OPTIONS_BUY = "OPTIONS_BUY"
    OPTIONS_SELL = "OPTIONS_SELL"
    COMMODITY = "COMMODITY"
    CURRENCY = "CURRENCY"


# Investments


class SipInput(CalculatorInput):
    monthly_investment: float = Field(gt=0, le=MAX_MONTHLY)
    expected_return: float = Field(ge=0, le=50)
    years: int = Field(ge=1, le=50)


class StepUpSipInput(SipInput):
    step_up_percent: float = Field(ge=0, le=50)


class LumpsumInput(CalculatorInput):
    principal: float = Field(gt=0, le=MAX_PRINCIPAL)
    expected_return: float = Field(ge=0, le=50)
    years: int = Field(ge=1, le=50)


class CagrInput(CalculatorInput):
    initial_value: float = Field(ge=1)
    final_value: float = Field(ge=0)
    years: float = Field(gt=0, le=100)


class CashFlowEntry(CalculatorInput):
    date: datetime.date
    amount: float


class XirrInput(CalculatorInput):
    cash_flows: List[CashFlowEntry] = Field(min_length=2)


class InflationInput(CalculatorInput):
    present_value: float = Field(ge=1)
    inflation_rate: float = Field(ge=0, le=50)
    years: int = Field(ge=1, le=100)


class StockAverageInput(CalculatorInput):
    existing_quantity: float = Field(ge=0)
    existing_price: float = Field(ge=0)
    new_quantity: float = Field(gt=0)
    new_price: float = Field(gt=0)


# Loans and interest


class EmiInput(CalculatorInput):
    principal: float = Field(gt=0, le=MAX_PRINCIPAL)
    annual_rate: float = Field(ge=0, le=50)
    months: int = Field(ge=0, le=600)
    start_date: Optional[datetime.date] = None
    balance_after_months: Optional[int] = Field(default=None, ge=0)


class FlatVsReducingInput(CalculatorInput):
    principal: float = Field(gt=0, le=MAX_PRINCIPAL)
    annual_rate: float = Field(ge=0, le=50)
    months: int = Field(ge=0, le=600)


class CompoundInterestInput(CalculatorInput):
    principal: float = Field(gt=0, le=MAX_PRINCIPAL)
    annual_rate: float = Field(ge=0, le=50)
    years: int = Field(ge=1, le=50)
    compounding_frequency: int = Field(default=1, ge=1, le=365)


class SimpleInterestInput(CalculatorInput):
    principal: float = Field(gt=0, le=MAX_PRINCIPAL)
    annual_rate: float = Field(ge=0, le=50)
    years: float = Field(gt=0, le=50)


# Savings schemes


class PpfInput(CalculatorInput):
    yearly_investment: float = Field(gt=0)
    years: int = Field(ge=1, le=50)
    interest_rate: Optional[float] = Field(default=None, ge=0, le=15)


class NscInput(CalculatorInput):
    principal: float = Field(gt=0, le=MAX_PRINCIPAL)
    years: Optional[int] = Field(default=None, ge=1, le=10)
    interest_rate: Optional[float] = Field(default=None, ge=0, le=15)


class SsyInput(CalculatorInput):
    yearly_investment: float = Field(gt=0)
    girl_age: int = Field(ge=0, le=18)
    deposit_years: Optional[int] = Field(default=None, ge=1, le=21)
    interest_rate: Optional[float] = Field(default=None, ge=0, le=15)


class EpfInput(CalculatorInput):
    monthly_basic_salary: float = Field(ge=0, le=MAX_MONTHLY)
    current_age: int = Field(ge=15, le=70)
    retirement_age: Optional[int] = Field(default=None, ge=40, le=75)
    current_epf_balance: float = Field(default=0, ge=0)
    annual_salary_increase: float = Field(default=5, ge=0, le=30)
    employee_contribution_percent: Optional[float] = Field(default=None, ge=0, le=100)
    employer_contribution_percent: Optional[float] = Field(default=None, ge=0, le=100)
    interest_rate: Optional[float] = Field(default=None, ge=0, le=15)

    @model_validator(mode="after")
    def check_ages(self):
        if self.retirement_age is not None and self.retirement_age <= self.current_age:
            raise ValueError("retirementAge must be greater than currentAge")
        return self


class NpsInput(CalculatorInput):
    monthly_contribution: float = Field(gt=0, le=MAX_MONTHLY)
    current_age: int = Field(ge=18, le=65)
    retirement_age: Optional[int] = Field(default=None, ge=40, le=75)
    expected_return: float = Field(ge=0, le=15)
    annuity_percentage: float = Field(default=40, ge=0, le=100)
    annuity_rate: Optional[float] = Field(default=None, ge=0, le=15)

    @model_validator(mode="after")
    def check_ages(self):
        if self.retirement_age is not None and self.retirement_age <= self.current_age:
            raise ValueError("retirementAge must be greater than currentAge")
        return self


class FdInput(CalculatorInput):
    principal: float = Field(gt=0, le=MAX_PRINCIPAL)
    interest_rate: float = Field(ge=0, le=15)
    tenure_days: int = Field(ge=7, le=3650)
    compounding_frequency: int = Field(default=4, ge=1, le=12)
    is_senior_citizen: bool = False


class RdInput(CalculatorInput):
    monthly_deposit: float = Field(gt=0, le=MAX_MONTHLY)
    interest_rate: float = Field(ge=0, le=15)
    tenure_months: int = Field(ge=6, le=120)
    is_senior_citizen: bool = False


class MisInput(CalculatorInput):
    investment_amount: float = Field(ge=1000)
    is_joint_account: bool = False
    interest_rate: Optional[float] = Field(default=None, ge=0, le=15)


class ScssInput(CalculatorInput):
    investment_amount: float = Field(ge=1000)
    interest_rate: Optional[float] = Field(default=None, ge=0, le=15)


class ApyInput(CalculatorInput):
    desired_pension: int
    current_age: int = Field(ge=18, le=40)


class RetirementInput(CalculatorInput):
    current_age: int = Field(ge=18, le=70)
    retirement_age: int = Field(ge=30, le=75)
    life_expectancy: int = Field(ge=50, le=100)
    current_monthly_expense: float = Field(gt=0, le=MAX_MONTHLY)
    current_savings: float = Field(default=0, ge=0)
    expected_inflation: float = Field(ge=0, le=12)
    pre_retirement_return: float = Field(ge=0, le=20)
    post_retirement_return: float = Field(ge=0, le=12)

    @model_validator(mode="after")
    def check_ages(self):
        if self.retirement_age <= self.current_age:
            raise ValueError("retirementAge must be greater than currentAge")
        if self.life_expectancy <= self.retirement_age:
            raise ValueError("lifeExpectancy must be greater than retirementAge")
        return self


class GratuityInput(CalculatorInput):
    last_drawn_salary: float = Field(ge=0)
    years_of_service: int = Field(ge=0, le=60)


# Tax


class IncomeTaxInput(CalculatorInput):
    gross_income: float = Field(ge=0)
    section_80c_deductions: float = Field(default=0, ge=0, alias="section80CDeductions")
    section_80d_deductions: float = Field(default=0, ge=0, alias="section80DDeductions")
    other_deductions: float = Field(default=0, ge=0)
    hra_exemption: float = Field(default=0, ge=0)
    home_loan_interest: float = Field(default=0, ge=0)
    financial_year: Optional[str] = None
    apply_rebate: bool = False


class HraInput(CalculatorInput):
    basic_salary: float = Field(ge=1)
    dearness_allowance: float = Field(default=0, ge=0)
    hra_received: float = Field(ge=0)
    rent_paid: float = Field(ge=0)
    is_metro_city: bool = False


class GstInput(CalculatorInput):
    amount: float = Field(gt=0)
    gst_rate: float = Field(ge=0, le=100)
    is_inclusive: bool = False
    is_inter_state: bool = False


class TdsInput(CalculatorInput):
    payment_type: TdsPaymentType
    amount: float = Field(gt=0)
    pan_available: bool = True


class SalaryInput(CalculatorInput):
    basic_salary: float = Field(ge=0)
    hra: float = Field(default=0, ge=0)
    special_allowance: float = Field(default=0, ge=0)
    other_allowances: float = Field(default=0, ge=0)
    performance_bonus: float = Field(default=0, ge=0)
    epf_contribution: Optional[float] = Field(default=None, ge=0)
    professional_tax: Optional[float] = Field(default=None, ge=0)
    other_deductions: float = Field(default=0, ge=0)
    is_metro_city: bool = False
    regime: TaxRegime = TaxRegime.NEW
    financial_year: Optional[str] = None
    apply_rebate: bool = False


# Trading


class BrokerageInput(CalculatorInput):
    transaction_type: TradeSegment
    buy_price: float = Field(gt=0)
    sell_price: float = Field(gt=0)
    quantity: float = Field(gt=0, le=10_000_000)
    exchange: Exchange = Exchange.NSE
    trade_date: Optional[datetime.date] = None


class MarginInput(CalculatorInput):
    segment_type: MarginSegment
    trade_value: Optional[float] = Field(default=None, gt=0)
    price: Optional[float] = Field(default=None, gt=0)
    quantity: Optional[float] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def check_value(self):
        if self.trade_value is None and (self.price is None or self.quantity is None):
            raise ValueError("Provide tradeValue, or both price and quantity")
        return self

    @property
    def value(self) -> float:
        if self.trade_value is not None:
            return self.trade_value
        return self.price * self.quantity
