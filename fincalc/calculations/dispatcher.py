"""
Calculator Dispatcher

Validates a request against the calculator's input model, runs the
calculator and wraps the outcome in the response envelope. Calculator
failures become the envelope's ``error``; only an unknown kind raises.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError
from pydantic.alias_generators import to_camel

from fincalc.calculations import investments, loans, planning, savings, tax, trading
from fincalc.calculations import schemas as models
from fincalc.calculations.errors import CalculationError, UnknownCalculatorError, ValidationError
from fincalc.calculations.rates import RateTable, get_rate_table
from fincalc.calculations.results import CalculationOutcome

logger = logging.getLogger(__name__)


class CalculatorKind(str, Enum):
    SIP = "sip"
    STEP_UP_SIP = "stepUpSip"
    LUMPSUM = "lumpsum"
    CAGR = "cagr"
    XIRR = "xirr"
    INFLATION = "inflation"
    STOCK_AVERAGE = "stockAverage"
    EMI = "emi"
    FLAT_VS_REDUCING = "flatVsReducing"
    COMPOUND_INTEREST = "compoundInterest"
    SIMPLE_INTEREST = "simpleInterest"
    PPF = "ppf"
    NSC = "nsc"
    SSY = "ssy"
    EPF = "epf"
    NPS = "nps"
    FD = "fd"
    RD = "rd"
    MIS = "mis"
    SCSS = "scss"
    APY = "apy"
    RETIREMENT = "retirement"
    GRATUITY = "gratuity"
    INCOME_TAX = "incomeTax"
    HRA = "hra"
    GST = "gst"
    TDS = "tds"
    SALARY = "salary"
    BROKERAGE = "brokerage"
    MARGIN = "margin"


@dataclass(frozen=True)
class Calculator:
    input_model: Type[models.CalculatorInput]
    function: Callable[[Any, RateTable], CalculationOutcome]
    category: str


REGISTRY: Dict[CalculatorKind, Calculator] = {
    CalculatorKind.SIP: Calculator(models.SipInput, investments.sip, "investment"),
    CalculatorKind.STEP_UP_SIP: Calculator(models.StepUpSipInput, investments.step_up_sip, "investment"),
    CalculatorKind.LUMPSUM: Calculator(models.LumpsumInput, investments.lumpsum, "investment"),
    CalculatorKind.CAGR: Calculator(models.CagrInput, investments.cagr, "investment"),
    CalculatorKind.XIRR: Calculator(models.XirrInput, investments.xirr, "investment"),
    CalculatorKind.INFLATION: Calculator(models.InflationInput, investments.inflation, "investment"),
    CalculatorKind.STOCK_AVERAGE: Calculator(models.StockAverageInput, investments.stock_average, "investment"),
    CalculatorKind.EMI: Calculator(models.EmiInput, loans.emi, "loan"),
    CalculatorKind.FLAT_VS_REDUCING: Calculator(models.FlatVsReducingInput, loans.flat_vs_reducing, "loan"),
    CalculatorKind.COMPOUND_INTEREST: Calculator(models.CompoundInterestInput, loans.compound_interest, "interest"),
    CalculatorKind.SIMPLE_INTEREST: Calculator(models.SimpleInterestInput, loans.simple_interest, "interest"),
    CalculatorKind.PPF: Calculator(models.PpfInput, savings.ppf, "savings"),
    CalculatorKind.NSC: Calculator(models.NscInput, savings.nsc, "savings"),
    CalculatorKind.SSY: Calculator(models.SsyInput, savings.ssy, "savings"),
    CalculatorKind.EPF: Calculator(models.EpfInput, savings.epf, "savings"),
    CalculatorKind.NPS: Calculator(models.NpsInput, savings.nps, "savings"),
    CalculatorKind.FD: Calculator(models.FdInput, savings.fd, "savings"),
    CalculatorKind.RD: Calculator(models.RdInput, savings.rd, "savings"),
    CalculatorKind.MIS: Calculator(models.MisInput, savings.mis, "savings"),
    CalculatorKind.SCSS: Calculator(models.ScssInput, savings.scss, "savings"),
    CalculatorKind.APY: Calculator(models.ApyInput, savings.apy, "savings"),
    CalculatorKind.RETIREMENT: Calculator(models.RetirementInput, planning.retirement, "planning"),
    CalculatorKind.GRATUITY: Calculator(models.GratuityInput, tax.gratuity, "tax"),
    CalculatorKind.INCOME_TAX: Calculator(models.IncomeTaxInput, tax.income_tax, "tax"),
    CalculatorKind.HRA: Calculator(models.HraInput, tax.hra, "tax"),
    CalculatorKind.GST: Calculator(models.GstInput, tax.gst, "tax"),
    CalculatorKind.TDS: Calculator(models.TdsInput, tax.tds, "tax"),
    CalculatorKind.SALARY: Calculator(models.SalaryInput, tax.salary, "tax"),
    CalculatorKind.BROKERAGE: Calculator(models.BrokerageInput, trading.brokerage, "trading"),
    CalculatorKind.MARGIN: Calculator(models.MarginInput, trading.margin, "trading"),
}

_unregistered = set(CalculatorKind) - set(REGISTRY)
if _unregistered:
    raise RuntimeError(
        f"Calculator kinds without an implementation: {sorted(k.value for k in _unregistered)}"
    )


class EnvelopeModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CalculationRequest(EnvelopeModel):
    """Calculator name plus its camelCase inputs."""

    kind: str
    inputs: Dict[str, Any] = Field(default_factory=dict)


class ErrorDetail(EnvelopeModel):
    code: str
    message: str
    field: Optional[str] = None


class ResponseMetadata(EnvelopeModel):
    category: str
    rate_table_version: str
    assumptions: Dict[str, Any] = Field(default_factory=dict)


class CalculationResponse(EnvelopeModel):
    success: bool
    kind: str
    result: Optional[Dict[str, Any]] = None
    breakdown: Optional[List[Dict[str, Any]]] = None
    metadata: Optional[ResponseMetadata] = None
    error: Optional[ErrorDetail] = None


def resolve_kind(kind: Union[str, CalculatorKind]) -> CalculatorKind:
    try:
        return CalculatorKind(kind)
    except ValueError:
        raise UnknownCalculatorError(str(kind)) from None


def schema_error(exc: SchemaError) -> ValidationError:
    """First pydantic error as a ValidationError naming the offending field."""
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or None
    message = first["msg"]
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return ValidationError(message, field)


def calculate(
    request: Union[CalculationRequest, Mapping[str, Any]],
    rates: Optional[RateTable] = None,
) -> CalculationResponse:
    """
    Run one calculator and return the response envelope.

    Args:
        request: CalculationRequest or a mapping with ``kind`` and ``inputs``
        rates: Rate table to use; defaults to the configured one

    Returns:
        CalculationResponse with either result/breakdown or error set

    Raises:
        UnknownCalculatorError: If ``kind`` names no calculator
    """
    if not isinstance(request, CalculationRequest):
        request = CalculationRequest.model_validate(request)

    kind = resolve_kind(request.kind)
    calculator = REGISTRY[kind]
    if rates is None:
        rates = get_rate_table()

    try:
        try:
            inputs = calculator.input_model.model_validate(request.inputs)
        except SchemaError as exc:
            raise schema_error(exc) from exc
        calculated = calculator.function(inputs, rates)
    except CalculationError as exc:
        logger.warning(f"{kind.value} failed with {exc.code}: {exc.message}")
        return CalculationResponse(
            success=False,
            kind=kind.value,
            error=ErrorDetail(**exc.to_dict()),
        )

    return CalculationResponse(
        success=True,
        kind=kind.value,
        result=calculated.result_dict(),
        breakdown=calculated.breakdown_dicts() or None,
        metadata=ResponseMetadata(
            category=calculator.category,
            rate_table_version=rates.version,
            assumptions=calculated.assumptions_dict(),
        ),
    )
