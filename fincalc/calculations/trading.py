"""
Trading Charges

Brokerage and statutory charges on a round-trip equity/derivatives trade,
and margin requirements by segment. Charges use the table version in force
on the trade date.
"""

from fincalc.calculations.errors import ValidationError
from fincalc.calculations.rates import RateTable, SegmentCharges
from fincalc.calculations.schemas import BrokerageInput, MarginInput
from fincalc.calculations.results import CalculationOutcome, money, outcome, percent


def order_brokerage(value: float, charges: SegmentCharges) -> float:
    """Brokerage for one executed order."""
    if charges.brokerage_flat is not None:
        return charges.brokerage_flat
    brokerage = value * charges.brokerage_percent / 100
    if charges.brokerage_cap is not None:
        brokerage = min(brokerage, charges.brokerage_cap)
    return brokerage


def brokerage(inputs: BrokerageInput, rates: RateTable) -> CalculationOutcome:
    """
    Round-trip charges for a buy and a sell of the same quantity.

    GST applies to brokerage plus exchange charges; stamp duty is on the buy
    leg only. ``breakeven`` is the price move per unit needed to cover all
    charges.
    """
    table = rates.charges_on(inputs.trade_date)
    charges = table.segments[inputs.transaction_type.value]
    exchange_rate = charges.exchange_percent.get(inputs.exchange.value)
    if exchange_rate is None:
        raise ValidationError(
            f"{inputs.transaction_type.value} is not traded on {inputs.exchange.value}", "exchange"
        )

    buy_value = inputs.buy_price * inputs.quantity
    sell_value = inputs.sell_price * inputs.quantity
    turnover = buy_value + sell_value

    broker = order_brokerage(buy_value, charges) + order_brokerage(sell_value, charges)
    stt = buy_value * charges.stt_buy_percent / 100 + sell_value * charges.stt_sell_percent / 100
    exchange_charges = turnover * exchange_rate / 100
    sebi_fee = turnover * table.sebi_fee_percent / 100
    gst = (broker + exchange_charges) * table.gst_percent / 100
    stamp_duty = buy_value * charges.stamp_duty_percent / 100

    total = broker + stt + exchange_charges + sebi_fee + gst + stamp_duty
    gross_pnl = sell_value - buy_value
    breakeven = total / inputs.quantity

    return outcome(
        {
            "turnover": money(turnover),
            "brokerage": money(broker),
            "stt": money(stt),
            "exchangeCharges": money(exchange_charges),
            "sebiFee": money(sebi_fee),
            "gst": money(gst),
            "stampDuty": money(stamp_duty),
            "totalCharges": money(total),
            "grossPnl": money(gross_pnl),
            "netPnl": money(gross_pnl - total),
            "breakeven": money(breakeven),
            "breakevenPrice": money(inputs.buy_price + breakeven),
        },
        chargeTableEffectiveFrom=table.effective_from.isoformat(),
        exchange=inputs.exchange.value,
    )


def margin(inputs: MarginInput, rates: RateTable) -> CalculationOutcome:
    rule = rates.margin[inputs.segment_type.value]
    value = inputs.value
    margin_percent = rule.total_percent

    return outcome(
        {
            "tradeValue": money(value),
            "requiredMargin": money(value * margin_percent / 100),
            "marginPercent": percent(margin_percent),
            "leverage": round(100 / margin_percent, 2),
            "spanMargin": money(value * rule.span_percent / 100),
            "exposureMargin": money(value * rule.exposure_percent / 100),
            "upfrontMargin": money(value * rule.upfront_percent / 100),
        },
        segment=inputs.segment_type.value,
    )
