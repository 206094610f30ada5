"""
Tests for brokerage and margin calculators.
"""

from datetime import date

import pytest
from pydantic import ValidationError as SchemaError

from fincalc.calculations import trading
from fincalc.calculations.errors import ValidationError
from fincalc.calculations.schemas import (
    BrokerageInput,
    Exchange,
    MarginInput,
    MarginSegment,
    TradeSegment,
)


class TestBrokerage:
    """Test round-trip trade charges."""

    def test_delivery_charges(self, rates):
        outcome = trading.brokerage(
            BrokerageInput(
                transaction_type=TradeSegment.DELIVERY,
                buy_price=100,
                sell_price=110,
                quantity=100,
                trade_date=date(2024, 6, 1),
            ),
            rates,
        )
        result = outcome.result

        assert result["turnover"] == 21000
        assert result["brokerage"] == 0
        assert result["stt"] == 21
        assert result["stampDuty"] == 1.5
        assert result["totalCharges"] == 23.32
        assert result["grossPnl"] == 1000
        assert result["netPnl"] == 976.68
        assert outcome.assumptions["chargeTableEffectiveFrom"] == "2024-01-01"

    def test_latest_table_by_default(self, rates):
        outcome = trading.brokerage(
            BrokerageInput(transaction_type=TradeSegment.DELIVERY, buy_price=100, sell_price=110, quantity=100),
            rates,
        )
        assert outcome.assumptions["chargeTableEffectiveFrom"] == "2024-10-01"

    def test_trade_before_first_table(self, rates):
        with pytest.raises(ValidationError) as exc:
            trading.brokerage(
                BrokerageInput(
                    transaction_type=TradeSegment.DELIVERY,
                    buy_price=100,
                    sell_price=110,
                    quantity=100,
                    trade_date=date(2023, 6, 1),
                ),
                rates,
            )
        assert exc.value.field == "tradeDate"

    def test_intraday_brokerage_cap(self, rates):
        outcome = trading.brokerage(
            BrokerageInput(transaction_type=TradeSegment.INTRADAY, buy_price=1000, sell_price=1001, quantity=1000),
            rates,
        )
        assert outcome.result["brokerage"] == 40

    def test_options_flat_brokerage(self, rates):
        outcome = trading.brokerage(
            BrokerageInput(
                transaction_type=TradeSegment.OPTIONS,
                buy_price=50,
                sell_price=60,
                quantity=75,
                exchange=Exchange.BSE,
            ),
            rates,
        )
        assert outcome.result["brokerage"] == 40
        assert outcome.assumptions["exchange"] == "BSE"

    def test_breakeven_covers_charges(self, rates):
        outcome = trading.brokerage(
            BrokerageInput(transaction_type=TradeSegment.INTRADAY, buy_price=500, sell_price=500, quantity=200),
            rates,
        )
        result = outcome.result
        assert result["netPnl"] == -result["totalCharges"]
        assert abs(result["breakeven"] - result["totalCharges"] / 200) < 0.01
        assert result["breakevenPrice"] > 500


class TestMargin:
    """Test margin requirements."""

    def test_futures_margin(self, rates):
        outcome = trading.margin(
            MarginInput(segment_type=MarginSegment.FUTURES, trade_value=1000000), rates
        )
        assert outcome.result["requiredMargin"] == 120000
        assert outcome.result["spanMargin"] == 90000
        assert outcome.result["exposureMargin"] == 30000
        assert outcome.result["leverage"] == 8.33

    def test_price_and_quantity(self, rates):
        outcome = trading.margin(
            MarginInput(segment_type=MarginSegment.EQUITY_INTRADAY, price=250, quantity=400), rates
        )
        assert outcome.result["tradeValue"] == 100000
        assert outcome.result["requiredMargin"] == 20000
        assert outcome.result["leverage"] == 5

    def test_delivery_has_no_leverage(self, rates):
        outcome = trading.margin(
            MarginInput(segment_type=MarginSegment.EQUITY_DELIVERY, trade_value=50000), rates
        )
        assert outcome.result["leverage"] == 1

    def test_value_required(self):
        with pytest.raises(SchemaError):
            MarginInput(segment_type=MarginSegment.FUTURES, price=100)
