"""
Tests for the calculator dispatcher and response envelope.
"""

import pytest

from fincalc import CalculatorKind, calculate
from fincalc.calculations.dispatcher import REGISTRY, CalculationRequest, resolve_kind
from fincalc.calculations.errors import UnknownCalculatorError


class TestDispatcher:
    """Test request routing and the envelope."""

    def test_every_kind_registered(self):
        assert set(REGISTRY) == set(CalculatorKind)

    def test_successful_envelope(self, rates):
        response = calculate(
            {"kind": "sip", "inputs": {"monthlyInvestment": 10000, "expectedReturn": 12, "years": 10}}
        )
        assert response.success is True
        assert response.error is None
        assert response.kind == "sip"
        assert abs(response.result["futureValue"] - 2323391) < 1
        assert len(response.breakdown) == 10
        assert response.metadata.category == "investment"
        assert response.metadata.rate_table_version == rates.version

    def test_accepts_request_model(self):
        request = CalculationRequest(kind="gst", inputs={"amount": 1000, "gstRate": 5})
        response = calculate(request)
        assert response.result["totalAmount"] == 1050
        assert response.breakdown is None

    def test_breakdown_rows_are_serialised(self):
        response = calculate(
            {
                "kind": "emi",
                "inputs": {"principal": 100000, "annualRate": 10, "months": 12, "startDate": "2025-01-15"},
            }
        )
        row = response.breakdown[0]
        assert set(row) >= {"period", "contribution", "interest", "balance"}
        assert row["balance"] == 0
        assert row["date"] == "2025-12-15"

    def test_schema_error_names_field(self):
        response = calculate(
            {"kind": "sip", "inputs": {"monthlyInvestment": -5, "expectedReturn": 12, "years": 10}}
        )
        assert response.success is False
        assert response.result is None
        assert response.error.code == "VALIDATION_ERROR"
        assert response.error.field == "monthlyInvestment"

    def test_missing_field(self):
        response = calculate({"kind": "lumpsum", "inputs": {"principal": 1000, "years": 5}})
        assert response.error.code == "VALIDATION_ERROR"
        assert response.error.field == "expectedReturn"

    def test_unknown_input_rejected(self):
        response = calculate(
            {"kind": "gst", "inputs": {"amount": 1000, "gstRate": 5, "discount": 10}}
        )
        assert response.error.code == "VALIDATION_ERROR"
        assert response.error.field == "discount"

    def test_cross_field_error_message(self):
        response = calculate(
            {
                "kind": "retirement",
                "inputs": {
                    "currentAge": 50,
                    "retirementAge": 45,
                    "lifeExpectancy": 80,
                    "currentMonthlyExpense": 20000,
                    "expectedInflation": 6,
                    "preRetirementReturn": 10,
                    "postRetirementReturn": 7,
                },
            }
        )
        assert response.error.code == "VALIDATION_ERROR"
        assert response.error.message == "retirementAge must be greater than currentAge"

    def test_calculator_validation_error(self):
        response = calculate({"kind": "ppf", "inputs": {"yearlyInvestment": 100000, "years": 5}})
        assert response.error.code == "VALIDATION_ERROR"
        assert response.error.field == "years"

    def test_domain_error(self):
        response = calculate(
            {
                "kind": "xirr",
                "inputs": {
                    "cashFlows": [
                        {"date": "2024-01-01", "amount": 1000},
                        {"date": "2024-06-01", "amount": 500},
                    ]
                },
            }
        )
        assert response.success is False
        assert response.error.code == "DOMAIN_ERROR"
        assert response.error.field == "cashFlows"

    def test_zero_month_emi(self):
        response = calculate({"kind": "emi", "inputs": {"principal": 100000, "annualRate": 10, "months": 0}})
        assert response.error.code == "DOMAIN_ERROR"

    def test_xirr_envelope(self):
        response = calculate(
            {
                "kind": "xirr",
                "inputs": {
                    "cashFlows": [
                        {"date": "2023-01-01", "amount": -100000},
                        {"date": "2024-01-01", "amount": 121000},
                    ]
                },
            }
        )
        assert abs(response.result["xirr"] - 21) < 0.01
        assert response.result["multiple"] == 1.21

    def test_unknown_kind_raises(self):
        with pytest.raises(UnknownCalculatorError):
            calculate({"kind": "crypto", "inputs": {}})

    def test_resolve_kind(self):
        assert resolve_kind("incomeTax") is CalculatorKind.INCOME_TAX
        assert resolve_kind(CalculatorKind.MARGIN) is CalculatorKind.MARGIN

    def test_same_request_same_response(self):
        request = {
            "kind": "incomeTax",
            "inputs": {"grossIncome": 1800000, "section80CDeductions": 150000},
        }
        assert calculate(request) == calculate(request)

    def test_serialised_envelope_is_camel_case(self):
        response = calculate({"kind": "fd", "inputs": {"principal": 100000, "interestRate": 7, "tenureDays": 365}})
        body = response.model_dump(by_alias=True, exclude_none=True)
        assert "rateTableVersion" in body["metadata"]
        assert "error" not in body

    def test_cagr_out_of_range(self):
        response = calculate(
            {"kind": "cagr", "inputs": {"initialValue": 1, "finalValue": 1000, "years": 0.001}}
        )
        assert response.success is False
        assert response.error.code == "DOMAIN_ERROR"
        assert response.error.field == "years"

    def test_emi_outstanding_balance(self):
        response = calculate(
            {
                "kind": "emi",
                "inputs": {"principal": 100000, "annualRate": 12, "months": 24, "balanceAfterMonths": 12},
            }
        )
        assert response.success is True
        assert abs(response.result["outstandingBalance"] - response.breakdown[0]["balance"]) < 0.01

    def test_emi_balance_beyond_tenure(self):
        response = calculate(
            {
                "kind": "emi",
                "inputs": {"principal": 100000, "annualRate": 12, "months": 24, "balanceAfterMonths": 25},
            }
        )
        assert response.error.code == "VALIDATION_ERROR"
        assert response.error.field == "balanceAfterMonths"

    def test_nested_result_is_plain_data(self):
        """Frozen outcomes come back as ordinary lists and dicts in the envelope."""
        response = calculate({"kind": "incomeTax", "inputs": {"grossIncome": 1200000}})
        slabs = response.result["slabsNewRegime"]
        assert isinstance(slabs, list)
        assert isinstance(slabs[0], dict)
        slabs[0]["rate"] = 99
        assert calculate({"kind": "incomeTax", "inputs": {"grossIncome": 1200000}}).result[
            "slabsNewRegime"
        ][0]["rate"] != 99
