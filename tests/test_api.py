"""
Tests for the calculation API endpoints.
"""

import pytest


# ============================================================================
# CALCULATION API TESTS
# ============================================================================

class TestCalculationsAPI:
    """Test calculation endpoints."""

    def test_calculate_envelope(self, client):
        """Test running a calculator through the envelope endpoint."""
        response = client.post(
            "/api/calculate",
            json={
                "kind": "emi",
                "inputs": {"principal": 1000000, "annualRate": 8.5, "months": 240},
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert abs(data["result"]["emi"] - 8678.23) < 0.5
        assert len(data["breakdown"]) == 20
        assert data["metadata"]["category"] == "loan"
        assert "rateTableVersion" in data["metadata"]
        assert "error" not in data

    def test_calculate_by_kind(self, client):
        """Test the per-calculator endpoint, which takes the inputs as the body."""
        response = client.post(
            "/api/calculate/gst",
            json={"amount": 11800, "gstRate": 18, "isInclusive": True},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["kind"] == "gst"
        assert data["result"]["baseAmount"] == 10000
        assert "breakdown" not in data

    def test_calculate_xirr(self, client):
        response = client.post(
            "/api/calculate/xirr",
            json={
                "cashFlows": [
                    {"date": "2023-01-01", "amount": -100000},
                    {"date": "2024-01-01", "amount": 121000},
                ]
            },
        )
        assert response.status_code == 200
        assert abs(response.json()["result"]["xirr"] - 21) < 0.01

    def test_calculator_error_is_not_http_error(self, client):
        """Calculator failures come back in the envelope with status 200."""
        response = client.post(
            "/api/calculate/xirr",
            json={
                "cashFlows": [
                    {"date": "2023-01-01", "amount": 100},
                    {"date": "2024-01-01", "amount": 121},
                ]
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["error"]["code"] == "DOMAIN_ERROR"
        assert "result" not in data

    def test_validation_error_field(self, client):
        response = client.post("/api/calculate/sip", json={"monthlyInvestment": 1000, "years": 5})
        data = response.json()
        assert data["error"]["code"] == "VALIDATION_ERROR"
        assert data["error"]["field"] == "expectedReturn"

    def test_unknown_kind(self, client):
        response = client.post("/api/calculate/crypto", json={})
        assert response.status_code == 404

    def test_unknown_kind_in_envelope(self, client):
        response = client.post("/api/calculate", json={"kind": "crypto", "inputs": {}})
        assert response.status_code == 404

    def test_list_kinds(self, client):
        response = client.get("/api/calculate/kinds")
        assert response.status_code == 200
        kinds = {item["kind"]: item["category"] for item in response.json()}
        assert len(kinds) == 30
        assert kinds["incomeTax"] == "tax"
        assert kinds["brokerage"] == "trading"


# ============================================================================
# HEALTH CHECK TESTS
# ============================================================================

class TestHealthCheck:
    """Test health check endpoint."""

    def test_health_check(self, client, rates):
        """Test health check returns OK."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["rateTableVersion"] == rates.version


@pytest.mark.integration
class TestRoundTrip:
    """Every calculator answers a minimal valid request."""

    @pytest.mark.parametrize(
        "kind,inputs",
        [
            ("lumpsum", {"principal": 50000, "expectedReturn": 9, "years": 4}),
            ("cagr", {"initialValue": 100, "finalValue": 200, "years": 5}),
            ("flatVsReducing", {"principal": 200000, "annualRate": 9, "months": 24}),
            ("compoundInterest", {"principal": 10000, "annualRate": 8, "years": 3, "compoundingFrequency": 4}),
            ("simpleInterest", {"principal": 10000, "annualRate": 8, "years": 3}),
            ("ssy", {"yearlyInvestment": 50000, "girlAge": 3}),
            ("nps", {"monthlyContribution": 5000, "currentAge": 35, "expectedReturn": 10}),
            ("apy", {"desiredPension": 2000, "currentAge": 25}),
            ("hra", {"basicSalary": 50000, "hraReceived": 20000, "rentPaid": 18000}),
            ("tds", {"paymentType": "RENT", "amount": 300000}),
            ("salary", {"basicSalary": 60000, "hra": 24000}),
            ("brokerage", {"transactionType": "FUTURES", "buyPrice": 2000, "sellPrice": 2010, "quantity": 50}),
            ("margin", {"segmentType": "OPTIONS_SELL", "tradeValue": 500000}),
        ],
    )
    def test_calculator_succeeds(self, client, kind, inputs):
        response = client.post(f"/api/calculate/{kind}", json=inputs)
        assert response.status_code == 200
        assert response.json()["success"] is True, response.json().get("error")
