"""
Tests for rate table loading and validation.
"""

import copy
import json
from datetime import date

import pytest
from pydantic import ValidationError as SchemaError

from fincalc.calculations.errors import ValidationError
from fincalc.calculations.rates import (
    DEFAULT_RATE_TABLE,
    RateTable,
    RegimeTable,
    load_rate_table,
)


@pytest.fixture
def raw_table():
    with open(DEFAULT_RATE_TABLE, encoding="utf-8") as fh:
        return json.load(fh)


def _regime(slabs):
    return {"standardDeduction": 50000, "rebateLimit": 500000, "maxRebate": 12500, "slabs": slabs}


class TestRateTable:
    """Test the packaged table and its lookups."""

    def test_packaged_table_loads(self, rates):
        assert rates.version
        assert "2024-25" in rates.income_tax.years
        assert rates.income_tax.section_80c_limit == 150000

    def test_tax_year_lookup(self, rates):
        year = rates.tax_year("2024-25")
        assert year.new.standard_deduction == 75000
        assert year.old.slabs[0].lower_bound == 0

    def test_unknown_tax_year(self, rates):
        with pytest.raises(ValidationError) as exc:
            rates.tax_year("1999-00")
        assert exc.value.field == "financialYear"
        assert "2024-25" in exc.value.message

    def test_charges_on(self, rates):
        assert rates.charges_on(date(2024, 3, 1)).effective_from == date(2024, 1, 1)
        assert rates.charges_on(date(2024, 10, 1)).effective_from == date(2024, 10, 1)
        assert rates.charges_on().effective_from == date(2024, 10, 1)

    def test_charges_sorted_on_load(self, raw_table):
        data = copy.deepcopy(raw_table)
        data["charges"].reverse()
        table = RateTable.model_validate(data)
        assert [t.effective_from for t in table.charges] == sorted(t.effective_from for t in table.charges)

    def test_load_from_path(self, tmp_path, raw_table):
        data = copy.deepcopy(raw_table)
        data["version"] = "test"
        path = tmp_path / "rates.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        assert load_rate_table(str(path)).version == "test"

    def test_apy_chart_lookup(self, rates):
        contribution, corpus = rates.schemes.apy.contribution(3000, 30)
        assert contribution > 0
        assert corpus == 510000


class TestSlabValidation:
    """Slab tables must be contiguous, ordered and open-ended only at the top."""

    def test_valid_regime(self):
        regime = RegimeTable.model_validate(
            _regime(
                [
                    {"lowerBound": 0, "upperBound": 250000, "rate": 0},
                    {"lowerBound": 250000, "upperBound": None, "rate": 10},
                ]
            )
        )
        assert len(regime.slabs) == 2

    def test_overlapping_slabs(self):
        with pytest.raises(SchemaError):
            RegimeTable.model_validate(
                _regime(
                    [
                        {"lowerBound": 0, "upperBound": 300000, "rate": 0},
                        {"lowerBound": 250000, "upperBound": None, "rate": 5},
                    ]
                )
            )

    def test_gap_between_slabs(self):
        with pytest.raises(SchemaError):
            RegimeTable.model_validate(
                _regime(
                    [
                        {"lowerBound": 0, "upperBound": 250000, "rate": 0},
                        {"lowerBound": 300000, "upperBound": None, "rate": 5},
                    ]
                )
            )

    def test_decreasing_rates(self):
        with pytest.raises(SchemaError):
            RegimeTable.model_validate(
                _regime(
                    [
                        {"lowerBound": 0, "upperBound": 250000, "rate": 10},
                        {"lowerBound": 250000, "upperBound": None, "rate": 5},
                    ]
                )
            )

    def test_open_ended_middle_slab(self):
        with pytest.raises(SchemaError):
            RegimeTable.model_validate(
                _regime(
                    [
                        {"lowerBound": 0, "upperBound": None, "rate": 0},
                        {"lowerBound": 250000, "upperBound": None, "rate": 5},
                    ]
                )
            )

    def test_first_slab_starts_at_zero(self):
        with pytest.raises(SchemaError):
            RegimeTable.model_validate(
                _regime([{"lowerBound": 100000, "upperBound": None, "rate": 5}])
            )

    def test_bad_table_rejected_on_load(self, raw_table):
        data = copy.deepcopy(raw_table)
        data["incomeTax"]["years"]["2024-25"]["new"]["slabs"][1]["rate"] = 0
        data["incomeTax"]["years"]["2024-25"]["new"]["slabs"][2]["rate"] = 0
        data["incomeTax"]["years"]["2024-25"]["new"]["slabs"][0]["rate"] = 5
        with pytest.raises(SchemaError):
            RateTable.model_validate(data)

    def test_bounded_top_slab(self):
        """Income above the last slab would go untaxed, so the table is rejected."""
        with pytest.raises(SchemaError):
            RegimeTable.model_validate(
                _regime(
                    [
                        {"lowerBound": 0, "upperBound": 100, "rate": 0},
                        {"lowerBound": 100, "upperBound": 200, "rate": 10},
                    ]
                )
            )
