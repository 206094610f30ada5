"""
Calculation result value objects.
"""

from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple


def money(value: float) -> float:
    """Round a currency amount to paise."""
    return round(value, 2)


def percent(value: float) -> float:
    """Round a percentage for reporting."""
    return round(value, 4)


@dataclass(frozen=True)
class BreakdownRow:
    """One period of a schedule. ``interest`` is earned in this period only."""

    period: int
    contribution: float
    interest: float
    balance: float
    age: Optional[int] = None
    withdrawal: Optional[float] = None
    due_date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        row = {
            "period": self.period,
            "contribution": money(self.contribution),
            "interest": money(self.interest),
            "balance": money(self.balance),
        }
        if self.age is not None:
            row["age"] = self.age
        if self.withdrawal is not None:
            row["withdrawal"] = money(self.withdrawal)
        if self.due_date is not None:
            row["date"] = self.due_date.isoformat()
        return row


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


@dataclass(frozen=True)
class CalculationOutcome:
    """
    Result of one calculator call: named outputs plus an optional schedule.

    Nested mappings and sequences are frozen as well, so an outcome cannot be
    changed after the calculator returns it.
    """

    result: Mapping[str, Any]
    breakdown: Tuple[BreakdownRow, ...] = ()
    assumptions: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "result", _freeze(self.result))
        object.__setattr__(self, "breakdown", tuple(self.breakdown))
        object.__setattr__(self, "assumptions", _freeze(self.assumptions))

    def result_dict(self) -> Dict[str, Any]:
        """Plain, mutable copy of ``result`` for serialisation."""
        return _thaw(self.result)

    def assumptions_dict(self) -> Dict[str, Any]:
        return _thaw(self.assumptions)

    def breakdown_dicts(self) -> List[Dict[str, Any]]:
        return [row.to_dict() for row in self.breakdown]


def outcome(
    result: Dict[str, Any],
    breakdown: Sequence[BreakdownRow] = (),
    **assumptions: Any,
) -> CalculationOutcome:
    """Shorthand used by the calculators."""
    return CalculationOutcome(result=result, breakdown=tuple(breakdown), assumptions=assumptions)
