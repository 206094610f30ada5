"""
Financial calculation API endpoints.

A thin transport adapter: request bodies are handed to the dispatcher and
the response envelope is returned as-is (camelCase keys). Calculator
failures come back with ``success: false``; only an unknown kind is an
HTTP error.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException

from fincalc.calculations.dispatcher import (
    REGISTRY,
    CalculationRequest,
    CalculationResponse,
    calculate,
)
from fincalc.calculations.errors import UnknownCalculatorError

router = APIRouter()


def _run(request: CalculationRequest) -> Dict[str, Any]:
    try:
        response: CalculationResponse = calculate(request)
    except UnknownCalculatorError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return response.model_dump(by_alias=True, exclude_none=True)


@router.get("/kinds")
async def list_kinds() -> List[Dict[str, str]]:
    """List every calculator kind with its category."""
    return [
        {"kind": kind.value, "category": calculator.category}
        for kind, calculator in REGISTRY.items()
    ]


@router.post("")
def calculate_envelope(request: CalculationRequest):
    """Run the calculator named in the envelope's ``kind``."""
    return _run(request)


@router.post("/{kind}")
def calculate_kind(kind: str, inputs: Dict[str, Any]):
    """Run one calculator; the body is its inputs object."""
    return _run(CalculationRequest(kind=kind, inputs=inputs))
