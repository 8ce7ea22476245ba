from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from typing import List
import logging
import uuid

from .. import schemas
from ..calculators import registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/calculators", tags=["calculators"])


def _get_or_404(calculator_id: str):
    calc = registry.get_calculator(calculator_id)
    if calc is None:
        raise HTTPException(status_code=404, detail="Calculator not found")
    return calc


@router.get("/", response_model=List[schemas.CalculatorSummary])
def list_calculators():
    return [
        schemas.CalculatorSummary(id=c.id, title=c.title, category=c.category, version=c.version)
        for c in (registry.get_calculator(i) for i in registry.list_calculators())
    ]


@router.get("/{calculator_id}", response_model=schemas.CalculatorDetail)
def get_calculator(calculator_id: str):
    calc = _get_or_404(calculator_id)
    return schemas.CalculatorDetail(
        id=calc.id,
        title=calc.title,
        category=calc.category,
        version=calc.version,
        description=calc.description,
        fields=list(calc.field_specs),
        example_inputs=dict(calc.example_inputs),
        default_inputs=dict(calc.default_inputs),
    )


@router.get("/{calculator_id}/example")
def get_example_inputs(calculator_id: str):
    _get_or_404(calculator_id)
    return registry.get_example_inputs(calculator_id)


@router.get("/{calculator_id}/defaults")
def get_default_inputs(calculator_id: str):
    _get_or_404(calculator_id)
    return registry.get_default_inputs(calculator_id)


@router.post("/{calculator_id}/validate", response_model=schemas.ValidationResult)
def validate_inputs(calculator_id: str, request: schemas.CalculationRequest):
    _get_or_404(calculator_id)
    return registry.validate(calculator_id, request.inputs)


@router.post("/{calculator_id}/calculate", response_model=schemas.CalculationResult)
def calculate(calculator_id: str, request: schemas.CalculationRequest):
    """
    Run a calculation. 400 with the issue list when inputs are invalid;
    500 with a request id (and nothing internal) when the model fails.
    """
    _get_or_404(calculator_id)
    validation = registry.validate(calculator_id, request.inputs)
    if not validation.is_valid:
        raise HTTPException(
            status_code=400,
            detail=[issue.model_dump(mode="json") for issue in validation.errors],
        )

    result = registry.calculate(calculator_id, request.inputs)
    if not result.success:
        request_id = uuid.uuid4().hex
        logger.error("Calculation %s failed (request %s): %s",
                     calculator_id, request_id, result.errors)
        return JSONResponse(
            status_code=500,
            content={"detail": "Calculation failed", "request_id": request_id},
        )
    return result
