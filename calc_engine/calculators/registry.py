"""
Calculator registry and engine entry points.

Maps calculator ids to CalculatorDefinition records. Host code should go
through validate() and calculate() here rather than calling a compute
function directly: these never raise, whatever the input.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from ..schemas import CalculationResult, ValidationIssue, ValidationResult
from .base import CalculatorDefinition
from .composer import compose, failure
from .material_lookup import LIBRARY, DomainLibrary
from .validator import apply_defaults, validate_input
from . import (
    architectural_metal,
    cutting_time,
    heat_affected_zone,
    material_selection,
    power_speed_matching,
    predictive_quality,
)

logger = logging.getLogger(__name__)

CALCULATOR_REGISTRY: Dict[str, CalculatorDefinition] = {}


def register(definition: CalculatorDefinition) -> CalculatorDefinition:
    """
    Add a calculator. Raises ValueError for a duplicate id, or when the
    calculator's own example/default inputs do not validate.
    """
    if definition.id in CALCULATOR_REGISTRY:
        raise ValueError(f"Calculator already registered: {definition.id}")
    for label, record in (("example", definition.example_inputs),
                          ("default", definition.default_inputs)):
        result = validate_input(definition.field_specs, dict(record), definition.rules)
        if not result.is_valid:
            raise ValueError(
                f"{definition.id} {label} inputs fail validation: "
                + "; ".join(e.message for e in result.errors)
            )
    CALCULATOR_REGISTRY[definition.id] = definition
    logger.info("Registered calculator %s v%s", definition.id, definition.version)
    return definition


def get_calculator(calculator_id: str) -> Optional[CalculatorDefinition]:
    """Returns the calculator definition, or None when the id is unknown."""
    return CALCULATOR_REGISTRY.get(calculator_id)


def has_calculator(calculator_id: str) -> bool:
    """Check if a calculator exists for an id."""
    return calculator_id in CALCULATOR_REGISTRY


def list_calculators() -> List[str]:
    """List all registered calculator ids."""
    return list(CALCULATOR_REGISTRY.keys())


def _not_found(calculator_id: str) -> ValidationIssue:
    return ValidationIssue(
        field="calculator_id",
        code="CALCULATOR_NOT_FOUND",
        message=f"No calculator registered with id '{calculator_id}'",
    )


def validate(calculator_id: str, inputs: Dict[str, Any],
             library: DomainLibrary = LIBRARY) -> ValidationResult:
    calc = get_calculator(calculator_id)
    if calc is None:
        return ValidationResult(is_valid=False, errors=[_not_found(calculator_id)])
    return validate_input(calc.field_specs, inputs, calc.rules, library)


def calculate(calculator_id: str, inputs: Dict[str, Any],
              library: DomainLibrary = LIBRARY) -> CalculationResult:
    """
    Validate, compute and compose. Returns success=False (never raises) for
    an unknown id, invalid input, or a failure inside the compute stage.
    """
    calc = get_calculator(calculator_id)
    if calc is None:
        return failure(calculator_id, ["Calculator not found"])

    validation = validate_input(calc.field_specs, inputs, calc.rules, library)
    if not validation.is_valid:
        return failure(
            calc.id,
            ["Invalid input"] + [e.message for e in validation.errors],
            version=calc.version,
            inputs=inputs,
        )

    normalized = apply_defaults(calc.field_specs, inputs)
    started = time.perf_counter()
    try:
        output = calc.compute(normalized, library)
    except Exception:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.exception("%s compute failed for inputs %r", calc.id, normalized)
        return failure(
            calc.id,
            [f"{calc.title} calculation failed"],
            version=calc.version,
            inputs=normalized,
            elapsed_ms=elapsed_ms,
        )
    elapsed_ms = (time.perf_counter() - started) * 1000

    for issue in validation.warnings:
        output.warn(issue.message, code=issue.code)
    return compose(calc, normalized, output, elapsed_ms)


def get_example_inputs(calculator_id: str) -> Optional[Dict[str, Any]]:
    calc = get_calculator(calculator_id)
    return dict(calc.example_inputs) if calc else None


def get_default_inputs(calculator_id: str) -> Optional[Dict[str, Any]]:
    calc = get_calculator(calculator_id)
    return dict(calc.default_inputs) if calc else None


def self_check() -> Dict[str, bool]:
    """Re-validate every registered calculator's example and default inputs."""
    report = {}
    for calc in CALCULATOR_REGISTRY.values():
        report[calc.id] = all(
            validate_input(calc.field_specs, dict(record), calc.rules).is_valid
            for record in (calc.example_inputs, calc.default_inputs)
        )
    return report


for _module in (heat_affected_zone, architectural_metal, material_selection,
                power_speed_matching, predictive_quality, cutting_time):
    register(_module.CALCULATOR)
