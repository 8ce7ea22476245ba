"""
Input validation for calculator field specs.

Two passes:
1. Structural: presence, type, numeric bounds, enum membership. Each
   violated constraint is one error issue.
2. Cross-field rules: calculator-specific checks that only ever add
   warnings. They run only when the structural pass is clean, and they see
   the normalized record (defaults applied).

validate_input never raises. A rule that blows up is logged and reported
as a RULE_FAILED warning.
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..schemas import FieldKind, FieldSpec, Severity, ValidationIssue, ValidationResult
from .material_lookup import LIBRARY, DomainLibrary

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid measurement
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_float(value) -> Optional[float]:
    """float(value), or None when it is NaN, infinite or too large for a float."""
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _fmt(value: float) -> str:
    return f"{value:f}".rstrip("0").rstrip(".")


def _check_field(spec: FieldSpec, value: Any) -> List[ValidationIssue]:
    issues = []
    name = spec.label or spec.id

    if spec.kind == FieldKind.NUMBER:
        if not _is_number(value):
            return [ValidationIssue(
                field=spec.id, code="INVALID_TYPE",
                message=f"{name} must be a number",
            )]
        # JSON integers are unbounded; 10**400 has no float value
        number = _as_float(value)
        if number is None:
            return [ValidationIssue(
                field=spec.id, code="NOT_A_NUMBER",
                message=f"{name} must be a finite number",
            )]
        if spec.min is not None and number < spec.min:
            issues.append(ValidationIssue(
                field=spec.id, code="BELOW_MINIMUM",
                message=f"{name} must be at least {_fmt(spec.min)}",
            ))
        if spec.max is not None and number > spec.max:
            issues.append(ValidationIssue(
                field=spec.id, code="ABOVE_MAXIMUM",
                message=f"{name} must be at most {_fmt(spec.max)}",
            ))
        return issues

    if spec.kind == FieldKind.ENUM:
        allowed = spec.allowed_values or []
        if not isinstance(value, str) or value not in allowed:
            issues.append(ValidationIssue(
                field=spec.id, code="INVALID_OPTION",
                message=f"{name} must be one of: {', '.join(allowed)}",
            ))
        return issues

    if spec.kind == FieldKind.BOOLEAN:
        if not isinstance(value, bool):
            issues.append(ValidationIssue(
                field=spec.id, code="INVALID_TYPE",
                message=f"{name} must be true or false",
            ))
        return issues

    if not isinstance(value, str):
        issues.append(ValidationIssue(
            field=spec.id, code="INVALID_TYPE",
            message=f"{name} must be text",
        ))
    return issues


def check_structure(field_specs: Sequence[FieldSpec], inputs: Dict[str, Any]) -> ValidationResult:
    """Structural pass only. Unknown keys are reported as warnings."""
    errors = []
    warnings = []
    if not isinstance(inputs, dict):
        return ValidationResult(is_valid=False, errors=[ValidationIssue(
            field="*", code="INVALID_TYPE", message="Inputs must be an object",
        )])

    known = set()
    for spec in field_specs:
        known.add(spec.id)
        value = inputs.get(spec.id)
        if value is None:
            if spec.required:
                errors.append(ValidationIssue(
                    field=spec.id, code="REQUIRED",
                    message=f"{spec.label or spec.id} is required",
                ))
            continue
        errors.extend(_check_field(spec, value))

    for key in inputs:
        if key not in known:
            warnings.append(ValidationIssue(
                field=key, code="UNKNOWN_FIELD", severity=Severity.WARNING,
                message=f"Unknown input '{key}' was ignored",
            ))

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def apply_defaults(field_specs: Sequence[FieldSpec], inputs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalized record: declared fields only, with defaults substituted for
    omitted optional fields. Optional fields with no default stay absent.
    """
    normalized = {}
    for spec in field_specs:
        value = inputs.get(spec.id)
        if value is None:
            value = spec.default
        if value is not None:
            normalized[spec.id] = value
    return normalized


def run_rules(rules: Iterable, normalized: Dict[str, Any],
              library: DomainLibrary = LIBRARY) -> List[ValidationIssue]:
    warnings = []
    for rule in rules:
        try:
            issues = rule(normalized, library) or []
        except Exception:
            logger.exception("Validation rule %s failed", getattr(rule, "__name__", rule))
            warnings.append(ValidationIssue(
                field="*", code="RULE_FAILED", severity=Severity.WARNING,
                message="A consistency check could not be completed",
            ))
            continue
        for issue in issues:
            if issue.severity != Severity.WARNING:
                issue = issue.model_copy(update={"severity": Severity.WARNING})
            warnings.append(issue)
    return warnings


def validate_input(field_specs: Sequence[FieldSpec], inputs: Dict[str, Any],
                   rules: Iterable = (), library: DomainLibrary = LIBRARY) -> ValidationResult:
    """Validate a raw input record against field specs and cross-field rules."""
    result = check_structure(field_specs, inputs)
    if not result.is_valid:
        return result
    normalized = apply_defaults(field_specs, inputs)
    result.warnings.extend(run_rules(rules, normalized, library))
    return result
