"""
Calculator capability record and helpers shared by every estimation model.

A calculator is not a subclass: it is a CalculatorDefinition that bundles
its field specs, its cross-field rules, its compute function and its
example/default inputs. The registry only ever talks to this record.

compute(inputs, library) receives the normalized input dict (defaults
applied, unknown keys dropped) and returns a CalcOutput.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..schemas import (
    Advisory, AdvisoryKind, AdvisoryLevel, FieldKind, FieldSpec,
    Severity, ValidationIssue,
)
from .material_lookup import Category, DomainLibrary


DEFAULT_VERSION = "1.0.0"


class EngineError(Exception):
    """An internal precondition failed inside a compute stage."""


@dataclass
class CalcOutput:
    """What a compute function hands back to the composer."""
    data: Dict[str, Any] = field(default_factory=dict)
    advisories: List[Advisory] = field(default_factory=list)
    defaults_used: List[str] = field(default_factory=list)

    def warn(self, message: str, level: AdvisoryLevel = AdvisoryLevel.MEDIUM,
             code: str = None) -> None:
        self.advisories.append(Advisory(
            kind=AdvisoryKind.WARNING, message=message, level=level, code=code,
        ))

    def recommend(self, message: str, level: AdvisoryLevel = AdvisoryLevel.LOW,
                  code: str = None) -> None:
        self.advisories.append(Advisory(
            kind=AdvisoryKind.RECOMMENDATION, message=message, level=level, code=code,
        ))

    def lookup(self, library: DomainLibrary, category: Category, key):
        """
        Library lookup that turns a default-record fallback into a warning.
        Returns the record either way.
        """
        result = library.lookup(category, key)
        if result.used_default:
            label = "/".join(key) if isinstance(key, tuple) else str(key)
            self.defaults_used.append(f"{category.value}:{label}")
            self.warn(
                f"No {category.value.replace('_', ' ')} data for '{label}' - "
                "generic values were used",
                level=AdvisoryLevel.MEDIUM,
                code="DEFAULT_RECORD_USED",
            )
        return result.record

    @property
    def warnings(self) -> List[str]:
        return [a.message for a in self.advisories if a.kind == AdvisoryKind.WARNING]

    @property
    def recommendations(self) -> List[str]:
        return [a.message for a in self.advisories if a.kind == AdvisoryKind.RECOMMENDATION]


Rule = Callable[[dict, DomainLibrary], List[ValidationIssue]]
Compute = Callable[[dict, DomainLibrary], CalcOutput]


@dataclass(frozen=True)
class CalculatorDefinition:
    id: str
    title: str
    category: str
    field_specs: tuple
    compute: Compute
    example_inputs: Mapping
    default_inputs: Mapping
    rules: tuple = ()
    description: str = ""
    version: str = DEFAULT_VERSION

    def get_field(self, field_id: str) -> Optional[FieldSpec]:
        for spec in self.field_specs:
            if spec.id == field_id:
                return spec
        return None


def define_calculator(id: str, title: str, category: str, fields: Sequence[FieldSpec],
                      compute: Compute, example_inputs: dict, default_inputs: dict = None,
                      rules: Sequence[Rule] = (), description: str = "",
                      version: str = DEFAULT_VERSION) -> CalculatorDefinition:
    """Freeze a calculator's pieces into a CalculatorDefinition."""
    return CalculatorDefinition(
        id=id,
        title=title,
        category=category,
        field_specs=tuple(fields),
        compute=compute,
        example_inputs=MappingProxyType(dict(example_inputs)),
        default_inputs=MappingProxyType(dict(default_inputs or example_inputs)),
        rules=tuple(rules),
        description=description,
        version=version,
    )


# --- Field spec builders ---

def number_field(id: str, min: float = None, max: float = None, unit: str = None,
                 step: float = None, required: bool = True, default=None,
                 label: str = None) -> FieldSpec:
    return FieldSpec(
        id=id, kind=FieldKind.NUMBER, required=required, label=label, unit=unit,
        min=min, max=max, step=step, default=default,
    )


def enum_field(id: str, values: Sequence[str], required: bool = True, default=None,
               label: str = None) -> FieldSpec:
    return FieldSpec(
        id=id, kind=FieldKind.ENUM, required=required, label=label,
        allowed_values=list(values), default=default,
    )


def rule_warning(field_id: str, message: str, code: str) -> ValidationIssue:
    """Build the warning issue a cross-field rule reports."""
    return ValidationIssue(field=field_id, message=message, code=code, severity=Severity.WARNING)


# --- Numeric helpers ---

def round_to(value: float, digits: int = 2) -> float:
    """Round for output only. Intermediate values stay unrounded."""
    return round(float(value), digits)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def require_positive(name: str, value: float) -> float:
    """Guard against a zero/negative divisor reaching a formula."""
    if not math.isfinite(value) or value <= 0:
        raise EngineError(f"{name} must be positive, got {value!r}")
    return value
