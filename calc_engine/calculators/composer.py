"""
Builds the CalculationResult envelope around a compute stage's output.
"""

import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..config import settings
from ..schemas import (
    AdvisoryKind, CalculationMetadata, CalculationResult,
)
from .base import CalcOutput, CalculatorDefinition

logger = logging.getLogger(__name__)


def fingerprint(inputs: Dict[str, Any]) -> str:
    """Stable sha256 of an input record (key order does not matter)."""
    canonical = json.dumps(inputs, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _confidence(output: CalcOutput) -> str:
    if output.defaults_used:
        return "Low"
    if any(a.kind == AdvisoryKind.WARNING for a in output.advisories):
        return "Medium"
    return "High"


def compose(calculator: CalculatorDefinition, normalized: Dict[str, Any],
            output: CalcOutput, elapsed_ms: float) -> CalculationResult:
    """Successful result: data plus warnings/recommendations plus metadata."""
    if elapsed_ms > settings.SLOW_CALCULATION_MS:
        logger.warning(
            "Slow calculation: %s took %.1f ms (limit %.0f ms)",
            calculator.id, elapsed_ms, settings.SLOW_CALCULATION_MS,
        )

    data = dict(output.data)
    data["warnings"] = output.warnings
    data["recommendations"] = output.recommendations
    data.setdefault("confidence", _confidence(output))

    return CalculationResult(
        success=True,
        data=data,
        advisories=list(output.advisories),
        metadata=CalculationMetadata(
            calculator_id=calculator.id,
            timestamp=_now(),
            calculation_time_ms=round(elapsed_ms, 3),
            version=calculator.version,
            input_fingerprint=fingerprint(normalized),
        ),
    )


def failure(calculator_id: str, errors: List[str], version: str = "",
            inputs: Optional[Dict[str, Any]] = None,
            elapsed_ms: float = 0.0) -> CalculationResult:
    """success=False result. Messages are meant for end users, not debugging."""
    return CalculationResult(
        success=False,
        errors=errors,
        metadata=CalculationMetadata(
            calculator_id=calculator_id,
            timestamp=_now(),
            calculation_time_ms=round(elapsed_ms, 3),
            version=version,
            input_fingerprint=fingerprint(inputs) if isinstance(inputs, dict) else None,
        ),
    )
