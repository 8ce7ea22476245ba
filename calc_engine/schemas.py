from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
import enum


class FieldKind(str, enum.Enum):
    NUMBER = "number"
    ENUM = "enum"
    BOOLEAN = "boolean"
    STRING = "string"


class Severity(str, enum.Enum):
    ERROR = "error"
    WARNING = "warning"


class AdvisoryKind(str, enum.Enum):
    WARNING = "warning"
    RECOMMENDATION = "recommendation"


class AdvisoryLevel(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FieldSpec(BaseModel):
    """Declarative description of one calculator input.

    Specs are frozen once a calculator is registered. Changing one means
    shipping the calculator under a new version.
    """
    id: str
    kind: FieldKind
    required: bool = True
    label: Optional[str] = None
    unit: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    allowed_values: Optional[List[str]] = None
    default: Optional[Any] = None

    class Config:
        frozen = True


class ValidationIssue(BaseModel):
    field: str
    message: str
    code: str
    severity: Severity = Severity.ERROR


class ValidationResult(BaseModel):
    is_valid: bool
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []


class Advisory(BaseModel):
    kind: AdvisoryKind
    message: str
    level: AdvisoryLevel = AdvisoryLevel.MEDIUM
    code: Optional[str] = None


class CandidateOption(BaseModel):
    """One alternative fed to the scorer (a material, a parameter set)."""
    name: str
    cost: float = 0.0
    properties: Dict[str, Any] = {}
    pros: List[str] = []
    cons: List[str] = []
    tags: List[str] = []


class RankedCandidate(BaseModel):
    rank: int
    name: str
    score: float = Field(ge=0, le=100)
    cost: float = 0.0
    sub_scores: Dict[str, float] = {}
    properties: Dict[str, Any] = {}
    pros: List[str] = []
    cons: List[str] = []


class CalculationMetadata(BaseModel):
    calculator_id: str
    timestamp: str
    calculation_time_ms: float
    version: str
    input_fingerprint: Optional[str] = None


class CalculationResult(BaseModel):
    success: bool
    data: Optional[Dict[str, Any]] = None
    errors: Optional[List[str]] = None
    advisories: List[Advisory] = []
    metadata: CalculationMetadata


# --- HTTP payloads ---

class CalculatorSummary(BaseModel):
    id: str
    title: str
    category: str
    version: str


class CalculatorDetail(CalculatorSummary):
    description: str = ""
    fields: List[FieldSpec]
    example_inputs: Dict[str, Any]
    default_inputs: Dict[str, Any]


class CalculationRequest(BaseModel):
    inputs: Dict[str, Any] = {}
