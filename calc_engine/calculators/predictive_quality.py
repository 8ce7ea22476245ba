"""
Predictive cut-quality model.

The four model kinds are deterministic heuristic stand-ins, not trained
models. They share one set of parameter-deviation penalties and differ in
how they turn those penalties into a 0-100 quality score:

    neural_network  smooth exponential decay
    random_forest   penalties binned into discrete leaf steps
    svm             epsilon-insensitive (hinge) penalties
    ensemble        mean of the other three

Each member carries its own offset and floor, so the kinds disagree both
for a perfectly tuned cut and for a hopeless one.

Reported accuracy is the kind's base accuracy plus a data-quality
adjustment bounded strictly inside +/-0.9 points, so two kinds never report
the same accuracy for the same request.
"""

import enum
import math

from ..schemas import AdvisoryLevel
from .base import (
    CalcOutput, clamp, define_calculator, enum_field, number_field, round_to,
    require_positive, rule_warning,
)
from .material_lookup import Category, QUALITY_CHARACTERISTICS

CALCULATOR_ID = "predictive-quality"


class ModelKind(str, enum.Enum):
    NEURAL_NETWORK = "neural_network"
    RANDOM_FOREST = "random_forest"
    SVM = "svm"
    ENSEMBLE = "ensemble"


BASE_ACCURACY = {
    ModelKind.SVM: 85.0,
    ModelKind.RANDOM_FOREST: 88.0,
    ModelKind.NEURAL_NETWORK: 92.0,
    ModelKind.ENSEMBLE: 94.0,
}

# ±% prediction uncertainty before confidence scaling
BASE_UNCERTAINTY = {
    ModelKind.NEURAL_NETWORK: 8.0,
    ModelKind.RANDOM_FOREST: 12.0,
    ModelKind.SVM: 15.0,
    ModelKind.ENSEMBLE: 6.0,
}

MAX_ACCURACY_ADJUSTMENT = 0.9
FOREST_LEAF_STEP = 2.5
SVM_MARGIN = 1.0
QUALITY_FLOOR = 60.0

# (offset, floor) per member kind: each has its own bias at the optimum and
# its own saturation level for badly tuned parameters
CALIBRATION = {
    ModelKind.NEURAL_NETWORK: (1.0, 63.0),
    ModelKind.RANDOM_FOREST: (-0.5, 61.0),
    ModelKind.SVM: (-1.5, QUALITY_FLOOR),
}

# Used when no historical data is supplied
DEFAULT_COMPLETENESS = 0.7
DEFAULT_CONSISTENCY = 0.8
DEFAULT_VARIANCE = 0.1

FIELDS = [
    enum_field("material_type", list(QUALITY_CHARACTERISTICS.keys()), label="Material Type"),
    number_field("thickness", 0.1, 50, unit="mm", step=0.1, label="Material Thickness"),
    number_field("laser_power", 100, 20000, unit="W", step=50, label="Laser Power"),
    number_field("cutting_speed", 100, 15000, unit="mm/min", step=10, label="Cutting Speed"),
    number_field("gas_pressure", 0.1, 30, unit="bar", step=0.1, label="Gas Pressure"),
    number_field("focus_height", -10, 10, unit="mm", step=0.1, label="Focus Height"),
    enum_field("assist_gas", ["oxygen", "nitrogen", "air", "argon"], label="Assist Gas"),
    number_field("beam_quality", 1, 10, unit="M²", step=0.1, label="Beam Quality"),
    number_field("nozzle_distance", 0.5, 5, unit="mm", step=0.1, label="Nozzle Distance"),
    enum_field("model_type", [k.value for k in ModelKind], label="Model Type"),
    enum_field("prediction_scope",
               ["surface_quality", "edge_quality", "dimensional_accuracy", "comprehensive"],
               label="Prediction Scope"),
    number_field("confidence_level", 0.8, 0.99, step=0.01, label="Confidence Level"),
    number_field("sample_size", 10, 10000, step=1, required=False, label="Historical Sample Size"),
    number_field("quality_variance", 0.01, 0.5, step=0.01, required=False,
                 label="Historical Quality Variance"),
    number_field("process_stability", 0.5, 1.0, step=0.01, required=False,
                 label="Historical Process Stability"),
]

EXAMPLE_INPUTS = {
    "material_type": "steel",
    "thickness": 5,
    "laser_power": 2000,
    "cutting_speed": 3000,
    "gas_pressure": 15,
    "focus_height": -2,
    "assist_gas": "oxygen",
    "beam_quality": 1.2,
    "nozzle_distance": 1.5,
    "model_type": "ensemble",
    "prediction_scope": "comprehensive",
    "confidence_level": 0.95,
}


# ============================================================
# Cross-field rules
# ============================================================

def check_power_density(inputs, library):
    if inputs["laser_power"] / inputs["thickness"] ** 2 > 1000:
        return [rule_warning(
            "laser_power",
            "High power density may cause excessive heat input and quality issues",
            "HIGH_POWER_DENSITY",
        )]
    return []


def check_speed_power_ratio(inputs, library):
    ratio = inputs["cutting_speed"] / inputs["laser_power"]
    if ratio > 5 or ratio < 0.1:
        return [rule_warning(
            "cutting_speed",
            "Speed-to-power ratio is outside typical operating range",
            "UNUSUAL_SPEED_POWER_RATIO",
        )]
    return []


def check_beam_quality(inputs, library):
    if inputs["beam_quality"] > 3 and inputs["prediction_scope"] == "dimensional_accuracy":
        return [rule_warning(
            "beam_quality",
            "Poor beam quality may limit dimensional accuracy prediction reliability",
            "POOR_BEAM_QUALITY",
        )]
    return []


def check_focus_height(inputs, library):
    if abs(inputs["focus_height"]) > inputs["thickness"]:
        return [rule_warning(
            "focus_height",
            "Focus height extends significantly beyond material thickness",
            "EXTREME_FOCUS_HEIGHT",
        )]
    return []


def check_confidence_level(inputs, library):
    if inputs["confidence_level"] > 0.95 and inputs["model_type"] == ModelKind.NEURAL_NETWORK.value:
        return [rule_warning(
            "confidence_level",
            "Very high confidence levels may not be achievable with complex models",
            "HIGH_CONFIDENCE_COMPLEX_MODEL",
        )]
    return []


# ============================================================
# Quality scoring per model kind
# ============================================================

def optimal_focus(thickness: float) -> float:
    return -thickness / 3


def optimal_pressure(assist_gas: str) -> float:
    return 15.0 if assist_gas == "nitrogen" else 8.0


def deviation_penalties(inputs: dict) -> dict:
    """Quality points lost per parameter for drifting off its sweet spot."""
    t = inputs["thickness"]
    optimal_power = t * 200
    focus = optimal_focus(t)
    pressure = optimal_pressure(inputs["assist_gas"])
    return {
        "power": abs(inputs["laser_power"] - optimal_power) / optimal_power * 15,
        "speed": abs(inputs["cutting_speed"] - 3000) / 3000 * 12,
        "focus": abs(inputs["focus_height"] - focus) / abs(focus) * 8,
        "beam": (inputs["beam_quality"] - 1) * 3,
        "pressure": abs(inputs["gas_pressure"] - pressure) / pressure * 5,
    }


def _neural_network(base: float, penalties: dict) -> float:
    return base * math.exp(-sum(penalties.values()) / base)


def _random_forest(base: float, penalties: dict) -> float:
    return base - sum(math.ceil(p / FOREST_LEAF_STEP) * FOREST_LEAF_STEP for p in penalties.values())


def _svm(base: float, penalties: dict) -> float:
    return base - sum(max(0.0, p - SVM_MARGIN) for p in penalties.values())


_SCORERS = {
    ModelKind.NEURAL_NETWORK: _neural_network,
    ModelKind.RANDOM_FOREST: _random_forest,
    ModelKind.SVM: _svm,
}


def quality_score(kind: ModelKind, base: float, penalties: dict) -> float:
    """Unrounded score for one kind. The ensemble is the mean of the members."""
    members = member_scores(base, penalties)
    if kind == ModelKind.ENSEMBLE:
        return sum(members.values()) / len(members)
    return members[kind]


def member_scores(base: float, penalties: dict) -> dict:
    scores = {}
    for kind, scorer in _SCORERS.items():
        offset, floor = CALIBRATION[kind]
        scores[kind] = clamp(scorer(base, penalties) + offset, floor, 100.0)
    return scores


def quality_scores(base: float, penalties: dict) -> dict:
    """
    Reported score for every kind, to one decimal. The ensemble is placed
    first; a member whose rounded score is already taken steps down 0.1 at
    a time, so no two kinds ever report the same score.
    """
    reported = {}
    for kind in (ModelKind.ENSEMBLE, *_SCORERS):
        value = round_to(quality_score(kind, base, penalties), 1)
        while value in reported.values():
            value = round_to(value - 0.1, 1)
        reported[kind] = value
    return {kind: reported[kind] for kind in ModelKind}


def data_quality(inputs: dict) -> dict:
    sample_size = inputs.get("sample_size")
    return {
        "completeness": min(1.0, sample_size / 1000) if sample_size else DEFAULT_COMPLETENESS,
        "consistency": inputs.get("process_stability", DEFAULT_CONSISTENCY),
        "variance": inputs.get("quality_variance", DEFAULT_VARIANCE),
    }


def accuracy_adjustment(kind: ModelKind, data: dict) -> float:
    """Strictly inside ±MAX_ACCURACY_ADJUSTMENT."""
    terms = {
        # Neural nets are data hungry
        ModelKind.NEURAL_NETWORK: (data["completeness"] - DEFAULT_COMPLETENESS) * 3,
        ModelKind.RANDOM_FOREST: (data["consistency"] - DEFAULT_CONSISTENCY) * 4,
        ModelKind.SVM: (DEFAULT_VARIANCE - data["variance"]) * 6,
    }
    if kind == ModelKind.ENSEMBLE:
        term = sum(terms.values()) / len(terms)
    else:
        term = terms[kind]
    return MAX_ACCURACY_ADJUSTMENT * math.tanh(term)


def training_accuracy(kind: ModelKind, data: dict) -> float:
    return BASE_ACCURACY[kind] + accuracy_adjustment(kind, data)


def prediction_uncertainty(kind: ModelKind, confidence_level: float) -> float:
    return BASE_UNCERTAINTY[kind] * (1 - confidence_level + 0.01)


def _impact(importance: float) -> str:
    if importance > 0.25:
        return "critical"
    if importance > 0.20:
        return "high"
    if importance > 0.15:
        return "medium"
    return "low"


def _stability_impact(sensitivity: float) -> str:
    if sensitivity > 0.25:
        return "high"
    if sensitivity > 0.15:
        return "medium"
    return "low"


# ============================================================
# Physical predictions
# ============================================================

def surface_roughness(inputs: dict, props) -> dict:
    predicted = (
        props.surface_roughness_base
        * math.sqrt(inputs["cutting_speed"] / 3000)
        * (inputs["beam_quality"] / 2)
        / math.sqrt(inputs["laser_power"] / 2000)
    )
    spread = predicted * 0.15
    if predicted < 1.0:
        grade = "excellent"
    elif predicted < 2.0:
        grade = "good"
    elif predicted < 3.5:
        grade = "fair"
    else:
        grade = "poor"
    return {
        "predicted": round_to(predicted, 2),
        "range": [round_to(predicted - spread, 2), round_to(predicted + spread, 2)],
        "grade": grade,
    }


def dross_risk(inputs: dict) -> float:
    speed_factor = inputs["cutting_speed"] / 3000
    pressure_factor = inputs["gas_pressure"] / 15
    thickness_factor = inputs["thickness"] / 10
    return clamp(speed_factor * 0.4 + (1 - pressure_factor) * 0.3 + thickness_factor * 0.3, 0, 1)


def edge_quality(inputs: dict) -> dict:
    t = inputs["thickness"]
    squareness = max(0.1, 0.5 + (inputs["cutting_speed"] - 3000) / 3000 * 0.3
                     + abs(inputs["focus_height"] + t / 3) * 0.1)
    straightness = 10 + (inputs["beam_quality"] - 1) * 5
    risk = dross_risk(inputs)
    if risk < 0.2:
        dross = "none"
    elif risk < 0.5:
        dross = "minimal"
    elif risk < 0.8:
        dross = "moderate"
    else:
        dross = "excessive"
    score = 100 - (squareness * 20 + straightness * 2 + risk * 30)
    if score > 85:
        grade = "excellent"
    elif score > 75:
        grade = "good"
    elif score > 65:
        grade = "fair"
    else:
        grade = "poor"
    return {
        "squareness": round_to(squareness, 2),
        "straightness": round_to(straightness, 1),
        "dross_level": dross,
        "grade": grade,
    }


def dimensional_accuracy(inputs: dict, props) -> dict:
    tolerance = (inputs["thickness"] * 0.02 + (inputs["beam_quality"] - 1) * 0.005
                 + props.thermal_sensitivity * 0.01) * 1000   # µm
    repeatability = 5 + (1 - props.stability_factor) * 10
    kerf = max(0.05, 0.1 + (inputs["laser_power"] - 2000) / 2000 * 0.05)
    if tolerance < 20 and repeatability < 5:
        grade = "excellent"
    elif tolerance < 50 and repeatability < 10:
        grade = "good"
    elif tolerance < 100 and repeatability < 20:
        grade = "fair"
    else:
        grade = "poor"
    return {
        "tolerance": round_to(tolerance, 0),
        "repeatability": round_to(repeatability, 1),
        "kerf": round_to(kerf, 3),
        "grade": grade,
    }


def heat_affected_zone(inputs: dict, props) -> dict:
    line_energy = inputs["laser_power"] / inputs["cutting_speed"] * 60
    width = math.sqrt(line_energy / props.thermal_sensitivity) * 0.001
    if width < 0.1:
        impact = "minimal"
    elif width < 0.3:
        impact = "moderate"
    else:
        impact = "significant"
    return {
        "width": round_to(width, 3),
        "hardness_change": round_to(min(50, line_energy * 0.01), 1),
        "microstructure_impact": impact,
    }


def defect_probabilities(inputs: dict, props) -> dict:
    t = inputs["thickness"]
    power = inputs["laser_power"]
    speed = inputs["cutting_speed"]
    power_density = power / (t * t)
    line_energy = power / speed * 60
    gas_effect = 1.2 if inputs["assist_gas"] == "oxygen" else 0.8

    risks = {
        "dross_formation": dross_risk(inputs),
        "burn_marks": clamp(
            power_density / 500 * (3000 / speed) * gas_effect * props.thermal_sensitivity, 0, 1),
        "micro_cracks": clamp(
            (power / speed * props.thermal_sensitivity / 1000) * (t / 20)
            * (inputs["beam_quality"] / 5), 0, 1),
        "warping_distortion": clamp(line_energy / 500 * (t / 100) * props.thermal_sensitivity, 0, 1),
        "incomplete_cuts": clamp(
            (1 - power_density / 200) + speed / 3000 * 0.3
            + abs(inputs["focus_height"] + t / 3) / t * 0.2, 0, 1),
    }
    average = sum(risks.values()) / len(risks)
    if average < 0.2:
        overall = "low"
    elif average < 0.5:
        overall = "medium"
    elif average < 0.8:
        overall = "high"
    else:
        overall = "critical"
    result = {name: round_to(value, 3) for name, value in risks.items()}
    result["overall_defect_risk"] = overall
    return result


def compute(inputs: dict, library) -> CalcOutput:
    out = CalcOutput()
    require_positive("thickness", inputs["thickness"])
    require_positive("laser_power", inputs["laser_power"])
    require_positive("cutting_speed", inputs["cutting_speed"])

    kind = ModelKind(inputs["model_type"])
    props = out.lookup(library, Category.QUALITY_CHARACTERISTICS, inputs["material_type"])
    base = props.base_quality * 100
    penalties = deviation_penalties(inputs)
    data = data_quality(inputs)
    confidence_level = inputs["confidence_level"]

    scores = quality_scores(base, penalties)
    score = scores[kind]
    accuracy = training_accuracy(kind, data)
    uncertainty = prediction_uncertainty(kind, confidence_level)
    half_width = score * uncertainty / 100

    weights = props.feature_weights
    features = [
        ("laser_power", weights["power"]),
        ("cutting_speed", weights["speed"]),
        ("gas_pressure", weights["pressure"]),
        ("focus_height", weights["focus"]),
        ("beam_quality", weights["beam"]),
    ]
    feature_importance = [
        {"feature": name, "importance": w, "impact": _impact(w)}
        for name, w in sorted(features, key=lambda f: -f[1])
    ]

    roughness = surface_roughness(inputs, props)
    haz = heat_affected_zone(inputs, props)
    defects = defect_probabilities(inputs, props)

    repeatability_index = props.stability_factor * (1 - props.defect_proneness)
    robustness = (repeatability_index * 0.6 + score / 100 * 0.4) * 100

    t = inputs["thickness"]
    nitrogen = inputs["assist_gas"] == "nitrogen"
    current = round_to(score, 0)

    model_comparison = []
    for other in ModelKind:
        model_comparison.append({
            "model_type": other.value,
            "quality_score": scores[other],
            "training_accuracy": round_to(training_accuracy(other, data), 2),
            "prediction_uncertainty": round_to(prediction_uncertainty(other, confidence_level), 2),
        })

    # Warnings
    if score < 70:
        out.warn("Low predicted quality score - consider parameter optimization",
                 code="LOW_QUALITY_SCORE")
    if defects["overall_defect_risk"] in ("high", "critical"):
        out.warn("High defect risk detected - review process parameters",
                 level=AdvisoryLevel.HIGH, code="HIGH_DEFECT_RISK")
    if roughness["predicted"] > 3.0:
        out.warn("High surface roughness predicted - may not meet quality requirements",
                 code="HIGH_ROUGHNESS")
    if haz["width"] > 0.5:
        out.warn("Large heat affected zone predicted - consider reducing heat input",
                 code="LARGE_HAZ")
    if defects["dross_formation"] > 0.7:
        out.warn("High dross formation risk - optimize speed and gas pressure",
                 code="HIGH_DROSS_RISK")
    if inputs["beam_quality"] > 5:
        out.warn("Poor beam quality may significantly impact prediction accuracy",
                 code="POOR_BEAM_QUALITY")

    out.recommend("Perform test cuts to validate predictions")
    if penalties["focus"] > 4:
        out.recommend(f"Move focus toward {optimal_focus(t):.1f} mm "
                      "(one third of thickness below the surface)", level=AdvisoryLevel.MEDIUM)
    out.data.update({
        "model_summary": {
            "model_type": kind.value,
            "prediction_scope": inputs["prediction_scope"],
            "training_accuracy": round_to(accuracy, 2),
            "validation_accuracy": round_to(accuracy * 0.95, 2),
            "confidence_level": confidence_level,
            "feature_importance": feature_importance,
            "heuristic": True,
        },
        "quality_predictions": {
            "overall_quality_score": round_to(score, 1),
            "confidence_interval": [
                round_to(max(0.0, score - half_width), 1),
                round_to(min(100.0, score + half_width), 1),
            ],
            "surface_roughness": roughness,
            "edge_quality": edge_quality(inputs),
            "dimensional_accuracy": dimensional_accuracy(inputs, props),
            "heat_affected_zone": haz,
        },
        "defect_probabilities": defects,
        "process_stability": {
            "repeatability_index": round_to(repeatability_index, 3),
            "robustness_score": round_to(robustness, 0),
            "sensitivity_factors": [
                {"parameter": name, "sensitivity": w, "stability_impact": _stability_impact(w)}
                for name, w in features[:4]
            ],
            "control_recommendations": [
                "Implement real-time power monitoring and feedback control",
                "Use precision speed control with encoder feedback",
                "Install pressure regulators with ±0.1 bar accuracy",
                "Employ automatic focus control systems",
            ],
        },
        "quality_optimization": {
            "current_performance": current,
            "optimization_potential": round_to(min(25, (100 - score) * 0.6), 1),
            "recommended_adjustments": [
                {"parameter": "laser_power", "current_value": inputs["laser_power"],
                 "recommended_value": round_to(t * 200, 0), "expected_improvement": 5,
                 "confidence": 0.85},
                {"parameter": "cutting_speed", "current_value": inputs["cutting_speed"],
                 "recommended_value": 3000, "expected_improvement": 8, "confidence": 0.90},
                {"parameter": "focus_height", "current_value": inputs["focus_height"],
                 "recommended_value": round_to(optimal_focus(t), 1), "expected_improvement": 3,
                 "confidence": 0.75},
            ],
            "alternative_settings": [
                {"name": "High Quality",
                 "parameters": {"laser_power": t * 180, "cutting_speed": 2500,
                                "gas_pressure": 18 if nitrogen else 10,
                                "focus_height": -t / 4},
                 "predicted_quality": min(95, current + 12),
                 "tradeoffs": ["Slower processing", "Higher gas consumption"]},
                {"name": "Balanced",
                 "parameters": {"laser_power": t * 200, "cutting_speed": 3000,
                                "gas_pressure": optimal_pressure(inputs["assist_gas"]),
                                "focus_height": optimal_focus(t)},
                 "predicted_quality": min(90, current + 8),
                 "tradeoffs": ["Good balance of quality and speed"]},
                {"name": "High Speed",
                 "parameters": {"laser_power": t * 220, "cutting_speed": 4000,
                                "gas_pressure": 12 if nitrogen else 6,
                                "focus_height": -t / 2},
                 "predicted_quality": max(75, current - 5),
                 "tradeoffs": ["Faster processing", "Slightly reduced quality"]},
            ],
        },
        "uncertainty_analysis": {
            "prediction_uncertainty": round_to(uncertainty, 2),
            "model_limitations": [
                "Heuristic scoring, not a trained model",
                "Limited to common material types and thickness ranges",
                "Does not account for machine-specific variations",
                "Environmental factors not fully considered",
            ],
            "data_quality_assessment": {
                "completeness": round_to(data["completeness"], 3),
                "consistency": round_to(data["consistency"], 3),
                "relevance": 0.85,
            },
        },
        "model_comparison": model_comparison,
    })
    return out


CALCULATOR = define_calculator(
    id=CALCULATOR_ID,
    title="Predictive Quality Model",
    category="Advanced Analysis",
    description="Heuristic cut-quality prediction with selectable model variants",
    fields=FIELDS,
    compute=compute,
    rules=[check_power_density, check_speed_power_ratio, check_beam_quality,
           check_focus_height, check_confidence_level],
    example_inputs=EXAMPLE_INPUTS,
)
