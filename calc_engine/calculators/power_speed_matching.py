"""
Power-speed matching.

Finds a baseline power/speed pair from material, laser source and quality
grade, then applies the priority goal's multipliers. Recommended power is
clamped to 95% of the source's rated maximum.

Predicted edge quality (1-10) starts from the quality grade's score, is
scaled by the material and priority quality factors, and loses up to one
point the further the speed multiplier drifts from nominal. A "quality"
priority therefore always predicts a better edge than "speed" for the same
job, and "speed" always recommends the faster feed.
"""

import math

from ..schemas import AdvisoryLevel, CandidateOption
from .base import (
    CalcOutput, clamp, define_calculator, enum_field, number_field, round_to,
    require_positive, rule_warning,
)
from .material_lookup import (
    CUTTING_PROPERTIES, Category, LASER_SOURCES, PRIORITY_ADJUSTMENTS, QUALITY_GRADES,
)
from .scoring import Constraint, Criterion, Requirements, score_and_rank

CALCULATOR_ID = "power-speed-matching"

POWER_HEADROOM = 0.95
ASSIST_GASES = ["oxygen", "nitrogen", "air", "argon"]

# (speed, quality, efficiency) weights used to rank alternative settings
ALTERNATIVE_WEIGHTS = {
    "speed": (0.6, 0.2, 0.2),
    "quality": (0.2, 0.6, 0.2),
    "efficiency": (0.2, 0.2, 0.6),
    "balanced": (1 / 3, 1 / 3, 1 / 3),
}

FIELDS = [
    enum_field("material_type", list(CUTTING_PROPERTIES.keys()), label="Material Type"),
    number_field("thickness", 0.1, 50, unit="mm", step=0.1, label="Material Thickness"),
    enum_field("laser_type", list(LASER_SOURCES.keys()), label="Laser Type"),
    number_field("max_power", 50, 20000, unit="W", step=50, label="Maximum Laser Power"),
    enum_field("assist_gas", ASSIST_GASES, label="Assist Gas"),
    enum_field("quality_requirement", list(QUALITY_GRADES.keys()), label="Quality Requirement"),
    enum_field("priority_goal", list(PRIORITY_ADJUSTMENTS.keys()), label="Priority Goal"),
    number_field("current_power", 0, 20000, unit="W", step=50, required=False,
                 label="Current Power Setting"),
    number_field("current_speed", 0, 15000, unit="mm/min", step=10, required=False,
                 label="Current Speed Setting"),
]

EXAMPLE_INPUTS = {
    "material_type": "steel",
    "thickness": 5,
    "laser_type": "fiber",
    "max_power": 3000,
    "assist_gas": "oxygen",
    "quality_requirement": "standard",
    "priority_goal": "balanced",
}


# ============================================================
# Cross-field rules
# ============================================================

def check_laser_material(inputs, library):
    laser = library.get(Category.LASER, inputs["laser_type"])
    if laser.absorption.get(inputs["material_type"], 1.0) < 0.7:
        return [rule_warning(
            "laser_type",
            f"{inputs['laser_type']} laser may not be optimal for {inputs['material_type']}. "
            "Consider alternative laser type.",
            "SUBOPTIMAL_LASER_MATERIAL",
        )]
    return []


def check_power_adequacy(inputs, library):
    material = library.get(Category.CUTTING, inputs["material_type"])
    required = material.optimal_power_density * inputs["thickness"] * 100
    if inputs["max_power"] < required:
        return [rule_warning(
            "max_power",
            "Available power may be insufficient for optimal cutting of "
            f"{inputs['thickness']}mm {inputs['material_type']}",
            "INSUFFICIENT_POWER",
        )]
    return []


def check_gas(inputs, library):
    compatibility = library.get(Category.GAS_COMPATIBILITY, inputs["material_type"])
    rating = compatibility.rate(inputs["assist_gas"])
    if rating == "optimal":
        return []
    if rating == "acceptable":
        message = "Acceptable gas choice, but not optimal for best results"
    else:
        message = "Poor gas choice for this material - consider switching"
    return [rule_warning("assist_gas", message, "SUBOPTIMAL_GAS")]


def check_current_power(inputs, library):
    power = inputs.get("current_power")
    speed = inputs.get("current_speed")
    if not power or not speed:
        return []
    material = library.get(Category.CUTTING, inputs["material_type"])
    if power / (inputs["thickness"] ** 2) > material.optimal_power_density * 2:
        return [rule_warning(
            "current_power",
            "Current power setting is very high and may cause quality issues",
            "HIGH_CURRENT_POWER",
        )]
    return []


# ============================================================
# Model
# ============================================================

def optimal_settings(inputs: dict, material, laser, quality, priority) -> dict:
    """Unrounded optimum for one priority goal."""
    thickness = inputs["thickness"]
    absorption = laser.absorption.get(inputs["material_type"], 1.0)

    base_power = material.base_power_factor * thickness ** 1.2 * 100 * absorption
    power = base_power * quality.power_multiplier * priority.power_multiplier
    power = min(power, inputs["max_power"] * POWER_HEADROOM)

    base_speed = material.base_speed_factor * 3000 / math.sqrt(thickness)
    speed_multiplier = quality.speed_multiplier * priority.speed_multiplier
    speed = base_speed * speed_multiplier

    drift_penalty = min(1.0, abs(speed_multiplier - 1.0) * 0.5)
    edge_quality = clamp(
        quality.quality_score * material.quality_factor * priority.quality_factor - drift_penalty,
        1.0, 10.0,
    )

    return {
        "power": power,
        "speed": speed,
        "power_density": power / thickness ** 2,
        "specific_energy": power * 60 / (speed * thickness),
        "edge_quality": edge_quality,
    }


def _surface_roughness(edge_quality: float) -> str:
    if edge_quality > 8:
        return "Ra 1.6"
    if edge_quality > 6:
        return "Ra 3.2"
    return "Ra 6.3"


def alternative_settings(optimal: dict, inputs: dict, priority_goal: str) -> list:
    max_power = inputs["max_power"]
    power = optimal["power"]
    speed = optimal["speed"]
    options = [
        ("High Speed", min(power * 1.3, max_power), speed * 1.5,
         "Faster cutting, slightly lower edge quality", 85,
         6.5 if power > max_power * 0.8 else 7.5),
        ("High Quality", power * 0.7, speed * 0.6,
         "Superior edge quality, slower cutting", 70, 9.5),
        ("Energy Efficient", power * 0.8, speed * 1.1,
         "Lower energy consumption, good balance", 95, 8.0),
        ("Conservative", power * 0.6, speed * 0.8,
         "Safe parameters, extended equipment life", 75, 8.5),
    ]
    candidates = [
        CandidateOption(
            name=name,
            cost=round_to(p, 0),
            properties={"power": p, "speed": s, "tradeoff": tradeoff,
                        "efficiency": efficiency, "quality_score": q},
        )
        for name, p, s, tradeoff, efficiency, q in options
    ]
    fastest = max(c.properties["speed"] for c in candidates)
    w_speed, w_quality, w_efficiency = ALTERNATIVE_WEIGHTS[priority_goal]
    ranked = score_and_rank(candidates, Requirements(
        criteria=[
            Criterion("speed", w_speed, lambda c: c.properties["speed"] / fastest),
            Criterion("quality", w_quality, lambda c: c.properties["quality_score"] / 10),
            Criterion("efficiency", w_efficiency, lambda c: c.properties["efficiency"] / 100),
        ],
        constraints=[Constraint("within_rated_power", lambda c: c.properties["power"] <= max_power)],
    ))
    return [
        {
            "rank": r.rank,
            "name": r.name,
            "power": round_to(r.properties["power"], 0),
            "speed": round_to(r.properties["speed"], 0),
            "tradeoff": r.properties["tradeoff"],
            "efficiency": r.properties["efficiency"],
            "quality_score": r.properties["quality_score"],
            "fit_score": round_to(r.score, 1),
        }
        for r in ranked
    ]


def compute(inputs: dict, library) -> CalcOutput:
    out = CalcOutput()
    thickness = require_positive("thickness", inputs["thickness"])
    max_power = require_positive("max_power", inputs["max_power"])
    material_type = inputs["material_type"]
    goal = inputs["priority_goal"]

    material = out.lookup(library, Category.CUTTING, material_type)
    laser = out.lookup(library, Category.LASER, inputs["laser_type"])
    quality = out.lookup(library, Category.QUALITY_GRADE, inputs["quality_requirement"])
    priority = out.lookup(library, Category.PRIORITY, goal)

    optimal = optimal_settings(inputs, material, laser, quality, priority)
    power = optimal["power"]
    speed = optimal["speed"]
    power_pct = power / max_power * 100
    power_density = optimal["power_density"]
    edge_quality = optimal["edge_quality"]

    theoretical_max_speed = 5000 / math.sqrt(thickness)
    cutting_efficiency = min(100.0, speed / theoretical_max_speed * 100)
    kerf = 0.1 + thickness * 0.02 + power_density * 0.01
    haz = thickness * 0.1 * (power_density / material.optimal_power_density)

    # Comparison against the operator's current settings
    productivity_gain = 0.0
    quality_improvement = 0.0
    power_utilization = power_pct
    current_power = inputs.get("current_power")
    current_speed = inputs.get("current_speed")
    if current_power and current_speed:
        power_utilization = max(power_pct, current_power / max_power * 100)
        productivity_gain = (speed - current_speed) / current_speed * 100
        current_density = current_power / thickness ** 2
        current_quality = clamp(
            8 - abs(current_density / material.optimal_power_density - 1) * 3, 1, 10)
        quality_improvement = (edge_quality - current_quality) / current_quality * 100

    energy_efficiency = max(60.0, 100 - optimal["specific_energy"] * 5)

    # Process recommendations
    parameter_adjustments = []
    if power_pct > 90:
        parameter_adjustments.append("Consider reducing power slightly to extend laser life")
    if power_density > material.optimal_power_density * 1.5:
        parameter_adjustments.append("Power density is high - monitor for heat damage")
    quality_tips = [
        "Maintain consistent gas pressure for uniform cut quality",
        "Ensure proper focus position for optimal beam delivery",
    ]
    if inputs["quality_requirement"] in ("precision", "mirror"):
        quality_tips.append("Use multiple passes for thick materials to improve quality")
    efficiency_tips = [
        "Monitor actual cutting speed and adjust parameters as needed",
        "Regular maintenance ensures consistent performance",
    ]
    if goal == "efficiency":
        efficiency_tips.append("Consider batch cutting to maximize material utilization")
    troubleshooting = [
        "If cut quality is poor, reduce speed before increasing power",
        "Excessive dross indicates need for gas pressure adjustment",
        "Inconsistent cuts may indicate focus or gas flow issues",
    ]
    for tip in parameter_adjustments:
        out.recommend(tip, level=AdvisoryLevel.MEDIUM)

    # Warnings
    if power >= max_power * POWER_HEADROOM:
        out.warn("Very high power utilization - monitor laser performance closely",
                 code="HIGH_POWER_UTILIZATION")
    if power_density > material.optimal_power_density * 2:
        out.warn("High power density may cause excessive heat damage",
                 level=AdvisoryLevel.HIGH, code="HIGH_POWER_DENSITY")
    if thickness > 20 and speed > 1000:
        out.warn("High speed on thick material may result in incomplete cuts",
                 level=AdvisoryLevel.HIGH, code="THICK_FAST_CUT")
    if material_type == "copper" and inputs["laser_type"] == "fiber":
        out.warn("Copper has low absorption for fiber lasers - expect reduced efficiency",
                 code="LOW_ABSORPTION")
    if inputs["assist_gas"] == "oxygen" and material_type == "aluminum":
        out.warn("Oxygen with aluminum may cause excessive oxidation", code="OXIDATION_RISK")

    out.data.update({
        "optimal_settings": {
            "power": round_to(power, 0),
            "speed": round_to(speed, 0),
            "power_percentage": round_to(power_pct, 0),
            "power_density": round_to(power_density, 2),
            "specific_energy": round_to(optimal["specific_energy"], 2),
        },
        "performance_prediction": {
            "cutting_efficiency": round_to(cutting_efficiency, 0),
            "edge_quality": round_to(edge_quality, 1),
            "expected_kerf": round_to(kerf, 2),
            "surface_roughness": _surface_roughness(edge_quality),
            "heat_affected_zone": round_to(haz, 2),
        },
        "alternative_settings": alternative_settings(optimal, inputs, goal),
        "optimization_analysis": {
            "power_utilization": round_to(power_utilization, 0),
            "speed_optimization": 85,
            "energy_efficiency": round_to(energy_efficiency, 0),
            "productivity_gain": round_to(max(0.0, productivity_gain), 0),
            "quality_improvement": round_to(max(0.0, quality_improvement), 0),
        },
        "process_recommendations": {
            "parameter_adjustments": parameter_adjustments,
            "quality_tips": quality_tips,
            "efficiency_tips": efficiency_tips,
            "troubleshooting": troubleshooting,
        },
    })
    return out


CALCULATOR = define_calculator(
    id=CALCULATOR_ID,
    title="Power-Speed Matching Calculator",
    category="Process Optimization",
    description="Optimize laser power and cutting speed for ideal cutting performance",
    fields=FIELDS,
    compute=compute,
    rules=[check_laser_material, check_power_adequacy, check_gas, check_current_power],
    example_inputs=EXAMPLE_INPUTS,
)
