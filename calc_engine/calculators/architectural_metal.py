"""
Architectural metal element check.

Treats the element as a simply supported plate strip: loads come from the
element area times per-exposure wind pressure and per-element dead/live
factors, section properties come from thickness x width, and stiffness is
judged by the span/deflection ratio against L/250.

Design load: 1.6 wind + 1.2 dead + 1.6 live.
"""

from ..schemas import AdvisoryLevel
from .base import (
    CalcOutput, define_calculator, enum_field, number_field, round_to,
    require_positive, rule_warning,
)
from .material_lookup import (
    ARCHITECTURAL_MATERIALS, Category, ELEMENT_PROFILES, EXPOSURE_PROFILES,
)

CALCULATOR_ID = "architectural-metal"

ALLOWABLE_DEFLECTION_RATIO = 250
SAFETY_FACTOR = 2.5

LOAD_COMBINATIONS = [
    ("Dead + Live", 1.2, 1.6, 0.0),
    ("Dead + Wind", 1.2, 0.0, 1.6),
    ("Dead + Live + Wind", 1.2, 1.0, 1.0),
]

FIELDS = [
    enum_field("architectural_element", list(ELEMENT_PROFILES.keys()), label="Architectural Element"),
    enum_field("material_type", list(ARCHITECTURAL_MATERIALS.keys()), label="Material Type"),
    number_field("material_thickness", 1.0, 12.0, unit="mm", step=0.5, label="Material Thickness"),
    number_field("element_length", 300, 6000, unit="mm", step=50, label="Element Length"),
    number_field("element_width", 200, 3000, unit="mm", step=50, label="Element Width"),
    enum_field("weather_exposure", list(EXPOSURE_PROFILES.keys()), label="Weather Exposure"),
]

EXAMPLE_INPUTS = {
    "architectural_element": "facade_panel",
    "material_type": "aluminum_6061",
    "material_thickness": 4.0,
    "element_length": 3000,
    "element_width": 1500,
    "weather_exposure": "moderate",
}

DEFAULT_INPUTS = {
    "architectural_element": "facade_panel",
    "material_type": "aluminum_6061",
    "material_thickness": 3.0,
    "element_length": 2400,
    "element_width": 1200,
    "weather_exposure": "moderate",
}


# ============================================================
# Cross-field rules
# ============================================================

def check_structural_thickness(inputs, library):
    if inputs["architectural_element"] in ("structural_beam", "canopy_structure") \
            and inputs["material_thickness"] < 4.0:
        return [rule_warning(
            "material_thickness",
            "Load-bearing elements under 4mm thick rarely meet stiffness requirements",
            "THIN_STRUCTURAL_MEMBER",
        )]
    return []


def check_carbon_steel_exposure(inputs, library):
    if inputs["material_type"] == "carbon_steel" and inputs["weather_exposure"] in ("severe", "extreme"):
        return [rule_warning(
            "material_type",
            "Carbon steel needs a protective coating system for severe or extreme exposure",
            "UNPROTECTED_CARBON_STEEL",
        )]
    return []


def check_slenderness(inputs, library):
    if inputs["element_length"] / inputs["material_thickness"] > 1000:
        return [rule_warning(
            "element_length",
            "Very slender element - expect large deflection without intermediate supports",
            "SLENDER_ELEMENT",
        )]
    return []


# ============================================================
# Model
# ============================================================

def section_properties(thickness: float, width: float) -> dict:
    area = thickness * width                            # mm²
    moment_of_inertia = width * thickness ** 3 / 12     # mm⁴
    section_modulus = moment_of_inertia / (thickness / 2)  # mm³
    return {"area": area, "moment_of_inertia": moment_of_inertia, "section_modulus": section_modulus}


def loads(element, exposure, length: float, width: float) -> dict:
    area_m2 = length * width / 1_000_000
    wind = exposure.wind_pressure * area_m2
    dead = element.dead_load_factor * area_m2
    live = element.live_load_factor * area_m2
    return {
        "area": area_m2,
        "wind": wind,
        "dead": dead,
        "live": live,
        "design": wind * 1.6 + dead * 1.2 + live * 1.6,
    }


def deflection(design_load_kn: float, span: float, elastic_modulus: float,
               moment_of_inertia: float) -> float:
    """Midspan deflection (mm) of a simply supported span, 5PL³/384EI."""
    load_n = design_load_kn * 1000
    return 5 * load_n * span ** 3 / (384 * elastic_modulus * moment_of_inertia)


def capacity_rating(tensile_kn: float, bending_knm: float) -> str:
    combined = tensile_kn + bending_knm * 10
    if combined > 1000:
        return "Very High Capacity"
    if combined > 500:
        return "High Capacity"
    if combined > 200:
        return "Moderate Capacity"
    if combined > 50:
        return "Low Capacity"
    return "Very Low Capacity"


def stiffness_recommendation(ratio: float) -> str:
    allowable = ALLOWABLE_DEFLECTION_RATIO
    if ratio > allowable * 1.5:
        return "Excellent stiffness - consider optimization"
    if ratio > allowable:
        return "Adequate stiffness - meets requirements"
    if ratio > allowable * 0.8:
        return "Marginal stiffness - consider reinforcement"
    return "Insufficient stiffness - increase thickness or add support"


def fastener_size(design_load_kn: float) -> str:
    if design_load_kn > 50:
        return "M12 or larger structural bolts"
    if design_load_kn > 20:
        return "M10 structural bolts"
    if design_load_kn > 10:
        return "M8 bolts or equivalent"
    if design_load_kn > 5:
        return "M6 bolts or #10 screws"
    return "#8 screws or equivalent"


def movement_joints(movement_mm: float) -> list:
    if movement_mm > 25:
        return ["Expansion joints required at maximum 12m centers",
                "Sliding connections recommended"]
    if movement_mm > 15:
        return ["Expansion joints recommended at 18m centers",
                "Flexible connections at ends"]
    if movement_mm > 8:
        return ["Flexible sealants and connections", "Monitor for thermal stress"]
    return ["Standard connections adequate"]


def compute(inputs: dict, library) -> CalcOutput:
    out = CalcOutput()
    thickness = require_positive("material_thickness", inputs["material_thickness"])
    length = require_positive("element_length", inputs["element_length"])
    width = require_positive("element_width", inputs["element_width"])
    material_type = inputs["material_type"]
    exposure_key = inputs["weather_exposure"]

    material = out.lookup(library, Category.ARCHITECTURAL_MATERIAL, material_type)
    element = out.lookup(library, Category.ELEMENT, inputs["architectural_element"])
    exposure = out.lookup(library, Category.EXPOSURE, exposure_key)
    suitability = out.lookup(library, Category.THERMAL_SUITABILITY, (material_type, exposure_key))

    load = loads(element, exposure, length, width)
    section = section_properties(thickness, width)
    yield_strength = material.yield_strength
    tensile_capacity = section["area"] * yield_strength / 1000             # kN
    bending_capacity = section["section_modulus"] * yield_strength / 1e6   # kN·m

    delta = deflection(load["design"], length, material.elastic_modulus, section["moment_of_inertia"])
    ratio = length / delta
    compliant = ratio > ALLOWABLE_DEFLECTION_RATIO

    movement = material.thermal_expansion * exposure.temperature_range * length / 1000  # mm

    if not compliant:
        out.warn(
            f"Deflection L/{round(ratio)} exceeds the L/{ALLOWABLE_DEFLECTION_RATIO} limit",
            level=AdvisoryLevel.HIGH, code="DEFLECTION_LIMIT",
        )
        out.recommend(stiffness_recommendation(ratio), level=AdvisoryLevel.HIGH)
    if suitability.rating == "Fair":
        out.warn(f"Material suitability for {exposure_key} exposure is only fair",
                 code="MARGINAL_EXPOSURE_SUITABILITY")
    if movement > 15:
        out.recommend(f"Provide expansion joints for {movement:.1f} mm of thermal movement",
                      level=AdvisoryLevel.MEDIUM)

    out.data.update({
        "material_properties": {
            "name": material.label,
            "tensile_strength": material.tensile_strength,
            "yield_strength": yield_strength,
            "elastic_modulus": material.elastic_modulus,
            "density": material.density,
            "thermal_expansion": material.thermal_expansion,
            "corrosion_resistance": material.corrosion_resistance,
            "weldability": material.weldability,
            "machinability": material.machinability,
            "cost": material.cost,
            "applications": list(material.applications),
        },
        "load_analysis": {
            "wind_load": round_to(load["wind"], 2),
            "dead_load": round_to(load["dead"], 2),
            "live_load": round_to(load["live"], 2),
            "total_load": round_to(load["wind"] + load["dead"] + load["live"], 2),
            "design_load": round_to(load["design"], 2),
            "load_combinations": [
                {"combination": name,
                 "load": round_to(load["dead"] * d + load["live"] * l + load["wind"] * w, 2)}
                for name, d, l, w in LOAD_COMBINATIONS
            ],
        },
        "structural_capacity": {
            "cross_sectional_area": round_to(section["area"], 0),
            "moment_of_inertia": round_to(section["moment_of_inertia"], 0),
            "section_modulus": round_to(section["section_modulus"], 0),
            "tensile_capacity": round_to(tensile_capacity, 1),
            "bending_capacity": round_to(bending_capacity, 2),
            "allowable_stress": round_to(yield_strength / SAFETY_FACTOR, 0),
            "capacity_rating": capacity_rating(tensile_capacity, bending_capacity),
        },
        "deflection_analysis": {
            "calculated_deflection": round_to(delta, 2),
            "deflection_ratio": round_to(ratio, 0),
            "allowable_deflection": round_to(length / ALLOWABLE_DEFLECTION_RATIO, 2),
            "allowable_ratio": ALLOWABLE_DEFLECTION_RATIO,
            "compliance": "Compliant" if compliant else "Non-compliant",
            "recommendation": stiffness_recommendation(ratio),
        },
        "connection_requirements": {
            "connection_type": element.connection_type,
            "spacing": element.spacing,
            "capacity_requirement": element.capacity_requirement,
            "fastener_size": fastener_size(load["design"]),
            "sealing_requirements": element.sealing,
            "thermal_breaks": element.thermal_break,
        },
        "thermal_considerations": {
            "thermal_expansion_coeff": material.thermal_expansion,
            "temperature_range": exposure.temperature_range,
            "thermal_movement": round_to(movement, 1),
            "movement_joints": movement_joints(movement),
            "material_suitability": suitability.rating,
        },
    })
    return out


CALCULATOR = define_calculator(
    id=CALCULATOR_ID,
    title="Architectural Metal Calculator",
    category="Construction",
    description="Structural check of architectural metal elements: loads, capacity, deflection",
    fields=FIELDS,
    compute=compute,
    rules=[check_structural_thickness, check_carbon_steel_exposure, check_slenderness],
    example_inputs=EXAMPLE_INPUTS,
    default_inputs=DEFAULT_INPUTS,
)
