"""
Heat-affected zone (HAZ) estimator.

Thermal diffusion model for the band beside a laser kerf that is heated
enough to change microstructure without melting.

Width:  2 x sqrt(diffusivity x interaction time), floored at 1.5 x beam
        diameter, reduced by sqrt(duty/100) when pulsed, scaled by the
        material's empirical HAZ factor, never below MIN_FEATURE_SIZE_MM.
Depth:  0.7 x width, capped at the sheet thickness.
Peak temperature and cooling rate use the Adams thin-plate relations with
the kerf edge (beam radius) as the reference distance.
"""

import math

from ..schemas import AdvisoryLevel
from .base import (
    CalcOutput, define_calculator, enum_field, number_field, round_to,
    require_positive, rule_warning,
)
from .material_lookup import Category, THERMAL_PROPERTIES

CALCULATOR_ID = "heat-affected-zone"

AMBIENT_C = 20.0
MIN_FEATURE_SIZE_MM = 0.01
MAX_COOLING_RATE = 10000.0        # °C/s
CRITICAL_COOLING_TEMP_C = 550.0   # reference temperature for cooling rate
PROFILE_STEPS = 10
HIGH_HEAT_INPUT_J_MM = 1000.0
MAX_DUTY_CYCLE_PCT = 50.0

_SQRT_2PI_E = math.sqrt(2 * math.pi * math.e)

FIELDS = [
    enum_field("material_type", list(THERMAL_PROPERTIES.keys()), label="Material Type"),
    number_field("thickness", 0.5, 50, unit="mm", step=0.1, label="Material Thickness"),
    number_field("laser_power", 500, 20000, unit="W", step=100, label="Laser Power"),
    number_field("cutting_speed", 100, 15000, unit="mm/min", step=10, label="Cutting Speed"),
    number_field("beam_diameter", 0.05, 2.0, unit="mm", step=0.01, required=False,
                 default=0.2, label="Beam Diameter"),
    number_field("pulse_frequency", 0, 50000, unit="Hz", step=100, required=False,
                 default=0, label="Pulse Frequency"),
]

EXAMPLE_INPUTS = {
    "material_type": "steel",
    "thickness": 5,
    "laser_power": 3000,
    "cutting_speed": 2000,
    "beam_diameter": 0.2,
    "pulse_frequency": 0,
}


def heat_input(laser_power: float, cutting_speed: float) -> float:
    """Line energy in J/mm."""
    return laser_power * 60.0 / cutting_speed


# ============================================================
# Cross-field rules
# ============================================================

def check_heat_input(inputs, library):
    if heat_input(inputs["laser_power"], inputs["cutting_speed"]) > HIGH_HEAT_INPUT_J_MM:
        return [rule_warning(
            "laser_power",
            "High heat input may result in large HAZ. Consider reducing power or increasing speed.",
            "HIGH_HEAT_INPUT",
        )]
    return []


def check_conductive_materials(inputs, library):
    material = inputs["material_type"]
    power = inputs["laser_power"]
    if material == "aluminum" and power < 2000:
        return [rule_warning(
            "laser_power",
            "Low power for aluminum may result in poor cut quality due to high thermal conductivity.",
            "LOW_POWER_ALUMINUM",
        )]
    if material == "copper" and power < 3000:
        return [rule_warning(
            "laser_power",
            "Copper requires high power due to high thermal conductivity and low absorptivity.",
            "LOW_POWER_COPPER",
        )]
    return []


def check_power_density(inputs, library):
    if inputs["laser_power"] / inputs["thickness"] < 200:
        return [rule_warning(
            "thickness",
            "Low power-to-thickness ratio may result in incomplete penetration.",
            "LOW_POWER_DENSITY",
        )]
    return []


# ============================================================
# Model
# ============================================================

def haz_width(props, beam_diameter: float, cutting_speed: float, pulse_frequency: float) -> float:
    interaction_time = beam_diameter / (cutting_speed / 60.0)           # s
    diffusion_length = math.sqrt(props.thermal_diffusivity * interaction_time) * 1000.0  # mm
    width = max(2.0 * diffusion_length, beam_diameter * 1.5)
    if pulse_frequency > 0:
        duty_cycle = min(MAX_DUTY_CYCLE_PCT, pulse_frequency / 1000.0)
        width *= math.sqrt(duty_cycle / 100.0)
    width *= props.haz_factor
    return max(width, MIN_FEATURE_SIZE_MM)


def edge_temperature(props, line_energy: float, thickness: float, distance_mm: float) -> float:
    """
    Adams thin-plate peak temperature at distance_mm from the heat source.
    Approaches the melting point as distance goes to zero.
    """
    q_net = props.absorptivity * line_energy * 1000.0   # J/m
    t = thickness / 1000.0
    y = distance_mm / 1000.0
    inverse = (
        _SQRT_2PI_E * props.density * props.specific_heat * t * y / q_net
        + 1.0 / (props.melting_point - AMBIENT_C)
    )
    return AMBIENT_C + 1.0 / inverse


def cooling_rate(props, line_energy: float, thickness: float) -> float:
    """Adams thin-plate cooling rate at the critical temperature, °C/s."""
    q_net = props.absorptivity * line_energy * 1000.0
    t = thickness / 1000.0
    rate = (
        2 * math.pi * props.thermal_conductivity * props.density * props.specific_heat
        * (t / q_net) ** 2
        * (CRITICAL_COOLING_TEMP_C - AMBIENT_C) ** 3
    )
    return min(rate, MAX_COOLING_RATE)


def microstructure(material: str, peak: float, melting_point: float) -> dict:
    grain_growth = "Minimal"
    hardness_change = "No significant change"
    phase_transformation = "None"
    severity = "low"

    if peak > melting_point * 0.8:
        grain_growth = "Significant grain growth"
        hardness_change = "Softening in HAZ"
        severity = "high"
        if material == "steel":
            phase_transformation = "Austenite formation and transformation"
    elif peak > melting_point * 0.6:
        grain_growth = "Moderate grain growth"
        hardness_change = "Slight softening"
        severity = "medium"
        if material == "steel":
            phase_transformation = "Partial austenite formation"
    elif peak > melting_point * 0.4:
        grain_growth = "Minor grain growth"
        hardness_change = "Minimal change"

    return {
        "grain_growth": grain_growth,
        "hardness_change": hardness_change,
        "phase_transformation": phase_transformation,
        "severity": severity,
    }


def compute(inputs: dict, library) -> CalcOutput:
    out = CalcOutput()
    material = inputs["material_type"]
    thickness = require_positive("thickness", inputs["thickness"])
    power = inputs["laser_power"]
    speed = require_positive("cutting_speed", inputs["cutting_speed"])
    beam = require_positive("beam_diameter", inputs["beam_diameter"])
    pulse = inputs["pulse_frequency"]

    props = out.lookup(library, Category.THERMAL, material)

    line_energy = heat_input(power, speed)
    energy_density = power / (speed / 60.0 * beam)   # J/mm²
    width = haz_width(props, beam, speed, pulse)
    depth = min(width * 0.7, thickness)
    volume = width * depth * beam

    edge = beam / 2.0
    peak = edge_temperature(props, line_energy, thickness, edge)
    thermal_stress = props.thermal_expansion * (peak - AMBIENT_C) * props.elastic_modulus
    rate = cooling_rate(props, line_energy, thickness)

    profile = []
    for i in range(PROFILE_STEPS + 1):
        distance = i * width / PROFILE_STEPS
        profile.append({
            "distance": round_to(distance, 3),
            "temperature": round_to(edge_temperature(props, line_energy, thickness, edge + distance), 1),
        })

    # Recommendations
    if width > 0.5:
        out.recommend("Consider reducing laser power or increasing cutting speed to minimize HAZ")
    if pulse == 0 and width > 0.3:
        out.recommend("Use pulsed mode to reduce heat input and HAZ size")
    if peak > props.melting_point * 0.8:
        out.recommend("High peak temperature detected - consider using assist gas cooling",
                      level=AdvisoryLevel.MEDIUM)
    if material in ("aluminum", "copper"):
        out.recommend("Use nitrogen assist gas to prevent oxidation in HAZ")
    if thickness > 10 and width > 0.4:
        out.recommend("For thick sections, consider multiple pass cutting to reduce HAZ")

    # Warnings
    if width > 1.0:
        out.warn("Large HAZ detected - may affect material properties significantly",
                 code="LARGE_HAZ")
    if thermal_stress > props.yield_strength:
        out.warn("Thermal stress exceeds yield strength - risk of distortion",
                 level=AdvisoryLevel.HIGH, code="STRESS_ABOVE_YIELD")
    if peak > props.melting_point * 0.9:
        out.warn("Peak temperature near melting point - risk of excessive melting",
                 level=AdvisoryLevel.HIGH, code="NEAR_MELTING")

    out.data.update({
        "haz_width": round_to(width, 3),
        "haz_depth": round_to(depth, 3),
        "haz_volume": round_to(volume, 3),
        "temperature_profile": profile,
        "cooling_rate": round_to(rate, 0),
        "microstructure_changes": microstructure(material, peak, props.melting_point),
        "thermal_analysis": {
            "peak_temperature": round_to(peak, 0),
            "heat_input": round_to(line_energy, 1),
            "thermal_stress": round_to(thermal_stress, 0),
            "energy_density": round_to(energy_density, 1),
        },
    })
    return out


CALCULATOR = define_calculator(
    id=CALCULATOR_ID,
    title="Heat Affected Zone Calculator",
    category="Core Engineering",
    description="Calculate and analyze heat affected zone for thermal control",
    fields=FIELDS,
    compute=compute,
    rules=[check_heat_input, check_conductive_materials, check_power_density],
    example_inputs=EXAMPLE_INPUTS,
)
