"""
Cutting time estimator.

Job time is cutting (length over chart speed) plus piercing plus rapid
moves, taken as a fixed fraction of cutting time. Chart speed comes from
the nearest charted thickness and power, scaled off-chart by empirical
power laws. Machine cost is total time at the hourly machine rate.
"""

from ..schemas import AdvisoryLevel, CandidateOption
from .base import (
    CalcOutput, define_calculator, enum_field, number_field, round_to, require_positive,
    rule_warning,
)
from .material_lookup import CUTTING_CHARTS, Category
from .scoring import Constraint, Criterion, Requirements, score_and_rank

CALCULATOR_ID = "cutting-time-estimator"

RAPID_MOVE_FRACTION = 0.1
MIN_CUTTING_SPEED = 100.0  # mm/min
MIN_PIERCE_SECONDS = 0.05
PIERCE_REFERENCE_POWER = 3000.0  # W
MAX_PIERCE_SPEEDUP = 2.0
SHIFT_HOURS = 8
WORK_DAYS = 5
DEFAULT_MACHINE_RATE = 120.0  # $/h

# Off-chart scaling exponents
THICKNESS_SPEED_EXPONENT = 0.8
POWER_SPEED_EXPONENT = 0.6
THICKNESS_PIERCE_EXPONENT = 1.2
POWER_PIERCE_EXPONENT = 0.3

FIELDS = [
    enum_field("material_type", list(CUTTING_CHARTS.keys()), label="Material Type"),
    number_field("thickness", 0.5, 50, unit="mm", step=0.1, label="Material Thickness"),
    number_field("cutting_length", 1, 100000, unit="mm", step=1, label="Total Cutting Length"),
    number_field("pierce_count", 1, 1000, unit="pieces", step=1, label="Number of Pierces"),
    number_field("laser_power", 500, 20000, unit="W", step=100, label="Laser Power"),
    number_field("machine_rate", 1, 1000, unit="$/h", step=1, required=False,
                 default=DEFAULT_MACHINE_RATE, label="Machine Hourly Rate"),
]

EXAMPLE_INPUTS = {
    "material_type": "steel",
    "thickness": 5,
    "cutting_length": 2000,
    "pierce_count": 10,
    "laser_power": 3000,
}

DEFAULT_INPUTS = {
    "material_type": "steel",
    "thickness": 3,
    "cutting_length": 1000,
    "pierce_count": 4,
    "laser_power": 2000,
}


def _pierces_per_meter(inputs: dict) -> float:
    return inputs["pierce_count"] / (inputs["cutting_length"] / 1000)


# ============================================================
# Cross-field rules
# ============================================================

def check_thickness(inputs, library):
    chart = library.get(Category.CUTTING_CHART, inputs["material_type"])
    if inputs["thickness"] > chart.max_thickness:
        return [rule_warning(
            "thickness",
            f"Thickness {inputs['thickness']}mm may not be optimal for {inputs['material_type']}. "
            f"Maximum recommended: {chart.max_thickness}mm",
            "THICKNESS_WARNING",
        )]
    return []


def check_power_density(inputs, library):
    if inputs["laser_power"] / inputs["thickness"] < 200:
        return [rule_warning(
            "laser_power",
            "Low power-to-thickness ratio may result in slow cutting speeds",
            "LOW_POWER_DENSITY",
        )]
    return []


def check_cutting_length(inputs, library):
    if inputs["cutting_length"] > 50000:
        return [rule_warning(
            "cutting_length",
            "Very long cutting length - consider breaking into multiple jobs",
            "LONG_CUTTING_LENGTH",
        )]
    return []


def check_pierce_density(inputs, library):
    if _pierces_per_meter(inputs) > 50:
        return [rule_warning(
            "pierce_count",
            "High pierce density may significantly increase processing time",
            "HIGH_PIERCE_DENSITY",
        )]
    return []


# ============================================================
# Model
# ============================================================

def _nearest(values, target: float) -> float:
    # Ties go to the smaller charted value
    return min(sorted(values), key=lambda v: abs(v - target))


def cutting_speed(chart, thickness: float, power: float) -> float:
    """mm/min from the nearest chart entry, scaled when off-chart."""
    charted_thickness = _nearest(chart.speeds, thickness)
    row = chart.speeds[charted_thickness]
    charted_power = _nearest(row, power)
    speed = row[charted_power]
    if charted_thickness != thickness:
        speed /= (thickness / charted_thickness) ** THICKNESS_SPEED_EXPONENT
    if charted_power != power:
        speed *= (power / charted_power) ** POWER_SPEED_EXPONENT
    return max(speed, MIN_CUTTING_SPEED)


def pierce_seconds(chart, thickness: float, power: float) -> float:
    charted_thickness = _nearest(chart.pierce_times, thickness)
    seconds = chart.pierce_times[charted_thickness]
    if charted_thickness != thickness:
        seconds *= (thickness / charted_thickness) ** THICKNESS_PIERCE_EXPONENT
    power_factor = min(power / PIERCE_REFERENCE_POWER, MAX_PIERCE_SPEEDUP)
    seconds /= power_factor ** POWER_PIERCE_EXPONENT
    return max(seconds, MIN_PIERCE_SECONDS)


def job_times(chart, inputs: dict, power: float) -> dict:
    """Minutes per job at one power setting."""
    thickness = inputs["thickness"]
    speed = cutting_speed(chart, thickness, power)
    per_pierce = pierce_seconds(chart, thickness, power)
    cutting = inputs["cutting_length"] / speed
    piercing = inputs["pierce_count"] * per_pierce / 60
    moving = cutting * RAPID_MOVE_FRACTION
    return {
        "speed": speed,
        "pierce_seconds": per_pierce,
        "cutting": cutting,
        "piercing": piercing,
        "moving": moving,
        "total": cutting + piercing + moving,
    }


def power_options(chart, inputs: dict, machine_rate: float) -> list:
    """Charted power levels up to the available power, ranked by throughput then economy."""
    row = chart.speeds[_nearest(chart.speeds, inputs["thickness"])]
    candidates = []
    for power in sorted(row):
        times = job_times(chart, inputs, power)
        candidates.append(CandidateOption(
            name=f"{power:g} W",
            cost=round_to(times["total"] * machine_rate / 60, 2),
            properties={"power": power, "total": times["total"], "speed": times["speed"]},
        ))
    within = Constraint("within_available_power",
                        lambda c: c.properties["power"] <= inputs["laser_power"])
    fastest = min((c.properties["total"] for c in candidates if within.predicate(c)), default=None)
    if fastest is None:
        return []
    lowest_power = min(row)
    ranked = score_and_rank(candidates, Requirements(
        criteria=[
            Criterion("throughput", 0.7, lambda c: fastest / c.properties["total"]),
            Criterion("power_economy", 0.3, lambda c: lowest_power / c.properties["power"]),
        ],
        constraints=[within],
    ))
    return [
        {
            "rank": r.rank,
            "power": r.properties["power"],
            "cutting_speed": round_to(r.properties["speed"], 0),
            "total_time": round_to(r.properties["total"], 3),
            "job_cost": r.cost,
            "fit_score": round_to(r.score, 1),
        }
        for r in ranked
    ]


def compute(inputs: dict, library) -> CalcOutput:
    out = CalcOutput()
    thickness = require_positive("thickness", inputs["thickness"])
    length = require_positive("cutting_length", inputs["cutting_length"])
    power = require_positive("laser_power", inputs["laser_power"])
    machine_rate = inputs.get("machine_rate", DEFAULT_MACHINE_RATE)

    chart = out.lookup(library, Category.CUTTING_CHART, inputs["material_type"])
    times = job_times(chart, inputs, power)
    speed = times["speed"]
    total = times["total"]
    efficiency = times["cutting"] / total * 100

    parts_per_hour = 60 / total
    daily = parts_per_hour * SHIFT_HOURS
    job_cost = total * machine_rate / 60

    if speed < 1000:
        out.recommend("Consider increasing laser power for faster cutting speeds",
                      level=AdvisoryLevel.MEDIUM)
    if total > 60:
        out.recommend("Long processing time - consider optimizing cut path or nesting")
    if _pierces_per_meter(inputs) > 20:
        out.recommend("High pierce count - consider common line cutting to reduce pierces")
    if thickness > 15 and inputs["material_type"] == "aluminum":
        out.recommend("For thick aluminum, consider nitrogen assist gas for better edge quality")

    if efficiency < 60:
        out.warn("Low cutting efficiency - high proportion of non-cutting time",
                 code="LOW_CUTTING_EFFICIENCY")
    if speed < 500:
        out.warn("Very slow cutting speed may cause heat buildup and poor edge quality",
                 level=AdvisoryLevel.HIGH, code="SLOW_CUTTING_SPEED")
    if inputs["pierce_count"] > 500:
        out.warn("Very high pierce count will significantly increase processing time",
                 code="HIGH_PIERCE_COUNT")

    out.data.update({
        "cutting_speed": round_to(speed, 0),
        "pierce_time_per_point": round_to(times["pierce_seconds"], 3),
        "piercing_time": round_to(times["piercing"], 3),
        "cutting_time": round_to(times["cutting"], 3),
        "moving_time": round_to(times["moving"], 3),
        "total_time": round_to(total, 3),
        "efficiency": round_to(efficiency, 2),
        "time_breakdown": {
            "cutting": round_to(times["cutting"] / total * 100, 2),
            "piercing": round_to(times["piercing"] / total * 100, 2),
            "moving": round_to(times["moving"] / total * 100, 2),
        },
        "production_metrics": {
            "parts_per_hour": round_to(parts_per_hour, 2),
            "daily_capacity": round_to(daily, 0),
            "weekly_capacity": round_to(daily * WORK_DAYS, 0),
            "productivity_rate": round_to(length / total, 0),
        },
        "cost_estimate": {
            "machine_rate": machine_rate,
            "job_cost": round_to(job_cost, 2),
            "cost_per_meter": round_to(job_cost / (length / 1000), 3),
        },
        "power_options": power_options(chart, inputs, machine_rate),
    })
    return out


CALCULATOR = define_calculator(
    id=CALCULATOR_ID,
    title="Cutting Time Estimator",
    category="Core Engineering",
    description="Estimate cutting time and machine cost for production planning",
    fields=FIELDS,
    compute=compute,
    rules=[check_thickness, check_power_density, check_cutting_length, check_pierce_density],
    example_inputs=EXAMPLE_INPUTS,
    default_inputs=DEFAULT_INPUTS,
)
