"""
Material selection assistant.

Scores the material catalog against an application's strength, corrosion
and budget needs. Materials over budget are dropped before scoring, so an
over-constrained request returns an empty recommendation list (with
budget_fit "over_budget"), not an error.

Each of the four criteria is worth 25 points and is capped at a perfect
fit, so scores stay on a 0-100 scale.
"""

from ..config import settings
from ..schemas import AdvisoryLevel, CandidateOption
from .base import (
    CalcOutput, define_calculator, enum_field, number_field, round_to, rule_warning,
)
from .material_lookup import APPLICATION_REQUIREMENTS, Category, SELECTION_MATERIALS
from .scoring import Constraint, Criterion, Requirements, score_and_rank

CALCULATOR_ID = "material-selection"

# Minimum tensile strength (MPa) per requirement level
STRENGTH_REQUIRED_MPA = {
    "low": 150,
    "medium": 300,
    "high": 450,
    "ultra_high": 600,
}

# Minimum corrosion rating (0-10 catalog scale) per requirement level
CORROSION_REQUIRED_RATING = {
    "none": 0,
    "mild": 1,
    "moderate": 4,
    "high": 7,
    "extreme": 9,
}

FIELDS = [
    enum_field("application", list(APPLICATION_REQUIREMENTS.keys()), label="Application Type"),
    enum_field("strength_requirement", list(STRENGTH_REQUIRED_MPA.keys()),
               label="Strength Requirement"),
    enum_field("corrosion_resistance", list(CORROSION_REQUIRED_RATING.keys()),
               label="Corrosion Resistance"),
    number_field("budget", 0.1, 1000, unit="$/kg", step=0.1, label="Budget per kg"),
]

EXAMPLE_INPUTS = {
    "application": "structural",
    "strength_requirement": "medium",
    "corrosion_resistance": "mild",
    "budget": 10.0,
}


def _ratio(value: float, required: float) -> float:
    if required <= 0:
        return 1.0
    return value / required


def selection_requirements(inputs: dict) -> Requirements:
    strength_req = STRENGTH_REQUIRED_MPA[inputs["strength_requirement"]]
    corrosion_req = CORROSION_REQUIRED_RATING[inputs["corrosion_resistance"]]
    application = inputs["application"]
    budget = inputs["budget"]

    return Requirements(
        criteria=[
            Criterion("strength", 0.25,
                      lambda c: _ratio(c.properties["tensile_strength"], strength_req)),
            Criterion("corrosion", 0.25,
                      lambda c: _ratio(c.properties["corrosion_rating"], corrosion_req)),
            Criterion("application", 0.25,
                      lambda c: 1.0 if application in c.tags else 0.0),
            Criterion("cost_efficiency", 0.25,
                      lambda c: 1.0 - c.cost / budget),
        ],
        constraints=[Constraint("within_budget", lambda c: c.cost <= budget)],
        limit=settings.MAX_RECOMMENDATIONS,
    )


def _candidates(library) -> list:
    candidates = []
    for key in library.keys(Category.SELECTION_MATERIAL):
        m = library.get(Category.SELECTION_MATERIAL, key)
        candidates.append(CandidateOption(
            name=m.name,
            cost=m.cost_per_kg,
            tags=list(m.applications),
            pros=list(m.pros),
            cons=list(m.cons),
            properties={
                "key": key,
                "tensile_strength": m.tensile_strength,
                "yield_strength": m.yield_strength,
                "corrosion_rating": m.corrosion_rating,
                "weldability": m.weldability,
                "machinability": m.machinability,
                "density": m.density,
                "laser": m.laser,
                "speed": m.speed,
                "gas": m.gas,
                "difficulty": m.difficulty,
            },
        ))
    return candidates


def budget_fit(budget: float, costs: list) -> str:
    if not costs:
        return "over_budget"
    highest = max(costs)
    if highest <= budget * 0.7:
        return "excellent"
    if highest <= budget * 0.9:
        return "good"
    if highest <= budget:
        return "marginal"
    return "over_budget"


# ============================================================
# Cross-field rules
# ============================================================

def check_budget(inputs, library):
    requirement = library.get(Category.APPLICATION, inputs["application"])
    if inputs["budget"] < requirement.max_cost * 0.3:
        return [rule_warning(
            "budget",
            f"Budget may be too low for {inputs['application']} applications. "
            "Consider increasing budget for better material options.",
            "LOW_BUDGET",
        )]
    return []


def check_demanding_combination(inputs, library):
    if inputs["strength_requirement"] == "ultra_high" and inputs["corrosion_resistance"] == "extreme":
        return [rule_warning(
            "strength_requirement",
            "Ultra-high strength with extreme corrosion resistance may require expensive "
            "specialty alloys.",
            "DEMANDING_REQUIREMENTS",
        )]
    return []


def check_food_grade(inputs, library):
    if inputs["application"] == "food_grade" and inputs["corrosion_resistance"] == "none":
        return [rule_warning(
            "corrosion_resistance",
            "Food grade applications typically require good corrosion resistance for hygiene.",
            "FOOD_GRADE_WARNING",
        )]
    return []


def compute(inputs: dict, library) -> CalcOutput:
    out = CalcOutput()
    budget = inputs["budget"]
    application = inputs["application"]
    out.lookup(library, Category.APPLICATION, application)

    ranked = score_and_rank(_candidates(library), selection_requirements(inputs))

    recommended = []
    for r in ranked:
        recommended.append({
            "rank": r.rank,
            "material": r.name,
            "score": round_to(r.score, 1),
            "cost_per_kg": r.cost,
            "suitability_rating": round_to(min(r.score / 10, 10), 1),
            "sub_scores": r.sub_scores,
            "pros": r.pros,
            "cons": r.cons,
            "cutting_parameters": {
                "recommended_laser": r.properties["laser"],
                "typical_speed": r.properties["speed"],
                "gas_type": r.properties["gas"],
                "difficulty": r.properties["difficulty"],
            },
        })

    costs = [r.cost for r in ranked]
    cost_analysis = {
        "budget_fit": budget_fit(budget, costs),
        "cost_range": {"min": min(costs) if costs else 0, "max": max(costs) if costs else 0},
        "value_rating": round(ranked[0].score / 10) if ranked else 0,
    }

    if ranked:
        difficulties = [r.properties["difficulty"] for r in ranked]
        if "hard" in difficulties:
            estimated = "challenging"
        elif "medium" in difficulties:
            estimated = "moderate"
        else:
            estimated = "straightforward"
        considerations = []
        if "hard" in difficulties:
            considerations.append("Some materials require specialized cutting parameters")
        if any(r.properties["gas"] == "argon" for r in ranked):
            considerations.append("Inert gas atmosphere required for some materials")
        cutting = {
            "recommended_laser": ranked[0].properties["laser"],
            "estimated_difficulty": estimated,
            "special_considerations": considerations,
        }
        top = ranked[0]
        material_properties = {
            k: top.properties[k] for k in (
                "tensile_strength", "yield_strength", "corrosion_rating",
                "weldability", "machinability", "density",
            )
        }
        top_choice = {"material": top.name, "pros": top.pros, "cons": top.cons}
    else:
        cutting = {
            "recommended_laser": "fiber",
            "estimated_difficulty": "unknown",
            "special_considerations": ["No suitable materials found within budget"],
        }
        material_properties = {}
        top_choice = {"material": "No suitable material found", "pros": [], "cons": []}

    # Recommendations
    if not ranked:
        out.recommend("Consider increasing budget or relaxing requirements",
                      level=AdvisoryLevel.HIGH)
    else:
        if len(ranked) == 1:
            out.recommend("Limited options available - consider expanding budget for alternatives")
        if application == "aerospace" and "Aluminum" in ranked[0].name:
            out.recommend("Consider titanium for critical aerospace applications")
        if inputs["corrosion_resistance"] == "extreme" and "Stainless" not in ranked[0].name:
            out.recommend("Stainless steel or titanium recommended for extreme corrosion resistance",
                          level=AdvisoryLevel.MEDIUM)
        if ranked[0].properties["difficulty"] == "hard":
            out.recommend("Selected material may require specialized cutting expertise")

    # Warnings
    if not ranked:
        out.warn("No materials found within budget constraints", level=AdvisoryLevel.HIGH,
                 code="NO_MATERIALS_IN_BUDGET")
    elif ranked[0].score < 60:
        out.warn("Top recommendation has moderate suitability - review requirements",
                 code="LOW_SUITABILITY")
    if budget < 5 and application == "aerospace":
        out.warn("Budget may be insufficient for aerospace-grade materials",
                 code="LOW_AEROSPACE_BUDGET")

    out.data.update({
        "recommended_materials": recommended,
        "material_properties": material_properties,
        "cost_analysis": cost_analysis,
        "cutting_parameters": cutting,
        "pros_and_cons": {"top_choice": top_choice},
    })
    return out


CALCULATOR = define_calculator(
    id=CALCULATOR_ID,
    title="Material Selection Assistant",
    category="Core Engineering",
    description="Material selection based on application requirements and budget",
    fields=FIELDS,
    compute=compute,
    rules=[check_budget, check_demanding_combination, check_food_grade],
    example_inputs=EXAMPLE_INPUTS,
)
