"""
Estimation model tests: each calculator run end to end through the registry.

Tests:
1-5.   Heat-affected zone
6-10.  Material selection
11-14. Power-speed matching
15-22. Predictive quality
23-26. Architectural metal
27-32. Cutting time
"""

import pytest

from calc_engine.calculators import (
    architectural_metal,
    cutting_time,
    heat_affected_zone,
    material_selection,
    power_speed_matching,
    predictive_quality,
)
from calc_engine.calculators.cutting_time import cutting_speed, pierce_seconds
from calc_engine.calculators.material_lookup import CUTTING_CHARTS
from calc_engine.calculators.predictive_quality import (
    MAX_ACCURACY_ADJUSTMENT, ModelKind, accuracy_adjustment, deviation_penalties,
    member_scores, quality_score, quality_scores, training_accuracy,
)
from calc_engine.calculators.registry import calculate


def _run(module, **overrides):
    inputs = dict(module.EXAMPLE_INPUTS)
    inputs.update(overrides)
    result = calculate(module.CALCULATOR_ID, inputs)
    assert result.success, result.errors
    return result.data


# ============================================================
# Heat-affected zone
# ============================================================

def test_haz_reference_case():
    """5mm steel, 3kW, 2000 mm/min, 0.2mm beam, continuous wave."""
    data = _run(heat_affected_zone)
    # 2 * sqrt(13e-6 m²/s * 6 ms) = 0.559 mm
    assert data["haz_width"] == pytest.approx(0.559, abs=0.002)
    assert data["haz_depth"] == pytest.approx(0.391, abs=0.002)
    assert data["thermal_analysis"]["heat_input"] == 90.0
    assert 20 < data["thermal_analysis"]["peak_temperature"] < 1538
    assert 0 < data["cooling_rate"] <= 10000


def test_haz_temperature_profile_decreases():
    profile = _run(heat_affected_zone)["temperature_profile"]
    assert len(profile) == 11
    assert profile[0]["distance"] == 0.0
    temps = [p["temperature"] for p in profile]
    assert all(a > b for a, b in zip(temps, temps[1:]))


def test_haz_pulsed_mode_is_narrower():
    continuous = _run(heat_affected_zone)["haz_width"]
    pulsed = _run(heat_affected_zone, pulse_frequency=10000)["haz_width"]
    assert pulsed < continuous


def test_haz_width_responds_to_power_and_speed():
    low_power = _run(heat_affected_zone, laser_power=1500)["haz_width"]
    high_power = _run(heat_affected_zone, laser_power=6000)["haz_width"]
    assert high_power >= low_power
    fast = _run(heat_affected_zone, cutting_speed=8000)["haz_width"]
    assert fast < _run(heat_affected_zone)["haz_width"]


def test_haz_copper_low_power_warning():
    data = _run(heat_affected_zone, material_type="copper", laser_power=2000)
    assert any("Copper requires high power" in w for w in data["warnings"])
    assert any("nitrogen" in r for r in data["recommendations"])


# ============================================================
# Material selection
# ============================================================

def test_selection_structural_medium_mild():
    data = _run(material_selection)
    names = [m["material"] for m in data["recommended_materials"]]
    assert names == ["Carbon Steel", "Aluminum 6061", "Brass C360"]
    assert data["recommended_materials"][0]["score"] == pytest.approx(93.75, abs=0.1)
    assert [m["rank"] for m in data["recommended_materials"]] == [1, 2, 3]
    assert data["cost_analysis"]["budget_fit"] == "good"


def test_selection_never_exceeds_budget():
    data = _run(material_selection, budget=5.0)
    costs = [m["cost_per_kg"] for m in data["recommended_materials"]]
    assert costs and max(costs) <= 5.0
    for m in data["recommended_materials"]:
        assert 0 <= m["score"] <= 100


def test_selection_over_constrained_returns_empty():
    """No material costs under $1/kg: empty list, not an error."""
    data = _run(material_selection, application="aerospace", strength_requirement="ultra_high",
                corrosion_resistance="extreme", budget=1.0)
    assert data["recommended_materials"] == []
    assert data["cost_analysis"]["budget_fit"] == "over_budget"
    assert "No materials found within budget constraints" in data["warnings"]


def test_selection_aerospace_prefers_7075():
    data = _run(material_selection, application="aerospace", strength_requirement="high",
                corrosion_resistance="high", budget=50.0)
    assert data["recommended_materials"][0]["material"] == "Aluminum 7075"
    assert len(data["recommended_materials"]) <= 3


def test_selection_low_budget_rule_warning():
    data = _run(material_selection, application="aerospace", budget=5.0)
    assert any("Budget may be too low" in w for w in data["warnings"])


# ============================================================
# Power-speed matching
# ============================================================

def test_power_speed_priority_goals():
    speed = _run(power_speed_matching, priority_goal="speed")
    quality = _run(power_speed_matching, priority_goal="quality")
    assert quality["performance_prediction"]["edge_quality"] > \
        speed["performance_prediction"]["edge_quality"]
    assert speed["optimal_settings"]["speed"] > quality["optimal_settings"]["speed"]


def test_power_clamped_below_rated_maximum():
    data = _run(power_speed_matching, thickness=50, max_power=1000)
    assert data["optimal_settings"]["power"] == 950
    assert data["optimal_settings"]["power_percentage"] == 95
    assert any("Very high power utilization" in w for w in data["warnings"])


def test_power_speed_alternatives_ranked():
    data = _run(power_speed_matching)
    alternatives = data["alternative_settings"]
    assert [a["rank"] for a in alternatives] == [1, 2, 3, 4]
    assert all(a["power"] <= 3000 for a in alternatives)
    scores = [a["fit_score"] for a in alternatives]
    assert scores == sorted(scores, reverse=True)


def test_power_speed_poor_gas_warning():
    data = _run(power_speed_matching, material_type="aluminum", assist_gas="oxygen")
    assert "Poor gas choice for this material - consider switching" in data["warnings"]
    assert "Oxygen with aluminum may cause excessive oxidation" in data["warnings"]


# ============================================================
# Predictive quality
# ============================================================

def test_predictive_example_reports_low_quality():
    data = _run(predictive_quality)
    score = data["quality_predictions"]["overall_quality_score"]
    assert score == pytest.approx(64.5, abs=0.2)
    assert data["model_summary"]["heuristic"] is True
    low, high = data["quality_predictions"]["confidence_interval"]
    assert low < score < high
    assert any("Low predicted quality score" in w for w in data["warnings"])


OPTIMUM = dict(predictive_quality.EXAMPLE_INPUTS, thickness=3, laser_power=600, cutting_speed=3000,
               focus_height=-1, gas_pressure=8, assist_gas="oxygen", beam_quality=1)
HOPELESS = dict(predictive_quality.EXAMPLE_INPUTS, beam_quality=10, cutting_speed=15000,
                laser_power=100, focus_height=10, gas_pressure=30)


def test_ensemble_is_mean_of_members():
    penalties = deviation_penalties(predictive_quality.EXAMPLE_INPUTS)
    members = member_scores(85.0, penalties)
    assert quality_score(ModelKind.ENSEMBLE, 85.0, penalties) == pytest.approx(
        sum(members.values()) / 3)
    assert quality_scores(85.0, penalties)[ModelKind.ENSEMBLE] == pytest.approx(64.5, abs=0.05)


def test_model_kinds_disagree_at_the_optimum():
    penalties = deviation_penalties(OPTIMUM)
    assert all(p == 0 for p in penalties.values())
    scores = quality_scores(85.0, penalties)
    assert scores == {
        ModelKind.NEURAL_NETWORK: 86.0,
        ModelKind.RANDOM_FOREST: 84.5,
        ModelKind.SVM: 83.5,
        ModelKind.ENSEMBLE: 84.7,
    }


def test_model_kinds_disagree_at_the_floor():
    scores = quality_scores(85.0, deviation_penalties(HOPELESS))
    assert scores == {
        ModelKind.NEURAL_NETWORK: 63.0,
        ModelKind.RANDOM_FOREST: 61.0,
        ModelKind.SVM: 60.0,
        ModelKind.ENSEMBLE: 61.3,
    }


@pytest.mark.parametrize("material", ["steel", "aluminum", "titanium"])
@pytest.mark.parametrize("laser_power", [500, 1000, 3000, 8000])
@pytest.mark.parametrize("cutting_speed", [1000, 3000, 6000])
@pytest.mark.parametrize("beam_quality", [1, 1.5, 4])
def test_model_kinds_never_report_the_same_score(material, laser_power, cutting_speed,
                                                 beam_quality):
    data = _run(predictive_quality, material_type=material, laser_power=laser_power,
                cutting_speed=cutting_speed, beam_quality=beam_quality)
    reported = {c["model_type"]: c["quality_score"] for c in data["model_comparison"]}
    assert len(set(reported.values())) == 4
    assert all(60 <= s <= 100 for s in reported.values())
    assert data["quality_predictions"]["overall_quality_score"] == reported["ensemble"]


def test_model_kinds_report_distinct_accuracy():
    data = _run(predictive_quality)
    comparison = data["model_comparison"]
    assert [c["model_type"] for c in comparison] == [k.value for k in ModelKind]
    accuracies = [c["training_accuracy"] for c in comparison]
    assert len(set(accuracies)) == 4
    picked = _run(predictive_quality, model_type="svm")
    assert picked["model_summary"]["training_accuracy"] != data["model_summary"]["training_accuracy"]


def test_quality_scores_stay_in_range():
    data = _run(predictive_quality, beam_quality=10, cutting_speed=15000, laser_power=100,
                focus_height=10, gas_pressure=30)
    for c in data["model_comparison"]:
        assert 60 <= c["quality_score"] <= 100


def test_accuracy_adjustment_bounded():
    extreme = {"completeness": 1.0, "consistency": 1.0, "variance": 0.01}
    for kind in ModelKind:
        assert abs(accuracy_adjustment(kind, extreme)) < MAX_ACCURACY_ADJUSTMENT
    assert training_accuracy(ModelKind.ENSEMBLE, extreme) > training_accuracy(ModelKind.SVM, extreme)


# ============================================================
# Architectural metal
# ============================================================

def test_architectural_facade_non_compliant():
    data = _run(architectural_metal)
    deflection = data["deflection_analysis"]
    assert deflection["compliance"] == "Non-compliant"
    assert deflection["deflection_ratio"] < 250
    assert data["load_analysis"]["design_load"] == pytest.approx(14.94, abs=0.01)
    assert any("exceeds the L/250 limit" in w for w in data["warnings"])


def test_architectural_stiff_beam_compliant():
    data = _run(architectural_metal, architectural_element="structural_beam",
                material_type="carbon_steel", material_thickness=12.0,
                element_length=300, element_width=200, weather_exposure="interior")
    assert data["deflection_analysis"]["compliance"] == "Compliant"
    assert data["deflection_analysis"]["deflection_ratio"] > 250


def test_architectural_interior_has_no_wind_load():
    data = _run(architectural_metal, weather_exposure="interior")
    assert data["load_analysis"]["wind_load"] == 0.0
    assert data["thermal_considerations"]["material_suitability"] == "Excellent"


def test_architectural_unsurveyed_suitability_lowers_confidence():
    data = _run(architectural_metal, material_type="galvanized_steel")
    assert data["thermal_considerations"]["material_suitability"] == "Good"
    assert data["confidence"] == "Low"


# ============================================================
# Cutting time
# ============================================================

def test_cutting_time_reference_job():
    """5mm steel, 2 m of cut, 10 pierces at 3 kW: charted 7000 mm/min."""
    data = _run(cutting_time)
    assert data["cutting_speed"] == 7000
    assert data["pierce_time_per_point"] == 0.5
    assert data["cutting_time"] == pytest.approx(0.286, abs=0.001)
    assert data["piercing_time"] == pytest.approx(0.083, abs=0.001)
    assert data["total_time"] == pytest.approx(0.398, abs=0.001)
    assert data["efficiency"] == pytest.approx(71.86, abs=0.01)
    assert sum(data["time_breakdown"].values()) == pytest.approx(100, abs=0.02)
    metrics = data["production_metrics"]
    assert metrics["parts_per_hour"] == pytest.approx(150.9, abs=0.01)
    assert metrics["daily_capacity"] == 1207
    assert metrics["weekly_capacity"] == 6036
    assert data["cost_estimate"]["job_cost"] == pytest.approx(0.8, abs=0.005)
    assert data["confidence"] == "High"


def test_cutting_speed_scales_off_chart():
    steel = CUTTING_CHARTS["steel"]
    assert cutting_speed(steel, 5, 3000) == 7000
    assert cutting_speed(steel, 5.5, 3000) < 7000
    assert cutting_speed(steel, 5, 3200) > 7000
    assert pierce_seconds(steel, 5, 6000) < pierce_seconds(steel, 5, 3000)


def test_machine_cost_follows_hourly_rate():
    base = _run(cutting_time)["cost_estimate"]
    pricier = _run(cutting_time, machine_rate=300)["cost_estimate"]
    assert base["machine_rate"] == 120.0
    assert pricier["job_cost"] == pytest.approx(1.99, abs=0.01)
    assert pricier["cost_per_meter"] > base["cost_per_meter"]


def test_cutting_power_options_ranked_within_available_power():
    options = _run(cutting_time)["power_options"]
    assert [o["power"] for o in options] == [3000, 2000, 1000]
    assert [o["rank"] for o in options] == [1, 2, 3]
    assert options[0]["fit_score"] == pytest.approx(80.0, abs=0.1)
    limited = _run(cutting_time, laser_power=1500)["power_options"]
    assert [o["power"] for o in limited] == [1000]


def test_cutting_time_rule_warnings():
    thick = _run(cutting_time, thickness=30)
    assert any("Maximum recommended: 25mm" in w for w in thick["warnings"])
    dense = _run(cutting_time, cutting_length=100, pierce_count=10)
    assert "High pierce density may significantly increase processing time" in dense["warnings"]
    assert any("common line cutting" in r for r in dense["recommendations"])
    assert dense["efficiency"] < 60
    assert "Low cutting efficiency - high proportion of non-cutting time" in dense["warnings"]


def test_slow_thick_cut_warns():
    data = _run(cutting_time, thickness=25, laser_power=800)
    assert data["cutting_speed"] < 500
    assert "Low power-to-thickness ratio may result in slow cutting speeds" in data["warnings"]
    assert any("Very slow cutting speed" in w for w in data["warnings"])
    assert "Consider increasing laser power for faster cutting speeds" in data["recommendations"]
