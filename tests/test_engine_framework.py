"""
Engine framework tests: validator, domain library, scorer, composer.

Tests:
1-12.  Input validator (structure pass, defaults, cross-field rules)
13-17. Domain library lookups and default-record fallback
18-23. Weighted scoring and ranking
24-28. Result composer and input fingerprint
"""

import pytest

from calc_engine.calculators import heat_affected_zone, registry
from calc_engine.calculators.base import (
    CalcOutput, EngineError, define_calculator, enum_field, number_field, rule_warning,
)
from calc_engine.calculators.composer import compose, failure, fingerprint
from calc_engine.calculators.material_lookup import (
    Category, EXPOSURE_PROFILES, THERMAL_PROPERTIES,
)
from calc_engine.calculators.scoring import (
    Constraint, Criterion, Requirements, score_and_rank,
)
from calc_engine.calculators.validator import apply_defaults, validate_input
from calc_engine.schemas import AdvisoryKind, CandidateOption, Severity

FIELDS = heat_affected_zone.CALCULATOR.field_specs


def _haz_inputs(**overrides):
    inputs = dict(heat_affected_zone.EXAMPLE_INPUTS)
    inputs.update(overrides)
    return inputs


def _codes(issues):
    return [i.code for i in issues]


# ============================================================
# Validator
# ============================================================

def test_valid_inputs_pass():
    result = validate_input(FIELDS, _haz_inputs())
    assert result.is_valid
    assert result.errors == []


def test_missing_required_field():
    inputs = _haz_inputs()
    del inputs["thickness"]
    result = validate_input(FIELDS, inputs)
    assert not result.is_valid
    assert [(e.field, e.code) for e in result.errors] == [("thickness", "REQUIRED")]


def test_bounds_checked_on_both_sides():
    low = validate_input(FIELDS, _haz_inputs(thickness=0.1))
    high = validate_input(FIELDS, _haz_inputs(thickness=60))
    assert _codes(low.errors) == ["BELOW_MINIMUM"]
    assert _codes(high.errors) == ["ABOVE_MAXIMUM"]
    assert "0.5" in low.errors[0].message


def test_enum_membership():
    result = validate_input(FIELDS, _haz_inputs(material_type="unobtanium"))
    assert _codes(result.errors) == ["INVALID_OPTION"]
    assert result.errors[0].field == "material_type"


def test_numbers_reject_bool_strings_and_nan():
    """True is an int in Python but never a valid measurement."""
    assert _codes(validate_input(FIELDS, _haz_inputs(laser_power=True)).errors) == ["INVALID_TYPE"]
    assert _codes(validate_input(FIELDS, _haz_inputs(laser_power="3000")).errors) == ["INVALID_TYPE"]
    assert _codes(validate_input(FIELDS, _haz_inputs(laser_power=float("nan"))).errors) == ["NOT_A_NUMBER"]


def test_integers_too_large_for_a_float_are_not_numbers():
    huge = 10 ** 400
    result = validate_input(FIELDS, _haz_inputs(thickness=huge))
    assert _codes(result.errors) == ["NOT_A_NUMBER"]
    assert result.errors[0].field == "thickness"
    assert _codes(validate_input(FIELDS, _haz_inputs(laser_power=-huge)).errors) == ["NOT_A_NUMBER"]


def test_huge_integers_never_escape_the_registry():
    inputs = _haz_inputs(cutting_speed=10 ** 400)
    checked = registry.validate(heat_affected_zone.CALCULATOR_ID, inputs)
    assert not checked.is_valid
    assert _codes(checked.errors) == ["NOT_A_NUMBER"]
    result = registry.calculate(heat_affected_zone.CALCULATOR_ID, inputs)
    assert result.success is False
    assert result.errors[0] == "Invalid input"


def test_every_violation_is_reported():
    result = validate_input(FIELDS, _haz_inputs(thickness=0.1, laser_power=50000,
                                                 material_type="wood"))
    assert sorted(e.field for e in result.errors) == ["laser_power", "material_type", "thickness"]


def test_unknown_fields_warn_but_stay_valid():
    result = validate_input(FIELDS, _haz_inputs(colour="red"))
    assert result.is_valid
    assert "UNKNOWN_FIELD" in _codes(result.warnings)


def test_non_dict_inputs_rejected():
    result = validate_input(FIELDS, ["steel", 5])
    assert not result.is_valid
    assert result.errors[0].field == "*"


def test_apply_defaults_fills_optional_and_drops_unknown():
    inputs = _haz_inputs(colour="red")
    del inputs["beam_diameter"]
    del inputs["pulse_frequency"]
    normalized = apply_defaults(FIELDS, inputs)
    assert normalized["beam_diameter"] == 0.2
    assert normalized["pulse_frequency"] == 0
    assert "colour" not in normalized


def test_rules_only_warn_and_survive_exceptions():
    """Rule errors are downgraded; a crashing rule becomes RULE_FAILED."""
    def loud_rule(inputs, library):
        issue = rule_warning("thickness", "too thick", "LOUD")
        return [issue.model_copy(update={"severity": Severity.ERROR})]

    def broken_rule(inputs, library):
        raise ZeroDivisionError("boom")

    result = validate_input(FIELDS, _haz_inputs(), rules=[loud_rule, broken_rule])
    assert result.is_valid
    assert _codes(result.warnings) == ["LOUD", "RULE_FAILED"]
    assert all(w.severity == Severity.WARNING for w in result.warnings)
    # Exception text goes to the log, not the caller
    assert result.warnings[1].message == "A consistency check could not be completed"
    assert "boom" not in result.warnings[1].message

    # Rules never run on structurally invalid input
    invalid = validate_input(FIELDS, _haz_inputs(thickness=-1), rules=[broken_rule])
    assert invalid.warnings == []


# ============================================================
# Domain library
# ============================================================

def test_lookup_known_key(library):
    result = library.lookup(Category.THERMAL, "copper")
    assert result.record is THERMAL_PROPERTIES["copper"]
    assert result.used_default is False


def test_lookup_unknown_key_returns_default(library):
    result = library.lookup(Category.THERMAL, "unobtanium")
    assert result.used_default is True
    assert result.record is THERMAL_PROPERTIES["steel"]


def test_interior_exposure_has_no_wind_load():
    assert EXPOSURE_PROFILES["interior"].wind_pressure == 0.0


def test_calc_output_lookup_flags_default(library):
    out = CalcOutput()
    out.lookup(library, Category.THERMAL_SUITABILITY, ("carbon_steel", "interior"))
    assert out.defaults_used == ["thermal_suitability:carbon_steel/interior"]
    assert out.advisories[0].code == "DEFAULT_RECORD_USED"
    assert out.advisories[0].message == (
        "No thermal suitability data for 'carbon_steel/interior' - generic values were used")
    assert out.advisories[0].kind == AdvisoryKind.WARNING


def test_library_tables_are_read_only(library):
    with pytest.raises(TypeError):
        THERMAL_PROPERTIES["wood"] = THERMAL_PROPERTIES["steel"]
    # Records are reached through lookup/get only
    assert not hasattr(library, "table")
    assert library.keys(Category.THERMAL) == list(THERMAL_PROPERTIES.keys())


# ============================================================
# Scoring
# ============================================================

def _options():
    return [
        CandidateOption(name="B", cost=5.0, properties={"fit": 0.5}),
        CandidateOption(name="A", cost=5.0, properties={"fit": 0.5}),
        CandidateOption(name="C", cost=2.0, properties={"fit": 0.5}),
        CandidateOption(name="Gold", cost=500.0, properties={"fit": 1.0}),
    ]


def _fit_requirements(**kw):
    return Requirements(criteria=[Criterion("fit", 1.0, lambda c: c.properties["fit"])], **kw)


def test_constraints_filter_before_scoring():
    ranked = score_and_rank(_options(), _fit_requirements(
        constraints=[Constraint("affordable", lambda c: c.cost <= 10)]))
    assert "Gold" not in [r.name for r in ranked]
    assert len(ranked) == 3


def test_ties_break_on_cost_then_name():
    ranked = score_and_rank(_options(), _fit_requirements())
    assert [r.name for r in ranked] == ["Gold", "C", "A", "B"]
    assert [r.rank for r in ranked] == [1, 2, 3, 4]


def test_fits_are_clamped_into_score_range():
    requirements = Requirements(criteria=[
        Criterion("huge", 0.5, lambda c: 7.0),
        Criterion("negative", 0.5, lambda c: -3.0),
    ])
    ranked = score_and_rank(_options(), requirements)
    for r in ranked:
        assert r.score == 50.0
        assert r.sub_scores == {"huge": 1.0, "negative": 0.0}


def test_weights_are_normalized():
    requirements = Requirements(criteria=[
        Criterion("a", 3.0, lambda c: 1.0),
        Criterion("b", 1.0, lambda c: 0.0),
    ])
    assert score_and_rank(_options()[:1], requirements)[0].score == 75.0


def test_empty_and_limited_rankings():
    assert score_and_rank([], _fit_requirements()) == []
    assert len(score_and_rank(_options(), _fit_requirements(limit=2))) == 2


def test_zero_weights_are_an_engine_error():
    with pytest.raises(EngineError):
        score_and_rank(_options(), Requirements(criteria=[Criterion("x", 0.0, lambda c: 1.0)]))


# ============================================================
# Composer
# ============================================================

def test_fingerprint_ignores_key_order():
    assert fingerprint({"a": 1, "b": 2.5}) == fingerprint({"b": 2.5, "a": 1})
    assert fingerprint({"a": 1}) != fingerprint({"a": 2})
    assert len(fingerprint({})) == 64


def _dummy_calculator():
    return define_calculator(
        id="dummy", title="Dummy", category="Test",
        fields=[number_field("x", 0, 10), enum_field("mode", ["a", "b"], required=False)],
        compute=lambda inputs, library: CalcOutput(data={"x": inputs["x"]}),
        example_inputs={"x": 1},
        version="2.1.0",
    )


def test_compose_fills_metadata():
    calc = _dummy_calculator()
    out = CalcOutput(data={"x": 1})
    result = compose(calc, {"x": 1}, out, elapsed_ms=1.23456)
    assert result.success is True
    assert result.metadata.calculator_id == "dummy"
    assert result.metadata.version == "2.1.0"
    assert result.metadata.calculation_time_ms == 1.235
    assert result.metadata.input_fingerprint == fingerprint({"x": 1})
    assert result.metadata.timestamp.endswith("+00:00")


def test_compose_confidence_levels(library):
    calc = _dummy_calculator()
    clean = compose(calc, {"x": 1}, CalcOutput(), 0.1)
    assert clean.data["confidence"] == "High"
    assert clean.data["warnings"] == []

    warned = CalcOutput()
    warned.warn("careful")
    warned.recommend("try this")
    result = compose(calc, {"x": 1}, warned, 0.1)
    assert result.data["confidence"] == "Medium"
    assert result.data["warnings"] == ["careful"]
    assert result.data["recommendations"] == ["try this"]

    defaulted = CalcOutput()
    defaulted.lookup(library, Category.THERMAL, "wood")
    assert compose(calc, {"x": 1}, defaulted, 0.1).data["confidence"] == "Low"


def test_compose_keeps_calculator_confidence():
    out = CalcOutput(data={"confidence": "Custom"})
    out.warn("ignored for confidence")
    assert compose(_dummy_calculator(), {}, out, 0.1).data["confidence"] == "Custom"


def test_failure_envelope():
    result = failure("dummy", ["Invalid input"], inputs={"x": 1})
    assert result.success is False
    assert result.data is None
    assert result.errors == ["Invalid input"]
    assert result.metadata.input_fingerprint == fingerprint({"x": 1})
    assert result.metadata.calculation_time_ms == 0.0
