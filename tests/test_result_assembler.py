"""
End-to-end tests for add_stay_predictions.
"""

import copy
import json

import pytest

from mobility_outcomes import add_stay_predictions
from mobility_outcomes.core.error_handling import (
    InvalidAssessmentInputError,
    UnrecognizedClinicalValueError,
)


MOBILITY_ORDER = ["bedbound", "chair_bound", "standing_assist", "walking_assist", "independent"]


class TestDorothyAssessment:
    """82-year-old walking-assist rehab patient, 12 days immobile, diabetic"""
    
    def test_length_of_stay(self, dorothy_base_result):
        result = add_stay_predictions(dorothy_base_result)
        los = result["stay_predictions"]["length_of_stay"]
        
        assert los["predicted_days"] == 7.8
        assert los["range_min"] == 6.2
        assert los["range_max"] == 10.1
        assert los["confidence_level"] == "high"
        assert los["factors_increasing"] == ["mob_walking_assist", "immobile_ge3", "age_70_plus", "age_80_plus"]
        assert los["factors_decreasing"] == []
        assert los["mobility_goal_benefit"] == 0.2
    
    def test_discharge_disposition(self, dorothy_base_result):
        result = add_stay_predictions(dorothy_base_result)
        discharge = result["stay_predictions"]["discharge_disposition"]
        
        assert discharge["home_probability"] == 0.512
        assert discharge["disposition_prediction"] == "Post-acute care likely"
        assert discharge["confidence_level"] == "high"
        assert discharge["key_factors"] == ["mob_walking_assist", "immobile_ge3", "age_70_plus", "age_80_plus"]
    
    def test_readmission_risk(self, dorothy_base_result):
        result = add_stay_predictions(dorothy_base_result)
        readmission = result["stay_predictions"]["readmission_risk"]
        
        assert readmission["thirty_day_probability"] == 0.273
        assert readmission["risk_level"] == "high"
        assert readmission["modifiable_factors"] == ["immobile_ge3"]
        assert readmission["mobility_benefit"] == 0.055
    
    def test_risk_reductions(self, dorothy_base_result):
        result = add_stay_predictions(dorothy_base_result)
        reductions = result["mobility_benefits"]["risk_reductions"]
        
        deconditioning = reductions["deconditioning"]
        assert deconditioning["current_risk"] == 0.647
        assert deconditioning["absolute_reduction"] == 0.162
        assert deconditioning["reduced_risk"] == pytest.approx(0.485, abs=0.001)
        assert deconditioning["absolute_reduction_percent"] == pytest.approx(16.2, abs=0.1)
        
        # vte 0.04 -> linear 0.016 -> 0.03 * 0.016 / 0.031
        vte = reductions["vte"]
        assert vte["current_risk"] == 0.04
        assert vte["absolute_reduction"] == 0.015
        assert vte["reduced_risk"] == 0.025
        assert vte["absolute_reduction_percent"] == 1.5
    
    def test_stay_improvements(self, dorothy_base_result):
        result = add_stay_predictions(dorothy_base_result)
        improvements = result["mobility_benefits"]["stay_improvements"]
        
        assert improvements["length_of_stay_reduction"] == 0.2
        assert improvements["home_discharge_improvement"] == 0.122
        assert improvements["readmission_reduction"] == 0.055
        assert improvements["readmission_percent_reduction"] == 20.3


class TestResultShape:
    
    def test_base_result_is_spread(self, dorothy_base_result):
        result = add_stay_predictions(dorothy_base_result)
        
        for key in ("deconditioning", "vte", "falls", "pressure", "input_echo"):
            assert result[key] == dorothy_base_result[key]
        assert result["mobility_recommendation"] == dorothy_base_result["mobility_recommendation"]
        assert set(result["stay_predictions"]) == {"length_of_stay", "discharge_disposition", "readmission_risk"}
        assert set(result["mobility_benefits"]) == {"risk_reductions", "stay_improvements"}
    
    def test_missing_recommendation_not_added(self, dorothy_base_result):
        del dorothy_base_result["mobility_recommendation"]
        result = add_stay_predictions(dorothy_base_result)

        assert "mobility_recommendation" not in result
        assert result["stay_predictions"]["length_of_stay"]["predicted_days"] == 7.8

    def test_extra_base_keys_pass_through(self, dorothy_base_result):
        dorothy_base_result["calculator_version"] = "2.1"
        result = add_stay_predictions(dorothy_base_result)
        assert result["calculator_version"] == "2.1"
    
    def test_input_not_mutated(self, dorothy_base_result):
        snapshot = copy.deepcopy(dorothy_base_result)
        add_stay_predictions(dorothy_base_result)
        assert dorothy_base_result == snapshot
    
    def test_json_serializable(self, dorothy_base_result):
        json.dumps(add_stay_predictions(dorothy_base_result))
    
    def test_deterministic(self, base_result_factory, icu_profile):
        base = base_result_factory(icu_profile, deconditioning=0.81, vte=0.07, falls=0.12, pressure=0.09)
        first = json.dumps(add_stay_predictions(base), sort_keys=True)
        second = json.dumps(add_stay_predictions(base), sort_keys=True)
        assert first == second


class TestProperties:
    
    @pytest.mark.parametrize("status", MOBILITY_ORDER + ["unknown_tier"])
    @pytest.mark.parametrize("level_of_care", ["icu", "stepdown", "ward", "rehab"])
    def test_floor_and_non_negative_benefits(self, base_result_factory, icu_profile, status, level_of_care):
        icu_profile["mobility_status"] = status
        icu_profile["level_of_care"] = level_of_care
        result = add_stay_predictions(base_result_factory(icu_profile, 0.3, 0.999, 0.999, 0.999))
        
        assert result["stay_predictions"]["length_of_stay"]["predicted_days"] >= 1.0
        for reduction in result["mobility_benefits"]["risk_reductions"].values():
            assert reduction["absolute_reduction"] >= 0
            assert reduction["reduced_risk"] >= 0
        for value in result["mobility_benefits"]["stay_improvements"].values():
            assert value >= 0
    
    def test_caps_hold_after_rounding(self, base_result_factory, dorothy_profile):
        result = add_stay_predictions(base_result_factory(dorothy_profile, 0.9, 0.999, 0.999, 0.999))
        reductions = result["mobility_benefits"]["risk_reductions"]
        
        assert reductions["vte"]["absolute_reduction"] < 0.03
        assert reductions["falls"]["absolute_reduction"] < 0.025
        assert reductions["pressure"]["absolute_reduction"] < 0.03
    
    def test_range_band_matches_prediction(self, base_result_factory, icu_profile):
        los = add_stay_predictions(base_result_factory(icu_profile))["stay_predictions"]["length_of_stay"]
        
        assert los["range_min"] == pytest.approx(max(1.0, 0.8 * los["predicted_days"]), abs=0.051)
        assert los["range_max"] == pytest.approx(1.3 * los["predicted_days"], abs=0.051)
    
    def test_monotonic_in_mobility(self, base_result_factory, dorothy_profile):
        predictions = []
        for status in MOBILITY_ORDER:
            dorothy_profile["mobility_status"] = status
            predictions.append(add_stay_predictions(base_result_factory(dorothy_profile))["stay_predictions"])
        
        days = [p["length_of_stay"]["predicted_days"] for p in predictions]
        home = [p["discharge_disposition"]["home_probability"] for p in predictions]
        readmit = [p["readmission_risk"]["thirty_day_probability"] for p in predictions]
        
        assert days == sorted(days, reverse=True)
        assert home == sorted(home)
        assert readmit == sorted(readmit, reverse=True)


class TestInvalidInput:
    
    def test_missing_baseline_domain(self, dorothy_base_result):
        del dorothy_base_result["vte"]
        
        with pytest.raises(InvalidAssessmentInputError) as exc_info:
            add_stay_predictions(dorothy_base_result)
        
        assert "vte" in exc_info.value.fields
    
    def test_missing_input_echo(self, dorothy_base_result):
        del dorothy_base_result["input_echo"]
        
        with pytest.raises(InvalidAssessmentInputError):
            add_stay_predictions(dorothy_base_result)
    
    def test_probability_out_of_range(self, dorothy_base_result):
        dorothy_base_result["falls"]["probability"] = 1.5
        
        with pytest.raises(InvalidAssessmentInputError) as exc_info:
            add_stay_predictions(dorothy_base_result)
        
        assert "falls.probability" in exc_info.value.fields
    
    def test_strict_mode_rejects_unknown_level_of_care(self, dorothy_base_result):
        dorothy_base_result["input_echo"]["level_of_care"] = "hallway"
        
        with pytest.raises(UnrecognizedClinicalValueError):
            add_stay_predictions(dorothy_base_result, strict=True)
    
    def test_lenient_mode_accepts_unknown_level_of_care(self, dorothy_base_result):
        dorothy_base_result["input_echo"]["level_of_care"] = "hallway"
        result = add_stay_predictions(dorothy_base_result, strict=False)
        
        assert result["stay_predictions"]["length_of_stay"]["predicted_days"] == 7.8


class TestAuditLogging:
    
    def test_audit_line_emitted(self, dorothy_base_result, caplog):
        caplog.set_level("INFO", logger="audit")
        add_stay_predictions(dorothy_base_result, assessment_id="assess-42")
        
        audit_lines = [r.getMessage() for r in caplog.records if r.name == "audit"]
        assert len(audit_lines) == 1
        payload = json.loads(audit_lines[0].split("[AUDIT] ", 1)[1])
        assert payload["event_type"] == "stay_predictions_computed"
        assert payload["assessment_id"] == "assess-42"
        assert payload["details"]["predicted_days"] == 7.8
    
    def test_audit_line_has_no_profile(self, dorothy_base_result, caplog):
        caplog.set_level("INFO", logger="audit")
        add_stay_predictions(dorothy_base_result)
        
        text = " ".join(r.getMessage() for r in caplog.records if r.name == "audit")
        assert "diabetes" not in text
        assert "female" not in text
