"""
Result Assembler
================

Augments a base risk calculator result with stay predictions (length of
stay, discharge disposition, 30-day readmission) and mobility benefits.

The input dict is never mutated; the return value is a new dict holding
every key of the input plus `stay_predictions` and `mobility_benefits`.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from mobility_outcomes.core.config import settings
from mobility_outcomes.core.error_handling import InvalidAssessmentInputError
from mobility_outcomes.core.logging import log_audit
from mobility_outcomes.schemas.patient_profile_schemas import BaseRiskResult
from mobility_outcomes.schemas.stay_prediction_schemas import (
    DischargeDispositionPrediction,
    LengthOfStayPrediction,
    MobilityBenefits,
    ReadmissionRiskPrediction,
    RiskReduction,
    RiskReductions,
    StayImprovements,
    StayPredictions,
)
from mobility_outcomes.services.benefit_calculator import (
    RISK_DOMAINS,
    StayBenefits,
    StayOutcomes,
    calculate_risk_domain_benefits,
    calculate_stay_benefits,
    predict_stay_outcomes,
)
from mobility_outcomes.services.flag_extractor import extract_flags
from mobility_outcomes.services.outcome_models import (
    DischargeHomeModel,
    LengthOfStayModel,
    ReadmissionModel,
)
from mobility_outcomes.utils.numeric import round_half_up

logger = logging.getLogger(__name__)


def build_stay_predictions(outcomes: StayOutcomes, benefits: StayBenefits) -> StayPredictions:
    los = outcomes.length_of_stay
    home = outcomes.discharge_home
    readmit = outcomes.readmission
    range_min, range_max = LengthOfStayModel.range_band(los.value)
    
    return StayPredictions(
        length_of_stay=LengthOfStayPrediction(
            predicted_days=round_half_up(los.value, 1),
            range_min=max(1.0, round_half_up(range_min, 1)),
            range_max=round_half_up(range_max, 1),
            confidence_level=los.confidence_level,
            factors_increasing=list(los.factors),
            factors_decreasing=[],
            mobility_goal_benefit=round_half_up(benefits.length_of_stay_days, 1),
        ),
        discharge_disposition=DischargeDispositionPrediction(
            home_probability=round_half_up(home.value, 3),
            disposition_prediction=DischargeHomeModel.disposition(home.value),
            confidence_level=home.confidence_level,
            key_factors=list(home.factors),
        ),
        readmission_risk=ReadmissionRiskPrediction(
            thirty_day_probability=round_half_up(readmit.value, 3),
            risk_level=ReadmissionModel.risk_level(readmit.value),
            modifiable_factors=ReadmissionModel.modifiable_factors(readmit.factors),
            mobility_benefit=round_half_up(benefits.readmission, 3),
        ),
    )


def build_mobility_benefits(
    baseline_probabilities: Dict[str, float],
    outcomes: StayOutcomes,
    benefits: StayBenefits,
) -> MobilityBenefits:
    reductions = calculate_risk_domain_benefits(baseline_probabilities)
    
    risk_reductions = {
        domain: RiskReduction(
            current_risk=round_half_up(baseline_probabilities[domain], 3),
            reduced_risk=round_half_up(baseline_probabilities[domain] - reductions[domain], 3),
            absolute_reduction=round_half_up(reductions[domain], 3),
            absolute_reduction_percent=round_half_up(reductions[domain] * 100, 1),
        )
        for domain in RISK_DOMAINS
    }
    
    return MobilityBenefits(
        risk_reductions=RiskReductions(**risk_reductions),
        stay_improvements=StayImprovements(
            length_of_stay_reduction=round_half_up(benefits.length_of_stay_days, 1),
            home_discharge_improvement=round_half_up(benefits.home_discharge, 3),
            readmission_reduction=round_half_up(benefits.readmission, 3),
            readmission_percent_reduction=round_half_up(
                benefits.readmission_relative(outcomes.readmission.value) * 100, 1
            ),
        ),
    )


def add_stay_predictions(
    base_result: Mapping[str, Any],
    strict: Optional[bool] = None,
    assessment_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Add stay predictions and mobility benefits to a base risk result.
    
    Args:
        base_result: Base calculator output with deconditioning, vte, falls,
            pressure, mobility_recommendation and input_echo
        strict: Reject unrecognized enum values (defaults to settings)
        assessment_id: Optional reference carried into the audit log
    
    Returns:
        New dict: the base result plus stay_predictions and mobility_benefits
    
    Raises:
        InvalidAssessmentInputError: base result has the wrong shape
        UnrecognizedClinicalValueError: strict mode and an unknown enum value
    """
    try:
        parsed = BaseRiskResult.model_validate(base_result)
    except ValidationError as e:
        raise InvalidAssessmentInputError.from_validation_error(e) from e
    
    flags = extract_flags(parsed.input_echo, strict=strict)
    outcomes = predict_stay_outcomes(flags)
    benefits = calculate_stay_benefits(flags, outcomes)
    baseline_probabilities = {
        domain: getattr(parsed, domain).probability for domain in RISK_DOMAINS
    }
    
    stay_predictions = build_stay_predictions(outcomes, benefits)
    mobility_benefits = build_mobility_benefits(baseline_probabilities, outcomes, benefits)
    
    if settings.AUDIT_LOGGING_ENABLED:
        log_audit("stay_predictions_computed", assessment_id, {
            "mobility_status": flags.mobility,
            "admission_category": flags.admit_cat,
            "predicted_days": stay_predictions.length_of_stay.predicted_days,
            "home_probability": stay_predictions.discharge_disposition.home_probability,
            "readmission_probability": stay_predictions.readmission_risk.thirty_day_probability,
            "los_factor_count": len(outcomes.length_of_stay.factors),
        })
    
    return {
        **base_result,
        "stay_predictions": stay_predictions.model_dump(),
        "mobility_benefits": mobility_benefits.model_dump(),
    }
