"""
Risk Flag Extractor
===================

Normalizes a patient profile into the flat flag set consumed by every
outcome model. Extraction is a pure function of the profile: the same
profile always yields the same flags, and nothing is cached between calls.

Unrecognized level_of_care / mobility_status / cognitive_status /
baseline_function values are logged and contribute nothing to any model.
With strict mode on (STRICT_CLINICAL_ENUMS or strict=True) they raise
UnrecognizedClinicalValueError instead.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from mobility_outcomes.core.config import settings
from mobility_outcomes.core.error_handling import UnrecognizedClinicalValueError
from mobility_outcomes.core.logging import log_warning
from mobility_outcomes.schemas.patient_profile_schemas import (
    AdmissionCategory,
    BaselineFunction,
    CognitiveStatus,
    LevelOfCare,
    MobilityStatus,
    PatientProfileInput,
)
from mobility_outcomes.services.admission_category_mapper import resolve_admission_category
from mobility_outcomes.services.medication_classifier import classify_medications

logger = logging.getLogger(__name__)


ENUM_FIELDS = {
    "level_of_care": LevelOfCare,
    "mobility_status": MobilityStatus,
    "cognitive_status": CognitiveStatus,
    "baseline_function": BaselineFunction,
}


@dataclass(frozen=True)
class RiskFlags:
    """Derived risk flags for one profile (or one hypothetical scenario)"""
    # Age
    age: int
    age_70_plus: bool
    age_80_plus: bool
    sex: str
    
    # Level of care
    level_of_care: str
    icu: bool
    stepdown: bool
    
    # Nutrition / frailty
    malnutrition: bool
    low_albumin: bool
    walker_baseline: bool
    dependent_baseline: bool
    
    # Diagnoses and comorbidities
    obesity: bool
    diabetes: bool
    neuropathy: bool
    parkinson: bool
    stroke: bool
    active_cancer: bool
    history_vte: bool
    postop: bool
    trauma: bool
    admit_cat: str
    
    # Mobility and cognition
    mobility: str
    cog: str
    days_immobile: int
    immobile_ge3: bool
    
    # Devices, skin, prophylaxis
    devices_present: bool
    moisture: bool
    no_prophylaxis: bool
    
    # Medications
    sedating_meds: bool
    on_anticoagulant: bool
    on_steroids: bool
    
    bmi: Optional[float] = None
    

def calculate_bmi(weight_kg: Optional[float], height_cm: Optional[float]) -> Optional[float]:
    """BMI in kg/m^2, or None when it cannot be computed."""
    if not weight_kg or not height_cm:
        return None
    try:
        bmi = float(weight_kg) / (float(height_cm) / 100.0) ** 2
    except (ZeroDivisionError, OverflowError, TypeError, ValueError):
        return None
    if not math.isfinite(bmi):
        return None
    return bmi


def _check_enum_values(profile: PatientProfileInput, strict: bool) -> None:
    for field_name, enum_cls in ENUM_FIELDS.items():
        value = getattr(profile, field_name)
        allowed = [member.value for member in enum_cls]
        if value in allowed:
            continue
        if strict:
            raise UnrecognizedClinicalValueError(field_name, value, allowed)
        log_warning(
            f"Unrecognized {field_name} value; it will not contribute to any outcome model",
            logger_name=__name__,
        )


def extract_flags(
    profile: Union[PatientProfileInput, Mapping[str, Any]],
    strict: Optional[bool] = None,
) -> RiskFlags:
    """
    Build the risk flag set for a patient profile.
    
    Args:
        profile: PatientProfileInput or a JSON-shaped mapping of the same fields
        strict: Reject unrecognized enum values; defaults to settings.STRICT_CLINICAL_ENUMS
    
    Returns:
        RiskFlags
    """
    if not isinstance(profile, PatientProfileInput):
        profile = PatientProfileInput.model_validate(profile)
    if strict is None:
        strict = settings.STRICT_CLINICAL_ENUMS
    
    _check_enum_values(profile, strict)
    
    comorbidities = set(profile.comorbidities)
    meds = classify_medications(
        profile.medications,
        sedating=profile.on_sedating_medications,
        anticoagulant=profile.on_anticoagulants,
        steroid=profile.on_steroids,
    )
    admit_cat = resolve_admission_category(profile)
    bmi = calculate_bmi(profile.weight_kg, profile.height_cm)
    
    devices_present = bool(profile.devices) or any([
        profile.has_foley_catheter,
        profile.has_central_line,
        profile.has_feeding_tube,
        profile.has_ventilator,
    ])
    
    flags = RiskFlags(
        age=profile.age,
        age_70_plus=profile.age >= 70,
        age_80_plus=profile.age >= 80,
        sex=profile.sex.lower(),
        level_of_care=profile.level_of_care,
        icu=profile.level_of_care == LevelOfCare.ICU.value,
        stepdown=profile.level_of_care == LevelOfCare.STEPDOWN.value,
        malnutrition=bool(profile.has_malnutrition) or "malnutrition" in comorbidities,
        low_albumin=profile.albumin_low,
        walker_baseline=profile.baseline_function == BaselineFunction.WALKER.value,
        dependent_baseline=profile.baseline_function == BaselineFunction.DEPENDENT.value,
        obesity=(
            bool(profile.has_obesity)
            or "obesity" in comorbidities
            or (bmi is not None and bmi >= 30)
        ),
        diabetes=bool(profile.has_diabetes) or "diabetes" in comorbidities,
        neuropathy=bool(profile.has_neuropathy) or "neuropathy" in comorbidities,
        parkinson=bool(profile.has_parkinson) or "parkinson" in comorbidities,
        stroke=(
            bool(profile.has_stroke_history)
            or "stroke" in comorbidities
            or admit_cat == AdmissionCategory.NEURO
        ),
        active_cancer=(
            bool(profile.has_active_cancer)
            or "active_cancer" in comorbidities
            or admit_cat == AdmissionCategory.ONCOLOGY
        ),
        history_vte=bool(profile.has_vte_history) or "history_vte" in comorbidities,
        postop=admit_cat == AdmissionCategory.POSTOP,
        trauma=admit_cat == AdmissionCategory.TRAUMA,
        admit_cat=admit_cat.value,
        mobility=profile.mobility_status,
        cog=profile.cognitive_status,
        days_immobile=profile.days_immobile,
        immobile_ge3=profile.days_immobile >= 3,
        devices_present=devices_present,
        moisture=profile.incontinent,
        no_prophylaxis=not profile.on_vte_prophylaxis,
        sedating_meds=meds.sedating,
        on_anticoagulant=meds.anticoagulant,
        on_steroids=meds.steroid,
        bmi=bmi,
    )
    logger.debug(f"Extracted flags: mobility={flags.mobility}, admit_cat={flags.admit_cat}, bmi_known={bmi is not None}")
    return flags
