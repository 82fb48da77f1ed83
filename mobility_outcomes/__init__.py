"""
Mobility Outcomes Engine
Stay predictions (length of stay, discharge home, 30-day readmission) and
mobility-program benefits layered on top of a base immobility-harm risk result.
"""

from mobility_outcomes.core.error_handling import (
    ErrorSanitizer,
    InvalidAssessmentInputError,
    StayPredictionError,
    UnrecognizedClinicalValueError,
)
from mobility_outcomes.services.admission_category_mapper import map_admission_category
from mobility_outcomes.services.flag_extractor import RiskFlags, extract_flags
from mobility_outcomes.services.medication_classifier import classify_medications
from mobility_outcomes.services.result_assembler import add_stay_predictions

__all__ = [
    "add_stay_predictions",
    "extract_flags",
    "classify_medications",
    "map_admission_category",
    "RiskFlags",
    "ErrorSanitizer",
    "StayPredictionError",
    "InvalidAssessmentInputError",
    "UnrecognizedClinicalValueError",
]
