"""
Admission Category Mapper
=========================

Maps a free-text admission diagnosis onto a coarse clinical category.

The keyword table is scanned in declaration order and the first keyword
contained in the lower-cased text wins, so "post-op sepsis" maps to postop
and "stroke after trauma" maps to neuro. The order matches the calibration
data and must not be re-sorted. Short keywords ("mi", "tbi") are plain
substring matches as well, which means "mi" also fires inside longer words.
"""

import logging
from typing import List, Tuple

from mobility_outcomes.schemas.patient_profile_schemas import AdmissionCategory, PatientProfileInput

logger = logging.getLogger(__name__)


# (keyword, category) in priority order
ADMISSION_KEYWORDS: List[Tuple[str, AdmissionCategory]] = [
    ("stroke", AdmissionCategory.NEURO),
    ("intracranial hemorrhage", AdmissionCategory.NEURO),
    ("tbi", AdmissionCategory.NEURO),
    ("pneumonia", AdmissionCategory.MEDICAL_PULM),
    ("copd", AdmissionCategory.MEDICAL_PULM),
    ("asthma", AdmissionCategory.MEDICAL_PULM),
    ("heart failure", AdmissionCategory.CARDIAC),
    ("mi", AdmissionCategory.CARDIAC),
    ("post-op", AdmissionCategory.POSTOP),
    ("postoperative", AdmissionCategory.POSTOP),
    ("orthopedic", AdmissionCategory.ORTHO),
    ("hip fracture", AdmissionCategory.ORTHO),
    ("spine", AdmissionCategory.ORTHO),
    ("cancer", AdmissionCategory.ONCOLOGY),
    ("sepsis", AdmissionCategory.SEPSIS),
    ("trauma", AdmissionCategory.TRAUMA),
]

# Structured admission flags, checked in this order before the text
STRUCTURED_ADMISSION_FLAGS: List[Tuple[str, AdmissionCategory]] = [
    ("is_cardiac_admission", AdmissionCategory.CARDIAC),
    ("is_neuro_admission", AdmissionCategory.NEURO),
    ("is_orthopedic", AdmissionCategory.ORTHO),
    ("is_oncology", AdmissionCategory.ONCOLOGY),
    ("is_postoperative", AdmissionCategory.POSTOP),
    ("is_trauma_admission", AdmissionCategory.TRAUMA),
    ("is_sepsis", AdmissionCategory.SEPSIS),
]


def map_admission_category(diagnosis_text: str) -> AdmissionCategory:
    """Map diagnosis text to a category; first matching keyword wins."""
    text = (diagnosis_text or "").lower()
    for keyword, category in ADMISSION_KEYWORDS:
        if keyword in text:
            return category
    return AdmissionCategory.GENERAL_MEDICAL


def resolve_admission_category(profile: PatientProfileInput) -> AdmissionCategory:
    """Category from structured admission flags, falling back to the diagnosis text."""
    for field_name, category in STRUCTURED_ADMISSION_FLAGS:
        if getattr(profile, field_name):
            logger.debug(f"Admission category {category.value} from structured flag {field_name}")
            return category
    return map_admission_category(profile.admission_diagnosis)
