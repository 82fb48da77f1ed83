"""
Patient Profile Schemas
Pydantic models for the base risk result consumed by the stay-prediction engine
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LevelOfCare(str, Enum):
    ICU = "icu"
    STEPDOWN = "stepdown"
    WARD = "ward"
    REHAB = "rehab"


class MobilityStatus(str, Enum):
    BEDBOUND = "bedbound"
    CHAIR_BOUND = "chair_bound"
    STANDING_ASSIST = "standing_assist"
    WALKING_ASSIST = "walking_assist"
    INDEPENDENT = "independent"


# Least to most mobile
MOBILITY_TIERS = [
    MobilityStatus.BEDBOUND,
    MobilityStatus.CHAIR_BOUND,
    MobilityStatus.STANDING_ASSIST,
    MobilityStatus.WALKING_ASSIST,
    MobilityStatus.INDEPENDENT,
]


class CognitiveStatus(str, Enum):
    NORMAL = "normal"
    MILD_IMPAIRMENT = "mild_impairment"
    DELIRIUM_DEMENTIA = "delirium_dementia"


class BaselineFunction(str, Enum):
    INDEPENDENT = "independent"
    WALKER = "walker"
    DEPENDENT = "dependent"


class AdmissionCategory(str, Enum):
    NEURO = "neuro"
    MEDICAL_PULM = "medical_pulm"
    CARDIAC = "cardiac"
    POSTOP = "postop"
    ORTHO = "ortho"
    ONCOLOGY = "oncology"
    SEPSIS = "sepsis"
    TRAUMA = "trauma"
    GENERAL_MEDICAL = "general_medical"


# Defaults applied when an enum-like field is blank or missing
PROFILE_DEFAULTS = {
    "level_of_care": LevelOfCare.WARD.value,
    "mobility_status": MobilityStatus.BEDBOUND.value,
    "cognitive_status": CognitiveStatus.NORMAL.value,
    "baseline_function": BaselineFunction.INDEPENDENT.value,
}


class PatientProfileInput(BaseModel):
    """
    Structured clinical profile echoed by the base risk calculator.
    
    Enum-like fields stay plain lower-cased strings so unknown values reach
    the flag extractor, which decides whether to reject or ignore them.
    """
    model_config = ConfigDict(extra="ignore")
    
    age: int = 0
    sex: str = ""
    weight_kg: Optional[float] = None
    height_cm: Optional[float] = None
    level_of_care: str = PROFILE_DEFAULTS["level_of_care"]
    mobility_status: str = PROFILE_DEFAULTS["mobility_status"]
    cognitive_status: str = PROFILE_DEFAULTS["cognitive_status"]
    days_immobile: int = Field(default=0, ge=0)
    admission_diagnosis: str = ""
    comorbidities: List[str] = Field(default_factory=list)
    medications: List[str] = Field(default_factory=list)
    devices: List[str] = Field(default_factory=list)
    incontinent: bool = False
    albumin_low: bool = False
    baseline_function: str = PROFILE_DEFAULTS["baseline_function"]
    on_vte_prophylaxis: bool = False
    
    # Structured medication flags override text classification per category
    on_sedating_medications: Optional[bool] = None
    on_anticoagulants: Optional[bool] = None
    on_steroids: Optional[bool] = None
    
    # Structured comorbidity flags, OR-ed with the comorbidity tags
    has_malnutrition: Optional[bool] = None
    has_obesity: Optional[bool] = None
    has_diabetes: Optional[bool] = None
    has_neuropathy: Optional[bool] = None
    has_parkinson: Optional[bool] = None
    has_stroke_history: Optional[bool] = None
    has_active_cancer: Optional[bool] = None
    has_vte_history: Optional[bool] = None
    
    # Structured admission flags, checked before the diagnosis text
    is_cardiac_admission: Optional[bool] = None
    is_neuro_admission: Optional[bool] = None
    is_orthopedic: Optional[bool] = None
    is_oncology: Optional[bool] = None
    is_postoperative: Optional[bool] = None
    is_trauma_admission: Optional[bool] = None
    is_sepsis: Optional[bool] = None
    
    # Structured device flags, OR-ed with the devices collection
    has_foley_catheter: Optional[bool] = None
    has_central_line: Optional[bool] = None
    has_feeding_tube: Optional[bool] = None
    has_ventilator: Optional[bool] = None
    
    @field_validator("level_of_care", "mobility_status", "cognitive_status", "baseline_function", mode="before")
    @classmethod
    def normalize_enum_like(cls, v: Any, info) -> str:
        if v is None or (isinstance(v, str) and not v.strip()):
            return PROFILE_DEFAULTS[info.field_name]
        return str(v).strip().lower()
    
    @field_validator("sex", "admission_diagnosis", mode="before")
    @classmethod
    def normalize_text(cls, v: Any) -> str:
        return "" if v is None else str(v)
    
    @field_validator("age", "days_immobile", mode="before")
    @classmethod
    def default_missing_count(cls, v: Any) -> Any:
        return 0 if v is None or v == "" else v
    
    @field_validator("comorbidities", "medications", "devices", mode="before")
    @classmethod
    def default_missing_collection(cls, v: Any) -> Any:
        """Null collections become empty; null entries inside them are dropped"""
        if v is None:
            return []
        if isinstance(v, (set, frozenset)):
            return sorted(item for item in v if item is not None)
        if isinstance(v, (list, tuple)):
            return [item for item in v if item is not None]
        return v
    
    @field_validator("incontinent", "albumin_low", "on_vte_prophylaxis", mode="before")
    @classmethod
    def default_missing_bool(cls, v: Any) -> Any:
        return False if v is None else v


class BaselineRisk(BaseModel):
    """One of the four baseline risk domains from the base calculator"""
    model_config = ConfigDict(extra="allow")
    
    probability: float = Field(..., ge=0.0, le=1.0)
    severity: Optional[str] = None
    risk_level: Optional[str] = None
    odds_ratio_vs_mobile: Optional[float] = None
    contributing_factors: List[str] = Field(default_factory=list)


class BaseRiskResult(BaseModel):
    """Base risk calculator output that the engine augments"""
    model_config = ConfigDict(extra="allow")
    
    deconditioning: BaselineRisk
    vte: BaselineRisk
    falls: BaselineRisk
    pressure: BaselineRisk
    mobility_recommendation: Optional[Any] = None
    input_echo: PatientProfileInput
