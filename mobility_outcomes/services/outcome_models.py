"""
Stay Outcome Models
===================

Hand-calibrated additive models over the risk flag set:

1. Length of Stay (linear, days)
   - Base 5.5 days plus a fixed increment per active factor, floored at 1 day

2. Discharge Home Probability (logistic)
   - Intercept 1.20; impaired mobility, acuity and frailty lower the odds

3. 30-day Readmission Probability (logistic)
   - Intercept -1.73; adds diabetes, active cancer and sedating medications

Each model starts from its base constant, adds the coefficient of every
active factor it has a coefficient for, and records which factors fired.
Confidence is a factor-count heuristic (>=4 high, >=2 moderate, else low),
not a statistical interval.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from mobility_outcomes.schemas.patient_profile_schemas import CognitiveStatus, MobilityStatus
from mobility_outcomes.services.flag_extractor import RiskFlags
from mobility_outcomes.utils.numeric import sigmoid

logger = logging.getLogger(__name__)


class ModelFactor(str, Enum):
    """Every factor any outcome model can carry a coefficient for"""
    MOB_BEDBOUND = "mob_bedbound"
    MOB_CHAIR_BOUND = "mob_chair_bound"
    MOB_STANDING_ASSIST = "mob_standing_assist"
    MOB_WALKING_ASSIST = "mob_walking_assist"
    IMMOBILE_GE3 = "immobile_ge3"
    ICU = "icu"
    STEPDOWN = "stepdown"
    AGE_70_PLUS = "age_70_plus"
    AGE_80_PLUS = "age_80_plus"
    COG_MILD = "cog_mild"
    COG_DELIRIUM = "cog_delirium"
    MALNUTRITION = "malnutrition"
    LOW_ALBUMIN = "low_albumin"
    DIABETES = "diabetes"
    ACTIVE_CANCER = "active_cancer"
    STROKE = "stroke"
    POSTOP = "postop"
    TRAUMA = "trauma"
    DEVICES_PRESENT = "devices_present"
    SEDATING_MEDS = "sedating_meds"


# Independent patients (and unrecognized tiers) have no mobility factor
MOBILITY_FACTORS = {
    MobilityStatus.BEDBOUND.value: ModelFactor.MOB_BEDBOUND,
    MobilityStatus.CHAIR_BOUND.value: ModelFactor.MOB_CHAIR_BOUND,
    MobilityStatus.STANDING_ASSIST.value: ModelFactor.MOB_STANDING_ASSIST,
    MobilityStatus.WALKING_ASSIST.value: ModelFactor.MOB_WALKING_ASSIST,
}

COGNITIVE_FACTORS = {
    CognitiveStatus.MILD_IMPAIRMENT.value: ModelFactor.COG_MILD,
    CognitiveStatus.DELIRIUM_DEMENTIA.value: ModelFactor.COG_DELIRIUM,
}


def active_factors(flags: RiskFlags) -> List[ModelFactor]:
    """Factors present in a flag set, in canonical order."""
    factors: List[ModelFactor] = []
    
    mobility_factor = MOBILITY_FACTORS.get(flags.mobility)
    if mobility_factor is not None:
        factors.append(mobility_factor)
    if flags.immobile_ge3:
        factors.append(ModelFactor.IMMOBILE_GE3)
    
    # ICU and stepdown are mutually exclusive; ICU wins
    if flags.icu:
        factors.append(ModelFactor.ICU)
    elif flags.stepdown:
        factors.append(ModelFactor.STEPDOWN)
    
    if flags.age_70_plus:
        factors.append(ModelFactor.AGE_70_PLUS)
    if flags.age_80_plus:
        factors.append(ModelFactor.AGE_80_PLUS)
    
    cognitive_factor = COGNITIVE_FACTORS.get(flags.cog)
    if cognitive_factor is not None:
        factors.append(cognitive_factor)
    
    for factor, active in (
        (ModelFactor.MALNUTRITION, flags.malnutrition),
        (ModelFactor.LOW_ALBUMIN, flags.low_albumin),
        (ModelFactor.DIABETES, flags.diabetes),
        (ModelFactor.ACTIVE_CANCER, flags.active_cancer),
        (ModelFactor.STROKE, flags.stroke),
        (ModelFactor.POSTOP, flags.postop),
        (ModelFactor.TRAUMA, flags.trauma),
        (ModelFactor.DEVICES_PRESENT, flags.devices_present),
        (ModelFactor.SEDATING_MEDS, flags.sedating_meds),
    ):
        if active:
            factors.append(factor)
    
    return factors


def confidence_level(factors: List[str]) -> str:
    """Heuristic confidence from the number of factors that fired."""
    if len(factors) >= 4:
        return "high"
    if len(factors) >= 2:
        return "moderate"
    return "low"


@dataclass
class ModelScore:
    """Raw (unrounded) model output"""
    value: float
    factors: List[str] = field(default_factory=list)
    
    @property
    def confidence_level(self) -> str:
        return confidence_level(self.factors)


class OutcomeModel:
    """
    Additive model over ModelFactor coefficients.
    
    Subclasses set BASE and COEFFICIENTS; LINK is "linear" or "logistic".
    Coefficient tables are validated when the subclass is defined.
    """
    
    NAME: str = "outcome"
    BASE: float = 0.0
    LINK: str = "linear"
    FLOOR: float = float("-inf")
    COEFFICIENTS: Dict[ModelFactor, float] = {}
    
    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        unknown = [key for key in cls.COEFFICIENTS if not isinstance(key, ModelFactor)]
        if unknown:
            raise TypeError(f"{cls.__name__} has coefficients for unknown factors: {unknown}")
        if cls.LINK not in ("linear", "logistic"):
            raise TypeError(f"{cls.__name__} has unsupported link '{cls.LINK}'")
    
    @classmethod
    def score(cls, flags: RiskFlags) -> ModelScore:
        """Evaluate the model on a flag set."""
        total = cls.BASE
        fired: List[str] = []
        
        for factor in active_factors(flags):
            coefficient = cls.COEFFICIENTS.get(factor)
            if coefficient:
                total += coefficient
                fired.append(factor.value)
        
        if cls.LINK == "logistic":
            value = sigmoid(total)
        else:
            value = max(cls.FLOOR, total)
        
        logger.debug(f"{cls.NAME}: score={total:.3f} value={value:.4f} factors={fired}")
        return ModelScore(value=value, factors=fired)


class LengthOfStayModel(OutcomeModel):
    """Expected length of stay in days"""
    
    NAME = "length_of_stay"
    BASE = 5.5
    LINK = "linear"
    FLOOR = 1.0
    COEFFICIENTS = {
        ModelFactor.ICU: 2.0,
        ModelFactor.STEPDOWN: 0.7,
        ModelFactor.MOB_BEDBOUND: 1.5,
        ModelFactor.MOB_CHAIR_BOUND: 1.0,
        ModelFactor.MOB_STANDING_ASSIST: 0.5,
        ModelFactor.MOB_WALKING_ASSIST: 0.2,
        ModelFactor.IMMOBILE_GE3: 1.0,
        ModelFactor.AGE_70_PLUS: 0.6,
        ModelFactor.AGE_80_PLUS: 0.5,
        ModelFactor.COG_MILD: 0.3,
        ModelFactor.COG_DELIRIUM: 0.8,
        ModelFactor.MALNUTRITION: 0.8,
        ModelFactor.LOW_ALBUMIN: 0.5,
        ModelFactor.STROKE: 1.0,
        ModelFactor.POSTOP: 0.6,
        ModelFactor.TRAUMA: 0.8,
        ModelFactor.DEVICES_PRESENT: 0.3,
    }
    
    # Display band around the point estimate
    RANGE_LOW = 0.8
    RANGE_HIGH = 1.3
    
    @classmethod
    def range_band(cls, days: float) -> tuple:
        """(min, max) days: -20% floored at one day, +30%"""
        return max(1.0, days * cls.RANGE_LOW), days * cls.RANGE_HIGH


class DischargeHomeModel(OutcomeModel):
    """Probability of discharge to home"""
    
    NAME = "discharge_home"
    BASE = 1.20
    LINK = "logistic"
    COEFFICIENTS = {
        ModelFactor.ICU: -1.20,
        ModelFactor.STEPDOWN: -0.40,
        ModelFactor.MOB_BEDBOUND: -1.20,
        ModelFactor.MOB_CHAIR_BOUND: -0.80,
        ModelFactor.MOB_STANDING_ASSIST: -0.40,
        ModelFactor.MOB_WALKING_ASSIST: -0.15,
        ModelFactor.IMMOBILE_GE3: -0.50,
        ModelFactor.AGE_70_PLUS: -0.30,
        ModelFactor.AGE_80_PLUS: -0.20,
        ModelFactor.COG_MILD: -0.35,
        ModelFactor.COG_DELIRIUM: -0.90,
        ModelFactor.MALNUTRITION: -0.40,
        ModelFactor.LOW_ALBUMIN: -0.35,
        ModelFactor.STROKE: -0.60,
        ModelFactor.TRAUMA: -0.25,
        ModelFactor.DEVICES_PRESENT: -0.25,
    }
    
    @staticmethod
    def disposition(probability: float) -> str:
        if probability >= 0.75:
            return "Likely to go home"
        if probability >= 0.65:
            return "May go home"
        return "Post-acute care likely"


class ReadmissionModel(OutcomeModel):
    """30-day all-cause readmission probability"""
    
    NAME = "readmission_30d"
    BASE = -1.73
    LINK = "logistic"
    COEFFICIENTS = {
        ModelFactor.ICU: 0.20,
        ModelFactor.STEPDOWN: 0.10,
        ModelFactor.MOB_BEDBOUND: 0.50,
        ModelFactor.MOB_CHAIR_BOUND: 0.30,
        ModelFactor.MOB_STANDING_ASSIST: 0.20,
        ModelFactor.IMMOBILE_GE3: 0.30,
        ModelFactor.AGE_70_PLUS: 0.15,
        ModelFactor.AGE_80_PLUS: 0.15,
        ModelFactor.COG_MILD: 0.20,
        ModelFactor.COG_DELIRIUM: 0.40,
        ModelFactor.MALNUTRITION: 0.30,
        ModelFactor.LOW_ALBUMIN: 0.30,
        ModelFactor.DIABETES: 0.15,
        ModelFactor.ACTIVE_CANCER: 0.25,
        ModelFactor.STROKE: 0.30,
        ModelFactor.DEVICES_PRESENT: 0.20,
        ModelFactor.SEDATING_MEDS: 0.20,
    }
    
    # Factors a mobility program or medication review can act on
    MODIFIABLE_FACTORS = (
        ModelFactor.MOB_BEDBOUND,
        ModelFactor.MOB_CHAIR_BOUND,
        ModelFactor.SEDATING_MEDS,
        ModelFactor.DEVICES_PRESENT,
        ModelFactor.IMMOBILE_GE3,
    )
    
    @staticmethod
    def risk_level(probability: float) -> str:
        if probability < 0.12:
            return "low"
        if probability < 0.20:
            return "moderate"
        return "high"
    
    @classmethod
    def modifiable_factors(cls, factors: List[str]) -> List[str]:
        modifiable = {factor.value for factor in cls.MODIFIABLE_FACTORS}
        return [factor for factor in factors if factor in modifiable]
