"""
Stay Prediction Schemas
Pydantic models for the stay predictions and mobility benefits added to a base risk result
"""

from typing import List

from pydantic import BaseModel, Field


class LengthOfStayPrediction(BaseModel):
    """Predicted hospital length of stay (days)"""
    predicted_days: float
    range_min: float
    range_max: float
    confidence_level: str
    factors_increasing: List[str] = Field(default_factory=list)
    factors_decreasing: List[str] = Field(default_factory=list)
    mobility_goal_benefit: float


class DischargeDispositionPrediction(BaseModel):
    """Probability of discharge to home"""
    home_probability: float
    disposition_prediction: str
    confidence_level: str
    key_factors: List[str] = Field(default_factory=list)


class ReadmissionRiskPrediction(BaseModel):
    """30-day all-cause readmission risk"""
    thirty_day_probability: float
    risk_level: str
    modifiable_factors: List[str] = Field(default_factory=list)
    mobility_benefit: float


class StayPredictions(BaseModel):
    length_of_stay: LengthOfStayPrediction
    discharge_disposition: DischargeDispositionPrediction
    readmission_risk: ReadmissionRiskPrediction


class RiskReduction(BaseModel):
    """Baseline risk before and after a structured mobility program"""
    current_risk: float
    reduced_risk: float
    absolute_reduction: float
    absolute_reduction_percent: float


class RiskReductions(BaseModel):
    deconditioning: RiskReduction
    vte: RiskReduction
    falls: RiskReduction
    pressure: RiskReduction


class StayImprovements(BaseModel):
    length_of_stay_reduction: float
    home_discharge_improvement: float
    readmission_reduction: float
    readmission_percent_reduction: float


class MobilityBenefits(BaseModel):
    risk_reductions: RiskReductions
    stay_improvements: StayImprovements
