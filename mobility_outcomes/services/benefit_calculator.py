"""
Mobility Benefit Calculator
===========================

Estimates what a structured mobility program is worth for one patient:

- Improved scenario: mobility advanced one tier (bedbound -> chair_bound ->
  standing_assist -> walking_assist) and prolonged immobility cleared.
  Walking-assist and independent patients keep their tier.
- Length of stay: tiered flat rate on the real predicted LOS (6% bedbound
  down to 1.5% independent), not the improved-scenario LOS delta.
- Discharge home / readmission: improved-scenario probability delta, with a
  small conditioning fallback for walking-assist and independent patients.
- Baseline risk domains: linear 25% for deconditioning; saturating curves
  for VTE, falls and pressure injury that approach but never reach a cap.

All values here are unrounded; rounding happens in the result assembler.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict

from mobility_outcomes.schemas.patient_profile_schemas import MOBILITY_TIERS, MobilityStatus
from mobility_outcomes.services.flag_extractor import RiskFlags
from mobility_outcomes.services.outcome_models import (
    DischargeHomeModel,
    LengthOfStayModel,
    ModelScore,
    ReadmissionModel,
)

logger = logging.getLogger(__name__)


# One-tier advancement up the ladder, stopping at walking_assist
_ADVANCEABLE_TIERS = MOBILITY_TIERS[:MOBILITY_TIERS.index(MobilityStatus.WALKING_ASSIST) + 1]
NEXT_MOBILITY_TIER = {
    current.value: improved.value
    for current, improved in zip(_ADVANCEABLE_TIERS, _ADVANCEABLE_TIERS[1:])
}

# Share of predicted LOS saved by a mobility program, by current tier
LOS_BENEFIT_RATES = {
    MobilityStatus.BEDBOUND.value: 0.06,
    MobilityStatus.CHAIR_BOUND.value: 0.05,
    MobilityStatus.STANDING_ASSIST.value: 0.04,
    MobilityStatus.WALKING_ASSIST.value: 0.025,
}
DEFAULT_LOS_BENEFIT_RATE = 0.015

# Tiers with nowhere to advance; they get the conditioning fallback
TOP_TIERS = (MobilityStatus.WALKING_ASSIST.value, MobilityStatus.INDEPENDENT.value)

HOME_FALLBACK_CAP = 0.02
HOME_FALLBACK_RELATIVE = 0.03
READMIT_FALLBACK_CAP = 0.015
READMIT_FALLBACK_RELATIVE = 0.05

DECONDITIONING_RELATIVE_REDUCTION = 0.25

# domain -> (max relative reduction, theoretical cap)
ASYMPTOTIC_CURVES = {
    "vte": (0.40, 0.03),
    "falls": (0.30, 0.025),
    "pressure": (0.35, 0.03),
}

RISK_DOMAINS = ("deconditioning", "vte", "falls", "pressure")


@dataclass
class StayOutcomes:
    """Real-profile model outputs"""
    length_of_stay: ModelScore
    discharge_home: ModelScore
    readmission: ModelScore


@dataclass
class StayBenefits:
    """Unrounded improvement deltas for the three stay outcomes"""
    length_of_stay_days: float
    home_discharge: float
    readmission: float
    
    def readmission_relative(self, readmission_probability: float) -> float:
        if readmission_probability <= 0:
            return 0.0
        return self.readmission / readmission_probability


def improved_mobility_flags(flags: RiskFlags) -> RiskFlags:
    """Hypothetical flag set after one tier of mobility progress."""
    return replace(
        flags,
        mobility=NEXT_MOBILITY_TIER.get(flags.mobility, flags.mobility),
        immobile_ge3=False,
    )


def asymptotic_benefit(risk: float, max_relative: float, cap: float) -> float:
    """
    Saturating risk reduction: cap * linear / (linear + cap / 2).
    
    Half the cap is reached when the linear reduction equals cap / 2; the
    cap itself is never reached for any finite risk.
    """
    linear = risk * max_relative
    if linear <= 0:
        return 0.0
    return cap * (linear / (linear + cap / 2))


def predict_stay_outcomes(flags: RiskFlags) -> StayOutcomes:
    return StayOutcomes(
        length_of_stay=LengthOfStayModel.score(flags),
        discharge_home=DischargeHomeModel.score(flags),
        readmission=ReadmissionModel.score(flags),
    )


def calculate_stay_benefits(flags: RiskFlags, outcomes: StayOutcomes) -> StayBenefits:
    """
    Benefits for LOS, home discharge and readmission.
    
    Args:
        flags: Real-profile flag set
        outcomes: Model outputs for the real profile
    """
    improved = improved_mobility_flags(flags)
    improved_home = DischargeHomeModel.score(improved).value
    improved_readmit = ReadmissionModel.score(improved).value
    
    rate = LOS_BENEFIT_RATES.get(flags.mobility, DEFAULT_LOS_BENEFIT_RATE)
    los_benefit = max(0.0, outcomes.length_of_stay.value * rate)
    
    home_probability = outcomes.discharge_home.value
    home_benefit = max(0.0, improved_home - home_probability)
    if home_benefit == 0 and flags.mobility in TOP_TIERS:
        home_benefit = min(HOME_FALLBACK_CAP, home_probability * HOME_FALLBACK_RELATIVE)
    
    readmit_probability = outcomes.readmission.value
    readmit_benefit = max(0.0, readmit_probability - improved_readmit)
    if readmit_benefit == 0 and flags.mobility in TOP_TIERS:
        readmit_benefit = min(READMIT_FALLBACK_CAP, readmit_probability * READMIT_FALLBACK_RELATIVE)
    
    logger.debug(
        f"Stay benefits ({flags.mobility} -> {improved.mobility}): "
        f"los={los_benefit:.3f} home={home_benefit:.4f} readmit={readmit_benefit:.4f}"
    )
    return StayBenefits(
        length_of_stay_days=los_benefit,
        home_discharge=home_benefit,
        readmission=readmit_benefit,
    )


def calculate_risk_domain_benefits(baseline_probabilities: Dict[str, float]) -> Dict[str, float]:
    """
    Absolute risk reduction for each baseline risk domain.
    
    Args:
        baseline_probabilities: deconditioning / vte / falls / pressure probabilities
    """
    benefits = {
        "deconditioning": baseline_probabilities["deconditioning"] * DECONDITIONING_RELATIVE_REDUCTION,
    }
    for domain, (max_relative, cap) in ASYMPTOTIC_CURVES.items():
        benefits[domain] = asymptotic_benefit(baseline_probabilities[domain], max_relative, cap)
    return benefits
