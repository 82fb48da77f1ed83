"""
Medication Classifier
=====================

Buckets free-text medication names into the clinical categories the outcome
models care about: sedating (benzodiazepines, hypnotics, antipsychotics,
opioids), anticoagulants and systemic steroids.

Matching is a case-insensitive substring test of generic-name fragments, so
"Lorazepam 1mg PRN" and "lorazepam" both count. Doses and frequencies are
not parsed.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


SEDATIVE_TOKENS = frozenset({
    "lorazepam", "diazepam", "alprazolam", "midazolam", "clonazepam",
    "zolpidem", "eszopiclone", "temazepam", "quetiapine", "haloperidol",
    "olanzapine", "trazodone", "morphine", "hydromorphone", "fentanyl",
    "oxycodone", "methadone", "propofol", "dexmedetomidine", "gabapentin",
})

ANTICOAGULANT_TOKENS = frozenset({
    "heparin", "enoxaparin", "fondaparinux", "apixaban", "rivaroxaban",
    "warfarin", "dabigatran",
})

STEROID_TOKENS = frozenset({
    "prednisone", "methylprednisolone", "dexamethasone", "hydrocortisone",
})


@dataclass(frozen=True)
class MedicationClasses:
    """Which medication categories a patient is on"""
    sedating: bool = False
    anticoagulant: bool = False
    steroid: bool = False


def _any_token(medications: Iterable[str], tokens: frozenset) -> bool:
    return any(token in med for med in medications for token in tokens)


def classify_medications(
    medication_names: Optional[Iterable[str]],
    sedating: Optional[bool] = None,
    anticoagulant: Optional[bool] = None,
    steroid: Optional[bool] = None,
) -> MedicationClasses:
    """
    Classify a medication list.
    
    Args:
        medication_names: Free-text medication entries
        sedating / anticoagulant / steroid: Structured flags; when not None
            they replace the text match for that category
    
    Returns:
        MedicationClasses with one boolean per category
    """
    lowered = [str(name).lower() for name in (medication_names or []) if name]
    
    result = MedicationClasses(
        sedating=sedating if sedating is not None else _any_token(lowered, SEDATIVE_TOKENS),
        anticoagulant=anticoagulant if anticoagulant is not None else _any_token(lowered, ANTICOAGULANT_TOKENS),
        steroid=steroid if steroid is not None else _any_token(lowered, STEROID_TOKENS),
    )
    logger.debug(
        f"Classified {len(lowered)} medications: sedating={result.sedating}, "
        f"anticoagulant={result.anticoagulant}, steroid={result.steroid}"
    )
    return result
