"""
Pytest configuration for the stay-prediction engine tests
"""

import os
import sys
import copy

import pytest

# Settings are read at import time; pin them before importing the package
os.environ["ENVIRONMENT"] = "test"
os.environ["STRICT_CLINICAL_ENUMS"] = "false"
os.environ["AUDIT_LOGGING_ENABLED"] = "true"

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))


DOROTHY_PROFILE = {
    "age": 82,
    "sex": "female",
    "level_of_care": "rehab",
    "mobility_status": "walking_assist",
    "cognitive_status": "normal",
    "days_immobile": 12,
    "admission_diagnosis": "",
    "comorbidities": ["diabetes"],
    "medications": [],
    "devices": [],
    "incontinent": False,
    "albumin_low": False,
    "on_vte_prophylaxis": True,
}

MOBILE_PROFILE = {
    "age": 50,
    "sex": "male",
    "level_of_care": "ward",
    "mobility_status": "independent",
    "cognitive_status": "normal",
    "days_immobile": 0,
    "admission_diagnosis": "syncope",
    "comorbidities": [],
    "medications": [],
    "devices": [],
    "incontinent": False,
    "albumin_low": False,
    "on_vte_prophylaxis": True,
}

ICU_PROFILE = {
    "age": 75,
    "sex": "male",
    "level_of_care": "icu",
    "mobility_status": "bedbound",
    "cognitive_status": "delirium_dementia",
    "days_immobile": 5,
    "admission_diagnosis": "Sepsis",
    "comorbidities": ["malnutrition"],
    "medications": ["Fentanyl drip", "Heparin 5000 units SC"],
    "devices": ["foley"],
    "incontinent": True,
    "albumin_low": False,
    "on_vte_prophylaxis": True,
}


def make_base_result(profile, deconditioning=0.647, vte=0.04, falls=0.05, pressure=0.03):
    """Base risk calculator output wrapped around a profile"""
    return {
        "deconditioning": {"probability": deconditioning, "severity": "high"},
        "vte": {"probability": vte, "severity": "moderate"},
        "falls": {"probability": falls, "severity": "high"},
        "pressure": {"probability": pressure, "severity": "moderate"},
        "mobility_recommendation": "Cycle 15 minutes at 25 W, twice daily",
        "input_echo": copy.deepcopy(profile),
    }


@pytest.fixture
def dorothy_profile():
    return copy.deepcopy(DOROTHY_PROFILE)


@pytest.fixture
def mobile_profile():
    return copy.deepcopy(MOBILE_PROFILE)


@pytest.fixture
def icu_profile():
    return copy.deepcopy(ICU_PROFILE)


@pytest.fixture
def dorothy_base_result():
    return make_base_result(DOROTHY_PROFILE)


@pytest.fixture
def base_result_factory():
    return make_base_result
