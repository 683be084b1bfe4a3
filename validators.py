# validators.py
"""
Range checks for the three numeric fields.
Each returns None when the value is acceptable, otherwise the message shown
next to the field. They never raise, and they never depend on each other, so
the engine can run all of them and report every problem at once.
"""
import math
from typing import Optional

from constants import VALIDATION_LIMITS, CreatinineUnit


def _missing(value: Optional[float]) -> bool:
    return value is None or math.isnan(value)


def validate_age(age: Optional[float]) -> Optional[str]:
    if _missing(age) or age < VALIDATION_LIMITS.AGE_MIN:
        return "Age must be ≥ 1 year"
    # Implausible rather than impossible, but it still blocks the calculation
    if age > VALIDATION_LIMITS.AGE_MAX:
        return "Please verify age > 120 years"
    return None


def validate_creatinine(value: Optional[float], unit: CreatinineUnit) -> Optional[str]:
    if _missing(value) or value <= 0:
        return "Creatinine must be > 0"

    upper = VALIDATION_LIMITS.CREATININE_MAX[unit]
    if value > upper:
        return f"Please verify creatinine > {upper:g} {unit.value}"
    return None


def validate_height(height_cm: Optional[float]) -> Optional[str]:
    """Only meaningful on the pediatric (Schwartz) path."""
    if _missing(height_cm) or not (
        VALIDATION_LIMITS.HEIGHT_MIN_CM <= height_cm <= VALIDATION_LIMITS.HEIGHT_MAX_CM
    ):
        return "Height must be between 30-250 cm"
    return None
