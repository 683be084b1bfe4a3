"""
NephroFlow: Data Dictionary
===========================
Value objects passed between the shell and the calculation engine.
Inputs (what the clinician enters), the failure report, and the result.

NO CALCULATION is implemented here. PatientInput only guards Python types;
clinical plausibility lives in validators.py.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from constants import (
    VERSION,
    Sex,
    CreatinineUnit,
    FormulaChoice,
    StageInfo,
    FORMULA_LIBRARY,
    EGFR_UNIT,
)

class DataTypeError(TypeError):
    """Raised when inputs are wrong python types (str instead of float)."""
    pass

_SEX_ALIASES = {
    "male": Sex.MALE, "m": Sex.MALE,
    "female": Sex.FEMALE, "f": Sex.FEMALE,
}

_UNIT_ALIASES = {
    "mg/dl": CreatinineUnit.MG_DL,
    "µmol/l": CreatinineUnit.UMOL_L,
    "μmol/l": CreatinineUnit.UMOL_L,  # Greek mu, what most keyboards produce
    "umol/l": CreatinineUnit.UMOL_L,
}

def parse_sex(value: Union[Sex, str]) -> Sex:
    if isinstance(value, Sex):
        return value
    if isinstance(value, str) and value.strip().lower() in _SEX_ALIASES:
        return _SEX_ALIASES[value.strip().lower()]
    raise ValueError("Sex must be 'male' or 'female'")

def parse_creatinine_unit(value: Union[CreatinineUnit, str]) -> CreatinineUnit:
    if isinstance(value, CreatinineUnit):
        return value
    if isinstance(value, str) and value.strip().lower() in _UNIT_ALIASES:
        return _UNIT_ALIASES[value.strip().lower()]
    raise ValueError("Creatinine unit must be 'mg/dL' or 'µmol/L'")

def _is_number(value) -> bool:
    # bool is an int subclass; True is not an age
    return isinstance(value, (int, float)) and not isinstance(value, bool)

# --- 1. INPUT LAYER (What the Clinician Enters) ---

@dataclass(frozen=True)
class PatientInput:
    """
    One calculation request. Built fresh per request, never mutated.
    """
    age: float                   # Years. CRITICAL: selects the equation
    sex: Sex                     # Only used by CKD-EPI
    creatinine: float            # Serum creatinine, in creatinine_unit
    creatinine_unit: CreatinineUnit = CreatinineUnit.MG_DL
    height_cm: Optional[float] = None  # Mandatory below 18 years (Schwartz)

    def __post_init__(self):
        # 1. Type Safety (prevent string math crashes)
        for name in ("age", "creatinine"):
            val = getattr(self, name)
            if not _is_number(val):
                raise DataTypeError(f"Field '{name}' must be numeric, got {type(val)}")
        if self.height_cm is not None and not _is_number(self.height_cm):
            raise DataTypeError(f"Field 'height_cm' must be numeric, got {type(self.height_cm)}")

        # 2. Enum coercion ("female" -> Sex.FEMALE)
        object.__setattr__(self, "sex", parse_sex(self.sex))
        object.__setattr__(self, "creatinine_unit", parse_creatinine_unit(self.creatinine_unit))

# --- 2. OUTPUT LAYER ---

@dataclass(frozen=True)
class ValidationFailure:
    """
    Every field that failed, keyed by field name. Never partial: if this
    is returned, no calculation was attempted.
    """
    errors: Dict[str, str] = field(default_factory=dict)
    success: bool = field(default=False, init=False)

    def __bool__(self):
        return bool(self.errors)

@dataclass(frozen=True)
class EGFRResult:
    """
    The final numbers displayed to the clinician.
    """
    value: int                   # e.g. 81 mL/min/1.73 m²
    formula_used: FormulaChoice
    stage: StageInfo             # Always StageClassifier.classify(value)
    success: bool = field(default=True, init=False)

    @property
    def formula_name(self) -> str:
        return FORMULA_LIBRARY.get(self.formula_used).name

    def to_dict(self) -> dict:
        return {
            "egfr": self.value,
            "unit": EGFR_UNIT,
            "formula": self.formula_used.value,
            "formula_name": self.formula_name,
            "stage": self.stage.code.value,
            "stage_label": self.stage.label,
            "risk_tier": self.stage.risk_tier.value,
            "color_token": self.stage.color_token,
            "engine_version": VERSION,
        }

CalculationResult = Union[EGFRResult, ValidationFailure]
