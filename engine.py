"""
NephroFlow: Calculation Engine
==============================
The single entry point the UI/API uses.
Validates -> converts units -> selects equation -> computes -> stages.
"""

import logging
import math
from typing import Any, Dict, Mapping, Optional

from constants import CreatinineUnit, FormulaChoice, EGFR_UNIT, CLINICAL_NOTE
from models import (
    PatientInput,
    EGFRResult,
    ValidationFailure,
    CalculationResult,
    parse_sex,
    parse_creatinine_unit,
)
from validators import validate_age, validate_creatinine, validate_height
from units import to_canonical_creatinine
from protocols import FormulaSelector
from formulas import EGFRFormulas
from staging import StageClassifier

logger = logging.getLogger("nephroflow-engine")

# Field key -> label used in "is required" / "must be a number" messages
FIELD_LABELS = {
    "age": "Age",
    "sex": "Sex",
    "creatinine": "Creatinine",
    "creatinine_unit": "Creatinine unit",
    "height": "Height",
}

OVERFLOW_CREATININE_MESSAGE = "Creatinine is too low to calculate eGFR"


def _is_blank(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def _parse_number(data: Mapping[str, Any], key: str, errors: Dict[str, str]) -> Optional[float]:
    """
    Reads one numeric form field. Records a message in `errors` and returns
    None when the field is empty or not a finite number.
    """
    raw = data.get(key)
    if _is_blank(raw):
        errors[key] = f"{FIELD_LABELS[key]} is required"
        return None
    if isinstance(raw, bool):
        errors[key] = f"{FIELD_LABELS[key]} must be a number"
        return None
    try:
        value = float(raw.strip()) if isinstance(raw, str) else float(raw)
    except (TypeError, ValueError):
        errors[key] = f"{FIELD_LABELS[key]} must be a number"
        return None
    if not math.isfinite(value):
        errors[key] = f"{FIELD_LABELS[key]} must be a number"
        return None
    return value


class EGFREngine:
    """
    Stateless. Every method is a pure transformation, safe to call from
    any number of threads at once.
    """

    @staticmethod
    def validate(patient: PatientInput) -> Dict[str, str]:
        """
        Runs every applicable validator and returns all failures found.
        Height is only checked when the pediatric equation applies.
        """
        errors = {}

        age_error = validate_age(patient.age)
        if age_error:
            errors["age"] = age_error

        creatinine_error = validate_creatinine(patient.creatinine, patient.creatinine_unit)
        if creatinine_error:
            errors["creatinine"] = creatinine_error

        if FormulaSelector.requires_height(patient.age):
            height_error = validate_height(patient.height_cm)
            if height_error:
                errors["height"] = height_error

        return errors

    @staticmethod
    def compute(patient: PatientInput) -> CalculationResult:
        """
        MAIN ENTRY POINT: PatientInput -> EGFRResult, or ValidationFailure
        listing every bad field. Nothing is calculated if any field fails.
        """
        # 1. Validate everything up front
        errors = EGFREngine.validate(patient)
        if errors:
            logger.info("Clinical validation rejected fields: %s", sorted(errors))
            return ValidationFailure(errors=errors)

        # 2. Normalize units (mg/dL, unrounded)
        creatinine = to_canonical_creatinine(patient.creatinine, patient.creatinine_unit)

        # 3. Select and run the equation
        formula = FormulaSelector.select(patient.age)
        try:
            if formula == FormulaChoice.ADULT_CKD_EPI_2021:
                egfr = EGFRFormulas.ckd_epi_2021(creatinine, patient.age, patient.sex)
            else:
                egfr = EGFRFormulas.schwartz_2009(creatinine, patient.height_cm)
        except OverflowError:
            # Only a vanishingly small creatinine can push eGFR past float range
            logger.info("Clinical validation rejected fields: ['creatinine'] (eGFR overflow)")
            return ValidationFailure(errors={"creatinine": OVERFLOW_CREATININE_MESSAGE})

        # 4. Stage depends on the rounded value only
        stage = StageClassifier.classify(egfr)

        logger.debug("eGFR %s via %s -> %s", egfr, formula.value, stage.code.value)
        return EGFRResult(value=egfr, formula_used=formula, stage=stage)

    @staticmethod
    def calculate_from_form(data: Mapping[str, Any]) -> CalculationResult:
        """
        SAFE FACTORY: takes the raw form fields (strings or numbers) as the
        shell collected them and reports parsing and range problems together.

        Keys: age, sex, creatinine, creatinine_unit (default mg/dL), height.
        """
        errors: Dict[str, str] = {}

        # 1. Parse + range-check each field independently
        age = _parse_number(data, "age", errors)
        if age is not None:
            age_error = validate_age(age)
            if age_error:
                errors["age"] = age_error

        sex = None
        if _is_blank(data.get("sex")):
            errors["sex"] = "Sex is required"
        else:
            try:
                sex = parse_sex(data["sex"])
            except ValueError as e:
                errors["sex"] = str(e)

        unit = None
        raw_unit = data.get("creatinine_unit")
        try:
            unit = CreatinineUnit.MG_DL if _is_blank(raw_unit) else parse_creatinine_unit(raw_unit)
        except ValueError as e:
            errors["creatinine_unit"] = str(e)

        creatinine = _parse_number(data, "creatinine", errors)
        if creatinine is not None and unit is not None:
            creatinine_error = validate_creatinine(creatinine, unit)
            if creatinine_error:
                errors["creatinine"] = creatinine_error

        # 2. Height only matters for children; adults may leave it blank
        height = None
        if age is not None and FormulaSelector.requires_height(age):
            height = _parse_number(data, "height", errors)
            if height is not None:
                height_error = validate_height(height)
                if height_error:
                    errors["height"] = height_error

        if errors:
            logger.info("Clinical validation rejected fields: %s", sorted(errors))
            return ValidationFailure(errors=errors)

        # 3. Hand over to the typed pipeline (every field is already coerced)
        patient = PatientInput(
            age=age,
            sex=sex,
            creatinine=creatinine,
            creatinine_unit=unit,
            height_cm=height,
        )
        return EGFREngine.compute(patient)

    @staticmethod
    def build_summary(result: EGFRResult) -> str:
        """Printable one-paragraph summary for the report."""
        return (
            f"eGFR {result.value} {EGFR_UNIT} ({result.formula_name}). "
            f"Stage {result.stage.code.value}: {result.stage.label}. "
            f"Risk: {result.stage.risk_tier.value}. "
            f"{CLINICAL_NOTE}"
        )
