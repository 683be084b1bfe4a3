# units.py
from constants import UNIT_CONSTANTS, CreatinineUnit


def to_canonical_creatinine(value: float, unit: CreatinineUnit) -> float:
    """
    Converts serum creatinine to mg/dL, the unit every equation expects.
    The result is left unrounded; only the final eGFR is rounded.
    """
    if unit == CreatinineUnit.UMOL_L:
        return value / UNIT_CONSTANTS.UMOL_L_PER_MG_DL
    return value
